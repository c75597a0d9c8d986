"""Domain error codes for the ticketing module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_ID = "INVALID_ID"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    TIER_NOT_FOUND = "TIER_NOT_FOUND"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    PROMO_CODE_NOT_FOUND = "PROMO_CODE_NOT_FOUND"
    WAITLIST_ENTRY_NOT_FOUND = "WAITLIST_ENTRY_NOT_FOUND"
    INVALID_TIER = "INVALID_TIER"
    INVALID_PROMO_CODE = "INVALID_PROMO_CODE"
    DUPLICATE_PROMO_CODE = "DUPLICATE_PROMO_CODE"
    PROMO_CODE_EXHAUSTED = "PROMO_CODE_EXHAUSTED"
    QUANTITY_OUT_OF_BOUNDS = "QUANTITY_OUT_OF_BOUNDS"
    TIER_NOT_ON_SALE = "TIER_NOT_ON_SALE"
    INSUFFICIENT_CAPACITY = "INSUFFICIENT_CAPACITY"
    INVALID_PAYMENT_TRANSITION = "INVALID_PAYMENT_TRANSITION"
    TICKET_NOT_CANCELLABLE = "TICKET_NOT_CANCELLABLE"
    TICKET_NOT_VALID = "TICKET_NOT_VALID"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    ALREADY_ON_WAITLIST = "ALREADY_ON_WAITLIST"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidIdError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, kind: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {kind} ID format",
        )
        self.kind = kind


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(code=ErrorCode.EVENT_NOT_FOUND, message="Event not found")
        self.event_id = event_id


class TierNotFoundError(DomainError):
    """Raised when a ticket tier is not found for an event."""

    def __init__(self, tier_id: str) -> None:
        super().__init__(code=ErrorCode.TIER_NOT_FOUND, message="Ticket tier not found")
        self.tier_id = tier_id


class TicketNotFoundError(DomainError):
    def __init__(self, ticket_id: str) -> None:
        super().__init__(code=ErrorCode.TICKET_NOT_FOUND, message="Ticket not found")
        self.ticket_id = ticket_id


class PromoCodeNotFoundError(DomainError):
    def __init__(self, code: str) -> None:
        super().__init__(
            code=ErrorCode.PROMO_CODE_NOT_FOUND, message="Promo code not found"
        )
        self.promo_code = code


class WaitlistEntryNotFoundError(DomainError):
    def __init__(self, entry_id: str) -> None:
        super().__init__(
            code=ErrorCode.WAITLIST_ENTRY_NOT_FOUND,
            message="Waitlist entry not found",
        )
        self.entry_id = entry_id


class InvalidTierError(DomainError):
    """Raised when a tier configuration violates its invariants."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.INVALID_TIER, message=reason)


class InvalidPromoCodeError(DomainError):
    """Raised when a promo code is configured badly or cannot be used."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.INVALID_PROMO_CODE, message=reason)


class DuplicatePromoCodeError(DomainError):
    def __init__(self, code: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_PROMO_CODE,
            message="Promo code already exists for this event",
        )
        self.promo_code = code


class PromoCodeExhaustedError(DomainError):
    """Raised when a capture would take a promo code past its usage limit."""

    def __init__(self, code: str) -> None:
        super().__init__(
            code=ErrorCode.PROMO_CODE_EXHAUSTED,
            message="Promo code has reached its usage limit",
        )
        self.promo_code = code


class QuantityOutOfBoundsError(DomainError):
    """Raised when an order quantity falls outside the tier's per-order bounds."""

    def __init__(self, quantity: object, min_per_order: int, max_per_order: int) -> None:
        super().__init__(
            code=ErrorCode.QUANTITY_OUT_OF_BOUNDS,
            message=f"Quantity must be between {min_per_order} and {max_per_order}",
        )
        self.quantity = quantity
        self.min_per_order = min_per_order
        self.max_per_order = max_per_order


class TierNotOnSaleError(DomainError):
    def __init__(self, tier_id: str, status_label: str) -> None:
        super().__init__(
            code=ErrorCode.TIER_NOT_ON_SALE,
            message=f"Ticket tier is not on sale ({status_label})",
        )
        self.tier_id = tier_id


class InsufficientCapacityError(DomainError):
    """Raised when an order asks for more tickets than remain."""

    def __init__(self, tier_id: str, requested: int, remaining: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_CAPACITY,
            message=f"Only {remaining} tickets remaining",
        )
        self.tier_id = tier_id
        self.requested = requested
        self.remaining = remaining


class InvalidPaymentTransitionError(DomainError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_PAYMENT_TRANSITION,
            message=f"Cannot move ticket from {current} to {target}",
        )
        self.current = current
        self.target = target


class TicketNotCancellableError(DomainError):
    def __init__(self, ticket_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_NOT_CANCELLABLE,
            message="Ticket cannot be cancelled",
        )
        self.ticket_id = ticket_id


class TicketNotValidError(DomainError):
    def __init__(self, ticket_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_NOT_VALID,
            message="Ticket is not valid for entry",
        )
        self.ticket_id = ticket_id


class AlreadyCheckedInError(DomainError):
    def __init__(self, ticket_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_CHECKED_IN,
            message="Ticket has already been checked in",
        )
        self.ticket_id = ticket_id


class AlreadyOnWaitlistError(DomainError):
    def __init__(self, email: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_ON_WAITLIST,
            message="Email is already on this waitlist",
        )
        self.email = email
