"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in ticketing/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from uuid import UUID

from ticketing.domain import availability
from ticketing.domain.value_objects import (
    Capacity,
    EventId,
    FunctionId,
    Money,
    PromoCodeId,
    TicketId,
    TierId,
    WaitlistEntryId,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PaymentStatus(Enum):
    """Lifecycle state of a purchased ticket."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"

    def can_transition_to(self, target: "PaymentStatus") -> bool:
        return target in _PAYMENT_TRANSITIONS[self]


_PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset(
        {
            PaymentStatus.PROCESSING,
            PaymentStatus.COMPLETED,
            PaymentStatus.FAILED,
            PaymentStatus.CANCELLED,
        }
    ),
    PaymentStatus.PROCESSING: frozenset(
        {PaymentStatus.COMPLETED, PaymentStatus.FAILED}
    ),
    PaymentStatus.COMPLETED: frozenset(
        {PaymentStatus.REFUNDED, PaymentStatus.CANCELLED}
    ),
    PaymentStatus.FAILED: frozenset(),
    PaymentStatus.REFUNDED: frozenset(),
    PaymentStatus.CANCELLED: frozenset(),
}


class PaymentMethod(Enum):
    APPLE_PAY = "apple_pay"
    CARD = "card"
    UPI = "upi"
    BANK_TRANSFER = "bank_transfer"
    FREE = "free"


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    title: str
    starts_at: datetime
    description: str | None = None
    ends_at: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class TicketTier:
    """Domain representation of a purchasable class of admission."""

    id: TierId
    event_id: EventId
    name: str
    price: Money
    capacity: Capacity
    sold_count: int = 0
    min_per_order: int = 1
    max_per_order: int = 10
    description: str | None = None
    perks: tuple[str, ...] = ()
    sales_start: datetime | None = None
    sales_end: datetime | None = None
    is_hidden: bool = False
    sort_order: int = 0
    function_id: FunctionId | None = None
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if self.sold_count < 0:
            raise ValueError("Sold count cannot be negative")
        if self.min_per_order < 1:
            raise ValueError("Minimum per order must be at least 1")
        if self.max_per_order < self.min_per_order:
            raise ValueError("Maximum per order cannot be below the minimum")

    @property
    def is_free(self) -> bool:
        return self.price.is_zero

    @property
    def remaining_count(self) -> int:
        return availability.remaining_count(self.capacity.value, self.sold_count)

    @property
    def is_sold_out(self) -> bool:
        return availability.is_sold_out(self.capacity.value, self.sold_count)

    @property
    def is_available(self) -> bool:
        return availability.is_available(self.capacity.value, self.sold_count)


@dataclass(frozen=True)
class Ticket:
    """Domain representation of a purchase against one tier.

    Monetary fields are snapshots taken at purchase time; later price changes
    on the tier never alter an issued ticket.
    """

    id: TicketId
    ticket_number: str
    event_id: EventId
    tier_id: TierId
    guest_name: str
    guest_email: str
    quantity: int
    unit_price: Money
    discount_amount: Money
    service_fee: Money
    total_price: Money
    creator_payout: Money
    qr_code_data: str
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod | None = None
    payment_reference: str | None = None
    promo_code_used: str | None = None
    user_id: UUID | None = None
    is_checked_in: bool = False
    checked_in_at: datetime | None = None
    purchased_at: datetime = field(default_factory=utcnow)
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None

    @property
    def platform_fee(self) -> Money:
        return self.service_fee

    @property
    def is_valid(self) -> bool:
        return (
            self.payment_status is PaymentStatus.COMPLETED
            and self.cancelled_at is None
        )

    @property
    def can_cancel(self) -> bool:
        # Paid tickets go through a refund instead.
        return (
            self.unit_price.is_zero
            and self.cancelled_at is None
            and self.payment_status.can_transition_to(PaymentStatus.CANCELLED)
        )


@dataclass(frozen=True)
class PromoCode:
    """Discount rule scoped to one event."""

    id: PromoCodeId
    event_id: EventId
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    min_purchase: Money | None = None
    max_discount: Money | None = None
    usage_limit: int | None = None
    usage_count: int = 0
    per_user_limit: int = 1
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    applicable_tier_ids: frozenset[TierId] | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", self.code.strip().upper())
        if not self.code:
            raise ValueError("Promo code cannot be blank")
        if self.discount_value < 0:
            raise ValueError("Discount value cannot be negative")
        if self.discount_type is DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        if self.usage_count < 0:
            raise ValueError("Usage count cannot be negative")


@dataclass(frozen=True)
class WaitlistEntry:
    """Interest in a sold-out tier, or in the event when tier_id is None."""

    id: WaitlistEntryId
    event_id: EventId
    email: str
    position: int
    tier_id: TierId | None = None
    name: str | None = None
    user_id: UUID | None = None
    notified_at: datetime | None = None
    converted_to_ticket: bool = False
    created_at: datetime = field(default_factory=utcnow)
