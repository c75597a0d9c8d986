"""Purchase service - pricing, order placement and payment status transitions.

Payments are simulated: placing a paid order returns a payment intent
handshake, and a later webhook event decides whether the order completes,
fails or is refunded. Tier inventory only moves on completion, refund and
cancellation.
"""

import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

import structlog

from ticketing.domain import (
    EventId,
    Money,
    PaymentMethod,
    PaymentStatus,
    PromoCode,
    SalesStatus,
    Ticket,
    TicketId,
    TicketTier,
    TierId,
)
from ticketing.domain import availability, codes, pricing, promotions
from ticketing.domain.errors import (
    AlreadyCheckedInError,
    EventNotFoundError,
    InsufficientCapacityError,
    InvalidPaymentTransitionError,
    PromoCodeExhaustedError,
    TicketNotCancellableError,
    TicketNotFoundError,
    TicketNotValidError,
    TierNotFoundError,
    TierNotOnSaleError,
)
from ticketing.domain.models import utcnow
from ticketing.domain.pricing import DEFAULT_FEE_RATE, LineQuote, OrderTotals
from ticketing.services.identifiers import parse_id
from ticketing.stores.interfaces import TicketingStore

logger = structlog.get_logger(__name__)

MAX_TICKET_NUMBER_ATTEMPTS = 10


class WebhookEventType(Enum):
    PAYMENT_SUCCEEDED = "payment.succeeded"
    PAYMENT_FAILED = "payment.failed"
    REFUND_ISSUED = "refund.issued"


@dataclass(frozen=True)
class OrderLine:
    tier_id: str | TierId
    quantity: int


@dataclass(frozen=True)
class Quote:
    lines: tuple[LineQuote, ...]
    totals: OrderTotals
    promo_code: str | None


@dataclass(frozen=True)
class PurchaseResult:
    tickets: tuple[Ticket, ...]
    totals: OrderTotals
    payment_intent_id: str
    client_secret: str | None

    @property
    def requires_payment(self) -> bool:
        return self.client_secret is not None


class PurchaseService:
    """Service for buying tickets and moving them through payment states."""

    def __init__(
        self,
        store: TicketingStore,
        fee_rate: Decimal = DEFAULT_FEE_RATE,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._fee_rate = fee_rate
        self._rng = rng
        self._clock = clock

    def quote(
        self,
        event_id: str | EventId,
        lines: Iterable[OrderLine],
        promo_code: str | None = None,
    ) -> Quote:
        """Price an order without persisting anything.

        Raises:
            InvalidIdError: If an ID is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            TierNotFoundError: If a tier does not belong to the event.
            QuantityOutOfBoundsError: If a quantity is outside the tier's bounds.
            TierNotOnSaleError: If a tier is not currently on sale.
            InsufficientCapacityError: If a tier has fewer tickets left than requested.
        """
        parsed = self._event_id(event_id)
        promo = self._lookup_promo(parsed, promo_code)
        quotes = self._price_lines(parsed, list(lines), promo)
        return Quote(
            lines=tuple(quotes),
            totals=pricing.combine(quotes),
            promo_code=self._applied_code(promo, quotes),
        )

    def purchase(
        self,
        event_id: str | EventId,
        lines: Iterable[OrderLine],
        guest_name: str,
        guest_email: str,
        promo_code: str | None = None,
        user_id: UUID | None = None,
        payment_method: PaymentMethod | None = None,
    ) -> PurchaseResult:
        """Place an order, creating one pending ticket per line.

        Orders that cost nothing complete immediately. All validation runs
        before anything is written.
        """
        parsed = self._event_id(event_id)
        promo = self._lookup_promo(parsed, promo_code)
        if promo is not None and self._promo_exhausted_for(promo, guest_email):
            logger.info("promo_code_per_user_limit", code=promo.code)
            promo = None
        quotes = self._price_lines(parsed, list(lines), promo)
        totals = pricing.combine(quotes)
        applied_code = self._applied_code(promo, quotes)

        now = self._clock()
        intent_id, client_secret = codes.generate_payment_intent(self._rng)
        tickets = []
        with self._store.atomic():
            for quote in quotes:
                ticket_id = TicketId.new()
                ticket = Ticket(
                    id=ticket_id,
                    ticket_number=self._new_ticket_number(),
                    event_id=parsed,
                    tier_id=quote.tier_id,
                    guest_name=guest_name,
                    guest_email=guest_email,
                    quantity=quote.quantity,
                    unit_price=Money(quote.unit_price),
                    discount_amount=Money(quote.totals.discount_amount),
                    service_fee=Money(quote.totals.service_fee),
                    total_price=Money(quote.totals.total_charged),
                    creator_payout=Money(quote.totals.host_payout),
                    qr_code_data=codes.qr_payload(parsed, ticket_id),
                    payment_method=payment_method,
                    payment_reference=intent_id,
                    promo_code_used=applied_code if quote.promo_discount > 0 else None,
                    user_id=user_id,
                    purchased_at=now,
                )
                tickets.append(self._store.save(ticket))

        logger.info(
            "order_placed",
            event_id=str(parsed),
            payment_intent_id=intent_id,
            tickets=len(tickets),
            total=str(totals.total_charged),
        )

        if totals.total_charged == 0:
            completed = self.complete_payment(intent_id, PaymentMethod.FREE)
            return PurchaseResult(
                tickets=tuple(completed),
                totals=totals,
                payment_intent_id=intent_id,
                client_secret=None,
            )
        return PurchaseResult(
            tickets=tuple(tickets),
            totals=totals,
            payment_intent_id=intent_id,
            client_secret=client_secret,
        )

    def complete_payment(
        self, payment_intent_id: str, method: PaymentMethod = PaymentMethod.CARD
    ) -> list[Ticket]:
        """Capture an order: mark its tickets completed and take their inventory.

        Cancelled lines are left alone. If a tier can no longer cover the order,
        or its promo code has run out of uses, nothing is taken, the tickets
        are marked failed and the error is raised.
        """
        tickets = self._order_tickets(payment_intent_id)
        live = self._live(tickets)
        if all(t.payment_status is PaymentStatus.COMPLETED for t in live):
            return tickets
        self._check_transitions(live, PaymentStatus.COMPLETED)

        try:
            with self._store.atomic():
                completed = []
                for ticket in live:
                    self._store.increment_sold_count(ticket.tier_id, ticket.quantity)
                    completed.append(
                        self._store.save(
                            replace(
                                ticket,
                                payment_status=PaymentStatus.COMPLETED,
                                payment_method=ticket.payment_method or method,
                            )
                        )
                    )
                self._record_promo_usage(completed)
        except (InsufficientCapacityError, PromoCodeExhaustedError) as exc:
            self._set_status(live, PaymentStatus.FAILED)
            logger.warning(
                "payment_capture_rejected",
                payment_intent_id=payment_intent_id,
                code=exc.code.value,
            )
            raise

        logger.info("payment_completed", payment_intent_id=payment_intent_id)
        return self._merge(tickets, completed)

    def fail_payment(self, payment_intent_id: str) -> list[Ticket]:
        tickets = self._order_tickets(payment_intent_id)
        live = self._live(tickets)
        if all(t.payment_status is PaymentStatus.FAILED for t in live):
            return tickets
        self._check_transitions(live, PaymentStatus.FAILED)
        failed = self._set_status(live, PaymentStatus.FAILED)
        logger.info("payment_failed", payment_intent_id=payment_intent_id)
        return self._merge(tickets, failed)

    def refund_payment(self, payment_intent_id: str) -> list[Ticket]:
        """Refund a completed order and return its tickets to inventory.

        Lines cancelled earlier already gave their inventory back and are skipped.
        """
        tickets = self._order_tickets(payment_intent_id)
        live = self._live(tickets)
        if all(t.payment_status is PaymentStatus.REFUNDED for t in live):
            return tickets
        self._check_transitions(live, PaymentStatus.REFUNDED)
        with self._store.atomic():
            for ticket in live:
                self._store.release_sold_count(ticket.tier_id, ticket.quantity)
            refunded = self._set_status(live, PaymentStatus.REFUNDED)
        logger.info("payment_refunded", payment_intent_id=payment_intent_id)
        return self._merge(tickets, refunded)

    def handle_webhook(
        self, event_type: WebhookEventType | str, payment_intent_id: str
    ) -> list[Ticket]:
        """Apply a payment rail notification to the order it refers to."""
        event_type = WebhookEventType(event_type)
        if event_type is WebhookEventType.PAYMENT_SUCCEEDED:
            return self.complete_payment(payment_intent_id)
        if event_type is WebhookEventType.PAYMENT_FAILED:
            return self.fail_payment(payment_intent_id)
        return self.refund_payment(payment_intent_id)

    def get_ticket(self, ticket_id: str | TicketId) -> Ticket:
        """Return a ticket by ID.

        Raises:
            InvalidIdError: If the ticket_id is not a valid UUID.
            TicketNotFoundError: If the ticket does not exist.
        """
        parsed = parse_id(TicketId, ticket_id, "ticket")
        ticket = self._store.get(Ticket, parsed)
        if ticket is None:
            raise TicketNotFoundError(str(ticket_id))
        return ticket

    def cancel_ticket(
        self, ticket_id: str | TicketId, reason: str | None = None
    ) -> Ticket:
        """Cancel a free ticket. Paid tickets must be refunded instead.

        Raises:
            TicketNotCancellableError: If the ticket is paid or already cancelled.
        """
        ticket = self.get_ticket(ticket_id)
        if not ticket.can_cancel:
            raise TicketNotCancellableError(str(ticket.id))
        with self._store.atomic():
            if ticket.payment_status is PaymentStatus.COMPLETED:
                self._store.release_sold_count(ticket.tier_id, ticket.quantity)
            cancelled = self._store.save(
                replace(
                    ticket,
                    payment_status=PaymentStatus.CANCELLED,
                    cancelled_at=self._clock(),
                    cancellation_reason=reason,
                )
            )
        logger.info("ticket_cancelled", ticket_id=str(ticket.id))
        return cancelled

    def check_in(self, ticket_id: str | TicketId) -> Ticket:
        """Admit the holder of a valid ticket, once.

        Raises:
            TicketNotValidError: If the ticket is not completed or was cancelled.
            AlreadyCheckedInError: If the ticket was already checked in.
        """
        ticket = self.get_ticket(ticket_id)
        if not ticket.is_valid:
            raise TicketNotValidError(str(ticket.id))
        if ticket.is_checked_in:
            raise AlreadyCheckedInError(str(ticket.id))
        checked_in = self._store.save(
            replace(ticket, is_checked_in=True, checked_in_at=self._clock())
        )
        logger.info("ticket_checked_in", ticket_id=str(ticket.id))
        return checked_in

    def _event_id(self, event_id: str | EventId) -> EventId:
        parsed = parse_id(EventId, event_id, "event")
        if not self._store.event_exists(parsed):
            raise EventNotFoundError(str(event_id))
        return parsed

    def _lookup_promo(self, event_id: EventId, code: str | None) -> PromoCode | None:
        # Unknown or unusable codes degrade to no discount.
        if not code or not code.strip():
            return None
        promo = self._store.find_promo_code(event_id, code)
        if promo is None:
            logger.info("promo_code_unknown", event_id=str(event_id))
            return None
        if not promotions.is_valid(promo, self._clock()):
            logger.info("promo_code_unusable", code=promo.code)
            return None
        return promo

    def _promo_exhausted_for(self, promo: PromoCode, email: str) -> bool:
        wanted = email.strip().lower()
        orders = {
            ticket.payment_reference
            for ticket in self._store.list_tickets(promo.event_id)
            if ticket.promo_code_used == promo.code
            and ticket.guest_email.strip().lower() == wanted
            and ticket.payment_status is PaymentStatus.COMPLETED
        }
        return len(orders) >= promo.per_user_limit

    def _price_lines(
        self, event_id: EventId, lines: list[OrderLine], promo: PromoCode | None
    ) -> list[LineQuote]:
        now = self._clock()
        requested: dict[TierId, int] = {}
        tiers: list[tuple[TicketTier, int]] = []
        for line in lines:
            tier = self._tier_for_event(event_id, line.tier_id)
            quantity = pricing.validate_quantity(
                line.quantity, tier.min_per_order, tier.max_per_order
            )
            tiers.append((tier, quantity))

        for tier, quantity in tiers:
            status = availability.sales_status(tier, now)
            if status is not SalesStatus.ON_SALE:
                raise TierNotOnSaleError(str(tier.id), status.value)
            requested[tier.id] = requested.get(tier.id, 0) + quantity
            if requested[tier.id] > tier.remaining_count:
                raise InsufficientCapacityError(
                    str(tier.id), requested[tier.id], tier.remaining_count
                )

        return [
            pricing.quote_line(tier, quantity, promo, self._fee_rate, now)
            for tier, quantity in tiers
        ]

    def _tier_for_event(self, event_id: EventId, tier_id: str | TierId) -> TicketTier:
        parsed = parse_id(TierId, tier_id, "tier")
        tier = self._store.get(TicketTier, parsed)
        if tier is None or tier.event_id != event_id:
            raise TierNotFoundError(str(tier_id))
        return tier

    @staticmethod
    def _applied_code(promo: PromoCode | None, quotes: list[LineQuote]) -> str | None:
        if promo is None or not any(q.promo_discount > 0 for q in quotes):
            return None
        return promo.code

    def _new_ticket_number(self) -> str:
        for _ in range(MAX_TICKET_NUMBER_ATTEMPTS):
            number = codes.generate_ticket_number(self._rng)
            if not self._store.ticket_number_exists(number):
                return number
        raise RuntimeError("Could not generate a unique ticket number")

    def _order_tickets(self, payment_intent_id: str) -> list[Ticket]:
        tickets = self._store.find_tickets_by_payment_reference(payment_intent_id)
        if not tickets:
            raise TicketNotFoundError(payment_intent_id)
        return tickets

    @staticmethod
    def _live(tickets: list[Ticket]) -> list[Ticket]:
        return [t for t in tickets if t.payment_status is not PaymentStatus.CANCELLED]

    @staticmethod
    def _merge(tickets: list[Ticket], updated: list[Ticket]) -> list[Ticket]:
        by_id = {t.id: t for t in updated}
        return [by_id.get(t.id, t) for t in tickets]

    @staticmethod
    def _check_transitions(tickets: list[Ticket], target: PaymentStatus) -> None:
        for ticket in tickets:
            if not ticket.payment_status.can_transition_to(target):
                raise InvalidPaymentTransitionError(
                    ticket.payment_status.value, target.value
                )

    def _set_status(self, tickets: list[Ticket], status: PaymentStatus) -> list[Ticket]:
        with self._store.atomic():
            return [
                self._store.save(replace(ticket, payment_status=status))
                for ticket in tickets
            ]

    def _record_promo_usage(self, tickets: list[Ticket]) -> None:
        # One use per order, however many lines it discounted.
        code = next((t.promo_code_used for t in tickets if t.promo_code_used), None)
        if code is None:
            return
        promo = self._store.find_promo_code(tickets[0].event_id, code)
        if promo is not None:
            self._store.increment_promo_usage(promo)
