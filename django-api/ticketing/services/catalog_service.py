"""Catalog service - host-side configuration of events, tiers and promo codes.

Configuration errors surface as domain errors; value object ValueErrors are
mapped to InvalidTierError or InvalidPromoCodeError.
"""

from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime
from decimal import Decimal, InvalidOperation

import structlog

from ticketing.domain import (
    Capacity,
    DiscountType,
    Event,
    EventId,
    FunctionId,
    Money,
    PromoCode,
    PromoCodeId,
    TicketTier,
    TierId,
)
from ticketing.domain.errors import (
    DuplicatePromoCodeError,
    EventNotFoundError,
    InvalidPromoCodeError,
    InvalidTierError,
    PromoCodeNotFoundError,
    TierNotFoundError,
)
from ticketing.domain.models import utcnow
from ticketing.domain.reporting import SalesSummary, summarize_sales
from ticketing.services.identifiers import parse_id
from ticketing.stores.interfaces import TicketingStore

logger = structlog.get_logger(__name__)


def _decimal(value: object, field: str) -> Decimal:
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{field} must be a decimal amount") from None


class CatalogService:
    """Service for configuring what an event sells."""

    def __init__(
        self, store: TicketingStore, clock: Callable[[], datetime] = utcnow
    ) -> None:
        self._store = store
        self._clock = clock

    def create_event(
        self,
        title: str,
        starts_at: datetime,
        description: str | None = None,
        ends_at: datetime | None = None,
    ) -> Event:
        now = self._clock()
        event = Event(
            id=EventId.new(),
            title=title,
            starts_at=starts_at,
            description=description,
            ends_at=ends_at,
            created_at=now,
            updated_at=now,
        )
        self._store.save(event)
        logger.info("event_created", event_id=str(event.id))
        return event

    def list_events(self) -> list[Event]:
        """Return all events."""
        return self._store.list_events()

    def get_event(self, event_id: str | EventId) -> Event:
        """Return an event by ID.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        parsed = parse_id(EventId, event_id, "event")
        event = self._store.get(Event, parsed)
        if event is None:
            raise EventNotFoundError(str(event_id))
        return event

    def delete_event(self, event_id: str | EventId) -> None:
        """Delete an event together with everything that belongs to it.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        parsed = parse_id(EventId, event_id, "event")
        if not self._store.delete_event(parsed):
            raise EventNotFoundError(str(event_id))
        logger.info("event_deleted", event_id=str(parsed))

    def add_tier(
        self,
        event_id: str | EventId,
        name: str,
        price: object,
        capacity: int,
        *,
        min_per_order: int = 1,
        max_per_order: int = 10,
        description: str | None = None,
        perks: Iterable[str] = (),
        sales_start: datetime | None = None,
        sales_end: datetime | None = None,
        is_hidden: bool = False,
        sort_order: int | None = None,
        function_id: str | None = None,
    ) -> TicketTier:
        """Add a ticket tier to an event.

        Raises:
            EventNotFoundError: If the event does not exist.
            InvalidTierError: If price, capacity, order bounds or sale window are invalid.
        """
        event = self.get_event(event_id)
        if not name.strip():
            raise InvalidTierError("Tier name cannot be blank")
        if sales_start and sales_end and sales_end < sales_start:
            raise InvalidTierError("Sales end cannot precede sales start")
        if sort_order is None:
            sort_order = len(self._store.list_tiers(event.id))
        try:
            tier = TicketTier(
                id=TierId.new(),
                event_id=event.id,
                name=name.strip(),
                price=Money(_decimal(price, "Price")),
                capacity=Capacity(capacity),
                min_per_order=min_per_order,
                max_per_order=max_per_order,
                description=description,
                perks=tuple(perks),
                sales_start=sales_start,
                sales_end=sales_end,
                is_hidden=is_hidden,
                sort_order=sort_order,
                function_id=(
                    parse_id(FunctionId, function_id, "function") if function_id else None
                ),
                created_at=self._clock(),
            )
        except ValueError as exc:
            raise InvalidTierError(str(exc)) from None

        self._store.save(tier)
        logger.info("tier_added", event_id=str(event.id), tier_id=str(tier.id))
        return tier

    def get_tier(self, event_id: str | EventId, tier_id: str | TierId) -> TicketTier:
        """Return a tier that belongs to the given event.

        Raises:
            InvalidIdError: If either ID is not a valid UUID.
            TierNotFoundError: If the tier does not exist for the event.
        """
        parsed_event = parse_id(EventId, event_id, "event")
        parsed_tier = parse_id(TierId, tier_id, "tier")
        tier = self._store.get(TicketTier, parsed_tier)
        if tier is None or tier.event_id != parsed_event:
            raise TierNotFoundError(str(tier_id))
        return tier

    def set_tier_hidden(
        self, event_id: str | EventId, tier_id: str | TierId, hidden: bool = True
    ) -> TicketTier:
        """Hide or re-list a tier. Tiers are never deleted once tickets reference them."""
        tier = replace(self.get_tier(event_id, tier_id), is_hidden=hidden)
        return self._store.save(tier)

    def list_tiers(
        self, event_id: str | EventId, include_hidden: bool = False
    ) -> list[TicketTier]:
        """Return an event's tiers in display order.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        event = self.get_event(event_id)
        tiers = self._store.list_tiers(event.id)
        if include_hidden:
            return tiers
        return [tier for tier in tiers if not tier.is_hidden]

    def create_promo_code(
        self,
        event_id: str | EventId,
        code: str,
        discount_type: DiscountType,
        discount_value: object,
        *,
        min_purchase: object | None = None,
        max_discount: object | None = None,
        usage_limit: int | None = None,
        per_user_limit: int = 1,
        valid_from: datetime | None = None,
        valid_until: datetime | None = None,
        tier_ids: Iterable[str] | None = None,
    ) -> PromoCode:
        """Create a promo code for an event.

        Raises:
            EventNotFoundError: If the event does not exist.
            DuplicatePromoCodeError: If the code already exists for the event.
            InvalidPromoCodeError: If the configuration is invalid.
            TierNotFoundError: If a restricted tier does not belong to the event.
        """
        event = self.get_event(event_id)
        if self._store.find_promo_code(event.id, code) is not None:
            raise DuplicatePromoCodeError(code)

        if usage_limit is not None and usage_limit < 0:
            raise InvalidPromoCodeError("Usage limit cannot be negative")

        applicable = None
        if tier_ids is not None:
            applicable = frozenset(self.get_tier(event.id, t).id for t in tier_ids)

        try:
            promo = PromoCode(
                id=PromoCodeId.new(),
                event_id=event.id,
                code=code,
                discount_type=discount_type,
                discount_value=_decimal(discount_value, "Discount value"),
                min_purchase=(
                    Money(_decimal(min_purchase, "Minimum purchase"))
                    if min_purchase is not None
                    else None
                ),
                max_discount=(
                    Money(_decimal(max_discount, "Maximum discount"))
                    if max_discount is not None
                    else None
                ),
                usage_limit=usage_limit,
                per_user_limit=per_user_limit,
                valid_from=valid_from,
                valid_until=valid_until,
                applicable_tier_ids=applicable,
                created_at=self._clock(),
            )
        except ValueError as exc:
            raise InvalidPromoCodeError(str(exc)) from None

        self._store.save(promo)
        logger.info("promo_code_created", event_id=str(event.id), code=promo.code)
        return promo

    def set_promo_code_active(
        self, event_id: str | EventId, code: str, active: bool
    ) -> PromoCode:
        event = self.get_event(event_id)
        promo = self._store.find_promo_code(event.id, code)
        if promo is None:
            raise PromoCodeNotFoundError(code)
        return self._store.save(replace(promo, is_active=active))

    def sales_summary(self, event_id: str | EventId) -> SalesSummary:
        event = self.get_event(event_id)
        return summarize_sales(self._store.list_tickets(event.id))
