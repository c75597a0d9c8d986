"""Django ORM implementation of the TicketingStore."""

from collections.abc import Callable
from contextlib import AbstractContextManager
from decimal import Decimal
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import F, Q

from ticketing import models as orm
from ticketing.domain import (
    Capacity,
    DiscountType,
    Event,
    EventId,
    FunctionId,
    Money,
    PaymentMethod,
    PaymentStatus,
    PromoCode,
    PromoCodeId,
    Ticket,
    TicketId,
    TicketTier,
    TierId,
    WaitlistEntry,
    WaitlistEntryId,
)
from ticketing.domain.errors import (
    InsufficientCapacityError,
    PromoCodeExhaustedError,
    TierNotFoundError,
)
from ticketing.domain.promotions import normalize_code
from ticketing.stores.interfaces import E, TicketingStore

logger = structlog.get_logger(__name__)


def _money(value: Decimal | None) -> Money | None:
    return None if value is None else Money(value)


def _event_to_domain(row: orm.Event) -> Event:
    return Event(
        id=EventId(row.id),
        title=row.title,
        description=row.description,
        starts_at=row.starts_at,
        ends_at=row.ends_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _event_fields(event: Event) -> dict:
    return {
        "title": event.title,
        "description": event.description,
        "starts_at": event.starts_at,
        "ends_at": event.ends_at,
        "created_at": event.created_at,
        "updated_at": event.updated_at,
    }


def _tier_to_domain(row: orm.TicketTier) -> TicketTier:
    return TicketTier(
        id=TierId(row.id),
        event_id=EventId(row.event_id),
        name=row.name,
        price=Money(row.price),
        capacity=Capacity(row.capacity),
        sold_count=row.sold_count,
        min_per_order=row.min_per_order,
        max_per_order=row.max_per_order,
        description=row.description,
        perks=tuple(row.perks or ()),
        sales_start=row.sales_start,
        sales_end=row.sales_end,
        is_hidden=row.is_hidden,
        sort_order=row.sort_order,
        function_id=FunctionId(row.function_id) if row.function_id else None,
        created_at=row.created_at,
    )


def _tier_fields(tier: TicketTier) -> dict:
    return {
        "event_id": tier.event_id.value,
        "function_id": tier.function_id.value if tier.function_id else None,
        "name": tier.name,
        "description": tier.description,
        "perks": list(tier.perks),
        "price": tier.price.amount,
        "capacity": tier.capacity.value,
        "sold_count": tier.sold_count,
        "min_per_order": tier.min_per_order,
        "max_per_order": tier.max_per_order,
        "sales_start": tier.sales_start,
        "sales_end": tier.sales_end,
        "is_hidden": tier.is_hidden,
        "sort_order": tier.sort_order,
        "created_at": tier.created_at,
    }


def _ticket_to_domain(row: orm.Ticket) -> Ticket:
    return Ticket(
        id=TicketId(row.id),
        ticket_number=row.ticket_number,
        event_id=EventId(row.event_id),
        tier_id=TierId(row.tier_id),
        guest_name=row.guest_name,
        guest_email=row.guest_email,
        quantity=row.quantity,
        unit_price=Money(row.unit_price),
        discount_amount=Money(row.discount_amount),
        service_fee=Money(row.service_fee),
        total_price=Money(row.total_price),
        creator_payout=Money(row.creator_payout),
        qr_code_data=row.qr_code_data,
        payment_status=PaymentStatus(row.payment_status),
        payment_method=PaymentMethod(row.payment_method) if row.payment_method else None,
        payment_reference=row.payment_reference,
        promo_code_used=row.promo_code_used,
        user_id=row.user_id,
        is_checked_in=row.is_checked_in,
        checked_in_at=row.checked_in_at,
        purchased_at=row.purchased_at,
        cancelled_at=row.cancelled_at,
        cancellation_reason=row.cancellation_reason,
    )


def _ticket_fields(ticket: Ticket) -> dict:
    return {
        "ticket_number": ticket.ticket_number,
        "event_id": ticket.event_id.value,
        "tier_id": ticket.tier_id.value,
        "user_id": ticket.user_id,
        "guest_name": ticket.guest_name,
        "guest_email": ticket.guest_email,
        "quantity": ticket.quantity,
        "unit_price": ticket.unit_price.amount,
        "discount_amount": ticket.discount_amount.amount,
        "service_fee": ticket.service_fee.amount,
        "total_price": ticket.total_price.amount,
        "creator_payout": ticket.creator_payout.amount,
        "promo_code_used": ticket.promo_code_used,
        "payment_status": ticket.payment_status.value,
        "payment_method": ticket.payment_method.value if ticket.payment_method else None,
        "payment_reference": ticket.payment_reference,
        "qr_code_data": ticket.qr_code_data,
        "is_checked_in": ticket.is_checked_in,
        "checked_in_at": ticket.checked_in_at,
        "purchased_at": ticket.purchased_at,
        "cancelled_at": ticket.cancelled_at,
        "cancellation_reason": ticket.cancellation_reason,
    }


def _promo_to_domain(row: orm.PromoCode) -> PromoCode:
    tier_ids = row.applicable_tier_ids
    return PromoCode(
        id=PromoCodeId(row.id),
        event_id=EventId(row.event_id),
        code=row.code,
        discount_type=DiscountType(row.discount_type),
        discount_value=row.discount_value,
        min_purchase=_money(row.min_purchase),
        max_discount=_money(row.max_discount),
        usage_limit=row.usage_limit,
        usage_count=row.usage_count,
        per_user_limit=row.per_user_limit,
        valid_from=row.valid_from,
        valid_until=row.valid_until,
        applicable_tier_ids=(
            None
            if tier_ids is None
            else frozenset(TierId.from_string(value) for value in tier_ids)
        ),
        is_active=row.is_active,
        created_at=row.created_at,
    )


def _promo_fields(promo: PromoCode) -> dict:
    tier_ids = promo.applicable_tier_ids
    return {
        "event_id": promo.event_id.value,
        "code": promo.code,
        "discount_type": promo.discount_type.value,
        "discount_value": promo.discount_value,
        "min_purchase": promo.min_purchase.amount if promo.min_purchase else None,
        "max_discount": promo.max_discount.amount if promo.max_discount else None,
        "usage_limit": promo.usage_limit,
        "usage_count": promo.usage_count,
        "per_user_limit": promo.per_user_limit,
        "valid_from": promo.valid_from,
        "valid_until": promo.valid_until,
        "applicable_tier_ids": (
            None if tier_ids is None else sorted(str(tier_id) for tier_id in tier_ids)
        ),
        "is_active": promo.is_active,
        "created_at": promo.created_at,
    }


def _waitlist_to_domain(row: orm.WaitlistEntry) -> WaitlistEntry:
    return WaitlistEntry(
        id=WaitlistEntryId(row.id),
        event_id=EventId(row.event_id),
        email=row.email,
        position=row.position,
        tier_id=TierId(row.tier_id) if row.tier_id else None,
        name=row.name,
        user_id=row.user_id,
        notified_at=row.notified_at,
        converted_to_ticket=row.converted_to_ticket,
        created_at=row.created_at,
    )


def _waitlist_fields(entry: WaitlistEntry) -> dict:
    return {
        "event_id": entry.event_id.value,
        "tier_id": entry.tier_id.value if entry.tier_id else None,
        "email": entry.email,
        "name": entry.name,
        "user_id": entry.user_id,
        "position": entry.position,
        "notified_at": entry.notified_at,
        "converted_to_ticket": entry.converted_to_ticket,
        "created_at": entry.created_at,
    }


# domain type -> (ORM model, row converter, field extractor)
_MAPPINGS: dict[type, tuple[type, Callable, Callable]] = {
    Event: (orm.Event, _event_to_domain, _event_fields),
    TicketTier: (orm.TicketTier, _tier_to_domain, _tier_fields),
    Ticket: (orm.Ticket, _ticket_to_domain, _ticket_fields),
    PromoCode: (orm.PromoCode, _promo_to_domain, _promo_fields),
    WaitlistEntry: (orm.WaitlistEntry, _waitlist_to_domain, _waitlist_fields),
}


def _raw_id(entity_id: object) -> UUID:
    return getattr(entity_id, "value", entity_id)  # type: ignore[return-value]


class DjangoTicketingStore(TicketingStore):
    """Relational store using the Django ORM."""

    def _mapping(self, model: type) -> tuple[type, Callable, Callable]:
        try:
            return _MAPPINGS[model]
        except KeyError:
            raise TypeError(f"Unsupported entity type: {model.__name__}") from None

    def atomic(self) -> AbstractContextManager[None]:
        return transaction.atomic()

    def save(self, entity: E) -> E:
        row_model, _, fields = self._mapping(type(entity))
        row_model.objects.update_or_create(
            id=_raw_id(entity.id), defaults=fields(entity)
        )
        return entity

    def get(self, model: type[E], entity_id: object) -> E | None:
        row_model, to_domain, _ = self._mapping(model)
        row = row_model.objects.filter(id=_raw_id(entity_id)).first()
        return None if row is None else to_domain(row)

    def delete(self, model: type[E], entity_id: object) -> bool:
        row_model, _, _ = self._mapping(model)
        deleted, _ = row_model.objects.filter(id=_raw_id(entity_id)).delete()
        return deleted > 0

    def find(
        self, model: type[E], predicate: Callable[[E], bool] | None = None
    ) -> list[E]:
        row_model, to_domain, _ = self._mapping(model)
        entities = [to_domain(row) for row in row_model.objects.all()]
        if predicate is None:
            return entities
        return [entity for entity in entities if predicate(entity)]

    def list_tiers(self, event_id: EventId) -> list[TicketTier]:
        rows = orm.TicketTier.objects.filter(event_id=event_id.value).order_by(
            "sort_order", "created_at"
        )
        return [_tier_to_domain(row) for row in rows]

    def list_tickets(self, event_id: EventId) -> list[Ticket]:
        rows = orm.Ticket.objects.filter(event_id=event_id.value).order_by(
            "purchased_at"
        )
        return [_ticket_to_domain(row) for row in rows]

    def find_tickets_by_payment_reference(self, reference: str) -> list[Ticket]:
        rows = orm.Ticket.objects.filter(payment_reference=reference)
        return [_ticket_to_domain(row) for row in rows]

    def ticket_number_exists(self, ticket_number: str) -> bool:
        return orm.Ticket.objects.filter(ticket_number=ticket_number).exists()

    def find_promo_code(self, event_id: EventId, code: str) -> PromoCode | None:
        row = orm.PromoCode.objects.filter(
            event_id=event_id.value, code=normalize_code(code)
        ).first()
        return None if row is None else _promo_to_domain(row)

    def list_waitlist(
        self, event_id: EventId, tier_id: TierId | None = None
    ) -> list[WaitlistEntry]:
        rows = orm.WaitlistEntry.objects.filter(
            event_id=event_id.value, tier_id=tier_id.value if tier_id else None
        ).order_by("position")
        return [_waitlist_to_domain(row) for row in rows]

    def increment_sold_count(self, tier_id: TierId, quantity: int) -> TicketTier:
        """Conditionally increment under a row lock so capacity is never passed."""
        with transaction.atomic():
            row = (
                orm.TicketTier.objects.select_for_update()
                .filter(id=tier_id.value)
                .first()
            )
            if row is None:
                raise TierNotFoundError(str(tier_id))
            updated = orm.TicketTier.objects.filter(
                id=tier_id.value,
                sold_count__lte=F("capacity") - quantity,
            ).update(sold_count=F("sold_count") + quantity)
            if not updated:
                remaining = max(0, row.capacity - row.sold_count)
                logger.warning(
                    "sold_count_rejected",
                    tier_id=str(tier_id),
                    requested=quantity,
                    remaining=remaining,
                )
                raise InsufficientCapacityError(str(tier_id), quantity, remaining)
            row.refresh_from_db()
            return _tier_to_domain(row)

    def increment_promo_usage(self, promo: PromoCode) -> PromoCode:
        """Conditionally count one use so the usage limit is never passed."""
        with transaction.atomic():
            updated = (
                orm.PromoCode.objects.filter(id=promo.id.value)
                .filter(
                    Q(usage_limit__isnull=True) | Q(usage_count__lt=F("usage_limit"))
                )
                .update(usage_count=F("usage_count") + 1)
            )
            if not updated:
                logger.warning("promo_usage_rejected", code=promo.code)
                raise PromoCodeExhaustedError(promo.code)
            return _promo_to_domain(orm.PromoCode.objects.get(id=promo.id.value))

    def delete_event(self, event_id: EventId) -> bool:
        with transaction.atomic():
            if not orm.Event.objects.filter(id=event_id.value).exists():
                return False
            for row_model in (
                orm.Ticket,
                orm.WaitlistEntry,
                orm.PromoCode,
                orm.TicketTier,
            ):
                row_model.objects.filter(event_id=event_id.value).delete()
            deleted, _ = orm.Event.objects.filter(id=event_id.value).delete()
            return deleted > 0
