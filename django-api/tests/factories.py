"""Builders for domain objects used across tests."""

from datetime import datetime, timezone
from decimal import Decimal

from ticketing.domain import (
    Capacity,
    DiscountType,
    EventId,
    Money,
    PaymentStatus,
    PromoCode,
    PromoCodeId,
    Ticket,
    TicketId,
    TicketTier,
    TierId,
)

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_tier(**overrides) -> TicketTier:
    fields = {
        "id": TierId.new(),
        "event_id": EventId.new(),
        "name": "General Admission",
        "price": Money(Decimal("25")),
        "capacity": Capacity(100),
    }
    fields.update(overrides)
    return TicketTier(**fields)


def make_promo(**overrides) -> PromoCode:
    fields = {
        "id": PromoCodeId.new(),
        "event_id": EventId.new(),
        "code": "EARLYBIRD20",
        "discount_type": DiscountType.PERCENTAGE,
        "discount_value": Decimal("20"),
    }
    fields.update(overrides)
    return PromoCode(**fields)


def make_ticket(**overrides) -> Ticket:
    fields = {
        "id": TicketId.new(),
        "ticket_number": "TKT-ABC1234",
        "event_id": EventId.new(),
        "tier_id": TierId.new(),
        "guest_name": "Alice Johnson",
        "guest_email": "alice@example.com",
        "quantity": 2,
        "unit_price": Money(Decimal("50")),
        "discount_amount": Money(Decimal("20")),
        "service_fee": Money(Decimal("4")),
        "total_price": Money(Decimal("84")),
        "creator_payout": Money(Decimal("80")),
        "qr_code_data": "event:ticket",
        "payment_status": PaymentStatus.COMPLETED,
        "purchased_at": NOW,
    }
    fields.update(overrides)
    return Ticket(**fields)
