from ticketing.domain.availability import SalesStatus
from ticketing.domain.models import (
    DiscountType,
    Event,
    PaymentMethod,
    PaymentStatus,
    PromoCode,
    Ticket,
    TicketTier,
    WaitlistEntry,
)
from ticketing.domain.value_objects import (
    Capacity,
    EventId,
    FunctionId,
    Money,
    PromoCodeId,
    Quantity,
    TicketId,
    TierId,
    WaitlistEntryId,
)

__all__ = [
    "Event",
    "TicketTier",
    "Ticket",
    "PromoCode",
    "WaitlistEntry",
    "SalesStatus",
    "PaymentStatus",
    "PaymentMethod",
    "DiscountType",
    "EventId",
    "FunctionId",
    "TierId",
    "TicketId",
    "PromoCodeId",
    "WaitlistEntryId",
    "Money",
    "Capacity",
    "Quantity",
]
