"""Sales figures derived from an explicit collection of tickets."""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from ticketing.domain.models import Ticket
from ticketing.domain.value_objects import ZERO


@dataclass(frozen=True)
class SalesSummary:
    tickets_sold: int
    gross_charged: Decimal
    service_fees: Decimal
    host_payout: Decimal
    checked_in: int


def summarize_sales(tickets: Iterable[Ticket]) -> SalesSummary:
    """Aggregate valid (completed, uncancelled) tickets only."""
    sold = checked_in = 0
    gross = fees = payout = ZERO
    for ticket in tickets:
        if not ticket.is_valid:
            continue
        sold += ticket.quantity
        gross += ticket.total_price.amount
        fees += ticket.service_fee.amount
        payout += ticket.creator_payout.amount
        if ticket.is_checked_in:
            checked_in += ticket.quantity
    return SalesSummary(
        tickets_sold=sold,
        gross_charged=gross,
        service_fees=fees,
        host_payout=payout,
        checked_in=checked_in,
    )
