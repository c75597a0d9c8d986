"""Inventory and sale-window evaluation for ticket tiers.

Pure functions of the tier's numbers and the current time. A tier whose sale
window has closed reports ENDED even when it also sold out.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ticketing.domain.models import TicketTier


class SalesStatus(Enum):
    """Sales state of a tier, valued by its display label."""

    UPCOMING = "Coming Soon"
    ON_SALE = "On Sale"
    SOLD_OUT = "Sold Out"
    ENDED = "Sales Ended"


def remaining_count(capacity: int, sold_count: int) -> int:
    """Tickets left to sell, never negative even for over-sold tiers."""
    return max(0, capacity - sold_count)


def is_sold_out(capacity: int, sold_count: int) -> bool:
    return sold_count >= capacity


def is_available(capacity: int, sold_count: int) -> bool:
    return remaining_count(capacity, sold_count) > 0 and not is_sold_out(
        capacity, sold_count
    )


def sales_status(tier: TicketTier, now: datetime | None = None) -> SalesStatus:
    """Return the sales status of a tier at ``now`` (defaults to current UTC time)."""
    now = now or datetime.now(timezone.utc)
    if tier.sales_start is not None and now < tier.sales_start:
        return SalesStatus.UPCOMING
    if tier.sales_end is not None and now > tier.sales_end:
        return SalesStatus.ENDED
    if is_sold_out(tier.capacity.value, tier.sold_count):
        return SalesStatus.SOLD_OUT
    return SalesStatus.ON_SALE
