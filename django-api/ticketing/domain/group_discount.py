"""Volume discounts for larger orders."""

from dataclasses import dataclass
from decimal import Decimal

from ticketing.domain.value_objects import ZERO, to_cents


@dataclass(frozen=True)
class GroupDiscount:
    """Buy ``min_quantity`` or more, get ``discount_percent`` off."""

    min_quantity: int
    discount_percent: Decimal


STANDARD: tuple[GroupDiscount, ...] = (
    GroupDiscount(min_quantity=5, discount_percent=Decimal("10")),
    GroupDiscount(min_quantity=10, discount_percent=Decimal("15")),
    GroupDiscount(min_quantity=20, discount_percent=Decimal("20")),
)


def discount_percent(
    quantity: int, table: tuple[GroupDiscount, ...] = STANDARD
) -> Decimal:
    """Highest percentage among thresholds reached by ``quantity``, else zero."""
    if quantity <= 0:
        return ZERO
    return max(
        (tier.discount_percent for tier in table if quantity >= tier.min_quantity),
        default=ZERO,
    )


def discount_amount(
    subtotal: Decimal, quantity: int, table: tuple[GroupDiscount, ...] = STANDARD
) -> Decimal:
    percent = discount_percent(quantity, table)
    if percent == 0 or subtotal <= 0:
        return ZERO
    return min(to_cents(subtotal * percent / Decimal(100)), subtotal)
