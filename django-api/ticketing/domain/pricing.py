"""Order total assembly.

The platform fee is charged to the buyer on top of the discounted subtotal;
the host always receives the discounted subtotal in full. Free tiers never
enter the fee pipeline.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ticketing.domain import group_discount, promotions
from ticketing.domain.errors import QuantityOutOfBoundsError
from ticketing.domain.models import PromoCode, TicketTier
from ticketing.domain.value_objects import ZERO, Quantity, TierId, to_cents

DEFAULT_FEE_RATE = Decimal("0.05")


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    discount_amount: Decimal
    after_discount: Decimal
    service_fee: Decimal
    total_charged: Decimal
    host_payout: Decimal


@dataclass(frozen=True)
class LineQuote:
    """Priced order line for one tier."""

    tier_id: TierId
    quantity: int
    unit_price: Decimal
    group_discount: Decimal
    promo_discount: Decimal
    totals: OrderTotals

    @property
    def discount_amount(self) -> Decimal:
        return self.totals.discount_amount


def validate_quantity(quantity: object, min_per_order: int, max_per_order: int) -> int:
    """Return ``quantity`` as an int, or raise before any money is computed."""
    try:
        value = Quantity(quantity).value  # type: ignore[arg-type]
    except ValueError:
        raise QuantityOutOfBoundsError(quantity, min_per_order, max_per_order) from None
    if not min_per_order <= value <= max_per_order:
        raise QuantityOutOfBoundsError(value, min_per_order, max_per_order)
    return value


def assemble_order(
    unit_price: Decimal,
    quantity: int,
    discount_amount: Decimal = ZERO,
    fee_rate: Decimal = DEFAULT_FEE_RATE,
) -> OrderTotals:
    if unit_price == 0:
        return OrderTotals(
            subtotal=ZERO,
            discount_amount=ZERO,
            after_discount=ZERO,
            service_fee=ZERO,
            total_charged=ZERO,
            host_payout=ZERO,
        )

    subtotal = to_cents(unit_price * quantity)
    after_discount = max(ZERO, subtotal - max(ZERO, discount_amount))
    service_fee = to_cents(after_discount * fee_rate) if after_discount > 0 else ZERO
    return OrderTotals(
        subtotal=subtotal,
        discount_amount=subtotal - after_discount,
        after_discount=after_discount,
        service_fee=service_fee,
        total_charged=after_discount + service_fee,
        host_payout=after_discount,
    )


def quote_line(
    tier: TicketTier,
    quantity: object,
    promo: PromoCode | None = None,
    fee_rate: Decimal = DEFAULT_FEE_RATE,
    now: datetime | None = None,
) -> LineQuote:
    """Price one order line.

    The group discount comes off the subtotal first; the promo code is then
    evaluated against what remains, so the two stack without double-counting.
    """
    count = validate_quantity(quantity, tier.min_per_order, tier.max_per_order)
    unit_price = tier.price.amount
    subtotal = to_cents(unit_price * count)

    group = group_discount.discount_amount(subtotal, count)
    promo_amount = ZERO
    if promo is not None and promotions.applies_to_tier(promo, tier.id):
        promo_amount = promotions.calculate_discount(promo, subtotal - group, now)

    totals = assemble_order(unit_price, count, group + promo_amount, fee_rate)
    if unit_price == 0:
        group = promo_amount = ZERO
    return LineQuote(
        tier_id=tier.id,
        quantity=count,
        unit_price=unit_price,
        group_discount=group,
        promo_discount=promo_amount,
        totals=totals,
    )


def combine(quotes: list[LineQuote]) -> OrderTotals:
    """Sum line totals into a whole-order breakdown."""
    return OrderTotals(
        subtotal=sum((q.totals.subtotal for q in quotes), ZERO),
        discount_amount=sum((q.totals.discount_amount for q in quotes), ZERO),
        after_discount=sum((q.totals.after_discount for q in quotes), ZERO),
        service_fee=sum((q.totals.service_fee for q in quotes), ZERO),
        total_charged=sum((q.totals.total_charged for q in quotes), ZERO),
        host_payout=sum((q.totals.host_payout for q in quotes), ZERO),
    )
