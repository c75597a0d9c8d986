"""Promo code validity and discount calculation."""

from datetime import datetime, timezone
from decimal import Decimal

from ticketing.domain.models import DiscountType, PromoCode
from ticketing.domain.value_objects import ZERO, TierId, to_cents


def normalize_code(code: str) -> str:
    return code.strip().upper()


def is_valid(promo: PromoCode, now: datetime | None = None) -> bool:
    """A code is usable while active, inside its window and under its usage limit."""
    if not promo.is_active:
        return False
    if promo.usage_limit is not None and promo.usage_count >= promo.usage_limit:
        return False
    now = now or datetime.now(timezone.utc)
    if promo.valid_from is not None and now < promo.valid_from:
        return False
    if promo.valid_until is not None and now > promo.valid_until:
        return False
    return True


def applies_to_tier(promo: PromoCode, tier_id: TierId) -> bool:
    if promo.applicable_tier_ids is None:
        return True
    return tier_id in promo.applicable_tier_ids


def calculate_discount(
    promo: PromoCode, order_amount: Decimal, now: datetime | None = None
) -> Decimal:
    """Return the discount ``promo`` grants on ``order_amount``.

    Invalid codes and orders below the minimum purchase yield zero rather than
    an error, so checkout can continue without the discount. The result never
    exceeds the configured cap or the order amount itself.
    """
    if order_amount <= 0 or not is_valid(promo, now):
        return ZERO
    if promo.min_purchase is not None and order_amount < promo.min_purchase.amount:
        return ZERO

    if promo.discount_type is DiscountType.PERCENTAGE:
        discount = to_cents(order_amount * promo.discount_value / Decimal(100))
    else:
        discount = promo.discount_value

    if promo.max_discount is not None:
        discount = min(discount, promo.max_discount.amount)
    return min(discount, order_amount)
