"""Unit tests for order total assembly."""

from decimal import Decimal

import pytest

from tests.factories import NOW, make_promo, make_tier
from ticketing.domain import DiscountType, Money, TierId
from ticketing.domain.errors import QuantityOutOfBoundsError
from ticketing.domain.pricing import (
    assemble_order,
    combine,
    quote_line,
    validate_quantity,
)


class TestAssembleOrder:
    def test_paid_order_without_discount(self):
        totals = assemble_order(Decimal("50"), 2)
        assert totals.subtotal == 100
        assert totals.service_fee == 5
        assert totals.total_charged == 105
        assert totals.host_payout == 100

    def test_discount_is_taken_before_fee(self):
        totals = assemble_order(Decimal("50"), 2, Decimal("20"))
        assert totals.subtotal == 100
        assert totals.after_discount == 80
        assert totals.service_fee == 4
        assert totals.total_charged == 84
        assert totals.host_payout == 80

    def test_free_tier_never_charges(self):
        totals = assemble_order(Decimal("0"), 1, Decimal("20"))
        assert totals.subtotal == 0
        assert totals.discount_amount == 0
        assert totals.service_fee == 0
        assert totals.total_charged == 0
        assert totals.host_payout == 0

    def test_fully_discounted_order_has_no_fee(self):
        totals = assemble_order(Decimal("30"), 1, Decimal("30"))
        assert totals.after_discount == 0
        assert totals.service_fee == 0
        assert totals.total_charged == 0

    def test_oversized_discount_clamps_to_zero(self):
        totals = assemble_order(Decimal("30"), 1, Decimal("100"))
        assert totals.after_discount == 0
        assert totals.discount_amount == 30
        assert totals.total_charged == 0

    def test_negative_discount_is_ignored(self):
        totals = assemble_order(Decimal("10"), 1, Decimal("-5"))
        assert totals.after_discount == 10

    def test_fee_rounds_half_up(self):
        # 5% of 12.30 = 0.615
        totals = assemble_order(Decimal("12.30"), 1)
        assert totals.service_fee == Decimal("0.62")
        assert totals.total_charged == Decimal("12.92")

    def test_custom_fee_rate(self):
        totals = assemble_order(Decimal("100"), 1, fee_rate=Decimal("0.10"))
        assert totals.service_fee == 10
        assert totals.host_payout == 100


class TestValidateQuantity:
    @pytest.mark.parametrize("quantity", [0, -1, 11, 2.5, "3", None])
    def test_rejects_out_of_bounds(self, quantity):
        with pytest.raises(QuantityOutOfBoundsError):
            validate_quantity(quantity, 1, 10)

    @pytest.mark.parametrize("quantity", [1, 5, 10])
    def test_accepts_bounds_inclusive(self, quantity):
        assert validate_quantity(quantity, 1, 10) == quantity

    def test_respects_tier_minimum(self):
        with pytest.raises(QuantityOutOfBoundsError) as excinfo:
            validate_quantity(1, 2, 4)
        assert excinfo.value.min_per_order == 2
        assert excinfo.value.max_per_order == 4


class TestQuoteLine:
    def test_plain_line(self):
        tier = make_tier(price=Money(Decimal("50")))
        quote = quote_line(tier, 2, now=NOW)
        assert quote.group_discount == 0
        assert quote.promo_discount == 0
        assert quote.totals.total_charged == 105

    def test_quantity_checked_before_pricing(self):
        tier = make_tier(max_per_order=4)
        with pytest.raises(QuantityOutOfBoundsError):
            quote_line(tier, 5, now=NOW)

    def test_group_discount_applies(self):
        tier = make_tier(price=Money(Decimal("20")))
        quote = quote_line(tier, 5, now=NOW)
        assert quote.group_discount == Decimal("10.00")
        assert quote.totals.after_discount == Decimal("90.00")
        assert quote.totals.service_fee == Decimal("4.50")
        assert quote.totals.total_charged == Decimal("94.50")

    def test_promo_is_evaluated_after_group_discount(self):
        tier = make_tier(price=Money(Decimal("20")), max_per_order=10)
        promo = make_promo(event_id=tier.event_id, discount_value=Decimal("10"))
        quote = quote_line(tier, 10, promo, now=NOW)
        # 200 - 15% = 170, then 10% of 170 = 17
        assert quote.group_discount == Decimal("30.00")
        assert quote.promo_discount == Decimal("17.00")
        assert quote.totals.host_payout == Decimal("153.00")

    def test_promo_restricted_to_other_tier_is_ignored(self):
        tier = make_tier(price=Money(Decimal("50")))
        promo = make_promo(applicable_tier_ids=frozenset({TierId.new()}))
        quote = quote_line(tier, 1, promo, now=NOW)
        assert quote.promo_discount == 0

    def test_fixed_promo_is_clamped(self):
        tier = make_tier(price=Money(Decimal("30")))
        promo = make_promo(discount_type=DiscountType.FIXED, discount_value=Decimal("100"))
        quote = quote_line(tier, 1, promo, now=NOW)
        assert quote.promo_discount == Decimal("30")
        assert quote.totals.total_charged == 0

    def test_free_tier_reports_no_discounts(self):
        tier = make_tier(price=Money(Decimal("0")))
        quote = quote_line(tier, 10, make_promo(), now=NOW)
        assert quote.group_discount == 0
        assert quote.promo_discount == 0
        assert quote.totals.total_charged == 0

    def test_combine_sums_lines(self):
        first = quote_line(make_tier(price=Money(Decimal("50"))), 2, now=NOW)
        second = quote_line(make_tier(price=Money(Decimal("10"))), 1, now=NOW)
        totals = combine([first, second])
        assert totals.subtotal == Decimal("110")
        assert totals.service_fee == Decimal("5.50")
        assert totals.total_charged == Decimal("115.50")
