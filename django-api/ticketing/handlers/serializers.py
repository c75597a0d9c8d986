"""Serializers for request validation and for rendering domain models."""

from django.conf import settings
from rest_framework import serializers

from ticketing.domain import PaymentMethod
from ticketing.domain.availability import sales_status
from ticketing.services import WebhookEventType


def _amount(**kwargs) -> serializers.DecimalField:
    return serializers.DecimalField(max_digits=12, decimal_places=2, **kwargs)


class TicketTierSerializer(serializers.Serializer):
    """Serializer for TicketTier domain model."""

    id = serializers.UUIDField(source="id.value")
    name = serializers.CharField()
    description = serializers.CharField(allow_null=True)
    perks = serializers.ListField(child=serializers.CharField())
    price = _amount(source="price.amount")
    currency = serializers.SerializerMethodField()
    is_free = serializers.BooleanField()
    capacity = serializers.IntegerField(source="capacity.value")
    remaining = serializers.IntegerField(source="remaining_count")
    is_available = serializers.BooleanField()
    min_per_order = serializers.IntegerField()
    max_per_order = serializers.IntegerField()
    sales_start = serializers.DateTimeField(allow_null=True)
    sales_end = serializers.DateTimeField(allow_null=True)
    sales_status = serializers.SerializerMethodField()
    function_id = serializers.SerializerMethodField()

    def get_currency(self, tier) -> str:
        return settings.TICKETING_CURRENCY

    def get_sales_status(self, tier) -> str:
        return sales_status(tier).value

    def get_function_id(self, tier) -> str | None:
        return str(tier.function_id) if tier.function_id else None


class TicketSerializer(serializers.Serializer):
    """Serializer for Ticket domain model."""

    id = serializers.UUIDField(source="id.value")
    ticket_number = serializers.CharField()
    event_id = serializers.UUIDField(source="event_id.value")
    tier_id = serializers.UUIDField(source="tier_id.value")
    guest_name = serializers.CharField()
    guest_email = serializers.EmailField()
    quantity = serializers.IntegerField()
    unit_price = _amount(source="unit_price.amount")
    discount_amount = _amount(source="discount_amount.amount")
    service_fee = _amount(source="service_fee.amount")
    total_price = _amount(source="total_price.amount")
    creator_payout = _amount(source="creator_payout.amount")
    promo_code_used = serializers.CharField(allow_null=True)
    payment_status = serializers.CharField(source="payment_status.value")
    payment_method = serializers.SerializerMethodField()
    qr_code_data = serializers.CharField()
    is_checked_in = serializers.BooleanField()
    purchased_at = serializers.DateTimeField()
    cancelled_at = serializers.DateTimeField(allow_null=True)

    def get_payment_method(self, ticket) -> str | None:
        return ticket.payment_method.value if ticket.payment_method else None


class OrderTotalsSerializer(serializers.Serializer):
    subtotal = _amount()
    discount_amount = _amount()
    service_fee = _amount()
    total_charged = _amount()
    host_payout = _amount()
    currency = serializers.SerializerMethodField()

    def get_currency(self, totals) -> str:
        return settings.TICKETING_CURRENCY


class LineQuoteSerializer(serializers.Serializer):
    tier_id = serializers.UUIDField(source="tier_id.value")
    quantity = serializers.IntegerField()
    unit_price = _amount()
    group_discount = _amount()
    promo_discount = _amount()
    totals = OrderTotalsSerializer()


class QuoteSerializer(serializers.Serializer):
    lines = LineQuoteSerializer(many=True)
    totals = OrderTotalsSerializer()
    promo_code = serializers.CharField(allow_null=True)


class PurchaseResultSerializer(serializers.Serializer):
    tickets = TicketSerializer(many=True)
    totals = OrderTotalsSerializer()
    payment_intent_id = serializers.CharField()
    client_secret = serializers.CharField(allow_null=True)


class WaitlistEntrySerializer(serializers.Serializer):
    id = serializers.UUIDField(source="id.value")
    email = serializers.EmailField()
    name = serializers.CharField(allow_null=True)
    position = serializers.IntegerField()


class SalesSummarySerializer(serializers.Serializer):
    tickets_sold = serializers.IntegerField()
    gross_charged = _amount()
    service_fees = _amount()
    host_payout = _amount()
    checked_in = serializers.IntegerField()


class OrderLineInputSerializer(serializers.Serializer):
    tier_id = serializers.UUIDField()
    quantity = serializers.IntegerField()


class QuoteRequestSerializer(serializers.Serializer):
    tiers = OrderLineInputSerializer(many=True, allow_empty=False)
    promo_code = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=64
    )


class PurchaseRequestSerializer(QuoteRequestSerializer):
    guest_name = serializers.CharField(max_length=255)
    guest_email = serializers.EmailField()
    payment_method = serializers.ChoiceField(
        choices=[method.value for method in PaymentMethod if method is not PaymentMethod.FREE],
        required=False,
    )


class WebhookRequestSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=[event.value for event in WebhookEventType])
    payment_intent_id = serializers.CharField(max_length=64)


class CancelRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class WaitlistRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()
    name = serializers.CharField(required=False, allow_null=True, max_length=255)
    tier_id = serializers.UUIDField(required=False, allow_null=True)
