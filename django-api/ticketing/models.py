"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
Foreign keys PROTECT their targets: deleting an event and its dependents is an
explicit store operation, never a database cascade.
"""

import uuid

from django.db import models
from django.utils import timezone


class Event(models.Model):
    """Persistence model for events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    starts_at = models.DateTimeField()
    ends_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["starts_at"]
        indexes = [
            models.Index(fields=["starts_at"], name="event_starts_at_idx"),
        ]

    def __str__(self) -> str:
        return self.title


class TicketTier(models.Model):
    """Persistence model for ticket tiers."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="tiers")
    function_id = models.UUIDField(blank=True, null=True)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, null=True)
    perks = models.JSONField(default=list, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    capacity = models.PositiveIntegerField()
    sold_count = models.PositiveIntegerField(default=0)
    min_per_order = models.PositiveIntegerField(default=1)
    max_per_order = models.PositiveIntegerField(default=10)
    sales_start = models.DateTimeField(blank=True, null=True)
    sales_end = models.DateTimeField(blank=True, null=True)
    is_hidden = models.BooleanField(default=False)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["sort_order", "created_at"]
        indexes = [
            models.Index(fields=["event", "sort_order"], name="tier_event_sort_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} - {self.price}"


class Ticket(models.Model):
    """Persistence model for purchased tickets."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    ticket_number = models.CharField(max_length=16, unique=True)
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="tickets")
    tier = models.ForeignKey(
        TicketTier, on_delete=models.PROTECT, related_name="tickets"
    )
    user_id = models.UUIDField(blank=True, null=True)
    guest_name = models.CharField(max_length=255)
    guest_email = models.EmailField()
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2)
    service_fee = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    creator_payout = models.DecimalField(max_digits=10, decimal_places=2)
    promo_code_used = models.CharField(max_length=64, blank=True, null=True)
    payment_status = models.CharField(max_length=16, default="pending")
    payment_method = models.CharField(max_length=16, blank=True, null=True)
    payment_reference = models.CharField(max_length=64, blank=True, null=True)
    qr_code_data = models.CharField(max_length=100)
    is_checked_in = models.BooleanField(default=False)
    checked_in_at = models.DateTimeField(blank=True, null=True)
    purchased_at = models.DateTimeField(default=timezone.now)
    cancelled_at = models.DateTimeField(blank=True, null=True)
    cancellation_reason = models.TextField(blank=True, null=True)

    class Meta:
        ordering = ["purchased_at"]
        indexes = [
            models.Index(
                fields=["event", "purchased_at"], name="ticket_event_purchased_idx"
            ),
            models.Index(fields=["payment_reference"], name="ticket_payment_ref_idx"),
        ]

    def __str__(self) -> str:
        return self.ticket_number


class PromoCode(models.Model):
    """Persistence model for event promo codes."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(
        Event, on_delete=models.PROTECT, related_name="promo_codes"
    )
    code = models.CharField(max_length=64)
    discount_type = models.CharField(max_length=16)
    discount_value = models.DecimalField(max_digits=10, decimal_places=2)
    min_purchase = models.DecimalField(
        max_digits=10, decimal_places=2, blank=True, null=True
    )
    max_discount = models.DecimalField(
        max_digits=10, decimal_places=2, blank=True, null=True
    )
    usage_limit = models.PositiveIntegerField(blank=True, null=True)
    usage_count = models.PositiveIntegerField(default=0)
    per_user_limit = models.PositiveIntegerField(default=1)
    valid_from = models.DateTimeField(blank=True, null=True)
    valid_until = models.DateTimeField(blank=True, null=True)
    applicable_tier_ids = models.JSONField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["event", "code"], name="unique_promo_code_per_event"
            ),
        ]

    def __str__(self) -> str:
        return self.code


class WaitlistEntry(models.Model):
    """Persistence model for waitlist entries."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(
        Event, on_delete=models.PROTECT, related_name="waitlist_entries"
    )
    tier = models.ForeignKey(
        TicketTier,
        on_delete=models.PROTECT,
        related_name="waitlist_entries",
        blank=True,
        null=True,
    )
    email = models.EmailField()
    name = models.CharField(max_length=255, blank=True, null=True)
    user_id = models.UUIDField(blank=True, null=True)
    position = models.PositiveIntegerField()
    notified_at = models.DateTimeField(blank=True, null=True)
    converted_to_ticket = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["position"]
        indexes = [
            models.Index(
                fields=["event", "tier", "position"], name="waitlist_scope_position_idx"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.email} (#{self.position})"
