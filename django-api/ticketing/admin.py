from django.contrib import admin

from ticketing.models import Event, PromoCode, Ticket, TicketTier, WaitlistEntry


class TicketTierInline(admin.TabularInline):
    model = TicketTier
    extra = 1


class PromoCodeInline(admin.TabularInline):
    model = PromoCode
    extra = 0


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["title", "starts_at", "created_at"]
    search_fields = ["title"]
    inlines = [TicketTierInline, PromoCodeInline]


@admin.register(TicketTier)
class TicketTierAdmin(admin.ModelAdmin):
    list_display = ["name", "event", "price", "capacity", "sold_count", "is_hidden"]
    list_filter = ["event", "is_hidden"]


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = [
        "ticket_number",
        "event",
        "tier",
        "quantity",
        "total_price",
        "payment_status",
        "is_checked_in",
    ]
    list_filter = ["payment_status", "event"]
    search_fields = ["ticket_number", "guest_email", "payment_reference"]


@admin.register(PromoCode)
class PromoCodeAdmin(admin.ModelAdmin):
    list_display = ["code", "event", "discount_type", "discount_value", "usage_count", "is_active"]
    list_filter = ["event", "is_active"]


@admin.register(WaitlistEntry)
class WaitlistEntryAdmin(admin.ModelAdmin):
    list_display = ["email", "event", "tier", "position", "notified_at", "converted_to_ticket"]
    list_filter = ["event", "converted_to_ticket"]
