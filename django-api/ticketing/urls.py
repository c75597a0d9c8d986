from django.urls import path

from ticketing.handlers import (
    PaymentWebhookView,
    PurchaseView,
    QuoteView,
    SalesSummaryView,
    TicketCancelView,
    TicketCheckInView,
    TierListView,
    WaitlistView,
)

urlpatterns = [
    path("events/<str:event_id>/tiers", TierListView.as_view(), name="tier-list"),
    path("events/<str:event_id>/quote", QuoteView.as_view(), name="order-quote"),
    path(
        "events/<str:event_id>/purchases",
        PurchaseView.as_view(),
        name="purchase-create",
    ),
    path("events/<str:event_id>/waitlist", WaitlistView.as_view(), name="waitlist-join"),
    path("events/<str:event_id>/sales", SalesSummaryView.as_view(), name="sales-summary"),
    path("payments/webhook", PaymentWebhookView.as_view(), name="payment-webhook"),
    path(
        "tickets/<str:ticket_id>/cancel",
        TicketCancelView.as_view(),
        name="ticket-cancel",
    ),
    path(
        "tickets/<str:ticket_id>/check-in",
        TicketCheckInView.as_view(),
        name="ticket-check-in",
    ),
]
