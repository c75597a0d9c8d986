from ticketing.handlers.views import (
    PaymentWebhookView,
    PurchaseView,
    QuoteView,
    SalesSummaryView,
    TicketCancelView,
    TicketCheckInView,
    TierListView,
    WaitlistView,
)

__all__ = [
    "TierListView",
    "QuoteView",
    "PurchaseView",
    "PaymentWebhookView",
    "TicketCancelView",
    "TicketCheckInView",
    "WaitlistView",
    "SalesSummaryView",
]
