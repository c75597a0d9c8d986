from ticketing.services.catalog_service import CatalogService
from ticketing.services.purchase_service import (
    OrderLine,
    PurchaseResult,
    PurchaseService,
    Quote,
    WebhookEventType,
)
from ticketing.services.waitlist_service import WaitlistService

__all__ = [
    "CatalogService",
    "PurchaseService",
    "WaitlistService",
    "OrderLine",
    "Quote",
    "PurchaseResult",
    "WebhookEventType",
]
