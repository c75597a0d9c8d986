"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from decimal import Decimal

import structlog
from django.conf import settings
from django.core.cache import cache
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ticketing.cache_keys import tiers_cache_key
from ticketing.domain import EventId, PaymentMethod
from ticketing.domain.errors import DomainError, ErrorCode
from ticketing.handlers import serializers as s
from ticketing.services import (
    CatalogService,
    OrderLine,
    PurchaseService,
    WaitlistService,
)
from ticketing.services.identifiers import parse_id
from ticketing.stores.django_store import DjangoTicketingStore

logger = structlog.get_logger(__name__)

_STATUS_BY_CODE = {
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_TIER: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_PROMO_CODE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.QUANTITY_OUT_OF_BOUNDS: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TIER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TICKET_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PROMO_CODE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.WAITLIST_ENTRY_NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def error_response(exc: DomainError) -> Response:
    """Render a domain error; anything not listed is a state conflict."""
    http_status = _STATUS_BY_CODE.get(exc.code, status.HTTP_409_CONFLICT)
    return Response(
        {"error": {"code": exc.code.value, "message": exc.message}},
        status=http_status,
    )


def validation_response(errors: dict) -> Response:
    return Response(
        {
            "error": {
                "code": "INVALID_REQUEST",
                "message": "Invalid request",
                "fields": errors,
            }
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


def _store() -> DjangoTicketingStore:
    return DjangoTicketingStore()


def catalog_service() -> CatalogService:
    return CatalogService(_store())


def purchase_service() -> PurchaseService:
    return PurchaseService(
        _store(), fee_rate=Decimal(settings.TICKETING_SERVICE_FEE_RATE)
    )


def waitlist_service() -> WaitlistService:
    return WaitlistService(_store())


def _order_lines(data: dict) -> list[OrderLine]:
    return [
        OrderLine(tier_id=str(line["tier_id"]), quantity=line["quantity"])
        for line in data["tiers"]
    ]


class TierListView(APIView):
    """Handler for GET /api/events/{event_id}/tiers"""

    def get(self, request: Request, event_id: str) -> Response:
        try:
            parsed = parse_id(EventId, event_id, "event")
        except DomainError as exc:
            return error_response(exc)
        key = tiers_cache_key(str(parsed))
        cached = cache.get(key)
        if cached is not None:
            return Response(cached)
        try:
            tiers = catalog_service().list_tiers(parsed)
        except DomainError as exc:
            return error_response(exc)
        data = {"results": s.TicketTierSerializer(tiers, many=True).data}
        cache.set(key, data, settings.TICKETING_TIER_CACHE_TTL)
        return Response(data)


class QuoteView(APIView):
    """Handler for POST /api/events/{event_id}/quote"""

    def post(self, request: Request, event_id: str) -> Response:
        payload = s.QuoteRequestSerializer(data=request.data)
        if not payload.is_valid():
            return validation_response(payload.errors)
        try:
            quote = purchase_service().quote(
                event_id,
                _order_lines(payload.validated_data),
                payload.validated_data.get("promo_code"),
            )
        except DomainError as exc:
            return error_response(exc)
        return Response(s.QuoteSerializer(quote).data)


class PurchaseView(APIView):
    """Handler for POST /api/events/{event_id}/purchases"""

    def post(self, request: Request, event_id: str) -> Response:
        payload = s.PurchaseRequestSerializer(data=request.data)
        if not payload.is_valid():
            return validation_response(payload.errors)
        data = payload.validated_data
        method = data.get("payment_method")
        try:
            result = purchase_service().purchase(
                event_id,
                _order_lines(data),
                guest_name=data["guest_name"],
                guest_email=data["guest_email"],
                promo_code=data.get("promo_code"),
                payment_method=PaymentMethod(method) if method else None,
            )
        except DomainError as exc:
            logger.info("purchase_rejected", event_id=event_id, code=exc.code.value)
            return error_response(exc)
        return Response(
            s.PurchaseResultSerializer(result).data, status=status.HTTP_201_CREATED
        )


class PaymentWebhookView(APIView):
    """Handler for POST /api/payments/webhook"""

    def post(self, request: Request) -> Response:
        payload = s.WebhookRequestSerializer(data=request.data)
        if not payload.is_valid():
            return validation_response(payload.errors)
        try:
            tickets = purchase_service().handle_webhook(
                payload.validated_data["type"],
                payload.validated_data["payment_intent_id"],
            )
        except DomainError as exc:
            return error_response(exc)
        return Response({"tickets": s.TicketSerializer(tickets, many=True).data})


class TicketCancelView(APIView):
    """Handler for POST /api/tickets/{ticket_id}/cancel"""

    def post(self, request: Request, ticket_id: str) -> Response:
        payload = s.CancelRequestSerializer(data=request.data)
        if not payload.is_valid():
            return validation_response(payload.errors)
        try:
            ticket = purchase_service().cancel_ticket(
                ticket_id, payload.validated_data.get("reason")
            )
        except DomainError as exc:
            return error_response(exc)
        return Response(s.TicketSerializer(ticket).data)


class TicketCheckInView(APIView):
    """Handler for POST /api/tickets/{ticket_id}/check-in"""

    def post(self, request: Request, ticket_id: str) -> Response:
        try:
            ticket = purchase_service().check_in(ticket_id)
        except DomainError as exc:
            return error_response(exc)
        return Response(s.TicketSerializer(ticket).data)


class WaitlistView(APIView):
    """Handler for POST /api/events/{event_id}/waitlist"""

    def post(self, request: Request, event_id: str) -> Response:
        payload = s.WaitlistRequestSerializer(data=request.data)
        if not payload.is_valid():
            return validation_response(payload.errors)
        data = payload.validated_data
        tier_id = data.get("tier_id")
        try:
            entry = waitlist_service().join(
                event_id,
                data["email"],
                tier_id=str(tier_id) if tier_id else None,
                name=data.get("name"),
            )
        except DomainError as exc:
            return error_response(exc)
        return Response(
            s.WaitlistEntrySerializer(entry).data, status=status.HTTP_201_CREATED
        )


class SalesSummaryView(APIView):
    """Handler for GET /api/events/{event_id}/sales"""

    def get(self, request: Request, event_id: str) -> Response:
        try:
            summary = catalog_service().sales_summary(event_id)
        except DomainError as exc:
            return error_response(exc)
        return Response(s.SalesSummarySerializer(summary).data)
