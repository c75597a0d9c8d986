"""Integration tests for the ticketing HTTP API.

Run with: pytest tests/test_api.py -v
"""

from datetime import timedelta

import pytest
from rest_framework.test import APIClient

from tests.factories import NOW
from ticketing.domain import DiscountType
from ticketing.services import CatalogService
from ticketing.stores.django_store import DjangoTicketingStore

MISSING_ID = "3f2504e0-4f89-11d3-9a0c-0305e82c3301"


@pytest.fixture
def db_catalog() -> CatalogService:
    return CatalogService(DjangoTicketingStore())


@pytest.fixture
def db_event(db_catalog):
    return db_catalog.create_event("Summer Gala", starts_at=NOW + timedelta(days=30))


@pytest.fixture
def ga_tier(db_catalog, db_event):
    return db_catalog.add_tier(
        db_event.id, "General Admission", "50", capacity=100, perks=["Entry"]
    )


@pytest.fixture
def rsvp_tier(db_catalog, db_event):
    return db_catalog.add_tier(db_event.id, "RSVP", "0", capacity=2)


def order(tier, quantity=1, **extra):
    body = {"tiers": [{"tier_id": str(tier.id), "quantity": quantity}]}
    body.update(extra)
    return body


def purchase(api_client, event, tier, quantity=1, **extra):
    body = order(
        tier,
        quantity,
        guest_name="Alice Johnson",
        guest_email="alice@example.com",
        **extra,
    )
    return api_client.post(f"/api/events/{event.id}/purchases", body, format="json")


def webhook(api_client, event_type, intent_id):
    return api_client.post(
        "/api/payments/webhook",
        {"type": event_type, "payment_intent_id": intent_id},
        format="json",
    )


@pytest.mark.django_db
class TestTierList:
    """Tests for GET /api/events/{id}/tiers"""

    def test_lists_visible_tiers(self, api_client: APIClient, db_catalog, db_event, ga_tier):
        hidden = db_catalog.add_tier(db_event.id, "Comp", "0", capacity=5)
        db_catalog.set_tier_hidden(db_event.id, hidden.id)

        response = api_client.get(f"/api/events/{db_event.id}/tiers")

        assert response.status_code == 200
        (tier,) = response.json()["results"]
        assert tier["id"] == str(ga_tier.id)
        assert tier["price"] == "50.00"
        assert tier["currency"] == "USD"
        assert tier["remaining"] == 100
        assert tier["perks"] == ["Entry"]
        assert tier["sales_status"] == "On Sale"
        assert tier["is_free"] is False

    def test_event_not_found(self, api_client: APIClient):
        response = api_client.get(f"/api/events/{MISSING_ID}/tiers")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "EVENT_NOT_FOUND"

    def test_invalid_id_format(self, api_client: APIClient):
        response = api_client.get("/api/events/not-a-uuid/tiers")
        assert response.status_code == 400
        assert response.json()["error"] == {
            "code": "INVALID_ID",
            "message": "Invalid event ID format",
        }


@pytest.mark.django_db
class TestQuote:
    """Tests for POST /api/events/{id}/quote"""

    def test_quote_with_promo(self, api_client: APIClient, db_catalog, db_event, ga_tier):
        db_catalog.create_promo_code(
            db_event.id, "EARLYBIRD20", DiscountType.PERCENTAGE, "20"
        )
        response = api_client.post(
            f"/api/events/{db_event.id}/quote",
            order(ga_tier, 2, promo_code="earlybird20"),
            format="json",
        )
        assert response.status_code == 200
        body = response.json()
        assert body["promo_code"] == "EARLYBIRD20"
        assert body["totals"] == {
            "subtotal": "100.00",
            "discount_amount": "20.00",
            "service_fee": "4.00",
            "total_charged": "84.00",
            "host_payout": "80.00",
            "currency": "USD",
        }
        assert body["lines"][0]["promo_discount"] == "20.00"

    def test_group_discount_line(self, api_client: APIClient, db_event, ga_tier):
        response = api_client.post(
            f"/api/events/{db_event.id}/quote", order(ga_tier, 5), format="json"
        )
        line = response.json()["lines"][0]
        assert line["group_discount"] == "25.00"
        assert line["totals"]["total_charged"] == "236.25"

    def test_quantity_out_of_bounds(self, api_client: APIClient, db_event, ga_tier):
        response = api_client.post(
            f"/api/events/{db_event.id}/quote", order(ga_tier, 0), format="json"
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "QUANTITY_OUT_OF_BOUNDS"

    def test_empty_order_is_rejected(self, api_client: APIClient, db_event):
        response = api_client.post(
            f"/api/events/{db_event.id}/quote", {"tiers": []}, format="json"
        )
        assert response.status_code == 400
        body = response.json()["error"]
        assert body["code"] == "INVALID_REQUEST"
        assert "tiers" in body["fields"]

    def test_unknown_tier(self, api_client: APIClient, db_event):
        response = api_client.post(
            f"/api/events/{db_event.id}/quote",
            {"tiers": [{"tier_id": MISSING_ID, "quantity": 1}]},
            format="json",
        )
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "TIER_NOT_FOUND"


@pytest.mark.django_db
class TestPurchaseFlow:
    """Tests for purchases and payment webhooks."""

    def test_paid_purchase_awaits_payment(self, api_client: APIClient, db_event, ga_tier):
        response = purchase(api_client, db_event, ga_tier, 2, payment_method="card")

        assert response.status_code == 201
        body = response.json()
        assert body["client_secret"].startswith(body["payment_intent_id"])
        (ticket,) = body["tickets"]
        assert ticket["payment_status"] == "pending"
        assert ticket["payment_method"] == "card"
        assert ticket["total_price"] == "105.00"
        assert ticket["qr_code_data"] == f"{db_event.id}:{ticket['id']}"

    def test_webhook_completes_order(self, api_client: APIClient, db_event, ga_tier):
        intent = purchase(api_client, db_event, ga_tier, 2).json()["payment_intent_id"]
        api_client.get(f"/api/events/{db_event.id}/tiers")

        response = webhook(api_client, "payment.succeeded", intent)

        assert response.status_code == 200
        assert response.json()["tickets"][0]["payment_status"] == "completed"
        tiers = api_client.get(f"/api/events/{db_event.id}/tiers").json()["results"]
        assert tiers[0]["remaining"] == 98

    def test_refund_after_completion(self, api_client: APIClient, db_event, ga_tier):
        intent = purchase(api_client, db_event, ga_tier, 2).json()["payment_intent_id"]
        webhook(api_client, "payment.succeeded", intent)

        response = webhook(api_client, "refund.issued", intent)

        assert response.json()["tickets"][0]["payment_status"] == "refunded"
        tiers = api_client.get(f"/api/events/{db_event.id}/tiers").json()["results"]
        assert tiers[0]["remaining"] == 100

    def test_refund_of_pending_order_conflicts(self, api_client: APIClient, db_event, ga_tier):
        intent = purchase(api_client, db_event, ga_tier).json()["payment_intent_id"]
        response = webhook(api_client, "refund.issued", intent)
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVALID_PAYMENT_TRANSITION"

    def test_unknown_webhook_type(self, api_client: APIClient):
        response = webhook(api_client, "charge.disputed", "pi_123")
        assert response.status_code == 400

    def test_unknown_payment_intent(self, api_client: APIClient):
        response = webhook(api_client, "payment.succeeded", "pi_missing")
        assert response.status_code == 404

    def test_free_purchase_completes_immediately(self, api_client: APIClient, db_event, rsvp_tier):
        response = purchase(api_client, db_event, rsvp_tier)

        body = response.json()
        assert body["client_secret"] is None
        assert body["tickets"][0]["payment_status"] == "completed"
        assert body["tickets"][0]["payment_method"] == "free"
        assert body["totals"]["service_fee"] == "0.00"

    def test_insufficient_capacity(self, api_client: APIClient, db_event, rsvp_tier):
        response = purchase(api_client, db_event, rsvp_tier, 3)
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INSUFFICIENT_CAPACITY"

    def test_missing_guest_details(self, api_client: APIClient, db_event, ga_tier):
        response = api_client.post(
            f"/api/events/{db_event.id}/purchases", order(ga_tier), format="json"
        )
        assert response.status_code == 400
        fields = response.json()["error"]["fields"]
        assert "guest_name" in fields
        assert "guest_email" in fields

    def test_free_payment_method_cannot_be_requested(
        self, api_client: APIClient, db_event, ga_tier
    ):
        response = purchase(api_client, db_event, ga_tier, payment_method="free")
        assert response.status_code == 400


@pytest.mark.django_db
class TestTicketActions:
    """Tests for ticket cancellation and check-in."""

    def test_cancel_free_ticket(self, api_client: APIClient, db_event, rsvp_tier):
        ticket_id = purchase(api_client, db_event, rsvp_tier).json()["tickets"][0]["id"]

        response = api_client.post(
            f"/api/tickets/{ticket_id}/cancel", {"reason": "Plans changed"}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["payment_status"] == "cancelled"
        assert response.json()["cancelled_at"] is not None

    def test_paid_ticket_cannot_be_cancelled(self, api_client: APIClient, db_event, ga_tier):
        body = purchase(api_client, db_event, ga_tier).json()
        webhook(api_client, "payment.succeeded", body["payment_intent_id"])

        response = api_client.post(
            f"/api/tickets/{body['tickets'][0]['id']}/cancel", {}, format="json"
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "TICKET_NOT_CANCELLABLE"

    def test_check_in_once(self, api_client: APIClient, db_event, rsvp_tier):
        ticket_id = purchase(api_client, db_event, rsvp_tier).json()["tickets"][0]["id"]

        first = api_client.post(f"/api/tickets/{ticket_id}/check-in")
        second = api_client.post(f"/api/tickets/{ticket_id}/check-in")

        assert first.status_code == 200
        assert first.json()["is_checked_in"] is True
        assert second.status_code == 409
        assert second.json()["error"]["code"] == "ALREADY_CHECKED_IN"

    def test_check_in_unknown_ticket(self, api_client: APIClient):
        response = api_client.post(f"/api/tickets/{MISSING_ID}/check-in")
        assert response.status_code == 404


@pytest.mark.django_db
class TestWaitlistAndSales:
    def test_join_waitlist(self, api_client: APIClient, db_event, rsvp_tier):
        url = f"/api/events/{db_event.id}/waitlist"
        body = {"email": "Sam@Example.com", "tier_id": str(rsvp_tier.id)}

        first = api_client.post(url, body, format="json")
        again = api_client.post(url, body, format="json")

        assert first.status_code == 201
        assert first.json()["position"] == 1
        assert first.json()["email"] == "sam@example.com"
        assert again.status_code == 409
        assert again.json()["error"]["code"] == "ALREADY_ON_WAITLIST"

    def test_invalid_email(self, api_client: APIClient, db_event):
        response = api_client.post(
            f"/api/events/{db_event.id}/waitlist", {"email": "nope"}, format="json"
        )
        assert response.status_code == 400

    def test_sales_summary(self, api_client: APIClient, db_event, ga_tier, rsvp_tier):
        intent = purchase(api_client, db_event, ga_tier, 2).json()["payment_intent_id"]
        webhook(api_client, "payment.succeeded", intent)
        purchase(api_client, db_event, rsvp_tier)
        purchase(api_client, db_event, ga_tier)

        response = api_client.get(f"/api/events/{db_event.id}/sales")

        assert response.status_code == 200
        assert response.json() == {
            "tickets_sold": 3,
            "gross_charged": "105.00",
            "service_fees": "5.00",
            "host_payout": "100.00",
            "checked_in": 0,
        }
