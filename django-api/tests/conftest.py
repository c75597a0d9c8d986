"""Pytest configuration and shared fixtures."""

import random
from datetime import datetime, timedelta

import pytest
from rest_framework.test import APIClient

from tests.factories import NOW
from ticketing.services import CatalogService, PurchaseService, WaitlistService
from ticketing.stores import InMemoryTicketingStore


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def store() -> InMemoryTicketingStore:
    return InMemoryTicketingStore()


@pytest.fixture
def catalog(store) -> CatalogService:
    return CatalogService(store, clock=lambda: NOW)


@pytest.fixture
def purchases(store) -> PurchaseService:
    return PurchaseService(store, rng=random.Random(7), clock=lambda: NOW)


@pytest.fixture
def waitlist(store) -> WaitlistService:
    return WaitlistService(store, clock=lambda: NOW)


@pytest.fixture
def event(catalog):
    return catalog.create_event("Summer Gala", starts_at=NOW + timedelta(days=30))


@pytest.fixture
def paid_tier(catalog, event):
    return catalog.add_tier(event.id, "General Admission", "50", capacity=100)


@pytest.fixture
def free_tier(catalog, event):
    return catalog.add_tier(event.id, "RSVP", "0", capacity=3)
