"""Shared fixtures for the KREIT test suite.

Provides a FastAPI test client wired to an in-memory store and
hand-rolled fakes for the property provider and insights model.
No real ATTOM, OpenAI, Supabase or Stripe traffic.
"""

import os
from datetime import timedelta

import pytest

# Settings read the environment at import time; pin a safe offline config first
os.environ["ENV"] = "test"
os.environ["STORE_PROVIDER"] = "memory"
os.environ["PROPERTY_PROVIDER"] = "mock"
os.environ["INSIGHTS_PROVIDER"] = "mock"

from fastapi.testclient import TestClient  # noqa: E402

from kreit.core.config import Settings  # noqa: E402
from kreit.core.errors import StoreError  # noqa: E402
from kreit.data.base import CallerIdentity  # noqa: E402
from kreit.data.store import MemoryStore  # noqa: E402
from kreit.main import create_app  # noqa: E402
from kreit.models.base import Insights, coerce_insights  # noqa: E402
from kreit.services.checkout_service import CheckoutService  # noqa: E402
from kreit.services.registry import Services  # noqa: E402
from kreit.services.score_service import ScoreService  # noqa: E402


class FakeProperties:
    """Property provider that records the addresses it was asked for."""

    def __init__(self, payload=None, error=None):
        self.payload = payload if payload is not None else {"property": [{"id": 1}]}
        self.error = error
        self.calls = []

    async def fetch(self, raw_address):
        self.calls.append(raw_address)
        if self.error is not None:
            raise self.error
        return self.payload


class FakeInsights:
    """Insights model returning a fixed model output, run through the fallback policy."""

    def __init__(self, output=None, error=None):
        self.output = output if output is not None else {
            "kreit_score": 72,
            "simple_summary": "A solid starter home.",
            "pro_summary": "Stable fundamentals.",
            "premium_data": {"rental_potential": {"monthly": 2100}},
        }
        self.error = error
        self.calls = []

    async def generate(self, property_data):
        self.calls.append(property_data)
        if self.error is not None:
            raise self.error
        if isinstance(self.output, Insights):
            return self.output
        return coerce_insights(self.output)


class BrokenStore(MemoryStore):
    """Store whose cache table is unreachable; sessions still work."""

    def __init__(self):
        super().__init__()
        self.upserts = 0

    async def get(self, normalized_address):
        raise StoreError(detail="connection refused")

    async def upsert(self, record):
        self.upserts += 1
        return False


def make_services(store=None, properties=None, insights=None, checkout=None):
    store = store if store is not None else MemoryStore()
    properties = properties or FakeProperties()
    insights = insights or FakeInsights()
    return Services(
        store=store,
        properties=properties,
        insights=insights,
        scores=ScoreService(store, properties, insights, freshness=timedelta(days=90)),
        checkout=checkout or CheckoutService("sk_test_123", "price_123"),
    )


@pytest.fixture()
def settings():
    return Settings(
        ENV="test",
        STORE_PROVIDER="memory",
        PROPERTY_PROVIDER="mock",
        INSIGHTS_PROVIDER="mock",
        STRIPE_SECRET_KEY="sk_test_123",
        STRIPE_PRICE_ID="price_123",
        PROMETHEUS_ENABLED=False,
    )


@pytest.fixture()
def store():
    s = MemoryStore()
    s.sessions["premium-token"] = CallerIdentity(user_id="user-premium")
    s.sessions["free-token"] = CallerIdentity(user_id="user-free")
    s.premium_users.add("user-premium")
    return s


@pytest.fixture()
def properties():
    return FakeProperties()


@pytest.fixture()
def insights():
    return FakeInsights()


@pytest.fixture()
def services(store, properties, insights):
    return make_services(store, properties, insights)


@pytest.fixture()
def client(settings, services):
    app = create_app(settings, services)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
