"""Shared test fixtures and configuration."""

import os

import httpx
import pytest

# No real provider credentials during tests
os.environ.setdefault("PROPERTYDATA_API_KEY", "")

from propindex.core.cache import ResponseCache
from propindex.core.clock import ManualClock
from propindex.core.security import RateLimiter
from propindex.data.sales_client import PropertyDataSales
from propindex.services.lookup_service import PropertyLookupService


class FakeProvider:
    """Records outbound calls and answers with a canned PropertyData payload."""

    def __init__(self, payload=None, status_code=200):
        self.payload = payload if payload is not None else {"data": []}
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def calls(self) -> int:
        return len(self.requests)


def sale(**overrides):
    record = {
        "id": "ps_1",
        "full_address": "10 Downing Street, London",
        "postcode": "SW1A 2AA",
        "sale_price": 250000,
        "original_asking_price": 260000,
        "sale_date": "2024-05-01",
        "images": [{"url": "https://img.example/1.jpg"}],
        "days_on_market": 30,
        "property_type": "Terraced",
        "bedrooms": 3,
        "bathrooms": 1,
        "estate_agent": {"name": "Foxtons"},
        "price_changes": -10000,
        "tenure": "Freehold",
        "epc_rating": "C",
        "price_per_sqft": 412.5,
        "market_trend": "rising",
    }
    record.update(overrides)
    return record


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def sample_sales():
    """Three provider records priced 100k / 300k / 500k, out of price order."""
    return {
        "data": [
            sale(id="a", sale_price=500000, property_type="Detached", days_on_market=10),
            sale(id="b", sale_price=100000, property_type="Flat", days_on_market=None),
            sale(id="c", sale_price=300000, property_type="Flat", days_on_market=50),
        ]
    }


@pytest.fixture
def provider(sample_sales):
    return FakeProvider(sample_sales)


@pytest.fixture
def make_service(clock):
    def _make(handler, api_key="test-key", timeout_seconds=10, limit=10):
        client = PropertyDataSales(
            "https://api.propertydata.test",
            api_key,
            timeout_seconds=timeout_seconds,
            transport=httpx.MockTransport(handler),
        )
        return PropertyLookupService(
            client=client,
            cache=ResponseCache(ttl_seconds=300, clock=clock),
            limiter=RateLimiter(limit=limit, window_seconds=60, clock=clock),
            clock=clock,
        )
    return _make
