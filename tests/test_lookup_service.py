"""Tests for the lookup pipeline: validate → limit → cache → upstream → transform → insights."""

import asyncio

import httpx
import pytest

from propindex.core.config import Settings
from propindex.core.errors import (
    ConfigurationError, RateLimitExceeded, UnknownError, UpstreamError, UpstreamTimeout, ValidationError,
)
from propindex.data.sales_client import MockSales
from propindex.services.lookup_service import PropertyLookupService

from conftest import FakeProvider


class TestHappyPath:
    @pytest.mark.asyncio
    async def test_fresh_then_cached(self, make_service, provider, clock):
        svc = make_service(provider)

        first = await svc.lookup({"postcode": "SW1A 1AA", "limit": 5}, "1.2.3.4")
        assert first.success is True
        assert first.total == 3
        assert first.insights.average_price == 300000
        assert first.insights.median_price == 300000
        assert first.cached is False
        assert first.postcode == "SW1A1AA"
        assert first.source == "PropertyData.co.uk"
        assert provider.calls == 1

        clock.advance(5)
        second = await svc.lookup({"postcode": "SW1A 1AA", "limit": 5}, "1.2.3.4")
        assert second.cached is True
        assert second.timestamp != first.timestamp
        assert second.properties == first.properties
        assert second.insights == first.insights
        assert provider.calls == 1

    @pytest.mark.asyncio
    async def test_cache_hit_does_not_mutate_stored_entry(self, make_service, provider):
        svc = make_service(provider)
        first = await svc.lookup({"postcode": "SW1A 1AA"}, "c")
        await svc.lookup({"postcode": "SW1A 1AA"}, "c")
        assert first.cached is False

    @pytest.mark.asyncio
    async def test_normalized_postcodes_share_cache(self, make_service, provider):
        svc = make_service(provider)
        await svc.lookup({"postcode": "sw1a 1aa"}, "c")
        again = await svc.lookup({"postcode": "SW1A1AA"}, "c")
        assert again.cached is True
        assert provider.calls == 1

    @pytest.mark.asyncio
    async def test_cache_expires(self, make_service, provider, clock):
        svc = make_service(provider)
        await svc.lookup({"postcode": "SW1A 1AA"}, "c")
        clock.advance(301)
        result = await svc.lookup({"postcode": "SW1A 1AA"}, "c")
        assert result.cached is False
        assert provider.calls == 2

    @pytest.mark.asyncio
    async def test_properties_keep_upstream_order(self, make_service, provider):
        svc = make_service(provider)
        result = await svc.lookup({"postcode": "SW1A 1AA"}, "c")
        assert [p.id for p in result.properties] == ["a", "b", "c"]
        assert result.insights.price_range.min == 100000
        assert result.insights.price_range.max == 500000
        assert result.insights.property_types == {"Detached": 1, "Flat": 2}
        assert result.insights.average_time_on_market == 20

    @pytest.mark.asyncio
    async def test_empty_upstream(self, make_service):
        svc = make_service(FakeProvider({}))
        result = await svc.lookup({"postcode": "SW1A 1AA"}, "c")
        assert result.total == 0
        assert result.properties == []
        assert result.insights.average_price == 0


class TestFailures:
    @pytest.mark.asyncio
    async def test_validation_before_rate_limit(self, make_service, provider):
        svc = make_service(provider, limit=1)
        with pytest.raises(ValidationError):
            await svc.lookup({"postcode": "bad"}, "c")
        # The rejected body did not use up the client's only slot
        await svc.lookup({"postcode": "SW1A 1AA"}, "c")

    @pytest.mark.asyncio
    async def test_rate_limit(self, make_service, provider):
        svc = make_service(provider)
        for _ in range(10):
            await svc.lookup({"postcode": "SW1A 1AA"}, "1.2.3.4")
        with pytest.raises(RateLimitExceeded):
            await svc.lookup({"postcode": "SW1A 1AA"}, "1.2.3.4")
        assert provider.calls == 1

    @pytest.mark.asyncio
    async def test_rate_limit_recovers(self, make_service, provider, clock):
        svc = make_service(provider)
        for _ in range(10):
            await svc.lookup({"postcode": "SW1A 1AA"}, "1.2.3.4")
        clock.advance(61)
        result = await svc.lookup({"postcode": "SW1A 1AA"}, "1.2.3.4")
        assert result.total == 3

    @pytest.mark.asyncio
    async def test_timeout(self, make_service):
        async def slow(request):
            await asyncio.sleep(5)
            return httpx.Response(200, json={"data": []})

        svc = make_service(slow, timeout_seconds=0.05)
        with pytest.raises(UpstreamTimeout) as exc:
            await svc.lookup({"postcode": "SW1A 1AA"}, "c")
        assert exc.value.status_code == 408

    @pytest.mark.asyncio
    async def test_upstream_error_not_cached(self, make_service):
        provider = FakeProvider({"error": "boom"}, status_code=502)
        svc = make_service(provider)
        with pytest.raises(UpstreamError):
            await svc.lookup({"postcode": "SW1A 1AA"}, "c")
        with pytest.raises(UpstreamError):
            await svc.lookup({"postcode": "SW1A 1AA"}, "c")
        assert provider.calls == 2

    @pytest.mark.asyncio
    async def test_missing_credentials(self, make_service, provider):
        svc = make_service(provider, api_key="")
        with pytest.raises(ConfigurationError):
            await svc.lookup({"postcode": "SW1A 1AA"}, "c")

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self, make_service):
        def explode(request):
            raise RuntimeError("bug")

        svc = make_service(explode)
        with pytest.raises(UnknownError):
            await svc.lookup({"postcode": "SW1A 1AA"}, "c")


class TestDescribe:
    def test_describe(self, make_service, provider):
        info = make_service(provider).describe()
        assert info.version == "2.0"
        assert info.rate_limit == "10 requests per minute"
        assert info.cache_time == "300 seconds"
        assert "POST" in info.endpoints


class TestFromSettings:
    @pytest.mark.asyncio
    async def test_mock_provider(self, clock):
        svc = PropertyLookupService.from_settings(Settings(SALES_PROVIDER="mock"), clock=clock)
        assert isinstance(svc.client, MockSales)
        result = await svc.lookup({"postcode": "N1 9GU", "limit": 3}, "c")
        assert result.source == "mock"
        assert result.total == 3
