import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import httpx

from .base import PERIODS, SALES_INCLUDE, RawSalesPayload, SalesClient
from ..core.clock import Clock, SystemClock
from ..core.config import Settings
from ..core.errors import ConfigurationError, UpstreamError, UpstreamTimeout
from ..core.metrics import UPSTREAM_LATENCY
from ..core.utils import fnv1a_32, seeded_rand
from ..schemas import LookupRequest

logger = logging.getLogger(__name__)

PERIOD_DAYS = {"24hours": 1, "7days": 7, "30days": 30, "90days": 90}

def build_search_body(request: LookupRequest) -> Dict[str, Any]:
    """Request body for POST /sales. Price filters only appear when supplied."""
    filters: Dict[str, Any] = {}
    if request.price_min is not None:
        filters["price_min"] = request.price_min
    if request.price_max is not None:
        filters["price_max"] = request.price_max
    return {
        "postcode": request.postcode,
        "limit": request.limit,
        "period": PERIODS[request.timeframe],
        "include": list(SALES_INCLUDE),
        "filters": filters,
    }

class PropertyDataSales(SalesClient):
    """
    Client for the PropertyData sales-search endpoint.
    One attempt per lookup; the whole exchange is bounded by `timeout_seconds`.
    """
    source = "PropertyData.co.uk"

    def __init__(
        self,
        base_url: str,
        api_key: str | None,
        timeout_seconds: float = 10,
        user_agent: str = "PropIndex/2.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self.transport = transport

    async def search_sales(self, request: LookupRequest) -> RawSalesPayload:
        if not self.api_key:
            raise ConfigurationError("PropertyData API key not configured")

        body = build_search_body(request)
        start = time.perf_counter()
        try:
            r = await asyncio.wait_for(self._post(body), timeout=self.timeout_seconds)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("PropertyData timed out after %.1fs | postcode=%s", self.timeout_seconds, request.postcode)
            raise UpstreamTimeout(f"PropertyData did not answer within {self.timeout_seconds}s") from exc
        except httpx.HTTPError as exc:
            logger.warning("PropertyData transport failure | %s", exc)
            raise UpstreamError(None, str(exc) or type(exc).__name__) from exc
        finally:
            UPSTREAM_LATENCY.observe(time.perf_counter() - start)

        if not r.is_success:
            logger.warning("PropertyData returned %s | postcode=%s", r.status_code, request.postcode)
            raise UpstreamError(r.status_code, r.text)
        try:
            return r.json()
        except ValueError as exc:
            raise UpstreamError(r.status_code, "response body is not JSON") from exc

    async def _post(self, body: Dict[str, Any]) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
            return await client.post(f"{self.base_url}/sales", json=body, headers=headers)

class MockSales(SalesClient):
    """
    Synthetic sales for a postcode, shaped like the provider's payload.
    Prices/attributes are plausible but fake.
    """
    source = "mock"

    STREETS = ["Oak Street", "Victoria Road", "Mill Lane", "Church Close", "High Street",
               "Park Avenue", "Green Road", "Kings Way", "Queens Gate", "Baker Street"]
    TYPES = ["Detached", "Semi-Detached", "Terraced", "Flat"]

    def __init__(self, clock: Clock | None = None):
        self.clock = clock or SystemClock()

    async def search_sales(self, request: LookupRequest) -> RawSalesPayload:
        seed = fnv1a_32(request.postcode)
        now = datetime.fromtimestamp(self.clock(), tz=timezone.utc)
        max_age = PERIOD_DAYS[request.timeframe]
        out: List[Dict[str, Any]] = []
        for i in range(request.limit):
            price = 200_000 + int(seeded_rand(seed+i*31, 1)[0] * 800_000)
            asking = int(price * (0.95 + seeded_rand(seed+i*37, 1)[0] * 0.1))
            sold = now - timedelta(days=seeded_rand(seed+i, 1)[0] * max_age)
            days = 7 + int(seeded_rand(seed+i*41, 1)[0] * 90)
            out.append({
                "id": f"mock_{request.postcode}_{i}",
                "house_number": str(1 + int(seeded_rand(seed+i*7, 1)[0] * 120)),
                "street_name": self.STREETS[int(seeded_rand(seed+i*11, 1)[0] * len(self.STREETS))],
                "postcode": request.postcode,
                "sale_price": price,
                "original_asking_price": asking,
                "sale_date": sold.isoformat(),
                "days_on_market": days,
                "property_type": self.TYPES[i % len(self.TYPES)],
                "bedrooms": 1 + int(seeded_rand(seed+i*13, 1)[0] * 5),
                "bathrooms": 1 + int(seeded_rand(seed+i*17, 1)[0] * 3),
                "tenure": "Freehold" if i % 4 != 3 else "Leasehold",
            })
        return {"data": out}

def sales_client(settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> SalesClient:
    """
    Factory picks mock or http based on env flags.
    """
    if settings.SALES_PROVIDER == "mock":
        return MockSales()
    return PropertyDataSales(
        settings.PROPERTYDATA_BASE_URL,
        settings.PROPERTYDATA_API_KEY,
        timeout_seconds=settings.UPSTREAM_TIMEOUT_SECONDS,
        user_agent=settings.USER_AGENT,
        transport=transport,
    )
