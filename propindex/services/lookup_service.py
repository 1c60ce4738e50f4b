import logging
from typing import Any

from ..core.cache import ResponseCache
from ..core.clock import Clock, SystemClock, isoformat
from ..core.config import Settings
from ..core.errors import GatewayError, RateLimitExceeded, UnknownError
from ..core.metrics import LOOKUP_OUTCOMES
from ..core.security import RateLimiter
from ..core.utils import canonical_key
from ..data.base import SalesClient
from ..data.sales_client import sales_client
from ..schemas import EndpointInfo, LookupResult
from .insights import compute_insights
from .transform import transform_sales
from .validation import validate_lookup

logger = logging.getLogger(__name__)

class PropertyLookupService:
    """
    Orchestrates:
      body → validate → rate limit → cache → PropertyData → transform → insights
    Owns the limiter and response cache; each instance has its own state
    and clock.
    """
    def __init__(
        self,
        client: SalesClient,
        cache: ResponseCache,
        limiter: RateLimiter,
        clock: Clock | None = None,
        version: str = "2.0",
    ):
        self.client = client
        self.cache = cache
        self.limiter = limiter
        self.clock = clock or SystemClock()
        self.version = version

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock | None = None) -> "PropertyLookupService":
        clock = clock or SystemClock()
        return cls(
            client=sales_client(settings),
            cache=ResponseCache(settings.CACHE_TTL_SECONDS, settings.CACHE_MAX_ENTRIES, clock=clock),
            limiter=RateLimiter(settings.RATE_LIMIT_RPM, settings.RATE_LIMIT_WINDOW_SECONDS, clock=clock),
            clock=clock,
            version=settings.API_VERSION,
        )

    async def lookup(self, payload: Any, client_key: str) -> LookupResult:
        try:
            result = await self._lookup(payload, client_key)
        except GatewayError as exc:
            LOOKUP_OUTCOMES.labels(outcome=exc.outcome).inc()
            logger.warning("Lookup failed | outcome=%s client=%s | %s", exc.outcome, client_key, exc)
            raise
        except Exception as exc:
            LOOKUP_OUTCOMES.labels(outcome=UnknownError.outcome).inc()
            logger.exception("Lookup failed unexpectedly | client=%s", client_key)
            raise UnknownError(str(exc)) from exc
        LOOKUP_OUTCOMES.labels(outcome="cache_hit" if result.cached else "ok").inc()
        return result

    async def _lookup(self, payload: Any, client_key: str) -> LookupResult:
        # 1) Validate
        request = validate_lookup(payload)

        # 2) Rate limit
        if not self.limiter.admit(client_key):
            raise RateLimitExceeded(f"client {client_key} exceeded {self.limiter.limit} requests")

        # 3) Cache
        key = canonical_key(request.model_dump())
        cached = self.cache.get(key)
        if cached is not None:
            return cached.model_copy(update={"cached": True, "timestamp": isoformat(self.clock())})

        # 4) Upstream
        raw = await self.client.search_sales(request)

        # 5) Transform + insights
        now_iso = isoformat(self.clock())
        properties = transform_sales(raw, now_iso)
        result = LookupResult(
            properties=properties,
            insights=compute_insights(properties),
            total=len(properties),
            postcode=request.postcode,
            source=self.client.source,
            timestamp=now_iso,
            cached=False,
        )
        logger.info("Lookup served | postcode=%s total=%d source=%s", request.postcode, result.total, result.source)

        # 6) Cache for repeat queries
        self.cache.put(key, result)
        return result

    def describe(self) -> EndpointInfo:
        window = self.limiter.window_seconds
        per = "minute" if window == 60 else f"{window:g} seconds"
        return EndpointInfo(
            version=self.version,
            endpoints={"POST": "/api/properties - Fetch property data"},
            rate_limit=f"{self.limiter.limit} requests per {per}",
            cache_time=f"{self.cache.ttl_seconds} seconds",
        )
