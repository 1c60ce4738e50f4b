"""
Consumer side of the lookup API: what the recent-sales ticker does with it.

None of this is part of the gateway contract. The ticker fetches a batch,
falls back to clearly-flagged placeholder data when the gateway cannot be
reached, and re-filters what it already holds by sale age and price bucket.
"""
import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator, Dict, List

import httpx

from ..core.clock import Clock, SystemClock, isoformat
from ..core.utils import seeded_rand

logger = logging.getLogger(__name__)

TIME_FILTER_DAYS = {"24hours": 1, "7days": 7, "30days": 30}
PRICE_FILTERS = ("all", "under500k", "500k-1m", "over1m")

PLACEHOLDER_ADDRESSES = [
    "123 Oak Street, SW1A 1AA",
    "45 Victoria Road, W1K 3TD",
    "78 Mill Lane, E1 6AN",
    "12 Church Close, N1 9GU",
    "34 High Street, SE1 9SG",
    "56 Park Avenue, WC1H 9JP",
    "89 Green Road, EC1A 4HD",
    "23 Kings Way, SW7 2AZ",
    "67 Queens Gate, NW1 4RY",
    "91 Baker Street, W1U 6QW",
]
PLACEHOLDER_IMAGE = "https://images.unsplash.com/photo-1560184318-d4c4b2e0e5d4?w=300&h=200&fit=crop&auto=format"

@dataclass
class TickerBatch:
    properties: List[Dict[str, Any]] = field(default_factory=list)
    # True when the gateway call failed and these are generated samples
    placeholder: bool = False

def placeholder_properties(count: int = 20, seed: int = 0, now: float | None = None) -> List[Dict[str, Any]]:
    """Deterministic sample sales, each marked ``placeholder: True``."""
    now = SystemClock()() if now is None else now
    out = []
    for i in range(count):
        r = seeded_rand(seed + i * 97, 7)
        address = PLACEHOLDER_ADDRESSES[int(r[0] * len(PLACEHOLDER_ADDRESSES))]
        out.append({
            "id": f"placeholder_{i + 1}",
            "address": address,
            "postcode": address.split(", ")[1],
            "soldPrice": int(r[1] * 800_000) + 200_000,
            "originalPrice": int(r[2] * 900_000) + 250_000,
            "soldDate": isoformat(now - r[3] * 30 * 86400),
            "image": PLACEHOLDER_IMAGE,
            "timeOnMarket": int(r[4] * 90) + 7,
            "propertyType": "House",
            "bedrooms": int(r[5] * 5) + 1,
            "placeholder": True,
        })
    return out

def _parse_date(value: Any) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)

def filter_properties(
    properties: List[Dict[str, Any]],
    time_filter: str = "7days",
    price_filter: str = "all",
    now: float | None = None,
) -> List[Dict[str, Any]]:
    """
    Keep records sold within `time_filter` (24hours | 7days | 30days | all)
    and priced inside `price_filter` (all | under500k | 500k-1m | over1m).
    Records with an unreadable sale date only survive the `all` time filter.
    """
    current = datetime.fromtimestamp(SystemClock()() if now is None else now, tz=timezone.utc)
    max_days = TIME_FILTER_DAYS.get(time_filter)
    kept = []
    for prop in properties:
        if max_days is not None:
            sold = _parse_date(prop.get("soldDate"))
            if sold is None:
                continue
            days_since = math.floor((current - sold) / timedelta(days=1))
            if days_since > max_days:
                continue

        price = prop.get("soldPrice") or 0
        if price_filter == "under500k" and not price < 500_000:
            continue
        if price_filter == "500k-1m" and not 500_000 <= price < 1_000_000:
            continue
        if price_filter == "over1m" and not price >= 1_000_000:
            continue
        kept.append(prop)
    return kept

def format_price(price: float) -> str:
    if price >= 1_000_000:
        return f"£{price / 1_000_000:.1f}M"
    if price >= 1_000:
        return f"£{price / 1_000:.0f}K"
    return f"£{price:,.0f}"

def format_price_change(sold_price: float, original_price: float) -> str | None:
    """'+4.2%' / '-3.1%' against the asking price; None when unchanged or unknown."""
    change = sold_price - original_price
    if change == 0 or not original_price:
        return None
    pct = change / original_price * 100
    return f"+{pct:.1f}%" if change > 0 else f"{pct:.1f}%"

class TickerFeed:
    """
    Pulls recent sales for the ticker from the lookup API.
    Never raises: a failed call yields placeholder data flagged as such.
    """
    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 15,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Clock | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.transport = transport
        self.clock = clock or SystemClock()

    async def fetch(self, postcode: str, limit: int = 20) -> TickerBatch:
        body = {"postcode": postcode, "limit": limit, "timeframe": "90days"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
                r = await client.post(f"{self.base_url}/api/properties", json=body)
                r.raise_for_status()
                data = r.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Lookup API unavailable, using placeholder sales | %s", exc)
            return TickerBatch(placeholder_properties(now=self.clock()), placeholder=True)
        properties = data.get("properties") if isinstance(data, dict) else None
        return TickerBatch(properties or [], placeholder=False)

    async def watch(self, postcode: str, interval_seconds: float = 300, limit: int = 20) -> AsyncIterator[TickerBatch]:
        """Yield a batch now and then one every `interval_seconds`."""
        while True:
            yield await self.fetch(postcode, limit)
            await asyncio.sleep(interval_seconds)
