"""Provider sale records → PropertyRecord.

The provider's fields are loosely typed and frequently missing. Mapping is
total: a field that is absent, empty, zero or of the wrong shape falls back
to its default and is listed in ``PropertyRecord.defaulted_fields``. A bad
record degrades, it never sinks the list.
"""

import math
from typing import Any

from ..schemas import PropertyRecord

def _text(v: Any) -> str | None:
    if isinstance(v, bool):
        return None
    if isinstance(v, str):
        return v or None
    if isinstance(v, int):
        return str(v) if v else None
    if isinstance(v, float):
        return str(v) if v and math.isfinite(v) else None
    return None

def _number(v: Any) -> int | float | None:
    if isinstance(v, bool):
        return None
    if isinstance(v, str):
        try:
            v = float(v.replace(",", "").strip())
        except ValueError:
            return None
    if isinstance(v, int):
        return v or None
    if isinstance(v, float):
        if not v or not math.isfinite(v):
            return None
        return int(v) if v.is_integer() else v
    return None

def _count(v: Any) -> int | None:
    n = _number(v)
    if n is None or n != int(n):
        return None
    return int(n)

def _first(*values: Any) -> Any:
    for v in values:
        if v is not None:
            return v
    return None

def _first_image(prop: dict) -> str | None:
    images = prop.get("images")
    if isinstance(images, list) and images and isinstance(images[0], dict):
        url = _text(images[0].get("url"))
        if url:
            return url
    return _text(prop.get("main_image"))

def _agent_name(prop: dict) -> str | None:
    agent = prop.get("estate_agent")
    return _text(agent.get("name")) if isinstance(agent, dict) else None

def transform_property(prop: Any, index: int, now_iso: str) -> PropertyRecord:
    """Map one raw sale record; ``now_iso`` stands in for a missing sale date."""
    if not isinstance(prop, dict):
        prop = {}
    defaulted: list[str] = []

    def pick(field: str, value: Any, default: Any) -> Any:
        if value is None:
            defaulted.append(field)
            return default
        return value

    address = _text(prop.get("full_address"))
    if address is None:
        street = _text(prop.get("street_name"))
        if street is None:
            defaulted.append("address")
        address = f"{_text(prop.get('house_number')) or ''} {street or 'Unknown Street'}".strip()

    sale_price = _number(prop.get("sale_price"))
    days_on_market = _count(prop.get("days_on_market"))

    fields = {
        "id": pick("id", _text(prop.get("id")), f"prop_{index}"),
        "address": address,
        "postcode": pick("postcode", _text(prop.get("postcode")), None),
        "sold_price": pick("soldPrice", _first(sale_price, _number(prop.get("price"))), 0),
        "original_price": pick("originalPrice", _first(_number(prop.get("original_asking_price")), sale_price), 0),
        # A missing sale date is replaced by the lookup time, not the real completion date
        "sold_date": pick("soldDate", _first(_text(prop.get("sale_date")), _text(prop.get("completion_date"))), now_iso),
        "image": pick("image", _first_image(prop), None),
        "time_on_market": pick("timeOnMarket", days_on_market, None),
        "property_type": pick("propertyType", _text(prop.get("property_type")), "Unknown"),
        "bedrooms": pick("bedrooms", _count(prop.get("bedrooms")), None),
        "bathrooms": pick("bathrooms", _count(prop.get("bathrooms")), None),
        "agent": pick("agent", _agent_name(prop), "Unknown Agent"),
        "price_change": pick("priceChange", _number(prop.get("price_changes")), 0),
        "tenure": pick("tenure", _text(prop.get("tenure")), "Unknown"),
        "epc_rating": pick("epcRating", _text(prop.get("epc_rating")), None),
        "price_per_sq_ft": pick("pricePerSqFt", _number(prop.get("price_per_sqft")), None),
        "market_trend": pick("marketTrend", _text(prop.get("market_trend")), "stable"),
        "days_on_market": pick("daysOnMarket", days_on_market, None),
    }
    return PropertyRecord(**fields, defaulted_fields=defaulted)

def transform_sales(raw: Any, now_iso: str) -> list[PropertyRecord]:
    """Normalize a whole provider payload. Anything without a ``data`` list is empty."""
    if not isinstance(raw, dict):
        return []
    data = raw.get("data")
    if not isinstance(data, list):
        return []
    return [transform_property(p, i, now_iso) for i, p in enumerate(data)]
