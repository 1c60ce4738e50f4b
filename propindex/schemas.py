from typing import Annotated, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .core.utils import UK_POSTCODE, normalize_postcode

Timeframe = Literal["24hours", "7days", "30days", "90days"]
Price = Annotated[float, Field(strict=True, allow_inf_nan=False)]

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class LookupRequest(CamelModel):
    postcode: str
    # JSON numbers only: no "5" strings or booleans, no NaN/Infinity
    limit: int = Field(default=20, ge=1, le=50, strict=True)
    timeframe: Timeframe = "30days"
    price_min: Price | None = None
    price_max: Price | None = None

    @field_validator("postcode")
    @classmethod
    def uk_postcode(cls, v: str) -> str:
        if not UK_POSTCODE.match(v.strip()):
            raise ValueError("Invalid UK postcode")
        return normalize_postcode(v)

class PropertyRecord(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    address: str
    postcode: str | None = None
    sold_price: int | float = 0
    original_price: int | float = 0
    sold_date: str
    image: str | None = None
    time_on_market: int | None = None
    property_type: str = "Unknown"
    bedrooms: int | None = None
    bathrooms: int | None = None
    agent: str = "Unknown Agent"
    price_change: int | float = 0
    tenure: str = "Unknown"
    epc_rating: str | None = None
    # Market analytics
    price_per_sq_ft: float | None = Field(default=None, alias="pricePerSqFt")
    market_trend: str = "stable"
    days_on_market: int | None = None
    # Output fields that fell back to a default
    defaulted_fields: list[str] = Field(default_factory=list)

class PriceRange(BaseModel):
    min: int | float | None = None
    max: int | float | None = None

class Insights(CamelModel):
    average_price: float = 0
    median_price: int | float = 0
    average_time_on_market: float = 0
    price_range: PriceRange = Field(default_factory=PriceRange)
    property_types: dict[str, int] = Field(default_factory=dict)

class LookupResult(CamelModel):
    success: bool = True
    properties: list[PropertyRecord]
    insights: Insights
    total: int
    postcode: str
    source: str
    timestamp: str
    cached: bool = False

class EndpointInfo(CamelModel):
    message: str = "PropertyData API endpoint"
    version: str
    endpoints: dict[str, str]
    rate_limit: str
    cache_time: str
