from typing import Any, Dict, Protocol

from ..schemas import LookupRequest

# ----- Provider vocabulary -----

# Sub-resources requested alongside each sale record
SALES_INCLUDE = ("property_details", "sale_details", "images", "market_trends")

# Lookup timeframe → provider `period` value
PERIODS = {
    "24hours": "24hours",
    "7days": "7days",
    "30days": "30days",
    "90days": "90days",
}

# Raw provider payload: {"data": [ {...loosely typed sale...}, ... ], ...}
RawSalesPayload = Dict[str, Any]

# ----- Protocols (interfaces) -----

class SalesClient(Protocol):
    # Label reported as LookupResult.source
    source: str

    async def search_sales(self, request: LookupRequest) -> RawSalesPayload: ...
