from collections import Counter
from typing import Sequence

from ..schemas import Insights, PriceRange, PropertyRecord

def compute_insights(records: Sequence[PropertyRecord]) -> Insights:
    """
    Summary statistics over one lookup's records.

    medianPrice is the element at floor(N/2) of the ascending price order,
    i.e. the upper median for even N. Empty input yields zeros and an open
    price range (min/max null). `records` is left in its original order.
    """
    n = len(records)
    if n == 0:
        return Insights()

    prices = [r.sold_price for r in records]
    by_price = sorted(prices)
    return Insights(
        average_price=sum(prices) / n,
        median_price=by_price[n // 2],
        average_time_on_market=sum(r.time_on_market or 0 for r in records) / n,
        price_range=PriceRange(min=by_price[0], max=by_price[-1]),
        property_types=dict(Counter(r.property_type for r in records)),
    )
