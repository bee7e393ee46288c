from __future__ import annotations

from collections import Counter
from typing import Iterable

from services.listings.models import Listing, MarketSummary

TOP_LOCATION_LIMIT = 10


def summarize_market(listings: Iterable[Listing], *, source: str = "all") -> MarketSummary:
    data = list(listings)
    total = len(data)
    prices = [listing.price for listing in data if listing.price > 0]
    locations = Counter(listing.location for listing in data if listing.location)
    # most_common keeps first-seen order on ties
    top_locations = dict(locations.most_common(TOP_LOCATION_LIMIT))
    private_rooms = sum(1 for listing in data if listing.private_room)
    private_baths = sum(1 for listing in data if listing.private_bath)
    return MarketSummary(
        source=source,
        total_listings=total,
        source_counts=dict(Counter(listing.source for listing in data)),
        price_min=min(prices) if prices else None,
        price_max=max(prices) if prices else None,
        price_average=round(sum(prices) / len(prices)) if prices else None,
        housing_types=dict(Counter(listing.housing_type.value for listing in data)),
        top_locations=top_locations,
        private_room_count=private_rooms,
        private_bath_count=private_baths,
        private_room_pct=round(private_rooms / total * 100) if total else 0,
        private_bath_pct=round(private_baths / total * 100) if total else 0,
    )
