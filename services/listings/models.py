from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from services.common.enums import HousingType


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Listing:
    listing_id: str
    title: str
    price: float
    bedrooms: float = 0
    bathrooms: float = 0
    housing_type: HousingType = HousingType.unknown
    private_room: bool = False
    private_bath: bool = False
    smoking: bool = False
    description: str = ""
    location: str = ""
    url: str = ""
    coordinates: Optional[Coordinates] = None
    source: str = "unknown"


@dataclass(frozen=True)
class MarketSummary:
    source: str
    total_listings: int
    source_counts: Dict[str, int]
    price_min: Optional[float]
    price_max: Optional[float]
    price_average: Optional[int]
    housing_types: Dict[str, int]
    top_locations: Dict[str, int]
    private_room_count: int
    private_bath_count: int
    private_room_pct: int
    private_bath_pct: int
