from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from services.common.enums import CommuteSource, TravelMode
from services.listings.models import Coordinates


@dataclass(frozen=True)
class Place:
    address: str
    coordinates: Optional[Coordinates] = None


@dataclass(frozen=True)
class CommuteRequest:
    origin: Place
    destination: Place
    travel_mode: TravelMode = TravelMode.driving_traffic


@dataclass(frozen=True)
class Measure:
    text: str
    value: int


@dataclass(frozen=True)
class CommuteAnalysis:
    distance: Measure
    duration: Measure
    duration_in_traffic: Measure
    rating: int
    recommendation: str
    source: CommuteSource
    travel_mode: TravelMode = TravelMode.driving_traffic


@dataclass(frozen=True)
class LocationScore:
    walk_score: int
    bike_score: int
    transit_score: int
    safety_sentiment: str
    is_fallback: bool = False

    @property
    def overall(self) -> int:
        return round((self.walk_score + self.bike_score + self.transit_score) / 3)
