from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

from services.common.enums import CommuteSource, TravelMode
from services.common.errors import AssistantError, ReasoningError
from services.common.jsonscan import extract_json_object
from services.common.observability import Observability
from services.common.reasoning import ReasoningClient, complete_with_timeout
from services.commute.models import CommuteAnalysis, CommuteRequest, Measure, Place
from services.commute.prompts import COMMUTE_ESTIMATE_PROMPT
from services.commute.providers import OsrmRouter
from services.commute.rating import rate_commute, recommend
from services.listings.models import Coordinates, Listing

logger = logging.getLogger(__name__)

TRAFFIC_FACTOR = 1.2
ROAD_FACTOR = 1.3
SYNTHETIC_SPEED_KMH = 35.0
DEFAULT_DISTANCE_KM = 15.0
DEFAULT_DURATION_MIN = 25.0
EARTH_RADIUS_M = 6371000.0


class CommuteScorer(Protocol):
    async def analyze(self, request: CommuteRequest) -> Optional[CommuteAnalysis]: ...


def haversine_m(origin: Coordinates, destination: Coordinates) -> float:
    lat1, lat2 = math.radians(origin.latitude), math.radians(destination.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(destination.longitude - origin.longitude)
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(a))


def build_analysis(
    distance_m: float,
    duration_s: float,
    traffic_s: float,
    *,
    source: CommuteSource,
    travel_mode: TravelMode,
    recommendation: Optional[str] = None,
) -> CommuteAnalysis:
    rating = rate_commute(distance_m, duration_s)
    return CommuteAnalysis(
        distance=Measure(text=f"{distance_m / 1000:.1f} km", value=int(round(distance_m))),
        duration=Measure(text=f"{round(duration_s / 60)} min", value=int(round(duration_s))),
        duration_in_traffic=Measure(text=f"{round(traffic_s / 60)} min", value=int(round(traffic_s))),
        rating=rating,
        recommendation=recommendation or recommend(distance_m, duration_s, rating),
        source=source,
        travel_mode=travel_mode,
    )


def _describe(place: Place) -> str:
    if place.coordinates is None:
        return place.address
    return f"{place.address} ({place.coordinates.latitude}, {place.coordinates.longitude})"


class RoutingCommuteScorer:
    """OSRM-backed scorer; not applicable unless both ends carry coordinates."""

    def __init__(self, *, router: OsrmRouter) -> None:
        self._router = router

    async def analyze(self, request: CommuteRequest) -> Optional[CommuteAnalysis]:
        origin = request.origin.coordinates
        destination = request.destination.coordinates
        if origin is None or destination is None:
            return None
        distance_m, duration_s = await asyncio.to_thread(self._router.route, origin, destination, request.travel_mode)
        traffic_s = duration_s * TRAFFIC_FACTOR if request.travel_mode == TravelMode.driving_traffic else duration_s
        return build_analysis(
            distance_m, duration_s, traffic_s, source=CommuteSource.router, travel_mode=request.travel_mode
        )


class ReasoningCommuteScorer:
    def __init__(self, reasoning: ReasoningClient, *, timeout_s: float = 30.0) -> None:
        self._reasoning = reasoning
        self._timeout_s = timeout_s

    async def analyze(self, request: CommuteRequest) -> Optional[CommuteAnalysis]:
        prompt = COMMUTE_ESTIMATE_PROMPT.format(
            origin=_describe(request.origin),
            destination=_describe(request.destination),
            travel_mode=request.travel_mode.value,
        )
        response = await complete_with_timeout(self._reasoning, prompt, timeout_s=self._timeout_s)
        payload = extract_json_object(response)
        if payload is None:
            raise ReasoningError("Commute estimate returned no JSON", code="NO_JSON")
        distance_km = _positive(payload.get("distance_km"))
        duration_min = _positive(payload.get("duration_minutes"))
        if distance_km is None or duration_min is None:
            raise ReasoningError("Commute estimate missing distance or duration", code="INVALID_ESTIMATE")
        traffic_min = _positive(payload.get("traffic_duration_minutes")) or duration_min * TRAFFIC_FACTOR
        analysis = payload.get("analysis")
        return build_analysis(
            distance_km * 1000,
            duration_min * 60,
            traffic_min * 60,
            source=CommuteSource.reasoning_estimate,
            travel_mode=request.travel_mode,
            recommendation=analysis.strip() if isinstance(analysis, str) and analysis.strip() else None,
        )


class SyntheticCommuteEstimator:
    """Deterministic last resort: straight-line distance with a road factor, or fixed defaults."""

    async def analyze(self, request: CommuteRequest) -> CommuteAnalysis:
        return self.estimate(request)

    def estimate(self, request: CommuteRequest) -> CommuteAnalysis:
        origin = request.origin.coordinates
        destination = request.destination.coordinates
        if origin is not None and destination is not None:
            distance_m = haversine_m(origin, destination) * ROAD_FACTOR
            duration_s = distance_m / 1000 / SYNTHETIC_SPEED_KMH * 3600
        else:
            distance_m = DEFAULT_DISTANCE_KM * 1000
            duration_s = DEFAULT_DURATION_MIN * 60
        return build_analysis(
            distance_m,
            duration_s,
            duration_s * TRAFFIC_FACTOR,
            source=CommuteSource.synthetic_estimate,
            travel_mode=request.travel_mode,
        )


class CommuteService:
    def __init__(
        self,
        *,
        scorers: Sequence[CommuteScorer] = (),
        fallback: Optional[SyntheticCommuteEstimator] = None,
        observability: Optional[Observability] = None,
    ) -> None:
        self._scorers = list(scorers)
        self._fallback = fallback or SyntheticCommuteEstimator()
        self._observability = observability or Observability()

    @property
    def observability(self) -> Observability:
        return self._observability

    async def analyze(self, request: CommuteRequest) -> CommuteAnalysis:
        errors: List[str] = []
        for scorer in self._scorers:
            try:
                result = await scorer.analyze(request)
            except AssistantError as exc:
                logger.warning("%s failed (%s); trying next scorer", type(scorer).__name__, exc.code)
                errors.append(f"{type(scorer).__name__}:{exc.code}")
                continue
            except Exception as exc:
                logger.warning("%s raised %r; trying next scorer", type(scorer).__name__, exc)
                errors.append(f"{type(scorer).__name__}:UNEXPECTED")
                continue
            if result is not None:
                self._record(result, errors)
                return result
        result = self._fallback.estimate(request)
        self._record(result, errors)
        return result

    async def analyze_listings(
        self,
        listings: Iterable[Listing],
        destination: Place,
        travel_mode: TravelMode = TravelMode.driving_traffic,
    ) -> Dict[str, CommuteAnalysis]:
        """Scores each listing in turn; result keyed by listing id."""
        results: Dict[str, CommuteAnalysis] = {}
        for listing in listings:
            request = CommuteRequest(
                origin=Place(address=listing.location or listing.title, coordinates=listing.coordinates),
                destination=destination,
                travel_mode=travel_mode,
            )
            results[listing.listing_id] = await self.analyze(request)
        return results

    def _record(self, result: CommuteAnalysis, errors: List[str]) -> None:
        self._observability.record(
            "commute",
            source=result.source.value,
            rating=result.rating,
            distance_m=result.distance.value,
            duration_s=result.duration.value,
            fallback_used=bool(errors),
            errors=list(errors),
        )


def _positive(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(parsed) or parsed <= 0:
        return None
    return parsed
