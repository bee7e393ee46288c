from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from services.common.errors import LocationScoringError, ReasoningError
from services.common.jsonscan import extract_json_object
from services.common.observability import Observability
from services.common.reasoning import ReasoningClient, complete_with_timeout
from services.commute.models import LocationScore
from services.commute.prompts import LOCATION_SCORE_PROMPT
from services.listings.models import Listing

logger = logging.getLogger(__name__)

BATCH_SIZE = 5

FALLBACK_SCORE = LocationScore(
    walk_score=65,
    bike_score=45,
    transit_score=55,
    safety_sentiment=(
        "Location analysis temporarily unavailable. "
        "Please check back later for detailed safety and walkability information."
    ),
    is_fallback=True,
)


def _score_value(payload: Dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if isinstance(value, bool) or value is None:
        raise LocationScoringError("Location score missing", code="MISSING_SCORE", details={"field": key})
    try:
        parsed = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise LocationScoringError("Location score not numeric", code="INVALID_SCORE", details={"field": key}) from exc
    if not math.isfinite(parsed):
        raise LocationScoringError("Location score not numeric", code="INVALID_SCORE", details={"field": key})
    return int(round(max(0.0, min(100.0, parsed))))


def parse_location_score(payload: Dict[str, Any]) -> LocationScore:
    sentiment = payload.get("safetySentiment")
    return LocationScore(
        walk_score=_score_value(payload, "walkScore"),
        bike_score=_score_value(payload, "bikeScore"),
        transit_score=_score_value(payload, "transitScore"),
        safety_sentiment=sentiment.strip() if isinstance(sentiment, str) else "",
    )


class ReasoningLocationScorer:
    """Walk/bike/transit scores per listing; never raises, falls back to a labelled default."""

    def __init__(
        self,
        reasoning: ReasoningClient,
        *,
        timeout_s: float = 30.0,
        batch_size: int = BATCH_SIZE,
        observability: Optional[Observability] = None,
    ) -> None:
        self._reasoning = reasoning
        self._timeout_s = timeout_s
        self._batch_size = max(1, batch_size)
        self._observability = observability or Observability()

    @property
    def observability(self) -> Observability:
        return self._observability

    async def score(self, listing: Listing) -> LocationScore:
        if listing.coordinates is None:
            return FALLBACK_SCORE
        prompt = LOCATION_SCORE_PROMPT.format(
            latitude=listing.coordinates.latitude,
            longitude=listing.coordinates.longitude,
            address=listing.location or "unknown",
        )
        try:
            response = await complete_with_timeout(self._reasoning, prompt, timeout_s=self._timeout_s)
            payload = extract_json_object(response)
            if payload is None:
                raise LocationScoringError("Location score returned no JSON", code="NO_JSON")
            result = parse_location_score(payload)
        except (ReasoningError, LocationScoringError) as exc:
            logger.warning("Location scoring failed for %s (%s); using fallback", listing.listing_id, exc.code)
            self._observability.record("location_score", listing_id=listing.listing_id, status="fallback", error=exc.code)
            return FALLBACK_SCORE
        self._observability.record("location_score", listing_id=listing.listing_id, status="ok", overall=result.overall)
        return result

    async def score_many(self, listings: Iterable[Listing]) -> Dict[str, LocationScore]:
        """Scores listings with coordinates, at most ``batch_size`` calls in flight at once."""
        candidates: List[Listing] = [listing for listing in listings if listing.coordinates is not None]
        results: Dict[str, LocationScore] = {}
        for start in range(0, len(candidates), self._batch_size):
            batch = candidates[start : start + self._batch_size]
            scores = await asyncio.gather(*(self.score(listing) for listing in batch))
            for listing, score in zip(batch, scores):
                results[listing.listing_id] = score
        return results
