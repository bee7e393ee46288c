from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional

from services.commute.models import CommuteAnalysis, LocationScore
from services.matching.models import MatchResult
from services.orchestrator.models import ComposedResult

HOUSING_WEIGHT = 0.6
COMMUTE_WEIGHT = 0.4


def combined_score(housing: int, commute: Optional[CommuteAnalysis]) -> int:
    if commute is None:
        return housing
    return int(round(housing * HOUSING_WEIGHT + commute.rating * 10 * COMMUTE_WEIGHT))


class ResultComposer:
    """Blends commute ratings into housing scores and re-ranks.

    Location scores are attached for display but do not move the ranking.
    """

    def compose(
        self,
        matches: Iterable[MatchResult],
        commutes: Optional[Mapping[str, CommuteAnalysis]] = None,
        locations: Optional[Mapping[str, LocationScore]] = None,
    ) -> List[ComposedResult]:
        commutes = commutes or {}
        locations = locations or {}
        composed: List[ComposedResult] = []
        for match in matches:
            listing_id = match.listing.listing_id
            commute = commutes.get(listing_id)
            location = locations.get(listing_id)
            combined = combined_score(match.match_percentage, commute)
            scores: Dict[str, Optional[int]] = {
                "housing": match.match_percentage,
                "commute": commute.rating if commute else None,
                "location": location.overall if location else None,
                "combined": combined,
            }
            composed.append(
                ComposedResult(match=match, scores=scores, combined_score=combined, commute=commute, location=location)
            )
        return sorted(composed, key=lambda result: result.combined_score, reverse=True)
