from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, List, Optional, Sequence, Tuple

from services.common.errors import ReasoningError
from services.common.jsonscan import extract_json_array
from services.common.observability import Observability
from services.common.reasoning import ReasoningClient, complete_with_timeout
from services.listings.models import Listing
from services.matching.models import GroupOutcome, MatchResult
from services.matching.prompts import LISTING_BLOCK, SEMANTIC_SCORING_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_GROUP_COUNT = 5
DEFAULT_SCORE_FLOOR = 60
DESCRIPTION_LIMIT = 300


def partition(listings: Sequence[Listing], group_count: int) -> List[List[Listing]]:
    """Split into contiguous groups of ceil(n / group_count); never yields an empty group."""
    if not listings:
        return []
    size = math.ceil(len(listings) / max(1, group_count))
    return [list(listings[start : start + size]) for start in range(0, len(listings), size)]


def _position(index: Any) -> Optional[int]:
    if isinstance(index, bool):
        return None
    if isinstance(index, int):
        return index - 1
    if isinstance(index, float) and math.isfinite(index) and index.is_integer():
        return int(index) - 1
    return None


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _coerce_score(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        score = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(score):
        return None
    return min(score, 100.0)


class SemanticScorer:
    """Scores candidates against residual natural-language requirements.

    Candidates are split into contiguous groups and each group is scored by one
    reasoning call; the calls run concurrently and each has its own deadline. A
    failed group contributes nothing. Diagnostics are collected per group and
    merged once every call has finished.
    """

    def __init__(
        self,
        reasoning: ReasoningClient,
        *,
        group_count: int = DEFAULT_GROUP_COUNT,
        score_floor: int = DEFAULT_SCORE_FLOOR,
        timeout_s: float = 30.0,
        description_limit: int = DESCRIPTION_LIMIT,
        observability: Optional[Observability] = None,
    ) -> None:
        if group_count < 1:
            raise ValueError("group_count must be >= 1")
        self._reasoning = reasoning
        self._group_count = group_count
        self._score_floor = score_floor
        self._timeout_s = timeout_s
        self._description_limit = description_limit
        self._observability = observability or Observability()

    @property
    def observability(self) -> Observability:
        return self._observability

    async def score(self, listings: Sequence[Listing], query: str, max_results: int = 5) -> List[MatchResult]:
        matches, _ = await self.score_with_outcomes(listings, query, max_results=max_results)
        return matches

    async def score_with_outcomes(
        self, listings: Sequence[Listing], query: str, *, max_results: int = 5
    ) -> Tuple[List[MatchResult], List[GroupOutcome]]:
        groups = partition(listings, self._group_count)
        if not groups:
            return [], []
        logger.info("Scoring %d listings in %d groups", len(listings), len(groups))
        group_results = await asyncio.gather(
            *(self._score_group(index, group, query) for index, group in enumerate(groups))
        )
        matches: List[MatchResult] = []
        outcomes: List[GroupOutcome] = []
        for group_matches, outcome in group_results:
            matches.extend(group_matches)
            outcomes.append(outcome)
            self._observability.record(
                "semantic_group",
                group_index=outcome.group_index,
                size=outcome.size,
                status=outcome.status,
                matched=outcome.matched,
                error=outcome.error,
            )
        # sorted() is stable, so equal scores keep group order
        ranked = sorted(matches, key=lambda match: match.match_percentage, reverse=True)
        return ranked[: max(0, max_results)], outcomes

    def build_prompt(self, group: Sequence[Listing], query: str) -> str:
        blocks = [
            LISTING_BLOCK.format(
                position=position,
                title=listing.title,
                price=_format_price(listing.price),
                location=listing.location or "Unknown",
                housing_type=listing.housing_type.value,
                bedrooms=_format_count(listing.bedrooms),
                bathrooms=_format_count(listing.bathrooms),
                private_room=_yes_no(listing.private_room),
                private_bath=_yes_no(listing.private_bath),
                smoking=_yes_no(listing.smoking),
                description=listing.description[: self._description_limit] or "No description",
            )
            for position, listing in enumerate(group, start=1)
        ]
        return SEMANTIC_SCORING_PROMPT.format(query=query, listings="\n".join(blocks), score_floor=self._score_floor)

    async def _score_group(
        self, group_index: int, group: List[Listing], query: str
    ) -> Tuple[List[MatchResult], GroupOutcome]:
        prompt = self.build_prompt(group, query)
        try:
            response = await complete_with_timeout(self._reasoning, prompt, timeout_s=self._timeout_s)
        except ReasoningError as exc:
            logger.warning("Semantic group %d failed (%s)", group_index + 1, exc.code)
            return [], GroupOutcome(group_index=group_index, size=len(group), status="call_failed", error=exc.code)
        entries = extract_json_array(response)
        if entries is None:
            logger.warning("Semantic group %d returned no JSON array", group_index + 1)
            return [], GroupOutcome(group_index=group_index, size=len(group), status="no_json")
        try:
            results = self._parse_entries(entries, group)
        except Exception as exc:
            logger.warning("Semantic group %d returned an unusable reply (%r)", group_index + 1, exc)
            return [], GroupOutcome(
                group_index=group_index, size=len(group), status="invalid_response", error=type(exc).__name__
            )
        return results, GroupOutcome(group_index=group_index, size=len(group), status="ok", matched=len(results))

    def _parse_entries(self, entries: List[Any], group: List[Listing]) -> List[MatchResult]:
        results: List[MatchResult] = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            position = _position(entry.get("index"))
            if position is None:
                continue
            if position < 0 or position >= len(group):
                continue
            raw = _coerce_score(entry.get("score"))
            if raw is None or raw < self._score_floor:
                continue
            score = int(round(raw))
            reason = str(entry.get("reason") or "").strip()
            results.append(
                MatchResult(listing=group[position], match_percentage=score, rationale=f"{score}% match: {reason}")
            )
        return results


def _format_price(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.2f}"


def _format_count(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"
