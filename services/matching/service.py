from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from services.common.enums import MatchPath
from services.common.observability import Observability
from services.criteria.extractor import CriteriaExtractor
from services.criteria.models import FilterSpec
from services.filtering.service import FilterEngine
from services.listings.models import MarketSummary
from services.listings.repository import ListingRepository
from services.listings.summary import summarize_market
from services.matching.deterministic import DETERMINISTIC_CAP, deterministic_matches
from services.matching.models import SearchMetadata, SearchResult
from services.matching.semantic import SemanticScorer

logger = logging.getLogger(__name__)

FilterInput = Union[FilterSpec, Mapping[str, Any], None]


class HousingSearchService:
    """Caller-facing housing search: extract, filter, then rank.

    Listings that pass the deterministic filters go straight back at 100% when the
    query has no residual natural-language requirement. Otherwise the filtered set
    is handed to the semantic scorer.
    """

    def __init__(
        self,
        *,
        repository: ListingRepository,
        extractor: CriteriaExtractor,
        filter_engine: Optional[FilterEngine] = None,
        semantic_scorer: SemanticScorer,
        deterministic_cap: int = DETERMINISTIC_CAP,
        observability: Optional[Observability] = None,
    ) -> None:
        self._repository = repository
        self._extractor = extractor
        self._filter_engine = filter_engine or FilterEngine()
        self._semantic_scorer = semantic_scorer
        self._deterministic_cap = deterministic_cap
        self._observability = observability or Observability()

    @property
    def repository(self) -> ListingRepository:
        return self._repository

    @property
    def observability(self) -> Observability:
        return self._observability

    async def resolve_filters(self, query: str, filters: FilterInput = None) -> FilterSpec:
        if isinstance(filters, FilterSpec):
            return filters
        if filters is not None:
            return FilterSpec.from_payload(filters)
        return await self._extractor.extract_filters(query)

    async def search(
        self,
        query: str,
        filters: FilterInput = None,
        max_results: int = 5,
        *,
        source: Optional[str] = None,
    ) -> SearchResult:
        spec = await self.resolve_filters(query, filters)
        pool = self._repository.list(source)
        report = self._filter_engine.filter_with_report(pool, spec)
        applied = spec.applied()

        if not pool:
            return self._finish(query, pool_size=0, filtered=0, applied=applied, reason="no_listings_loaded")
        if not report.kept:
            return self._finish(query, pool_size=len(pool), filtered=0, applied=applied, reason="no_listings_match_filters")

        if not await self._extractor.has_residual_requirement(query):
            matches = deterministic_matches(report.kept, spec, query, cap=self._deterministic_cap)
            return self._finish(
                query,
                pool_size=len(pool),
                filtered=len(report.kept),
                applied=applied,
                matches=matches,
                path=MatchPath.deterministic,
            )

        matches, outcomes = await self._semantic_scorer.score_with_outcomes(report.kept, query, max_results=max_results)
        return self._finish(
            query,
            pool_size=len(pool),
            filtered=len(report.kept),
            applied=applied,
            matches=matches,
            path=MatchPath.semantic,
            reason=None if matches else "no_semantic_matches",
            groups=outcomes,
        )

    def summary(self, source: Optional[str] = None) -> MarketSummary:
        return summarize_market(self._repository.list(source), source=source or "all")

    def _finish(
        self,
        query: str,
        *,
        pool_size: int,
        filtered: int,
        applied: dict,
        matches=None,
        path: MatchPath = MatchPath.none,
        reason: Optional[str] = None,
        groups=None,
    ) -> SearchResult:
        matches = list(matches or [])
        metadata = SearchMetadata(
            total_listings=pool_size,
            filtered_listings=filtered,
            matched_listings=len(matches),
            filters_applied=applied,
            path=path,
            reason=reason,
            groups=list(groups or []),
        )
        logger.info("Search %r: %d/%d listings via %s path", query, len(matches), pool_size, path.value)
        self._observability.record(
            "housing_search",
            path=path.value,
            total_listings=pool_size,
            filtered_listings=filtered,
            matched_listings=len(matches),
            reason=reason,
        )
        return SearchResult(matches=matches, metadata=metadata)
