from __future__ import annotations

import dataclasses
import logging
from typing import Dict, Iterable, Optional, Set

from services.common.enums import Capability, Intent, TravelMode
from services.common.observability import Observability
from services.commute.location import ReasoningLocationScorer
from services.commute.models import CommuteAnalysis, CommuteRequest, LocationScore, Place
from services.commute.service import CommuteService
from services.listings.models import Coordinates
from services.matching.service import FilterInput, HousingSearchService
from services.orchestrator.composer import ResultComposer
from services.orchestrator.models import OrchestratedResult, QueryAnalysis
from services.orchestrator.planner import DEFAULT_TRAVEL_MODE, QueryPlanner, build_plan, validate_plan

logger = logging.getLogger(__name__)


class QueryOrchestrator:
    """Runs a query end to end: analyse, plan, validate, execute, compose.

    Steps run in plan order. A step whose capability is not available is skipped;
    its warning is already part of the result.
    """

    def __init__(
        self,
        *,
        planner: QueryPlanner,
        housing_search: HousingSearchService,
        commute_service: Optional[CommuteService] = None,
        location_scorer: Optional[ReasoningLocationScorer] = None,
        composer: Optional[ResultComposer] = None,
        observability: Optional[Observability] = None,
    ) -> None:
        self._planner = planner
        self._housing_search = housing_search
        self._commute_service = commute_service
        self._location_scorer = location_scorer
        self._composer = composer or ResultComposer()
        self._observability = observability or Observability()

    @property
    def observability(self) -> Observability:
        return self._observability

    def available_capabilities(self) -> Set[Capability]:
        available = {Capability.housing_search, Capability.housing_summary}
        if self._commute_service is not None:
            available.add(Capability.commute_scorer)
        if self._location_scorer is not None:
            available.add(Capability.location_scorer)
        return available

    async def execute(
        self,
        query: str,
        *,
        filters: FilterInput = None,
        destination: Optional[str] = None,
        destination_coordinates: Optional[Coordinates] = None,
        origin: Optional[str] = None,
        origin_coordinates: Optional[Coordinates] = None,
        travel_mode: Optional[TravelMode] = None,
        max_results: int = 5,
        available: Optional[Iterable[Capability]] = None,
        source: Optional[str] = None,
    ) -> OrchestratedResult:
        analysis = await self._planner.analyze(query)
        analysis = _with_overrides(analysis, destination=destination, travel_mode=travel_mode)
        plan = build_plan(analysis)
        available_set = set(available) if available is not None else self.available_capabilities()
        warnings = validate_plan(analysis, plan, available_set)
        runnable = [step for step in plan.steps if step.capability in available_set]
        logger.info("Executing %s plan with %d/%d steps", analysis.intent.value, len(runnable), len(plan.steps))

        result = OrchestratedResult(analysis=analysis, plan=plan, warnings=warnings)
        capabilities = {step.capability for step in runnable}
        mode = analysis.commute_criteria.travel_mode or DEFAULT_TRAVEL_MODE
        target = (
            Place(address=analysis.destination, coordinates=destination_coordinates) if analysis.destination else None
        )

        if Capability.housing_summary in capabilities:
            result = dataclasses.replace(result, summary=self._housing_search.summary(source))

        if analysis.intent == Intent.commute_analysis and Capability.commute_scorer in capabilities:
            result = await self._single_commute(result, target, origin, origin_coordinates, mode)

        if Capability.housing_search in capabilities:
            search = await self._housing_search.search(
                analysis.housing_criteria.query,
                filters,
                max_results,
                source=source,
            )
            listings = [match.listing for match in search.matches]
            commutes: Dict[str, CommuteAnalysis] = {}
            if Capability.commute_scorer in capabilities and target is not None and self._commute_service is not None:
                commutes = await self._commute_service.analyze_listings(listings, target, mode)
            locations: Dict[str, LocationScore] = {}
            if self._location_scorer is not None and Capability.location_scorer in available_set:
                locations = await self._location_scorer.score_many(listings)
            composed = self._composer.compose(search.matches, commutes, locations)
            result = dataclasses.replace(result, results=composed, search=search.metadata)

        self._observability.record(
            "orchestration",
            intent=analysis.intent.value,
            steps=[step.capability.value for step in runnable],
            warnings=len(warnings),
            results=len(result.results),
        )
        return result

    async def _single_commute(
        self,
        result: OrchestratedResult,
        target: Optional[Place],
        origin: Optional[str],
        origin_coordinates: Optional[Coordinates],
        mode: TravelMode,
    ) -> OrchestratedResult:
        if target is None or self._commute_service is None:
            return result
        if not origin:
            return dataclasses.replace(
                result, warnings=result.warnings + ["Commute analysis needs an origin address; none supplied."]
            )
        analysis = await self._commute_service.analyze(
            CommuteRequest(origin=Place(address=origin, coordinates=origin_coordinates), destination=target, travel_mode=mode)
        )
        return dataclasses.replace(result, commute=analysis)


def _with_overrides(
    analysis: QueryAnalysis, *, destination: Optional[str], travel_mode: Optional[TravelMode]
) -> QueryAnalysis:
    if not destination and travel_mode is None:
        return analysis
    criteria = analysis.commute_criteria
    if destination:
        criteria = dataclasses.replace(criteria, work_location=destination)
    if travel_mode is not None:
        criteria = dataclasses.replace(criteria, travel_mode=travel_mode)
    return dataclasses.replace(analysis, commute_criteria=criteria)
