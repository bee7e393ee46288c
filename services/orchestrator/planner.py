from __future__ import annotations

import logging
import math
from typing import Any, Iterable, List, Mapping, Optional

from services.common.enums import Capability, ExecutionOrder, Intent, TravelMode
from services.common.errors import ReasoningError
from services.common.jsonscan import extract_json_object
from services.common.observability import Observability
from services.common.reasoning import ReasoningClient, complete_with_timeout
from services.criteria.models import FilterSpec
from services.orchestrator.models import (
    CommuteCriteria,
    CoordinationResult,
    HousingCriteria,
    OrchestrationPlan,
    PlanStep,
    QueryAnalysis,
)
from services.orchestrator.prompts import QUERY_ANALYSIS_PROMPT

logger = logging.getLogger(__name__)

LOW_CONFIDENCE_THRESHOLD = 0.7
FALLBACK_CONFIDENCE = 0.3
DEFAULT_TRAVEL_MODE = TravelMode.driving

TRAVEL_MODE_ALIASES = {
    "bicycling": TravelMode.cycling,
    "biking": TravelMode.cycling,
    "bike": TravelMode.cycling,
    "walk": TravelMode.walking,
    "drive": TravelMode.driving,
    "public transit": TravelMode.transit,
}


def fallback_analysis(query: str) -> QueryAnalysis:
    return QueryAnalysis(
        intent=Intent.housing_search,
        confidence=FALLBACK_CONFIDENCE,
        housing_criteria=HousingCriteria(query=query),
        explanation="Fallback analysis due to parsing error",
        is_fallback=True,
    )


def parse_travel_mode(value: Any) -> Optional[TravelMode]:
    if not isinstance(value, str) or not value.strip():
        return None
    normalized = value.strip().lower()
    if normalized in TRAVEL_MODE_ALIASES:
        return TRAVEL_MODE_ALIASES[normalized]
    try:
        return TravelMode(normalized)
    except ValueError:
        return None


def _optional_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return parsed if math.isfinite(parsed) else None


def _confidence(value: Any) -> float:
    parsed = _optional_number(value)
    if parsed is None:
        return 0.0
    return max(0.0, min(1.0, parsed))


def parse_analysis(payload: Mapping[str, Any], query: str) -> Optional[QueryAnalysis]:
    """Builds a QueryAnalysis from classifier JSON; None when the intent is not recognised."""
    try:
        intent = Intent(str(payload.get("intent", "")).strip())
    except ValueError:
        return None
    housing = payload.get("housingCriteria") if isinstance(payload.get("housingCriteria"), dict) else {}
    commute = payload.get("commuteCriteria") if isinstance(payload.get("commuteCriteria"), dict) else {}
    housing_query = housing.get("query") if isinstance(housing.get("query"), str) else ""
    filters = housing.get("filters") if isinstance(housing.get("filters"), dict) else {}
    work_location = commute.get("workLocation")
    explanation = payload.get("explanation")
    return QueryAnalysis(
        intent=intent,
        confidence=_confidence(payload.get("confidence")),
        housing_criteria=HousingCriteria(
            query=housing_query.strip() or query,
            filters=FilterSpec.from_payload(filters),
        ),
        commute_criteria=CommuteCriteria(
            work_location=work_location.strip() if isinstance(work_location, str) and work_location.strip() else None,
            travel_mode=parse_travel_mode(commute.get("travelMode")),
            max_distance=_optional_number(commute.get("maxDistance")),
            max_time=_optional_number(commute.get("maxTime")),
        ),
        explanation=explanation if isinstance(explanation, str) else "",
    )


def _search_step(analysis: QueryAnalysis) -> PlanStep:
    return PlanStep(
        capability=Capability.housing_search,
        action="search_listings",
        payload={"query": analysis.housing_criteria.query},
    )


def _commute_step(analysis: QueryAnalysis) -> PlanStep:
    mode = analysis.commute_criteria.travel_mode or DEFAULT_TRAVEL_MODE
    return PlanStep(
        capability=Capability.commute_scorer,
        action="analyze_commute",
        payload={"destination": analysis.destination, "travel_mode": mode.value},
    )


def build_plan(analysis: QueryAnalysis) -> OrchestrationPlan:
    """Total and deterministic in the analysed intent."""
    if analysis.intent == Intent.commute_analysis:
        return OrchestrationPlan(
            steps=(_commute_step(analysis),),
            reasoning="Pure commute analysis - only commute scorer needed",
        )
    if analysis.intent == Intent.market_summary:
        return OrchestrationPlan(
            steps=(PlanStep(capability=Capability.housing_summary, action="get_summary"),),
            reasoning="Market summary request - housing summary",
        )
    if analysis.intent == Intent.combined_search:
        # housing first, then commute over the housing results
        return OrchestrationPlan(
            steps=(_search_step(analysis), _commute_step(analysis)),
            reasoning="Combined search - housing listings with commute analysis",
            execution_order=ExecutionOrder.sequential,
        )
    return OrchestrationPlan(
        steps=(_search_step(analysis),),
        reasoning="Pure housing search - only housing search needed",
    )


def validate_plan(analysis: QueryAnalysis, plan: OrchestrationPlan, available: Iterable[Capability]) -> List[str]:
    """Advisory warnings; a plan with warnings still runs."""
    available_set = {Capability(item) for item in available}
    warnings: List[str] = []
    missing = [step.capability.value for step in plan.steps if step.capability not in available_set]
    if missing:
        warnings.append(f"Capabilities not available: {', '.join(missing)}")
    if analysis.confidence < LOW_CONFIDENCE_THRESHOLD:
        warnings.append(f"Low confidence in query analysis ({analysis.confidence}). Consider rephrasing.")
    if not analysis.destination:
        if analysis.intent == Intent.combined_search:
            warnings.append("Combined search requested but no work location detected.")
        elif analysis.intent == Intent.commute_analysis:
            warnings.append("Commute analysis requested but no work location detected.")
    return warnings


class QueryPlanner:
    def __init__(
        self,
        reasoning: ReasoningClient,
        *,
        timeout_s: float = 30.0,
        observability: Optional[Observability] = None,
    ) -> None:
        self._reasoning = reasoning
        self._timeout_s = timeout_s
        self._observability = observability or Observability()

    @property
    def observability(self) -> Observability:
        return self._observability

    async def analyze(self, query: str) -> QueryAnalysis:
        prompt = QUERY_ANALYSIS_PROMPT.format(query=query)
        try:
            response = await complete_with_timeout(self._reasoning, prompt, timeout_s=self._timeout_s)
        except ReasoningError as exc:
            logger.warning("Query analysis failed (%s); falling back to housing search", exc.code)
            return self._fallback(query, reason=exc.code)
        payload = extract_json_object(response)
        analysis = parse_analysis(payload, query) if payload is not None else None
        if analysis is None:
            logger.warning("Query analysis response unusable; falling back to housing search")
            return self._fallback(query, reason="unparseable")
        logger.info("Query analysed as %s (confidence %.2f)", analysis.intent.value, analysis.confidence)
        self._observability.record(
            "query_analysis",
            intent=analysis.intent.value,
            confidence=analysis.confidence,
            destination=analysis.destination,
            fallback=False,
        )
        return analysis

    async def coordinate(self, query: str, available: Iterable[Capability]) -> CoordinationResult:
        analysis = await self.analyze(query)
        plan = build_plan(analysis)
        return CoordinationResult(analysis=analysis, plan=plan, warnings=validate_plan(analysis, plan, available))

    def _fallback(self, query: str, *, reason: str) -> QueryAnalysis:
        analysis = fallback_analysis(query)
        self._observability.record(
            "query_analysis",
            intent=analysis.intent.value,
            confidence=analysis.confidence,
            destination=None,
            fallback=True,
            reason=reason,
        )
        return analysis
