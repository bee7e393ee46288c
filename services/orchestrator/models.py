from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from services.commute.models import CommuteAnalysis, LocationScore
from services.common.enums import Capability, ExecutionOrder, Intent, TravelMode
from services.criteria.models import FilterSpec
from services.listings.models import MarketSummary
from services.matching.models import MatchResult, SearchMetadata


@dataclass(frozen=True)
class HousingCriteria:
    query: str
    filters: FilterSpec = field(default_factory=FilterSpec)


@dataclass(frozen=True)
class CommuteCriteria:
    work_location: Optional[str] = None
    travel_mode: Optional[TravelMode] = None
    max_distance: Optional[float] = None
    max_time: Optional[float] = None


@dataclass(frozen=True)
class QueryAnalysis:
    intent: Intent
    confidence: float
    housing_criteria: HousingCriteria
    commute_criteria: CommuteCriteria = field(default_factory=CommuteCriteria)
    explanation: str = ""
    is_fallback: bool = False

    @property
    def destination(self) -> Optional[str]:
        return self.commute_criteria.work_location


@dataclass(frozen=True)
class PlanStep:
    capability: Capability
    action: str
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class OrchestrationPlan:
    steps: Tuple[PlanStep, ...]
    reasoning: str
    execution_order: ExecutionOrder = ExecutionOrder.sequential

    @property
    def capabilities(self) -> List[Capability]:
        return [step.capability for step in self.steps]

    def step_for(self, capability: Capability) -> Optional[PlanStep]:
        for step in self.steps:
            if step.capability == capability:
                return step
        return None


@dataclass(frozen=True)
class CoordinationResult:
    analysis: QueryAnalysis
    plan: OrchestrationPlan
    warnings: List[str]


@dataclass(frozen=True)
class ComposedResult:
    """A MatchResult annotated with secondary scores; the match itself is left untouched."""

    match: MatchResult
    scores: Dict[str, Optional[int]]
    combined_score: int
    commute: Optional[CommuteAnalysis] = None
    location: Optional[LocationScore] = None


@dataclass(frozen=True)
class OrchestratedResult:
    analysis: QueryAnalysis
    plan: OrchestrationPlan
    warnings: List[str]
    results: List[ComposedResult] = field(default_factory=list)
    search: Optional[SearchMetadata] = None
    summary: Optional[MarketSummary] = None
    commute: Optional[CommuteAnalysis] = None
