from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from services.matching.models import MatchResult
from services.matching.service import HousingSearchService

KEYWORD_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "female": ("woman", "girl", "lady"),
    "male": ("man", "guy", "gentleman"),
    "roommate": ("housemate", "flatmate", "room mate", "house mate"),
    "private": ("own", "personal", "ensuite", "en-suite"),
    "bathroom": ("bath", "restroom", "toilet"),
    "young": ("younger", "youthful", "20s", "twenties"),
    "professional": ("working", "career", "job"),
    "under": ("below", "less than", "<", "max", "budget"),
    "near": ("close", "nearby", "proximity", "commute"),
    "apartment": ("apt", "flat"),
    "house": ("home", "housing"),
    "room": ("bedroom", "space"),
}
SYNONYM_CREDIT = 0.8


@dataclass(frozen=True)
class EvaluationCase:
    name: str
    query: str
    keywords: Tuple[str, ...] = ()
    max_price: Optional[float] = None
    private_bath: Optional[bool] = None
    min_results: int = 1
    filters: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class CaseOutcome:
    case: EvaluationCase
    matches: List[MatchResult]
    elapsed_ms: float


@dataclass(frozen=True)
class CaseScore:
    name: str
    result_count: int
    scores: Dict[str, float]
    elapsed_ms: float


@dataclass(frozen=True)
class EvaluationReport:
    cases: List[CaseScore]
    means: Dict[str, float] = field(default_factory=dict)


def result_count_score(outcome: CaseOutcome) -> float:
    return 1.0 if len(outcome.matches) >= outcome.case.min_results else 0.0


def price_filter_score(outcome: CaseOutcome) -> float:
    if not outcome.case.max_price:
        return 1.0
    within = all(
        not match.listing.price or match.listing.price <= outcome.case.max_price for match in outcome.matches
    )
    return 1.0 if within else 0.0


def private_bath_score(outcome: CaseOutcome) -> float:
    if outcome.case.private_bath is None:
        return 1.0
    found = any(match.listing.private_bath is outcome.case.private_bath for match in outcome.matches)
    return 1.0 if found else 0.0


def keyword_relevance_score(outcome: CaseOutcome) -> float:
    keywords = [keyword.lower() for keyword in outcome.case.keywords]
    if not outcome.matches or not keywords:
        return 0.0
    total = 0.0
    for match in outcome.matches:
        text = f"{match.listing.description} {match.listing.title} {match.rationale}".lower()
        hits = 0.0
        for keyword in keywords:
            if keyword in text:
                hits += 1
            elif any(synonym in text for synonym in KEYWORD_SYNONYMS.get(keyword, ())):
                hits += SYNONYM_CREDIT
        total += min(hits / len(keywords), 1.0)
    return total / len(outcome.matches)


def response_time_score(outcome: CaseOutcome) -> float:
    if outcome.elapsed_ms < 5000:
        return 1.0
    if outcome.elapsed_ms < 10000:
        return 0.8
    if outcome.elapsed_ms < 20000:
        return 0.6
    return 0.4


SCORERS: Dict[str, Callable[[CaseOutcome], float]] = {
    "result_count": result_count_score,
    "price_filter": price_filter_score,
    "private_bath": private_bath_score,
    "keyword_relevance": keyword_relevance_score,
    "response_time": response_time_score,
}

DEFAULT_CASES: Tuple[EvaluationCase, ...] = (
    EvaluationCase(
        name="private-bath-under-budget",
        query="Private bathroom under $1500",
        keywords=("private", "bathroom", "under"),
        max_price=1500,
        private_bath=True,
    ),
    EvaluationCase(
        name="roommate-preference",
        query="Looking for young roommates under 30",
        keywords=("young", "roommates", "under", "30"),
    ),
    EvaluationCase(
        name="commute",
        query="Room with easy commute to Oakland",
        keywords=("room", "commute", "oakland"),
    ),
)


async def run_evaluation(
    housing_search: HousingSearchService,
    cases: Sequence[EvaluationCase] = DEFAULT_CASES,
    *,
    max_results: int = 5,
    clock: Callable[[], float] = time.perf_counter,
) -> EvaluationReport:
    scored: List[CaseScore] = []
    for case in cases:
        started = clock()
        result = await housing_search.search(case.query, case.filters, max_results)
        elapsed_ms = (clock() - started) * 1000
        outcome = CaseOutcome(case=case, matches=result.matches, elapsed_ms=elapsed_ms)
        scored.append(
            CaseScore(
                name=case.name,
                result_count=len(result.matches),
                scores={name: scorer(outcome) for name, scorer in SCORERS.items()},
                elapsed_ms=elapsed_ms,
            )
        )
    means = {
        name: (sum(case.scores[name] for case in scored) / len(scored)) if scored else 0.0 for name in SCORERS
    }
    return EvaluationReport(cases=scored, means=means)
