"""Commute analysis and location scoring."""

from services.commute.location import ReasoningLocationScorer
from services.commute.models import CommuteAnalysis, CommuteRequest, LocationScore, Measure, Place
from services.commute.rating import rate_commute, recommend
from services.commute.service import (
    CommuteService,
    ReasoningCommuteScorer,
    RoutingCommuteScorer,
    SyntheticCommuteEstimator,
)

__all__ = [
    "CommuteAnalysis",
    "CommuteRequest",
    "CommuteService",
    "LocationScore",
    "Measure",
    "Place",
    "ReasoningCommuteScorer",
    "ReasoningLocationScorer",
    "RoutingCommuteScorer",
    "SyntheticCommuteEstimator",
    "rate_commute",
    "recommend",
]
