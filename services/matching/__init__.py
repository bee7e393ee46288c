"""Housing matching: deterministic and semantic ranking paths."""

from services.matching.models import GroupOutcome, MatchResult, SearchMetadata, SearchResult
from services.matching.semantic import SemanticScorer, partition
from services.matching.service import HousingSearchService

__all__ = [
    "GroupOutcome",
    "HousingSearchService",
    "MatchResult",
    "SearchMetadata",
    "SearchResult",
    "SemanticScorer",
    "partition",
]
