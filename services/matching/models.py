from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from services.common.enums import MatchPath
from services.listings.models import Listing


@dataclass(frozen=True)
class MatchResult:
    listing: Listing
    match_percentage: int
    rationale: str


@dataclass(frozen=True)
class GroupOutcome:
    """Per-group diagnostics from one semantic scoring call."""

    group_index: int
    size: int
    status: str
    matched: int = 0
    error: Optional[str] = None


@dataclass(frozen=True)
class SearchMetadata:
    total_listings: int
    filtered_listings: int
    matched_listings: int
    filters_applied: Dict[str, Any]
    path: MatchPath
    reason: Optional[str] = None
    groups: List[GroupOutcome] = field(default_factory=list)


@dataclass(frozen=True)
class SearchResult:
    matches: List[MatchResult]
    metadata: SearchMetadata

    @property
    def is_empty(self) -> bool:
        return not self.matches
