from __future__ import annotations

from typing import Iterable, List

from services.criteria.models import FilterSpec
from services.listings.models import Listing
from services.matching.models import MatchResult

DETERMINISTIC_CAP = 10


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def matched_labels(listing: Listing, spec: FilterSpec) -> List[str]:
    labels: List[str] = []
    if spec.max_price and listing.price <= spec.max_price:
        labels.append(f"under ${_number(spec.max_price)} budget")
    if spec.min_price and listing.price >= spec.min_price:
        labels.append(f"above ${_number(spec.min_price)} minimum")
    if spec.housing_type is not None and listing.housing_type == spec.housing_type:
        labels.append(f"{spec.housing_type.value} type")
    if spec.min_bedrooms and listing.bedrooms >= spec.min_bedrooms:
        labels.append(f"{_number(listing.bedrooms)}+ bedrooms")
    if spec.max_bedrooms and listing.bedrooms <= spec.max_bedrooms:
        labels.append(f"≤{_number(spec.max_bedrooms)} bedrooms")
    if spec.private_bath is True and listing.private_bath:
        labels.append("private bathroom")
    if spec.private_room is True and listing.private_room:
        labels.append("private room")
    if spec.smoking is False and not listing.smoking:
        labels.append("no smoking")
    elif spec.smoking is True and listing.smoking:
        labels.append("smoking allowed")
    return labels


def build_rationale(listing: Listing, spec: FilterSpec, query: str) -> str:
    labels = matched_labels(listing, spec)
    if not labels:
        return f'100% match: Meets all basic criteria for "{query}"'
    return f"100% match: Matches {', '.join(labels)} requirements"


def deterministic_matches(
    listings: Iterable[Listing], spec: FilterSpec, query: str, *, cap: int = DETERMINISTIC_CAP
) -> List[MatchResult]:
    """Every filter-passing listing scores 100; no reasoning call is made."""
    results: List[MatchResult] = []
    for listing in listings:
        if len(results) >= cap:
            break
        results.append(MatchResult(listing=listing, match_percentage=100, rationale=build_rationale(listing, spec, query)))
    return results
