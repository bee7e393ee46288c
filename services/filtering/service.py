from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

from services.common.enums import HousingType
from services.common.observability import Observability
from services.criteria.models import FilterSpec
from services.listings.models import Listing

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterReport:
    kept: List[Listing]
    passed: int
    failed: int
    rejections: Counter = field(default_factory=Counter)


def _reject_unpriced(listing: Listing, spec: FilterSpec) -> bool:
    return listing.price <= 0


def _reject_min_price(listing: Listing, spec: FilterSpec) -> bool:
    return spec.min_price is not None and listing.price < spec.min_price


def _reject_max_price(listing: Listing, spec: FilterSpec) -> bool:
    return spec.max_price is not None and listing.price > spec.max_price


def _reject_bedrooms(listing: Listing, spec: FilterSpec) -> bool:
    if listing.bedrooms <= 0:
        return False
    if spec.min_bedrooms is not None and listing.bedrooms < spec.min_bedrooms:
        return True
    return spec.max_bedrooms is not None and listing.bedrooms > spec.max_bedrooms


def _reject_bathrooms(listing: Listing, spec: FilterSpec) -> bool:
    if listing.bathrooms <= 0:
        return False
    if spec.min_bathrooms is not None and listing.bathrooms < spec.min_bathrooms:
        return True
    return spec.max_bathrooms is not None and listing.bathrooms > spec.max_bathrooms


def _reject_housing_type(listing: Listing, spec: FilterSpec) -> bool:
    if spec.housing_type is None or listing.housing_type == HousingType.unknown:
        return False
    return listing.housing_type != spec.housing_type


def _reject_private_room(listing: Listing, spec: FilterSpec) -> bool:
    return spec.private_room is not None and listing.private_room is not spec.private_room


def _reject_private_bath(listing: Listing, spec: FilterSpec) -> bool:
    return spec.private_bath is not None and listing.private_bath is not spec.private_bath


def _reject_smoking(listing: Listing, spec: FilterSpec) -> bool:
    return spec.smoking is not None and listing.smoking is not spec.smoking


# Evaluated in order; the first rule that rejects is the one counted.
RULES: Tuple[Tuple[str, Callable[[Listing, FilterSpec], bool]], ...] = (
    ("zero_price", _reject_unpriced),
    ("min_price", _reject_min_price),
    ("max_price", _reject_max_price),
    ("bedrooms", _reject_bedrooms),
    ("bathrooms", _reject_bathrooms),
    ("housing_type", _reject_housing_type),
    ("private_room", _reject_private_room),
    ("private_bath", _reject_private_bath),
    ("smoking", _reject_smoking),
)


def rejection_reason(listing: Listing, spec: FilterSpec) -> Optional[str]:
    for name, rule in RULES:
        if rule(listing, spec):
            return name
    return None


class FilterEngine:
    """Applies a FilterSpec exactly. Pure and order-preserving; location is never filtered here."""

    def __init__(self, *, observability: Optional[Observability] = None) -> None:
        self._observability = observability or Observability()

    @property
    def observability(self) -> Observability:
        return self._observability

    def filter(self, listings: Iterable[Listing], spec: FilterSpec) -> List[Listing]:
        return self.filter_with_report(listings, spec).kept

    def filter_with_report(self, listings: Iterable[Listing], spec: FilterSpec) -> FilterReport:
        kept: List[Listing] = []
        rejections: Counter = Counter()
        for listing in listings:
            reason = rejection_reason(listing, spec)
            if reason is None:
                kept.append(listing)
            else:
                rejections[reason] += 1
        failed = sum(rejections.values())
        logger.debug("Filter kept %d listings, rejected %d (%s)", len(kept), failed, dict(rejections))
        self._observability.record(
            "filter",
            applied=spec.applied(),
            passed=len(kept),
            failed=failed,
            rejections=dict(rejections),
        )
        return FilterReport(kept=kept, passed=len(kept), failed=failed, rejections=rejections)
