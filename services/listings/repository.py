from __future__ import annotations

import hashlib
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from services.common.enums import HousingType
from services.common.errors import ListingSourceError
from services.listings.models import Coordinates, Listing

logger = logging.getLogger(__name__)


class ListingRepository:
    """In-memory listing store, treated as a read-only snapshot during a search."""

    def __init__(self, listings: Optional[Iterable[Listing]] = None) -> None:
        self._listings: Dict[str, Listing] = {}
        for listing in listings or []:
            self.add(listing)

    def add(self, listing: Listing) -> None:
        self._listings[listing.listing_id] = listing

    def get(self, listing_id: str) -> Optional[Listing]:
        return self._listings.get(listing_id)

    def list(self, source: Optional[str] = None) -> List[Listing]:
        if source is None or source == "all":
            return list(self._listings.values())
        return [listing for listing in self._listings.values() if listing.source == source]

    def sources(self) -> List[str]:
        return sorted({listing.source for listing in self._listings.values()})

    def __len__(self) -> int:
        return len(self._listings)

    def load_json(self, path: str | Path, *, source: str) -> int:
        file_path = Path(path)
        try:
            raw = json.loads(file_path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ListingSourceError(
                "Listing snapshot not found", code="NOT_FOUND", details={"path": str(file_path)}
            ) from exc
        except json.JSONDecodeError as exc:
            raise ListingSourceError(
                "Listing snapshot is not valid JSON", code="INVALID_JSON", details={"path": str(file_path)}
            ) from exc
        if not isinstance(raw, list):
            raise ListingSourceError(
                "Listing snapshot must be a JSON array", code="INVALID_SHAPE", details={"path": str(file_path)}
            )
        loaded = 0
        for item in raw:
            if not isinstance(item, Mapping):
                continue
            self.add(listing_from_payload(item, source=source))
            loaded += 1
        logger.info("Loaded %d %s listings from %s", loaded, source, file_path)
        return loaded


def listing_from_payload(payload: Mapping[str, Any], *, source: str) -> Listing:
    url = str(payload.get("url") or "")
    listing_id = str(payload.get("id") or payload.get("listing_id") or "") or _listing_id(source, url, payload)
    return Listing(
        listing_id=listing_id,
        title=str(payload.get("title") or ""),
        price=_to_number(payload.get("price")),
        bedrooms=_to_number(payload.get("bedrooms")),
        bathrooms=_to_number(payload.get("bathrooms")),
        housing_type=_housing_type(payload.get("housingType")),
        private_room=payload.get("privateRoom") is True,
        private_bath=payload.get("privateBath") is True,
        smoking=payload.get("smoking") is True,
        description=str(payload.get("description") or ""),
        location=str(payload.get("location") or ""),
        url=url,
        coordinates=_coordinates(payload.get("coordinates")),
        source=str(payload.get("source") or source),
    )


def _listing_id(source: str, url: str, payload: Mapping[str, Any]) -> str:
    basis = url or json.dumps(payload, sort_keys=True, default=str)
    digest = hashlib.sha256(f"{source}|{basis}".encode("utf-8")).hexdigest()
    return f"{source}-{digest[:16]}"


def _to_number(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        try:
            return value if math.isfinite(value) else 0
        except OverflowError:
            return 0
    cleaned = str(value).replace("$", "").replace(",", "").strip()
    try:
        parsed = float(cleaned)
    except ValueError:
        return 0
    return parsed if math.isfinite(parsed) else 0


def _housing_type(value: Any) -> HousingType:
    if isinstance(value, HousingType):
        return value
    try:
        return HousingType(str(value).strip().lower())
    except ValueError:
        return HousingType.unknown


def _coordinates(value: Any) -> Optional[Coordinates]:
    if not isinstance(value, Mapping):
        return None
    try:
        latitude = float(value.get("latitude"))
        longitude = float(value.get("longitude"))
    except (TypeError, ValueError, OverflowError):
        return None
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return None
    return Coordinates(latitude=latitude, longitude=longitude)
