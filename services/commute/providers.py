from __future__ import annotations

import json
import math
from typing import Any, Dict, Optional
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from services.common.enums import TravelMode
from services.common.errors import RoutingError
from services.listings.models import Coordinates


class HttpTransport:
    def __init__(self, *, timeout_s: float = 10.0, user_agent: str = "rental-search-assistant/0.1") -> None:
        self._timeout_s = timeout_s
        self._user_agent = user_agent

    def get(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        if params:
            url = f"{url}?{urlencode(params)}"
        request = Request(url, headers={"User-Agent": self._user_agent}, method="GET")
        with urlopen(request, timeout=self._timeout_s) as response:  # nosec B310 - configured router URL
            payload = response.read()
        if not payload:
            return {}
        return json.loads(payload)


OSRM_PROFILES = {
    TravelMode.driving_traffic: "driving",
    TravelMode.driving: "driving",
    TravelMode.walking: "foot",
    TravelMode.cycling: "bike",
}


class OsrmRouter:
    """Route distance/duration from an OSRM server. Returns (meters, seconds)."""

    def __init__(self, *, base_url: str, transport: Optional[HttpTransport] = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._transport = transport or HttpTransport()

    def route(self, origin: Coordinates, destination: Coordinates, mode: TravelMode) -> tuple[float, float]:
        profile = OSRM_PROFILES.get(mode)
        if not profile:
            raise RoutingError("OSRM does not support mode", code="UNSUPPORTED_MODE", details={"mode": mode.value})
        coordinates = f"{origin.longitude},{origin.latitude};{destination.longitude},{destination.latitude}"
        try:
            response = self._transport.get(
                f"{self._base_url}/route/v1/{profile}/{coordinates}", params={"overview": "false"}
            )
        except Exception as exc:  # pragma: no cover - network
            raise RoutingError("OSRM routing failed", details={"error": repr(exc)}) from exc
        routes = response.get("routes") if isinstance(response, dict) else None
        if not routes:
            raise RoutingError("OSRM returned no routes", code="NO_ROUTE")
        route = routes[0] if isinstance(routes, list) else None
        if not isinstance(route, dict):
            raise RoutingError("OSRM returned a malformed route", code="INVALID_ROUTE")
        try:
            distance_m, duration_s = float(route.get("distance", 0)), float(route.get("duration", 0))
        except (TypeError, ValueError, OverflowError) as exc:
            raise RoutingError("OSRM returned a malformed route", code="INVALID_ROUTE") from exc
        if not (math.isfinite(distance_m) and math.isfinite(duration_s)) or distance_m < 0 or duration_s < 0:
            raise RoutingError("OSRM returned a malformed route", code="INVALID_ROUTE")
        return distance_m, duration_s
