from enum import Enum


class HousingType(str, Enum):
    house = "house"
    apartment = "apartment"
    condo = "condo"
    unknown = "unknown"


class Intent(str, Enum):
    housing_search = "housing_search"
    commute_analysis = "commute_analysis"
    market_summary = "market_summary"
    combined_search = "combined_search"


class Capability(str, Enum):
    housing_search = "housing_search"
    commute_scorer = "commute_scorer"
    housing_summary = "housing_summary"
    location_scorer = "location_scorer"


class ExecutionOrder(str, Enum):
    sequential = "sequential"
    parallel = "parallel"


class TravelMode(str, Enum):
    driving_traffic = "driving-traffic"
    driving = "driving"
    walking = "walking"
    cycling = "cycling"
    transit = "transit"


class CommuteSource(str, Enum):
    router = "router"
    reasoning_estimate = "reasoning_estimate"
    synthetic_estimate = "synthetic_estimate"


class MatchPath(str, Enum):
    deterministic = "deterministic"
    semantic = "semantic"
    none = "none"
