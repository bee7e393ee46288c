from typing import Any, Dict, Optional


class AssistantError(RuntimeError):
    def __init__(self, message: str, *, code: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


class ReasoningError(AssistantError):
    def __init__(self, message: str, *, code: str = "REASONING_ERROR", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code=code, details=details)


class RoutingError(AssistantError):
    def __init__(self, message: str, *, code: str = "ROUTING_ERROR", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code=code, details=details)


class LocationScoringError(AssistantError):
    def __init__(
        self, message: str, *, code: str = "LOCATION_SCORING_ERROR", details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, code=code, details=details)


class ListingSourceError(AssistantError):
    def __init__(self, message: str, *, code: str = "LISTING_SOURCE_ERROR", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code=code, details=details)
