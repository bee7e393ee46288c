from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List


@dataclass(frozen=True)
class ObservabilityEvent:
    event_type: str
    details: Dict[str, Any]
    recorded_at: datetime


class Observability:
    def __init__(self) -> None:
        self._events: List[ObservabilityEvent] = []

    def record(self, event_type: str, **details: Any) -> None:
        self._events.append(
            ObservabilityEvent(
                event_type=event_type,
                details=details,
                recorded_at=datetime.now(tz=timezone.utc),
            )
        )

    def events(self, event_type: str | None = None) -> List[ObservabilityEvent]:
        if event_type is None:
            return list(self._events)
        return [event for event in self._events if event.event_type == event_type]
