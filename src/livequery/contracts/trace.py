"""Per-view tracing for debugging and auditability."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class TraceEvent:
    """Single event in a view trace."""
    timestamp: str
    event_type: str  # e.g., "subscribe_requested", "snapshot_recomputed"
    data: dict[str, Any]

    @classmethod
    def now(cls, event_type: str, **data) -> TraceEvent:
        """Create event with current timestamp."""
        return cls(
            timestamp=datetime.now(timezone.utc).isoformat(),
            event_type=event_type,
            data=data
        )


@dataclass
class ViewTrace:
    """Bounded trace of everything one view did.

    Once ``max_events`` is reached the oldest events are dropped; ``totals``
    keeps counting regardless.
    """
    view_id: str
    query: str
    max_events: int = 500
    events: list[TraceEvent] = field(default_factory=list)
    totals: Counter = field(default_factory=Counter)

    def add_event(self, event_type: str, **data) -> None:
        """Add event to trace."""
        self.totals[event_type] += 1
        self.events.append(TraceEvent.now(event_type, **data))
        if len(self.events) > self.max_events:
            del self.events[: len(self.events) - self.max_events]

    def count(self, event_type: str) -> int:
        return self.totals[event_type]

    def to_dict(self) -> dict:
        """Convert to dictionary for logging."""
        return {
            "view_id": self.view_id,
            "query": self.query,
            "totals": dict(self.totals),
            "events": [
                {
                    "timestamp": e.timestamp,
                    "type": e.event_type,
                    "data": e.data
                }
                for e in self.events
            ]
        }
