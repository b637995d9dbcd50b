"""Read-only view of the game's event log (the evidence board)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class EventType(str, Enum):
    GHOST_ENCOUNTERED = "ghost_encountered"
    PATCH_APPLIED = "patch_applied"
    ETHICS_VIOLATION = "ethics_violation"
    ROOM_ENTERED = "room_entered"
    METER_CHANGE = "meter_change"


def _to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _parse_timestamp(raw: Any) -> Optional[datetime]:
    """Parse an ISO timestamp into local naive time, the controller clock's frame.

    Accepts the trailing "Z" that browser ``Date.toISOString()`` produces.
    """
    if isinstance(raw, datetime):
        return _to_local_naive(raw)
    if isinstance(raw, str):
        text = raw.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return _to_local_naive(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class GameEvent:
    """One evidence-board entry.

    ``type`` is kept as a plain string: the log is written by another
    subsystem and may carry types this package does not know about.
    """
    type: str
    timestamp: Optional[datetime] = None
    context: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> GameEvent:
        context = data.get("context")
        return cls(
            type=str(data.get("type", "")),
            timestamp=_parse_timestamp(data.get("timestamp")),
            context=context if isinstance(context, dict) else {},
        )

    def is_type(self, event_type: EventType) -> bool:
        return self.type == event_type.value

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "context": dict(self.context),
        }


@dataclass(frozen=True)
class EventLogSnapshot:
    """Ordered event log plus the time the run started."""
    started_at: datetime
    events: tuple[GameEvent, ...] = ()

    @classmethod
    def from_dict(cls, data: dict, default_start: Optional[datetime] = None) -> EventLogSnapshot:
        started_at = _parse_timestamp(data.get("startedAt") or data.get("started_at"))
        if started_at is None:
            started_at = default_start or datetime.now()
        raw_events = data.get("events")
        if not isinstance(raw_events, (list, tuple)):
            raw_events = ()
        events = tuple(
            GameEvent.from_dict(raw) for raw in raw_events if isinstance(raw, dict)
        )
        return cls(started_at=started_at, events=events)

    def count(self, event_type: EventType) -> int:
        return sum(1 for e in self.events if e.is_type(event_type))

    def __len__(self) -> int:
        return len(self.events)
