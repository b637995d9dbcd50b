"""Performance metrics derived from the event log.

Everything here is recomputed from scratch on each analysis; the only
state consulted is the history of earlier snapshots, which the caller
passes in.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Sequence

from ghosttutor.engine.events import EventLogSnapshot, EventType
from ghosttutor.engine.struggle import StruggleIndicator, detect_struggles


@dataclass(frozen=True)
class SessionCounts:
    """Raw tallies the struggle rules read."""
    total_play_time: float  # minutes
    encounters_started: int
    encounters_completed: int
    success_rate: float
    average_completion_time: float  # minutes
    hints_used: int
    questions_asked: int
    patches_applied: int
    ethics_violations: int


@dataclass(frozen=True)
class PlayerPerformanceMetrics:
    success_rate: float
    average_completion_time: float
    hints_used: int
    questions_asked: int
    patches_applied: int
    ethics_violations: int
    struggling_indicators: list[StruggleIndicator] = field(default_factory=list)
    learning_velocity: float = 0.0
    engagement_level: float = 0.0

    def to_dict(self) -> dict:
        return {
            "successRate": self.success_rate,
            "averageCompletionTime": self.average_completion_time,
            "hintsUsed": self.hints_used,
            "questionsAsked": self.questions_asked,
            "patchesApplied": self.patches_applied,
            "ethicsViolations": self.ethics_violations,
            "strugglingIndicators": [i.to_dict() for i in self.struggling_indicators],
            "learningVelocity": self.learning_velocity,
            "engagementLevel": self.engagement_level,
        }


def _is_positive_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return value > 0


def _usable_rate(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def count_session(
    log: EventLogSnapshot,
    now: datetime,
    hint_usage: Mapping[Any, int],
) -> SessionCounts:
    total_play_time = max(0.0, (now - log.started_at).total_seconds() / 60)

    encounters = [e for e in log.events if e.is_type(EventType.GHOST_ENCOUNTERED)]
    encounters_started = len(encounters)
    encounters_completed = sum(1 for e in encounters if e.context.get("resolved") is True)

    success_rate = encounters_completed / encounters_started if encounters_started else 0.0
    average_completion_time = (
        total_play_time / encounters_completed if encounters_completed else 0.0
    )

    # Counts events carrying a positive counter, not the counter values.
    questions_asked = sum(
        1 for e in log.events
        if _is_positive_number(e.context.get("questionsAsked", e.context.get("questions_asked")))
    )

    return SessionCounts(
        total_play_time=total_play_time,
        encounters_started=encounters_started,
        encounters_completed=encounters_completed,
        success_rate=success_rate,
        average_completion_time=average_completion_time,
        hints_used=sum(hint_usage.values()),
        questions_asked=questions_asked,
        patches_applied=log.count(EventType.PATCH_APPLIED),
        ethics_violations=log.count(EventType.ETHICS_VIOLATION),
    )


def learning_velocity(history: Sequence[PlayerPerformanceMetrics], window: int = 3) -> float:
    """Mean success rate of the newest ``window`` snapshots minus the window before.

    Positive means the player is improving. Snapshots with an unusable
    success rate are ignored.
    """
    rates = [m.success_rate for m in history if _usable_rate(getattr(m, "success_rate", None))]
    if len(rates) < 2:
        return 0.0

    recent = rates[-window:]
    older = rates[-2 * window:-window]
    if not older:
        return 0.0

    return sum(recent) / len(recent) - sum(older) / len(older)


def engagement_level(
    event_count: int, total_play_time: float, engaged_actions_per_minute: float = 2.0
) -> float:
    actions_per_minute = event_count / max(1.0, total_play_time)
    return max(0.0, min(1.0, actions_per_minute / engaged_actions_per_minute))


class MetricsCalculator:
    """Builds a :class:`PlayerPerformanceMetrics` snapshot from an event log."""

    def __init__(self, velocity_window: int = 3, engaged_actions_per_minute: float = 2.0):
        self.velocity_window = velocity_window
        self.engaged_actions_per_minute = engaged_actions_per_minute

    def calculate(
        self,
        log: EventLogSnapshot,
        now: datetime,
        hint_usage: Mapping[Any, int],
        history: Sequence[PlayerPerformanceMetrics] = (),
    ) -> PlayerPerformanceMetrics:
        counts = count_session(log, now, hint_usage)
        return PlayerPerformanceMetrics(
            success_rate=counts.success_rate,
            average_completion_time=counts.average_completion_time,
            hints_used=counts.hints_used,
            questions_asked=counts.questions_asked,
            patches_applied=counts.patches_applied,
            ethics_violations=counts.ethics_violations,
            struggling_indicators=detect_struggles(counts, detected_at=now),
            learning_velocity=learning_velocity(history, self.velocity_window),
            engagement_level=engagement_level(
                len(log), counts.total_play_time, self.engaged_actions_per_minute
            ),
        )
