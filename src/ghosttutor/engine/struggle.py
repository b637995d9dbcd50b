"""Struggle detection: turns session counts into struggle indicators."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ghosttutor.engine.metrics import SessionCounts


class StruggleType(str, Enum):
    REPEATED_FAILURES = "repeated_failures"
    EXCESSIVE_HINTS = "excessive_hints"
    LONG_COMPLETION_TIMES = "long_completion_times"
    LOW_ENGAGEMENT = "low_engagement"
    CONFUSION_PATTERNS = "confusion_patterns"


FAILURE_SUCCESS_RATE = 0.3
FAILURE_MIN_ENCOUNTERS = 3
HINTS_PER_ENCOUNTER_LIMIT = 3
HINTS_PER_ENCOUNTER_SATURATION = 5
SLOW_ENCOUNTER_MINUTES = 15
SLOW_ENCOUNTER_SATURATION = 30
QUESTIONS_PER_PATCH_FLOOR = 0.5
LOW_ENGAGEMENT_SEVERITY = 0.6


@dataclass(frozen=True)
class StruggleIndicator:
    type: StruggleType
    severity: float  # 0.0 to 1.0
    description: str
    detected_at: datetime
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "severity": self.severity,
            "description": self.description,
            "detectedAt": self.detected_at.isoformat(),
            "suggestions": list(self.suggestions),
        }


def detect_struggles(counts: SessionCounts, detected_at: datetime) -> list[StruggleIndicator]:
    """Return every indicator whose rule fires for these counts.

    Rules are independent; several can fire at once.
    """
    indicators: list[StruggleIndicator] = []

    if (
        counts.success_rate < FAILURE_SUCCESS_RATE
        and counts.encounters_started >= FAILURE_MIN_ENCOUNTERS
    ):
        indicators.append(StruggleIndicator(
            type=StruggleType.REPEATED_FAILURES,
            severity=1.0 - counts.success_rate,
            description="Player is failing most encounters",
            detected_at=detected_at,
            suggestions=[
                "Reduce ghost complexity",
                "Increase hint availability",
                "Provide more educational content",
            ],
        ))

    hints_per_encounter = counts.hints_used / max(1, counts.encounters_started)
    if hints_per_encounter > HINTS_PER_ENCOUNTER_LIMIT:
        indicators.append(StruggleIndicator(
            type=StruggleType.EXCESSIVE_HINTS,
            severity=min(1.0, hints_per_encounter / HINTS_PER_ENCOUNTER_SATURATION),
            description="Player is relying heavily on hints",
            detected_at=detected_at,
            suggestions=[
                "Gradually reduce hint availability",
                "Encourage independent problem-solving",
                "Provide confidence-building feedback",
            ],
        ))

    if counts.average_completion_time > SLOW_ENCOUNTER_MINUTES:
        indicators.append(StruggleIndicator(
            type=StruggleType.LONG_COMPLETION_TIMES,
            severity=min(1.0, counts.average_completion_time / SLOW_ENCOUNTER_SATURATION),
            description="Player is taking a long time to complete encounters",
            detected_at=detected_at,
            suggestions=[
                "Simplify ghost complexity",
                "Provide time management hints",
                "Offer quick-win opportunities",
            ],
        ))

    if counts.questions_asked < counts.patches_applied * QUESTIONS_PER_PATCH_FLOOR:
        indicators.append(StruggleIndicator(
            type=StruggleType.LOW_ENGAGEMENT,
            severity=LOW_ENGAGEMENT_SEVERITY,
            description="Player is not engaging deeply with educational content",
            detected_at=detected_at,
            suggestions=[
                "Encourage curiosity with interesting questions",
                "Provide more interactive educational content",
                "Reward exploration and questioning",
            ],
        ))

    return indicators
