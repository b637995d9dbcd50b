"""Hint gating: which hints to show, and whether to show any."""

from __future__ import annotations

import math
import random
from enum import Enum
from typing import Optional, Union

from ghosttutor.engine.metrics import PlayerPerformanceMetrics
from ghosttutor.engine.settings_model import DifficultySettings
from ghosttutor.engine.struggle import StruggleType


class HintContext(str, Enum):
    GHOST_ENCOUNTER = "ghost_encounter"
    PATCH_GENERATION = "patch_generation"
    PATCH_REVIEW = "patch_review"
    METER_MANAGEMENT = "meter_management"


CONTEXT_HINTS: dict[HintContext, list[str]] = {
    HintContext.GHOST_ENCOUNTER: [
        "Try asking the ghost about the specific error symptoms",
        "Look for patterns in the code that might indicate the problem",
        "Consider the ghost's behavior - it often reflects the bug type",
    ],
    HintContext.PATCH_GENERATION: [
        "Start with the simplest fix that addresses the core issue",
        "Consider the side effects of your proposed changes",
        "Think about how this fix might affect other parts of the system",
    ],
    HintContext.PATCH_REVIEW: [
        "Check if the patch actually solves the root cause",
        "Consider the risk level - sometimes a safer approach is better",
        "Look for alternative solutions that might be more elegant",
    ],
    HintContext.METER_MANAGEMENT: [
        "Balance stability and insight - both are important",
        "High-risk patches can teach more but may destabilize the system",
        "Ask questions to gain insight without risking stability",
    ],
}

STRUGGLE_HINTS: dict[StruggleType, list[str]] = {
    StruggleType.REPEATED_FAILURES: [
        "Take a step back and ask the ghost more questions",
        "Try a more conservative approach with lower-risk patches",
        "Focus on understanding the problem before attempting fixes",
    ],
    StruggleType.EXCESSIVE_HINTS: [
        "You're doing great! Try to rely on hints less as you gain confidence",
        "Challenge yourself to solve the next problem with fewer hints",
        "Trust your instincts - you know more than you think",
    ],
    StruggleType.LONG_COMPLETION_TIMES: [
        "Don't overthink it - sometimes the simple solution is the right one",
        "Set a time limit for yourself to encourage quicker decision-making",
        "Remember that you can always refactor if your first attempt isn't perfect",
    ],
}

# Below this availability hints are only shown to struggling players.
HINT_AVAILABILITY_GATE = 0.5


def as_context(context: Union[HintContext, str]) -> HintContext:
    """Validate a context name; raises ValueError for unknown names."""
    return HintContext(context)


class HintGatekeeper:
    def __init__(self, quota_per_context: int = 5, rng: Optional[random.Random] = None):
        self.quota_per_context = quota_per_context
        self._rng = rng or random.Random()
        self._usage: dict[HintContext, int] = {}

    def contextual_hints(
        self,
        context: Union[HintContext, str],
        metrics: Optional[PlayerPerformanceMetrics],
        settings: DifficultySettings,
    ) -> list[str]:
        """Base hints for the context, then hints for each active struggle.

        The list is cut to ``ceil(len * hint_availability)`` entries.
        """
        candidates = list(CONTEXT_HINTS.get(as_context(context), []))
        if metrics is not None:
            for indicator in metrics.struggling_indicators:
                candidates.extend(STRUGGLE_HINTS.get(indicator.type, []))

        limit = math.ceil(len(candidates) * settings.hint_availability)
        return candidates[:limit]

    def should_provide(
        self,
        context: Union[HintContext, str],
        metrics: Optional[PlayerPerformanceMetrics],
        settings: DifficultySettings,
    ) -> bool:
        context = as_context(context)
        if settings.adaptive_assistance and metrics is not None and metrics.struggling_indicators:
            return True

        return (
            settings.hint_availability > HINT_AVAILABILITY_GATE
            and self._usage.get(context, 0) < self.quota_per_context
            and self._rng.random() < settings.hint_availability
        )

    def record_usage(self, context: Union[HintContext, str]) -> int:
        context = as_context(context)
        self._usage[context] = self._usage.get(context, 0) + 1
        return self._usage[context]

    def usage(self) -> dict[HintContext, int]:
        return dict(self._usage)

    def total_used(self) -> int:
        return sum(self._usage.values())

    def reset(self) -> None:
        self._usage.clear()
