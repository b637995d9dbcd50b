"""Difficulty adjustment: proportional correction plus struggle overrides.

Two layers run on every eligible analysis:

1. A proportional step nudges the knobs toward the active profile's
   target success rate, scaled by that profile's adaptation speed.
2. Acute struggle (indicator severity above the override threshold)
   forces a fixed correction on top of the first layer's result.

The engine only computes; applying the result is the controller's job.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ghosttutor.config.settings import TuningConfig
from ghosttutor.engine.metrics import PlayerPerformanceMetrics
from ghosttutor.engine.profiles import ProfileCatalog
from ghosttutor.engine.settings_model import DifficultySettings
from ghosttutor.engine.struggle import StruggleType

# Proportional step sizes, multiplied by the profile's adaptation speed.
COMPLEXITY_STEP = 0.1
RISK_STEP = 0.1
HINT_STEP = 0.1
TOLERANCE_STEP = 0.05

# Limits used by the proportional step when raising difficulty...
HARDER_HINT_FLOOR = 0.1
HARDER_TOLERANCE_FLOOR = 0.1
# ...and when lowering it.
EASIER_COMPLEXITY_FLOOR = 0.2
EASIER_RISK_FLOOR = 0.5

# (field, delta, floor, ceiling) applied per acute struggle type.
STRUGGLE_OVERRIDES: dict[StruggleType, list[tuple[str, float, float, float]]] = {
    StruggleType.REPEATED_FAILURES: [
        ("ghost_complexity", -0.2, 0.2, 1.0),
        ("hint_availability", +0.2, 0.0, 1.0),
    ],
    StruggleType.EXCESSIVE_HINTS: [
        ("hint_availability", -0.1, 0.3, 1.0),
    ],
    StruggleType.LONG_COMPLETION_TIMES: [
        ("ghost_complexity", -0.15, 0.3, 1.0),
        ("educational_depth", -0.1, 0.3, 1.0),
    ],
}


@dataclass(frozen=True)
class DifficultyAdjustment:
    timestamp: datetime
    reason: str
    old_settings: DifficultySettings
    new_settings: DifficultySettings
    expected_impact: str
    player_feedback: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "reason": self.reason,
            "oldSettings": self.old_settings.to_dict(),
            "newSettings": self.new_settings.to_dict(),
            "expectedImpact": self.expected_impact,
            "playerFeedback": self.player_feedback,
        }


def _percent(rate: float) -> int:
    """Whole percent, rounding halves up (5/8 reads as 63%)."""
    return math.floor(rate * 100 + 0.5)


def cooldown_elapsed(now: datetime, last_adjustment: datetime, cooldown_ms: int) -> bool:
    return (now - last_adjustment).total_seconds() * 1000 >= cooldown_ms


class AdjustmentEngine:
    def __init__(self, catalog: ProfileCatalog, tuning: Optional[TuningConfig] = None):
        self.catalog = catalog
        self.tuning = tuning or TuningConfig()

    def compute(
        self,
        settings: DifficultySettings,
        metrics: PlayerPerformanceMetrics,
        now: datetime,
        last_adjustment_time: datetime,
    ) -> Optional[DifficultyAdjustment]:
        """Return the adjustment these metrics call for, or None.

        None means one of: still cooling down, performance within the
        acceptable band around the target, or nothing moved enough to count.
        """
        if not cooldown_elapsed(now, last_adjustment_time, self.tuning.adjustment_cooldown_ms):
            return None

        profile = self.catalog.match(settings, self.tuning.profile_match_threshold)
        deviation = metrics.success_rate - profile.target_success_rate
        if abs(deviation) < self.tuning.acceptable_deviation:
            return None

        values = settings.values()
        reason, impact = self._apply_proportional(values, deviation, profile.adaptation_speed, metrics)
        overridden = self._apply_overrides(values, metrics)

        if overridden:
            note = "targeted help for " + ", ".join(t.value.replace("_", " ") for t in overridden)
            if reason:
                reason = f"{reason}; {note}"
                impact = f"{impact}, plus {note}"
            else:
                reason = f"Player struggling - {note}"
                impact = "Settings eased where the player is struggling most"

        new_settings = DifficultySettings.from_dict(values)
        if not new_settings.differs_from(settings, self.tuning.change_epsilon):
            return None

        return DifficultyAdjustment(
            timestamp=now,
            reason=reason,
            old_settings=settings,
            new_settings=new_settings,
            expected_impact=impact,
        )

    def _apply_proportional(
        self,
        values: dict,
        deviation: float,
        speed: float,
        metrics: PlayerPerformanceMetrics,
    ) -> tuple[str, str]:
        """Mutate ``values`` in place; return (reason, expected impact)."""
        if deviation > self.tuning.directional_deviation:
            values["ghost_complexity"] = min(1.0, values["ghost_complexity"] + COMPLEXITY_STEP * speed)
            values["patch_risk_multiplier"] = min(2.0, values["patch_risk_multiplier"] + RISK_STEP * speed)
            values["hint_availability"] = max(HARDER_HINT_FLOOR, values["hint_availability"] - HINT_STEP * speed)
            values["error_tolerance"] = max(HARDER_TOLERANCE_FLOOR, values["error_tolerance"] - TOLERANCE_STEP * speed)
            return (
                f"High success rate ({_percent(metrics.success_rate)}%) - increasing difficulty",
                "More challenging encounters with less assistance",
            )

        if deviation < -self.tuning.directional_deviation:
            values["ghost_complexity"] = max(EASIER_COMPLEXITY_FLOOR, values["ghost_complexity"] - COMPLEXITY_STEP * speed)
            values["patch_risk_multiplier"] = max(EASIER_RISK_FLOOR, values["patch_risk_multiplier"] - RISK_STEP * speed)
            values["hint_availability"] = min(1.0, values["hint_availability"] + HINT_STEP * speed)
            values["error_tolerance"] = min(1.0, values["error_tolerance"] + TOLERANCE_STEP * speed)
            values["adaptive_assistance"] = True
            return (
                f"Low success rate ({_percent(metrics.success_rate)}%) - reducing difficulty",
                "Easier encounters with more assistance and hints",
            )

        # Between the acceptable band and the directional threshold: hold.
        return "", ""

    def _apply_overrides(self, values: dict, metrics: PlayerPerformanceMetrics) -> list[StruggleType]:
        applied: list[StruggleType] = []
        for indicator in metrics.struggling_indicators:
            if indicator.severity <= self.tuning.override_severity:
                continue
            rules = STRUGGLE_OVERRIDES.get(indicator.type)
            if not rules:
                continue
            for name, delta, floor, ceiling in rules:
                values[name] = max(floor, min(ceiling, values[name] + delta))
            applied.append(indicator.type)
        return applied
