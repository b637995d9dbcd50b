"""Predefined difficulty profiles and profile matching."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ghosttutor.engine.settings_model import DifficultySettings

DEFAULT_PROFILE_ID = "balanced"
LABEL_SIMILARITY = 0.8


@dataclass(frozen=True)
class DifficultyProfile:
    id: str
    name: str
    description: str
    settings: DifficultySettings
    target_success_rate: float
    adaptation_speed: float

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "settings": self.settings.to_dict(),
            "targetSuccessRate": self.target_success_rate,
            "adaptationSpeed": self.adaptation_speed,
        }


PROFILES: tuple[DifficultyProfile, ...] = (
    DifficultyProfile(
        id="beginner",
        name="Beginner",
        description="Gentle introduction with lots of guidance",
        settings=DifficultySettings(
            ghost_complexity=0.3,
            patch_risk_multiplier=0.7,
            hint_availability=0.9,
            time_constraints=False,
            adaptive_assistance=True,
            educational_depth=0.8,
            error_tolerance=0.8,
            feedback_frequency=0.9,
        ),
        target_success_rate=0.8,
        adaptation_speed=0.3,
    ),
    DifficultyProfile(
        id="balanced",
        name="Balanced",
        description="Standard difficulty with moderate assistance",
        settings=DifficultySettings(
            ghost_complexity=0.5,
            patch_risk_multiplier=1.0,
            hint_availability=0.6,
            time_constraints=False,
            adaptive_assistance=True,
            educational_depth=0.7,
            error_tolerance=0.6,
            feedback_frequency=0.7,
        ),
        target_success_rate=0.65,
        adaptation_speed=0.5,
    ),
    DifficultyProfile(
        id="challenging",
        name="Challenging",
        description="Higher difficulty with minimal assistance",
        settings=DifficultySettings(
            ghost_complexity=0.7,
            patch_risk_multiplier=1.3,
            hint_availability=0.4,
            time_constraints=True,
            adaptive_assistance=False,
            educational_depth=0.5,
            error_tolerance=0.4,
            feedback_frequency=0.5,
        ),
        target_success_rate=0.5,
        adaptation_speed=0.7,
    ),
    DifficultyProfile(
        id="expert",
        name="Expert",
        description="Maximum difficulty for experienced players",
        settings=DifficultySettings(
            ghost_complexity=0.9,
            patch_risk_multiplier=1.6,
            hint_availability=0.2,
            time_constraints=True,
            adaptive_assistance=False,
            educational_depth=0.3,
            error_tolerance=0.2,
            feedback_frequency=0.3,
        ),
        target_success_rate=0.4,
        adaptation_speed=0.9,
    ),
)


class ProfileCatalog:
    """Read-only lookup over the predefined profiles."""

    def __init__(self, profiles: tuple[DifficultyProfile, ...] = PROFILES):
        self._profiles = {p.id: p for p in profiles}
        if DEFAULT_PROFILE_ID not in self._profiles:
            raise ValueError(f"Catalog must define the '{DEFAULT_PROFILE_ID}' profile")

    def get(self, profile_id: str) -> Optional[DifficultyProfile]:
        return self._profiles.get(profile_id)

    def list_profiles(self) -> list[DifficultyProfile]:
        return list(self._profiles.values())

    @property
    def default(self) -> DifficultyProfile:
        return self._profiles[DEFAULT_PROFILE_ID]

    def match(self, settings: DifficultySettings, threshold: float = 0.3) -> DifficultyProfile:
        """Closest profile by mean absolute numeric difference.

        Falls back to the default profile when nothing is within ``threshold``.
        The match is only a reference point for target success rate and
        adaptation speed; it need not describe the live settings exactly.
        """
        best = min(self._profiles.values(), key=lambda p: settings.difference(p.settings))
        if settings.difference(best.settings) < threshold:
            return best
        return self.default

    def label(self, settings: DifficultySettings) -> str:
        """Display name for live settings, or "Custom" when none is close."""
        best = max(self._profiles.values(), key=lambda p: settings.similarity(p.settings))
        if settings.similarity(best.settings) > LABEL_SIMILARITY:
            return best.name
        return "Custom"
