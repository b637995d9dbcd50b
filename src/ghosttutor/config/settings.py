"""Configuration model for GhostTutor."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field


class TuningConfig(BaseModel):
    """Tuned constants of the adaptation loop.

    Defaults are the values the game shipped with; changing them changes
    how the adaptation feels to players.
    """
    adjustment_cooldown_ms: int = Field(default=60_000, ge=0)
    adjustment_history_limit: int = Field(default=20, gt=0)
    performance_history_limit: int = Field(default=10, gt=0)
    acceptable_deviation: float = Field(default=0.1, ge=0)
    directional_deviation: float = Field(default=0.15, ge=0)
    profile_match_threshold: float = Field(default=0.3, ge=0)
    velocity_window: int = Field(default=3, gt=0)
    hint_quota_per_context: int = Field(default=5, ge=0)
    override_severity: float = Field(default=0.7, ge=0, le=1)
    engaged_actions_per_minute: float = Field(default=2.0, gt=0)
    change_epsilon: float = Field(default=0.01, ge=0)


class Settings(BaseModel):
    log_level: str = "INFO"
    data_dir: Path = Path.home() / ".ghosttutor"
    initial_profile: str = "balanced"
    tuning: TuningConfig = Field(default_factory=TuningConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Settings":
        config_path = config_path or (Path.home() / ".ghosttutor" / "config.yaml")
        data: dict = {}
        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        settings = cls(**data)
        env_level = os.environ.get("GHOSTTUTOR_LOG_LEVEL")
        if env_level:
            settings.log_level = env_level
        return settings

    def save(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        config_path = self.data_dir / "config.yaml"
        with open(config_path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False)
