"""Adaptive difficulty controller: the single owner of difficulty state.

The hosting game calls :meth:`DifficultyController.analyze_and_adjust_difficulty`
after discrete player actions (encounter finished, room entered, patch
decided). Each call is synchronous and does a small, bounded amount of work.
"""

from __future__ import annotations

import logging
import random
import threading
from collections import deque
from datetime import datetime
from typing import Callable, Optional, Protocol, Union

from ghosttutor.config.settings import TuningConfig
from ghosttutor.engine.adjustment import AdjustmentEngine, DifficultyAdjustment, cooldown_elapsed
from ghosttutor.engine.events import EventLogSnapshot
from ghosttutor.engine.hints import HintContext, HintGatekeeper
from ghosttutor.engine.metrics import MetricsCalculator, PlayerPerformanceMetrics
from ghosttutor.engine.profiles import DEFAULT_PROFILE_ID, DifficultyProfile, ProfileCatalog
from ghosttutor.engine.settings_model import DifficultySettings

logger = logging.getLogger(__name__)

ADJUSTMENT_EVENT = "difficulty_adjustment"
PROFILE_CHANGED_EVENT = "difficulty_profile_changed"


class Notifier(Protocol):
    def publish(self, event_type: str, payload: dict) -> None: ...


class _NullNotifier:
    def publish(self, event_type: str, payload: dict) -> None:
        pass


class DifficultyController:
    """Owns live settings, both history buffers, hint usage and the cooldown.

    Nothing outside this class mutates those; accessors hand out copies or
    immutable values.
    """

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        tuning: Optional[TuningConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
        catalog: Optional[ProfileCatalog] = None,
        initial_profile: str = DEFAULT_PROFILE_ID,
    ):
        self.tuning = tuning or TuningConfig()
        self.catalog = catalog or ProfileCatalog()
        self._notifier = notifier or _NullNotifier()
        self._clock = clock or datetime.now

        self._calculator = MetricsCalculator(
            velocity_window=self.tuning.velocity_window,
            engaged_actions_per_minute=self.tuning.engaged_actions_per_minute,
        )
        self._engine = AdjustmentEngine(self.catalog, self.tuning)
        self._hints = HintGatekeeper(self.tuning.hint_quota_per_context, rng=rng)

        profile = self.catalog.get(initial_profile)
        if profile is None:
            logger.warning("Unknown initial profile %r, using %r", initial_profile, DEFAULT_PROFILE_ID)
            profile = self.catalog.default
        self._settings: DifficultySettings = profile.settings

        self._adjustments: deque[DifficultyAdjustment] = deque(
            maxlen=self.tuning.adjustment_history_limit
        )
        self._performance: deque[PlayerPerformanceMetrics] = deque(
            maxlen=self.tuning.performance_history_limit
        )
        self._last_adjustment_time: datetime = self._clock()
        self._lock = threading.Lock()

    # --- Control loop ---

    def analyze_and_adjust_difficulty(
        self, log: Union[EventLogSnapshot, dict]
    ) -> Optional[DifficultyAdjustment]:
        """Recompute metrics from ``log`` and adjust settings if warranted.

        Returns the applied adjustment, or None when cooling down or when
        nothing needs to change. Input that is neither a snapshot nor a dict
        is treated as an empty log.
        """
        if isinstance(log, dict):
            log = EventLogSnapshot.from_dict(log, default_start=self._clock())
        elif not isinstance(log, EventLogSnapshot):
            logger.warning("Ignoring event log of type %s", type(log).__name__)
            log = EventLogSnapshot(started_at=self._clock())

        with self._lock:
            now = self._clock()
            if not cooldown_elapsed(now, self._last_adjustment_time, self.tuning.adjustment_cooldown_ms):
                logger.debug("Skipping analysis: adjustment cooldown active")
                return None

            metrics = self._calculator.calculate(
                log, now, self._hints.usage(), list(self._performance)
            )
            self._performance.append(metrics)

            adjustment = self._engine.compute(self._settings, metrics, now, self._last_adjustment_time)
            if adjustment is None:
                logger.debug("No adjustment needed (success rate %.2f)", metrics.success_rate)
                return None

            self._apply(adjustment)
            self._last_adjustment_time = now

        logger.info("Difficulty adjusted: %s", adjustment.reason)
        self._publish(ADJUSTMENT_EVENT, adjustment, metrics)
        return adjustment

    def _apply(self, adjustment: DifficultyAdjustment) -> None:
        self._settings = adjustment.new_settings
        self._adjustments.append(adjustment)

    def _publish(
        self,
        event_type: str,
        adjustment: DifficultyAdjustment,
        metrics: Optional[PlayerPerformanceMetrics],
    ) -> None:
        # The adjustment is already applied; a broken listener must not undo it.
        try:
            self._notifier.publish(event_type, {"adjustment": adjustment, "metrics": metrics})
        except Exception:
            logger.exception("Notifier failed to publish %s", event_type)

    # --- Manual overrides ---

    def set_difficulty_profile(self, profile_id: str) -> bool:
        """Copy a catalog profile's settings wholesale. Ignores the cooldown."""
        profile = self.catalog.get(profile_id)
        if profile is None:
            return False

        with self._lock:
            adjustment = DifficultyAdjustment(
                timestamp=self._clock(),
                reason=f"Manual difficulty change to {profile.name}",
                old_settings=self._settings,
                new_settings=profile.settings,
                expected_impact=profile.description,
            )
            self._apply(adjustment)
            metrics = self._latest()

        logger.info("Difficulty profile set to %s", profile.id)
        self._publish(PROFILE_CHANGED_EVENT, adjustment, metrics)
        return True

    def update_settings(self, **changes) -> bool:
        """Change individual knobs, clamped to their bounds. Ignores the cooldown.

        Returns False for unknown field names or when nothing would change.
        """
        known = set(DifficultySettings.field_names())
        unknown = set(changes) - known
        if unknown or not changes:
            return False

        with self._lock:
            new_settings = self._settings.with_changes(**changes)
            if new_settings == self._settings:
                return False
            adjustment = DifficultyAdjustment(
                timestamp=self._clock(),
                reason="Manual settings update (" + ", ".join(sorted(changes)) + ")",
                old_settings=self._settings,
                new_settings=new_settings,
                expected_impact="Settings tuned by the player",
            )
            self._apply(adjustment)
            metrics = self._latest()

        logger.info("Difficulty settings updated: %s", ", ".join(sorted(changes)))
        self._publish(PROFILE_CHANGED_EVENT, adjustment, metrics)
        return True

    # --- Hints ---

    def get_contextual_hints(
        self,
        context: Union[HintContext, str],
        metrics: Optional[PlayerPerformanceMetrics] = None,
    ) -> list[str]:
        return self._hints.contextual_hints(context, metrics or self._latest(), self._settings)

    def should_provide_hints(
        self,
        context: Union[HintContext, str],
        metrics: Optional[PlayerPerformanceMetrics] = None,
    ) -> bool:
        return self._hints.should_provide(context, metrics or self._latest(), self._settings)

    def record_hint_usage(self, context: Union[HintContext, str]) -> None:
        with self._lock:
            self._hints.record_usage(context)

    def reset_hint_usage(self) -> None:
        with self._lock:
            self._hints.reset()

    def get_hint_usage(self) -> dict[str, int]:
        return {context.value: count for context, count in self._hints.usage().items()}

    # --- Accessors ---

    def get_current_settings(self) -> DifficultySettings:
        return self._settings

    def get_adjustment_history(self) -> list[DifficultyAdjustment]:
        return list(self._adjustments)

    def get_performance_history(self) -> list[PlayerPerformanceMetrics]:
        return list(self._performance)

    def get_difficulty_profiles(self) -> list[DifficultyProfile]:
        return self.catalog.list_profiles()

    def get_current_profile(self) -> DifficultyProfile:
        return self.catalog.match(self._settings, self.tuning.profile_match_threshold)

    def current_profile_label(self) -> str:
        return self.catalog.label(self._settings)

    def latest_metrics(self) -> Optional[PlayerPerformanceMetrics]:
        return self._latest()

    def _latest(self) -> Optional[PlayerPerformanceMetrics]:
        return self._performance[-1] if self._performance else None

    @property
    def last_adjustment_time(self) -> datetime:
        return self._last_adjustment_time

    def snapshot(self) -> dict:
        """JSON-friendly view of all controller state, for persistence by the host."""
        return {
            "settings": self._settings.to_dict(),
            "profileLabel": self.current_profile_label(),
            "adjustmentHistory": [a.to_dict() for a in self._adjustments],
            "performanceHistory": [m.to_dict() for m in self._performance],
            "hintUsage": self.get_hint_usage(),
            "lastAdjustmentTime": self._last_adjustment_time.isoformat(),
        }
