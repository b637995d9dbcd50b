"""Server handler: dispatches JSON-lines requests to the difficulty controller."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ghosttutor.config.settings import Settings
from ghosttutor.engine.controller import DifficultyController
from ghosttutor.engine.settings_model import DifficultySettings

from .protocol import Notification, NotificationPublisher

logger = logging.getLogger(__name__)


class ServerHandler:
    """Routes incoming requests to controller methods and returns result dicts."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        write_notification: Optional[Callable[[Notification], None]] = None,
        controller: Optional[DifficultyController] = None,
    ):
        self.settings = settings or Settings.load()
        self._write_notification = write_notification or (lambda n: None)
        self.controller = controller or DifficultyController(
            notifier=NotificationPublisher(self._write_notification),
            tuning=self.settings.tuning,
            initial_profile=self.settings.initial_profile,
        )

    async def dispatch(self, msg: dict) -> dict:
        """Route a request message to the appropriate handler method."""
        method = msg.get("method", "")
        params = msg.get("params") or {}

        handler_map = {
            "analyze": self._analyze,
            "getSettings": self._get_settings,
            "setProfile": self._set_profile,
            "updateSettings": self._update_settings,
            "listProfiles": self._list_profiles,
            "getHints": self._get_hints,
            "shouldProvideHints": self._should_provide_hints,
            "recordHintUsage": self._record_hint_usage,
            "getAdjustmentHistory": self._get_adjustment_history,
            "getPerformanceHistory": self._get_performance_history,
            "snapshot": self._snapshot,
        }

        handler = handler_map.get(method)
        if handler is None:
            raise ValueError(f"Unknown method: {method}")

        logger.debug("Dispatching %s", method)
        return await handler(params)

    async def _analyze(self, params: dict) -> dict:
        adjustment = self.controller.analyze_and_adjust_difficulty(params)
        metrics = self.controller.latest_metrics()
        return {
            "adjusted": adjustment is not None,
            "adjustment": adjustment.to_dict() if adjustment else None,
            "metrics": metrics.to_dict() if metrics else None,
        }

    async def _get_settings(self, params: dict) -> dict:
        return {
            "settings": self.controller.get_current_settings().to_dict(),
            "profileLabel": self.controller.current_profile_label(),
        }

    async def _set_profile(self, params: dict) -> dict:
        ok = self.controller.set_difficulty_profile(params["profileId"])
        return {"ok": ok, "settings": self.controller.get_current_settings().to_dict()}

    async def _update_settings(self, params: dict) -> dict:
        raw = params.get("settings") or {}
        if not isinstance(raw, dict):
            raise ValueError("settings must be an object")
        # Unknown keys pass through untranslated so the controller rejects them.
        changes = {DifficultySettings.field_for(key) or key: value for key, value in raw.items()}
        ok = self.controller.update_settings(**changes)
        return {"ok": ok, "settings": self.controller.get_current_settings().to_dict()}

    async def _list_profiles(self, params: dict) -> dict:
        return {"profiles": [p.to_dict() for p in self.controller.get_difficulty_profiles()]}

    async def _get_hints(self, params: dict) -> dict:
        return {"hints": self.controller.get_contextual_hints(params["context"])}

    async def _should_provide_hints(self, params: dict) -> dict:
        return {"provide": self.controller.should_provide_hints(params["context"])}

    async def _record_hint_usage(self, params: dict) -> dict:
        self.controller.record_hint_usage(params["context"])
        return {"usage": self.controller.get_hint_usage()}

    async def _get_adjustment_history(self, params: dict) -> dict:
        return {"adjustments": [a.to_dict() for a in self.controller.get_adjustment_history()]}

    async def _get_performance_history(self, params: dict) -> dict:
        return {"metrics": [m.to_dict() for m in self.controller.get_performance_history()]}

    async def _snapshot(self, params: dict) -> dict:
        return self.controller.snapshot()
