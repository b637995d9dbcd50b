"""JSON-lines protocol messages for the game bridge."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional


def _jsonable(value: Any) -> Any:
    """Convert engine values (dataclasses with ``to_dict``) into plain JSON data."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


@dataclass
class Request:
    """Incoming request from the game client."""
    id: int
    method: str
    params: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> Request:
        params = data.get("params")
        return cls(
            id=data.get("id", 0),
            method=data["method"],
            params=params if isinstance(params, dict) else {},
        )


@dataclass
class Response:
    """Outgoing response; exactly one of ``result`` / ``error`` is sent."""
    id: int
    result: Any = None
    error: Optional[str] = None

    def to_json_line(self) -> str:
        d: dict = {"id": self.id}
        if self.error is not None:
            d["error"] = self.error
        else:
            d["result"] = _jsonable(self.result)
        return json.dumps(d) + "\n"


@dataclass
class Notification:
    """Server-initiated message (no id, no response expected)."""
    method: str
    params: dict = field(default_factory=dict)

    def to_json_line(self) -> str:
        return json.dumps({"method": self.method, "params": _jsonable(self.params)}) + "\n"


class NotificationPublisher:
    """Adapts the controller's ``publish`` calls onto notification lines."""

    def __init__(self, write_notification):
        self._write_notification = write_notification

    def publish(self, event_type: str, payload: dict) -> None:
        self._write_notification(Notification(event_type, _jsonable(payload)))
