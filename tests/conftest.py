"""Shared fixtures for GhostTutor tests."""

from __future__ import annotations

import random
from datetime import datetime, timedelta

import pytest
import yaml

from ghosttutor.engine.controller import DifficultyController
from ghosttutor.engine.events import EventLogSnapshot, GameEvent

START = datetime(2026, 1, 1, 12, 0, 0)


class FakeClock:
    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class RecordingNotifier:
    def __init__(self):
        self.events: list[tuple[str, dict]] = []

    def publish(self, event_type: str, payload: dict) -> None:
        self.events.append((event_type, payload))


def _session_log(
    encounters: int = 0,
    resolved: int = 0,
    patches: int = 0,
    questions: int = 0,
    extra: int = 0,
    started_at: datetime = START,
) -> EventLogSnapshot:
    """Event log with ``encounters`` ghost encounters, the first ``resolved`` of them solved."""
    events = [
        GameEvent("ghost_encountered", context={"resolved": i < resolved})
        for i in range(encounters)
    ]
    events += [GameEvent("patch_applied", context={"risk": 0.4}) for _ in range(patches)]
    events += [GameEvent("room_entered", context={"questionsAsked": 1}) for _ in range(questions)]
    events += [GameEvent("meter_change", context={}) for _ in range(extra)]
    return EventLogSnapshot(started_at=started_at, events=tuple(events))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def session_log():
    return _session_log


@pytest.fixture
def controller(clock, notifier):
    return DifficultyController(notifier=notifier, clock=clock, rng=random.Random(7))


@pytest.fixture
def events_file(tmp_path):
    """A YAML event log of a player who solves every encounter."""
    data = {
        "startedAt": START.isoformat(),
        "events": [
            {"type": "ghost_encountered", "timestamp": START.isoformat(), "context": {"resolved": True}}
            for _ in range(6)
        ],
    }
    path = tmp_path / "events.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path
