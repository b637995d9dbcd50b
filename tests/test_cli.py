"""Tests for the click command group."""

import yaml
from click.testing import CliRunner

from ghosttutor.cli import main


def _run(tmp_path, *args):
    runner = CliRunner()
    return runner.invoke(main, ["--config", str(tmp_path / "config.yaml"), *args])


def test_profiles(tmp_path):
    result = _run(tmp_path, "profiles")
    assert result.exit_code == 0
    assert "balanced: Balanced" in result.output
    assert "expert" in result.output


def test_config_shows_tuning(tmp_path):
    result = _run(tmp_path, "config")
    assert result.exit_code == 0
    data = yaml.safe_load(result.output)
    assert data["tuning"]["adjustment_cooldown_ms"] == 60000


def test_replay_prints_adjustments(tmp_path, events_file):
    result = _run(tmp_path, "replay", str(events_file))
    assert result.exit_code == 0, result.output
    assert "increasing difficulty" in result.output
    assert "ghost_complexity: 0.500 -> 0.550" in result.output
    assert "adjustment(s)" in result.output


def test_replay_with_profile(tmp_path, events_file):
    result = _run(tmp_path, "replay", str(events_file), "--profile", "expert")
    assert result.exit_code == 0, result.output
    assert "increasing difficulty" in result.output


def test_replay_accepts_bare_event_list(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text(yaml.dump([{"type": "ghost_encountered", "context": {"resolved": False}}] * 4))
    result = _run(tmp_path, "replay", str(path))
    assert result.exit_code == 0, result.output
    assert "reducing difficulty" in result.output


def test_replay_missing_file(tmp_path):
    result = _run(tmp_path, "replay", str(tmp_path / "nope.yaml"))
    assert result.exit_code != 0
