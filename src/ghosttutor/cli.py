"""CLI entry point for GhostTutor."""

from datetime import timedelta
from pathlib import Path

import click
import yaml


def _fmt(value) -> str:
    if isinstance(value, float):
        return f"{value:.3f}"
    return str(value)


@click.group()
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Path to config.yaml (default: ~/.ghosttutor/config.yaml)")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None) -> None:
    """GhostTutor: adaptive difficulty for the haunted debugging game."""
    from ghosttutor.config.settings import Settings

    ctx.ensure_object(dict)
    ctx.obj["settings"] = Settings.load(config_path)


@main.command()
def profiles() -> None:
    """List the predefined difficulty profiles."""
    from ghosttutor.engine.profiles import ProfileCatalog

    for profile in ProfileCatalog().list_profiles():
        click.echo(
            f"  {profile.id}: {profile.name}, {profile.description} "
            f"(target {profile.target_success_rate:.0%}, speed {profile.adaptation_speed})"
        )


@main.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show the effective configuration."""
    settings = ctx.obj["settings"]
    click.echo(yaml.dump(settings.model_dump(mode="json"), default_flow_style=False), nl=False)


@main.command()
@click.argument("events_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--profile", "profile_id", default=None, help="Profile to start from")
@click.option("--step-minutes", default=2.0, show_default=True,
              help="Simulated minutes between consecutive events")
@click.pass_context
def replay(ctx: click.Context, events_file: Path, profile_id: str | None, step_minutes: float) -> None:
    """Replay a YAML event log through the controller and print each adjustment."""
    from ghosttutor.engine.controller import DifficultyController
    from ghosttutor.engine.events import EventLogSnapshot

    settings = ctx.obj["settings"]
    with open(events_file) as f:
        data = yaml.safe_load(f) or {}
    if isinstance(data, list):
        data = {"events": data}
    full_log = EventLogSnapshot.from_dict(data)

    now = full_log.started_at

    def clock():
        return now

    controller = DifficultyController(
        tuning=settings.tuning,
        clock=clock,
        initial_profile=profile_id or settings.initial_profile,
    )

    applied = 0
    for i in range(len(full_log)):
        now = full_log.started_at + timedelta(minutes=step_minutes * (i + 1))
        partial = EventLogSnapshot(started_at=full_log.started_at, events=full_log.events[: i + 1])
        adjustment = controller.analyze_and_adjust_difficulty(partial)
        if adjustment is None:
            continue
        applied += 1
        click.echo(f"[event {i + 1}] {adjustment.reason}")
        for name, value in adjustment.new_settings.values().items():
            old = getattr(adjustment.old_settings, name)
            if old != value:
                click.echo(f"    {name}: {_fmt(old)} -> {_fmt(value)}")

    click.echo(f"{applied} adjustment(s); final profile: {controller.current_profile_label()}")
