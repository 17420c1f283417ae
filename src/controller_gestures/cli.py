"""controller-gestures CLI.

Usage:
    controller-gestures demo pinch     Run a scripted gesture and print its events
    controller-gestures replay FILE    Replay a recorded session
    controller-gestures record FILE    Save a scripted session as a recording
    controller-gestures config         Print or write the default thresholds
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import numpy as np
import typer

from controller_gestures.config import GestureConfig
from controller_gestures.engine import ControllerGestures
from controller_gestures.events import (
    DragEvent,
    GestureEvent,
    PanEvent,
    PinchEvent,
    PressEvent,
    RotateEvent,
    SwipeEvent,
    TapEvent,
)
from controller_gestures.recorder import SessionPlayer
from controller_gestures.simulate import SCENARIOS, scenario

app = typer.Typer(
    name="controller-gestures",
    help="Gesture recognition for two spatial controllers.",
    add_completion=False,
)


def _setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def _load_config(path: Optional[str]) -> GestureConfig:
    if path is None:
        return GestureConfig()
    return GestureConfig.from_yaml(path)


def _vec(v: np.ndarray) -> str:
    return "({:+.3f}, {:+.3f}, {:+.3f})".format(*v)


def describe(event: GestureEvent) -> str:
    """One-line human readable summary of an event."""
    tag = ""
    if getattr(event, "initialise", False):
        tag = " [start]"
    elif getattr(event, "finalise", False):
        tag = " [end]"

    if isinstance(event, TapEvent):
        detail = f"at {_vec(event.position)}"
    elif isinstance(event, PressEvent):
        detail = f"at {_vec(event.position)} held {event.duration:.2f}s"
    elif isinstance(event, SwipeEvent):
        detail = event.direction.value
    elif isinstance(event, PanEvent):
        detail = f"delta {_vec(event.delta)}"
    elif isinstance(event, PinchEvent):
        detail = f"delta {event.delta:+.3f} scale {event.scale:.3f}"
    elif isinstance(event, RotateEvent):
        detail = f"theta {event.theta:+.4f}"
    elif isinstance(event, DragEvent):
        detail = f"delta {_vec(event.delta)}"
    else:
        detail = ""
    return f"{event.timestamp:7.3f}s  {event.name:<9s} {detail}{tag}"


def _print_events(events: list[GestureEvent], verbose: bool):
    shown = 0
    for event in events:
        continuous = isinstance(event, (PanEvent, PinchEvent, RotateEvent, DragEvent))
        if continuous and not verbose and not (event.initialise or event.finalise):
            continue
        typer.echo(f"   {describe(event)}")
        shown += 1
    hidden = len(events) - shown
    if hidden:
        typer.echo(f"   ... {hidden} progress events hidden (use --verbose)")


@app.command()
def demo(
    gesture: str = typer.Argument("tap", help=f"One of: {', '.join(SCENARIOS)}"),
    fps: float = typer.Option(60.0, help="Simulated frame rate"),
    config: Optional[str] = typer.Option(None, help="Path to thresholds YAML"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print every progress event"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Run a scripted gesture through the recognizer."""
    _setup_logging(log_level)
    try:
        session = scenario(gesture, fps=fps)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    engine = ControllerGestures(config=_load_config(config))
    events = session.run(engine)
    typer.echo(f"Scenario '{gesture}': {len(session.frames)} frames, {len(events)} events")
    _print_events(events, verbose)


@app.command()
def replay(
    recording: str = typer.Argument(..., help="Path to a recorded session (.json)"),
    config: Optional[str] = typer.Option(None, help="Path to thresholds YAML"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print every progress event"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Replay a recorded session through the recognizer."""
    _setup_logging(log_level)
    path = Path(recording)
    if not path.exists():
        typer.echo(f"Error: recording not found: {recording}", err=True)
        raise typer.Exit(1)

    player = SessionPlayer.load(path)
    typer.echo(f"Replaying {path.name} ({player.frame_count} frames, {player.duration:.1f}s)")
    engine = ControllerGestures(config=_load_config(config))
    events = player.replay(engine)
    _print_events(events, verbose)
    typer.echo(f"Done. {len(events)} events.")


@app.command()
def record(
    output: str = typer.Argument(..., help="Output .json path"),
    gestures: list[str] = typer.Option(["tap"], "--gesture", "-g", help="Scenario(s) to chain"),
    fps: float = typer.Option(60.0, help="Simulated frame rate"),
):
    """Write scripted scenarios to a recording file."""
    unknown = [g for g in gestures if g not in SCENARIOS]
    if unknown:
        typer.echo(f"Error: unknown scenario(s): {', '.join(unknown)}", err=True)
        raise typer.Exit(1)

    frames = []
    offset = 0.0
    for name in gestures:
        session = scenario(name, fps=fps)
        for frame in session.frames:
            frame.timestamp += offset
            frames.append(frame)
        offset = frames[-1].timestamp + 1.0 / fps

    SessionPlayer(frames).save(output)
    typer.echo(f"Saved {len(frames)} frames to {output}")


@app.command("config")
def show_config(
    output: Optional[str] = typer.Option(None, "-o", help="Write to this YAML file instead of stdout"),
):
    """Print or write the default thresholds."""
    cfg = GestureConfig()
    if output:
        cfg.to_yaml(output)
        typer.echo(f"Saved to {output}")
    else:
        typer.echo(cfg.dumps())


def main():
    app()


if __name__ == "__main__":
    main()
