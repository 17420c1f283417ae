"""Scripted two-source sessions for demos, benchmarks and tests.

Builds a list of frames (timestamp, both source positions, trigger
signals) from high-level gesture steps and drives an engine through them
with exact timestamps.

Usage:
    session = ScriptedSession().tap(2).idle(0.5).pinch(0.1)
    events = session.run(ControllerGestures())
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from controller_gestures.events import GestureEvent

ACTIVATE = "activate"
DEACTIVATE = "deactivate"


@dataclass
class Frame:
    timestamp: float
    positions: list[Optional[np.ndarray]]
    signals: list[tuple[str, int]] = field(default_factory=list)


def apply_frame(engine, frame: Frame):
    """Feed one frame: poses first, then trigger signals, then the tick."""
    for source_id, position in enumerate(frame.positions):
        engine.update_pose(source_id, position)
    for signal, source_id in frame.signals:
        if signal == ACTIVATE:
            engine.activate(source_id, frame.timestamp)
        elif signal == DEACTIVATE:
            engine.deactivate(source_id, frame.timestamp)
        else:
            raise ValueError(f"Unknown signal: {signal!r}")
    engine.tick(frame.timestamp)


class ScriptedSession:
    """Chainable builder of synthetic controller input."""

    def __init__(
        self,
        fps: float = 60.0,
        primary=(-0.1, 1.2, -0.4),
        secondary=(0.1, 1.2, -0.4),
        start_time: float = 0.0,
    ):
        self.dt = 1.0 / fps
        self._frames: list[Frame] = []
        self._t = start_time
        self._positions = [
            np.asarray(primary, dtype=np.float64),
            np.asarray(secondary, dtype=np.float64),
        ]
        self._pending: list[tuple[str, int]] = []

    @property
    def time(self) -> float:
        return self._t

    @property
    def frames(self) -> list[Frame]:
        """Built frames, plus a closing frame for signals queued after the last step."""
        frames = list(self._frames)
        if self._pending:
            frames.append(Frame(
                timestamp=self._t,
                positions=[p.copy() for p in self._positions],
                signals=list(self._pending),
            ))
        return frames

    def position(self, source_id: int) -> np.ndarray:
        return self._positions[source_id].copy()

    # -- primitives --------------------------------------------------------

    def step(self, move0=None, move1=None) -> ScriptedSession:
        """Emit one frame at the current time, then move and advance."""
        self._frames.append(Frame(
            timestamp=self._t,
            positions=[p.copy() for p in self._positions],
            signals=self._pending,
        ))
        self._pending = []
        if move0 is not None:
            self._positions[0] = self._positions[0] + np.asarray(move0, dtype=np.float64)
        if move1 is not None:
            self._positions[1] = self._positions[1] + np.asarray(move1, dtype=np.float64)
        self._t += self.dt
        return self

    def _frames_for(self, seconds: float) -> int:
        return max(1, int(round(seconds / self.dt)))

    def activate(self, source_id: int = 0) -> ScriptedSession:
        self._pending.append((ACTIVATE, source_id))
        return self

    def deactivate(self, source_id: int = 0) -> ScriptedSession:
        self._pending.append((DEACTIVATE, source_id))
        return self

    def idle(self, seconds: float) -> ScriptedSession:
        for _ in range(self._frames_for(seconds)):
            self.step()
        return self

    def move(self, seconds: float, velocity0=None, velocity1=None) -> ScriptedSession:
        """Move sources at constant velocity (units per second)."""
        v0 = None if velocity0 is None else np.asarray(velocity0, dtype=np.float64) * self.dt
        v1 = None if velocity1 is None else np.asarray(velocity1, dtype=np.float64) * self.dt
        for _ in range(self._frames_for(seconds)):
            self.step(v0, v1)
        return self

    def place(self, source_id: int, position) -> ScriptedSession:
        self._positions[source_id] = np.asarray(position, dtype=np.float64)
        return self

    # -- gestures ----------------------------------------------------------

    def tap(self, count: int = 1, duration: float = 0.1, gap: float = 0.1) -> ScriptedSession:
        for i in range(count):
            self.activate(0).idle(duration).deactivate(0)
            if i < count - 1:
                self.idle(gap)
        return self

    def long_press(self, duration: float = 0.6) -> ScriptedSession:
        return self.activate(0).idle(duration).deactivate(0)

    def swipe(self, velocity=(0.0, 1.0, 0.0), duration: float = 0.15, settle: float = 0.1) -> ScriptedSession:
        return self.activate(0).idle(settle).move(duration, velocity0=velocity).deactivate(0)

    def pan(self, velocity=(0.02, 0.0, 0.0), duration: float = 1.0, settle: float = 0.1) -> ScriptedSession:
        return self.activate(0).idle(settle).move(duration, velocity0=velocity).deactivate(0)

    def pinch(self, spread: float = 0.1, duration: float = 0.5, settle: float = 0.1) -> ScriptedSession:
        """Both sources pressed, moving apart (or together) along their connecting line."""
        axis = self._positions[1] - self._positions[0]
        axis = axis / np.linalg.norm(axis)
        speed = spread / 2.0 / duration
        self.activate(0).activate(1).idle(settle)
        self.move(duration, velocity0=-axis * speed, velocity1=axis * speed)
        return self.deactivate(0).deactivate(1)

    def rotate(self, angle: float = math.pi / 2, duration: float = 0.5, settle: float = 0.1) -> ScriptedSession:
        """Both sources pressed, orbiting their midpoint about +Y by `angle` radians."""
        self.activate(0).activate(1).idle(settle)
        center = (self._positions[0] + self._positions[1]) / 2.0
        r0 = self._positions[0] - center
        r1 = self._positions[1] - center
        n = self._frames_for(duration)
        for i in range(1, n + 1):
            a = angle * i / n
            rot = np.array([
                [math.cos(a), 0.0, math.sin(a)],
                [0.0, 1.0, 0.0],
                [-math.sin(a), 0.0, math.cos(a)],
            ])
            self.step()
            self._positions[0] = center + rot @ r0
            self._positions[1] = center + rot @ r1
        self.step()
        return self.deactivate(0).deactivate(1)

    def finish(self, seconds: float = 0.5) -> ScriptedSession:
        """Trailing idle so pending taps resolve."""
        return self.idle(seconds)

    # -- playback ----------------------------------------------------------

    def run(self, engine) -> list[GestureEvent]:
        """Drive `engine` through all frames. Returns every event emitted."""
        events: list[GestureEvent] = []
        unsubscribe = engine.subscribe("*", events.append)
        try:
            for frame in self.frames:
                apply_frame(engine, frame)
        finally:
            unsubscribe()
        return events


SCENARIOS = {
    "tap": lambda s: s.tap(1).finish(),
    "doubletap": lambda s: s.tap(2).finish(),
    "tripletap": lambda s: s.tap(3).finish(),
    "quadtap": lambda s: s.tap(4).finish(),
    "press": lambda s: s.long_press().finish(),
    "swipe": lambda s: s.swipe().finish(),
    "pan": lambda s: s.pan().finish(),
    "pinch": lambda s: s.pinch().finish(),
    "rotate": lambda s: s.rotate().finish(),
}


def scenario(name: str, fps: float = 60.0) -> ScriptedSession:
    """Build one of the named demo sessions."""
    try:
        build = SCENARIOS[name]
    except KeyError:
        raise ValueError(f"Unknown scenario {name!r}; choose from {sorted(SCENARIOS)}") from None
    return build(ScriptedSession(fps=fps))
