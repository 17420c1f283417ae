"""Session recording and replay: capture controller input to disk.

Record real sessions for:
- Reproducible tests without a headset
- Tuning thresholds against the same input
- Demo recordings that replay deterministically
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Iterator, Optional

import numpy as np

from controller_gestures.events import GestureEvent
from controller_gestures.simulate import ACTIVATE, DEACTIVATE, Frame, apply_frame

logger = logging.getLogger("controller_gestures.recorder")

FORMAT_VERSION = 1


class SessionRecorder:
    """Records source positions and trigger signals, one entry per frame.

    Usage:
        recorder = SessionRecorder()
        recorder.start()
        # In the trigger callbacks:
        recorder.signal("activate", 0)
        # In the render loop, after poses are known:
        recorder.add_frame([pos0, pos1])
        # When done:
        recorder.save("session.json")
    """

    def __init__(self):
        self._frames: list[Frame] = []
        self._pending: list[tuple[str, int]] = []
        self._start_time: Optional[float] = None
        self._recording = False

    @classmethod
    def from_frames(cls, frames: list[Frame]) -> SessionRecorder:
        """A stopped recorder holding already captured frames, ready to `save`."""
        recorder = cls()
        recorder._frames = list(frames)
        return recorder

    def start(self):
        self._frames = []
        self._pending = []
        self._start_time = time.monotonic()
        self._recording = True

    def stop(self) -> int:
        """Stop recording. Returns number of frames captured."""
        self._recording = False
        return len(self._frames)

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        if not self._frames:
            return 0.0
        return self._frames[-1].timestamp - self._frames[0].timestamp

    @property
    def frames(self) -> list[Frame]:
        return list(self._frames)

    def signal(self, kind: str, source_id: int):
        """Queue a trigger signal; it is stored with the next frame."""
        if kind not in (ACTIVATE, DEACTIVATE):
            raise ValueError(f"Unknown signal: {kind!r}")
        if self._recording:
            self._pending.append((kind, source_id))

    def add_frame(self, positions: list, timestamp: Optional[float] = None):
        """Add a frame.

        Args:
            positions: Two entries, each a 3-vector or None when untracked.
            timestamp: Seconds; defaults to time since `start()`.
        """
        if not self._recording:
            return
        if timestamp is None:
            timestamp = time.monotonic() - self._start_time

        self._frames.append(Frame(
            timestamp=float(timestamp),
            positions=[None if p is None else np.asarray(p, dtype=np.float64).copy() for p in positions],
            signals=self._pending,
        ))
        self._pending = []

    def save(self, path: str | Path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "version": FORMAT_VERSION,
            "frame_count": len(self._frames),
            "duration": self.duration,
            "frames": [_frame_to_dict(f) for f in self._frames],
        }
        with open(path, "w") as f:
            json.dump(data, f)
        logger.info("Saved %d frames to %s", len(self._frames), path)


def _frame_to_dict(frame: Frame) -> dict:
    return {
        "timestamp": frame.timestamp,
        "positions": [None if p is None else [float(c) for c in p] for p in frame.positions],
        "signals": [[kind, source_id] for kind, source_id in frame.signals],
    }


def _frame_from_dict(data: dict) -> Frame:
    return Frame(
        timestamp=float(data["timestamp"]),
        positions=[None if p is None else np.array(p, dtype=np.float64) for p in data["positions"]],
        signals=[(kind, int(source_id)) for kind, source_id in data.get("signals", [])],
    )


class SessionPlayer:
    """Replays a recorded session into an engine.

    Usage:
        player = SessionPlayer.load("session.json")
        events = player.replay(ControllerGestures())
    """

    def __init__(self, frames: list[Frame]):
        self._frames = frames

    @classmethod
    def load(cls, path: str | Path) -> SessionPlayer:
        with open(path) as f:
            data = json.load(f)

        version = data.get("version", FORMAT_VERSION)
        if version != FORMAT_VERSION:
            raise ValueError(f"Unsupported recording version: {version}")
        return cls([_frame_from_dict(f) for f in data["frames"]])

    @classmethod
    def from_session(cls, session) -> SessionPlayer:
        """Wrap a ScriptedSession's frames."""
        return cls(list(session.frames))

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        if not self._frames:
            return 0.0
        return self._frames[-1].timestamp - self._frames[0].timestamp

    def play(self) -> Iterator[Frame]:
        yield from self._frames

    def replay(self, engine) -> list[GestureEvent]:
        """Feed every frame to `engine` with its recorded timestamp."""
        events: list[GestureEvent] = []
        unsubscribe = engine.subscribe("*", events.append)
        try:
            for frame in self._frames:
                apply_frame(engine, frame)
        finally:
            unsubscribe()
        return events

    def save(self, path: str | Path):
        SessionRecorder.from_frames(self._frames).save(path)
