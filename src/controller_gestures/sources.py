"""Per-device tracking state for the two spatial input sources.

Each source carries the pose pushed in by the host every frame and a
`GestureRecord` describing the current press: when it started, the
debounced anchor position, when it ended, and how many quick taps have
accumulated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np


@dataclass
class Pose:
    """World-space pose of an input source."""
    position: np.ndarray  # shape (3,)
    matrix: np.ndarray = field(default_factory=lambda: np.eye(4))  # 4x4 world transform

    @classmethod
    def from_position(cls, position, matrix: Optional[np.ndarray] = None) -> Pose:
        pos = np.array(position, dtype=np.float64).reshape(3)
        if matrix is None:
            matrix = np.eye(4)
            matrix[:3, 3] = pos
        else:
            matrix = np.array(matrix, dtype=np.float64).reshape(4, 4)
        return cls(position=pos, matrix=matrix)

    @property
    def forward(self) -> np.ndarray:
        """Pointing direction: the -Z axis of the world matrix, normalized."""
        direction = -self.matrix[:3, 2]
        length = float(np.linalg.norm(direction))
        if length < 1e-9:
            return np.array([0.0, 0.0, -1.0])
        return direction / length

    def copy(self) -> Pose:
        return Pose(position=self.position.copy(), matrix=self.matrix.copy())


@dataclass
class GestureRecord:
    start_position: Optional[np.ndarray] = None
    start_time: float = 0.0
    end_time: float = 0.0
    tap_count: int = 0


class InputSource:
    """One tracked controller or hand (id 0 is the primary source)."""

    def __init__(self, source_id: int):
        self.id = source_id
        self.pose: Optional[Pose] = None
        self.active = False
        self.record = GestureRecord()

    @property
    def position(self) -> Optional[np.ndarray]:
        return self.pose.position if self.pose is not None else None

    @property
    def anchored(self) -> bool:
        return self.record.start_position is not None

    def set_pose(self, position, matrix: Optional[np.ndarray] = None):
        if position is None:
            self.pose = None
        else:
            self.pose = Pose.from_position(position, matrix)

    def begin(self, now: float, keep_taps: bool):
        """Start a new press: forget the anchor and restart the timer."""
        self.record.start_position = None
        self.record.start_time = now
        if not keep_taps:
            self.record.tap_count = 0
        self.active = True

    def end(self, now: float):
        self.record.end_time = now
        self.record.start_position = None
        self.active = False

    def capture_anchor(self, now: float, delay: float) -> bool:
        """Record the debounced start position once `delay` has elapsed.

        Returns True when the anchor was set on this call.
        """
        if not self.active or self.anchored or self.pose is None:
            return False
        if now - self.record.start_time > delay:
            self.record.start_position = self.pose.position.copy()
            return True
        return False

    def elapsed(self, now: float) -> float:
        return now - self.record.start_time

    def reset(self):
        self.active = False
        self.record = GestureRecord()

    def __repr__(self) -> str:
        return (
            f"InputSource(id={self.id}, active={self.active}, "
            f"anchored={self.anchored}, taps={self.record.tap_count})"
        )
