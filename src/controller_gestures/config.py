"""Recognizer thresholds and their YAML representation.

All distances are in scene units (metres for WebXR-style poses), all
durations in seconds, angles in radians.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path

import numpy as np
import yaml

logger = logging.getLogger("controller_gestures.config")


@dataclass
class GestureConfig:
    """Threshold set used by the gesture classifier."""
    double_click_limit: float = 0.2  # max press duration counted as a tap
    press_minimum: float = 0.4  # min press duration counted as a press
    anchor_delay: float = 0.05  # debounce before the start position is captured
    pinch_threshold: float = 0.01
    rotate_threshold: float = 0.2
    swipe_min_distance: float = 0.01
    swipe_min_velocity: float = 0.1
    pan_min_distance: float = 0.006
    pan_max_velocity: float = 0.03
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)
    horizontal_swipes: bool = False

    def __post_init__(self):
        self.up = tuple(float(c) for c in self.up)
        self.validate()

    def validate(self):
        """Raise ValueError on thresholds that cannot work together."""
        for name in (
            "double_click_limit",
            "press_minimum",
            "anchor_delay",
            "pinch_threshold",
            "rotate_threshold",
            "swipe_min_distance",
            "swipe_min_velocity",
            "pan_min_distance",
            "pan_max_velocity",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        if self.press_minimum < self.double_click_limit:
            raise ValueError("press_minimum must not be below double_click_limit")
        if len(self.up) != 3 or not np.any(self.up):
            raise ValueError("up must be a non-zero 3-vector")

    @property
    def up_vector(self) -> np.ndarray:
        return np.asarray(self.up, dtype=np.float64)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["up"] = list(self.up)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> GestureConfig:
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in (data or {}).items():
            if key in known:
                kwargs[key] = value
            else:
                logger.warning("Ignoring unknown config key: %s", key)
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, path: str | Path) -> GestureConfig:
        """Load thresholds from a YAML file (top-level mapping or `gestures:` section)."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if "gestures" in data and isinstance(data["gestures"], dict):
            data = data["gestures"]
        return cls.from_dict(data)

    def to_yaml(self, path: str | Path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump({"gestures": self.to_dict()}, f, default_flow_style=False, sort_keys=False)

    def dumps(self) -> str:
        return yaml.dump({"gestures": self.to_dict()}, default_flow_style=False, sort_keys=False)
