"""Applying gesture events to a placed object.

`ObjectManipulator` is an ordinary subscriber: it owns a `Transform` and
turns the recognizer's geometric payloads into position, scale and
orientation changes. Nothing here feeds back into recognition.

Usage:
    gestures = ControllerGestures()
    model = Transform(visible=False)
    ObjectManipulator(model).attach(gestures)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from controller_gestures.events import (
    DragEvent,
    EventKind,
    GestureEvent,
    PanEvent,
    PinchEvent,
    PressEvent,
    RotateEvent,
    SwipeEvent,
    TapEvent,
)

logger = logging.getLogger("controller_gestures.manipulation")


def quat_from_axis_angle(axis, angle: float) -> np.ndarray:
    """Unit quaternion (x, y, z, w) for a rotation of `angle` about `axis`."""
    axis = np.asarray(axis, dtype=np.float64)
    axis = axis / np.linalg.norm(axis)
    half = angle / 2.0
    return np.array([*(axis * np.sin(half)), np.cos(half)])


def quat_multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Hamilton product a * b, both (x, y, z, w)."""
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return np.array([
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    ])


def quat_to_matrix(q: np.ndarray) -> np.ndarray:
    x, y, z, w = q
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ])


@dataclass
class Transform:
    """Position / orientation / scale of a scene object."""
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 0.0, 1.0]))
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    visible: bool = True

    def __post_init__(self):
        self.position = np.asarray(self.position, dtype=np.float64).reshape(3)
        self.rotation = np.asarray(self.rotation, dtype=np.float64).reshape(4)
        self.scale = np.asarray(self.scale, dtype=np.float64).reshape(3)

    @property
    def matrix(self) -> np.ndarray:
        m = np.eye(4)
        m[:3, :3] = quat_to_matrix(self.rotation) * self.scale
        m[:3, 3] = self.position
        return m

    def rotate(self, axis, angle: float):
        """Rotate in local space, like Object3D.rotateOnAxis."""
        self.rotation = quat_multiply(self.rotation, quat_from_axis_angle(axis, angle))

    def copy(self) -> Transform:
        return Transform(
            position=self.position.copy(),
            rotation=self.rotation.copy(),
            scale=self.scale.copy(),
            visible=self.visible,
        )


class ObjectManipulator:
    """Moves, scales, spins, shows and hides a `Transform` from gestures.

    - tap: reveal the object at `tap_offset` from the tap position
    - press: arm panning (when `pan_requires_press`)
    - pan: move by `pan_sensitivity` x the cumulative pan delta
    - pinch: scale relative to the scale at pinch start
    - rotate: accumulate incremental angles as a spin about `up`
    - drag: follow the dragging source's per-tick movement
    - swipe: hide the object
    """

    def __init__(
        self,
        transform: Transform,
        up=(0.0, 1.0, 0.0),
        pan_sensitivity: float = 3.0,
        tap_offset=(0.0, -0.3, -0.5),
        pan_requires_press: bool = True,
        on_status: Optional[Callable[[str], None]] = None,
    ):
        self.transform = transform
        self.up = np.asarray(up, dtype=np.float64)
        self.pan_sensitivity = pan_sensitivity
        self.tap_offset = np.asarray(tap_offset, dtype=np.float64)
        self.pan_requires_press = pan_requires_press
        self.on_status = on_status

        self.dragging = False
        self.total_rotation = 0.0
        self._pan_origin: Optional[np.ndarray] = None
        self._start_scale: Optional[np.ndarray] = None
        self._start_rotation: Optional[np.ndarray] = None

        self._dispatch = {
            EventKind.TAP: self._on_tap,
            EventKind.DOUBLETAP: self._on_multi_tap,
            EventKind.TRIPLETAP: self._on_multi_tap,
            EventKind.QUADTAP: self._on_multi_tap,
            EventKind.PRESS: self._on_press,
            EventKind.PAN: self._on_pan,
            EventKind.SWIPE: self._on_swipe,
            EventKind.PINCH: self._on_pinch,
            EventKind.ROTATE: self._on_rotate,
            EventKind.DRAG: self._on_drag,
        }

    def attach(self, source) -> ObjectManipulator:
        """Subscribe to every event of an engine or emitter."""
        source.subscribe("*", self.handle)
        return self

    def handle(self, event: GestureEvent):
        handler = self._dispatch.get(event.kind)
        if handler is not None:
            handler(event)

    def _status(self, message: str):
        logger.debug(message)
        if self.on_status is not None:
            self.on_status(message)

    def _on_tap(self, event: TapEvent):
        self._status("tap")
        if not self.transform.visible:
            self.transform.visible = True
            self.transform.position = self.tap_offset + event.position

    def _on_multi_tap(self, event: TapEvent):
        self._status(event.name)

    def _on_press(self, event: PressEvent):
        self._status("press")
        if self.transform.visible:
            self.dragging = True

    def _on_pan(self, event: PanEvent):
        if self.pan_requires_press and not self.dragging:
            return
        if event.initialise:
            self._pan_origin = self.transform.position.copy()
            return
        if self._pan_origin is None:
            return

        delta = event.delta * self.pan_sensitivity
        self.transform.position = self._pan_origin + delta
        self._status("pan x:{:.3f}, y:{:.3f}, z:{:.3f}".format(*delta))
        if event.finalise:
            self._pan_origin = None
            self.dragging = False

    def _on_swipe(self, event: SwipeEvent):
        self._status(f"swipe {event.direction.value}")
        if self.transform.visible:
            self.transform.visible = False

    def _on_pinch(self, event: PinchEvent):
        if event.initialise:
            self._start_scale = self.transform.scale.copy()
            return
        if self._start_scale is None:
            return
        self.transform.scale = self._start_scale * event.scale
        self._status(f"pinch delta:{event.delta:.3f} scale:{event.scale:.2f}")
        if event.finalise:
            self._start_scale = None

    def _on_rotate(self, event: RotateEvent):
        if event.initialise:
            self._start_rotation = self.transform.rotation.copy()
            self.total_rotation = 0.0
            return
        if self._start_rotation is None:
            return
        self.total_rotation += event.theta
        self.transform.rotation = quat_multiply(
            self._start_rotation, quat_from_axis_angle(self.up, self.total_rotation)
        )
        self._status(f"rotate {self.total_rotation:.3f}")
        if event.finalise:
            self._start_rotation = None

    def _on_drag(self, event: DragEvent):
        if event.initialise:
            self._status("drag started")
            return
        self.transform.position = self.transform.position + event.delta
        if event.finalise:
            self._status("drag ended")
