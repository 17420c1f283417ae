"""Gesture recognition for two spatial input sources.

Turns the pose streams and trigger presses of two controllers (or hands)
into a single stream of discrete gesture events. The host calls
`activate`/`deactivate` from its trigger callbacks, pushes poses with
`update_pose`, and calls `tick` once per rendered frame.

Usage:
    gestures = ControllerGestures()
    gestures.subscribe("pinch", lambda e: print(e.scale))

    # In the render loop:
    gestures.update_pose(0, controller0_position, controller0_matrix)
    gestures.update_pose(1, controller1_position, controller1_matrix)
    gestures.tick()

The recognizer only reports geometry (deltas, scale, incremental angles);
whatever object the gestures manipulate is updated by a subscriber.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from controller_gestures.clock import Clock, MonotonicClock
from controller_gestures.config import GestureConfig
from controller_gestures.events import (
    TAP_KINDS,
    DragEvent,
    EventEmitter,
    EventKind,
    GestureEvent,
    GestureType,
    Handler,
    KindLike,
    PanEvent,
    PinchEvent,
    PressEvent,
    RotateEvent,
    SwipeDirection,
    SwipeEvent,
    TapEvent,
)
from controller_gestures.sources import InputSource
from controller_gestures.targets import DragTarget

logger = logging.getLogger("controller_gestures.engine")

PRIMARY = 0
SECONDARY = 1

_CONTINUOUS = (GestureType.PAN, GestureType.PINCH, GestureType.ROTATE, GestureType.DRAG)


def _normalize(v: np.ndarray) -> Optional[np.ndarray]:
    length = float(np.linalg.norm(v))
    if length < 1e-9:
        return None
    return v / length


def _angle_between(a: np.ndarray, b: np.ndarray) -> float:
    """Unsigned angle between two unit vectors."""
    cos = float(np.dot(a, b))
    return math.acos(max(-1.0, min(1.0, cos)))


class ControllerGestures:
    """Per-frame gesture classifier over two input sources.

    Recognized gestures:
    - tap / doubletap / tripletap / quadtap: quick presses of the primary
      source, reported once the double-click window has closed
    - press: primary source held longer than `press_minimum`
    - swipe: fast vertical flick of the primary source, direction at release
    - pan: slow movement of the primary source, cumulative delta
    - pinch: both sources held, distance between them changing
    - rotate: both sources held, connecting vector turning about `up`
    - drag: primary press that starts with the source pointing at the target
    """

    def __init__(
        self,
        config: Optional[GestureConfig] = None,
        clock: Optional[Clock] = None,
        target: Optional[DragTarget] = None,
        emitter: Optional[EventEmitter] = None,
    ):
        self.config = config or GestureConfig()
        self.clock = clock or MonotonicClock()
        self.target = target
        self.events = emitter or EventEmitter()

        self.sources = (InputSource(PRIMARY), InputSource(SECONDARY))

        self.type = GestureType.UNKNOWN
        self.start_vector: Optional[np.ndarray] = None
        self.start_distance = 0.0
        self.start_position: Optional[np.ndarray] = None
        self.touch_count = 0

        self._drag_source: Optional[int] = None
        self._drag_last: Optional[np.ndarray] = None
        self._last_pinch: tuple[float, float] = (0.0, 1.0)
        self._last_pan: np.ndarray = np.zeros(3)
        self._up = self.config.up_vector

    # -- subscriptions -----------------------------------------------------

    def subscribe(self, kind: KindLike, handler: Handler):
        return self.events.subscribe(kind, handler)

    def unsubscribe(self, kind: KindLike, handler: Handler) -> bool:
        return self.events.unsubscribe(kind, handler)

    def on(self, kind: KindLike = "*"):
        return self.events.on(kind)

    # -- state queries -----------------------------------------------------

    @property
    def touch(self) -> bool:
        return self.touch_count > 0

    @property
    def multi_touch(self) -> bool:
        return self.sources[PRIMARY].active and self.sources[SECONDARY].active

    @property
    def current_type(self) -> GestureType:
        return self.type

    # -- host callbacks ----------------------------------------------------

    def update_pose(self, source_id: int, position, matrix: Optional[np.ndarray] = None):
        """Push the latest pose of a source. `position=None` marks it untracked."""
        self._source(source_id).set_pose(position, matrix)

    def activate(self, source_id: int, now: Optional[float] = None):
        """Trigger pressed on `source_id`."""
        source = self._source(source_id)
        now = self._now(now)
        if source.active:
            logger.warning("Source %d activated twice, ignoring", source_id)
            return

        if self.type in _CONTINUOUS:
            self._finish(now)

        source.begin(now, keep_taps=self.type is GestureType.TAP)
        self._set_type(GestureType.UNKNOWN)
        self.touch_count += 1
        logger.debug("activate source=%d touch_count=%d", source_id, self.touch_count)

        if self.touch_count == 1:
            self._try_begin_drag(source, now)

    def deactivate(self, source_id: int, now: Optional[float] = None):
        """Trigger released on `source_id`."""
        source = self._source(source_id)
        now = self._now(now)
        if not source.active:
            logger.warning("Source %d deactivated while inactive, ignoring", source_id)
            return

        elapsed = source.elapsed(now)

        if self.type is GestureType.DRAG and self._drag_source == source.id:
            self._finish(now)
            self._set_type(GestureType.UNKNOWN)
        elif source.id != PRIMARY:
            if self.type in (GestureType.PINCH, GestureType.ROTATE):
                self._finish(now)
                self._set_type(GestureType.UNKNOWN)
        elif self.type is GestureType.SWIPE:
            self._emit_swipe(source, now)
            self._set_type(GestureType.UNKNOWN)
        elif self.type in (GestureType.PINCH, GestureType.ROTATE, GestureType.PAN):
            self._finish(now)
            self._set_type(GestureType.UNKNOWN)
        elif elapsed < self.config.double_click_limit:
            self.start_vector = None
            source.record.tap_count += 1
            self._set_type(GestureType.TAP)
        elif elapsed > self.config.press_minimum:
            self._emit_press(source, now, elapsed)
            self._set_type(GestureType.UNKNOWN)
        else:
            self._set_type(GestureType.UNKNOWN)

        source.end(now)
        self.touch_count = max(0, self.touch_count - 1)
        logger.debug(
            "deactivate source=%d elapsed=%.3f touch_count=%d", source_id, elapsed, self.touch_count
        )

    def tick(self, now: Optional[float] = None):
        """Advance the recognizer by one frame."""
        now = self._now(now)
        primary = self.sources[PRIMARY]

        for source in self.sources:
            if source.capture_anchor(now, self.config.anchor_delay):
                logger.debug("anchor source=%d at %s", source.id, source.record.start_position)

        if not primary.active and self.type is GestureType.TAP:
            if now - primary.record.end_time > self.config.double_click_limit:
                self._resolve_taps(primary, now)

        if self.type is GestureType.UNKNOWN:
            if self.touch:
                self._classify(now)
        elif self.type is GestureType.PINCH:
            self._continue_pinch(now)
        elif self.type is GestureType.ROTATE:
            self._continue_rotate(now)
        elif self.type is GestureType.PAN:
            self._continue_pan(now)
        elif self.type is GestureType.DRAG:
            self._continue_drag(now)

    def reset(self):
        """Drop all gesture state without emitting anything (e.g. session end)."""
        for source in self.sources:
            source.reset()
        self.type = GestureType.UNKNOWN
        self.start_vector = None
        self.start_distance = 0.0
        self.start_position = None
        self.touch_count = 0
        self._drag_source = None
        self._drag_last = None
        self._last_pinch = (0.0, 1.0)
        self._last_pan = np.zeros(3)

    # -- classification ----------------------------------------------------

    def _classify(self, now: float):
        primary, secondary = self.sources
        p0 = primary.position
        if not primary.anchored or p0 is None:
            return
        a0 = primary.record.start_position

        if self.multi_touch:
            p1 = secondary.position
            if not secondary.anchored or p1 is None:
                return
            a1 = secondary.record.start_position

            start_distance = float(np.linalg.norm(a0 - a1))
            current_distance = float(np.linalg.norm(p0 - p1))
            if abs(current_distance - start_distance) > self.config.pinch_threshold:
                self._set_type(GestureType.PINCH)
                self.start_distance = current_distance
                self._last_pinch = (0.0, 1.0)
                self._emit(PinchEvent(EventKind.PINCH, now, delta=0.0, scale=1.0, initialise=True))
                return

            v0 = _normalize(a1 - a0)
            v1 = _normalize(p1 - p0)
            if v0 is None or v1 is None:
                return
            theta = _angle_between(v0, v1)
            if abs(theta) > self.config.rotate_threshold:
                self._set_type(GestureType.ROTATE)
                self.start_vector = v1
                self._emit(RotateEvent(EventKind.ROTATE, now, theta=0.0, initialise=True))
            return

        elapsed = now - primary.record.start_time
        if elapsed <= 0:
            return
        displacement = p0 - a0
        dist = float(np.linalg.norm(displacement))
        velocity = dist / elapsed

        if dist > self.config.swipe_min_distance and velocity > self.config.swipe_min_velocity:
            if self._swipe_axis(displacement) is not None:
                self._set_type(GestureType.SWIPE)
        elif dist > self.config.pan_min_distance and velocity < self.config.pan_max_velocity:
            self._set_type(GestureType.PAN)
            self.start_position = p0.copy()
            self._last_pan = np.zeros(3)
            self._emit(PanEvent(EventKind.PAN, now, delta=np.zeros(3), initialise=True))

    def _swipe_axis(self, displacement: np.ndarray) -> Optional[int]:
        """Dominant axis of a swipe (1 = vertical, 0 = horizontal), None if not a swipe."""
        ax, ay, az = np.abs(displacement)
        if ay > ax and ay > az:
            return 1
        if self.config.horizontal_swipes and ax > ay and ax > az:
            return 0
        return None

    # -- continuation ------------------------------------------------------

    def _pinch_payload(self) -> Optional[tuple[float, float]]:
        p0, p1 = self.sources[PRIMARY].position, self.sources[SECONDARY].position
        if p0 is None or p1 is None:
            return None
        current_distance = float(np.linalg.norm(p0 - p1))
        delta = current_distance - self.start_distance
        scale = current_distance / self.start_distance if self.start_distance > 1e-9 else 1.0
        return delta, scale

    def _rotate_step(self) -> Optional[float]:
        """Signed angle since the previous tick; re-baselines `start_vector`."""
        p0, p1 = self.sources[PRIMARY].position, self.sources[SECONDARY].position
        if p0 is None or p1 is None or self.start_vector is None:
            return None
        v = _normalize(p1 - p0)
        if v is None:
            return None
        theta = _angle_between(self.start_vector, v)
        if float(np.dot(self._up, np.cross(self.start_vector, v))) > 0:
            theta = -theta
        self.start_vector = v
        return theta

    def _pan_delta(self) -> Optional[np.ndarray]:
        p0 = self.sources[PRIMARY].position
        if p0 is None or self.start_position is None:
            return None
        return p0 - self.start_position

    def _drag_step(self) -> Optional[np.ndarray]:
        if self._drag_source is None:
            return None
        position = self.sources[self._drag_source].position
        if position is None or self._drag_last is None:
            return None
        delta = position - self._drag_last
        self._drag_last = position.copy()
        return delta

    def _continue_pinch(self, now: float):
        payload = self._pinch_payload()
        if payload is not None:
            delta, scale = payload
            self._last_pinch = payload
            self._emit(PinchEvent(EventKind.PINCH, now, delta=delta, scale=scale))

    def _continue_rotate(self, now: float):
        theta = self._rotate_step()
        if theta is not None:
            self._emit(RotateEvent(EventKind.ROTATE, now, theta=theta))

    def _continue_pan(self, now: float):
        delta = self._pan_delta()
        if delta is not None:
            self._last_pan = delta
            self._emit(PanEvent(EventKind.PAN, now, delta=delta))

    def _continue_drag(self, now: float):
        if not self.sources[self._drag_source].active:
            return
        delta = self._drag_step()
        if delta is not None:
            self._emit(DragEvent(EventKind.DRAG, now, delta=delta))

    def _finish(self, now: float):
        """Emit the terminal event of the continuous gesture in progress."""
        if self.type is GestureType.PINCH:
            # a lost pose repeats the last reported payload
            delta, scale = self._pinch_payload() or self._last_pinch
            self._emit(PinchEvent(EventKind.PINCH, now, delta=delta, scale=scale, finalise=True))
        elif self.type is GestureType.ROTATE:
            theta = self._rotate_step()
            self._emit(RotateEvent(
                EventKind.ROTATE, now, theta=theta if theta is not None else 0.0, finalise=True,
            ))
            self.start_vector = None
        elif self.type is GestureType.PAN:
            delta = self._pan_delta()
            self._emit(PanEvent(
                EventKind.PAN, now, delta=delta if delta is not None else self._last_pan.copy(), finalise=True,
            ))
        elif self.type is GestureType.DRAG:
            delta = self._drag_step()
            self._emit(DragEvent(
                EventKind.DRAG, now, delta=delta if delta is not None else np.zeros(3), finalise=True,
            ))
            self._drag_source = None
            self._drag_last = None

    # -- discrete events ---------------------------------------------------

    def _try_begin_drag(self, source: InputSource, now: float):
        if self.target is None or not self.target.visible or source.pose is None:
            return
        hit = self.target.intersect_ray(source.pose.position, source.pose.forward)
        if hit is None:
            return

        hit = np.asarray(hit, dtype=np.float64)
        source.record.start_position = hit.copy()
        self._drag_source = source.id
        self._drag_last = source.pose.position.copy()
        self._set_type(GestureType.DRAG)
        self._emit(DragEvent(EventKind.DRAG, now, delta=np.zeros(3), point=hit, initialise=True))

    def _resolve_taps(self, primary: InputSource, now: float):
        if primary.pose is None:
            return
        count = primary.record.tap_count
        kind = TAP_KINDS.get(count)
        if kind is not None:
            self._emit(TapEvent(
                kind,
                now,
                count=count,
                position=primary.pose.position.copy(),
                matrix=primary.pose.matrix.copy(),
            ))
        else:
            logger.debug("Dropping tap burst of %d", count)
        self._set_type(GestureType.UNKNOWN)
        primary.record.tap_count = 0

    def _emit_press(self, source: InputSource, now: float, elapsed: float):
        if source.pose is None:
            return
        self._emit(PressEvent(
            EventKind.PRESS,
            now,
            position=source.pose.position.copy(),
            matrix=source.pose.matrix.copy(),
            duration=elapsed,
        ))

    def _emit_swipe(self, source: InputSource, now: float):
        anchor, position = source.record.start_position, source.position
        if anchor is None or position is None:
            return
        displacement = position - anchor
        if self._swipe_axis(displacement) == 0:
            direction = SwipeDirection.RIGHT if displacement[0] > 0 else SwipeDirection.LEFT
        else:
            direction = SwipeDirection.UP if position[1] > anchor[1] else SwipeDirection.DOWN
        self._emit(SwipeEvent(EventKind.SWIPE, now, direction=direction))

    # -- helpers -----------------------------------------------------------

    def _emit(self, event: GestureEvent):
        self.events.emit(event)

    def _set_type(self, gesture_type: GestureType):
        if gesture_type is not self.type:
            logger.debug("gesture %s -> %s", self.type.value, gesture_type.value)
        self.type = gesture_type

    def _source(self, source_id: int) -> InputSource:
        if source_id not in (PRIMARY, SECONDARY):
            raise ValueError(f"source_id must be 0 or 1, got {source_id!r}")
        return self.sources[source_id]

    def _now(self, now: Optional[float]) -> float:
        return self.clock.now() if now is None else now
