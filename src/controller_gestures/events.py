"""Gesture event types and the synchronous emitter that delivers them.

Continuous gestures (pan, pinch, rotate, drag) start with an event whose
`initialise` flag is set and whose payload is neutral, then emit progress
events every tick, and finish with an event whose `finalise` flag is set.

Usage:
    emitter = EventEmitter()

    @emitter.on("pinch")
    def on_pinch(event):
        print(event.scale)

    emitter.subscribe(EventKind.SWIPE, lambda e: print(e.direction))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Union

import numpy as np

logger = logging.getLogger("controller_gestures.events")


class GestureType(Enum):
    """What the recognizer currently believes the user is doing."""
    UNKNOWN = "unknown"
    TAP = "tap"
    PRESS = "press"
    PAN = "pan"
    SWIPE = "swipe"
    PINCH = "pinch"
    ROTATE = "rotate"
    DRAG = "drag"


class EventKind(Enum):
    TAP = "tap"
    DOUBLETAP = "doubletap"
    TRIPLETAP = "tripletap"
    QUADTAP = "quadtap"
    PRESS = "press"
    PAN = "pan"
    SWIPE = "swipe"
    PINCH = "pinch"
    ROTATE = "rotate"
    DRAG = "drag"


TAP_KINDS = {
    1: EventKind.TAP,
    2: EventKind.DOUBLETAP,
    3: EventKind.TRIPLETAP,
    4: EventKind.QUADTAP,
}


class SwipeDirection(Enum):
    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"


@dataclass
class GestureEvent:
    kind: EventKind
    timestamp: float

    @property
    def name(self) -> str:
        return self.kind.value


@dataclass
class TapEvent(GestureEvent):
    """tap / doubletap / tripletap / quadtap, resolved after the tap window closes."""
    count: int = 1
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    matrix: np.ndarray = field(default_factory=lambda: np.eye(4))


@dataclass
class PressEvent(GestureEvent):
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    matrix: np.ndarray = field(default_factory=lambda: np.eye(4))
    duration: float = 0.0


@dataclass
class SwipeEvent(GestureEvent):
    direction: SwipeDirection = SwipeDirection.UP


@dataclass
class PanEvent(GestureEvent):
    delta: np.ndarray = field(default_factory=lambda: np.zeros(3))  # cumulative since start
    initialise: bool = False
    finalise: bool = False


@dataclass
class PinchEvent(GestureEvent):
    delta: float = 0.0
    scale: float = 1.0
    initialise: bool = False
    finalise: bool = False


@dataclass
class RotateEvent(GestureEvent):
    theta: float = 0.0  # radians since the previous rotate event
    initialise: bool = False
    finalise: bool = False


@dataclass
class DragEvent(GestureEvent):
    delta: np.ndarray = field(default_factory=lambda: np.zeros(3))  # since the previous drag event
    point: Optional[np.ndarray] = None  # ray hit on the target, set on initialise
    initialise: bool = False
    finalise: bool = False


Handler = Callable[[GestureEvent], None]
KindLike = Union[EventKind, str]


def _resolve_kind(kind: KindLike) -> Union[EventKind, str]:
    if isinstance(kind, EventKind) or kind == "*":
        return kind
    try:
        return EventKind(kind)
    except ValueError:
        raise ValueError(f"Unknown gesture event kind: {kind!r}") from None


class EventEmitter:
    """Delivers events to subscribers in registration order.

    A subscriber registered for "*" receives every event. Exceptions
    raised by subscribers are logged and never reach the emitting code.
    """

    def __init__(self):
        self._handlers: dict[Union[EventKind, str], list[Handler]] = {}

    def subscribe(self, kind: KindLike, handler: Handler) -> Callable[[], None]:
        """Register `handler` for `kind`. Returns a function that unsubscribes it."""
        key = _resolve_kind(kind)
        self._handlers.setdefault(key, []).append(handler)

        def unsubscribe():
            self.unsubscribe(key, handler)

        return unsubscribe

    def unsubscribe(self, kind: KindLike, handler: Handler) -> bool:
        key = _resolve_kind(kind)
        handlers = self._handlers.get(key, [])
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def on(self, kind: KindLike = "*"):
        """Decorator form of `subscribe`."""
        def decorator(fn: Handler):
            self.subscribe(kind, fn)
            return fn
        return decorator

    def emit(self, event: GestureEvent):
        handlers = self._handlers.get(event.kind, []) + self._handlers.get("*", [])
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error("Handler for %s failed: %s", event.name, e)

    def clear(self):
        self._handlers.clear()

    def handler_count(self, kind: Optional[KindLike] = None) -> int:
        if kind is None:
            return sum(len(h) for h in self._handlers.values())
        return len(self._handlers.get(_resolve_kind(kind), []))
