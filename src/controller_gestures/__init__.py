"""controller-gestures - Gesture recognition for two spatial input sources."""

__version__ = "0.4.0"

from controller_gestures.clock import ManualClock, MonotonicClock
from controller_gestures.config import GestureConfig
from controller_gestures.engine import ControllerGestures
from controller_gestures.events import (
    DragEvent,
    EventEmitter,
    EventKind,
    GestureEvent,
    GestureType,
    PanEvent,
    PinchEvent,
    PressEvent,
    RotateEvent,
    SwipeDirection,
    SwipeEvent,
    TapEvent,
)
from controller_gestures.manipulation import ObjectManipulator, Transform
from controller_gestures.recorder import SessionPlayer, SessionRecorder
from controller_gestures.simulate import ScriptedSession
from controller_gestures.sources import GestureRecord, InputSource, Pose
from controller_gestures.targets import DragTarget, SphereTarget
