"""Drag targets: objects a source can grab by pointing at them on press."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

import numpy as np

if TYPE_CHECKING:
    from controller_gestures.manipulation import Transform


class DragTarget(Protocol):
    """What the engine needs from a manipulable object."""

    @property
    def visible(self) -> bool:
        ...

    def intersect_ray(self, origin: np.ndarray, direction: np.ndarray) -> Optional[np.ndarray]:
        """Closest hit point in front of `origin`, or None."""
        ...


class SphereTarget:
    """A bounding sphere, optionally following a `Transform`.

    When bound to a transform the sphere is centred on its position and its
    radius grows with the largest scale component.
    """

    def __init__(
        self,
        center=(0.0, 0.0, 0.0),
        radius: float = 0.1,
        transform: Optional[Transform] = None,
        visible: bool = True,
    ):
        self._center = np.asarray(center, dtype=np.float64).reshape(3)
        self.radius = radius
        self.transform = transform
        self._visible = visible

    @property
    def center(self) -> np.ndarray:
        if self.transform is not None:
            return self.transform.position
        return self._center

    @property
    def visible(self) -> bool:
        if self.transform is not None:
            return self.transform.visible
        return self._visible

    @visible.setter
    def visible(self, value: bool):
        if self.transform is not None:
            self.transform.visible = value
        else:
            self._visible = value

    @property
    def effective_radius(self) -> float:
        if self.transform is not None:
            return self.radius * float(np.max(np.abs(self.transform.scale)))
        return self.radius

    def intersect_ray(self, origin: np.ndarray, direction: np.ndarray) -> Optional[np.ndarray]:
        origin = np.asarray(origin, dtype=np.float64)
        direction = np.asarray(direction, dtype=np.float64)
        length = float(np.linalg.norm(direction))
        if length < 1e-9:
            return None
        direction = direction / length

        # |origin + t*direction - center|^2 = r^2, with |direction| = 1
        oc = origin - self.center
        b = float(np.dot(oc, direction))
        c = float(np.dot(oc, oc)) - self.effective_radius ** 2
        disc = b * b - c
        if disc < 0:
            return None

        root = np.sqrt(disc)
        t = -b - root
        if t < 0:
            t = -b + root  # origin inside the sphere
        if t < 0:
            return None
        return origin + t * direction
