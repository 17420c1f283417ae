"""Time sources for the recognizer.

The engine reads `now()` whenever a caller does not pass an explicit
timestamp. `MonotonicClock` reports seconds since it was created;
`ManualClock` is advanced by hand, which makes replays and tests exact.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float:
        ...


class MonotonicClock:
    """Elapsed seconds since construction (or the last reset)."""

    def __init__(self):
        self._start = time.monotonic()

    def now(self) -> float:
        return time.monotonic() - self._start

    def reset(self):
        self._start = time.monotonic()


class ManualClock:
    """A clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def set(self, value: float):
        if value < self._now:
            raise ValueError("ManualClock cannot move backwards")
        self._now = float(value)

    def advance(self, seconds: float) -> float:
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        self._now += seconds
        return self._now
