"""
Wall clock for the control loops.

Real runs use MonotonicClock; tests swap in hardware.mock_hardware.SimClock.
"""

import time

from hardware.interfaces import IClock


class MonotonicClock(IClock):
    """Clock backed by time.monotonic() and time.sleep()."""

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float):
        if seconds > 0:
            time.sleep(seconds)


class Deadline:
    """
    Fixed time budget measured against an injected clock.

    Example:
        >>> deadline = Deadline(clock, 5.0)
        >>> while not deadline.expired():
        ...     clock.sleep(0.01)
    """

    def __init__(self, clock: IClock, duration_sec: float):
        self.clock = clock
        self.duration = max(0.0, float(duration_sec))
        self.started = clock.now()

    def elapsed(self) -> float:
        return self.clock.now() - self.started

    def remaining(self) -> float:
        return max(0.0, self.duration - self.elapsed())

    def expired(self) -> bool:
        return self.elapsed() >= self.duration
