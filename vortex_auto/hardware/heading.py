"""
Heading Sensor Adapter.

Normalizes gyro readings to (-180, 180] and makes the calibration state an
explicit precondition instead of a call-order convention.
"""

import logging
from typing import Optional

import numpy as np

from hardware.interfaces import IClock, IHeadingSensor
from core.errors import HardwareReadError, HardwareUnavailableError, SensorNotCalibratedError


logger = logging.getLogger(__name__)


def normalize_heading(degrees: float) -> float:
    """
    Map any angle onto (-180, 180].

    Example:
        >>> normalize_heading(270.0)
        -90.0
        >>> normalize_heading(-180.0)
        180.0
    """
    wrapped = float(np.mod(degrees, 360.0))
    if wrapped > 180.0:
        wrapped -= 360.0
    return wrapped


def heading_delta(previous: float, current: float) -> float:
    """
    Signed shortest rotation from previous to current, in degrees.

    Crossing the +/-180 boundary does not produce a jump: going from 179 to
    -179 is +2, not -358.
    """
    return normalize_heading(current - previous)


class HeadingSensor:
    """
    Orientation sensor wrapper with last-known-value recovery.

    Attributes:
        sensor: Underlying gyro
        clock: Time source used while waiting for calibration
    """

    def __init__(self, sensor: Optional[IHeadingSensor], clock: IClock, poll_interval_sec: float = 0.05):
        """
        Initialize heading adapter.

        Args:
            sensor: Gyro handle
            clock: Time source
            poll_interval_sec: Sleep between readiness checks

        Raises:
            HardwareUnavailableError: If the sensor handle is missing
        """
        if sensor is None:
            raise HardwareUnavailableError("heading sensor not available")

        self.sensor = sensor
        self.clock = clock
        self.poll_interval = poll_interval_sec
        self.logger = logging.getLogger(__name__)
        self._last_heading: Optional[float] = None

    def calibrate(self):
        """Start sensor calibration. The robot must be still."""
        self.logger.info("[HEADING] Calibrating gyro")
        self._last_heading = None
        self.sensor.calibrate()

    def is_calibrated(self) -> bool:
        return not self.sensor.is_calibrating()

    def ensure_ready(self, timeout_sec: float):
        """
        Wait (bounded) for the sensor to finish calibrating.

        Args:
            timeout_sec: Longest time to wait

        Raises:
            SensorNotCalibratedError: If the sensor is still calibrating
                                      after timeout_sec
        """
        started = self.clock.now()
        while not self.is_calibrated():
            if self.clock.now() - started >= timeout_sec:
                raise SensorNotCalibratedError(
                    f"heading sensor not ready after {timeout_sec:.2f}s"
                )
            self.clock.sleep(self.poll_interval)

    def get_heading(self, allow_stale: bool = True) -> float:
        """
        Read the normalized heading.

        Args:
            allow_stale: Fall back to the last good heading on a failed read

        Returns:
            float: Degrees in (-180, 180], counter-clockwise positive. On a
                   transient read failure the last good heading is returned.

        Raises:
            HardwareReadError: If the read fails and allow_stale is False, or
                               on the very first read, since there is no
                               previous value to fall back on
        """
        try:
            self._last_heading = normalize_heading(self.sensor.get_heading())
        except HardwareReadError as e:
            if not allow_stale or self._last_heading is None:
                raise
            self.logger.warning(f"[HEADING] Read failed, reusing {self._last_heading:.1f}: {e}")
        return self._last_heading
