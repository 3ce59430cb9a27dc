"""
Drivetrain Actuator.

Wraps the left and right drive motors behind one object so the motion
primitives command both sides together.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from hardware.interfaces import Direction, IDcMotor, RunMode
from core.errors import HardwareReadError, HardwareUnavailableError


logger = logging.getLogger(__name__)


class Drivetrain:
    """
    Two independently powered traction sides with encoders.

    Read glitches are absorbed here: each side remembers its last good
    encoder count and busy flag and reports those when a read fails.

    Attributes:
        left: Left drive motor
        right: Right drive motor
    """

    def __init__(self, left: Optional[IDcMotor], right: Optional[IDcMotor]):
        """
        Initialize drivetrain.

        Args:
            left: Left drive motor handle
            right: Right drive motor handle

        Raises:
            HardwareUnavailableError: If either handle is missing
        """
        if left is None or right is None:
            missing = "left" if left is None else "right"
            raise HardwareUnavailableError(f"{missing} drive motor not available")

        self.left = left
        self.right = right
        self.logger = logging.getLogger(__name__)
        self._last_ticks = [0, 0]
        self._last_busy = [False, False]

    def set_direction(self, left: Direction, right: Direction):
        """Set output polarity for each side."""
        self.left.set_direction(left)
        self.right.set_direction(right)

    def set_power(self, left: float, right: float):
        """
        Apply power to both sides.

        Args:
            left: Left power, clamped to [-1, 1]
            right: Right power, clamped to [-1, 1]
        """
        self.left.set_power(float(np.clip(left, -1.0, 1.0)))
        self.right.set_power(float(np.clip(right, -1.0, 1.0)))

    def get_power(self) -> Tuple[float, float]:
        return self.left.get_power(), self.right.get_power()

    def get_ticks(self, allow_stale: bool = True) -> Tuple[int, int]:
        """
        Read cumulative encoder counts.

        Args:
            allow_stale: Report the last known count for a side that fails
                         to read. When False the failure is raised instead.

        Returns:
            (left, right) ticks

        Raises:
            HardwareReadError: If a side fails to read and allow_stale is False
        """
        failure = None
        for idx, motor in enumerate((self.left, self.right)):
            try:
                self._last_ticks[idx] = motor.get_current_position()
            except HardwareReadError as e:
                if not allow_stale:
                    failure = failure or e
                    continue
                self.logger.warning(f"[DRIVE] Encoder read failed, reusing {self._last_ticks[idx]}: {e}")
        if failure is not None:
            raise failure
        return self._last_ticks[0], self._last_ticks[1]

    def set_target_mode(self, left_target: int, right_target: int):
        """
        Arm absolute encoder targets and switch to RUN_TO_POSITION.

        Args:
            left_target: Left target in ticks
            right_target: Right target in ticks
        """
        self.left.set_target_position(int(left_target))
        self.right.set_target_position(int(right_target))
        self.left.set_mode(RunMode.RUN_TO_POSITION)
        self.right.set_mode(RunMode.RUN_TO_POSITION)
        self._last_busy = [True, True]

    def is_busy(self) -> Tuple[bool, bool]:
        """
        Check whether each side is still travelling to its target.

        Returns:
            (left, right) busy flags; last known flag on a read failure
        """
        for idx, motor in enumerate((self.left, self.right)):
            try:
                self._last_busy[idx] = motor.is_busy()
            except HardwareReadError as e:
                self.logger.warning(f"[DRIVE] Busy read failed, reusing {self._last_busy[idx]}: {e}")
        return self._last_busy[0], self._last_busy[1]

    def set_passive_mode(self):
        """Return both sides to plain encoder-reporting mode."""
        self.left.set_mode(RunMode.RUN_USING_ENCODER)
        self.right.set_mode(RunMode.RUN_USING_ENCODER)

    def reset_encoders(self):
        """Zero both encoders and leave the motors in passive mode."""
        self.left.set_mode(RunMode.STOP_AND_RESET_ENCODER)
        self.right.set_mode(RunMode.STOP_AND_RESET_ENCODER)
        self._last_ticks = [0, 0]
        self.set_passive_mode()

    def stop(self):
        """
        Zero power on both sides.

        Never raises: a write failure on one side is logged and the other
        side is still stopped.
        """
        for name, motor in (("left", self.left), ("right", self.right)):
            try:
                motor.set_power(0.0)
            except Exception as e:
                self.logger.error(f"[DRIVE] Failed to stop {name} motor: {e}")
