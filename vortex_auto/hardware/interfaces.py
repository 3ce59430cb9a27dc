"""
Hardware Interface Definitions.

Abstract base classes for every device the autonomous code touches, enabling
dependency injection and mock implementations for testing without a robot.
"""

from abc import ABC, abstractmethod
from enum import Enum


class RunMode(Enum):
    """Motor controller run modes."""

    RUN_WITHOUT_ENCODER = "run_without_encoder"
    RUN_USING_ENCODER = "run_using_encoder"
    RUN_TO_POSITION = "run_to_position"
    STOP_AND_RESET_ENCODER = "stop_and_reset_encoder"


class Direction(Enum):
    """Motor output polarity."""

    FORWARD = 1
    REVERSE = -1


class IDcMotor(ABC):
    """
    Abstract interface for a DC motor with an attached rotary encoder.

    Implementations can be real expansion hub motors or simulated motors.
    """

    @abstractmethod
    def set_power(self, power: float):
        """
        Apply power to the motor.

        Args:
            power: Power from -1.0 (full reverse) to 1.0 (full forward)
        """
        pass

    @abstractmethod
    def get_power(self) -> float:
        """
        Return the last commanded power.

        Returns:
            float: Power from -1.0 to 1.0
        """
        pass

    @abstractmethod
    def set_mode(self, mode: RunMode):
        """
        Switch the controller run mode.

        Args:
            mode: One of the RunMode values
        """
        pass

    @abstractmethod
    def get_mode(self) -> RunMode:
        """Return the current run mode."""
        pass

    @abstractmethod
    def set_direction(self, direction: Direction):
        """
        Set output polarity.

        Args:
            direction: FORWARD or REVERSE
        """
        pass

    @abstractmethod
    def get_current_position(self) -> int:
        """
        Read the cumulative encoder count.

        Returns:
            int: Encoder ticks since the last reset

        Raises:
            HardwareReadError: On a transient read failure
        """
        pass

    @abstractmethod
    def set_target_position(self, position: int):
        """
        Set the absolute encoder target used by RUN_TO_POSITION.

        Args:
            position: Target in encoder ticks
        """
        pass

    @abstractmethod
    def get_target_position(self) -> int:
        """Return the current RUN_TO_POSITION target."""
        pass

    @abstractmethod
    def is_busy(self) -> bool:
        """
        Check if the motor is still travelling to its target.

        Returns:
            bool: True while in RUN_TO_POSITION and not yet at target

        Raises:
            HardwareReadError: On a transient read failure
        """
        pass


class IServo(ABC):
    """Abstract interface for a positional servo."""

    @abstractmethod
    def set_position(self, position: float):
        """
        Move servo to a position.

        Args:
            position: Position from 0.0 to 1.0
        """
        pass

    @abstractmethod
    def get_position(self) -> float:
        """Return the last commanded position."""
        pass


class IHeadingSensor(ABC):
    """
    Abstract interface for a single-axis orientation sensor (gyro).
    """

    @abstractmethod
    def get_heading(self) -> float:
        """
        Read current heading.

        Returns:
            float: Heading in degrees, counter-clockwise positive. Range may be
                   (-180, 180] or [0, 360) depending on the device.

        Raises:
            HardwareReadError: On a transient read failure
        """
        pass

    @abstractmethod
    def calibrate(self):
        """Start sensor calibration. The robot must be still."""
        pass

    @abstractmethod
    def is_calibrating(self) -> bool:
        """
        Check if calibration is still in progress.

        Returns:
            bool: True until the sensor is ready to report headings
        """
        pass


class ITelemetry(ABC):
    """
    Abstract interface for a write-only telemetry sink.

    Control behaviour must never depend on a sink being present.
    """

    @abstractmethod
    def add_data(self, caption: str, value: str):
        """
        Queue one caption/value line.

        Args:
            caption: Short label ("Status", "Path0", ...)
            value: Text to display
        """
        pass

    @abstractmethod
    def update(self):
        """Flush queued lines to the display."""
        pass


class IClock(ABC):
    """
    Abstract time source for the control loops.

    Injected so tests can run the loops against simulated time.
    """

    @abstractmethod
    def now(self) -> float:
        """
        Return a monotonic timestamp.

        Returns:
            float: Seconds from an arbitrary origin
        """
        pass

    @abstractmethod
    def sleep(self, seconds: float):
        """
        Yield for one control cycle.

        Args:
            seconds: Duration to wait
        """
        pass
