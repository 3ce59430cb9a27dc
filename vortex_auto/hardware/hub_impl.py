"""
Expansion Hub Hardware Implementation.

Wraps vendor device handles (motor, servo and gyro objects exposing the
controller's camelCase API) to implement our interfaces, enabling dependency
injection and testability.
"""

import logging

from hardware.interfaces import Direction, IDcMotor, IHeadingSensor, IServo, RunMode
from core.errors import HardwareReadError, HardwareWriteError


class HubDcMotor(IDcMotor):
    """
    Real expansion hub motor.

    All calls are delegated to the vendor handle. Vendor run modes and
    directions are passed by name ("RUN_TO_POSITION", "REVERSE", ...).
    I/O failures are reported as HardwareReadError on reads and
    HardwareWriteError on commands.

    Attributes:
        device: The underlying vendor motor handle
        name: Configuration name, used in log lines
    """

    def __init__(self, device, name: str = "motor"):
        """
        Initialize motor wrapper.

        Args:
            device: Vendor motor handle to wrap
            name: Configuration name

        Example:
            >>> motor = HubDcMotor(hardware_map.dcMotor.get("left_drive"), "left_drive")
        """
        self.device = device
        self.name = name
        self.logger = logging.getLogger(__name__)

    def set_power(self, power: float):
        self.logger.debug(f"[HARDWARE] {self.name} power={power:.2f}")
        try:
            self.device.setPower(power)
        except OSError as e:
            raise HardwareWriteError(f"{self.name}: set power failed") from e

    def get_power(self) -> float:
        return float(self.device.getPower())

    def set_mode(self, mode: RunMode):
        self.logger.debug(f"[HARDWARE] {self.name} mode={mode.name}")
        try:
            self.device.setMode(mode.name)
        except OSError as e:
            raise HardwareWriteError(f"{self.name}: set mode failed") from e

    def get_mode(self) -> RunMode:
        return RunMode[str(self.device.getMode())]

    def set_direction(self, direction: Direction):
        try:
            self.device.setDirection(direction.name)
        except OSError as e:
            raise HardwareWriteError(f"{self.name}: set direction failed") from e

    def get_current_position(self) -> int:
        try:
            return int(self.device.getCurrentPosition())
        except OSError as e:
            raise HardwareReadError(f"{self.name}: encoder read failed") from e

    def set_target_position(self, position: int):
        try:
            self.device.setTargetPosition(int(position))
        except OSError as e:
            raise HardwareWriteError(f"{self.name}: set target failed") from e

    def get_target_position(self) -> int:
        return int(self.device.getTargetPosition())

    def is_busy(self) -> bool:
        try:
            return bool(self.device.isBusy())
        except OSError as e:
            raise HardwareReadError(f"{self.name}: busy read failed") from e


class HubServo(IServo):
    """Real servo on the expansion hub."""

    def __init__(self, device, name: str = "servo"):
        self.device = device
        self.name = name
        self.logger = logging.getLogger(__name__)

    def set_position(self, position: float):
        self.logger.debug(f"[HARDWARE] {self.name} position={position:.2f}")
        try:
            self.device.setPosition(position)
        except OSError as e:
            raise HardwareWriteError(f"{self.name}: set position failed") from e

    def get_position(self) -> float:
        return float(self.device.getPosition())


class HubGyro(IHeadingSensor):
    """
    Real I2C gyro.

    The vendor reports integer headings in [0, 360) growing clockwise, so the
    value is negated to keep counter-clockwise positive.
    """

    def __init__(self, device, name: str = "gyro_sensor", clockwise_positive: bool = True):
        self.device = device
        self.name = name
        self.clockwise_positive = clockwise_positive
        self.logger = logging.getLogger(__name__)

    def get_heading(self) -> float:
        try:
            raw = float(self.device.getHeading())
        except OSError as e:
            raise HardwareReadError(f"{self.name}: heading read failed") from e
        return -raw if self.clockwise_positive else raw

    def calibrate(self):
        self.logger.info(f"[HARDWARE] Calibrating {self.name}")
        try:
            self.device.calibrate()
        except OSError as e:
            raise HardwareWriteError(f"{self.name}: calibrate failed") from e

    def is_calibrating(self) -> bool:
        try:
            return bool(self.device.isCalibrating())
        except OSError as e:
            raise HardwareReadError(f"{self.name}: calibration status read failed") from e
