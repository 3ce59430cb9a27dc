"""
Hardware Bootstrap.

Looks up the named devices, puts every actuator at rest in a known run mode,
resets the drive encoders and calibrates the gyro before a mission starts.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from hardware.drivetrain import Drivetrain
from hardware.heading import HeadingSensor
from hardware.hub_impl import HubDcMotor, HubGyro, HubServo
from hardware.interfaces import Direction, IClock, IDcMotor, IHeadingSensor, IServo, ITelemetry, RunMode
from config.settings import HardwareConfig, VortexConfig, default_config
from core.errors import HardwareUnavailableError, SensorNotCalibratedError


logger = logging.getLogger(__name__)


class HardwareMap:
    """
    Name to device lookup.

    Devices that already implement our interfaces are returned as-is; raw
    vendor handles are wrapped with the hub implementations.
    """

    def __init__(self, devices: Mapping[str, object]):
        self.devices: Dict[str, object] = dict(devices)

    def _get(self, name: str) -> object:
        device = self.devices.get(name)
        if device is None:
            raise HardwareUnavailableError(f"device '{name}' not found in hardware map")
        return device

    def dc_motor(self, name: str) -> IDcMotor:
        device = self._get(name)
        return device if isinstance(device, IDcMotor) else HubDcMotor(device, name)

    def servo(self, name: str) -> IServo:
        device = self._get(name)
        return device if isinstance(device, IServo) else HubServo(device, name)

    def gyro(self, name: str) -> IHeadingSensor:
        device = self._get(name)
        return device if isinstance(device, IHeadingSensor) else HubGyro(device, name)


@dataclass
class RobotHardware:
    """Bootstrapped handles passed to the motion layer."""

    drivetrain: Drivetrain
    heading: HeadingSensor
    shooter: IDcMotor
    ball_release: IServo


def _init_all(hardware_map: HardwareMap, config: VortexConfig, clock: IClock) -> RobotHardware:
    names: HardwareConfig = config.hardware

    drivetrain = Drivetrain(
        hardware_map.dc_motor(names.left_drive),
        hardware_map.dc_motor(names.right_drive),
    )
    shooter = hardware_map.dc_motor(names.shooter)
    ball_release = hardware_map.servo(names.ball_release)
    heading = HeadingSensor(hardware_map.gyro(names.gyro_sensor), clock)

    # Left side is mounted mirrored
    drivetrain.set_direction(Direction.REVERSE, Direction.FORWARD)
    shooter.set_direction(Direction.FORWARD)

    drivetrain.set_power(0.0, 0.0)
    shooter.set_power(0.0)
    ball_release.set_position(config.launch.release_hold_position)

    return RobotHardware(drivetrain, heading, shooter, ball_release)


def init_auto(
    devices: Mapping[str, object],
    clock: IClock,
    config: Optional[VortexConfig] = None,
    telemetry: Optional[ITelemetry] = None
) -> RobotHardware:
    """
    Initialize hardware for an autonomous run.

    Args:
        devices: Device handles keyed by configuration name
        clock: Time source used while waiting for the gyro
        config: Configuration (device names, limits)
        telemetry: Optional status sink

    Returns:
        RobotHardware: Handles at rest, encoders zeroed, gyro ready

    Raises:
        HardwareUnavailableError: If a named device is missing
        SensorNotCalibratedError: If the gyro does not finish calibrating

    Example:
        >>> hw = init_auto(sim.hardware_map(), sim.clock)
        >>> hw.drivetrain.get_ticks()
        (0, 0)
    """
    # core.telemetry imports hardware.interfaces
    from core.telemetry import report

    config = config or default_config
    hardware_map = devices if isinstance(devices, HardwareMap) else HardwareMap(devices)
    hw = _init_all(hardware_map, config, clock)

    report(telemetry, "Status", "Resetting Encoders")
    hw.drivetrain.reset_encoders()
    hw.shooter.set_mode(RunMode.RUN_WITHOUT_ENCODER)

    report(telemetry, "Status", "Calibrating Gyro")
    hw.heading.calibrate()
    try:
        hw.heading.ensure_ready(config.hardware.gyro_calibration_timeout_sec)
    except SensorNotCalibratedError:
        logger.error("[BOOTSTRAP] Gyro calibration did not finish")
        raise

    left, right = hw.drivetrain.get_ticks()
    report(telemetry, "Path0", f"Starting at {left:7d} :{right:7d}")
    report(telemetry, "Status", "Ready to run")
    logger.info("[BOOTSTRAP] Autonomous hardware ready")
    return hw


def init_teleop(
    devices: Mapping[str, object],
    clock: IClock,
    config: Optional[VortexConfig] = None
) -> RobotHardware:
    """
    Initialize hardware for driver control.

    All motors run open loop and the gyro is not waited on.
    """
    config = config or default_config
    hardware_map = devices if isinstance(devices, HardwareMap) else HardwareMap(devices)
    hw = _init_all(hardware_map, config, clock)

    hw.drivetrain.left.set_mode(RunMode.RUN_WITHOUT_ENCODER)
    hw.drivetrain.right.set_mode(RunMode.RUN_WITHOUT_ENCODER)
    hw.shooter.set_mode(RunMode.RUN_WITHOUT_ENCODER)
    logger.info("[BOOTSTRAP] Teleop hardware ready")
    return hw
