"""
Vortex Autonomous Configuration Settings.

This module centralizes the drivetrain geometry, control loop constants and
mission limits used by the autonomous op-modes.
"""

import math
import os
from dataclasses import dataclass, field


@dataclass
class DriveConfig:
    """Drivetrain geometry and encoder drive constants."""

    # Encoder geometry (TETRIX motor, 2:1 external reduction, 4" wheels)
    counts_per_motor_rev: float = 1440.0
    drive_gear_reduction: float = 2.0
    wheel_diameter_in: float = 4.0

    # Default mission speed and control loop cadence
    drive_speed: float = 0.6
    poll_interval_sec: float = 0.01

    # Leave the drive loop as soon as either side stops (original behaviour)
    stop_on_first_arrival: bool = False

    @property
    def ticks_per_inch(self) -> float:
        """Encoder ticks per inch of travel."""
        return (self.counts_per_motor_rev * self.drive_gear_reduction) / (
            self.wheel_diameter_in * math.pi
        )


@dataclass
class TurnConfig:
    """Gyro turn constants."""

    turn_speed: float = 0.5
    quarter_turn_deg: float = 90.0
    tolerance_deg: float = 2.0
    timeout_sec: float = 4.0

    # Taper power inside this many degrees of the goal, never below the factor
    slowdown_deg: float = 15.0
    min_speed_factor: float = 0.5

    # Max wait for the gyro to report ready before failing the turn
    ready_wait_sec: float = 1.0


@dataclass
class LaunchConfig:
    """Ball launcher timing."""

    shooter_power: float = 1.0
    spin_up_sec: float = 1.0
    release_sec: float = 0.4
    reload_sec: float = 0.8
    timeout_sec: float = 8.0
    poll_interval_sec: float = 0.01

    # Ball release servo positions
    release_hold_position: float = 0.4
    release_open_position: float = 0.0


@dataclass
class MissionConfig:
    """Autonomous period limits."""

    time_budget_sec: float = 30.0
    script: str = ""


@dataclass
class HardwareConfig:
    """Device names in the robot configuration and bootstrap limits."""

    left_drive: str = "left_drive"
    right_drive: str = "right_drive"
    shooter: str = "shooter"
    ball_release: str = "ball_release"
    gyro_sensor: str = "gyro_sensor"

    gyro_calibration_timeout_sec: float = 5.0


@dataclass
class VortexConfig:
    """
    Main configuration container.

    Aggregates all sub-configurations into a single object that can be
    easily passed around and tested.
    """

    drive: DriveConfig = field(default_factory=DriveConfig)
    turn: TurnConfig = field(default_factory=TurnConfig)
    launch: LaunchConfig = field(default_factory=LaunchConfig)
    mission: MissionConfig = field(default_factory=MissionConfig)
    hardware: HardwareConfig = field(default_factory=HardwareConfig)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> 'VortexConfig':
        """
        Load configuration from environment variables.

        Environment variables can override default values:
        - VORTEX_DRIVE_SPEED: default drive speed (0.0-1.0)
        - VORTEX_TURN_SPEED: gyro turn speed (0.0-1.0)
        - VORTEX_TIME_BUDGET_SEC: autonomous period length
        - VORTEX_MISSION: mission script to run
        - VORTEX_LOG_LEVEL: logging level name

        Returns:
            VortexConfig: Configuration object with environment overrides applied

        Example:
            >>> os.environ['VORTEX_DRIVE_SPEED'] = '0.4'
            >>> config = VortexConfig.from_env()
            >>> assert config.drive.drive_speed == 0.4
        """
        config = cls()

        if 'VORTEX_DRIVE_SPEED' in os.environ:
            config.drive.drive_speed = float(os.environ['VORTEX_DRIVE_SPEED'])

        if 'VORTEX_TURN_SPEED' in os.environ:
            config.turn.turn_speed = float(os.environ['VORTEX_TURN_SPEED'])

        if 'VORTEX_TIME_BUDGET_SEC' in os.environ:
            config.mission.time_budget_sec = float(os.environ['VORTEX_TIME_BUDGET_SEC'])

        if 'VORTEX_MISSION' in os.environ:
            config.mission.script = os.environ['VORTEX_MISSION']

        if 'VORTEX_LOG_LEVEL' in os.environ:
            config.log_level = os.environ['VORTEX_LOG_LEVEL'].upper()

        return config


# Default configuration instance
default_config = VortexConfig()
