"""
Hardware subsystem for the Vortex robot.

Provides device abstractions, the drivetrain and heading adapters, the
expansion hub wrappers and the simulation backend.
"""

from hardware.interfaces import IDcMotor, IServo, IHeadingSensor, ITelemetry, IClock, RunMode, Direction
from hardware.drivetrain import Drivetrain
from hardware.heading import HeadingSensor, normalize_heading, heading_delta
from hardware.hub_impl import HubDcMotor, HubServo, HubGyro
from hardware.mock_hardware import MockDcMotor, MockServo, MockGyro, SimClock, SimulatedRobot
from hardware.bootstrap import HardwareMap, RobotHardware, init_auto, init_teleop

__all__ = [
    'IDcMotor',
    'IServo',
    'IHeadingSensor',
    'ITelemetry',
    'IClock',
    'RunMode',
    'Direction',
    'Drivetrain',
    'HeadingSensor',
    'normalize_heading',
    'heading_delta',
    'HubDcMotor',
    'HubServo',
    'HubGyro',
    'MockDcMotor',
    'MockServo',
    'MockGyro',
    'SimClock',
    'SimulatedRobot',
    'HardwareMap',
    'RobotHardware',
    'init_auto',
    'init_teleop',
]
