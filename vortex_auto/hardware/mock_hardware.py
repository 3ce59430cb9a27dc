"""
Mock Hardware Implementations.

Provides simulated motors, servo, gyro and a simulated clock so the motion
primitives can be exercised without a physical robot.
"""

import heapq
import itertools
import logging
import math
from typing import Callable, Dict, List, Optional, Tuple

from hardware.interfaces import Direction, IClock, IDcMotor, IHeadingSensor, IServo, RunMode
from hardware.heading import normalize_heading
from config.settings import DriveConfig
from core.errors import HardwareReadError


class SimClock(IClock):
    """
    Simulated time source.

    sleep() advances time instantly and steps every registered physics
    callback, so a control loop polling this clock drives the simulation.
    """

    def __init__(self, start: float = 0.0):
        self.logger = logging.getLogger(__name__)
        self.time = start
        self._tick_callbacks: List[Callable[[float], None]] = []
        self._scheduled: List[Tuple[float, int, Callable[[], None]]] = []
        self._counter = itertools.count()
        self.sleep_calls = 0

    def now(self) -> float:
        return self.time

    def sleep(self, seconds: float):
        """Advance simulated time and step the physics."""
        self.sleep_calls += 1
        dt = max(0.0, float(seconds))
        self.time += dt
        for callback in list(self._tick_callbacks):
            callback(dt)
        while self._scheduled and self._scheduled[0][0] <= self.time:
            _, _, action = heapq.heappop(self._scheduled)
            action()

    # Test helper methods
    def on_tick(self, callback: Callable[[float], None]):
        """Register a callback run with dt on every sleep()."""
        self._tick_callbacks.append(callback)

    def call_at(self, when: float, action: Callable[[], None]):
        """Run action once simulated time reaches when."""
        heapq.heappush(self._scheduled, (when, next(self._counter), action))


class MockDcMotor(IDcMotor):
    """
    Simulated DC motor with encoder.

    Position advances at |power| * max_ticks_per_sec. In RUN_TO_POSITION the
    motor travels toward its target and stops exactly on it; in the other
    modes it follows the sign of the power. Tracks all commands for tests.
    """

    def __init__(self, name: str = "motor", max_ticks_per_sec: float = 4000.0):
        """
        Initialize mock motor.

        Args:
            name: Device name used in log lines
            max_ticks_per_sec: Encoder rate at full power
        """
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.max_ticks_per_sec = max_ticks_per_sec
        self.power = 0.0
        self.mode = RunMode.RUN_WITHOUT_ENCODER
        self.direction = Direction.FORWARD
        self.position = 0.0
        self.target = 0
        self.stalled = False
        self.failing_reads = 0
        self.command_history: List[Tuple[str, dict]] = []

    def _log_command(self, command: str, **kwargs):
        """Record command for test verification."""
        self.command_history.append((command, kwargs))
        self.logger.debug(f"[MOCK] {self.name}.{command}: {kwargs}")

    def _check_read(self):
        if self.failing_reads > 0:
            self.failing_reads -= 1
            raise HardwareReadError(f"{self.name}: simulated read glitch")

    def set_power(self, power: float):
        self.power = power
        self._log_command("set_power", power=power)

    def get_power(self) -> float:
        return self.power

    def set_mode(self, mode: RunMode):
        self.mode = mode
        if mode == RunMode.STOP_AND_RESET_ENCODER:
            self.position = 0.0
            self.target = 0
            self.power = 0.0
        self._log_command("set_mode", mode=mode)

    def get_mode(self) -> RunMode:
        return self.mode

    def set_direction(self, direction: Direction):
        self.direction = direction
        self._log_command("set_direction", direction=direction)

    def get_current_position(self) -> int:
        self._check_read()
        return int(round(self.position))

    def set_target_position(self, position: int):
        self.target = int(position)
        self._log_command("set_target_position", position=position)

    def get_target_position(self) -> int:
        return self.target

    def is_busy(self) -> bool:
        self._check_read()
        return self.mode == RunMode.RUN_TO_POSITION and self.position != self.target

    def step(self, dt: float):
        """Advance the simulated shaft by dt seconds."""
        if self.stalled or self.mode == RunMode.STOP_AND_RESET_ENCODER:
            return

        travel = abs(self.power) * self.max_ticks_per_sec * dt
        if self.mode == RunMode.RUN_TO_POSITION:
            remaining = self.target - self.position
            if abs(remaining) <= travel:
                self.position = float(self.target)
            else:
                self.position += math.copysign(travel, remaining)
        else:
            self.position += math.copysign(travel, self.power) if self.power else 0.0

    # Test helper methods
    def fail_next_reads(self, count: int):
        """Make the next count reads raise HardwareReadError."""
        self.failing_reads = count

    def get_command_history(self) -> List[Tuple[str, dict]]:
        """Get history of commands for test assertions."""
        return list(self.command_history)

    def powers_commanded(self) -> List[float]:
        """Every power value written so far, oldest first."""
        return [kw["power"] for cmd, kw in self.command_history if cmd == "set_power"]

    def clear_command_history(self):
        """Clear command history."""
        self.command_history = []


class MockServo(IServo):
    """Mock servo that records every position command."""

    def __init__(self, name: str = "servo", position: float = 0.5):
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.position = position
        self.position_history: List[float] = []

    def set_position(self, position: float):
        self.position = max(0.0, min(1.0, position))
        self.position_history.append(self.position)
        self.logger.debug(f"[MOCK] {self.name}.set_position: {self.position}")

    def get_position(self) -> float:
        return self.position


class MockGyro(IHeadingSensor):
    """
    Simulated gyro.

    The heading is integrated by SimulatedRobot from the wheel travel. The
    sensor can report in (-180, 180] or [0, 360) and can be made to calibrate
    slowly, never finish calibrating, or glitch on reads.
    """

    def __init__(self, calibration_sec: float = 0.0, wrap_360: bool = False):
        """
        Initialize mock gyro.

        Args:
            calibration_sec: Simulated time calibrate() takes
            wrap_360: Report headings in [0, 360) instead of (-180, 180]
        """
        self.logger = logging.getLogger(__name__)
        self.heading = 0.0
        self.calibration_sec = calibration_sec
        self.calibration_remaining = 0.0
        self.wrap_360 = wrap_360
        self.never_ready = False
        self.failing_reads = 0
        self.read_count = 0

    def get_heading(self) -> float:
        self.read_count += 1
        if self.failing_reads > 0:
            self.failing_reads -= 1
            raise HardwareReadError("gyro: simulated read glitch")
        if self.wrap_360:
            return float(self.heading % 360.0)
        return normalize_heading(self.heading)

    def calibrate(self):
        self.calibration_remaining = self.calibration_sec
        self.logger.info("[MOCK] Gyro calibrating")

    def is_calibrating(self) -> bool:
        return self.never_ready or self.calibration_remaining > 0.0

    def step(self, dt: float):
        self.calibration_remaining = max(0.0, self.calibration_remaining - dt)

    # Test helper methods
    def set_heading(self, degrees: float):
        """Place the simulated chassis at a heading."""
        self.heading = degrees

    def fail_next_reads(self, count: int):
        """Make the next count reads raise HardwareReadError."""
        self.failing_reads = count


class SimulatedRobot:
    """
    Differential-drive physics tying the mock devices to a SimClock.

    Every clock tick advances both drive motors, the shooter and the gyro.
    Chassis rotation comes from the difference in wheel travel.

    Attributes:
        clock: Simulated clock driving the physics
        left, right: Drive motors
        shooter: Launcher motor
        ball_release: Launcher release servo
        gyro: Heading sensor
    """

    def __init__(
        self,
        clock: Optional[SimClock] = None,
        drive_config: Optional[DriveConfig] = None,
        track_width_in: float = 15.0,
        max_ticks_per_sec: float = 4000.0,
        gyro_calibration_sec: float = 0.0
    ):
        self.clock = clock or SimClock()
        self.drive_config = drive_config or DriveConfig()
        self.track_width_in = track_width_in
        self.left = MockDcMotor("left_drive", max_ticks_per_sec)
        self.right = MockDcMotor("right_drive", max_ticks_per_sec)
        self.shooter = MockDcMotor("shooter", max_ticks_per_sec)
        self.ball_release = MockServo("ball_release")
        self.gyro = MockGyro(calibration_sec=gyro_calibration_sec)
        self.clock.on_tick(self.step)

    def step(self, dt: float):
        before_left, before_right = self.left.position, self.right.position
        self.left.step(dt)
        self.right.step(dt)
        self.shooter.step(dt)
        self.gyro.step(dt)

        d_left = self.left.position - before_left
        d_right = self.right.position - before_right
        ticks_per_rad = self.drive_config.ticks_per_inch * self.track_width_in
        self.gyro.heading += math.degrees((d_right - d_left) / ticks_per_rad)

    def hardware_map(self) -> Dict[str, object]:
        """Device dictionary keyed by the default configuration names."""
        return {
            "left_drive": self.left,
            "right_drive": self.right,
            "shooter": self.shooter,
            "ball_release": self.ball_release,
            "gyro_sensor": self.gyro,
        }

    def drive_powers(self) -> Tuple[float, float]:
        return self.left.power, self.right.power

    def is_at_rest(self) -> bool:
        """True when no actuator is powered."""
        return self.left.power == 0.0 and self.right.power == 0.0 and self.shooter.power == 0.0
