"""
Motion Primitives.

Blocking closed-loop drive and turn commands used by the autonomous missions.
Hardware, clock and stop flag are injected so the loops run unchanged against
the simulated backend.
"""

import math
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from hardware.drivetrain import Drivetrain
from hardware.heading import HeadingSensor, heading_delta
from hardware.interfaces import IClock, ITelemetry
from config.settings import DriveConfig, TurnConfig
from core.clock import MonotonicClock
from core.errors import HardwareReadError, HardwareUnavailableError
from core.telemetry import report


logger = logging.getLogger(__name__)


class MotionOutcome(Enum):
    """How a primitive ended. None of these is an error."""

    ARRIVED = "arrived"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


class TurnDirection(Enum):
    """Rotation sense. LEFT is counter-clockwise (heading increases)."""

    LEFT = 1
    RIGHT = -1


@dataclass
class DrivetrainState:
    """
    Targets and powers for one drive_distance call.

    Created when the call starts and discarded when it returns.
    """

    left_target_ticks: int
    right_target_ticks: int
    left_power: float
    right_power: float


def inches_to_ticks(inches: float, ticks_per_inch: float) -> int:
    """
    Convert a signed distance to a signed encoder delta.

    The magnitude is rounded up so the robot never stops short of the
    requested distance.

    Example:
        >>> inches_to_ticks(-2.0, 100.25)
        -201
    """
    if inches == 0:
        return 0
    return int(np.sign(inches)) * math.ceil(abs(inches) * ticks_per_inch)


class MotionPrimitiveEngine:
    """
    Encoder drive and gyro turn primitives.

    Every primitive blocks until it finishes and always leaves both drive
    sides at zero power in passive mode, whether it arrived, timed out, was
    cancelled or raised.

    Attributes:
        drivetrain: Left/right drive actuator
        heading: Heading sensor adapter (required only for turns)
        clock: Time source for deadlines and poll sleeps
        stop_flag: Set by the host to cancel the running mission
        ticks_per_inch: Encoder conversion, fixed for the engine's lifetime
    """

    def __init__(
        self,
        drivetrain: Optional[Drivetrain],
        heading: Optional[HeadingSensor] = None,
        clock: Optional[IClock] = None,
        stop_flag: Optional[threading.Event] = None,
        drive_config: Optional[DriveConfig] = None,
        turn_config: Optional[TurnConfig] = None,
        telemetry: Optional[ITelemetry] = None
    ):
        """
        Initialize motion engine.

        Args:
            drivetrain: Bootstrapped drivetrain
            heading: Bootstrapped heading sensor, or None for drive-only use
            clock: Time source (defaults to the monotonic wall clock)
            stop_flag: Threading event to signal mission cancellation
            drive_config: Encoder geometry and loop cadence
            turn_config: Turn speed, tolerance and timeouts
            telemetry: Optional status sink

        Raises:
            HardwareUnavailableError: If no drivetrain is given

        Example:
            >>> engine = MotionPrimitiveEngine(drivetrain, heading, stop_flag=stop_event)
            >>> engine.drive_distance(0.6, -20.0, -20.0, 5.0)
            >>> engine.turn_by_angle(TurnDirection.LEFT, 90.0)
        """
        if drivetrain is None:
            raise HardwareUnavailableError("motion engine needs a drivetrain")

        self.drivetrain = drivetrain
        self.heading = heading
        self.clock = clock or MonotonicClock()
        self.stop_flag = stop_flag or threading.Event()
        self.drive_config = drive_config or DriveConfig()
        self.turn_config = turn_config or TurnConfig()
        self.telemetry = telemetry
        self.ticks_per_inch = self.drive_config.ticks_per_inch

    def is_active(self) -> bool:
        """True until the host asks the mission to stop."""
        return not self.stop_flag.is_set()

    def stop(self):
        """Zero both sides and return them to passive mode."""
        self.drivetrain.stop()
        self.drivetrain.set_passive_mode()

    # ------------------------------------------------------------------
    # Encoder drive
    # ------------------------------------------------------------------

    def drive_distance(
        self,
        speed: float,
        left_inches: float,
        right_inches: float,
        timeout_sec: float
    ) -> MotionOutcome:
        """
        Drive each side a signed distance using encoder feedback.

        Returns when both moving sides reach their targets, when timeout_sec
        elapses, or when the stop flag is set. A timeout is a normal outcome
        and leaves the robot short of its target.

        Args:
            speed: Power magnitude; clamped to [0, 1], its sign is ignored
            left_inches: Left side travel, negative for reverse
            right_inches: Right side travel, negative for reverse
            timeout_sec: Longest time the call may run

        Returns:
            MotionOutcome: ARRIVED, TIMED_OUT or CANCELLED

        Example:
            >>> engine.drive_distance(0.6, -20.0, -20.0, 5.0)
            <MotionOutcome.ARRIVED: 'arrived'>
            >>> engine.drive_distance(0.5, 0.0, 12.0, 3.0)  # pivot on left wheel
            <MotionOutcome.ARRIVED: 'arrived'>
        """
        speed = float(np.clip(abs(speed), 0.0, 1.0))
        timeout = max(0.0, float(timeout_sec))
        left_delta = inches_to_ticks(left_inches, self.ticks_per_inch)
        right_delta = inches_to_ticks(right_inches, self.ticks_per_inch)

        started = self.clock.now()
        try:
            start = self._read_start_ticks(started, timeout)
            if start is None:
                outcome = MotionOutcome.CANCELLED if not self.is_active() else MotionOutcome.TIMED_OUT
            else:
                state = DrivetrainState(
                    left_target_ticks=start[0] + left_delta,
                    right_target_ticks=start[1] + right_delta,
                    left_power=speed * float(np.sign(left_delta)),
                    right_power=speed * float(np.sign(right_delta)),
                )
                logger.info(
                    f"[DRIVE] {left_inches:.1f}in/{right_inches:.1f}in at {speed:.2f} "
                    f"-> targets {state.left_target_ticks}:{state.right_target_ticks}, timeout {timeout:.1f}s"
                )
                outcome = self._run_drive_loop(state, left_delta, right_delta, started, timeout)
        finally:
            self.stop()

        end_left, end_right = self.drivetrain.get_ticks()
        logger.info(
            f"[DRIVE] {outcome.value} after {self.clock.now() - started:.2f}s "
            f"at {end_left}:{end_right}"
        )
        return outcome

    def _read_start_ticks(self, started: float, timeout: float) -> Optional[Tuple[int, int]]:
        # Fresh reading only, never the cached count
        while True:
            try:
                return self.drivetrain.get_ticks(allow_stale=False)
            except HardwareReadError as e:
                logger.warning(f"[DRIVE] Start position unavailable: {e}")
            if not self.is_active() or self.clock.now() - started >= timeout:
                return None
            self.clock.sleep(self.drive_config.poll_interval_sec)

    def _run_drive_loop(
        self,
        state: DrivetrainState,
        left_delta: int,
        right_delta: int,
        started: float,
        timeout: float
    ) -> MotionOutcome:
        if left_delta == 0 and right_delta == 0:
            return MotionOutcome.ARRIVED
        if not self.is_active():
            return MotionOutcome.CANCELLED

        self.drivetrain.set_target_mode(state.left_target_ticks, state.right_target_ticks)
        self.drivetrain.set_power(state.left_power, state.right_power)
        report(self.telemetry, "Path1", f"Running to {state.left_target_ticks:7d} :{state.right_target_ticks:7d}")

        while True:
            if not self.is_active():
                return MotionOutcome.CANCELLED

            left_busy, right_busy = self.drivetrain.is_busy()
            moving = [busy for busy, delta in ((left_busy, left_delta), (right_busy, right_delta)) if delta != 0]
            if self.drive_config.stop_on_first_arrival:
                arrived = not all(moving)
            else:
                arrived = not any(moving)
            if arrived:
                return MotionOutcome.ARRIVED

            if self.clock.now() - started >= timeout:
                return MotionOutcome.TIMED_OUT

            if self.telemetry is not None:
                left_ticks, right_ticks = self.drivetrain.get_ticks()
                report(self.telemetry, "Path2", f"Running at {left_ticks:7d} :{right_ticks:7d}")

            self.clock.sleep(self.drive_config.poll_interval_sec)

    # ------------------------------------------------------------------
    # Gyro turn
    # ------------------------------------------------------------------

    def turn_by_angle(self, direction: TurnDirection, angle_deg: Optional[float] = None) -> MotionOutcome:
        """
        Rotate in place by an angle using heading feedback.

        The sides are driven at opposite power until the accumulated heading
        change is within tolerance of the requested angle, the turn timeout
        elapses, or the stop flag is set.

        Args:
            direction: TurnDirection.LEFT or TurnDirection.RIGHT
            angle_deg: Rotation in degrees (default: a quarter turn). A
                       negative angle turns the opposite way.

        Returns:
            MotionOutcome: ARRIVED, TIMED_OUT or CANCELLED

        Raises:
            HardwareUnavailableError: If the engine has no heading sensor
            SensorNotCalibratedError: If the gyro is not ready within
                                      TurnConfig.ready_wait_sec

        Example:
            >>> engine.turn_by_angle(TurnDirection.RIGHT, 45.0)
        """
        cfg = self.turn_config
        angle = cfg.quarter_turn_deg if angle_deg is None else float(angle_deg)
        sign = direction.value if angle >= 0 else -direction.value
        angle = abs(angle)

        if self.heading is None:
            raise HardwareUnavailableError("turn requires a heading sensor")

        logger.info(f"[TURN] {direction.name.lower()} {angle:.1f}deg")
        try:
            self.heading.ensure_ready(cfg.ready_wait_sec)
            # Turn timeout starts once the sensor is ready
            started = self.clock.now()
            outcome, turned = self._run_turn_loop(sign, angle, started)
        finally:
            self.stop()

        logger.info(f"[TURN] {outcome.value} after {self.clock.now() - started:.2f}s, turned {turned:.1f}deg")
        return outcome

    def turn_90_left(self) -> MotionOutcome:
        """Quarter turn counter-clockwise."""
        return self.turn_by_angle(TurnDirection.LEFT, self.turn_config.quarter_turn_deg)

    def turn_90_right(self) -> MotionOutcome:
        """Quarter turn clockwise."""
        return self.turn_by_angle(TurnDirection.RIGHT, self.turn_config.quarter_turn_deg)

    def _read_start_heading(self, started: float) -> Optional[float]:
        # Retry until a fresh reading arrives; None once the turn budget is spent
        while True:
            try:
                return self.heading.get_heading(allow_stale=False)
            except HardwareReadError as e:
                logger.warning(f"[TURN] Start heading unavailable: {e}")
            if not self.is_active() or self.clock.now() - started >= self.turn_config.timeout_sec:
                return None
            self.clock.sleep(self.drive_config.poll_interval_sec)

    def _turn_power(self, remaining_deg: float) -> float:
        cfg = self.turn_config
        power = float(np.clip(abs(cfg.turn_speed), 0.0, 1.0))
        if cfg.slowdown_deg > 0:
            factor = float(np.clip(remaining_deg / cfg.slowdown_deg, cfg.min_speed_factor, 1.0))
            power *= factor
        return power

    def _run_turn_loop(self, sign: int, angle: float, started: float):
        cfg = self.turn_config
        goal = max(0.0, angle - cfg.tolerance_deg)
        if goal == 0.0:
            return MotionOutcome.ARRIVED, 0.0
        if not self.is_active():
            return MotionOutcome.CANCELLED, 0.0

        previous = self._read_start_heading(started)
        if previous is None:
            outcome = MotionOutcome.CANCELLED if not self.is_active() else MotionOutcome.TIMED_OUT
            return outcome, 0.0

        self.drivetrain.set_passive_mode()
        turned = 0.0
        while True:
            if not self.is_active():
                return MotionOutcome.CANCELLED, turned

            current = self.heading.get_heading()
            turned += sign * heading_delta(previous, current)
            previous = current
            if turned >= goal:
                return MotionOutcome.ARRIVED, turned

            if self.clock.now() - started >= cfg.timeout_sec:
                return MotionOutcome.TIMED_OUT, turned

            power = self._turn_power(angle - turned)
            self.drivetrain.set_power(-power * sign, power * sign)
            report(self.telemetry, "Heading", f"{current:6.1f} turned {turned:6.1f}/{angle:.1f}")
            self.clock.sleep(self.drive_config.poll_interval_sec)
