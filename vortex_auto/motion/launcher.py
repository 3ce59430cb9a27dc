"""
Ball Launcher.

Timed launch action used by the missions: spin the shooter up, then open and
close the release servo once per ball. Treated by the sequencer as one
blocking step.
"""

import logging
import threading
from typing import Optional

from hardware.interfaces import IClock, IDcMotor, IServo, ITelemetry
from config.settings import LaunchConfig
from core.clock import Deadline, MonotonicClock
from core.errors import HardwareUnavailableError
from core.telemetry import report
from motion.primitives import MotionOutcome


logger = logging.getLogger(__name__)


class Launcher:
    """
    Shooter motor plus ball release servo.

    launch_balls() always leaves the shooter unpowered and the release servo
    closed, on every exit path.
    """

    def __init__(
        self,
        shooter: Optional[IDcMotor],
        release_servo: Optional[IServo],
        clock: Optional[IClock] = None,
        stop_flag: Optional[threading.Event] = None,
        config: Optional[LaunchConfig] = None,
        telemetry: Optional[ITelemetry] = None
    ):
        """
        Initialize launcher.

        Args:
            shooter: Flywheel motor
            release_servo: Servo gating one ball at a time
            clock: Time source
            stop_flag: Threading event to signal mission cancellation
            config: Launch timing
            telemetry: Optional status sink

        Raises:
            HardwareUnavailableError: If either device is missing
        """
        if shooter is None or release_servo is None:
            raise HardwareUnavailableError("launcher needs a shooter motor and a release servo")

        self.shooter = shooter
        self.release_servo = release_servo
        self.clock = clock or MonotonicClock()
        self.stop_flag = stop_flag or threading.Event()
        self.config = config or LaunchConfig()
        self.telemetry = telemetry

    def _wait(self, seconds: float, deadline: Deadline) -> bool:
        """Sleep in poll slices. False if cancelled or out of time."""
        until = self.clock.now() + seconds
        while self.clock.now() < until:
            if self.stop_flag.is_set() or deadline.expired():
                return False
            self.clock.sleep(min(self.config.poll_interval_sec, until - self.clock.now()))
        return not self.stop_flag.is_set()

    def _come_to_rest(self):
        """Shooter off and release closed. A failed write does not skip the other."""
        try:
            self.shooter.set_power(0.0)
        except Exception as e:
            logger.error(f"[LAUNCH] Failed to stop shooter: {e}")
        try:
            self.release_servo.set_position(self.config.release_hold_position)
        except Exception as e:
            logger.error(f"[LAUNCH] Failed to close ball release: {e}")

    def launch_balls(self, count: int) -> MotionOutcome:
        """
        Fire count balls.

        Args:
            count: Number of balls to release; zero or less does nothing

        Returns:
            MotionOutcome: ARRIVED when every ball was released, TIMED_OUT if
                           the launch timeout ran out first, CANCELLED if the
                           stop flag was set
        """
        cfg = self.config
        if count <= 0:
            return MotionOutcome.ARRIVED

        logger.info(f"[LAUNCH] Launching {count} ball(s)")
        deadline = Deadline(self.clock, cfg.timeout_sec)
        fired = 0
        try:
            self.shooter.set_power(cfg.shooter_power)
            ok = self._wait(cfg.spin_up_sec, deadline)
            while ok and fired < count:
                self.release_servo.set_position(cfg.release_open_position)
                ok = self._wait(cfg.release_sec, deadline)
                self.release_servo.set_position(cfg.release_hold_position)
                if not ok:
                    break
                fired += 1
                report(self.telemetry, "Launch", f"{fired}/{count}")
                if fired < count:
                    ok = self._wait(cfg.reload_sec, deadline)
        finally:
            self._come_to_rest()

        if fired == count:
            outcome = MotionOutcome.ARRIVED
        elif self.stop_flag.is_set():
            outcome = MotionOutcome.CANCELLED
        else:
            outcome = MotionOutcome.TIMED_OUT
        logger.info(f"[LAUNCH] {outcome.value}: {fired}/{count} fired")
        return outcome
