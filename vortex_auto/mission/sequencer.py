"""
Mission Sequencer.

Runs an ordered, append-only list of primitive calls one after another.
Each step blocks until its primitive returns and the robot is put at rest
before the next step starts.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from hardware.interfaces import IClock, ITelemetry
from config.settings import MissionConfig
from core.clock import Deadline
from core.errors import HardwareUnavailableError, MissionAbortedError, MotionError
from core.telemetry import report
from motion.launcher import Launcher
from motion.primitives import MotionOutcome, MotionPrimitiveEngine, TurnDirection


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MissionStep:
    """One unit of work in a mission."""

    name: str
    action: Callable[[], Optional[MotionOutcome]]
    description: str = ""


@dataclass
class StepResult:
    """What happened when a step ran."""

    name: str
    outcome: Optional[MotionOutcome]
    started: float
    elapsed: float


@dataclass
class MissionReport:
    """
    Result of one mission run.

    Attributes:
        results: Steps that ran, in order
        total_steps: Number of steps in the script
        cancelled: The stop flag ended the run
        out_of_time: The mission time budget ran out before every step ran
    """

    results: List[StepResult] = field(default_factory=list)
    total_steps: int = 0
    cancelled: bool = False
    out_of_time: bool = False

    @property
    def completed(self) -> bool:
        """True when every step ran and nothing stopped the run early."""
        return (
            len(self.results) == self.total_steps
            and not self.cancelled
            and not self.out_of_time
        )

    def outcomes(self) -> List[Tuple[str, Optional[MotionOutcome]]]:
        return [(r.name, r.outcome) for r in self.results]


class MissionSequencer:
    """
    Ordered script of motion primitives.

    Steps are never skipped or retried. A MotionError from a step aborts the
    rest of the script with MissionAbortedError after the robot is stopped.

    Attributes:
        engine: Motion primitive engine
        launcher: Optional ball launcher
        clock: Time source (shared with the engine)
        stop_flag: Threading event to signal cancellation (shared with the engine)
    """

    def __init__(
        self,
        engine: MotionPrimitiveEngine,
        launcher: Optional[Launcher] = None,
        telemetry: Optional[ITelemetry] = None,
        config: Optional[MissionConfig] = None,
        clock: Optional[IClock] = None,
        stop_flag: Optional[threading.Event] = None
    ):
        """
        Initialize sequencer.

        Args:
            engine: Motion primitive engine
            launcher: Ball launcher, required only by launch steps
            telemetry: Optional status sink
            config: Mission time budget
            clock: Time source (defaults to the engine's)
            stop_flag: Cancellation event (defaults to the engine's)

        Example:
            >>> mission = MissionSequencer(engine, launcher)
            >>> mission.add_drive(0.6, -20, -20, 5).add_turn(TurnDirection.LEFT).add_launch(2)
            >>> mission.run().completed
            True
        """
        self.engine = engine
        self.launcher = launcher
        self.telemetry = telemetry
        self.config = config or MissionConfig()
        self.clock = clock or engine.clock
        self.stop_flag = stop_flag or engine.stop_flag
        self.logger = logging.getLogger(__name__)
        self._steps: List[MissionStep] = []

    @property
    def steps(self) -> Tuple[MissionStep, ...]:
        return tuple(self._steps)

    def add_step(self, name: str, action: Callable[[], Optional[MotionOutcome]], description: str = "") -> 'MissionSequencer':
        """Append an arbitrary blocking step."""
        self._steps.append(MissionStep(name, action, description))
        return self

    def add_drive(self, speed: float, left_inches: float, right_inches: float, timeout_sec: float) -> 'MissionSequencer':
        """Append an encoder drive."""
        return self.add_step(
            "drive",
            lambda: self.engine.drive_distance(speed, left_inches, right_inches, timeout_sec),
            f"drive({speed}, {left_inches}, {right_inches}, {timeout_sec})",
        )

    def add_turn(self, direction: TurnDirection, angle_deg: Optional[float] = None) -> 'MissionSequencer':
        """Append a gyro turn (quarter turn when no angle is given)."""
        angle = self.engine.turn_config.quarter_turn_deg if angle_deg is None else angle_deg
        return self.add_step(
            f"turn_{direction.name.lower()}",
            lambda: self.engine.turn_by_angle(direction, angle),
            f"turn_{direction.name.lower()}({angle})",
        )

    def add_launch(self, count: int) -> 'MissionSequencer':
        """Append a launch of count balls."""
        return self.add_step("launch", lambda: self._launch(count), f"launch({count})")

    def add_wait(self, seconds: float) -> 'MissionSequencer':
        """Append a pause that still honours the stop flag."""
        return self.add_step("wait", lambda: self._wait(seconds), f"wait({seconds})")

    def _launch(self, count: int) -> MotionOutcome:
        if self.launcher is None:
            raise HardwareUnavailableError("launch step needs a launcher")
        return self.launcher.launch_balls(count)

    def _wait(self, seconds: float) -> MotionOutcome:
        deadline = Deadline(self.clock, seconds)
        while not deadline.expired():
            if self.stop_flag.is_set():
                return MotionOutcome.CANCELLED
            self.clock.sleep(min(self.engine.drive_config.poll_interval_sec, deadline.remaining()))
        return MotionOutcome.ARRIVED

    def _come_to_rest(self):
        self.engine.stop()
        if self.launcher is not None:
            self.launcher.shooter.set_power(0.0)

    def run(self) -> MissionReport:
        """
        Execute every step in order.

        Returns:
            MissionReport: Per-step outcomes and why the run ended

        Raises:
            MissionAbortedError: If a step raised a MotionError; the robot
                                 is at rest and later steps did not run
        """
        mission_report = MissionReport(total_steps=len(self._steps))
        budget = Deadline(self.clock, self.config.time_budget_sec)
        self.logger.info(f"[MISSION] Starting {len(self._steps)} step(s)")

        for index, step in enumerate(self._steps, start=1):
            if self.stop_flag.is_set():
                mission_report.cancelled = True
                self.logger.warning(f"[MISSION] Stop requested before step {index}")
                break
            if budget.expired():
                mission_report.out_of_time = True
                self.logger.warning(f"[MISSION] Time budget spent before step {index} ({step.name})")
                break

            report(self.telemetry, "Step", f"{index}/{len(self._steps)} {step.description or step.name}")
            started = self.clock.now()
            try:
                outcome = step.action()
            except MotionError as e:
                self.logger.error(f"[MISSION] Step {index} ({step.name}) failed: {e}")
                raise MissionAbortedError(step.name, str(e)) from e
            finally:
                self._come_to_rest()

            mission_report.results.append(
                StepResult(step.name, outcome, started, self.clock.now() - started)
            )
            if outcome == MotionOutcome.CANCELLED:
                mission_report.cancelled = True
                break

        self.logger.info(
            f"[MISSION] Finished: {len(mission_report.results)}/{mission_report.total_steps} step(s), "
            f"completed={mission_report.completed}"
        )
        return mission_report
