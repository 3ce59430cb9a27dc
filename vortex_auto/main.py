#!/usr/bin/env python3
"""
Vortex Autonomous Entry Point.

Bootstraps the hardware, builds the mission from its script and runs it.
Without real device handles the simulated robot is used.
"""

__version__ = "1.0.0"

import logging
import signal
import sys
import threading
from typing import Mapping, Optional

from config.settings import VortexConfig
from core.clock import MonotonicClock
from core.errors import MissionAbortedError, MotionError
from core.telemetry import LoggingTelemetry
from hardware.bootstrap import init_auto
from hardware.interfaces import IClock
from hardware.mock_hardware import SimClock, SimulatedRobot
from mission.script_parser import build_mission
from mission.sequencer import MissionReport, MissionSequencer
from motion.launcher import Launcher
from motion.primitives import MotionPrimitiveEngine


logger = logging.getLogger("vortex")

# Red alliance, position 1: launch two balls, park in the center
DEFAULT_MISSION = "drive(0.6, -22, -22, 5), launch(2), drive(0.6, -24, -24, 5), turn_left()"


class VortexRobot:
    """
    Main autonomous controller.

    Integrates hardware bootstrap, motion engine, launcher and sequencer and
    provides lifecycle management.
    """

    def __init__(
        self,
        config: Optional[VortexConfig] = None,
        devices: Optional[Mapping[str, object]] = None,
        clock: Optional[IClock] = None
    ):
        """
        Initialize robot.

        Args:
            config: Configuration (defaults to environment overrides)
            devices: Real device handles keyed by name; None runs the simulator
            clock: Time source (simulated clock for the simulator, wall clock otherwise)
        """
        self.config = config or VortexConfig.from_env()
        self.stop_flag = threading.Event()
        self.telemetry = LoggingTelemetry()
        self.sim: Optional[SimulatedRobot] = None

        if devices is None:
            self.clock = clock or SimClock()
            self.sim = SimulatedRobot(self.clock, self.config.drive)
            devices = self.sim.hardware_map()
            logger.info("[VORTEX] No hardware handles given, using the simulated robot")
        else:
            self.clock = clock or MonotonicClock()

        self.hardware = init_auto(devices, self.clock, self.config, self.telemetry)
        self.engine = MotionPrimitiveEngine(
            self.hardware.drivetrain,
            self.hardware.heading,
            clock=self.clock,
            stop_flag=self.stop_flag,
            drive_config=self.config.drive,
            turn_config=self.config.turn,
            telemetry=self.telemetry,
        )
        self.launcher = Launcher(
            self.hardware.shooter,
            self.hardware.ball_release,
            clock=self.clock,
            stop_flag=self.stop_flag,
            config=self.config.launch,
            telemetry=self.telemetry,
        )
        self.sequencer = MissionSequencer(
            self.engine,
            self.launcher,
            telemetry=self.telemetry,
            config=self.config.mission,
        )
        build_mission(self.sequencer, self.config.mission.script or DEFAULT_MISSION, self.config.drive)

    def run(self) -> MissionReport:
        """
        Run the mission.

        On real hardware a timer sets the stop flag when the autonomous
        period ends so a running primitive is cut short.
        """
        timer = None
        if self.sim is None:
            timer = threading.Timer(self.config.mission.time_budget_sec, self.stop_flag.set)
            timer.daemon = True
            timer.start()
        try:
            return self.sequencer.run()
        finally:
            if timer is not None:
                timer.cancel()

    def shutdown(self):
        """Stop all outputs."""
        self.stop_flag.set()
        self.engine.stop()
        self.hardware.shooter.set_power(0.0)
        logger.info("[VORTEX] Shutdown complete")


def main() -> int:
    """Main entry point."""
    config = VortexConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        robot = VortexRobot(config)
    except MotionError as e:
        logger.error(f"[VORTEX] Bootstrap failed: {e}")
        return 1

    def signal_handler(sig, frame):
        logger.warning("[VORTEX] Interrupt received, stopping mission")
        robot.stop_flag.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        mission_report = robot.run()
    except MissionAbortedError as e:
        logger.error(f"[VORTEX] {e}")
        return 1
    finally:
        robot.shutdown()

    for name, outcome in mission_report.outcomes():
        logger.info(f"[VORTEX] {name}: {outcome.value if outcome else '-'}")
    return 0 if mission_report.completed else 2


if __name__ == "__main__":
    sys.exit(main())
