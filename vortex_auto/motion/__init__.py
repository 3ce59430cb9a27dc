"""
Motion System.

Closed-loop drive and turn primitives plus the launch action.
"""

from motion.primitives import MotionPrimitiveEngine, MotionOutcome, TurnDirection, DrivetrainState, inches_to_ticks
from motion.launcher import Launcher

__all__ = [
    "MotionPrimitiveEngine",
    "MotionOutcome",
    "TurnDirection",
    "DrivetrainState",
    "inches_to_ticks",
    "Launcher",
]
