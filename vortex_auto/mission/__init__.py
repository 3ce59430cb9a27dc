"""
Mission scripting: ordered primitive calls for one autonomous run.
"""

from mission.sequencer import MissionSequencer, MissionStep, MissionReport, StepResult
from mission.script_parser import ScriptCommand, parse_script, build_mission

__all__ = [
    "MissionSequencer",
    "MissionStep",
    "MissionReport",
    "StepResult",
    "ScriptCommand",
    "parse_script",
    "build_mission",
]
