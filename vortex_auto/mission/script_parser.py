"""
Mission Script Parser.

Turns a one-line mission description such as

    drive(0.6, -20, -20, 5), turn_left(), drive(0.6, -30, -30, 5), launch(2)

into sequencer steps.
"""

import re
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from config.settings import DriveConfig
from core.errors import ScriptError
from motion.primitives import TurnDirection
from mission.sequencer import MissionSequencer


logger = logging.getLogger(__name__)

_CALL_RE = re.compile(r"([a-zA-Z_][a-zA-Z0-9_]*)\(([^)]*)\)")

DEFAULT_DRIVE_TIMEOUT_SEC = 5.0

# name -> allowed argument counts
_ARITY = {
    "drive": (2, 4),
    "turn_left": (0, 1),
    "turn_right": (0, 1),
    "launch": (1,),
    "wait": (1,),
}

_WHOLE_NUMBER_ARGS = {"launch"}


@dataclass(frozen=True)
class ScriptCommand:
    """One parsed call."""

    name: str
    args: Tuple[float, ...]


def parse_script(text: str) -> List[ScriptCommand]:
    """
    Parse a mission script.

    Calls are separated by commas, semicolons or newlines; '#' starts a
    comment that runs to the end of the line.

    Args:
        text: Mission script

    Returns:
        List of ScriptCommand in script order

    Raises:
        ScriptError: On unknown actions, wrong argument counts, non-numeric
                     arguments, fractional ball counts or stray text

    Example:
        >>> parse_script("drive(0.6, -20, -20, 5), launch(2)")
        [ScriptCommand(name='drive', args=(0.6, -20.0, -20.0, 5.0)), ScriptCommand(name='launch', args=(2.0,))]
    """
    text = re.sub(r"#.*", "", text or "")

    leftover = _CALL_RE.sub("", text)
    if re.sub(r"[\s,;]", "", leftover):
        raise ScriptError(f"Unrecognised text in mission script: {leftover.strip()!r}")

    commands = []
    for name, raw_args in _CALL_RE.findall(text):
        name = name.lower()
        if name not in _ARITY:
            raise ScriptError(f"Unknown mission action: {name}()")

        parts = [p.strip() for p in raw_args.split(",") if p.strip()]
        try:
            args = tuple(float(p) for p in parts)
        except ValueError:
            raise ScriptError(f"Non-numeric argument in {name}({raw_args})")

        if len(args) not in _ARITY[name]:
            expected = " or ".join(str(n) for n in _ARITY[name])
            raise ScriptError(f"{name}() takes {expected} argument(s), got {len(args)}")

        if name in _WHOLE_NUMBER_ARGS and not all(a.is_integer() for a in args):
            raise ScriptError(f"{name}() needs a whole number, got {raw_args.strip()}")

        commands.append(ScriptCommand(name, args))

    logger.debug(f"[SCRIPT] Parsed {len(commands)} command(s)")
    return commands


def build_mission(
    sequencer: MissionSequencer,
    text: str,
    drive_config: Optional[DriveConfig] = None
) -> MissionSequencer:
    """
    Append the steps of a mission script to a sequencer.

    Two-argument drive(left, right) calls use the configured drive speed and
    a 5 second timeout.

    Args:
        sequencer: Sequencer to extend
        text: Mission script
        drive_config: Source of the default drive speed

    Returns:
        The same sequencer, for chaining
    """
    drive_config = drive_config or sequencer.engine.drive_config

    for command in parse_script(text):
        args = command.args
        if command.name == "drive":
            if len(args) == 2:
                sequencer.add_drive(drive_config.drive_speed, args[0], args[1], DEFAULT_DRIVE_TIMEOUT_SEC)
            else:
                sequencer.add_drive(*args)
        elif command.name in ("turn_left", "turn_right"):
            direction = TurnDirection.LEFT if command.name == "turn_left" else TurnDirection.RIGHT
            sequencer.add_turn(direction, args[0] if args else None)
        elif command.name == "launch":
            sequencer.add_launch(int(args[0]))
        elif command.name == "wait":
            sequencer.add_wait(args[0])

    return sequencer
