"""
Error taxonomy for the autonomous drive system.

Timeouts and cancellations are normal outcomes and have no exception here.
"""


class MotionError(RuntimeError):
    """Base class for all drive system faults."""


class PreconditionError(MotionError):
    """A primitive could not start. No motion was attempted."""


class HardwareUnavailableError(PreconditionError):
    """A required device handle is missing or was never bootstrapped."""


class SensorNotCalibratedError(PreconditionError):
    """The heading sensor did not report ready in time."""


class HardwareReadError(MotionError, OSError):
    """
    Transient failure reading a device.

    Adapters recover from this locally by reusing the last known value.
    """


class HardwareWriteError(MotionError, OSError):
    """A command could not be delivered to a device."""


class MissionAbortedError(MotionError):
    """The sequencer stopped the script because a step faulted."""

    def __init__(self, step_name: str, message: str):
        super().__init__(f"Mission aborted at step '{step_name}': {message}")
        self.step_name = step_name


class ScriptError(ValueError):
    """A mission script line could not be parsed."""
