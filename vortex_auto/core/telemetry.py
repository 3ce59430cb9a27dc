"""
Telemetry sinks.

The driver station display is not available off-robot, so status lines go to
the standard logging system instead.
"""

import logging
from typing import List, Optional, Tuple

from hardware.interfaces import ITelemetry


logger = logging.getLogger(__name__)


class LoggingTelemetry(ITelemetry):
    """
    Telemetry sink that writes each flushed line to a logger.

    Attributes:
        pending: Lines queued since the last update()
        history: Every line flushed so far, oldest first
    """

    def __init__(self, log: Optional[logging.Logger] = None):
        self.logger = log or logger
        self.pending: List[Tuple[str, str]] = []
        self.history: List[Tuple[str, str]] = []

    def add_data(self, caption: str, value: str):
        self.pending.append((caption, str(value)))

    def update(self):
        for caption, value in self.pending:
            self.logger.info(f"[TELEMETRY] {caption}: {value}")
        self.history.extend(self.pending)
        self.pending = []

    def last(self, caption: str) -> Optional[str]:
        """Return the most recent flushed value for a caption, if any."""
        for cap, value in reversed(self.history):
            if cap == caption:
                return value
        return None


def report(telemetry: Optional[ITelemetry], caption: str, value: str):
    """
    Send one line to an optional sink.

    A missing sink is a no-op.
    """
    if telemetry is None:
        return
    telemetry.add_data(caption, value)
    telemetry.update()
