# ============================================================================
# src/guided_text_pipeline/pipeline/reporting.py
# ============================================================================
"""Status sinks the controller reports stage progress to."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Protocol

from guided_text_pipeline.logging.logger import logger


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class StatusReporter(Protocol):
    def report(self, step, message: str, severity: Severity) -> None:
        ...


class LoggingReporter:
    """Default sink: forwards every status line to the project logger."""

    _LEVELS = {
        Severity.INFO: logger.info,
        Severity.SUCCESS: logger.info,
        Severity.WARNING: logger.warning,
        Severity.ERROR: logger.error,
    }

    def report(self, step, message: str, severity: Severity) -> None:
        self._LEVELS[Severity(severity)](f"[{getattr(step, 'value', step)}] {message}")


@dataclass(frozen=True)
class StatusEntry:
    step: str
    message: str
    severity: Severity


class RecordingReporter(LoggingReporter):
    """Logs like ``LoggingReporter`` and also keeps every entry in memory."""

    def __init__(self):
        self.entries: List[StatusEntry] = []

    def report(self, step, message: str, severity: Severity) -> None:
        super().report(step, message, severity)
        self.entries.append(StatusEntry(getattr(step, "value", str(step)), message, Severity(severity)))

    def latest(self, step=None):
        """Most recent entry, optionally restricted to one step."""
        wanted = getattr(step, "value", step)
        for entry in reversed(self.entries):
            if wanted is None or entry.step == wanted:
                return entry
        return None
