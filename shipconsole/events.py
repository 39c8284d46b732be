"""
Operator event log for the ship console.

Every intent outcome and every automatic transition that the operator
should see is appended here as a human-readable message with a severity and
the simulation time. Only the most recent entries are kept.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, List

logger = logging.getLogger(__name__)

DEFAULT_LOG_CAPACITY = 80


class Severity(Enum):
    """Severity tag of a log entry."""
    OK = "ok"
    WARN = "warn"
    ERROR = "error"
    INFO = "info"


_LOGGING_LEVELS = {
    Severity.OK: logging.INFO,
    Severity.INFO: logging.INFO,
    Severity.WARN: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class LogEntry:
    """
    A single operator log line.

    Attributes:
        message: Human-readable text.
        severity: ok, warn, error or info.
        timestamp: Simulation time when the entry was written (seconds).
    """
    message: str
    severity: Severity
    timestamp: float

    def __str__(self) -> str:
        return f"T+{self.timestamp:.1f}s [{self.severity.value.upper()}] {self.message}"


class ConsoleLog:
    """Append-only log capped to the most recent entries."""

    def __init__(self, clock, capacity: int = DEFAULT_LOG_CAPACITY) -> None:
        self.clock = clock
        self.capacity = capacity
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)
        self._callbacks: List[Callable[[LogEntry], None]] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[LogEntry]:
        """Entries oldest first."""
        return list(self._entries)

    @property
    def last(self) -> LogEntry | None:
        return self._entries[-1] if self._entries else None

    def write(self, message: str, severity: Severity = Severity.INFO) -> LogEntry:
        """
        Append an entry and notify callbacks.

        Args:
            message: Text of the entry.
            severity: Entry severity.

        Returns:
            The appended entry.
        """
        entry = LogEntry(message=message, severity=severity, timestamp=self.clock.now)
        self._entries.append(entry)
        logger.log(_LOGGING_LEVELS[severity], "T+%.1fs %s", entry.timestamp, message)

        for callback in self._callbacks:
            try:
                callback(entry)
            except Exception:
                logger.exception("Console log callback failed")

        return entry

    def ok(self, message: str) -> LogEntry:
        return self.write(message, Severity.OK)

    def info(self, message: str) -> LogEntry:
        return self.write(message, Severity.INFO)

    def warn(self, message: str) -> LogEntry:
        return self.write(message, Severity.WARN)

    def error(self, message: str) -> LogEntry:
        return self.write(message, Severity.ERROR)

    def add_callback(self, callback: Callable[[LogEntry], None]) -> None:
        """Register a function called with every new entry."""
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[LogEntry], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def by_severity(self, severity: Severity) -> List[LogEntry]:
        """Get retained entries with a given severity."""
        return [e for e in self._entries if e.severity == severity]

    def since(self, since_time: float) -> List[LogEntry]:
        """Get retained entries written at or after a time."""
        return [e for e in self._entries if e.timestamp >= since_time]

    def messages(self) -> List[str]:
        return [e.message for e in self._entries]
