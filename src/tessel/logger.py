"""In-memory log capture for the debug console.

:func:`init_logging` attaches a :class:`LogBuffer` to the ``tessel``
logger.  The buffer keeps the most recent records in a bounded deque;
:class:`~tessel.views.debug.DebugView` reads them back.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass

__all__ = [
    "LogEntry",
    "LogBuffer",
    "init_logging",
    "get_log_buffer",
]

_ROOT_LOGGER = "tessel"

_buffer: LogBuffer | None = None


@dataclass(frozen=True)
class LogEntry:
    created: float
    level: int
    name: str
    message: str

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level)

    def format(self) -> str:
        stamp = time.strftime("%H:%M:%S", time.localtime(self.created))
        return f"{stamp} {self.level_name:<7} {self.message}"


class LogBuffer(logging.Handler):
    """A handler that keeps the last *capacity* records."""

    def __init__(self, capacity: int = 1000, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
            if record.exc_info and record.exc_info[1] is not None:
                message = f"{message}: {record.exc_info[1]!r}"
            entry = LogEntry(record.created, record.levelno, record.name, message)
        except Exception:
            self.handleError(record)
            return
        self._entries.append(entry)

    def records(self) -> list[LogEntry]:
        """Snapshot of the buffered entries, oldest first."""
        self.acquire()
        try:
            return list(self._entries)
        finally:
            self.release()

    def clear(self) -> None:
        self.acquire()
        try:
            self._entries.clear()
        finally:
            self.release()

    def __len__(self) -> int:
        return len(self._entries)


def init_logging(level: int = logging.DEBUG, capacity: int = 1000) -> LogBuffer:
    """Capture ``tessel`` log records in memory, replacing any previous
    buffer.  Returns the installed :class:`LogBuffer`."""
    global _buffer
    root = logging.getLogger(_ROOT_LOGGER)
    if _buffer is not None:
        root.removeHandler(_buffer)
    _buffer = LogBuffer(capacity)
    root.addHandler(_buffer)
    root.setLevel(level)
    return _buffer


def get_log_buffer() -> LogBuffer | None:
    """The buffer installed by :func:`init_logging`, if any."""
    return _buffer
