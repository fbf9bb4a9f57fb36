"""Error taxonomy.

Setup failures (:class:`ConfigurationError`, :class:`BackendError`) are
raised before the event loop starts.  :class:`LogicInconsistency` marks an
internal invariant violation; it is raised by strict helpers and caught by
their callers, which repair the state and log instead of crashing the UI.
"""

from __future__ import annotations

__all__ = [
    "TesselError",
    "ConfigurationError",
    "BackendError",
    "LogicInconsistency",
]


class TesselError(Exception):
    """Base class for every error raised by ``tessel``."""


class ConfigurationError(TesselError, ValueError):
    """Invalid theme or settings input, detected at load time."""


class BackendError(TesselError, RuntimeError):
    """The backend could not be initialised (no TTY, unsupported terminal)."""


class LogicInconsistency(TesselError):
    """An internal invariant does not hold (e.g. a dangling focus path)."""
