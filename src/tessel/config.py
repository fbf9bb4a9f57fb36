"""Runtime settings for the event loop.

Defaults can be overridden from the environment with ``TESSEL_*``
variables via :meth:`Settings.from_env`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from tessel.errors import ConfigurationError

__all__ = ["Settings"]

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _parse_number(name: str, raw: str, kind: type) -> int | float:
    try:
        return kind(raw.strip())
    except ValueError:
        raise ConfigurationError(
            f"{name} must be {'an integer' if kind is int else 'a number'}, got {raw!r}"
        ) from None


@dataclass
class Settings:
    """Event loop knobs.

    * ``fps`` -- when set, poll with a ``1/fps`` timeout and redraw every
      iteration.
    * ``poll_timeout`` -- seconds to block on input when ``fps`` is unset.
    * ``tab_wrap`` -- Tab past the last focusable view wraps to the first.
    * ``autorefresh`` -- redraw every iteration even when nothing changed.
    * ``mouse`` -- ask the terminal backend for mouse reporting.
    * ``log_capacity`` -- records kept by the in-memory log buffer.
    """

    fps: int | None = None
    poll_timeout: float = 0.03
    tab_wrap: bool = True
    autorefresh: bool = False
    mouse: bool = True
    log_capacity: int = 1000

    def __post_init__(self) -> None:
        if self.fps is not None and self.fps <= 0:
            raise ConfigurationError(f"fps must be positive, got {self.fps}")
        if self.poll_timeout < 0:
            raise ConfigurationError(
                f"poll_timeout must not be negative, got {self.poll_timeout}"
            )
        if self.log_capacity <= 0:
            raise ConfigurationError(
                f"log_capacity must be positive, got {self.log_capacity}"
            )

    @property
    def effective_timeout(self) -> float:
        if self.fps:
            return 1.0 / self.fps
        return self.poll_timeout

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``TESSEL_*`` environment variables."""
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        raw = env.get("TESSEL_FPS")
        if raw:
            kwargs["fps"] = _parse_number("TESSEL_FPS", raw, int)
        raw = env.get("TESSEL_POLL_TIMEOUT")
        if raw:
            kwargs["poll_timeout"] = _parse_number("TESSEL_POLL_TIMEOUT", raw, float)
        raw = env.get("TESSEL_TAB_WRAP")
        if raw:
            kwargs["tab_wrap"] = _parse_bool("TESSEL_TAB_WRAP", raw)
        raw = env.get("TESSEL_MOUSE")
        if raw:
            kwargs["mouse"] = _parse_bool("TESSEL_MOUSE", raw)
        raw = env.get("TESSEL_LOG_CAPACITY")
        if raw:
            kwargs["log_capacity"] = _parse_number("TESSEL_LOG_CAPACITY", raw, int)

        return cls(**kwargs)  # type: ignore[arg-type]
