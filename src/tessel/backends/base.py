"""The capability interface every backend implements."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from tessel.buffer import Cell
from tessel.event import Event
from tessel.geometry import Vec2

__all__ = ["Backend"]


@runtime_checkable
class Backend(Protocol):
    """Input source and cell sink over a character grid.

    Only :meth:`wake` may be called from threads other than the event
    loop's.
    """

    def start(self) -> None:
        """Acquire the terminal (raw mode, alternate screen, ...)."""
        ...

    def stop(self) -> None:
        """Restore whatever :meth:`start` changed."""
        ...

    def poll_event(self, timeout: float) -> Event | None:
        """Next input event, waiting at most *timeout* seconds.

        Returns ``None`` on timeout or when woken.  A grid size change is
        reported as a ``Resize`` event.
        """
        ...

    def grid_size(self) -> Vec2: ...

    def set_cell(self, row: int, column: int, cell: Cell) -> None: ...

    def clear(self) -> None: ...

    def flush(self) -> None: ...

    def wake(self) -> None:
        """Make a blocked :meth:`poll_event` return early.  Thread-safe."""
        ...
