"""Headless backend -- scriptable input and an observable screen.

Used by the test-suite and by embedders that drive the UI without a real
terminal.  Writes go to :attr:`PuppetBackend.screen`, a
:class:`~tessel.buffer.ScreenBuffer` that can be inspected after each
flush.
"""

from __future__ import annotations

import queue

from tessel.buffer import Cell, ScreenBuffer
from tessel.event import CharInput, Event, KeyLike, KeyPress, Resize
from tessel.geometry import Vec2, Vec2Like, as_vec2

__all__ = ["PuppetBackend"]

# Put on the input queue by wake(); makes a blocked poll return None.
_WAKE = object()


class PuppetBackend:
    """In-memory backend that records every write for inspection.

    Parameters
    ----------
    size:
        Grid size as ``(columns, rows)``.
    """

    def __init__(self, size: Vec2Like = (80, 24)) -> None:
        self._size = as_vec2(size)
        self._events: queue.Queue[object] = queue.Queue()
        self.screen = ScreenBuffer(self._size)
        self.started = False
        self.flush_count = 0
        self.clear_count = 0
        self.wake_count = 0
        # set_cell calls since the previous flush, and in the last frame.
        self._pending_writes = 0
        self.last_frame_writes = 0

    # -- Backend protocol: lifecycle ----------------------------------------

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.started = False

    # -- Backend protocol: input --------------------------------------------

    def poll_event(self, timeout: float) -> Event | None:
        try:
            if timeout is None or timeout > 0:
                item = self._events.get(timeout=timeout)
            else:
                item = self._events.get_nowait()
        except queue.Empty:
            return None
        if item is _WAKE:
            return None
        return item  # type: ignore[return-value]

    def wake(self) -> None:
        self.wake_count += 1
        self._events.put(_WAKE)

    # -- Backend protocol: output -------------------------------------------

    def grid_size(self) -> Vec2:
        return self._size

    def set_cell(self, row: int, column: int, cell: Cell) -> None:
        self._pending_writes += 1
        self.screen.put(row, column, cell)

    def clear(self) -> None:
        self.clear_count += 1
        self.screen.fill()

    def flush(self) -> None:
        self.flush_count += 1
        self.last_frame_writes = self._pending_writes
        self._pending_writes = 0

    # -- Scripting helpers --------------------------------------------------

    def push_event(self, event: Event) -> None:
        """Queue *event* for the next poll.  Thread-safe."""
        self._events.put(event)

    def push_key(self, key: KeyLike) -> None:
        self.push_event(KeyPress(key))

    def type_text(self, text: str) -> None:
        for char in text:
            self.push_event(CharInput(char))

    def resize(self, size: Vec2Like) -> None:
        """Change the grid size and queue the matching ``Resize`` event."""
        self._size = as_vec2(size)
        self.screen = ScreenBuffer(self._size)
        self.push_event(Resize(self._size))

    @property
    def pending_events(self) -> int:
        return self._events.qsize()

    # -- Observation helpers ------------------------------------------------

    def row_text(self, row: int) -> str:
        return self.screen.row_text(row)

    def text(self) -> str:
        return self.screen.text()

    def cell(self, row: int, column: int) -> Cell:
        return self.screen.get(row, column)

    def find(self, needle: str) -> list[Vec2]:
        """Positions ``(column, row)`` where *needle* starts on screen."""
        hits: list[Vec2] = []
        for row in range(self.screen.height):
            cells = [c for c in self.screen.row(row) if not c.is_continuation]
            line = "".join(c.glyph for c in cells)
            start = line.find(needle)
            while start != -1:
                hits.append(Vec2(self._column_of(row, start), row))
                start = line.find(needle, start + 1)
        return hits

    def _column_of(self, row: int, char_index: int) -> int:
        """Grid column of the glyph that starts at *char_index* of the
        row's joined text."""
        consumed = 0
        for col, c in enumerate(self.screen.row(row)):
            if c.is_continuation:
                continue
            if consumed >= char_index:
                return col
            consumed += len(c.glyph)
        return self.screen.width
