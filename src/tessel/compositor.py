"""Double-buffered differential renderer.

Each frame the layer stack draws into a fresh :class:`ScreenBuffer`.  The
:class:`Compositor` diffs it against the previous frame and sends only the
changed cells to the backend.  Runs are built from whole glyph units, so a
wide glyph is always emitted as one piece.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tessel.buffer import BLANK, Cell, ScreenBuffer
from tessel.geometry import Vec2, as_vec2

if TYPE_CHECKING:
    from tessel.backends.base import Backend

logger = logging.getLogger(__name__)

__all__ = [
    "CellRun",
    "diff_buffers",
    "apply_runs",
    "Compositor",
]


# ---------------------------------------------------------------------------
# Diffing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CellRun:
    """A horizontal run of cells to write starting at ``(row, col)``.

    ``cells`` includes continuation cells of wide glyphs so that applying a
    run to a buffer copy reproduces the new frame exactly.
    """

    row: int
    col: int
    cells: tuple[Cell, ...]


def _full_runs(cur: ScreenBuffer) -> list[CellRun]:
    return [
        CellRun(r, 0, tuple(cur.row(r)))
        for r in range(cur.height)
        if cur.width > 0
    ]


def diff_buffers(prev: ScreenBuffer | None, cur: ScreenBuffer) -> list[CellRun]:
    """Return the minimal set of runs that turns *prev* into *cur*.

    When *prev* is ``None`` or differs in size every row is emitted.
    Identical buffers produce no runs.
    """
    if prev is None or prev.size != cur.size:
        return _full_runs(cur)

    runs: list[CellRun] = []
    width = cur.width
    for r in range(cur.height):
        old = prev.row(r)
        new = cur.row(r)
        if old == new:
            continue

        start: int | None = None
        c = 0
        while c < width:
            cell = new[c]
            unit = 2 if cell.is_wide and c + 1 < width else 1
            changed = new[c : c + unit] != old[c : c + unit]
            if changed and start is None:
                start = c
            elif not changed and start is not None:
                runs.append(CellRun(r, start, tuple(new[start:c])))
                start = None
            c += unit
        if start is not None:
            runs.append(CellRun(r, start, tuple(new[start:width])))
    return runs


def apply_runs(buffer: ScreenBuffer, runs: list[CellRun]) -> None:
    """Write *runs* into *buffer* verbatim."""
    for run in runs:
        for i, cell in enumerate(run.cells):
            buffer.set_raw(run.row, run.col + i, cell)


# ---------------------------------------------------------------------------
# Compositor
# ---------------------------------------------------------------------------


class Compositor:
    """Owns the front (last flushed) and back (being drawn) buffers."""

    def __init__(self) -> None:
        self._previous: ScreenBuffer | None = None
        self._current: ScreenBuffer = ScreenBuffer(Vec2.zero())
        self._full_redraw_count: int = 0
        self.last_run_count: int = 0

    @property
    def full_redraws(self) -> int:
        """Number of full (non-differential) flushes performed."""
        return self._full_redraw_count

    @property
    def previous(self) -> ScreenBuffer | None:
        return self._previous

    def invalidate(self) -> None:
        """Forget the previous frame so the next flush repaints everything."""
        self._previous = None

    def begin_frame(self, size: Vec2 | tuple[int, int], fill: Cell = BLANK) -> ScreenBuffer:
        """Return a blank back buffer of *size* to draw the next frame into."""
        size = as_vec2(size)
        if self._previous is not None and self._previous.size != size:
            logger.debug(
                "Grid resized from %s to %s, forcing full redraw",
                self._previous.size,
                size,
            )
            self._previous = None
        self._current = ScreenBuffer(size, fill)
        return self._current

    def flush(self, backend: Backend) -> int:
        """Send the difference between the frames to *backend*.

        Returns the number of runs written.  If the backend raises
        :class:`OSError` the previous frame is forgotten (so the next
        attempt is a full redraw) and the error propagates.
        """
        cur = self._current
        full = self._previous is None
        runs = diff_buffers(self._previous, cur)
        try:
            if full:
                backend.clear()
            for run in runs:
                for i, cell in enumerate(run.cells):
                    if not cell.is_continuation:
                        backend.set_cell(run.row, run.col + i, cell)
            backend.flush()
        except OSError:
            self._previous = None
            raise

        if full:
            self._full_redraw_count += 1
        self._previous = cur
        self.last_run_count = len(runs)
        return len(runs)
