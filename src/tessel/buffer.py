"""Cells and the character-grid screen buffer.

A wide glyph occupies two columns: the *head* cell holds the glyph with
``width == 2`` and the cell to its right is a *continuation* (``width ==
0``).  :meth:`ScreenBuffer.put` keeps that pairing intact: overwriting
either half of a wide glyph blanks the other half.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from tessel.geometry import Vec2, as_vec2
from tessel.theme import Style

__all__ = [
    "Cell",
    "BLANK",
    "ScreenBuffer",
]


@dataclass(frozen=True)
class Cell:
    """One grid position: glyph, style and display width."""

    glyph: str = " "
    style: Style = Style()
    width: int = 1

    @property
    def is_continuation(self) -> bool:
        return self.width == 0

    @property
    def is_wide(self) -> bool:
        return self.width == 2

    @classmethod
    def blank(cls, style: Style | None = None) -> Cell:
        return cls(" ", style if style is not None else Style(), 1)

    def continuation(self) -> Cell:
        """The trailing half that pairs with this wide head cell."""
        return Cell("", self.style, 0)


BLANK = Cell()


class ScreenBuffer:
    """A ``height x width`` grid of cells addressed as ``(row, column)``."""

    def __init__(self, size: Vec2 | tuple[int, int], fill: Cell = BLANK) -> None:
        size = as_vec2(size).clamp_non_negative()
        self._size = size
        self._fill = fill
        self._rows: list[list[Cell]] = [
            [fill] * size.x for _ in range(size.y)
        ]

    # -- properties ---------------------------------------------------------

    @property
    def size(self) -> Vec2:
        return self._size

    @property
    def width(self) -> int:
        return self._size.x

    @property
    def height(self) -> int:
        return self._size.y

    # -- access -------------------------------------------------------------

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self._size.y and 0 <= col < self._size.x

    def get(self, row: int, col: int) -> Cell:
        return self._rows[row][col]

    def row(self, row: int) -> list[Cell]:
        """The live list of cells for *row* (do not mutate)."""
        return self._rows[row]

    def set_raw(self, row: int, col: int, cell: Cell) -> None:
        """Store *cell* verbatim, without wide-glyph bookkeeping."""
        self._rows[row][col] = cell

    def put(self, row: int, col: int, cell: Cell) -> bool:
        """Write *cell* at ``(row, col)`` keeping wide glyphs consistent.

        A wide glyph that would hang over the right edge is replaced by a
        blank.  Returns ``False`` (and writes nothing) when out of bounds.
        """
        if not self.in_bounds(row, col) or cell.is_continuation:
            return False

        line = self._rows[row]
        if cell.is_wide and col + 1 >= self._size.x:
            cell = Cell(" ", cell.style, 1)

        self._break_pair_at(line, col)
        if cell.is_wide:
            self._break_pair_at(line, col + 1)
            line[col + 1] = cell.continuation()
        line[col] = cell
        return True

    def _break_pair_at(self, line: list[Cell], col: int) -> None:
        """Blank the partner of whatever wide glyph half sits at *col*."""
        current = line[col]
        if current.is_continuation and col > 0:
            head = line[col - 1]
            line[col - 1] = Cell(" ", head.style, 1)
        elif current.is_wide and col + 1 < len(line):
            tail = line[col + 1]
            line[col + 1] = Cell(" ", tail.style, 1)
        line[col] = Cell(" ", current.style, 1)

    def fill(self, cell: Cell = BLANK) -> None:
        for line in self._rows:
            line[:] = [cell] * self._size.x

    def copy(self) -> ScreenBuffer:
        other = ScreenBuffer.__new__(ScreenBuffer)
        other._size = self._size
        other._fill = self._fill
        other._rows = [list(line) for line in self._rows]
        return other

    # -- observation --------------------------------------------------------

    def row_text(self, row: int) -> str:
        """Glyphs of *row* joined, continuations skipped."""
        return "".join(c.glyph for c in self._rows[row] if not c.is_continuation)

    def text(self) -> str:
        return "\n".join(self.row_text(r) for r in range(self._size.y))

    def __iter__(self) -> Iterator[tuple[int, int, Cell]]:
        for r, line in enumerate(self._rows):
            for c, cell in enumerate(line):
                yield r, c, cell

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScreenBuffer):
            return NotImplemented
        return self._size == other._size and self._rows == other._rows

    def __repr__(self) -> str:
        return f"ScreenBuffer({self._size.x}x{self._size.y})"
