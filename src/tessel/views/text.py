"""TextView - static multi-line text with a per-view overflow policy."""

from __future__ import annotations

import enum
from typing import Sequence

from tessel.geometry import Rect, Vec2
from tessel.printer import Printer
from tessel.theme import ColorStyle, Effect
from tessel.utils import truncate_to_width, visible_width, wrap_text
from tessel.view import View


class Overflow(enum.Enum):
    """What a TextView does with lines wider than its final width."""

    WRAP = "wrap"
    CLIP = "clip"
    TRUNCATE = "truncate"


class Align(enum.Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class TextView(View):
    """Displays text; wrapping, clipping or truncating per ``overflow``.

    For scrolling, put the view inside a
    :class:`~tessel.views.scroll.ScrollView`.
    """

    def __init__(
        self,
        text: str = "",
        overflow: Overflow | str = Overflow.WRAP,
        align: Align | str = Align.LEFT,
        color: ColorStyle | None = None,
        effects: Effect = Effect.NONE,
    ) -> None:
        super().__init__()
        self._text = text
        self.overflow = Overflow(overflow)
        self.align = Align(align)
        self.color = color
        self.effects = effects
        self._rows: list[str] = []

    # -- content ------------------------------------------------------------

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        self._text = text
        self.invalidate()

    def append(self, text: str) -> None:
        self._text += text
        self.invalidate()

    def rows(self) -> list[str]:
        """The rows committed by the last layout."""
        return self._rows

    def _rows_for(self, width: int) -> list[str]:
        if self.overflow is Overflow.WRAP:
            return wrap_text(self._text, width)
        lines = self._text.replace("\t", "   ").split("\n")
        if self.overflow is Overflow.TRUNCATE:
            return [truncate_to_width(line, width) for line in lines]
        return lines

    # -- layout -------------------------------------------------------------

    def measure(self, constraint: Vec2) -> Vec2:
        if not self._text:
            return Vec2.zero()
        if self.overflow is Overflow.WRAP:
            rows = wrap_text(self._text, constraint.x)
        else:
            rows = self._text.replace("\t", "   ").split("\n")
        width = max((visible_width(r) for r in rows), default=0)
        return Vec2(width, len(rows))

    def arrange(self, size: Vec2) -> Sequence[Rect]:
        self._rows = self._rows_for(size.x) if self._text else []
        return ()

    # -- drawing ------------------------------------------------------------

    def draw(self, printer: Printer) -> None:
        width = printer.size.x
        with printer.with_effect(self.effects):
            if self.color is not None:
                with printer.with_color(self.color):
                    self._draw_rows(printer, width)
            else:
                self._draw_rows(printer, width)

    def _draw_rows(self, printer: Printer, width: int) -> None:
        for y, row in enumerate(self._rows[: printer.size.y]):
            free = max(0, width - visible_width(row))
            if self.align is Align.CENTER:
                x = free // 2
            elif self.align is Align.RIGHT:
                x = free
            else:
                x = 0
            printer.print((x, y), row)
