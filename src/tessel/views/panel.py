"""Panel - draws a border (and optional title) around a single view."""

from __future__ import annotations

from typing import Sequence

from tessel.geometry import Rect, Vec2
from tessel.printer import Printer
from tessel.theme import ColorStyle
from tessel.utils import truncate_to_width, visible_width
from tessel.view import View, ViewWrapper


class Panel(ViewWrapper):
    """Wraps *view* in a one-cell border; the title sits on the top edge."""

    def __init__(self, view: View, title: str = "") -> None:
        super().__init__(view)
        self._title = title

    @property
    def title(self) -> str:
        return self._title

    def set_title(self, title: str) -> None:
        self._title = title
        self.invalidate()

    def measure(self, constraint: Vec2) -> Vec2:
        inner = self.view.required_size(constraint.saturating_sub((2, 2)))
        size = inner + (2, 2)
        if self._title:
            size = size.max((visible_width(self._title) + 4, 2))
        return size

    def arrange(self, size: Vec2) -> Sequence[Rect]:
        inner = size.saturating_sub((2, 2))
        self.view.layout(inner)
        return [Rect.from_size((1, 1), inner)]

    def draw(self, printer: Printer) -> None:
        printer.print_box((0, 0), printer.size)
        if self._title and printer.size.x > 4:
            title = truncate_to_width(self._title, printer.size.x - 4)
            x = (printer.size.x - visible_width(title)) // 2
            with printer.with_color(ColorStyle.title_primary()):
                printer.print((x, 0), title)
        self.draw_children(printer)
