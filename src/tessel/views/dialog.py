"""Dialog - a bordered box with content above a row of buttons."""

from __future__ import annotations

from typing import Sequence

from tessel.event import Callback, Event, EventResult, Key, is_key
from tessel.geometry import Rect, Vec2
from tessel.printer import Printer
from tessel.theme import ColorStyle
from tessel.utils import truncate_to_width, visible_width
from tessel.view import View
from tessel.views.button import Button
from tessel.views.linear import LinearLayout
from tessel.views.text import TextView


def _pop_layer(tui) -> None:  # type: ignore[no-untyped-def]
    tui.pop_layer()


class Dialog(View):
    """Modal box meant to be pushed with ``TUI.add_layer``.

    Escape closes the dialog (pops the top layer) unless ``dismissible``
    is ``False``.
    """

    def __init__(self, content: View, title: str = "", dismissible: bool = True) -> None:
        super().__init__()
        self.content = content
        self._title = title
        self.dismissible = dismissible
        self.buttons = LinearLayout.horizontal()

    @classmethod
    def info(cls, text: str, title: str = "") -> Dialog:
        """A text dialog with a single "Ok" button that closes it."""
        return cls(TextView(text), title).dismiss_button("Ok")

    # -- building -----------------------------------------------------------

    def button(self, label: str, callback: Callback) -> Dialog:
        if len(self.buttons):
            self.buttons.add_child(_Gap())
        self.buttons.add_child(Button(label, callback))
        self.invalidate()
        return self

    def dismiss_button(self, label: str = "Close") -> Dialog:
        return self.button(label, _pop_layer)

    def set_content(self, content: View) -> None:
        self.content = content
        self.invalidate()

    def children(self) -> Sequence[View]:
        return (self.content, self.buttons)

    # -- layout -------------------------------------------------------------

    def measure(self, constraint: Vec2) -> Vec2:
        inner = constraint.saturating_sub((2, 2))
        buttons = self.buttons.required_size(inner)
        content = self.content.required_size(inner.saturating_sub((0, buttons.y)))
        width = max(content.x, buttons.x, visible_width(self._title) + 2)
        return Vec2(width + 2, content.y + buttons.y + 2)

    def arrange(self, size: Vec2) -> Sequence[Rect]:
        inner = size.saturating_sub((2, 2))
        buttons = self.buttons.required_size(inner).min(inner)
        content = Vec2(inner.x, max(0, inner.y - buttons.y))
        self.content.layout(content)
        self.buttons.layout(buttons)
        return [
            Rect.from_size((1, 1), content),
            Rect.from_size((1 + inner.x - buttons.x, 1 + content.y), buttons),
        ]

    # -- drawing ------------------------------------------------------------

    def draw(self, printer: Printer) -> None:
        printer.print_box((0, 0), printer.size)
        if self._title and printer.size.x > 4:
            title = truncate_to_width(self._title, printer.size.x - 4)
            x = (printer.size.x - visible_width(title)) // 2
            with printer.with_color(ColorStyle.title_primary()):
                printer.print((x, 0), title)
        self.draw_children(printer)

    # -- events -------------------------------------------------------------

    def on_event(self, event: Event) -> EventResult:
        if self.dismissible and is_key(event, Key.ESCAPE):
            return EventResult.consumed(_pop_layer)
        return EventResult.ignored()


class _Gap(View):
    """One blank column between dialog buttons."""

    def measure(self, constraint: Vec2) -> Vec2:
        return Vec2(1, 1)
