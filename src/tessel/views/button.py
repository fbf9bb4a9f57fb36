"""Button - a focusable label that runs a callback when activated."""

from __future__ import annotations

from tessel.event import (
    Callback,
    CharInput,
    Event,
    EventResult,
    Key,
    MouseButton,
    MousePress,
    MouseRelease,
    is_key,
)
from tessel.geometry import Direction, Vec2
from tessel.printer import Printer
from tessel.theme import ColorStyle
from tessel.utils import visible_width
from tessel.view import View


class Button(View):
    """Shown as ``<label>``; Enter, Space or a left click activates it.

    Activation returns ``EventResult.consumed(callback)`` so the callback
    runs once, after routing, with the ``TUI``.
    """

    def __init__(self, label: str, callback: Callback) -> None:
        super().__init__()
        self._label = label
        self.callback = callback
        self.enabled = True

    @property
    def label(self) -> str:
        return self._label

    def set_label(self, label: str) -> None:
        self._label = label
        self.invalidate()

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def measure(self, constraint: Vec2) -> Vec2:
        return Vec2(visible_width(self._label) + 2, 1)

    def take_focus(self, source: Direction) -> bool:
        return self.enabled

    def on_event(self, event: Event) -> EventResult:
        if not self.enabled:
            return EventResult.ignored()
        if is_key(event, Key.ENTER) or event == CharInput(" "):
            return EventResult.consumed(self.callback)
        if isinstance(event, MouseRelease) and event.button is MouseButton.LEFT:
            return EventResult.consumed(self.callback)
        if isinstance(event, MousePress) and event.button is MouseButton.LEFT:
            # Focus moves on press; activation happens on release.
            return EventResult.consumed()
        return EventResult.ignored()

    def draw(self, printer: Printer) -> None:
        text = f"<{self._label}>"
        if not self.enabled:
            color = ColorStyle.secondary()
        elif self.focused and printer.focused:
            color = ColorStyle.highlight()
        elif self.focused:
            color = ColorStyle.highlight_inactive()
        else:
            color = ColorStyle.primary()
        with printer.with_color(color):
            printer.print((0, 0), text)
