"""ScrollView - a viewport over content that may be larger than itself."""

from __future__ import annotations

from typing import Sequence

from tessel.event import Event, EventResult, Key, KeyPress, MouseButton, MousePress
from tessel.geometry import Direction, Rect, Vec2
from tessel.layout import UNBOUNDED
from tessel.printer import Printer
from tessel.theme import ColorStyle
from tessel.view import View, focused_rect

_WHEEL_STEP = 3


class ScrollView(View):
    """Shows a window onto *content*.

    The content is measured with an unbounded constraint along the scrolling
    axes and laid out at that full size; the view keeps an offset instead of
    squeezing it.  A one-column scrollbar appears when content overflows
    vertically.
    """

    def __init__(
        self,
        content: View,
        scroll_x: bool = False,
        scroll_y: bool = True,
    ) -> None:
        super().__init__()
        self.content = content
        self.scroll_x = scroll_x
        self.scroll_y = scroll_y
        self.offset = Vec2.zero()
        self._content_size = Vec2.zero()
        self._viewport = Vec2.zero()
        self._scrollbar = False
        self._focus_target: Rect | None = None

    def children(self) -> Sequence[View]:
        return (self.content,)

    # -- layout -------------------------------------------------------------

    def _inner_constraint(self, width: int, height: int) -> Vec2:
        return Vec2(
            UNBOUNDED if self.scroll_x else width,
            UNBOUNDED if self.scroll_y else height,
        )

    def measure(self, constraint: Vec2) -> Vec2:
        inner = self.content.required_size(self._inner_constraint(constraint.x, constraint.y))
        if self.scroll_y and inner.y > constraint.y and constraint.x > 1:
            narrower = self._inner_constraint(constraint.x - 1, constraint.y)
            inner = self.content.required_size(narrower) + (1, 0)
        return inner.min(constraint)

    def arrange(self, size: Vec2) -> Sequence[Rect]:
        width = size.x
        inner = self.content.required_size(self._inner_constraint(width, size.y))
        self._scrollbar = self.scroll_y and inner.y > size.y and width > 1
        if self._scrollbar:
            width -= 1
            inner = self.content.required_size(self._inner_constraint(width, size.y))

        viewport = Vec2(width, size.y)
        content = Vec2(
            max(inner.x, viewport.x) if self.scroll_x else viewport.x,
            max(inner.y, viewport.y) if self.scroll_y else viewport.y,
        )
        self.content.layout(content)
        self._content_size = content
        self._viewport = viewport

        target = focused_rect(self.content)
        if target is not None and target != self._focus_target:
            self._scroll_to_rect(target)
        self._focus_target = target
        self._clamp()
        return [Rect(-self.offset.x, -self.offset.y, content.x, content.y)]

    # -- scrolling ----------------------------------------------------------

    @property
    def max_offset(self) -> Vec2:
        return self._content_size.saturating_sub(self._viewport)

    def is_scrollable(self) -> bool:
        return self.max_offset != Vec2.zero()

    def _clamp(self) -> None:
        self.offset = self.offset.min(self.max_offset).clamp_non_negative()

    def _scroll_to_rect(self, rect: Rect) -> None:
        x, y = self.offset
        if rect.bottom > y + self._viewport.y:
            y = rect.bottom - self._viewport.y
        if rect.y < y:
            y = rect.y
        if rect.right > x + self._viewport.x:
            x = rect.right - self._viewport.x
        if rect.x < x:
            x = rect.x
        self.offset = Vec2(x, y)

    def scroll_to(self, offset: Vec2) -> None:
        self.offset = offset
        self._clamp()
        self._child_rects = [
            Rect(-self.offset.x, -self.offset.y, self._content_size.x, self._content_size.y)
        ]

    def scroll_by(self, dx: int, dy: int) -> bool:
        """Scroll by a delta; returns ``False`` when already at the edge."""
        before = self.offset
        self.scroll_to(Vec2(max(0, before.x + dx), max(0, before.y + dy)))
        return self.offset != before

    def scroll_to_top(self) -> None:
        self.scroll_to(Vec2(self.offset.x, 0))

    def scroll_to_bottom(self) -> None:
        self.scroll_to(Vec2(self.offset.x, self.max_offset.y))

    # -- focus and events ---------------------------------------------------

    def take_focus(self, source: Direction) -> bool:
        return self.is_scrollable()

    def on_event(self, event: Event) -> EventResult:
        if isinstance(event, KeyPress):
            moves = {
                Key.UP: (0, -1),
                Key.DOWN: (0, 1),
                Key.LEFT: (-1, 0),
                Key.RIGHT: (1, 0),
            }
            delta = moves.get(event.key)  # type: ignore[call-overload]
            if delta is not None and self.scroll_by(*delta):
                return EventResult.consumed()
            return EventResult.ignored()
        if isinstance(event, MousePress):
            if event.button is MouseButton.WHEEL_UP and self.scroll_by(0, -_WHEEL_STEP):
                return EventResult.consumed()
            if event.button is MouseButton.WHEEL_DOWN and self.scroll_by(0, _WHEEL_STEP):
                return EventResult.consumed()
        return EventResult.ignored()

    # -- drawing ------------------------------------------------------------

    def draw(self, printer: Printer) -> None:
        viewport = printer.cropped(self._viewport)
        self.content.draw(
            viewport.sub_printer((-self.offset.x, -self.offset.y), self._content_size)
        )
        if self._scrollbar:
            self._draw_scrollbar(printer)

    def _draw_scrollbar(self, printer: Printer) -> None:
        height = self._viewport.y
        total = max(1, self._content_size.y)
        thumb = max(1, height * height // total)
        travel = max(0, height - thumb)
        max_y = max(1, self.max_offset.y)
        start = travel * self.offset.y // max_y
        x = self._viewport.x
        with printer.with_color(ColorStyle.secondary()):
            printer.print_vline((x, 0), height, "│")
        color = ColorStyle.highlight() if self.focused and printer.focused else ColorStyle.highlight_inactive()
        with printer.with_color(color):
            printer.print_vline((x, start), thumb, " ")
