"""LinearLayout - children stacked along one axis."""

from __future__ import annotations

from typing import Sequence

from tessel.event import Event, EventResult, Key, KeyPress
from tessel.geometry import Direction, Orientation, Rect, Vec2
from tessel.layout import distribute
from tessel.view import View, resolve_path

_NAV_KEYS = {
    Orientation.VERTICAL: {Key.UP: Direction.BACKWARD, Key.DOWN: Direction.FORWARD},
    Orientation.HORIZONTAL: {Key.LEFT: Direction.BACKWARD, Key.RIGHT: Direction.FORWARD},
}


class LinearLayout(View):
    """Places children one after another, vertically or horizontally.

    Every child gets the full cross-axis extent.  When the requested
    main-axis sizes do not fit they are shrunk with :func:`distribute`.
    Arrow keys along the axis move the focus between children.
    """

    def __init__(
        self,
        orientation: Orientation | str = Orientation.VERTICAL,
        children: Sequence[View] = (),
    ) -> None:
        super().__init__()
        self.orientation = Orientation(orientation)
        self._children: list[View] = list(children)

    @classmethod
    def vertical(cls, *children: View) -> LinearLayout:
        return cls(Orientation.VERTICAL, children)

    @classmethod
    def horizontal(cls, *children: View) -> LinearLayout:
        return cls(Orientation.HORIZONTAL, children)

    # -- children -----------------------------------------------------------

    def children(self) -> Sequence[View]:
        return self._children

    def add_child(self, view: View) -> LinearLayout:
        self._children.append(view)
        self.invalidate()
        return self

    def insert_child(self, index: int, view: View) -> None:
        self._children.insert(index, view)
        self.invalidate()

    def remove_child(self, index: int) -> View:
        view = self._children.pop(index)
        self.invalidate()
        return view

    def clear(self) -> None:
        self._children.clear()
        self.invalidate()

    def __len__(self) -> int:
        return len(self._children)

    # -- layout -------------------------------------------------------------

    def measure(self, constraint: Vec2) -> Vec2:
        o = self.orientation
        main = 0
        cross = 0
        for child in self._children:
            req = child.required_size(constraint)
            main += o.get(req)
            cross = max(cross, o.get_cross(req))
        return o.make(main, cross)

    def arrange(self, size: Vec2) -> Sequence[Rect]:
        o = self.orientation
        requests = [o.get(child.required_size(size)) for child in self._children]
        sizes = distribute(o.get(size), requests)
        cross = o.get_cross(size)

        rects: list[Rect] = []
        pos = 0
        for child, main in zip(self._children, sizes):
            child_size = o.make(main, cross)
            child.layout(child_size)
            rects.append(Rect.from_size(o.make(pos, 0), child_size))
            pos += main
        return rects

    # -- events -------------------------------------------------------------

    def on_event(self, event: Event) -> EventResult:
        if not isinstance(event, KeyPress):
            return EventResult.ignored()
        direction = _NAV_KEYS[self.orientation].get(event.key)  # type: ignore[call-overload]
        if direction is None:
            return EventResult.ignored()

        current = next(
            (i for i, c in enumerate(self._children) if c.has_focus_within()), None
        )
        if current is None:
            return EventResult.ignored()
        if direction is Direction.FORWARD:
            candidates = range(current + 1, len(self._children))
        else:
            candidates = range(current - 1, -1, -1)
        for index in candidates:
            child = self._children[index]
            sub = child.find_focusable(direction)
            if sub is not None:
                target = resolve_path(child, sub)
                return EventResult.consumed(lambda tui: tui.focus_view(target))
        return EventResult.ignored()
