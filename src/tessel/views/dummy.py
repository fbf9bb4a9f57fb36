"""DummyView - empty space of a fixed size."""

from __future__ import annotations

from tessel.geometry import Vec2, Vec2Like, as_vec2
from tessel.view import View


class DummyView(View):
    """Draws nothing; requests ``size`` (default ``(0, 0)``)."""

    def __init__(self, size: Vec2Like = (0, 0)) -> None:
        super().__init__()
        self._size = as_vec2(size)

    def set_size(self, size: Vec2Like) -> None:
        self._size = as_vec2(size)
        self.invalidate()

    def measure(self, constraint: Vec2) -> Vec2:
        return self._size

    def draw(self, printer) -> None:  # type: ignore[no-untyped-def]
        pass
