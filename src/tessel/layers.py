"""The layer stack: independently laid-out top-level views.

Layers are kept bottom-to-top.  Each one is negotiated against the grid on
its own, then painted in order so that upper layers overwrite the cells
within their bounds.  Only the topmost layer receives input.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Iterator

from tessel.focus import FocusManager
from tessel.geometry import Rect, Vec2, Vec2Like, as_vec2
from tessel.layout import LayoutEngine
from tessel.printer import Printer
from tessel.theme import ColorStyle
from tessel.view import View

logger = logging.getLogger(__name__)

__all__ = [
    "Placement",
    "Position",
    "LayerPosition",
    "Layer",
    "LayerStack",
]


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------


class Placement(enum.Enum):
    """How a layer is sized against the grid."""

    FULLSCREEN = "fullscreen"
    FLOATING = "floating"


@dataclass(frozen=True)
class Position:
    """Where a floating layer goes.  ``None`` on an axis means centered."""

    x: int | None = None
    y: int | None = None

    @classmethod
    def center(cls) -> Position:
        return cls(None, None)

    @classmethod
    def absolute(cls, pos: Vec2Like) -> Position:
        x, y = as_vec2(pos)
        return cls(x, y)

    def compute_offset(self, size: Vec2, available: Vec2) -> Vec2:
        """Top-left corner for a box of *size*, kept inside *available*."""
        free = available.saturating_sub(size)
        x = free.x // 2 if self.x is None else min(max(0, self.x), free.x)
        y = free.y // 2 if self.y is None else min(max(0, self.y), free.y)
        return Vec2(x, y)


@dataclass(frozen=True)
class LayerPosition:
    """Addresses a layer counting from the bottom or from the top (0-based)."""

    index: int
    from_front: bool = False

    @classmethod
    def from_back(cls, index: int) -> LayerPosition:
        return cls(index, False)

    @classmethod
    def front(cls, index: int = 0) -> LayerPosition:
        return cls(index, True)

    def resolve(self, count: int) -> int:
        """Index into a bottom-to-top list of *count* layers."""
        index = count - 1 - self.index if self.from_front else self.index
        if not 0 <= index < count:
            raise IndexError(f"No layer at {self} (stack has {count})")
        return index


# ---------------------------------------------------------------------------
# Layer
# ---------------------------------------------------------------------------


@dataclass
class Layer:
    view: View
    placement: Placement = Placement.FLOATING
    position: Position = field(default_factory=Position.center)
    margin: int = 1
    focus: FocusManager = field(default_factory=FocusManager)
    size: Vec2 = Vec2(0, 0)
    offset: Vec2 = Vec2(0, 0)
    # True until the first layout; that layout gives the layer its focus.
    fresh: bool = True

    @property
    def rect(self) -> Rect:
        return Rect.from_size(self.offset, self.size)

    @property
    def floating(self) -> bool:
        return self.placement is Placement.FLOATING


# ---------------------------------------------------------------------------
# LayerStack
# ---------------------------------------------------------------------------


class LayerStack:
    """Ordered layers, bottom first."""

    def __init__(self, tab_wrap: bool = True) -> None:
        self.tab_wrap = tab_wrap
        self._layers: list[Layer] = []
        self._needs_full_redraw = False

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers)

    def __getitem__(self, position: LayerPosition) -> Layer:
        return self._layers[position.resolve(len(self._layers))]

    @property
    def top(self) -> Layer | None:
        return self._layers[-1] if self._layers else None

    # ------------------------------------------------------------------
    # Push / pop / reorder
    # ------------------------------------------------------------------

    def push(
        self,
        view: View,
        placement: Placement = Placement.FLOATING,
        position: Position | None = None,
        margin: int = 1,
    ) -> Layer:
        layer = Layer(
            view=view,
            placement=placement,
            position=position if position is not None else Position.center(),
            margin=max(0, margin),
            focus=FocusManager(tab_wrap=self.tab_wrap),
        )
        if self._layers:
            # The layer below loses input; its focused view goes inactive.
            below = self._layers[-1].focus.focused_view()
            if below is not None:
                below.focused = False
        self._layers.append(layer)
        logger.debug("Pushed layer %r (%d layers)", view, len(self._layers))
        return layer

    def pop(self) -> View | None:
        """Remove the top layer; the next redraw repaints everything."""
        if not self._layers:
            return None
        layer = self._layers.pop()
        layer.focus.clear()
        self._needs_full_redraw = True
        if self._layers:
            self._layers[-1].focus.revalidate(self._layers[-1].view)
        logger.debug("Popped layer %r (%d left)", layer.view, len(self._layers))
        return layer.view

    def move_layer(self, source: LayerPosition, target: LayerPosition) -> None:
        count = len(self._layers)
        i = source.resolve(count)
        j = target.resolve(count)
        if i == j:
            return
        old_top = self.top
        layer = self._layers.pop(i)
        self._layers.insert(j, layer)
        self._restack(old_top)

    def move_to_front(self, position: LayerPosition) -> None:
        self.move_layer(position, LayerPosition.front(0))

    def move_to_back(self, position: LayerPosition) -> None:
        self.move_layer(position, LayerPosition.from_back(0))

    def _restack(self, old_top: Layer | None) -> None:
        new_top = self.top
        if old_top is not None and old_top is not new_top:
            view = old_top.focus.focused_view()
            if view is not None:
                view.focused = False
        if new_top is not None:
            new_top.focus.revalidate(new_top.view)
        self._needs_full_redraw = True

    def reposition(self, position: LayerPosition, where: Position) -> None:
        """Move a floating layer; fullscreen layers are left alone."""
        layer = self[position]
        if not layer.floating:
            logger.debug("Ignoring reposition of fullscreen layer %r", layer.view)
            return
        layer.position = where
        self._needs_full_redraw = True

    def take_full_redraw(self) -> bool:
        """Return and reset the "repaint everything" request."""
        flag = self._needs_full_redraw
        self._needs_full_redraw = False
        return flag

    def layer_sizes(self) -> list[Vec2]:
        return [layer.size for layer in self._layers]

    # ------------------------------------------------------------------
    # Layout and drawing
    # ------------------------------------------------------------------

    def layout(self, engine: LayoutEngine, grid: Vec2, shadow: bool = False) -> None:
        """Negotiate every layer against *grid* and revalidate focus."""
        for layer in self._layers:
            if layer.floating:
                reserved = Vec2(2 * layer.margin, 2 * layer.margin)
                if shadow:
                    reserved = reserved + (1, 1)
                constraint = grid.saturating_sub(reserved)
            else:
                constraint = grid
            size = engine.measure(layer.view, constraint)
            if layer.floating:
                outer = size + ((1, 1) if shadow else (0, 0))
                offset = layer.position.compute_offset(outer, grid)
            else:
                offset = Vec2.zero()
            layer.size = size
            layer.offset = offset
            engine.commit(layer.view, size, offset)

        for layer in self._layers:
            is_top = layer is self.top
            if layer.fresh:
                layer.fresh = False
                layer.focus.focus_first(layer.view)
            else:
                layer.focus.revalidate(layer.view)
            if not is_top:
                view = layer.focus.focused_view()
                if view is not None:
                    view.focused = False

    def draw(self, printer: Printer, shadow: bool = False) -> None:
        """Paint background then every layer, bottom first.

        A view raising while drawing is logged; the rest of the frame is
        still painted.
        """
        with printer.with_color(ColorStyle.background()):
            printer.fill()

        for layer in self._layers:
            rect = layer.rect
            if layer.floating and shadow and not rect.is_empty():
                with printer.with_color(ColorStyle.shadow()):
                    sp = printer.sub_printer((rect.x + 1, rect.y + 1), rect.size)
                    sp.fill()

            sub = printer.sub_printer(
                rect.origin, rect.size, focused=layer is self.top
            )
            sub.fill()
            try:
                layer.view.draw(sub)
            except Exception:
                logger.exception("Error drawing layer %r", layer.view)
