"""Clipped drawing surface handed to :meth:`View.draw`.

A :class:`Printer` translates view-relative coordinates to absolute grid
positions and silently discards anything that falls outside its clip
rectangle.  A wide glyph that would straddle the clip edge is dropped as a
whole rather than split.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from tessel.buffer import Cell, ScreenBuffer
from tessel.geometry import Rect, Vec2Like, as_vec2
from tessel.theme import BorderStyle, ColorStyle, Effect, Style, Theme
from tessel.utils import iter_glyphs

__all__ = ["Printer"]


class Printer:
    """Draws into a :class:`ScreenBuffer` through an offset and a clip."""

    def __init__(
        self,
        buffer: ScreenBuffer,
        theme: Theme,
        offset: Vec2Like = (0, 0),
        size: Vec2Like | None = None,
        clip: Rect | None = None,
        focused: bool = True,
        color: ColorStyle | None = None,
        effects: Effect = Effect.NONE,
    ) -> None:
        self.buffer = buffer
        self.theme = theme
        self.offset = as_vec2(offset)
        self.size = as_vec2(size) if size is not None else buffer.size
        grid = Rect.from_size((0, 0), buffer.size)
        self.clip = grid if clip is None else clip.intersect(grid)
        self.focused = focused
        self.color = color if color is not None else ColorStyle.primary()
        self.effects = effects
        self._style: Style = theme.resolve(self.color, effects)

    # ------------------------------------------------------------------
    # Style scopes
    # ------------------------------------------------------------------

    @property
    def style(self) -> Style:
        return self._style

    @contextmanager
    def with_color(self, color: ColorStyle) -> Iterator[Printer]:
        """Temporarily paint with *color*."""
        saved = self.color, self._style
        self.color = color
        self._style = self.theme.resolve(color, self.effects)
        try:
            yield self
        finally:
            self.color, self._style = saved

    @contextmanager
    def with_effect(self, effect: Effect) -> Iterator[Printer]:
        """Temporarily add *effect* to the current style."""
        saved = self.effects, self._style
        self.effects = self.effects | effect
        self._style = self.theme.resolve(self.color, self.effects)
        try:
            yield self
        finally:
            self.effects, self._style = saved

    # ------------------------------------------------------------------
    # Sub-printers
    # ------------------------------------------------------------------

    def sub_printer(
        self, offset: Vec2Like, size: Vec2Like, focused: bool = True
    ) -> Printer:
        """A printer for a child area at *offset* (relative) of *size*.

        The clip is the intersection of this printer's clip with the child
        area, so children can never paint outside their parent.  Negative
        offsets are allowed (scrolled content).
        """
        origin = self.offset + as_vec2(offset)
        size = as_vec2(size).clamp_non_negative()
        return Printer(
            self.buffer,
            self.theme,
            origin,
            size,
            self.clip.intersect(Rect.from_size(origin, size)),
            self.focused and focused,
            self.color,
            self.effects,
        )

    def cropped(self, size: Vec2Like) -> Printer:
        return self.sub_printer((0, 0), self.size.min(as_vec2(size)), True)

    def shrinked(self, border: Vec2Like) -> Printer:
        """Inset by *border* on every side."""
        border = as_vec2(border)
        return self.sub_printer(
            border, self.size.saturating_sub(border + border), True
        )

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _visible(self, row: int, col: int, width: int) -> bool:
        clip = self.clip
        return (
            clip.y <= row < clip.bottom
            and col >= clip.x
            and col + width <= clip.right
        )

    def print(self, pos: Vec2Like, text: str) -> None:
        """Print *text* on one row starting at *pos*."""
        x, y = as_vec2(pos)
        row = self.offset.y + y
        if not self.clip.y <= row < self.clip.bottom:
            return
        col = self.offset.x + x
        for glyph, width in iter_glyphs(text):
            if col >= self.clip.right:
                break
            if self._visible(row, col, width):
                self.buffer.put(row, col, Cell(glyph, self._style, width))
            col += width

    def print_hline(self, start: Vec2Like, length: int, char: str = "─") -> None:
        x, y = as_vec2(start)
        self.print((x, y), char * max(0, length))

    def print_vline(self, start: Vec2Like, length: int, char: str = "│") -> None:
        x, y = as_vec2(start)
        for i in range(max(0, length)):
            self.print((x, y + i), char)

    def fill(self, char: str = " ") -> None:
        """Paint the whole printer area with *char*."""
        line = char * self.size.x
        for y in range(self.size.y):
            self.print((0, y), line)

    def print_box(self, start: Vec2Like, size: Vec2Like, invert: bool = False) -> None:
        """Draw a border box; *invert* swaps the outset light/dark edges."""
        x, y = as_vec2(start)
        w, h = as_vec2(size)
        if w < 2 or h < 2 or self.theme.borders is BorderStyle.NONE:
            return

        outset = self.theme.borders is BorderStyle.OUTSET
        light = ColorStyle.tertiary() if outset else self.color
        dark = ColorStyle.primary() if outset else self.color
        top_left, bottom_right = (dark, light) if invert else (light, dark)

        with self.with_color(top_left):
            self.print((x, y), "┌")
            self.print_hline((x + 1, y), w - 2)
            self.print_vline((x, y + 1), h - 2)
        with self.with_color(bottom_right):
            self.print((x + w - 1, y), "┐")
            self.print_vline((x + w - 1, y + 1), h - 2)
            self.print((x, y + h - 1), "└")
            self.print_hline((x + 1, y + h - 1), w - 2)
            self.print((x + w - 1, y + h - 1), "┘")
