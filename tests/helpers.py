"""Minimal views shared by the test-suite.

These stand in for real widgets where a test only cares about sizes, focus
or which events reached which view.
"""

from __future__ import annotations

from typing import Sequence

from tessel.buffer import Cell, ScreenBuffer
from tessel.event import Event, EventResult
from tessel.geometry import Direction, Vec2, Vec2Like, as_vec2
from tessel.printer import Printer
from tessel.view import View
from tessel.views.linear import LinearLayout


class Probe(View):
    """A leaf of fixed size that records every event it is offered.

    Parameters
    ----------
    size:
        Size returned from ``measure``.
    focusable:
        Whether ``take_focus`` accepts.
    consume:
        Events answered with ``EventResult.consumed()``.
    log:
        Optional shared list; ``(label, event)`` is appended per event.
    """

    def __init__(
        self,
        label: str = "probe",
        size: Vec2Like = (3, 1),
        focusable: bool = True,
        consume: Sequence[Event] = (),
        log: list | None = None,
    ) -> None:
        super().__init__()
        self.label = label
        self.size = as_vec2(size)
        self.focusable = focusable
        self.consume = list(consume)
        self.seen: list[Event] = []
        self.log = log
        self.measure_calls = 0

    def measure(self, constraint: Vec2) -> Vec2:
        self.measure_calls += 1
        return self.size

    def take_focus(self, source: Direction) -> bool:
        return self.focusable

    def on_event(self, event: Event) -> EventResult:
        self.seen.append(event)
        if self.log is not None:
            self.log.append((self.label, event))
        if event in self.consume:
            return EventResult.consumed()
        return EventResult.ignored()

    def draw(self, printer: Printer) -> None:
        printer.print((0, 0), self.label)


class RecordingLayout(LinearLayout):
    """A vertical container that logs events reaching it, then ignores them."""

    def __init__(self, label: str, children: Sequence[View], log: list) -> None:
        super().__init__("vertical", children)
        self.label = label
        self.log = log

    def on_event(self, event: Event) -> EventResult:
        self.log.append((self.label, event))
        return EventResult.ignored()


class Overdraw(View):
    """Scribbles far beyond its own bounds in every direction."""

    def measure(self, constraint: Vec2) -> Vec2:
        return constraint

    def draw(self, printer: Printer) -> None:
        for y in range(-5, printer.size.y + 5):
            printer.print((-5, y), "X世" * (printer.size.x + 10))
        printer.fill("#")
        printer.print_box((-1, -1), printer.size + (2, 2))


def filled_buffer(size: Vec2Like, glyph: str = ".") -> ScreenBuffer:
    return ScreenBuffer(as_vec2(size), Cell(glyph))
