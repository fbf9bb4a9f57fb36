"""DebugView - lists the records captured by :mod:`tessel.logger`."""

from __future__ import annotations

import logging

from tessel.geometry import Vec2
from tessel.logger import LogBuffer, get_log_buffer
from tessel.printer import Printer
from tessel.theme import ColorStyle, Effect
from tessel.view import View

_LEVEL_COLORS = {
    logging.ERROR: ColorStyle.title_primary(),
    logging.WARNING: ColorStyle.title_secondary(),
    logging.INFO: ColorStyle.primary(),
    logging.DEBUG: ColorStyle.secondary(),
}


def _color_for(level: int) -> ColorStyle:
    for threshold in (logging.ERROR, logging.WARNING, logging.INFO):
        if level >= threshold:
            return _LEVEL_COLORS[threshold]
    return _LEVEL_COLORS[logging.DEBUG]


class DebugView(View):
    """Shows the most recent log records, newest at the bottom.

    Takes all the space it is offered; records arrive without invalidating
    the layout.
    """

    def __init__(self, buffer: LogBuffer | None = None) -> None:
        super().__init__()
        self._buffer = buffer

    @property
    def buffer(self) -> LogBuffer | None:
        return self._buffer if self._buffer is not None else get_log_buffer()

    def measure(self, constraint: Vec2) -> Vec2:
        return constraint

    def draw(self, printer: Printer) -> None:
        buffer = self.buffer
        if buffer is None:
            with printer.with_effect(Effect.ITALIC):
                printer.print((0, 0), "Logging is not captured (call init_logging)")
            return

        height = printer.size.y
        entries = buffer.records()[-height:] if height > 0 else []
        for y, entry in enumerate(entries):
            with printer.with_color(_color_for(entry.level)):
                printer.print((0, y), entry.format())
