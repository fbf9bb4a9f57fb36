"""ANSI terminal backend over ``termios`` raw mode.

Manages raw mode, the alternate screen, cursor visibility, SGR mouse
reporting and SIGWINCH-based resize detection.  A self-pipe lets other
threads interrupt a blocked :meth:`TerminalBackend.poll_event`.
"""

from __future__ import annotations

import logging
import os
import selectors
import signal
import sys
import termios
import tty
from collections import deque
from typing import TextIO

from tessel.backends.input import InputDecoder
from tessel.buffer import Cell
from tessel.errors import BackendError
from tessel.event import Event, Resize
from tessel.geometry import Vec2
from tessel.theme import Color, Effect, Rgb, Style

logger = logging.getLogger(__name__)

__all__ = ["TerminalBackend", "sgr"]

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_ALT_SCREEN_ENABLE = "\x1b[?1049h"
_ALT_SCREEN_DISABLE = "\x1b[?1049l"
_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_SCREEN = "\x1b[0m\x1b[2J\x1b[H"
_MOUSE_ENABLE = "\x1b[?1000h\x1b[?1002h\x1b[?1006h"
_MOUSE_DISABLE = "\x1b[?1006l\x1b[?1002l\x1b[?1000l"
_MOVE_FMT = "\x1b[{};{}H"

# Seconds to wait for the rest of an escape sequence before treating a
# lone ESC as the Escape key.
_ESCAPE_TIMEOUT = 0.025

_EFFECT_CODES = (
    (Effect.BOLD, "1"),
    (Effect.DIM, "2"),
    (Effect.ITALIC, "3"),
    (Effect.UNDERLINE, "4"),
    (Effect.BLINK, "5"),
    (Effect.REVERSE, "7"),
)


def _color_code(color: Color, background: bool) -> str:
    if isinstance(color, Rgb):
        return f"{48 if background else 38};2;{color.r};{color.g};{color.b}"
    index = color.index
    if index is None:
        return "49" if background else "39"
    base = (40 if background else 30) if index < 8 else (100 if background else 90)
    return str(base + index % 8)


def sgr(style: Style) -> str:
    """The SGR sequence that selects *style* from a reset state."""
    codes = ["0"]
    codes.extend(code for effect, code in _EFFECT_CODES if effect in style.effects)
    codes.append(_color_code(style.fg, background=False))
    codes.append(_color_code(style.bg, background=True))
    return f"\x1b[{';'.join(codes)}m"


# ---------------------------------------------------------------------------
# TerminalBackend
# ---------------------------------------------------------------------------


class TerminalBackend:
    """Backend bound to the process's controlling terminal.

    Raises :class:`BackendError` when stdin or stdout is not a TTY.
    """

    def __init__(
        self,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        mouse: bool = True,
    ) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        try:
            self._in_fd = self._stdin.fileno()
            self._out_fd = self._stdout.fileno()
        except (AttributeError, ValueError, OSError) as exc:
            raise BackendError(f"Terminal streams have no file descriptor: {exc}") from exc
        if not (os.isatty(self._in_fd) and os.isatty(self._out_fd)):
            raise BackendError("stdin and stdout must be connected to a terminal")

        self._mouse = mouse
        self._decoder = InputDecoder()
        self._pending: deque[Event] = deque()
        self._resized = False
        self._original_termios: list | None = None
        self._prev_sigwinch_handler: object = None
        self._selector: selectors.BaseSelector | None = None
        self._wake_r, self._wake_w = os.pipe()
        os.set_blocking(self._wake_r, False)
        os.set_blocking(self._wake_w, False)

        # Output state
        self._out: list[str] = []
        self._cursor: tuple[int, int] | None = None
        self._style: Style | None = None

    # -- lifecycle ----------------------------------------------------------

    def start(self) -> None:
        """Enter raw mode and the alternate screen, enable mouse reporting."""
        try:
            self._original_termios = termios.tcgetattr(self._in_fd)
            tty.setraw(self._in_fd)
        except termios.error as exc:
            raise BackendError(f"Cannot switch terminal to raw mode: {exc}") from exc

        self._prev_sigwinch_handler = signal.getsignal(signal.SIGWINCH)
        signal.signal(signal.SIGWINCH, self._on_sigwinch)

        self._selector = selectors.DefaultSelector()
        self._selector.register(self._in_fd, selectors.EVENT_READ, "input")
        self._selector.register(self._wake_r, selectors.EVENT_READ, "wake")

        self._raw_write(_ALT_SCREEN_ENABLE + _HIDE_CURSOR)
        if self._mouse:
            self._raw_write(_MOUSE_ENABLE)

    def stop(self) -> None:
        """Restore terminal state and clean up all handlers."""
        if self._mouse:
            self._raw_write(_MOUSE_DISABLE)
        self._raw_write("\x1b[0m" + _SHOW_CURSOR + _ALT_SCREEN_DISABLE)

        if self._selector is not None:
            self._selector.close()
            self._selector = None

        if self._prev_sigwinch_handler is not None:
            signal.signal(signal.SIGWINCH, self._prev_sigwinch_handler)
            self._prev_sigwinch_handler = None

        if self._original_termios is not None:
            termios.tcsetattr(self._in_fd, termios.TCSADRAIN, self._original_termios)
            self._original_termios = None

    def close(self) -> None:
        for fd in (self._wake_r, self._wake_w):
            try:
                os.close(fd)
            except OSError:
                logger.debug("Closing wake pipe fd %d failed", fd, exc_info=True)

    # -- input --------------------------------------------------------------

    def poll_event(self, timeout: float) -> Event | None:
        if self._pending:
            return self._pending.popleft()
        if self._resized:
            self._resized = False
            return Resize(self.grid_size())
        if self._selector is None:
            return None

        ready = self._selector.select(timeout)
        for key, _ in ready:
            if key.data == "wake":
                self._drain_wake_pipe()
            else:
                self._read_input()

        if not ready and self._decoder.pending:
            self._pending.extend(self._decoder.flush())
        elif self._decoder.pending:
            # Give a split escape sequence a moment to complete.
            more = self._selector.select(_ESCAPE_TIMEOUT)
            if more:
                self._read_input()
            else:
                self._pending.extend(self._decoder.flush())

        if self._resized:
            self._resized = False
            self._pending.appendleft(Resize(self.grid_size()))
        return self._pending.popleft() if self._pending else None

    def _read_input(self) -> None:
        try:
            raw = os.read(self._in_fd, 4096)
        except BlockingIOError:
            return
        if raw:
            self._pending.extend(self._decoder.feed(raw.decode("utf-8", errors="replace")))

    def _drain_wake_pipe(self) -> None:
        try:
            while os.read(self._wake_r, 512):
                pass
        except BlockingIOError:
            pass

    def wake(self) -> None:
        try:
            os.write(self._wake_w, b"\0")
        except BlockingIOError:
            # Pipe full: a wake-up is already pending.
            pass

    def _on_sigwinch(self, signum: int, frame: object) -> None:
        self._resized = True
        self.wake()

    # -- output -------------------------------------------------------------

    def grid_size(self) -> Vec2:
        try:
            size = os.get_terminal_size(self._out_fd)
        except OSError:
            return Vec2(80, 24)
        return Vec2(size.columns, size.lines)

    def set_cell(self, row: int, column: int, cell: Cell) -> None:
        if self._cursor != (row, column):
            self._out.append(_MOVE_FMT.format(row + 1, column + 1))
        if cell.style != self._style:
            self._out.append(sgr(cell.style))
            self._style = cell.style
        self._out.append(cell.glyph)
        self._cursor = (row, column + max(1, cell.width))

    def clear(self) -> None:
        self._out.append(_CLEAR_SCREEN)
        self._cursor = (0, 0)
        self._style = None

    def flush(self) -> None:
        """Write the buffered frame; :class:`OSError` propagates."""
        data = "".join(self._out)
        self._out.clear()
        if data:
            self._stdout.write(data)
        self._stdout.flush()

    def _raw_write(self, data: str) -> None:
        """Write directly to stdout, bypassing the frame buffer."""
        try:
            self._stdout.write(data)
            self._stdout.flush()
        except OSError:
            logger.warning("Terminal write failed", exc_info=True)
