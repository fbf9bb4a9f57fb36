"""Decode raw terminal input into :mod:`tessel.event` events.

Input can arrive in partial chunks, especially escape sequences such as
mouse reports.  :class:`InputDecoder` buffers bytes until a sequence is
complete.  A lone ``ESC`` stays buffered until :meth:`InputDecoder.flush`
is called (the backend does so when no further input follows promptly),
at which point it becomes :attr:`Key.ESCAPE`.
"""

from __future__ import annotations

import re

from tessel.event import (
    AltChar,
    CharInput,
    CtrlChar,
    Event,
    FunctionKey,
    Key,
    KeyLike,
    KeyPress,
    MouseButton,
    MouseHold,
    MousePress,
    MouseRelease,
)
from tessel.geometry import Vec2

__all__ = [
    "InputDecoder",
    "parse_sequence",
    "split_sequences",
]

ESC = "\x1b"

# ---------------------------------------------------------------------------
# Key tables
# ---------------------------------------------------------------------------

LEGACY_KEY_SEQUENCES: dict[str, KeyLike] = {
    "\x1b[A": Key.UP,
    "\x1b[B": Key.DOWN,
    "\x1b[C": Key.RIGHT,
    "\x1b[D": Key.LEFT,
    "\x1bOA": Key.UP,
    "\x1bOB": Key.DOWN,
    "\x1bOC": Key.RIGHT,
    "\x1bOD": Key.LEFT,
    "\x1b[3~": Key.DELETE,
    "\x1b[Z": Key.SHIFT_TAB,
    "\x1bOP": FunctionKey(1),
    "\x1bOQ": FunctionKey(2),
    "\x1bOR": FunctionKey(3),
    "\x1bOS": FunctionKey(4),
    "\x1b[11~": FunctionKey(1),
    "\x1b[12~": FunctionKey(2),
    "\x1b[13~": FunctionKey(3),
    "\x1b[14~": FunctionKey(4),
    "\x1b[15~": FunctionKey(5),
    "\x1b[17~": FunctionKey(6),
    "\x1b[18~": FunctionKey(7),
    "\x1b[19~": FunctionKey(8),
    "\x1b[20~": FunctionKey(9),
    "\x1b[21~": FunctionKey(10),
    "\x1b[23~": FunctionKey(11),
    "\x1b[24~": FunctionKey(12),
}

CONTROL_KEYS: dict[str, KeyLike] = {
    "\r": Key.ENTER,
    "\n": Key.ENTER,
    "\t": Key.TAB,
    "\x7f": Key.BACKSPACE,
    "\x08": Key.BACKSPACE,
    ESC: Key.ESCAPE,
}

_SGR_MOUSE_RE = re.compile(r"^\x1b\[<(\d+);(\d+);(\d+)([Mm])$")


# ---------------------------------------------------------------------------
# Sequence splitting
# ---------------------------------------------------------------------------


def _sequence_status(data: str) -> str:
    """``"complete"``, ``"incomplete"`` or ``"not-escape"``."""
    if not data.startswith(ESC):
        return "not-escape"
    if len(data) == 1:
        return "incomplete"

    after_esc = data[1:]
    if after_esc.startswith("["):
        if after_esc.startswith("[M"):
            # X10 mouse: ESC [ M followed by three raw bytes.
            return "complete" if len(data) >= 6 else "incomplete"
        return _csi_status(data)
    if after_esc.startswith("O"):
        return "complete" if len(after_esc) >= 2 else "incomplete"
    # Meta key: ESC followed by one character.
    return "complete"


def _csi_status(data: str) -> str:
    if len(data) < 3:
        return "incomplete"
    payload = data[2:]
    final = payload[-1]
    if 0x40 <= ord(final) <= 0x7E:
        if payload.startswith("<"):
            return "complete" if final in ("M", "m") else "incomplete"
        return "complete"
    return "incomplete"


def split_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences plus an incomplete remainder."""
    sequences: list[str] = []
    pos = 0
    while pos < len(buffer):
        remaining = buffer[pos:]
        if not remaining.startswith(ESC):
            sequences.append(remaining[0])
            pos += 1
            continue

        end = 1
        while end <= len(remaining):
            status = _sequence_status(remaining[:end])
            if status == "incomplete":
                end += 1
                continue
            sequences.append(remaining[:end])
            pos += end
            break
        else:
            return sequences, remaining
    return sequences, ""


# ---------------------------------------------------------------------------
# Sequence parsing
# ---------------------------------------------------------------------------


def _mouse_button(code: int) -> MouseButton:
    if code & 64:
        return MouseButton.WHEEL_UP if code & 1 == 0 else MouseButton.WHEEL_DOWN
    return {
        0: MouseButton.LEFT,
        1: MouseButton.MIDDLE,
        2: MouseButton.RIGHT,
    }.get(code & 3, MouseButton.OTHER)


def _mouse_event(code: int, col: int, row: int, release: bool) -> Event:
    button = _mouse_button(code)
    position = Vec2(max(0, col - 1), max(0, row - 1))
    if release:
        return MouseRelease(button, position)
    if code & 32:
        return MouseHold(button, position)
    return MousePress(button, position)


def parse_sequence(seq: str) -> Event | None:
    """Translate one complete sequence; ``None`` for anything unsupported."""
    if not seq:
        return None

    key = CONTROL_KEYS.get(seq) or LEGACY_KEY_SEQUENCES.get(seq)
    if key is not None:
        return KeyPress(key)

    m = _SGR_MOUSE_RE.match(seq)
    if m:
        code, col, row = int(m.group(1)), int(m.group(2)), int(m.group(3))
        return _mouse_event(code, col, row, release=m.group(4) == "m")

    if seq.startswith("\x1b[M") and len(seq) == 6:
        code = ord(seq[3]) - 32
        col, row = ord(seq[4]) - 32, ord(seq[5]) - 32
        return _mouse_event(code, col, row, release=code & 3 == 3)

    if len(seq) == 2 and seq[0] == ESC:
        if seq[1] == ESC:
            return KeyPress(Key.ESCAPE)
        if seq[1].isprintable():
            return KeyPress(AltChar(seq[1]))
        return None

    if len(seq) == 1:
        code = ord(seq)
        if 1 <= code <= 26:
            return KeyPress(CtrlChar(chr(code + 96)))
        if code == 0:
            return KeyPress(CtrlChar(" "))
        if seq.isprintable():
            return CharInput(seq)
    return None


# ---------------------------------------------------------------------------
# InputDecoder
# ---------------------------------------------------------------------------


class InputDecoder:
    """Incremental decoder; feed it text as it arrives."""

    def __init__(self) -> None:
        self._buffer: str = ""

    @property
    def pending(self) -> str:
        """Buffered text that does not form a complete sequence yet."""
        return self._buffer

    def feed(self, data: str) -> list[Event]:
        self._buffer += data
        sequences, self._buffer = split_sequences(self._buffer)
        return [e for e in map(parse_sequence, sequences) if e is not None]

    def flush(self) -> list[Event]:
        """Give up waiting: a pending lone ``ESC`` becomes Escape, anything
        else is decoded as is."""
        data, self._buffer = self._buffer, ""
        if not data:
            return []
        event = parse_sequence(data)
        return [event] if event is not None else []

    def clear(self) -> None:
        self._buffer = ""
