"""Event vocabulary and event-handling results.

Events are frozen dataclasses so they can be compared and used as keys in
the global-callback table.  Mouse events always carry an absolute grid
position; views translate it with :meth:`MouseEvent.relative_to`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from tessel.geometry import Vec2, as_vec2

if TYPE_CHECKING:
    from tessel.tui import TUI

__all__ = [
    "Key",
    "FunctionKey",
    "CtrlChar",
    "AltChar",
    "KeyLike",
    "MouseButton",
    "Event",
    "KeyPress",
    "CharInput",
    "MouseEvent",
    "MousePress",
    "MouseRelease",
    "MouseHold",
    "Resize",
    "Refresh",
    "Callback",
    "EventResult",
    "is_key",
]


Callback = Callable[["TUI"], Any]


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


class Key(enum.Enum):
    """Non-character keys."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    ENTER = "enter"
    ESCAPE = "escape"
    TAB = "tab"
    SHIFT_TAB = "shift+tab"
    BACKSPACE = "backspace"
    DELETE = "delete"


@dataclass(frozen=True)
class FunctionKey:
    """``F1`` .. ``Fn``."""

    n: int

    def __str__(self) -> str:
        return f"f{self.n}"


@dataclass(frozen=True)
class CtrlChar:
    """A character typed with Ctrl held (``CtrlChar("a")``)."""

    char: str

    def __str__(self) -> str:
        return f"ctrl+{self.char}"


@dataclass(frozen=True)
class AltChar:
    """A character typed with Alt held (``AltChar("x")``)."""

    char: str

    def __str__(self) -> str:
        return f"alt+{self.char}"


KeyLike = Union[Key, FunctionKey, CtrlChar, AltChar]


class MouseButton(enum.Enum):
    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"
    WHEEL_UP = "wheel_up"
    WHEEL_DOWN = "wheel_down"
    OTHER = "other"


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class Event:
    """Base class of every event; never instantiated directly."""

    __slots__ = ()


@dataclass(frozen=True)
class KeyPress(Event):
    key: KeyLike


@dataclass(frozen=True)
class CharInput(Event):
    char: str


@dataclass(frozen=True)
class MouseEvent(Event):
    """Common shape of the three mouse events."""

    button: MouseButton
    position: Vec2

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", as_vec2(self.position))

    @property
    def grabs_focus(self) -> bool:
        """Only presses move the focus."""
        return False

    def relative_to(self, origin: Vec2) -> Vec2 | None:
        """Return the position relative to *origin*, or ``None`` if it lies
        above or to the left of it."""
        x = self.position.x - origin.x
        y = self.position.y - origin.y
        if x < 0 or y < 0:
            return None
        return Vec2(x, y)


@dataclass(frozen=True)
class MousePress(MouseEvent):
    @property
    def grabs_focus(self) -> bool:
        return self.button not in (MouseButton.WHEEL_UP, MouseButton.WHEEL_DOWN)


@dataclass(frozen=True)
class MouseRelease(MouseEvent):
    pass


@dataclass(frozen=True)
class MouseHold(MouseEvent):
    pass


@dataclass(frozen=True)
class Resize(Event):
    size: Vec2

    def __post_init__(self) -> None:
        object.__setattr__(self, "size", as_vec2(self.size))


@dataclass(frozen=True)
class Refresh(Event):
    """Synthetic event that only forces a redraw."""


def is_key(event: Event, key: KeyLike) -> bool:
    """Return ``True`` if *event* is a ``KeyPress`` of *key*."""
    return isinstance(event, KeyPress) and event.key == key


# ---------------------------------------------------------------------------
# EventResult
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EventResult:
    """Outcome of :meth:`View.on_event`.

    A consumed result may carry a callback; the ``TUI`` runs it once the
    event has finished routing, with full access to the application.
    """

    is_consumed: bool
    callback: Optional[Callback] = None

    @classmethod
    def consumed(cls, callback: Callback | None = None) -> EventResult:
        if callback is None:
            return _CONSUMED
        return cls(True, callback)

    @classmethod
    def ignored(cls) -> EventResult:
        return _IGNORED

    @property
    def is_ignored(self) -> bool:
        return not self.is_consumed

    def and_then(self, callback: Callback) -> EventResult:
        """Chain another callback after this one (no-op when ignored)."""
        if not self.is_consumed:
            return self
        first = self.callback
        if first is None:
            return EventResult(True, callback)

        def _both(tui: TUI) -> None:
            first(tui)
            callback(tui)

        return EventResult(True, _both)


_CONSUMED = EventResult(True)
_IGNORED = EventResult(False)
