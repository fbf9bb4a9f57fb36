"""Grid geometry: positions, sizes, rectangles and traversal directions.

Everything in ``tessel`` is measured in character cells.  ``Vec2`` doubles
as a size (``x`` = width, ``y`` = height), a position (``x`` = column,
``y`` = row) and a layout constraint.
"""

from __future__ import annotations

import enum
from typing import NamedTuple, Union

__all__ = [
    "Vec2",
    "Rect",
    "Direction",
    "Orientation",
    "as_vec2",
]


# ---------------------------------------------------------------------------
# Vec2
# ---------------------------------------------------------------------------


class Vec2(NamedTuple):
    """An immutable ``(x, y)`` pair of non-negative cell counts."""

    x: int
    y: int

    @classmethod
    def zero(cls) -> Vec2:
        return cls(0, 0)

    @property
    def width(self) -> int:
        return self.x

    @property
    def height(self) -> int:
        return self.y

    def __add__(self, other: object) -> Vec2:  # type: ignore[override]
        ox, oy = as_vec2(other)  # type: ignore[arg-type]
        return Vec2(self.x + ox, self.y + oy)

    def __sub__(self, other: object) -> Vec2:
        ox, oy = as_vec2(other)  # type: ignore[arg-type]
        return Vec2(self.x - ox, self.y - oy)

    def saturating_sub(self, other: object) -> Vec2:
        """Component-wise subtraction clamped at zero."""
        ox, oy = as_vec2(other)  # type: ignore[arg-type]
        return Vec2(max(0, self.x - ox), max(0, self.y - oy))

    def min(self, other: object) -> Vec2:
        ox, oy = as_vec2(other)  # type: ignore[arg-type]
        return Vec2(min(self.x, ox), min(self.y, oy))

    def max(self, other: object) -> Vec2:
        ox, oy = as_vec2(other)  # type: ignore[arg-type]
        return Vec2(max(self.x, ox), max(self.y, oy))

    def fits_in(self, other: object) -> bool:
        """Return ``True`` if both components are ``<=`` those of *other*."""
        ox, oy = as_vec2(other)  # type: ignore[arg-type]
        return self.x <= ox and self.y <= oy

    def clamp_non_negative(self) -> Vec2:
        return Vec2(max(0, self.x), max(0, self.y))

    def is_empty(self) -> bool:
        return self.x <= 0 or self.y <= 0


Vec2Like = Union[Vec2, "tuple[int, int]"]


def as_vec2(value: Vec2Like) -> Vec2:
    """Coerce a ``(x, y)`` tuple to a :class:`Vec2`."""
    if isinstance(value, Vec2):
        return value
    x, y = value
    return Vec2(int(x), int(y))


# ---------------------------------------------------------------------------
# Rect
# ---------------------------------------------------------------------------


class Rect(NamedTuple):
    """An axis-aligned rectangle of cells; ``(x, y)`` is the top-left corner."""

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_size(cls, origin: Vec2Like, size: Vec2Like) -> Rect:
        ox, oy = as_vec2(origin)
        w, h = as_vec2(size)
        return cls(ox, oy, max(0, w), max(0, h))

    @property
    def origin(self) -> Vec2:
        return Vec2(self.x, self.y)

    @property
    def size(self) -> Vec2:
        return Vec2(self.width, self.height)

    @property
    def right(self) -> int:
        """Column one past the right edge."""
        return self.x + self.width

    @property
    def bottom(self) -> int:
        """Row one past the bottom edge."""
        return self.y + self.height

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, pos: Vec2Like) -> bool:
        px, py = as_vec2(pos)
        return self.x <= px < self.right and self.y <= py < self.bottom

    def intersect(self, other: Rect) -> Rect:
        """Return the overlap of both rectangles (possibly empty)."""
        x0 = max(self.x, other.x)
        y0 = max(self.y, other.y)
        x1 = min(self.right, other.right)
        y1 = min(self.bottom, other.bottom)
        return Rect(x0, y0, max(0, x1 - x0), max(0, y1 - y0))

    def translate(self, offset: Vec2Like) -> Rect:
        ox, oy = as_vec2(offset)
        return Rect(self.x + ox, self.y + oy, self.width, self.height)


# ---------------------------------------------------------------------------
# Directions
# ---------------------------------------------------------------------------


class Direction(enum.Enum):
    """Where focus comes from, or which way a traversal walks."""

    NONE = "none"
    FORWARD = "forward"
    BACKWARD = "backward"

    def reverse(self) -> Direction:
        if self is Direction.FORWARD:
            return Direction.BACKWARD
        if self is Direction.BACKWARD:
            return Direction.FORWARD
        return self


class Orientation(enum.Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    def get(self, vec: Vec2) -> int:
        """Return the component of *vec* along this orientation."""
        return vec.x if self is Orientation.HORIZONTAL else vec.y

    def get_cross(self, vec: Vec2) -> int:
        return vec.y if self is Orientation.HORIZONTAL else vec.x

    def make(self, main: int, cross: int) -> Vec2:
        """Build a vector from a main-axis and a cross-axis component."""
        if self is Orientation.HORIZONTAL:
            return Vec2(main, cross)
        return Vec2(cross, main)
