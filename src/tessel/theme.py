"""Colors, text effects, cell styles and themes.

A :class:`Theme` maps abstract palette roles (``primary``, ``highlight``,
...) to concrete colors.  Views paint with a :class:`ColorStyle` (a pair of
roles); the Printer resolves it against the active theme into a concrete
:class:`Style` that is stored in each cell.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, NamedTuple, Union

from tessel.errors import ConfigurationError

__all__ = [
    "BaseColor",
    "Rgb",
    "Color",
    "Effect",
    "Style",
    "PaletteColor",
    "Palette",
    "ColorStyle",
    "BorderStyle",
    "Theme",
    "default_palette",
    "parse_color",
    "load_theme",
]


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------


class BaseColor(enum.Enum):
    """The 16 terminal colors plus the terminal default."""

    DEFAULT = "default"
    BLACK = "black"
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"
    MAGENTA = "magenta"
    CYAN = "cyan"
    WHITE = "white"
    LIGHT_BLACK = "light black"
    LIGHT_RED = "light red"
    LIGHT_GREEN = "light green"
    LIGHT_YELLOW = "light yellow"
    LIGHT_BLUE = "light blue"
    LIGHT_MAGENTA = "light magenta"
    LIGHT_CYAN = "light cyan"
    LIGHT_WHITE = "light white"

    @property
    def index(self) -> int | None:
        """ANSI color index (0-15), ``None`` for the terminal default."""
        if self is BaseColor.DEFAULT:
            return None
        return _BASE_ORDER.index(self)


_BASE_ORDER = [c for c in BaseColor if c is not BaseColor.DEFAULT]


class Rgb(NamedTuple):
    r: int
    g: int
    b: int


Color = Union[BaseColor, Rgb]

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")


def parse_color(value: Any) -> Color:
    """Parse ``"red"``, ``"light blue"``, ``"#ff8800"``, ``"#f80"`` or an
    ``(r, g, b)`` sequence into a :data:`Color`.

    Raises :class:`ConfigurationError` on malformed input.
    """
    if isinstance(value, (BaseColor, Rgb)):
        return value
    if isinstance(value, str):
        name = value.strip().lower().replace("_", " ")
        try:
            return BaseColor(name)
        except ValueError:
            pass
        m = _HEX_RE.match(name)
        if m:
            digits = m.group(1)
            if len(digits) == 3:
                digits = "".join(d * 2 for d in digits)
            return Rgb(
                int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
            )
        raise ConfigurationError(f"Unknown color: {value!r}")
    if isinstance(value, (list, tuple)) and len(value) == 3:
        if all(isinstance(c, int) and 0 <= c <= 255 for c in value):
            return Rgb(*value)
    raise ConfigurationError(f"Invalid color value: {value!r}")


class Effect(enum.Flag):
    NONE = 0
    BOLD = enum.auto()
    DIM = enum.auto()
    ITALIC = enum.auto()
    UNDERLINE = enum.auto()
    BLINK = enum.auto()
    REVERSE = enum.auto()


@dataclass(frozen=True)
class Style:
    """Concrete appearance of one cell."""

    fg: Color = BaseColor.DEFAULT
    bg: Color = BaseColor.DEFAULT
    effects: Effect = Effect.NONE

    def with_effect(self, effect: Effect) -> Style:
        return replace(self, effects=self.effects | effect)


# ---------------------------------------------------------------------------
# Palette
# ---------------------------------------------------------------------------


class PaletteColor(enum.Enum):
    """Abstract color roles."""

    BACKGROUND = "background"
    SHADOW = "shadow"
    VIEW = "view"
    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"
    TITLE_PRIMARY = "title_primary"
    TITLE_SECONDARY = "title_secondary"
    HIGHLIGHT = "highlight"
    HIGHLIGHT_INACTIVE = "highlight_inactive"


Palette = dict[PaletteColor, Color]


def default_palette() -> Palette:
    return {
        PaletteColor.BACKGROUND: BaseColor.BLUE,
        PaletteColor.SHADOW: BaseColor.BLACK,
        PaletteColor.VIEW: BaseColor.WHITE,
        PaletteColor.PRIMARY: BaseColor.BLACK,
        PaletteColor.SECONDARY: BaseColor.BLUE,
        PaletteColor.TERTIARY: BaseColor.WHITE,
        PaletteColor.TITLE_PRIMARY: BaseColor.RED,
        PaletteColor.TITLE_SECONDARY: BaseColor.YELLOW,
        PaletteColor.HIGHLIGHT: BaseColor.RED,
        PaletteColor.HIGHLIGHT_INACTIVE: BaseColor.BLUE,
    }


@dataclass(frozen=True)
class ColorStyle:
    """A ``(front, back)`` pair of palette roles."""

    front: PaletteColor
    back: PaletteColor

    @classmethod
    def background(cls) -> ColorStyle:
        return cls(PaletteColor.BACKGROUND, PaletteColor.BACKGROUND)

    @classmethod
    def shadow(cls) -> ColorStyle:
        return cls(PaletteColor.SHADOW, PaletteColor.SHADOW)

    @classmethod
    def primary(cls) -> ColorStyle:
        return cls(PaletteColor.PRIMARY, PaletteColor.VIEW)

    @classmethod
    def secondary(cls) -> ColorStyle:
        return cls(PaletteColor.SECONDARY, PaletteColor.VIEW)

    @classmethod
    def tertiary(cls) -> ColorStyle:
        return cls(PaletteColor.TERTIARY, PaletteColor.VIEW)

    @classmethod
    def title_primary(cls) -> ColorStyle:
        return cls(PaletteColor.TITLE_PRIMARY, PaletteColor.VIEW)

    @classmethod
    def title_secondary(cls) -> ColorStyle:
        return cls(PaletteColor.TITLE_SECONDARY, PaletteColor.VIEW)

    @classmethod
    def highlight(cls) -> ColorStyle:
        return cls(PaletteColor.VIEW, PaletteColor.HIGHLIGHT)

    @classmethod
    def highlight_inactive(cls) -> ColorStyle:
        return cls(PaletteColor.VIEW, PaletteColor.HIGHLIGHT_INACTIVE)


# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------


class BorderStyle(enum.Enum):
    SIMPLE = "simple"
    OUTSET = "outset"
    NONE = "none"


@dataclass
class Theme:
    """Palette plus a couple of global decoration switches."""

    shadow: bool = True
    borders: BorderStyle = BorderStyle.SIMPLE
    palette: Palette = field(default_factory=default_palette)

    def resolve(self, color_style: ColorStyle, effects: Effect = Effect.NONE) -> Style:
        """Turn palette roles into a concrete :class:`Style`."""
        return Style(
            fg=self.palette[color_style.front],
            bg=self.palette[color_style.back],
            effects=effects,
        )


def load_theme(data: Mapping[str, Any], base: Theme | None = None) -> Theme:
    """Build a :class:`Theme` from a plain mapping.

    Recognised keys: ``shadow`` (bool), ``borders`` (``"simple"``,
    ``"outset"``, ``"none"``) and ``palette`` (role name -> color).  Keys
    not given keep the value from *base* (or the defaults).

    Raises :class:`ConfigurationError` for unknown keys, unknown roles or
    malformed values, before any UI state exists.
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError(
            f"Theme must be a mapping, got {type(data).__name__}"
        )

    theme = Theme() if base is None else replace(base, palette=dict(base.palette))

    unknown = set(data) - {"shadow", "borders", "palette"}
    if unknown:
        raise ConfigurationError(f"Unknown theme keys: {sorted(unknown)}")

    if "shadow" in data:
        if not isinstance(data["shadow"], bool):
            raise ConfigurationError("Theme 'shadow' must be a boolean")
        theme.shadow = data["shadow"]

    if "borders" in data:
        try:
            theme.borders = BorderStyle(data["borders"])
        except ValueError:
            raise ConfigurationError(
                f"Unknown border style: {data['borders']!r}"
            ) from None

    palette = data.get("palette")
    if palette is not None:
        if not isinstance(palette, Mapping):
            raise ConfigurationError("Theme 'palette' must be a mapping")
        for role_name, raw in palette.items():
            try:
                role = PaletteColor(role_name)
            except ValueError:
                raise ConfigurationError(
                    f"Unknown palette role: {role_name!r}"
                ) from None
            theme.palette[role] = parse_color(raw)

    return theme
