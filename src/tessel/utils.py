"""Text measurement utilities: grapheme clusters, display widths, wrapping.

Widths follow the terminal convention: most glyphs take one column, East
Asian wide glyphs and emoji take two, combining marks and control
characters take none.
"""

from __future__ import annotations

import unicodedata
from typing import Iterator, NamedTuple

import grapheme
import wcwidth as _wcwidth

__all__ = [
    "graphemes",
    "grapheme_width",
    "visible_width",
    "iter_glyphs",
    "Prefix",
    "prefix",
    "suffix",
    "truncate_to_width",
    "wrap_text",
]


# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------


def graphemes(text: str) -> list[str]:
    """Split *text* into user-perceived characters."""
    return list(grapheme.graphemes(text))


def grapheme_width(g: str) -> int:
    """Return the terminal display width (0, 1 or 2) of one grapheme cluster.

    Rules:
    1. Zero-width characters (control, combining marks, etc.) -> 0
    2. Emoji (VS16, ZWJ sequences, regional indicators, modifiers) -> 2
    3. Otherwise delegate to wcwidth for the first codepoint.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return min(2, max(_wcwidth.wcwidth(g), 0))

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):  # VS16, ZWJ
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF:  # skin tone modifiers
            return 2
        if 0x1F1E6 <= cp <= 0x1F1FF:  # regional indicators
            return 2

    first_cp = ord(g[0])
    if first_cp >= 0x1F000 or 0x2600 <= first_cp <= 0x27BF:
        return 2

    cat = unicodedata.category(g[0])
    if cat.startswith("M") or cat == "Cf":
        return 0

    return min(2, max(_wcwidth.wcwidth(g[0]), 0))


def visible_width(text: str) -> int:
    """Return the number of columns *text* occupies on screen."""
    if not text:
        return 0

    if text.isascii() and text.isprintable():
        return len(text)

    cached = _width_cache.get(text)
    if cached is not None:
        return cached

    total = 0
    for g in grapheme.graphemes(text):
        total += grapheme_width(g)
    return _cache_width(text, total)


def iter_glyphs(text: str) -> Iterator[tuple[str, int]]:
    """Yield ``(grapheme, width)`` pairs, skipping zero-width clusters."""
    for g in grapheme.graphemes(text):
        w = grapheme_width(g)
        if w > 0:
            yield g, w


# ---------------------------------------------------------------------------
# prefix / suffix
# ---------------------------------------------------------------------------


class Prefix(NamedTuple):
    """A part of a string: ``length`` in characters, ``width`` in columns."""

    length: int
    width: int


def prefix(text: str, available_width: int) -> Prefix:
    """Return the longest prefix of *text* that fits in *available_width*.

    Never breaks inside a grapheme cluster.
    """
    length = 0
    width = 0
    for g in grapheme.graphemes(text):
        w = grapheme_width(g)
        if width + w > available_width:
            break
        width += w
        length += len(g)
    return Prefix(length, width)


def suffix(text: str, available_width: int) -> Prefix:
    """Return the longest suffix of *text* that fits in *available_width*."""
    length = 0
    width = 0
    for g in reversed(graphemes(text)):
        w = grapheme_width(g)
        if width + w > available_width:
            break
        width += w
        length += len(g)
    return Prefix(length, width)


def truncate_to_width(
    text: str,
    max_width: int,
    ellipsis: str = "...",
    pad: bool = False,
) -> str:
    """Truncate *text* to fit within *max_width* columns.

    If the text is wider than *max_width*, it is cut and *ellipsis* is
    appended (the ellipsis counts towards the width).  If *pad* is ``True``
    the result is right-padded with spaces to exactly *max_width*.
    """
    if max_width <= 0:
        return ""

    text_width = visible_width(text)
    if text_width <= max_width:
        if pad:
            return text + " " * (max_width - text_width)
        return text

    ellipsis_width = visible_width(ellipsis)
    target_width = max_width - ellipsis_width
    if target_width <= 0:
        return ellipsis[: prefix(ellipsis, max_width).length]

    cut = prefix(text, target_width)
    result = text[: cut.length] + ellipsis
    if pad:
        result += " " * (max_width - cut.width - ellipsis_width)
    return result


# ---------------------------------------------------------------------------
# Word wrapping
# ---------------------------------------------------------------------------


def wrap_text(text: str, width: int) -> list[str]:
    """Word-wrap *text* to *width* columns.

    Embedded newlines start new rows.  Words wider than *width* are broken
    at grapheme boundaries.  Trailing spaces are dropped at wrap points.
    Returns an empty list for ``width <= 0``.
    """
    if width <= 0:
        return []

    rows: list[str] = []
    for physical_line in text.replace("\t", "   ").split("\n"):
        rows.extend(_wrap_single_line(physical_line, width))
    return rows


def _wrap_single_line(line: str, width: int) -> list[str]:
    if not line:
        return [""]

    rows: list[str] = []
    current: list[str] = []
    current_width = 0

    for word in _split_words(line):
        word_width = visible_width(word)
        is_space = word.isspace()

        if current_width + word_width <= width:
            current.append(word)
            current_width += word_width
            continue

        if is_space:
            # Spaces at a wrap point are swallowed.
            rows.append("".join(current).rstrip(" "))
            current, current_width = [], 0
            continue

        if current:
            rows.append("".join(current).rstrip(" "))
            current, current_width = [], 0

        # Break over-long words at grapheme boundaries.
        while word_width > width:
            cut = prefix(word, width)
            if cut.length == 0:
                # A single glyph wider than the row; emit it alone.
                cut = Prefix(len(graphemes(word)[0]), width)
            rows.append(word[: cut.length])
            word = word[cut.length :]
            word_width = visible_width(word)

        if word:
            current.append(word)
            current_width = word_width

    if current:
        rows.append("".join(current).rstrip(" "))
    return rows


def _split_words(line: str) -> list[str]:
    """Split *line* into alternating runs of spaces and non-spaces."""
    words: list[str] = []
    start = 0
    for i in range(1, len(line) + 1):
        if i == len(line) or (line[i] == " ") != (line[start] == " "):
            words.append(line[start:i])
            start = i
    return words
