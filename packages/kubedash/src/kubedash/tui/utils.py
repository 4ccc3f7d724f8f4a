"""Terminal text utilities: visible width, truncation and column slicing.

All helpers treat escape sequences as zero-width and never split a grapheme
cluster, so their output can be painted straight into a terminal row.
"""

from __future__ import annotations

import unicodedata
from typing import Iterator

import grapheme
import wcwidth as _wcwidth

from kubedash.tui.ansi import tokenize

RESET = "\x1b[0m"

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


def grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster.

    Control characters and lone marks are zero-width; emoji sequences (VS16,
    ZWJ, skin tones, flags) take two columns; everything else is measured by
    wcwidth on its first codepoint.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first_cp = ord(g[0])
    if first_cp >= 0x1F000 or 0x2600 <= first_cp <= 0x27BF:
        return 2

    cat = unicodedata.category(g[0])
    if cat.startswith("M") or cat == "Cf":
        return 0

    return max(_wcwidth.wcwidth(g[0]), 0)


def iter_cells(text: str) -> Iterator[tuple[str, int]]:
    """Yield ``(piece, width)`` pairs: escapes with width 0, else graphemes."""
    for token in tokenize(text):
        if token.is_escape:
            yield token.text, 0
            continue
        for g in grapheme.graphemes(token.text):
            yield g, grapheme_width(g)


# ---------------------------------------------------------------------------
# visible_width
# ---------------------------------------------------------------------------


def visible_width(text: str) -> int:
    """Number of terminal columns *text* occupies, escapes excluded."""
    if not text:
        return 0

    if text.isascii() and "\x1b" not in text and text.isprintable():
        return len(text)

    cached = _width_cache.get(text)
    if cached is not None:
        return cached

    total = sum(width for _piece, width in iter_cells(text))
    return _cache_width(text, total)


# ---------------------------------------------------------------------------
# truncate_to_width / pad_to_width
# ---------------------------------------------------------------------------


def truncate_to_width(
    text: str,
    max_width: int,
    ellipsis: str = "...",
    pad: bool = False,
) -> str:
    """Truncate *text* to at most *max_width* columns.

    When cut, *ellipsis* is appended (it counts towards the width).  With
    *pad*, the result is right-padded with spaces to exactly *max_width*.
    """
    if max_width <= 0:
        return ""

    text_width = visible_width(text)
    if text_width <= max_width:
        if pad:
            return text + " " * (max_width - text_width)
        return text

    target_width = max_width - visible_width(ellipsis)
    if target_width <= 0:
        return take_columns(ellipsis, max_width)

    result = take_columns(text, target_width)
    if "\x1b[" in result:
        result += RESET
    result += ellipsis

    if pad:
        result_width = visible_width(result)
        if result_width < max_width:
            result += " " * (max_width - result_width)

    return result


def take_columns(text: str, max_cols: int) -> str:
    """Return the longest prefix of *text* fitting in *max_cols* columns."""
    result: list[str] = []
    cols = 0
    for piece, width in iter_cells(text):
        if cols + width > max_cols:
            break
        result.append(piece)
        cols += width
    return "".join(result)


def fit_to_width(text: str, width: int) -> str:
    """Cut or pad *text* to exactly *width* columns, without an ellipsis."""
    if width <= 0:
        return ""
    cut = take_columns(text, width)
    used = visible_width(cut)
    if "\x1b[" in cut:
        cut += RESET
    return cut + " " * (width - used)


# ---------------------------------------------------------------------------
# extract_segments
# ---------------------------------------------------------------------------


def extract_segments(
    line: str,
    before_end: int,
    after_start: int,
    after_len: int,
) -> tuple[str, str]:
    """Split *line* into ``[0, before_end)`` and ``[after_start, +after_len)``.

    Used when a region of a painted row is replaced by another widget.  Wide
    characters straddling a boundary are replaced by spaces so the columns on
    either side stay aligned.
    """
    before_parts: list[str] = []
    after_parts: list[str] = []
    col = 0
    after_end = after_start + after_len

    for piece, width in iter_cells(line):
        if width == 0:
            if col < before_end:
                before_parts.append(piece)
            if after_start <= col < after_end:
                after_parts.append(piece)
            continue

        char_end = col + width

        if col < before_end:
            if char_end <= before_end:
                before_parts.append(piece)
            else:
                before_parts.append(" " * (before_end - col))

        if char_end > after_start and col < after_end:
            if col < after_start or char_end > after_end:
                overlap = min(char_end, after_end) - max(col, after_start)
                after_parts.append(" " * overlap)
            else:
                after_parts.append(piece)

        col = char_end

    return "".join(before_parts), "".join(after_parts)
