"""Width-aware wrapping of ANSI-styled text into displayable lines.

Each item is split on newlines, every segment is hard-wrapped at a fixed
number of visible columns, and each resulting row is turned into styled runs
by folding its SGR escapes.  Escape sequences never count towards the width
and are never cut in half; grapheme clusters are never split.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from kubedash.tui.ansi import TokenKind, tokenize
from kubedash.tui.sgr import DEFAULT_STYLE, Style, resolve_sgr
from kubedash.tui.utils import RESET, iter_cells


@dataclass(frozen=True)
class StyledRun:
    text: str
    style: Style = DEFAULT_STYLE


@dataclass(frozen=True)
class WrappedLine:
    """One display row made of styled runs."""

    runs: tuple[StyledRun, ...]

    @property
    def plain(self) -> str:
        return "".join(run.text for run in self.runs)

    def to_ansi(self) -> str:
        """Render the runs back into a string that paints this row."""
        parts: list[str] = []
        styled = False
        for run in self.runs:
            if run.style.is_default:
                if styled:
                    parts.append(RESET)
                    styled = False
            else:
                parts.append(run.style.to_sgr())
                styled = True
            parts.append(run.text)
        if styled:
            parts.append(RESET)
        return "".join(parts)


# ---------------------------------------------------------------------------
# Wrapping
# ---------------------------------------------------------------------------


def split_segments(text: str) -> list[str]:
    """Split *text* into newline-separated segments.

    A trailing newline does not produce an extra empty segment and a
    trailing carriage return is dropped from each segment.
    """
    if not text:
        return [""]
    parts = text.split("\n")
    if len(parts) > 1 and parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


def wrap_segment(segment: str, width: int) -> list[str]:
    """Hard-wrap a single newline-free segment at *width* visible columns.

    A row is cut right after the character that fills it, so escapes that
    follow go to the next row.  An escape-only remainder stays on the last
    row instead of creating an empty one.
    """
    width = max(1, width)
    rows: list[str] = []
    current: list[str] = []
    used = 0

    for piece, cell_width in iter_cells(segment):
        if cell_width == 0:
            current.append(piece)
            continue
        if used > 0 and used + cell_width > width:
            rows.append("".join(current))
            current = []
            used = 0
        current.append(piece)
        used += cell_width
        if used >= width:
            rows.append("".join(current))
            current = []
            used = 0

    if current:
        if used > 0 or not rows:
            rows.append("".join(current))
        else:
            rows[-1] += "".join(current)

    return rows or [""]


def wrap(items: Iterable[str], width: int) -> list[str]:
    """Wrap every item and return the flat list of row strings."""
    rows: list[str] = []
    for item in items:
        for segment in split_segments(item):
            rows.extend(wrap_segment(segment, width))
    return rows


# ---------------------------------------------------------------------------
# Styling
# ---------------------------------------------------------------------------


def styled_line(text: str, style: Style = DEFAULT_STYLE) -> tuple[WrappedLine, Style]:
    """Turn one row into styled runs starting from *style*.

    Literal text before the first SGR escape keeps *style*.  Each SGR escape
    folds into the running style and opens a new (possibly empty) run.
    Other escapes are not painted.  Returns the line and the style in effect
    at its end.
    """
    runs: list[StyledRun] = []
    pending: list[str] = []
    opened = False

    for token in tokenize(text):
        if token.kind is TokenKind.LITERAL:
            pending.append(token.text)
        elif token.kind is TokenKind.SGR:
            if opened or pending:
                runs.append(StyledRun("".join(pending), style))
            style = resolve_sgr(token.codes, style)
            pending = []
            opened = True

    if opened or pending or not runs:
        runs.append(StyledRun("".join(pending), style))

    return WrappedLine(tuple(runs)), style


def reflow(items: Iterable[str], width: int, carry_style: bool = True) -> list[WrappedLine]:
    """Wrap *items* at *width* and resolve their styling.

    With *carry_style* the style in effect at a wrap-induced break continues
    on the next row.  Without it every row starts from the default style.
    Every newline-separated segment starts from the default style.
    """
    lines: list[WrappedLine] = []
    for item in items:
        for segment in split_segments(item):
            style = DEFAULT_STYLE
            for row in wrap_segment(segment, width):
                if not carry_style:
                    style = DEFAULT_STYLE
                line, style = styled_line(row, style)
                lines.append(line)
    return lines
