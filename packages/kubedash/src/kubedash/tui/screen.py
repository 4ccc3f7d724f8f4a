"""Row compositor with differential flushing.

Widgets paint rectangular areas into an in-memory frame of terminal rows.
:meth:`Screen.flush` then writes only the rows that changed since the
previous frame, or everything after a resize.
"""

from __future__ import annotations

from typing import Sequence

from kubedash.tui.layout import Rect
from kubedash.tui.terminal import Terminal
from kubedash.tui.utils import RESET, extract_segments, fit_to_width

_SEGMENT_RESET = RESET


def _apply_line_resets(line: str) -> str:
    """Append a reset if *line* carries SGR codes but does not end with one."""
    if not line or "\x1b[" not in line or line.endswith(_SEGMENT_RESET):
        return line
    return line + _SEGMENT_RESET


class Screen:
    """Frame buffer the size of the terminal."""

    def __init__(self, terminal: Terminal) -> None:
        self.terminal = terminal
        self.width = 0
        self.height = 0
        self._lines: list[str] = []
        self._previous_lines: list[str] = []
        self._previous_size: tuple[int, int] = (-1, -1)
        self._full_redraw_count = 0

    @property
    def full_redraws(self) -> int:
        return self._full_redraw_count

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    @property
    def area(self) -> Rect:
        return Rect(0, 0, self.width, self.height)

    # ------------------------------------------------------------------

    def begin(self) -> Rect:
        """Start a blank frame at the current terminal size."""
        self.width = max(self.terminal.columns, 0)
        self.height = max(self.terminal.rows, 0)
        self._lines = [" " * self.width for _ in range(self.height)]
        return self.area

    def draw(self, area: Rect, lines: Sequence[str]) -> None:
        """Paint *lines* top-down into *area*, clipped to the area and frame."""
        x = max(area.x, 0)
        width = min(area.right, self.width) - x
        if width <= 0:
            return
        for i, line in enumerate(lines[: area.height]):
            y = area.y + i
            if y < 0:
                continue
            if y >= self.height:
                break
            self._lines[y] = self._composite_line_at(self._lines[y], line, x, width)

    def clear(self, area: Rect) -> None:
        self.draw(area, [""] * area.height)

    def _composite_line_at(self, base_line: str, line: str, col: int, width: int) -> str:
        """Replace columns ``[col, col + width)`` of *base_line* with *line*."""
        after_start = col + width
        before, after = extract_segments(
            base_line, col, after_start, max(self.width - after_start, 0)
        )
        parts = [_apply_line_resets(before), _apply_line_resets(fit_to_width(line, width))]
        if after:
            parts.append(after)
        return "".join(parts)

    # ------------------------------------------------------------------

    def flush(self) -> None:
        """Write the frame, only changed rows unless the size changed."""
        size = (self.width, self.height)
        force_full = size != self._previous_size
        out: list[str] = []

        if force_full:
            self._full_redraw_count += 1
            out.append("\x1b[0m\x1b[2J")

        for y, line in enumerate(self._lines):
            old = self._previous_lines[y] if y < len(self._previous_lines) else None
            if force_full or line != old:
                out.append(f"\x1b[{y + 1};1H{line}{_SEGMENT_RESET}")

        self._previous_lines = list(self._lines)
        self._previous_size = size
        if out:
            self.terminal.write("".join(out))
