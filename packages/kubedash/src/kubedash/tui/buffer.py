"""Scrollable buffer of wrapped, styled lines."""

from __future__ import annotations

from typing import Callable, Iterable

from kubedash.tui.reflow import WrappedLine, reflow

BORDER_WIDTH = 2
TAB_SPACES = "   "

LineFilter = Callable[[str], bool]


def _expand_tabs(items: Iterable[str]) -> list[str]:
    return [item.replace("\t", TAB_SPACES) for item in items]


class TextBuffer:
    """Stores raw items plus their wrapped lines and a scroll offset.

    ``width`` and ``height`` passed to the mutating methods are the outer
    size of the pane; ``border_overhead`` is subtracted from both.  The
    scroll offset always stays within ``[0, row_count]`` where ``row_count``
    is the number of lines hidden below a full viewport.
    Items rejected by ``line_filter`` stay stored but are not wrapped.
    """

    def __init__(
        self,
        *,
        border_overhead: int = BORDER_WIDTH,
        carry_style: bool = True,
        follow: bool = False,
    ) -> None:
        self.border_overhead = border_overhead
        self.carry_style = carry_style
        self.follow = follow
        self.items: list[str] = []
        self.lines: list[WrappedLine] = []
        self.offset = 0
        self.row_count = 0
        self._width = 0
        self._height = 0
        self.line_filter: LineFilter | None = None

    # -- content ------------------------------------------------------------

    def append(self, items: Iterable[str], width: int, height: int) -> None:
        """Add *items*, wrapping only the new ones."""
        new_items = _expand_tabs(items)
        was_at_bottom = self.is_at_bottom()
        if width != self._width:
            self._width = width
            self.lines = self._reflow(self.items)
        new_lines = self._reflow(new_items)
        self.items.extend(new_items)
        self.lines.extend(new_lines)
        self._update_rows(height)
        if self.follow and was_at_bottom:
            self.scroll_to_bottom()

    def replace(self, items: Iterable[str], width: int, height: int) -> None:
        """Replace the whole content and scroll back to the top."""
        self.items = _expand_tabs(items)
        self._width = width
        self.lines = self._reflow(self.items)
        self.offset = 0
        self._update_rows(height)
        if self.follow:
            self.scroll_to_bottom()

    def rewrap(self, width: int, height: int) -> None:
        """Re-wrap stored items after the pane was resized."""
        was_at_bottom = self.is_at_bottom()
        self._width = width
        self.lines = self._reflow(self.items)
        self._update_rows(height)
        if self.follow and was_at_bottom:
            self.scroll_to_bottom()

    def set_line_filter(self, line_filter: LineFilter | None, width: int, height: int) -> None:
        """Show only items accepted by *line_filter*; ``None`` shows everything."""
        self.line_filter = line_filter
        self._width = width
        self.lines = self._reflow(self.items)
        self.offset = 0
        self._update_rows(height)
        if self.follow:
            self.scroll_to_bottom()

    def clear(self) -> None:
        self.items = []
        self.lines = []
        self.offset = 0
        self.row_count = 0

    def _reflow(self, items: list[str]) -> list[WrappedLine]:
        if self.line_filter is not None:
            items = [item for item in items if self.line_filter(item)]
        return reflow(items, self._width - self.border_overhead, self.carry_style)

    def _update_rows(self, height: int) -> None:
        self._height = height
        viewport = max(0, height - self.border_overhead)
        self.row_count = max(0, len(self.lines) - viewport)
        self.offset = min(self.offset, self.row_count)

    # -- scrolling ------------------------------------------------------------

    def scroll_to_top(self) -> None:
        self.offset = 0

    def scroll_to_bottom(self) -> None:
        self.offset = self.row_count

    def scroll_down(self, n: int = 1) -> None:
        self.offset = max(0, min(self.offset + n, self.row_count))

    def scroll_up(self, n: int = 1) -> None:
        self.offset = max(0, min(self.offset - n, self.row_count))

    def is_at_bottom(self) -> bool:
        return self.offset >= self.row_count

    @property
    def viewport_height(self) -> int:
        return max(0, self._height - self.border_overhead)

    def visible_lines(self, viewport_height: int | None = None) -> list[WrappedLine]:
        if viewport_height is None:
            viewport_height = self.viewport_height
        end = min(self.offset + max(viewport_height, 0), len(self.lines))
        return self.lines[self.offset : end]
