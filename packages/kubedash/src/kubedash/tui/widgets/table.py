"""Selectable list / table widget."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterable, Optional, Sequence

from kubedash.tui.event import Callback, EventResult, HandlerResult, MouseEvent, MouseKind
from kubedash.tui.keybindings import get_dash_keybindings
from kubedash.tui.layout import Rect
from kubedash.tui.utils import fit_to_width, visible_width
from kubedash.tui.widgets.base import HEADER, HIGHLIGHT, WidgetBase, WidgetKind, styled

if TYPE_CHECKING:
    from kubedash.tui.window import Window

OnSelect = Callable[["Window", Sequence[str]], Optional[EventResult]]

COLUMN_GAP = "  "


def _column_widths(header: Sequence[str], rows: Sequence[Sequence[str]]) -> list[int]:
    count = max([len(header)] + [len(row) for row in rows])
    widths = [0] * count
    for row in [header, *rows]:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], visible_width(cell))
    return widths


def _format_row(row: Sequence[str], widths: Sequence[int]) -> str:
    cells = [fit_to_width(cell, widths[i]) for i, cell in enumerate(row)]
    return COLUMN_GAP.join(cells).rstrip()


class ListWidget(WidgetBase):
    """Rows of cells with a header, a selected row and a select callback.

    ``on_select`` runs against the window when a row is confirmed with the
    keyboard or clicked.
    """

    kind = WidgetKind.LIST

    def __init__(
        self,
        id: str,
        title: str = "",
        *,
        on_select: OnSelect | None = None,
        can_activate: bool = True,
        border: bool = True,
    ) -> None:
        super().__init__(id, title, can_activate=can_activate, border=border)
        self.on_select = on_select
        self.header: list[str] = []
        self.rows: list[list[str]] = []
        self.selected = 0
        self.offset = 0

    # -- content ------------------------------------------------------------

    def set_items(self, items: Iterable[str]) -> None:
        self.set_table([], [[item] for item in items])

    def set_table(self, header: Sequence[str], rows: Iterable[Sequence[str]]) -> None:
        """Replace the content, keeping the selected row when its key survives."""
        previous = self.selected_row
        self.header = list(header)
        self.rows = [list(row) for row in rows]
        self.selected = 0
        if previous:
            for i, row in enumerate(self.rows):
                if row and row[0] == previous[0]:
                    self.selected = i
                    break
        self._keep_selection_visible()

    def clear(self) -> None:
        self.header = []
        self.rows = []
        self.selected = 0
        self.offset = 0

    @property
    def selected_row(self) -> list[str] | None:
        if 0 <= self.selected < len(self.rows):
            return self.rows[self.selected]
        return None

    def select(self, index: int) -> None:
        if not self.rows:
            return
        self.selected = max(0, min(index, len(self.rows) - 1))
        self._keep_selection_visible()

    # -- rendering ------------------------------------------------------------

    @property
    def _visible_rows(self) -> int:
        height = self.content_area.height - (1 if self.header else 0)
        return max(height, 0)

    def _keep_selection_visible(self) -> None:
        visible = self._visible_rows
        if visible <= 0:
            self.offset = 0
            return
        if self.selected < self.offset:
            self.offset = self.selected
        elif self.selected >= self.offset + visible:
            self.offset = self.selected - visible + 1
        self.offset = max(0, min(self.offset, max(len(self.rows) - visible, 0)))

    def update_area(self, area: Rect) -> None:
        super().update_area(area)
        self._keep_selection_visible()

    def title_suffix(self) -> str:
        if not self.rows:
            return ""
        return f" [{self.selected + 1}/{len(self.rows)}]"

    def render_content(self, width: int, height: int) -> list[str]:
        widths = _column_widths(self.header, self.rows) if (self.header or self.rows) else []
        lines: list[str] = []
        if self.header:
            lines.append(styled(fit_to_width(_format_row(self.header, widths), width), HEADER))
        end = min(self.offset + self._visible_rows, len(self.rows))
        for i in range(self.offset, end):
            text = fit_to_width(_format_row(self.rows[i], widths), width)
            lines.append(styled(text, HIGHLIGHT) if i == self.selected else text)
        return lines

    # -- input ----------------------------------------------------------------

    def _confirm(self) -> HandlerResult:
        row = self.selected_row
        if row is None or self.on_select is None:
            return EventResult.NOP
        on_select = self.on_select
        return Callback(lambda window: on_select(window, row))

    def on_key(self, key: str) -> HandlerResult:
        kb = get_dash_keybindings()
        page = max(self._visible_rows - 1, 1)

        if kb.matches(key, "cursorDown"):
            self.select(self.selected + 1)
        elif kb.matches(key, "cursorUp"):
            self.select(self.selected - 1)
        elif kb.matches(key, "pageDown"):
            self.select(self.selected + page)
        elif kb.matches(key, "pageUp"):
            self.select(self.selected - page)
        elif kb.matches(key, "scrollTop"):
            self.select(0)
        elif kb.matches(key, "scrollBottom"):
            self.select(len(self.rows) - 1)
        elif kb.matches(key, "select"):
            return self._confirm()
        else:
            return EventResult.IGNORE
        return EventResult.NOP

    def row_at(self, row: int) -> int | None:
        """Index of the data row painted at screen *row*, if any."""
        top = self.content_area.y + (1 if self.header else 0)
        index = self.offset + row - top
        if row < top or index >= min(len(self.rows), self.offset + self._visible_rows):
            return None
        return index

    def on_mouse(self, event: MouseEvent) -> HandlerResult:
        if not self.area.contains(event.column, event.row):
            return EventResult.IGNORE
        if event.kind is MouseKind.SCROLL_DOWN:
            self.select(self.selected + 1)
        elif event.kind is MouseKind.SCROLL_UP:
            self.select(self.selected - 1)
        elif event.is_left_down:
            index = self.row_at(event.row)
            if index is None:
                return EventResult.NOP
            self.select(index)
            return self._confirm()
        else:
            return EventResult.IGNORE
        return EventResult.NOP
