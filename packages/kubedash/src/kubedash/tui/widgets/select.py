"""Filterable single- and multiple-choice selectors used by popups."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterable, Optional

from kubedash.tui.event import Callback, EventResult, HandlerResult, MouseEvent, MouseKind
from kubedash.tui.keybindings import get_dash_keybindings
from kubedash.tui.utils import fit_to_width
from kubedash.tui.widgets.base import ERROR_TEXT, HIGHLIGHT, WidgetBase, WidgetKind, styled

if TYPE_CHECKING:
    from kubedash.tui.window import Window

OnChoose = Callable[["Window", str], Optional[EventResult]]
OnChange = Callable[["Window", list[str]], Optional[EventResult]]

FILTER_PROMPT = "> "


class _FilteredChoices(WidgetBase):
    """Item list narrowed by a typed filter, with a cursor."""

    def __init__(self, id: str, title: str = "", *, can_activate: bool = True) -> None:
        super().__init__(id, title, can_activate=can_activate)
        self.items: list[str] = []
        self.error: str | None = None
        self.filter = ""
        self.cursor = 0
        self.offset = 0

    @property
    def filtered(self) -> list[str]:
        if self.error is not None:
            return []
        needle = self.filter.lower()
        return [item for item in self.items if needle in item.lower()]

    def set_items(self, items: Iterable[str]) -> None:
        self.items = list(items)
        self.error = None
        self._clamp_cursor()

    def clear(self) -> None:
        self.items = []
        self.error = None
        self.filter = ""
        self.cursor = 0
        self.offset = 0

    def set_error(self, message: str) -> None:
        """Show *message* in place of the choices; nothing can be chosen until new items arrive."""
        self.error = message
        self.cursor = 0
        self.offset = 0

    def set_filter(self, text: str) -> None:
        self.filter = text
        self.cursor = 0
        self.offset = 0

    @property
    def current(self) -> str | None:
        choices = self.filtered
        if 0 <= self.cursor < len(choices):
            return choices[self.cursor]
        return None

    def _list_height(self) -> int:
        return max(self.content_area.height - 1, 0)

    def _clamp_cursor(self) -> None:
        count = len(self.filtered)
        self.cursor = max(0, min(self.cursor, count - 1))
        height = self._list_height()
        if height <= 0:
            self.offset = 0
            return
        if self.cursor < self.offset:
            self.offset = self.cursor
        elif self.cursor >= self.offset + height:
            self.offset = self.cursor - height + 1
        self.offset = max(0, min(self.offset, max(count - height, 0)))

    def label(self, item: str) -> str:
        return item

    def render_content(self, width: int, height: int) -> list[str]:
        lines = [fit_to_width(FILTER_PROMPT + self.filter, width)]
        if self.error is not None:
            for line in (self.error.splitlines() or [""])[: self._list_height()]:
                lines.append(styled(fit_to_width(line, width), ERROR_TEXT))
            return lines
        choices = self.filtered
        for i in range(self.offset, min(self.offset + self._list_height(), len(choices))):
            text = fit_to_width(self.label(choices[i]), width)
            lines.append(styled(text, HIGHLIGHT) if i == self.cursor else text)
        return lines

    def choose(self) -> HandlerResult:
        return EventResult.NOP

    def on_key(self, key: str) -> HandlerResult:
        kb = get_dash_keybindings()
        if key in ("up", "ctrl+p"):
            self.cursor -= 1
        elif key in ("down", "ctrl+n"):
            self.cursor += 1
        elif key in ("pageUp", "pageDown"):
            step = max(self._list_height() - 1, 1)
            self.cursor += step if key == "pageDown" else -step
        elif kb.matches(key, "select"):
            return self.choose()
        elif kb.matches(key, "deleteCharBackward"):
            if not self.filter:
                return EventResult.NOP
            self.set_filter(self.filter[:-1])
        elif key == "space":
            self.set_filter(self.filter + " ")
        elif len(key) == 1 and key.isprintable():
            self.set_filter(self.filter + key)
        else:
            return EventResult.IGNORE
        self._clamp_cursor()
        return EventResult.NOP

    def on_mouse(self, event: MouseEvent) -> HandlerResult:
        if not self.area.contains(event.column, event.row):
            return EventResult.IGNORE
        if event.kind is MouseKind.SCROLL_DOWN:
            self.cursor += 1
        elif event.kind is MouseKind.SCROLL_UP:
            self.cursor -= 1
        elif event.is_left_down:
            index = self.offset + event.row - (self.content_area.y + 1)
            if event.row <= self.content_area.y or index >= len(self.filtered):
                return EventResult.NOP
            self.cursor = index
            self._clamp_cursor()
            return self.choose()
        else:
            return EventResult.IGNORE
        self._clamp_cursor()
        return EventResult.NOP


class SingleSelect(_FilteredChoices):
    """Pick one item; ``on_choose`` runs against the window."""

    kind = WidgetKind.SINGLE_SELECT

    def __init__(
        self,
        id: str,
        title: str = "",
        *,
        on_choose: OnChoose | None = None,
        can_activate: bool = True,
    ) -> None:
        super().__init__(id, title, can_activate=can_activate)
        self.on_choose = on_choose

    def choose(self) -> HandlerResult:
        item = self.current
        if item is None or self.on_choose is None:
            return EventResult.NOP
        on_choose = self.on_choose
        return Callback(lambda window: on_choose(window, item))


class MultipleSelect(_FilteredChoices):
    """Toggle any number of items; ``on_change`` receives the new selection."""

    kind = WidgetKind.MULTIPLE_SELECT

    def __init__(
        self,
        id: str,
        title: str = "",
        *,
        on_change: OnChange | None = None,
        can_activate: bool = True,
    ) -> None:
        super().__init__(id, title, can_activate=can_activate)
        self.on_change = on_change
        self.selected: list[str] = []

    def set_items(self, items: Iterable[str]) -> None:
        super().set_items(items)
        self.selected = [item for item in self.selected if item in self.items]

    def clear(self) -> None:
        super().clear()
        self.selected = []

    def select_item(self, item: str) -> None:
        if item not in self.selected:
            self.selected.append(item)

    def unselect_all(self) -> None:
        self.selected = []

    def title_suffix(self) -> str:
        return f" ({len(self.selected)} selected)" if self.selected else ""

    def label(self, item: str) -> str:
        return ("[x] " if item in self.selected else "[ ] ") + item

    def choose(self) -> HandlerResult:
        item = self.current
        if item is None:
            return EventResult.NOP
        if item in self.selected:
            self.selected.remove(item)
        else:
            self.selected.append(item)
        if self.on_change is None:
            return EventResult.NOP
        on_change = self.on_change
        selection = [entry for entry in self.items if entry in self.selected]
        return Callback(lambda window: on_change(window, selection))

    def on_key(self, key: str) -> HandlerResult:
        if get_dash_keybindings().matches(key, "toggle") and not self.filter:
            return self.choose()
        return super().on_key(key)
