"""Top-level window: tabs, popups and input dispatch.

Keys go to the open popup when there is one, otherwise to the active
widget of the active tab; keys the widget ignores fall through to the
window's own bindings.  Mouse events go to the popup, the tab bar, or the
active tab's hit-testing.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from kubedash.tui.event import (
    Callback,
    EventResult,
    HandlerResult,
    KeyInput,
    MouseEvent,
    ResizeInput,
    UserInput,
)
from kubedash.tui.keybindings import get_dash_keybindings
from kubedash.tui.keys import matches_key
from kubedash.tui.layout import Rect
from kubedash.tui.screen import Screen
from kubedash.tui.sgr import Modifier, Style
from kubedash.tui.tab import Tab
from kubedash.tui.utils import fit_to_width, visible_width
from kubedash.tui.widgets.base import Widget, styled

logger = logging.getLogger(__name__)

POPUP_PERCENT = 80
TAB_SEPARATOR = " │ "
ACTIVE_TAB = Style(modifiers=Modifier.REVERSED | Modifier.BOLD)


def _is_printable(key: str) -> bool:
    return key == "space" or (len(key) == 1 and key.isprintable())


WindowAction = Callable[["Window"], Optional[EventResult]]


class Window:
    """Owns every tab and popup and routes input between them."""

    def __init__(
        self,
        tabs: Sequence[Tab],
        *,
        popups: Sequence[Widget] = (),
        header: Callable[[], str] | None = None,
    ) -> None:
        if not tabs:
            raise ValueError("a window needs at least one tab")
        self.tabs = list(tabs)
        self.popups = {popup.id: popup for popup in popups}
        self.header = header
        self.active_tab_index = 0
        self.open_popup_id: str | None = None
        self.area = Rect()
        self.tab_bar_area = Rect()
        self.header_area = Rect()
        self.body_area = Rect()
        self._bindings: list[tuple[str, WindowAction]] = []

    # -- lookup -----------------------------------------------------------------

    @property
    def active_tab(self) -> Tab:
        return self.tabs[self.active_tab_index]

    @property
    def popup(self) -> Widget | None:
        if self.open_popup_id is None:
            return None
        return self.popups[self.open_popup_id]

    def find_widget(self, widget_id: str) -> Widget | None:
        if widget_id in self.popups:
            return self.popups[widget_id]
        for tab in self.tabs:
            widget = tab.find_widget(widget_id)
            if widget is not None:
                return widget
        return None

    def bind(self, key: str, action: WindowAction) -> None:
        """Run *action* when *key* reaches the window unhandled."""
        self._bindings.append((key, action))

    # -- tabs and popups -------------------------------------------------------

    def select_tab(self, index: int) -> None:
        if 0 <= index < len(self.tabs) and index != self.active_tab_index:
            self.active_tab.clear_mouse_over()
            self.active_tab_index = index

    def select_tab_by_id(self, tab_id: str) -> bool:
        for i, tab in enumerate(self.tabs):
            if tab.id == tab_id:
                self.select_tab(i)
                return True
        return False

    def open_popup(self, popup_id: str) -> None:
        """Show *popup_id*, replacing any popup already open."""
        if popup_id not in self.popups:
            raise KeyError(popup_id)
        self.open_popup_id = popup_id
        logger.debug("popup %s opened", popup_id)

    def close_popup(self) -> None:
        if self.open_popup_id is not None:
            logger.debug("popup %s closed", self.open_popup_id)
        self.open_popup_id = None

    # -- layout -----------------------------------------------------------------

    def on_resize(self, width: int, height: int) -> None:
        self.area = Rect(0, 0, width, height)
        self.tab_bar_area = Rect(0, 0, width, min(1, height))
        header_height = 1 if self.header is not None and height > 1 else 0
        self.header_area = Rect(0, self.tab_bar_area.bottom, width, header_height)
        top = self.header_area.bottom
        self.body_area = Rect(0, top, width, max(height - top, 0))
        for tab in self.tabs:
            tab.update_area(self.body_area)
        popup_area = self.body_area.centered(POPUP_PERCENT, POPUP_PERCENT)
        for popup in self.popups.values():
            popup.update_area(popup_area)

    def _tab_spans(self) -> list[tuple[int, int]]:
        spans: list[tuple[int, int]] = []
        col = 0
        for i, tab in enumerate(self.tabs):
            if i > 0:
                col += len(TAB_SEPARATOR)
            width = visible_width(self._tab_label(i, tab))
            spans.append((col, col + width))
            col += width
        return spans

    @staticmethod
    def _tab_label(index: int, tab: Tab) -> str:
        return f" {index + 1}:{tab.title} "

    # -- input ------------------------------------------------------------------

    def _resolve(self, result: HandlerResult) -> EventResult:
        if isinstance(result, Callback):
            return result(self)
        return result

    def on_input(self, event: UserInput) -> EventResult:
        if isinstance(event, KeyInput):
            return self.on_key(event.key)
        if isinstance(event, MouseEvent):
            return self.on_mouse(event)
        if isinstance(event, ResizeInput):
            self.on_resize(event.width, event.height)
            return EventResult.NOP
        return EventResult.IGNORE

    def on_key(self, key: str) -> EventResult:
        popup = self.popup
        if popup is not None:
            result = self._resolve(popup.on_key(key))
            if result is not EventResult.IGNORE:
                return result
            kb = get_dash_keybindings()
            if kb.matches(key, "cancel"):
                self.close_popup()
                return EventResult.NOP
            # printable quit keys belong to the popup filter
            if kb.matches(key, "quit") and not _is_printable(key):
                return EventResult.QUIT
            return result

        widget = self.active_tab.active_widget
        if widget is not None:
            result = self._resolve(widget.on_key(key))
            if result is not EventResult.IGNORE:
                return result
        return self._on_window_key(key)

    def _on_window_key(self, key: str) -> EventResult:
        for bound, action in self._bindings:
            if matches_key(key, bound):
                result = action(self)
                return EventResult.NOP if result is None else result

        kb = get_dash_keybindings()
        if kb.matches(key, "quit"):
            return EventResult.QUIT
        if kb.matches(key, "nextWidget"):
            self.active_tab.activate_next()
        elif kb.matches(key, "prevWidget"):
            self.active_tab.activate_prev()
        elif kb.matches(key, "toggleSplit"):
            self.active_tab.toggle_split_direction()
        elif len(key) == 1 and key.isdigit() and key != "0":
            self.select_tab(int(key) - 1)
        else:
            return EventResult.IGNORE
        return EventResult.NOP

    def on_mouse(self, event: MouseEvent) -> EventResult:
        popup = self.popup
        if popup is not None:
            return self._resolve(popup.on_mouse(event))

        if self.tab_bar_area.contains(event.column, event.row):
            if event.is_left_down:
                for i, (start, end) in enumerate(self._tab_spans()):
                    if start <= event.column < end:
                        self.select_tab(i)
                        return EventResult.NOP
            return EventResult.IGNORE

        return self._resolve(self.active_tab.on_mouse(event))

    # -- rendering ----------------------------------------------------------------

    def render(self, screen: Screen) -> None:
        screen.begin()
        if screen.area != self.area:
            self.on_resize(screen.width, screen.height)

        parts: list[str] = []
        for i, tab in enumerate(self.tabs):
            label = self._tab_label(i, tab)
            parts.append(styled(label, ACTIVE_TAB) if i == self.active_tab_index else label)
        screen.draw(self.tab_bar_area, [TAB_SEPARATOR.join(parts)])

        if self.header is not None and self.header_area.height:
            screen.draw(self.header_area, [fit_to_width(self.header(), self.header_area.width)])

        self.active_tab.render(screen)

        popup = self.popup
        if popup is not None:
            screen.clear(popup.area)
            screen.draw(popup.area, popup.render(active=True))

        screen.flush()
