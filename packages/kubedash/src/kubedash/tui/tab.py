"""A tab: widgets, their layout, and which one has focus."""

from __future__ import annotations

import logging
from typing import Sequence

from kubedash.tui.event import EventResult, HandlerResult, MouseEvent, MouseKind
from kubedash.tui.layout import LayoutError, Rect, TabLayout
from kubedash.tui.screen import Screen
from kubedash.tui.widgets.base import Widget

logger = logging.getLogger(__name__)


class Tab:
    """Widgets laid out by a :class:`TabLayout` with one active widget.

    Focus moves only among widgets whose ``can_activate`` is true; with no
    such widget every focus operation is a no-op and there is no active
    widget.
    """

    def __init__(self, id: str, title: str, widgets: Sequence[Widget], layout: TabLayout) -> None:
        if layout.slot_count != len(widgets):
            raise LayoutError(
                f"tab {id!r}: layout has {layout.slot_count} slots for {len(widgets)} widgets"
            )
        self.id = id
        self.title = title
        self.widgets = list(widgets)
        self.layout = layout
        self.area = Rect()
        self.hovered_index: int | None = None
        self._activatable = [i for i, widget in enumerate(self.widgets) if widget.can_activate]
        self._active = 0

    # -- focus ----------------------------------------------------------------

    @property
    def active_index(self) -> int | None:
        """Index into :attr:`widgets` of the active widget."""
        if not self._activatable:
            return None
        return self._activatable[self._active]

    @property
    def active_widget(self) -> Widget | None:
        index = self.active_index
        return None if index is None else self.widgets[index]

    @property
    def hovered_widget(self) -> Widget | None:
        return None if self.hovered_index is None else self.widgets[self.hovered_index]

    def activate_next(self) -> None:
        if not self._activatable:
            return
        self._active = (self._active + 1) % len(self._activatable)
        self.clear_mouse_over()

    def activate_prev(self) -> None:
        if not self._activatable:
            return
        self._active = (self._active - 1) % len(self._activatable)
        self.clear_mouse_over()

    def activate_by_id(self, widget_id: str) -> bool:
        """Focus the activatable widget with *widget_id*; False if there is none."""
        for position, index in enumerate(self._activatable):
            if self.widgets[index].id == widget_id:
                self._active = position
                self.clear_mouse_over()
                return True
        return False

    def clear_mouse_over(self) -> None:
        self.hovered_index = None

    def find_widget(self, widget_id: str) -> Widget | None:
        for widget in self.widgets:
            if widget.id == widget_id:
                return widget
        return None

    # -- layout ---------------------------------------------------------------

    def update_area(self, area: Rect) -> None:
        self.area = area
        self.layout.assign(area, self.widgets)

    def toggle_split_direction(self) -> None:
        self.layout.toggle_direction(self.area, self.widgets)
        logger.debug("tab %s split direction now %s", self.id, self.layout.direction.value)

    # -- input ----------------------------------------------------------------

    def widget_index_at(self, column: int, row: int) -> int | None:
        for i, widget in enumerate(self.widgets):
            if widget.area.contains(column, row):
                return i
        return None

    def on_mouse(self, event: MouseEvent) -> HandlerResult:
        """Hit-test *event*, update focus or hover, then forward it."""
        hit = self.widget_index_at(event.column, event.row)
        if hit is None:
            return EventResult.IGNORE

        if event.is_left_down:
            if hit in self._activatable and hit != self.active_index:
                self._active = self._activatable.index(hit)
                self.clear_mouse_over()
        elif event.kind is MouseKind.MOVED:
            self.hovered_index = hit

        active = self.active_widget
        if active is None:
            return EventResult.NOP
        return active.on_mouse(event)

    # -- rendering ------------------------------------------------------------

    def render(self, screen: Screen) -> None:
        active_index = self.active_index
        for i, widget in enumerate(self.widgets):
            screen.draw(
                widget.area,
                widget.render(active=i == active_index, hovered=i == self.hovered_index),
            )
