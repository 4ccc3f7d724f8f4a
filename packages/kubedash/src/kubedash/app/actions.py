"""Apply resource events to the widgets they target."""

from __future__ import annotations

import logging

from kubedash.app.context import SelectionContext
from kubedash.app.message import (
    ChoicesResponse,
    ContextsResponse,
    LogLines,
    NamespacesResponse,
    ResourceError,
    ResourceEvent,
    TableSnapshot,
    TextSnapshot,
    ViewId,
)
from kubedash.tui.widgets import ListWidget, MultipleSelect, SingleSelect, TextWidget
from kubedash.tui.window import Window

logger = logging.getLogger(__name__)

ERROR_START = "\x1b[31m"
ERROR_END = "\x1b[39m"
ERROR_HEADER = ["ERROR"]


def format_error(message: str) -> list[str]:
    """Red text lines for an error payload."""
    return [f"{ERROR_START}{line}{ERROR_END}" for line in message.splitlines() or [""]]


def update_contents(window: Window, event: ResourceEvent, selection: SelectionContext) -> None:
    """Route *event* to its target widget; unknown targets are logged and dropped."""
    if isinstance(event, NamespacesResponse):
        popup = window.find_widget(ViewId.NAMESPACES.value)
        if isinstance(popup, MultipleSelect):
            popup.set_items(event.names)
            popup.unselect_all()
            for namespace in selection.snapshot().namespaces:
                if namespace in event.names:
                    popup.select_item(namespace)
        return

    if isinstance(event, ContextsResponse):
        popup = window.find_widget(ViewId.CONTEXTS.value)
        if isinstance(popup, SingleSelect):
            popup.set_items(event.names)
        return

    widget = window.find_widget(event.target.value)
    if widget is None:
        logger.warning("no widget for %s", event.target)
        return

    if isinstance(event, ResourceError):
        if isinstance(widget, (SingleSelect, MultipleSelect)):
            widget.set_error(event.message)
        elif isinstance(widget, ListWidget):
            widget.set_table(ERROR_HEADER, [[line] for line in format_error(event.message)])
        else:
            widget.set_items(format_error(event.message))
    elif isinstance(event, ChoicesResponse) and isinstance(widget, (SingleSelect, MultipleSelect)):
        widget.set_items(event.names)
    elif isinstance(event, TableSnapshot):
        if isinstance(widget, ListWidget):
            widget.set_table(event.header, event.rows)
        else:
            widget.set_items("  ".join(row) for row in event.rows)
    elif isinstance(event, LogLines) and isinstance(widget, TextWidget) and not event.reset:
        widget.append_items(event.lines)
    elif isinstance(event, (LogLines, TextSnapshot)):
        widget.set_items(event.lines)
    else:
        logger.warning("cannot apply %s to %r", type(event).__name__, widget)
