"""Widget kinds: list/table, scrollable text, single and multiple select."""

from kubedash.tui.widgets.base import Widget, WidgetBase, WidgetKind, render_block
from kubedash.tui.widgets.select import MultipleSelect, SingleSelect
from kubedash.tui.widgets.table import ListWidget
from kubedash.tui.widgets.text import TextWidget

__all__ = [
    "ListWidget",
    "MultipleSelect",
    "SingleSelect",
    "TextWidget",
    "Widget",
    "WidgetBase",
    "WidgetKind",
    "render_block",
]
