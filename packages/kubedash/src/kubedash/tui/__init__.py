"""kubedash.tui: ANSI-aware text panes, layout and focus routing for terminals."""

from kubedash.tui.ansi import EscapeToken, EscapeTokenizer, TokenKind, strip_escapes, tokenize
from kubedash.tui.buffer import TextBuffer
from kubedash.tui.event import (
    Callback,
    EventResult,
    KeyInput,
    MouseButton,
    MouseEvent,
    MouseKind,
    ResizeInput,
    UserInput,
)
from kubedash.tui.keybindings import (
    DashKeybindingsManager,
    get_dash_keybindings,
    set_dash_keybindings,
)
from kubedash.tui.keys import Key, matches_key, parse_input, parse_key, parse_mouse
from kubedash.tui.layout import (
    Direction,
    Leaf,
    LayoutError,
    LayoutNode,
    Rect,
    Split,
    TabLayout,
    layout_from_dict,
    layout_to_dict,
)
from kubedash.tui.reflow import StyledRun, WrappedLine, reflow, wrap
from kubedash.tui.screen import Screen
from kubedash.tui.sgr import Color, Modifier, SgrResolver, Style, resolve_sgr
from kubedash.tui.stdin_buffer import StdinBuffer
from kubedash.tui.tab import Tab
from kubedash.tui.terminal import ProcessTerminal, Terminal
from kubedash.tui.utils import truncate_to_width, visible_width
from kubedash.tui.widgets import (
    ListWidget,
    MultipleSelect,
    SingleSelect,
    TextWidget,
    Widget,
    WidgetKind,
)
from kubedash.tui.window import Window

__all__ = [
    "Callback",
    "Color",
    "DashKeybindingsManager",
    "Direction",
    "EscapeToken",
    "EscapeTokenizer",
    "EventResult",
    "Key",
    "KeyInput",
    "LayoutError",
    "LayoutNode",
    "Leaf",
    "ListWidget",
    "Modifier",
    "MouseButton",
    "MouseEvent",
    "MouseKind",
    "MultipleSelect",
    "ProcessTerminal",
    "Rect",
    "ResizeInput",
    "Screen",
    "SgrResolver",
    "SingleSelect",
    "Split",
    "StdinBuffer",
    "Style",
    "StyledRun",
    "Tab",
    "TabLayout",
    "Terminal",
    "TextBuffer",
    "TextWidget",
    "TokenKind",
    "UserInput",
    "Widget",
    "WidgetKind",
    "Window",
    "WrappedLine",
    "get_dash_keybindings",
    "layout_from_dict",
    "layout_to_dict",
    "matches_key",
    "parse_input",
    "parse_key",
    "parse_mouse",
    "reflow",
    "resolve_sgr",
    "set_dash_keybindings",
    "strip_escapes",
    "tokenize",
    "truncate_to_width",
    "visible_width",
    "wrap",
]
