"""Scrollable text pane for logs and raw manifests.

A pane built with a ``filter_parser`` can narrow its items: the
``editFilter`` key opens a one-line prompt on the bottom row, ``select``
parses and applies it, ``cancel`` leaves the previous filter in place.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterable, Optional, Sequence

from kubedash.tui.buffer import BORDER_WIDTH, LineFilter, TextBuffer
from kubedash.tui.event import Callback, EventResult, HandlerResult, MouseEvent, MouseKind
from kubedash.tui.keybindings import get_dash_keybindings
from kubedash.tui.keys import matches_key
from kubedash.tui.layout import Rect
from kubedash.tui.utils import fit_to_width
from kubedash.tui.widgets.base import ERROR_TEXT, HIGHLIGHT, WidgetBase, WidgetKind, styled

if TYPE_CHECKING:
    from kubedash.tui.window import Window

MOUSE_SCROLL_LINES = 3
FILTER_PROMPT = "/"

FilterParser = Callable[[str], LineFilter]
WidgetAction = Callable[["Window"], Optional[EventResult]]


class TextWidget(WidgetBase):
    """Wrapped, styled text with a scroll offset; optionally follows new output."""

    kind = WidgetKind.TEXT

    def __init__(
        self,
        id: str,
        title: str = "",
        *,
        follow: bool = False,
        carry_style: bool = True,
        can_activate: bool = True,
        border: bool = True,
        filter_parser: FilterParser | None = None,
        actions: Sequence[tuple[str, WidgetAction]] = (),
    ) -> None:
        super().__init__(id, title, can_activate=can_activate, border=border)
        self.buffer = TextBuffer(
            border_overhead=BORDER_WIDTH if border else 0,
            carry_style=carry_style,
            follow=follow,
        )
        self.filter_parser = filter_parser
        self.actions = list(actions)
        self.filter_text = ""
        # None unless the filter prompt is open
        self.filter_input: str | None = None
        self.filter_error: str | None = None

    # -- content ------------------------------------------------------------

    def update_area(self, area: Rect) -> None:
        super().update_area(area)
        self.buffer.rewrap(area.width, area.height)

    def set_items(self, items: Iterable[str]) -> None:
        self.buffer.replace(items, self.area.width, self.area.height)

    def append_items(self, items: Iterable[str]) -> None:
        self.buffer.append(items, self.area.width, self.area.height)

    def clear(self) -> None:
        self.buffer.clear()

    # -- filtering ------------------------------------------------------------

    def apply_filter(self, text: str) -> bool:
        """Parse and apply *text*; an empty string shows every item again.

        On a parse error the message is kept in ``filter_error``, the prompt
        stays open and False is returned.
        """
        text = text.strip()
        parser = self.filter_parser
        try:
            line_filter = parser(text) if text and parser is not None else None
        except ValueError as e:
            self.filter_error = str(e)
            return False
        self.filter_text = text
        self.filter_input = None
        self.filter_error = None
        self.buffer.set_line_filter(line_filter, self.area.width, self.area.height)
        return True

    def _on_filter_key(self, key: str, filter_input: str) -> HandlerResult:
        kb = get_dash_keybindings()
        if kb.matches(key, "select"):
            self.apply_filter(filter_input)
        elif kb.matches(key, "cancel"):
            self.filter_input = None
            self.filter_error = None
        elif kb.matches(key, "deleteCharBackward"):
            self.filter_input = filter_input[:-1]
        elif key == "space":
            self.filter_input = filter_input + " "
        elif len(key) == 1 and key.isprintable():
            self.filter_input = filter_input + key
        else:
            return EventResult.IGNORE
        return EventResult.NOP

    # -- rendering ------------------------------------------------------------

    def title_suffix(self) -> str:
        suffix = f" {FILTER_PROMPT}{self.filter_text}" if self.filter_text else ""
        total = len(self.buffer.lines)
        if total <= self.buffer.viewport_height:
            return suffix
        return f"{suffix} [{self.buffer.offset + 1}/{self.buffer.row_count + 1}]"

    def render_content(self, width: int, height: int) -> list[str]:
        if self.filter_input is None or height <= 0:
            return [line.to_ansi() for line in self.buffer.visible_lines(height)]
        lines = [line.to_ansi() for line in self.buffer.visible_lines(height - 1)]
        lines += [""] * (height - 1 - len(lines))
        prompt = FILTER_PROMPT + self.filter_input
        if self.filter_error is not None:
            lines.append(styled(fit_to_width(f"{prompt}  {self.filter_error}", width), ERROR_TEXT))
        else:
            lines.append(styled(fit_to_width(prompt, width), HIGHLIGHT))
        return lines

    # -- input ----------------------------------------------------------------

    def on_key(self, key: str) -> HandlerResult:
        if self.filter_input is not None:
            return self._on_filter_key(key, self.filter_input)

        kb = get_dash_keybindings()
        page = max(self.buffer.viewport_height // 2, 1)

        if kb.matches(key, "cursorDown"):
            self.buffer.scroll_down(1)
        elif kb.matches(key, "cursorUp"):
            self.buffer.scroll_up(1)
        elif kb.matches(key, "pageDown"):
            self.buffer.scroll_down(page)
        elif kb.matches(key, "pageUp"):
            self.buffer.scroll_up(page)
        elif kb.matches(key, "scrollTop"):
            self.buffer.scroll_to_top()
        elif kb.matches(key, "scrollBottom"):
            self.buffer.scroll_to_bottom()
        elif self.filter_parser is not None and kb.matches(key, "editFilter"):
            self.filter_input = self.filter_text
            self.filter_error = None
        else:
            for bound, action in self.actions:
                if matches_key(key, bound):
                    return Callback(action)
            return EventResult.IGNORE
        return EventResult.NOP

    def on_mouse(self, event: MouseEvent) -> HandlerResult:
        if not self.area.contains(event.column, event.row):
            return EventResult.IGNORE
        if event.kind is MouseKind.SCROLL_DOWN:
            self.buffer.scroll_down(MOUSE_SCROLL_LINES)
        elif event.kind is MouseKind.SCROLL_UP:
            self.buffer.scroll_up(MOUSE_SCROLL_LINES)
        elif not event.is_left_down:
            return EventResult.IGNORE
        return EventResult.NOP
