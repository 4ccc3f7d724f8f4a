"""Shared widget capabilities and border rendering."""

from __future__ import annotations

import enum
from typing import Iterable, Protocol, Sequence, runtime_checkable

from kubedash.tui.event import EventResult, HandlerResult, MouseEvent
from kubedash.tui.layout import Rect
from kubedash.tui.sgr import Color, Modifier, Style
from kubedash.tui.utils import RESET, fit_to_width, truncate_to_width, visible_width


class WidgetKind(enum.Enum):
    LIST = "list"
    TEXT = "text"
    SINGLE_SELECT = "single_select"
    MULTIPLE_SELECT = "multiple_select"


ACTIVE_BORDER = Style(modifiers=Modifier.BOLD)
HOVERED_BORDER = Style(fg=Color.named("cyan"))
INACTIVE_BORDER = Style(fg=Color.indexed(8))
HIGHLIGHT = Style(modifiers=Modifier.REVERSED)
HEADER = Style(modifiers=Modifier.BOLD)
ERROR_TEXT = Style(fg=Color.named("red"))


@runtime_checkable
class Widget(Protocol):
    """Capability interface every widget kind implements."""

    id: str
    title: str
    kind: WidgetKind
    area: Rect
    can_activate: bool

    def update_area(self, area: Rect) -> None: ...

    def render(self, active: bool = False, hovered: bool = False) -> list[str]: ...

    def on_key(self, key: str) -> HandlerResult: ...

    def on_mouse(self, event: MouseEvent) -> HandlerResult: ...

    def set_items(self, items: Iterable[str]) -> None: ...

    def clear(self) -> None: ...


def styled(text: str, style: Style) -> str:
    if style.is_default:
        return text
    return f"{style.to_sgr()}{text}{RESET}"


def render_block(
    title: str,
    body: Sequence[str],
    width: int,
    height: int,
    border_style: Style,
) -> list[str]:
    """Frame *body* in a box-drawing border with *title* on the top edge."""
    if width < 2 or height < 2:
        return [" " * max(width, 0)] * max(height, 0)

    inner_width = width - 2
    label = truncate_to_width(f" {title} ", inner_width, "") if title else ""
    fill = "─" * (inner_width - visible_width(label))
    top = styled("┌" + label + fill + "┐", border_style)

    side = styled("│", border_style)
    lines = [top]
    for i in range(height - 2):
        content = body[i] if i < len(body) else ""
        lines.append(side + fit_to_width(content, inner_width) + side)
    lines.append(styled("└" + "─" * inner_width + "┘", border_style))
    return lines


class WidgetBase:
    """Common state: identity, area, activation and the optional border."""

    kind: WidgetKind

    def __init__(
        self,
        id: str,
        title: str = "",
        *,
        can_activate: bool = True,
        border: bool = True,
    ) -> None:
        self.id = id
        self.title = title
        self.can_activate = can_activate
        self.border = border
        self.area = Rect()

    @property
    def content_area(self) -> Rect:
        return self.area.inner(1) if self.border else self.area

    def update_area(self, area: Rect) -> None:
        self.area = area

    def title_suffix(self) -> str:
        return ""

    def render(self, active: bool = False, hovered: bool = False) -> list[str]:
        content = self.content_area
        body = self.render_content(content.width, content.height)
        if not self.border:
            return [fit_to_width(line, content.width) for line in body[: content.height]]
        if active:
            border_style = ACTIVE_BORDER
        elif hovered:
            border_style = HOVERED_BORDER
        else:
            border_style = INACTIVE_BORDER
        return render_block(
            self.title + self.title_suffix(),
            body,
            self.area.width,
            self.area.height,
            border_style,
        )

    def render_content(self, width: int, height: int) -> list[str]:
        return []

    def on_key(self, key: str) -> HandlerResult:
        return EventResult.IGNORE

    def on_mouse(self, event: MouseEvent) -> HandlerResult:
        return EventResult.IGNORE

    def set_items(self, items: Iterable[str]) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"
