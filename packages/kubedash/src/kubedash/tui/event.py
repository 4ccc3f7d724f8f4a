"""User input events and handler results."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional, Union

if TYPE_CHECKING:
    from kubedash.tui.window import Window


class MouseKind(enum.Enum):
    DOWN = "down"
    UP = "up"
    DRAG = "drag"
    MOVED = "moved"
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"


class MouseButton(enum.Enum):
    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"
    NONE = "none"


@dataclass(frozen=True)
class KeyInput:
    """A key press; ``key`` is an identifier like ``"j"`` or ``"ctrl+c"``."""

    key: str


@dataclass(frozen=True)
class MouseEvent:
    """Pointer event with zero-based cell coordinates."""

    kind: MouseKind
    column: int
    row: int
    button: MouseButton = MouseButton.NONE
    modifiers: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_left_down(self) -> bool:
        return self.kind is MouseKind.DOWN and self.button is MouseButton.LEFT


@dataclass(frozen=True)
class ResizeInput:
    width: int
    height: int


UserInput = Union[KeyInput, MouseEvent, ResizeInput]


class EventResult(enum.Enum):
    """What happened to an event after a handler saw it."""

    NOP = "nop"
    IGNORE = "ignore"
    QUIT = "quit"


@dataclass(frozen=True)
class Callback:
    """Deferred action a widget asks its window to run."""

    fn: Callable[[Window], Optional[EventResult]]

    def __call__(self, window: Window) -> EventResult:
        result = self.fn(window)
        return EventResult.NOP if result is None else result


HandlerResult = Union[EventResult, Callback]
