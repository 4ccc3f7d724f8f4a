"""SGR (Select Graphic Rendition) resolution.

Turns the integer parameters of ``ESC[...m`` sequences into immutable
:class:`Style` values.  Resolution is a left fold: every code updates the
running style, so ``resolve_sgr(a + b) == resolve_sgr(b, resolve_sgr(a))``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Iterable, Sequence


class Modifier(enum.Flag):
    NONE = 0
    BOLD = enum.auto()
    DIM = enum.auto()
    ITALIC = enum.auto()
    UNDERLINED = enum.auto()
    SLOW_BLINK = enum.auto()
    RAPID_BLINK = enum.auto()
    REVERSED = enum.auto()
    HIDDEN = enum.auto()
    CROSSED_OUT = enum.auto()


# Codes 1-9 in order.
_SET_MODIFIERS: dict[int, Modifier] = {
    1: Modifier.BOLD,
    2: Modifier.DIM,
    3: Modifier.ITALIC,
    4: Modifier.UNDERLINED,
    5: Modifier.SLOW_BLINK,
    6: Modifier.RAPID_BLINK,
    7: Modifier.REVERSED,
    8: Modifier.HIDDEN,
    9: Modifier.CROSSED_OUT,
}

_CLEAR_MODIFIERS: dict[int, Modifier] = {
    22: Modifier.BOLD | Modifier.DIM,
    23: Modifier.ITALIC,
    24: Modifier.UNDERLINED,
    25: Modifier.SLOW_BLINK | Modifier.RAPID_BLINK,
    27: Modifier.REVERSED,
    28: Modifier.HIDDEN,
    29: Modifier.CROSSED_OUT,
}

COLOR_NAMES = (
    "black",
    "red",
    "green",
    "yellow",
    "blue",
    "magenta",
    "cyan",
    "white",
)


@dataclass(frozen=True)
class Color:
    """Either a palette index (0-255) or a 24-bit RGB triple."""

    index: int | None = None
    rgb: tuple[int, int, int] | None = None

    @classmethod
    def indexed(cls, index: int) -> Color:
        return cls(index=_clamp(index))

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> Color:
        return cls(rgb=(_clamp(r), _clamp(g), _clamp(b)))

    @classmethod
    def named(cls, name: str, bright: bool = False) -> Color:
        return cls(index=COLOR_NAMES.index(name) + (8 if bright else 0))

    def sgr_params(self, background: bool = False) -> str:
        if self.rgb is not None:
            r, g, b = self.rgb
            return f"{48 if background else 38};2;{r};{g};{b}"
        index = self.index or 0
        if index < 8:
            return str((40 if background else 30) + index)
        if index < 16:
            return str((100 if background else 90) + index - 8)
        return f"{48 if background else 38};5;{index}"


@dataclass(frozen=True)
class Style:
    """Foreground, background and modifier set; ``None`` colors are unset."""

    fg: Color | None = None
    bg: Color | None = None
    modifiers: Modifier = field(default=Modifier.NONE)

    @property
    def is_default(self) -> bool:
        return self == DEFAULT_STYLE

    def has(self, modifier: Modifier) -> bool:
        return modifier in self.modifiers

    def to_sgr(self) -> str:
        """Render this style as an escape that starts from a reset."""
        params = ["0"]
        for code, modifier in _SET_MODIFIERS.items():
            if modifier in self.modifiers:
                params.append(str(code))
        if self.fg is not None:
            params.append(self.fg.sgr_params())
        if self.bg is not None:
            params.append(self.bg.sgr_params(background=True))
        return f"\x1b[{';'.join(params)}m"


DEFAULT_STYLE = Style()


def _clamp(value: int) -> int:
    return max(0, min(value, 255))


def _extended_color(codes: Sequence[int], i: int) -> tuple[Color | None, int]:
    """Parse the tail of a 38/48 code starting at ``codes[i]`` (the mode).

    Returns the color (``None`` when the mode is unknown or missing) and the
    index of the next unconsumed code.  Missing components read as 0.
    """
    if i >= len(codes):
        return None, i
    mode = codes[i]
    i += 1
    if mode == 5:
        index = codes[i] if i < len(codes) else 0
        return Color.indexed(index), i + 1
    if mode == 2:
        components = [codes[j] if j < len(codes) else 0 for j in range(i, i + 3)]
        return Color.from_rgb(*components), i + 3
    return None, i


def resolve_sgr(codes: Iterable[int], style: Style = DEFAULT_STYLE) -> Style:
    """Fold *codes* over *style* and return the resulting style.

    Unknown codes are ignored.  This never raises on any integer input.
    """
    codes = list(codes)
    fg, bg, modifiers = style.fg, style.bg, style.modifiers
    i = 0
    while i < len(codes):
        code = codes[i]
        i += 1
        if code == 0:
            fg, bg, modifiers = None, None, Modifier.NONE
        elif code in _SET_MODIFIERS:
            modifiers |= _SET_MODIFIERS[code]
        elif code in _CLEAR_MODIFIERS:
            modifiers &= ~_CLEAR_MODIFIERS[code]
        elif 30 <= code <= 37:
            fg = Color.indexed(code - 30)
        elif 90 <= code <= 97:
            fg = Color.indexed(code - 90 + 8)
        elif 40 <= code <= 47:
            bg = Color.indexed(code - 40)
        elif 100 <= code <= 107:
            bg = Color.indexed(code - 100 + 8)
        elif code == 39:
            fg = None
        elif code == 49:
            bg = None
        elif code in (38, 48):
            color, i = _extended_color(codes, i)
            if color is not None:
                if code == 38:
                    fg = color
                else:
                    bg = color
    return replace(style, fg=fg, bg=bg, modifiers=modifiers)


class SgrResolver:
    """Running SGR state fed one escape at a time."""

    def __init__(self, style: Style = DEFAULT_STYLE) -> None:
        self.style = style

    def feed(self, codes: Iterable[int]) -> Style:
        self.style = resolve_sgr(codes, self.style)
        return self.style

    def reset(self) -> None:
        self.style = DEFAULT_STYLE
