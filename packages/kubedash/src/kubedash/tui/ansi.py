"""Escape sequence tokenizer.

Splits a string into literal text runs and recognized terminal escape
sequences.  Tokenization is lazy and lossless: joining the ``text`` of every
token reproduces the input exactly, whatever the input contains.

Anything that starts with ``ESC`` but is not a recognized CSI sequence comes
out as a one-character :attr:`TokenKind.BARE_ESCAPE` token and scanning
resumes at the following character, so malformed input never stalls or
raises.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Iterator

ESC = "\x1b"

# ESC [ <private marker> <params> <final letter>
_CSI_RE = re.compile(r"\x1b\[([?=]?)([0-9;]*)([A-Za-z])")

_U8_MAX = 0xFF
_U16_MAX = 0xFFFF
_MAX_DIGITS = len(str(_U16_MAX))


class TokenKind(enum.Enum):
    LITERAL = "literal"
    CURSOR_UP = "cursor_up"
    CURSOR_DOWN = "cursor_down"
    CURSOR_FORWARD = "cursor_forward"
    CURSOR_BACK = "cursor_back"
    CURSOR_NEXT_LINE = "cursor_next_line"
    CURSOR_PREV_LINE = "cursor_prev_line"
    CURSOR_HORIZONTAL_ABS = "cursor_horizontal_abs"
    CURSOR_POSITION = "cursor_position"
    ERASE_DISPLAY = "erase_display"
    ERASE_LINE = "erase_line"
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"
    HORIZONTAL_VERTICAL_POSITION = "horizontal_vertical_position"
    SGR = "sgr"
    AUX_PORT_ON = "aux_port_on"
    AUX_PORT_OFF = "aux_port_off"
    DEVICE_STATUS_REPORT = "device_status_report"
    SAVE_CURSOR = "save_cursor"
    RESTORE_CURSOR = "restore_cursor"
    CURSOR_SHOW = "cursor_show"
    CURSOR_HIDE = "cursor_hide"
    SET_MODE = "set_mode"
    RESET_MODE = "reset_mode"
    BARE_ESCAPE = "bare_escape"


_COUNTED: dict[str, TokenKind] = {
    "A": TokenKind.CURSOR_UP,
    "B": TokenKind.CURSOR_DOWN,
    "C": TokenKind.CURSOR_FORWARD,
    "D": TokenKind.CURSOR_BACK,
    "E": TokenKind.CURSOR_NEXT_LINE,
    "F": TokenKind.CURSOR_PREV_LINE,
    "G": TokenKind.CURSOR_HORIZONTAL_ABS,
    "J": TokenKind.ERASE_DISPLAY,
    "K": TokenKind.ERASE_LINE,
    "S": TokenKind.SCROLL_UP,
    "T": TokenKind.SCROLL_DOWN,
}

_POSITIONED: dict[str, TokenKind] = {
    "H": TokenKind.CURSOR_POSITION,
    "f": TokenKind.HORIZONTAL_VERTICAL_POSITION,
}

# Exact parameter strings for the fixed sequences.
_FIXED: dict[tuple[str, str, str], TokenKind] = {
    ("", "5", "i"): TokenKind.AUX_PORT_ON,
    ("", "4", "i"): TokenKind.AUX_PORT_OFF,
    ("", "6", "n"): TokenKind.DEVICE_STATUS_REPORT,
    ("", "", "s"): TokenKind.SAVE_CURSOR,
    ("", "", "u"): TokenKind.RESTORE_CURSOR,
    ("?", "25", "h"): TokenKind.CURSOR_SHOW,
    ("?", "25", "l"): TokenKind.CURSOR_HIDE,
}


@dataclass(frozen=True)
class EscapeToken:
    """One token: the exact source span plus what it was recognized as."""

    text: str
    kind: TokenKind
    params: tuple[int, ...] = ()

    @property
    def is_literal(self) -> bool:
        return self.kind is TokenKind.LITERAL

    @property
    def is_escape(self) -> bool:
        return self.kind is not TokenKind.LITERAL

    @property
    def count(self) -> int:
        """Movement/scroll count (also the erase mode)."""
        return self.params[0] if self.params else 1

    @property
    def mode(self) -> int:
        return self.count

    @property
    def row(self) -> int:
        return self.params[0] if self.params else 1

    @property
    def col(self) -> int:
        return self.params[1] if len(self.params) > 1 else 1

    @property
    def codes(self) -> tuple[int, ...]:
        """SGR parameter list; empty SGR means reset."""
        return self.params or (0,)

    @property
    def visible(self) -> bool | None:
        if self.kind is TokenKind.CURSOR_SHOW:
            return True
        if self.kind is TokenKind.CURSOR_HIDE:
            return False
        return None


# ---------------------------------------------------------------------------
# Sequence recognition
# ---------------------------------------------------------------------------


def _to_int(field: str, limit: int) -> int | None:
    if not field:
        return None
    digits = field.lstrip("0") or "0"
    if len(digits) > _MAX_DIGITS:
        return None
    value = int(digits)
    if value > limit:
        return None
    return value


def _recognize(marker: str, params: str, final: str) -> tuple[TokenKind, tuple[int, ...]] | None:
    fixed = _FIXED.get((marker, params, final))
    if fixed is not None:
        return fixed, ()

    fields = params.split(";") if params else []

    if final == "m" and not marker:
        codes: list[int] = []
        for field in fields:
            value = _to_int(field, _U8_MAX) if field else 0
            if value is None:
                return None
            codes.append(value)
        return TokenKind.SGR, tuple(codes) if codes else (0,)

    if final in ("h", "l"):
        if len(fields) != 1 or not fields[0]:
            return None
        value = _to_int(fields[0], _U8_MAX)
        if value is None:
            return None
        return (TokenKind.SET_MODE if final == "h" else TokenKind.RESET_MODE), (value,)

    if marker:
        return None

    kind = _COUNTED.get(final)
    if kind is not None:
        if len(fields) > 1:
            return None
        value = _to_int(fields[0], _U16_MAX) if fields else None
        if fields and fields[0] and value is None:
            return None
        return kind, (1 if value is None else value,)

    kind = _POSITIONED.get(final)
    if kind is not None:
        if len(fields) > 2:
            return None
        position: list[int] = []
        for field in fields + [""] * (2 - len(fields)):
            value = _to_int(field, _U16_MAX)
            if field and value is None:
                return None
            position.append(1 if value is None else value)
        return kind, tuple(position)

    return None


def _next_token(text: str, pos: int) -> EscapeToken:
    if text[pos] != ESC:
        end = text.find(ESC, pos)
        if end == -1:
            end = len(text)
        return EscapeToken(text[pos:end], TokenKind.LITERAL)

    match = _CSI_RE.match(text, pos)
    if match is not None:
        recognized = _recognize(*match.groups())
        if recognized is not None:
            kind, params = recognized
            return EscapeToken(match.group(0), kind, params)

    return EscapeToken(ESC, TokenKind.BARE_ESCAPE)


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


class EscapeTokenizer:
    """Lazy, restartable token sequence over *text*.

    Every call to :func:`iter` starts again from the beginning of the input.
    """

    def __init__(self, text: str) -> None:
        self.text = text

    def __iter__(self) -> Iterator[EscapeToken]:
        text = self.text
        pos = 0
        while pos < len(text):
            token = _next_token(text, pos)
            pos += len(token.text)
            yield token


def tokenize(text: str) -> EscapeTokenizer:
    """Return a lazy tokenizer over *text*."""
    return EscapeTokenizer(text)


def strip_escapes(text: str) -> str:
    """Return *text* with every escape token removed."""
    return "".join(token.text for token in tokenize(text) if token.is_literal)
