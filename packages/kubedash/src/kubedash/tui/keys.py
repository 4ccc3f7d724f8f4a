"""Keyboard and mouse input parsing.

Raw terminal input (one complete sequence, as produced by
:class:`kubedash.tui.stdin_buffer.StdinBuffer`) is turned into either a key
identifier such as ``"j"``, ``"ctrl+c"`` or ``"shift+tab"``, or a
:class:`kubedash.tui.event.MouseEvent` for SGR mouse reports.
"""

from __future__ import annotations

import re

from kubedash.tui.event import KeyInput, MouseButton, MouseEvent, MouseKind, UserInput

KeyId = str

# ---------------------------------------------------------------------------
# Key helper object
# ---------------------------------------------------------------------------


class Key:
    """Named key constants and modifier combinators."""

    escape = "escape"
    enter = "enter"
    tab = "tab"
    space = "space"
    backspace = "backspace"
    delete = "delete"
    insert = "insert"
    home = "home"
    end = "end"
    page_up = "pageUp"
    page_down = "pageDown"
    up = "up"
    down = "down"
    left = "left"
    right = "right"

    @staticmethod
    def ctrl(key: str) -> str:
        return f"ctrl+{key}"

    @staticmethod
    def shift(key: str) -> str:
        return f"shift+{key}"

    @staticmethod
    def alt(key: str) -> str:
        return f"alt+{key}"


_ALIASES = {"esc": "escape", "return": "enter", "pgup": "pageUp", "pgdown": "pageDown"}
_MODIFIER_ORDER = ("ctrl", "shift", "alt")

# ---------------------------------------------------------------------------
# Legacy escape sequences
# ---------------------------------------------------------------------------

# Keys reported as ESC [ 1 ; <mod> <letter> when modified.
_LETTER_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
    "P": "f1",
    "Q": "f2",
    "R": "f3",
    "S": "f4",
}

# Keys reported as ESC [ <n> ; <mod> ~ when modified.
_TILDE_KEYS: dict[int, str] = {
    1: "home",
    2: "insert",
    3: "delete",
    4: "end",
    5: "pageUp",
    6: "pageDown",
    15: "f5",
    17: "f6",
    18: "f7",
    19: "f8",
    20: "f9",
    21: "f10",
    23: "f11",
    24: "f12",
}


def _modifier_prefix(param: int) -> str:
    bits = param - 1
    prefix = ""
    if bits & 4:
        prefix += "ctrl+"
    if bits & 1:
        prefix += "shift+"
    if bits & 2:
        prefix += "alt+"
    return prefix


def _build_legacy_sequences() -> dict[str, str]:
    table: dict[str, str] = {}
    for letter, name in _LETTER_KEYS.items():
        if letter in "ABCDHF":
            table[f"\x1b[{letter}"] = name
        table[f"\x1bO{letter}"] = name
        for param in range(2, 9):
            table[f"\x1b[1;{param}{letter}"] = _modifier_prefix(param) + name
    for number, name in _TILDE_KEYS.items():
        table[f"\x1b[{number}~"] = name
        for param in range(2, 9):
            table[f"\x1b[{number};{param}~"] = _modifier_prefix(param) + name
    table["\x1b[Z"] = "shift+tab"
    table["\x1b[E"] = "clear"
    return table


LEGACY_SEQUENCES: dict[str, str] = _build_legacy_sequences()

_SGR_MOUSE_RE = re.compile(r"^\x1b\[<(\d{1,5});(\d{1,5});(\d{1,5})([Mm])$")

# ---------------------------------------------------------------------------
# Key parsing
# ---------------------------------------------------------------------------


def parse_key(data: str) -> KeyId | None:
    """Parse one complete input sequence into a key identifier, or ``None``."""
    if not data:
        return None

    legacy = LEGACY_SEQUENCES.get(data)
    if legacy is not None:
        return legacy

    if data == "\x1b":
        return "escape"
    if data in ("\r", "\n"):
        return "enter"
    if data == "\t":
        return "tab"
    if data == " ":
        return "space"
    if data in ("\x7f", "\x08"):
        return "backspace"
    if data == "\x00":
        return "ctrl+space"

    if len(data) == 1 and 1 <= ord(data) <= 26:
        return "ctrl+" + chr(ord(data) + ord("a") - 1)

    if len(data) == 2 and data[0] == "\x1b":
        inner = parse_key(data[1])
        if inner is None:
            return None
        if data[1].isupper():
            return "shift+alt+" + data[1].lower()
        if inner.startswith("ctrl+"):
            return "ctrl+alt+" + inner[len("ctrl+"):]
        return "alt+" + inner

    if len(data) == 1 and data.isprintable():
        return data

    return None


def normalize_key_id(key_id: str) -> str:
    """Canonical form of *key_id*: aliases resolved, modifiers ordered."""
    parts = key_id.split("+")
    if key_id.endswith("++"):
        parts = parts[:-2] + ["+"]
    *mods, name = parts
    name = _ALIASES.get(name.lower(), name) if len(name) > 1 else name
    ordered = [m for m in _MODIFIER_ORDER if m in {mod.lower() for mod in mods}]
    return "+".join(ordered + [name])


def matches_key(key: KeyId | None, key_id: str) -> bool:
    """Return ``True`` if the parsed *key* is the key named by *key_id*."""
    if key is None:
        return False
    return normalize_key_id(key) == normalize_key_id(key_id)


# ---------------------------------------------------------------------------
# Mouse parsing
# ---------------------------------------------------------------------------


def parse_mouse(data: str) -> MouseEvent | None:
    """Parse an SGR mouse report (``ESC [ < b ; x ; y M|m``)."""
    match = _SGR_MOUSE_RE.match(data)
    if match is None:
        return None

    code = int(match.group(1))
    column = int(match.group(2)) - 1
    row = int(match.group(3)) - 1
    released = match.group(4) == "m"

    modifiers = set()
    if code & 4:
        modifiers.add("shift")
    if code & 8:
        modifiers.add("alt")
    if code & 16:
        modifiers.add("ctrl")

    button_bits = code & 3
    if code & 64:
        kind = MouseKind.SCROLL_DOWN if button_bits == 1 else MouseKind.SCROLL_UP
        button = MouseButton.NONE
    else:
        button = (MouseButton.LEFT, MouseButton.MIDDLE, MouseButton.RIGHT, MouseButton.NONE)[button_bits]
        if code & 32:
            kind = MouseKind.MOVED if button is MouseButton.NONE else MouseKind.DRAG
        elif released:
            kind = MouseKind.UP
        else:
            kind = MouseKind.DOWN

    return MouseEvent(kind, max(column, 0), max(row, 0), button, frozenset(modifiers))


def parse_input(data: str) -> UserInput | None:
    """Turn one complete input sequence into a user input event."""
    if data.startswith("\x1b[<"):
        return parse_mouse(data)
    key = parse_key(data)
    if key is None:
        return None
    return KeyInput(key)
