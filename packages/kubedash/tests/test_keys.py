"""Tests for kubedash.tui.keys -- keyboard and mouse input parsing."""

from __future__ import annotations

import pytest

from kubedash.tui.event import KeyInput, MouseButton, MouseEvent, MouseKind
from kubedash.tui.keys import (
    LEGACY_SEQUENCES,
    Key,
    matches_key,
    normalize_key_id,
    parse_input,
    parse_key,
    parse_mouse,
)


# ---------------------------------------------------------------------------
# Key helper class
# ---------------------------------------------------------------------------


class TestKeyConstants:
    def test_named(self) -> None:
        assert Key.up == "up"
        assert Key.page_down == "pageDown"

    def test_combinators(self) -> None:
        assert Key.ctrl("c") == "ctrl+c"
        assert Key.shift("tab") == "shift+tab"
        assert Key.alt("x") == "alt+x"


# ---------------------------------------------------------------------------
# parse_key
# ---------------------------------------------------------------------------


class TestParseKey:
    @pytest.mark.parametrize(
        "data, expected",
        [
            ("a", "a"),
            ("G", "G"),
            ("\r", "enter"),
            ("\t", "tab"),
            (" ", "space"),
            ("\x7f", "backspace"),
            ("\x1b", "escape"),
            ("\x03", "ctrl+c"),
            ("\x13", "ctrl+s"),
            ("\x1b[A", "up"),
            ("\x1bOB", "down"),
            ("\x1b[5~", "pageUp"),
            ("\x1b[6~", "pageDown"),
            ("\x1b[H", "home"),
            ("\x1b[4~", "end"),
            ("\x1b[Z", "shift+tab"),
            ("\x1b[1;5A", "ctrl+up"),
            ("\x1b[1;2C", "shift+right"),
            ("\x1b[3;3~", "alt+delete"),
            ("\x1ba", "alt+a"),
            ("\x1bA", "shift+alt+a"),
            ("\x1b\x03", "ctrl+alt+c"),
        ],
    )
    def test_sequences(self, data: str, expected: str) -> None:
        assert parse_key(data) == expected

    def test_unknown(self) -> None:
        assert parse_key("") is None
        assert parse_key("\x1b[99~") is None

    def test_legacy_table_has_every_modifier(self) -> None:
        assert LEGACY_SEQUENCES["\x1b[1;8A"] == "ctrl+shift+alt+up"


class TestMatchesKey:
    def test_aliases(self) -> None:
        assert matches_key("escape", "esc")
        assert matches_key("enter", "return")

    def test_modifier_order(self) -> None:
        assert matches_key("ctrl+shift+up", "shift+ctrl+up")
        assert normalize_key_id("alt+ctrl+x") == "ctrl+alt+x"

    def test_case_sensitive_letters(self) -> None:
        assert not matches_key("g", "G")

    def test_none(self) -> None:
        assert not matches_key(None, "a")


# ---------------------------------------------------------------------------
# Mouse
# ---------------------------------------------------------------------------


class TestParseMouse:
    def test_left_press(self) -> None:
        event = parse_mouse("\x1b[<0;10;5M")
        assert event == MouseEvent(MouseKind.DOWN, 9, 4, MouseButton.LEFT)
        assert event.is_left_down

    def test_release(self) -> None:
        event = parse_mouse("\x1b[<0;1;1m")
        assert event is not None
        assert event.kind is MouseKind.UP

    def test_right_press(self) -> None:
        event = parse_mouse("\x1b[<2;3;3M")
        assert event is not None
        assert event.button is MouseButton.RIGHT
        assert not event.is_left_down

    def test_motion_without_button(self) -> None:
        event = parse_mouse("\x1b[<35;4;2M")
        assert event is not None
        assert event.kind is MouseKind.MOVED

    def test_drag(self) -> None:
        event = parse_mouse("\x1b[<32;4;2M")
        assert event is not None
        assert event.kind is MouseKind.DRAG

    def test_wheel(self) -> None:
        up = parse_mouse("\x1b[<64;1;1M")
        down = parse_mouse("\x1b[<65;1;1M")
        assert up is not None and up.kind is MouseKind.SCROLL_UP
        assert down is not None and down.kind is MouseKind.SCROLL_DOWN

    def test_modifiers(self) -> None:
        event = parse_mouse("\x1b[<20;1;1M")
        assert event is not None
        assert event.modifiers == frozenset({"shift", "ctrl"})

    def test_not_a_mouse_report(self) -> None:
        assert parse_mouse("\x1b[A") is None

    def test_oversized_coordinates_are_rejected(self) -> None:
        assert parse_mouse("\x1b[<0;" + "9" * 5000 + ";1M") is None


class TestParseInput:
    def test_key(self) -> None:
        assert parse_input("q") == KeyInput("q")

    def test_mouse(self) -> None:
        assert isinstance(parse_input("\x1b[<0;1;1M"), MouseEvent)

    def test_unparseable(self) -> None:
        assert parse_input("\x1b[<bad") is None
        assert parse_input("\x1b[99~") is None
