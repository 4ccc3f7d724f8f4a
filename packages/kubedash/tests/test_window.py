"""Tests for kubedash.tui.window -- tabs, popups and input dispatch."""

from __future__ import annotations

import pytest

from kubedash.tui.event import (
    EventResult,
    KeyInput,
    MouseButton,
    MouseEvent,
    MouseKind,
    ResizeInput,
)
from kubedash.tui.keybindings import DashKeybindingsManager, set_dash_keybindings
from kubedash.tui.layout import Direction, LayoutNode, Leaf, Rect, Split, TabLayout
from kubedash.tui.screen import Screen
from kubedash.tui.tab import Tab
from kubedash.tui.widgets import ListWidget, MultipleSelect, SingleSelect, TextWidget
from kubedash.tui.window import Window

from .virtual_terminal import VirtualTerminal


def halves(direction: Direction) -> LayoutNode:
    return Split(direction, ((1, Leaf(0)), (1, Leaf(1))))


def make_window(header: str | None = "header") -> Window:
    chosen: list[str] = []
    first = Tab(
        "first",
        "First",
        [ListWidget("list", "List"), TextWidget("text", "Text")],
        TabLayout(halves, 2, Direction.HORIZONTAL),
    )
    second = Tab(
        "second",
        "Second",
        [TextWidget("other", "Other")],
        TabLayout(lambda d: Leaf(0), 1),
    )
    window = Window(
        [first, second],
        popups=[
            SingleSelect("pick", "Pick", on_choose=lambda w, item: chosen.append(item)),
            MultipleSelect("multi", "Multi"),
        ],
        header=(lambda: header) if header is not None else None,
    )
    window.chosen = chosen  # type: ignore[attr-defined]
    window.on_resize(40, 12)
    return window


def key(window: Window, k: str) -> EventResult:
    return window.on_input(KeyInput(k))


def click(column: int, row: int) -> MouseEvent:
    return MouseEvent(MouseKind.DOWN, column, row, MouseButton.LEFT)


# ---------------------------------------------------------------------------
# Areas
# ---------------------------------------------------------------------------


class TestAreas:
    def test_needs_a_tab(self) -> None:
        with pytest.raises(ValueError):
            Window([])

    def test_bars_and_body(self) -> None:
        window = make_window()
        assert window.tab_bar_area == Rect(0, 0, 40, 1)
        assert window.header_area == Rect(0, 1, 40, 1)
        assert window.body_area == Rect(0, 2, 40, 10)

    def test_no_header(self) -> None:
        window = make_window(header=None)
        assert window.body_area == Rect(0, 1, 40, 11)

    def test_widgets_fill_body(self) -> None:
        window = make_window()
        assert window.find_widget("list").area == Rect(0, 2, 20, 10)
        assert window.find_widget("text").area == Rect(20, 2, 20, 10)

    def test_popup_is_centered(self) -> None:
        window = make_window()
        assert window.popups["pick"].area == Rect(4, 3, 32, 8)

    def test_resize_event(self) -> None:
        window = make_window()
        assert window.on_input(ResizeInput(60, 20)) is EventResult.NOP
        assert window.body_area == Rect(0, 2, 60, 18)


# ---------------------------------------------------------------------------
# Keyboard dispatch
# ---------------------------------------------------------------------------


class TestKeys:
    def test_quit(self) -> None:
        window = make_window()
        assert key(window, "q") is EventResult.QUIT
        assert key(window, "ctrl+c") is EventResult.QUIT

    def test_tab_cycles_focus(self) -> None:
        window = make_window()
        key(window, "tab")
        assert window.active_tab.active_index == 1
        key(window, "shift+tab")
        assert window.active_tab.active_index == 0

    def test_digit_selects_tab(self) -> None:
        window = make_window()
        key(window, "2")
        assert window.active_tab.id == "second"
        key(window, "9")
        assert window.active_tab.id == "second"

    def test_zero_is_ignored(self) -> None:
        window = make_window()
        assert key(window, "0") is EventResult.IGNORE

    def test_toggle_split(self) -> None:
        window = make_window()
        key(window, "ctrl+s")
        assert window.find_widget("text").area == Rect(0, 7, 40, 5)

    def test_active_widget_sees_key_first(self) -> None:
        window = make_window()
        window.find_widget("list").set_items(["a", "b", "c"])
        key(window, "j")
        assert window.find_widget("list").selected == 1

    def test_unhandled_key(self) -> None:
        window = make_window()
        assert key(window, "x") is EventResult.IGNORE

    def test_custom_binding(self) -> None:
        window = make_window()
        calls = []
        window.bind("x", lambda w: calls.append(w))
        assert key(window, "x") is EventResult.NOP
        assert calls == [window]

    def test_custom_binding_can_quit(self) -> None:
        window = make_window()
        window.bind("x", lambda w: EventResult.QUIT)
        assert key(window, "x") is EventResult.QUIT

    def test_overridden_quit_key(self) -> None:
        set_dash_keybindings(DashKeybindingsManager({"quit": "ctrl+q"}))
        window = make_window()
        assert key(window, "q") is EventResult.IGNORE
        assert key(window, "ctrl+q") is EventResult.QUIT


# ---------------------------------------------------------------------------
# Popups
# ---------------------------------------------------------------------------


class TestPopups:
    def test_unknown_popup(self) -> None:
        window = make_window()
        with pytest.raises(KeyError):
            window.open_popup("nope")

    def test_keys_go_to_popup(self) -> None:
        window = make_window()
        window.open_popup("pick")
        assert key(window, "q") is EventResult.NOP
        assert window.popups["pick"].filter == "q"

    def test_escape_closes_popup(self) -> None:
        window = make_window()
        window.open_popup("pick")
        assert key(window, "escape") is EventResult.NOP
        assert window.popup is None
        assert key(window, "q") is EventResult.QUIT

    def test_ctrl_c_quits_from_popup(self) -> None:
        window = make_window()
        window.open_popup("pick")
        assert key(window, "ctrl+c") is EventResult.QUIT
        assert window.popups["pick"].filter == ""

    def test_open_replaces_open_popup(self) -> None:
        window = make_window()
        window.open_popup("pick")
        window.open_popup("multi")
        assert window.popup is window.popups["multi"]
        window.close_popup()
        assert window.popup is None

    def test_popup_callback_runs_against_window(self) -> None:
        window = make_window()
        window.popups["pick"].set_items(["alpha", "beta"])
        window.open_popup("pick")
        key(window, "down")
        key(window, "enter")
        assert window.chosen == ["beta"]  # type: ignore[attr-defined]

    def test_mouse_goes_to_popup(self) -> None:
        window = make_window()
        window.open_popup("pick")
        window.on_input(click(1, 3))
        assert window.active_tab.active_index == 0


# ---------------------------------------------------------------------------
# Mouse dispatch
# ---------------------------------------------------------------------------


class TestMouse:
    def test_tab_bar_click_selects_tab(self) -> None:
        window = make_window()
        # " 1:First " spans 0-8, then " │ ", then " 2:Second "
        assert window.on_input(click(13, 0)) is EventResult.NOP
        assert window.active_tab.id == "second"

    def test_tab_bar_click_on_separator(self) -> None:
        window = make_window()
        assert window.on_input(click(10, 0)) is EventResult.IGNORE
        assert window.active_tab.id == "first"

    def test_click_in_body_moves_focus(self) -> None:
        window = make_window()
        window.on_input(click(25, 5))
        assert window.active_tab.active_index == 1

    def test_list_click_runs_select_callback(self) -> None:
        rows = []
        window = make_window()
        widget = window.find_widget("list")
        widget.on_select = lambda w, row: rows.append(list(row))
        widget.set_items(["a", "b", "c"])
        # border at y=2, first item at y=3
        window.on_input(click(3, 4))
        assert rows == [["b"]]

    def test_click_on_inactive_list_focuses_and_selects(self) -> None:
        rows = []
        window = make_window()
        widget = window.find_widget("list")
        widget.on_select = lambda w, row: rows.append(list(row))
        widget.set_items(["a", "b", "c"])
        key(window, "tab")
        assert window.active_tab.active_index == 1

        window.on_input(click(3, 4))
        assert window.active_tab.active_index == 0
        assert rows == [["b"]]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRender:
    def test_render_paints_tab_bar_and_header(self) -> None:
        terminal = VirtualTerminal(rows=12, columns=40)
        window = make_window()
        screen = Screen(terminal)
        window.render(screen)
        assert "1:First" in screen.lines[0]
        assert screen.lines[1].startswith("header")
        assert "┌" in screen.lines[2]

    def test_render_adopts_terminal_size(self) -> None:
        terminal = VirtualTerminal(rows=20, columns=50)
        window = make_window()
        window.render(Screen(terminal))
        assert window.area == Rect(0, 0, 50, 20)

    def test_popup_drawn_on_top(self) -> None:
        terminal = VirtualTerminal(rows=12, columns=40)
        window = make_window()
        window.open_popup("pick")
        screen = Screen(terminal)
        window.render(screen)
        assert "Pick" in screen.lines[3]
