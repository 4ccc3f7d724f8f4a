"""Builds the dashboard window: tabs, widgets, popups and their callbacks."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from kubedash.app.config import Config
from kubedash.app.context import SelectionContext
from kubedash.app.logfilter import parse_filter
from kubedash.app.message import (
    ContextsRequest,
    KindsRequest,
    LogRequest,
    NamespacesRequest,
    RawRequest,
    RefreshRequest,
    Request,
    ViewId,
    YamlNamesRequest,
    YamlRequest,
)
from kubedash.tui.event import EventResult
from kubedash.tui.keybindings import get_dash_keybindings
from kubedash.tui.layout import Direction, Leaf, LayoutNode, Split, TabLayout
from kubedash.tui.tab import Tab
from kubedash.tui.widgets import ListWidget, MultipleSelect, SingleSelect, TextWidget
from kubedash.tui.window import Window

logger = logging.getLogger(__name__)

Requester = Callable[[Request], None]

# Widgets cleared when the cluster context changes.
_CONTEXT_BOUND = (ViewId.PODS, ViewId.LOGS, ViewId.CONFIGS, ViewId.RAW, ViewId.EVENTS, ViewId.YAML)


def list_and_detail(direction: Direction) -> LayoutNode:
    """A list on one side and its detail pane on the other, half and half."""
    return Split(direction, ((50, Leaf(0)), (50, Leaf(1))))


def single_pane(direction: Direction) -> LayoutNode:
    return Leaf(0)


def build_window(config: Config, selection: SelectionContext, request: Requester) -> Window:
    """Create every tab and popup and wire their callbacks to *request*."""
    direction = Direction(config.split_direction)
    kb = get_dash_keybindings()
    yaml_kind = ""

    def show_logs(window: Window, row: Sequence[str]) -> EventResult:
        if len(row) < 2:
            return EventResult.NOP
        namespace, pod = row[0], row[1]
        logs = window.find_widget(ViewId.LOGS.value)
        if logs is not None:
            logs.title = f"Logs: {pod}"
        request(LogRequest(namespace, pod))
        return EventResult.NOP

    def show_raw(window: Window, row: Sequence[str]) -> EventResult:
        if len(row) < 2:
            return EventResult.NOP
        namespace, name = row[0], row[1]
        raw = window.find_widget(ViewId.RAW.value)
        if raw is not None:
            raw.title = f"Raw Data: {name}"
        request(RawRequest(namespace, name))
        return EventResult.NOP

    def choose_namespaces(window: Window, names: list[str]) -> EventResult:
        selection.set_namespaces(names)
        request(RefreshRequest())
        return EventResult.NOP

    def choose_context(window: Window, name: str) -> EventResult:
        selection.set_context(name)
        for view in _CONTEXT_BOUND:
            widget = window.find_widget(view.value)
            if widget is not None:
                widget.clear()
        window.close_popup()
        request(RefreshRequest())
        return EventResult.NOP

    def open_kinds(window: Window) -> EventResult:
        request(KindsRequest())
        window.open_popup(ViewId.YAML_KINDS.value)
        return EventResult.NOP

    def choose_kind(window: Window, kind: str) -> EventResult:
        nonlocal yaml_kind
        yaml_kind = kind
        window.close_popup()
        names = window.find_widget(ViewId.YAML_NAMES.value)
        if names is not None:
            names.clear()
            names.title = f"Name: {kind}"
        request(YamlNamesRequest(kind))
        window.open_popup(ViewId.YAML_NAMES.value)
        return EventResult.NOP

    def choose_name(window: Window, item: str) -> EventResult:
        namespace, _, name = item.partition("/")
        if not name or not yaml_kind:
            return EventResult.NOP
        window.close_popup()
        yaml = window.find_widget(ViewId.YAML.value)
        if yaml is not None:
            yaml.title = f"Yaml: {yaml_kind}/{name}"
        request(YamlRequest(yaml_kind, namespace, name))
        return EventResult.NOP

    pods_tab = Tab(
        "pods",
        "Pods",
        [
            ListWidget(ViewId.PODS.value, "Pods", on_select=show_logs),
            TextWidget(
                ViewId.LOGS.value,
                "Logs",
                follow=True,
                carry_style=config.carry_style,
                filter_parser=parse_filter,
            ),
        ],
        TabLayout(list_and_detail, 2, direction),
    )
    configs_tab = Tab(
        "configs",
        "Configs",
        [
            ListWidget(ViewId.CONFIGS.value, "Configs", on_select=show_raw),
            TextWidget(ViewId.RAW.value, "Raw Data", carry_style=config.carry_style),
        ],
        TabLayout(list_and_detail, 2, direction),
    )
    events_tab = Tab(
        "events",
        "Events",
        [TextWidget(ViewId.EVENTS.value, "Events", follow=True, carry_style=config.carry_style)],
        TabLayout(single_pane, 1, direction),
    )
    yaml_tab = Tab(
        "yaml",
        "Yaml",
        [
            TextWidget(
                ViewId.YAML.value,
                "Yaml",
                carry_style=config.carry_style,
                actions=[(key, open_kinds) for key in kb.get_keys("openKinds")],
            )
        ],
        TabLayout(single_pane, 1, direction),
    )

    window = Window(
        [pods_tab, configs_tab, events_tab, yaml_tab],
        popups=[
            MultipleSelect(ViewId.NAMESPACES.value, "Namespaces", on_change=choose_namespaces),
            SingleSelect(ViewId.CONTEXTS.value, "Contexts", on_choose=choose_context),
            SingleSelect(ViewId.YAML_KINDS.value, "Kind", on_choose=choose_kind),
            SingleSelect(ViewId.YAML_NAMES.value, "Name", on_choose=choose_name),
        ],
        header=selection.describe,
    )

    def open_namespaces(window: Window) -> EventResult:
        request(NamespacesRequest())
        window.open_popup(ViewId.NAMESPACES.value)
        return EventResult.NOP

    def open_contexts(window: Window) -> EventResult:
        request(ContextsRequest())
        window.open_popup(ViewId.CONTEXTS.value)
        return EventResult.NOP

    for key in kb.get_keys("openNamespaces"):
        window.bind(key, open_namespaces)
    for key in kb.get_keys("openContexts"):
        window.bind(key, open_contexts)
    return window
