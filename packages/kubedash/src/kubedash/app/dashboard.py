"""The running dashboard: terminal, window, watcher and threads together."""

from __future__ import annotations

import logging
import queue
import threading

from kubedash.app import loop
from kubedash.app.actions import update_contents
from kubedash.app.config import Config
from kubedash.app.context import SelectionContext
from kubedash.app.message import Message, Tick
from kubedash.app.views import build_window
from kubedash.app.watcher import KubectlWatcher
from kubedash.tui.event import EventResult, KeyInput, MouseEvent, ResizeInput
from kubedash.tui.keybindings import DashKeybindingsManager, set_dash_keybindings
from kubedash.tui.screen import Screen
from kubedash.tui.terminal import ProcessTerminal, Terminal

logger = logging.getLogger(__name__)


class Dashboard:
    def __init__(self, config: Config, terminal: Terminal | None = None) -> None:
        self.config = config
        self.terminal = terminal or ProcessTerminal()
        self.messages: queue.Queue[Message] = queue.Queue()
        self.terminated = threading.Event()
        self.selection = SelectionContext(config.context, config.namespaces)
        set_dash_keybindings(DashKeybindingsManager(config.keybindings))
        self.watcher = KubectlWatcher(
            self.messages.put,
            self.selection,
            kubectl=config.kubectl,
            poll_interval=config.poll_interval,
            log_tail=config.log_tail,
        )
        self.window = build_window(config, self.selection, self.watcher.request)
        self.screen = Screen(self.terminal)

    def handle(self, message: Message) -> EventResult:
        if isinstance(message, (KeyInput, MouseEvent, ResizeInput)):
            return self.window.on_input(message)
        if isinstance(message, Tick):
            return EventResult.NOP
        update_contents(self.window, message, self.selection)
        return EventResult.NOP

    def run(self) -> None:
        self.terminal.start()
        try:
            self.window.on_resize(self.terminal.columns, self.terminal.rows)
            self.watcher.start()
            loop.start_thread("input", loop.read_input, self.terminal, self.messages.put, self.terminated)
            loop.start_thread("tick", loop.tick, self.messages.put, self.terminated, self.config.tick_rate)
            loop.run(self.window, self.screen, self.messages, self.terminated, self.handle)
        finally:
            self.terminated.set()
            self.watcher.stop()
            self.terminal.stop()
