"""Dashboard keybindings manager."""

from __future__ import annotations

from typing import Literal

from kubedash.tui.keys import KeyId, matches_key

DashAction = Literal[
    # Scrolling and selection
    "cursorUp",
    "cursorDown",
    "pageUp",
    "pageDown",
    "scrollTop",
    "scrollBottom",
    "select",
    "toggle",
    "cancel",
    "deleteCharBackward",
    # Focus
    "nextWidget",
    "prevWidget",
    "toggleSplit",
    # Application
    "quit",
    "openNamespaces",
    "openContexts",
    "openKinds",
    "editFilter",
]

DashKeybindingsConfig = dict[DashAction, KeyId | list[KeyId]]

DEFAULT_DASH_KEYBINDINGS: dict[DashAction, KeyId | list[KeyId]] = {
    "cursorUp": ["up", "k"],
    "cursorDown": ["down", "j"],
    "pageUp": ["pageUp", "ctrl+u"],
    "pageDown": ["pageDown", "ctrl+d"],
    "scrollTop": ["home", "g"],
    "scrollBottom": ["end", "G"],
    "select": "enter",
    "toggle": "space",
    "cancel": "escape",
    "deleteCharBackward": "backspace",
    "nextWidget": "tab",
    "prevWidget": "shift+tab",
    "toggleSplit": "ctrl+s",
    "quit": ["q", "ctrl+c"],
    "openNamespaces": "n",
    "openContexts": "c",
    "openKinds": "f",
    "editFilter": "/",
}


class DashKeybindingsManager:
    """Maps dashboard actions to the keys that trigger them."""

    def __init__(self, config: DashKeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[DashAction, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: DashKeybindingsConfig) -> None:
        self._action_to_keys.clear()
        for source in (DEFAULT_DASH_KEYBINDINGS, config):
            for action, keys in source.items():
                self._action_to_keys[action] = list(keys if isinstance(keys, list) else [keys])

    def matches(self, key: KeyId | None, action: DashAction) -> bool:
        """Check if a parsed key triggers *action*."""
        return any(matches_key(key, bound) for bound in self._action_to_keys.get(action, []))

    def get_keys(self, action: DashAction) -> list[KeyId]:
        return self._action_to_keys.get(action, [])

    def set_config(self, config: DashKeybindingsConfig) -> None:
        self._build_maps(config)


_global_dash_keybindings: DashKeybindingsManager | None = None


def get_dash_keybindings() -> DashKeybindingsManager:
    """Return the process-wide keybindings, creating the defaults on first use."""
    global _global_dash_keybindings
    if _global_dash_keybindings is None:
        _global_dash_keybindings = DashKeybindingsManager()
    return _global_dash_keybindings


def set_dash_keybindings(manager: DashKeybindingsManager) -> None:
    global _global_dash_keybindings
    _global_dash_keybindings = manager
