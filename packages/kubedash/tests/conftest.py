from __future__ import annotations

import pytest

from kubedash.tui.keybindings import DashKeybindingsManager, set_dash_keybindings


@pytest.fixture(autouse=True)
def default_keybindings():
    """Every test starts from the default keybindings."""
    set_dash_keybindings(DashKeybindingsManager())
    yield
    set_dash_keybindings(DashKeybindingsManager())
