"""Terminal abstraction for raw-mode stdin/stdout interaction.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal`` that
switches the controlling terminal into raw mode on the alternate screen with
mouse reporting enabled, and reads input with a bounded timeout so a reader
thread can notice when it should stop.
"""

from __future__ import annotations

import codecs
import logging
import os
import select
import sys
import termios
import tty
from typing import Protocol

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_ALT_SCREEN_ENABLE = "\x1b[?1049h"
_ALT_SCREEN_DISABLE = "\x1b[?1049l"
# Button events, any-motion tracking, SGR extended coordinates.
_MOUSE_ENABLE = "\x1b[?1000h\x1b[?1003h\x1b[?1006h"
_MOUSE_DISABLE = "\x1b[?1006l\x1b[?1003l\x1b[?1000l"
_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    def read(self, timeout: float) -> str | None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def clear_screen(self) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Terminal backed by ``sys.stdin``/``sys.stdout``."""

    def __init__(self) -> None:
        self._original_termios: list | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    # -- properties ---------------------------------------------------------

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).columns
        except (ValueError, OSError):
            return 80

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).lines
        except (ValueError, OSError):
            return 24

    # -- start / stop -------------------------------------------------------

    def start(self) -> None:
        """Enable raw mode, the alternate screen and mouse capture."""
        fd = sys.stdin.fileno()
        self._original_termios = termios.tcgetattr(fd)
        tty.setraw(fd)
        self.write(_ALT_SCREEN_ENABLE + _HIDE_CURSOR + _MOUSE_ENABLE + _CLEAR_SCREEN)
        logger.debug("terminal started (%dx%d)", self.columns, self.rows)

    def stop(self) -> None:
        """Undo everything :meth:`start` did; safe to call more than once."""
        if self._original_termios is None:
            return
        self.write(_MOUSE_DISABLE + _SHOW_CURSOR + _ALT_SCREEN_DISABLE)
        termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._original_termios)
        self._original_termios = None
        logger.debug("terminal restored")

    # -- I/O ------------------------------------------------------------------

    def read(self, timeout: float) -> str | None:
        """Wait up to *timeout* seconds for input; ``None`` when nothing came."""
        fd = sys.stdin.fileno()
        ready, _, _ = select.select([fd], [], [], timeout)
        if not ready:
            return None
        raw = os.read(fd, 4096)
        if not raw:
            raise EOFError("stdin closed")
        return self._decoder.decode(raw)

    def write(self, data: str) -> None:
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError:
            logger.warning("terminal write failed", exc_info=True)

    def clear_screen(self) -> None:
        self.write(_CLEAR_SCREEN)
