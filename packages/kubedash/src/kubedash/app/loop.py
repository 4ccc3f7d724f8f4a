"""Producer threads and the single consumer loop.

Three producers feed one queue: the input thread (keys, mouse, resizes),
the tick thread, and the resource watcher.  The consumer pops one message
at a time, updates the window and redraws.  A shared termination flag
(:class:`threading.Event`) stops everything; the input thread sets it when
it exits for any reason, so a crashed reader always ends the program.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable

from kubedash.app.message import Message, Tick
from kubedash.tui.event import EventResult, KeyInput, MouseEvent, ResizeInput
from kubedash.tui.keys import parse_input
from kubedash.tui.screen import Screen
from kubedash.tui.stdin_buffer import StdinBuffer
from kubedash.tui.terminal import Terminal
from kubedash.tui.window import Window

logger = logging.getLogger(__name__)

INPUT_POLL_TIMEOUT = 1.0
ESCAPE_FLUSH_TIMEOUT = 0.05
CONSUMER_POLL_TIMEOUT = 0.1

Post = Callable[[Message], None]
Handler = Callable[[Message], EventResult]


def read_input(
    terminal: Terminal,
    post: Post,
    terminated: threading.Event,
    poll_timeout: float = INPUT_POLL_TIMEOUT,
) -> None:
    """Read the terminal until *terminated* is set, posting user input.

    Reads wait at most *poll_timeout* so the flag is rechecked regularly.
    The flag is set on the way out whatever the reason.
    """
    buffer = StdinBuffer()
    size = (terminal.columns, terminal.rows)
    try:
        while not terminated.is_set():
            data = terminal.read(ESCAPE_FLUSH_TIMEOUT if buffer.pending else poll_timeout)
            sequences = buffer.flush() if data is None else buffer.process(data)
            for sequence in sequences:
                event = parse_input(sequence)
                if isinstance(event, (KeyInput, MouseEvent)):
                    post(event)
                elif event is None:
                    logger.debug("unhandled input %r", sequence)

            current = (terminal.columns, terminal.rows)
            if current != size:
                size = current
                post(ResizeInput(*size))
    except Exception:
        logger.exception("input thread failed")
    finally:
        terminated.set()
        logger.debug("input thread exiting")


def tick(post: Post, terminated: threading.Event, rate: float) -> None:
    """Post a :class:`Tick` every *rate* seconds until *terminated* is set."""
    while not terminated.wait(rate):
        post(Tick())


def start_thread(name: str, target: Callable[..., None], *args: object) -> threading.Thread:
    thread = threading.Thread(target=target, args=args, name=name, daemon=True)
    thread.start()
    logger.debug("%s thread started", name)
    return thread


def run(
    window: Window,
    screen: Screen,
    messages: queue.Queue[Message],
    terminated: threading.Event,
    handle: Handler,
) -> None:
    """Consume *messages* until a handler asks to quit or *terminated* is set.

    A failing handler is logged and the loop keeps going.
    """
    window.render(screen)
    while not terminated.is_set():
        try:
            message = messages.get(timeout=CONSUMER_POLL_TIMEOUT)
        except queue.Empty:
            continue

        try:
            result = handle(message)
        except Exception:
            logger.exception("error handling %s", type(message).__name__)
            continue

        if result is EventResult.QUIT:
            logger.info("quit requested")
            break
        window.render(screen)
    terminated.set()
