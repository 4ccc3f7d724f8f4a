"""Split raw stdin chunks into complete input sequences.

Reads can end in the middle of an escape sequence (mouse reports are the
usual culprit).  :class:`StdinBuffer` keeps the unfinished tail until more
data arrives; the reader flushes it when a read times out so a lone ``ESC``
press is still delivered.
"""

from __future__ import annotations

import enum
import re

ESC = "\x1b"

_SGR_MOUSE_RE = re.compile(r"^<\d+;\d+;\d+[Mm]$")


class SequenceStatus(enum.Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    NOT_ESCAPE = "not-escape"


def is_complete_sequence(data: str) -> SequenceStatus:
    """Classify *data* as a complete escape sequence, a prefix of one, or text."""
    if not data.startswith(ESC):
        return SequenceStatus.NOT_ESCAPE

    if len(data) == 1:
        return SequenceStatus.INCOMPLETE

    after_esc = data[1:]

    if after_esc.startswith("["):
        if after_esc.startswith("[M"):
            # X10 mouse: ESC [ M b x y
            return SequenceStatus.COMPLETE if len(data) >= 6 else SequenceStatus.INCOMPLETE
        return _csi_status(data)

    if after_esc[0] in "]P_":
        if data.endswith(f"{ESC}\\") or (after_esc[0] == "]" and data.endswith("\x07")):
            return SequenceStatus.COMPLETE
        return SequenceStatus.INCOMPLETE

    if after_esc.startswith("O"):
        return SequenceStatus.COMPLETE if len(after_esc) >= 2 else SequenceStatus.INCOMPLETE

    # Meta key: ESC followed by one character.
    return SequenceStatus.COMPLETE


def _csi_status(data: str) -> SequenceStatus:
    if len(data) < 3:
        return SequenceStatus.INCOMPLETE

    payload = data[2:]
    last_char = payload[-1]
    if 0x40 <= ord(last_char) <= 0x7E:
        if payload.startswith("<"):
            if _SGR_MOUSE_RE.match(payload):
                return SequenceStatus.COMPLETE
            if last_char in ("M", "m"):
                # Malformed report: emit it rather than waiting forever.
                return SequenceStatus.COMPLETE
            return SequenceStatus.INCOMPLETE
        return SequenceStatus.COMPLETE

    return SequenceStatus.INCOMPLETE


def extract_complete_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences plus an unfinished remainder."""
    sequences: list[str] = []
    pos = 0

    while pos < len(buffer):
        if buffer[pos] != ESC:
            sequences.append(buffer[pos])
            pos += 1
            continue

        remaining = buffer[pos:]
        for seq_end in range(1, len(remaining) + 1):
            candidate = remaining[:seq_end]
            if is_complete_sequence(candidate) is not SequenceStatus.INCOMPLETE:
                sequences.append(candidate)
                pos += seq_end
                break
        else:
            return sequences, remaining

    return sequences, ""


class StdinBuffer:
    """Accumulates input across reads and hands out complete sequences."""

    def __init__(self) -> None:
        self._buffer = ""

    def process(self, data: str) -> list[str]:
        """Feed *data* and return every sequence it completes."""
        self._buffer += data
        sequences, self._buffer = extract_complete_sequences(self._buffer)
        return sequences

    def flush(self) -> list[str]:
        """Return the pending partial sequence as-is and empty the buffer."""
        if not self._buffer:
            return []
        sequences = [self._buffer]
        self._buffer = ""
        return sequences

    def clear(self) -> None:
        self._buffer = ""

    @property
    def pending(self) -> str:
        return self._buffer
