"""Reassembles raw terminal input into whole key sequences.

A single ``read()`` may end in the middle of an escape sequence (an arrow
key arriving as ``ESC`` and then ``[A``), or contain several keys at once.
:class:`StdinBuffer` keeps the unfinished tail until the rest arrives and
queues one item per key, or one item per bracketed paste.
"""

from __future__ import annotations

from collections import deque

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

COMPLETE = "complete"
INCOMPLETE = "incomplete"
NOT_ESCAPE = "not-escape"


def sequence_state(data: str) -> str:
    """Classify *data* as a whole escape sequence, a prefix of one, or plain input."""
    if not data.startswith(ESC):
        return NOT_ESCAPE
    if len(data) == 1:
        return INCOMPLETE

    introducer = data[1]
    if introducer == "[":
        # CSI: optional parameters, then one final byte in @..~
        if len(data) > 2 and "@" <= data[-1] <= "~":
            return COMPLETE
        return INCOMPLETE
    if introducer == "]":
        # OSC: terminated by BEL or ST
        return COMPLETE if data.endswith(("\x07", ESC + "\\")) else INCOMPLETE
    if introducer == "O":
        # SS3: exactly one key byte follows
        return COMPLETE if len(data) >= 3 else INCOMPLETE
    # ESC plus one character is an alt-modified key.
    return COMPLETE


def split_sequences(data: str) -> tuple[list[str], str]:
    """Split *data* into complete sequences and an unfinished escape tail."""
    sequences: list[str] = []
    pos = 0
    while pos < len(data):
        if data[pos] != ESC:
            sequences.append(data[pos])
            pos += 1
            continue

        end = pos + 1
        while sequence_state(data[pos:end]) != COMPLETE:
            if end >= len(data):
                return sequences, data[pos:]
            end += 1
        sequences.append(data[pos:end])
        pos = end
    return sequences, ""


class StdinBuffer:
    """Accumulates input chunks and queues complete sequences.

    Bracketed paste content is queued as a single item, still wrapped in
    its start/end markers, so the consumer can tell it apart from typing.
    """

    def __init__(self) -> None:
        self._pending: str = ""
        # Text received so far inside a bracketed paste, or None outside one.
        self._paste: str | None = None
        self._ready: deque[str] = deque()

    def process(self, data: str) -> None:
        """Feed one chunk of decoded input."""
        self._pending += data
        while self._pending:
            if self._paste is not None:
                self._paste += self._pending
                self._pending = ""
                end = self._paste.find(BRACKETED_PASTE_END)
                if end == -1:
                    return
                self._ready.append(BRACKETED_PASTE_START + self._paste[:end] + BRACKETED_PASTE_END)
                self._pending = self._paste[end + len(BRACKETED_PASTE_END) :]
                self._paste = None
                continue

            start = self._pending.find(BRACKETED_PASTE_START)
            if start == -1:
                sequences, self._pending = split_sequences(self._pending)
                self._ready.extend(sequences)
                return

            sequences, _ = split_sequences(self._pending[:start])
            self._ready.extend(sequences)
            self._paste = ""
            self._pending = self._pending[start + len(BRACKETED_PASTE_START) :]

    def next_sequence(self) -> str | None:
        """Pop the oldest complete sequence, or ``None`` if none is ready."""
        return self._ready.popleft() if self._ready else None

    def has_pending(self) -> bool:
        """Whether an unfinished sequence or paste is waiting for more data."""
        return bool(self._pending) or self._paste is not None

    def flush(self) -> None:
        """Queue the unfinished tail as-is (e.g. a lone ESC after a timeout)."""
        if self._pending:
            self._ready.append(self._pending)
            self._pending = ""

    def clear(self) -> None:
        self._pending = ""
        self._paste = None
        self._ready.clear()
