"""Terminal abstraction for raw-mode, key-at-a-time interaction.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal``
implementation that manages raw mode, bracketed paste, blocking key reads
and single-line redraw primitives via ANSI escape sequences.
"""

from __future__ import annotations

import codecs
import os
import select
import sys
import termios
import tty
from typing import Protocol

from oxisql.stdin_buffer import StdinBuffer

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_BRACKETED_PASTE_ENABLE = "\x1b[?2004h"
_BRACKETED_PASTE_DISABLE = "\x1b[?2004l"

_CLEAR_LINE = "\x1b[2K\r"
_CLEAR_SCREEN = "\x1b[2J\x1b[1;1H"
_CURSOR_LEFT_FMT = "\x1b[{}D"

# Time to wait for the rest of an escape sequence before treating ESC alone.
_ESCAPE_TIMEOUT = 0.05


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def read_key(self) -> str: ...

    def write(self, data: str) -> None: ...

    def clear_line(self) -> None: ...

    def clear_screen(self) -> None: ...

    def move_cursor_left(self, columns: int) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Concrete terminal implementation backed by ``sys.stdin``/``sys.stdout``.

    ``read_key`` blocks until one complete key sequence (or one bracketed
    paste) is available.  End of file on stdin raises :class:`EOFError`;
    write failures propagate as :class:`OSError`.
    """

    def __init__(self) -> None:
        self._stdin_buffer = StdinBuffer()
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._original_termios: list | None = None
        self._write_log_path: str = os.environ.get("OXISQL_WRITE_LOG", "")

    # -- start / stop -------------------------------------------------------

    def start(self) -> None:
        """Enable raw mode and bracketed paste."""
        fd = sys.stdin.fileno()
        if os.isatty(fd):
            self._original_termios = termios.tcgetattr(fd)
            tty.setraw(fd)
        self._raw_write(_BRACKETED_PASTE_ENABLE)

    def stop(self) -> None:
        """Restore the terminal state saved by :meth:`start`."""
        self._raw_write(_BRACKETED_PASTE_DISABLE)
        self._stdin_buffer.clear()

        if self._original_termios is not None:
            termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._original_termios)
            self._original_termios = None

    # -- input --------------------------------------------------------------

    def read_key(self) -> str:
        """Block until a complete key sequence arrives and return it."""
        fd = sys.stdin.fileno()
        while True:
            sequence = self._stdin_buffer.next_sequence()
            if sequence is not None:
                return sequence

            timeout = _ESCAPE_TIMEOUT if self._stdin_buffer.has_pending() else None
            ready, _, _ = select.select([fd], [], [], timeout)
            if not ready:
                self._stdin_buffer.flush()
                continue

            raw = os.read(fd, 4096)
            if not raw:
                raise EOFError("stdin closed")
            self._stdin_buffer.process(self._decoder.decode(raw))

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write data to stdout and optionally to the write log."""
        self._raw_write(data)

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a") as f:
                    f.write(data)
            except OSError:
                pass

    def clear_line(self) -> None:
        self._raw_write(_CLEAR_LINE)

    def clear_screen(self) -> None:
        self._raw_write(_CLEAR_SCREEN)

    def move_cursor_left(self, columns: int) -> None:
        if columns > 0:
            self._raw_write(_CURSOR_LEFT_FMT.format(columns))

    # -- private ------------------------------------------------------------

    def _raw_write(self, data: str) -> None:
        sys.stdout.write(data)
        sys.stdout.flush()
