"""Single-line query editor with history recall and symbol completion.

``EditorSession`` is the terminal-facing state machine of the shell.  It
consumes one key sequence at a time, updates a :class:`QueryBuffer` and
cursor, consults the history and symbol tries and redraws the prompt line
after every key.  A request ends when a statement ending in the terminator
is submitted, or when end-of-input arrives on an empty buffer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from oxisql.completion import HistoryRecall, SymbolCompleter
from oxisql.keybindings import EditorAction, EditorKeybindingsConfig, EditorKeybindingsManager
from oxisql.keys import is_printable_input
from oxisql.query_buffer import QueryBuffer
from oxisql.stdin_buffer import BRACKETED_PASTE_END, BRACKETED_PASTE_START
from oxisql.terminal import Terminal
from oxisql.trie import PrefixTrie
from oxisql.utils import pad_start, visible_width

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "oxisql> "
STATEMENT_TERMINATOR = ";"
CONTINUATION_MARKER = "-> "


@dataclass
class EditorConfig:
    """Features and presentation of an :class:`EditorSession`."""

    prompt: str = DEFAULT_PROMPT
    history_enabled: bool = True
    symbol_completion_enabled: bool = True
    terminator: str = STATEMENT_TERMINATOR
    keybindings: EditorKeybindingsConfig | None = None


class EditorSession:
    """Reads queries from a terminal, one key at a time.

    The session owns both tries for its whole lifetime; the buffer, cursor
    and completion state are reset at the start of every request.
    """

    def __init__(
        self,
        terminal: Terminal,
        history_trie: PrefixTrie | None = None,
        symbol_trie: PrefixTrie | None = None,
        config: EditorConfig | None = None,
    ) -> None:
        self.terminal = terminal
        self.history_trie = history_trie if history_trie is not None else PrefixTrie()
        self.symbol_trie = symbol_trie if symbol_trie is not None else PrefixTrie()
        self.config = config or EditorConfig()
        self._keybindings = EditorKeybindingsManager(self.config.keybindings)

        self._buffer = QueryBuffer()
        self._cursor: int = 0
        self._history = HistoryRecall(self.history_trie)
        self._completer = SymbolCompleter(self.symbol_trie)

        self._done: bool = False
        self._result: str | None = None

    # -- state --------------------------------------------------------------

    @property
    def buffer(self) -> QueryBuffer:
        return self._buffer

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def done(self) -> bool:
        return self._done

    @property
    def result(self) -> str | None:
        """Submitted text, or ``None`` after end-of-input."""
        return self._result

    @property
    def history_offset(self) -> int:
        return self._history.offset

    # -- request lifecycle --------------------------------------------------

    def begin(self) -> None:
        """Reset per-request state."""
        self._buffer.clear()
        self._cursor = 0
        self._history.reset("")
        self._completer.reset()
        self._done = False
        self._result = None

    def read_query(self) -> str | None:
        """Run one input request.

        Returns the submitted text (ending with the terminator), or ``None``
        when the user signals end of input.
        """
        self.begin()
        self.terminal.start()
        try:
            self.redraw()
            while not self._done:
                try:
                    data = self.terminal.read_key()
                except EOFError:
                    self._finish(None)
                    break
                self.handle_input(data)
            self.terminal.write("\r\n")
        finally:
            self.terminal.stop()
        return self._result

    # -- input handling -----------------------------------------------------

    def handle_input(self, data: str) -> None:
        """Apply one key sequence, then redraw."""
        if data.startswith(BRACKETED_PASTE_START):
            self._completer.reset()
            self._handle_paste(data)
            self.redraw()
            return

        action = self._keybindings.action_for(data)
        if action != "complete":
            self._completer.reset()

        if action is not None:
            self._dispatch(action)
        elif is_printable_input(data):
            self._insert_text(data)
        else:
            logger.debug("Unknown key: %r", data)

        self.redraw()

    def _dispatch(self, action: EditorAction) -> None:  # noqa: C901
        if action == "cursorLeft":
            self._cursor = max(self._buffer.line_start, self._cursor - 1)
        elif action == "cursorRight":
            self._cursor = min(len(self._buffer), self._cursor + 1)
        elif action == "deleteCharBackward":
            self._handle_backspace()
        elif action == "historyPrevious":
            if self.config.history_enabled:
                self._recall(self._history.previous)
        elif action == "historyNext":
            if self.config.history_enabled:
                self._recall(self._history.next)
        elif action == "complete":
            if self.config.symbol_completion_enabled:
                self._handle_complete()
        elif action == "endOfInput":
            if len(self._buffer) == 0:
                self._finish(None)
        elif action == "submit":
            self._handle_submit()

    def _recall(self, step: Callable[[QueryBuffer], int | None]) -> None:
        continued = self._buffer.has_breaks
        cursor = step(self._buffer)
        if cursor is None:
            return
        self._cursor = cursor
        # Recall replaced the whole query; show it on a new prompt line.
        if continued:
            self.terminal.write("\r\n")

    def _insert_text(self, text: str) -> None:
        for ch in text:
            self._buffer.insert_char(self._cursor, ch)
            self._cursor += 1
        self._history.reset(self._buffer.real)

    def _handle_paste(self, data: str) -> None:
        content = data[len(BRACKETED_PASTE_START) :]
        if content.endswith(BRACKETED_PASTE_END):
            content = content[: -len(BRACKETED_PASTE_END)]
        content = content.replace("\r\n", " ").replace("\r", " ").replace("\n", " ")
        if is_printable_input(content):
            self._insert_text(content)

    def _handle_backspace(self) -> None:
        if self._cursor > self._buffer.line_start:
            self._cursor -= 1
            self._buffer.delete_at(self._cursor)
        self._history.reset(self._buffer.real)

    def _handle_complete(self) -> None:
        cursor = self._completer.complete(self._buffer, self._cursor)
        if cursor is not None:
            self._cursor = cursor
            self._history.reset(self._buffer.real)

    def _handle_submit(self) -> None:
        if self._buffer.last_char() == self.config.terminator:
            self._finish(self._buffer.real)
            return
        self._buffer.break_line()
        self._cursor = len(self._buffer)
        self.terminal.write("\r\n")

    def _finish(self, result: str | None) -> None:
        self._done = True
        self._result = result

    # -- rendering ----------------------------------------------------------

    def current_prompt(self) -> str:
        if self._buffer.has_breaks:
            return pad_start(CONTINUATION_MARKER, visible_width(self.config.prompt))
        return self.config.prompt

    def redraw(self) -> None:
        """Redraw the prompt line and place the cursor; safe to repeat."""
        self.terminal.clear_line()
        self.terminal.write(f"\r{self.current_prompt()}{self._buffer.display_line()}")
        self.terminal.move_cursor_left(visible_width(self._buffer[self._cursor :]))
