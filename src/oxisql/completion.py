"""History recall and symbol tab-completion over prefix tries.

Both helpers operate on a :class:`~oxisql.query_buffer.QueryBuffer` owned
by the editor and return the new cursor position when they change it, or
``None`` when the key should be ignored.
"""

from __future__ import annotations

from oxisql.query_buffer import QueryBuffer
from oxisql.trie import PrefixTrie

WORD_DELIMITER = " "


def extract_current_word(text: str, cursor: int, start: int = 0) -> str:
    """Return the run of non-space characters ending at *cursor*.

    The scan never reaches before *start*.
    """
    begin = cursor
    while begin > start and text[begin - 1] != WORD_DELIMITER:
        begin -= 1
    return text[begin:cursor]


class HistoryRecall:
    """Walks previously submitted commands matching the typed prefix."""

    def __init__(self, trie: PrefixTrie) -> None:
        self._trie = trie
        self._candidates: list[str] = []
        self._offset: int = 0

    @property
    def candidates(self) -> list[str]:
        return list(self._candidates)

    @property
    def offset(self) -> int:
        """How far back the current selection is; 0 means none."""
        return self._offset

    def refresh(self, text: str) -> None:
        self._candidates = self._trie.search_all(text)

    def reset(self, text: str) -> None:
        self._offset = 0
        self.refresh(text)

    def previous(self, buffer: QueryBuffer) -> int | None:
        """Select the next older match, clamping at the oldest."""
        if self._offset == 0:
            self.refresh(buffer.real)
        if not self._candidates:
            return None
        if self._offset < len(self._candidates):
            self._offset += 1
        return self._select(buffer)

    def next(self, buffer: QueryBuffer) -> int | None:
        """Select the next newer match; stepping past the newest clears."""
        if not self._candidates:
            return None
        if self._offset > 0:
            self._offset -= 1
        if self._offset == 0:
            buffer.clear()
            self.refresh(buffer.real)
            return 0
        return self._select(buffer)

    def _select(self, buffer: QueryBuffer) -> int:
        buffer.set(self._candidates[len(self._candidates) - self._offset])
        return len(buffer)


class SymbolCompleter:
    """Replaces the word under the cursor with schema symbols.

    Pressing the completion key again right after a completion rotates
    through the remaining matches of the word originally typed.
    """

    def __init__(self, trie: PrefixTrie) -> None:
        self._trie = trie
        self._index: int = 0
        self._last_word: str | None = None
        self._last_replacement: str | None = None

    @property
    def last_word(self) -> str | None:
        return self._last_word

    def reset(self) -> None:
        self._index = 0
        self._last_word = None
        self._last_replacement = None

    def complete(self, buffer: QueryBuffer, cursor: int) -> int | None:
        text = buffer.real
        word = extract_current_word(text, cursor, buffer.line_start)

        if self._last_replacement is not None and word == self._last_replacement:
            prefix, cycling = self._last_word or "", True
        else:
            prefix, cycling = word, word == self._last_word

        matches = self._trie.search_all(prefix)
        if not matches:
            self._index = 0
            self._last_word = word
            self._last_replacement = None
            return None

        self._index = (self._index + 1) % len(matches) if cycling else 0
        replacement = matches[self._index]
        start = cursor - len(word)
        buffer.replace(start, cursor, replacement)

        self._last_word = prefix
        self._last_replacement = replacement
        return start + len(replacement)
