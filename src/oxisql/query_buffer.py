"""Text buffer for the query being composed."""

from __future__ import annotations

LINE_BREAK = "\n"


class QueryBuffer:
    """Holds the real text that will be submitted and the visible text shown.

    The two sequences move in lock-step for every insert and delete.  The
    only divergence is a display-only line break added by
    :meth:`break_line`, which lands in the visible text but never in the
    real one.  Removing those breaks from the visible text always yields the
    real text.
    """

    def __init__(self) -> None:
        self._real: list[str] = []
        self._visible: list[str] = []
        # Real offsets at which a display-only break sits, ascending.
        self._breaks: list[int] = []

    # -- accessors ----------------------------------------------------------

    @property
    def real(self) -> str:
        return "".join(self._real)

    @property
    def visible(self) -> str:
        return "".join(self._visible)

    @property
    def line_start(self) -> int:
        """Real offset where the current display line begins."""
        return self._breaks[-1] if self._breaks else 0

    @property
    def has_breaks(self) -> bool:
        return bool(self._breaks)

    def display_line(self) -> str:
        """Visible text after the last display-only break."""
        return self.real[self.line_start :]

    def last_char(self) -> str | None:
        return self._real[-1] if self._real else None

    def __len__(self) -> int:
        return len(self._real)

    def __getitem__(self, index: int | slice) -> str:
        if isinstance(index, slice):
            return "".join(self._real[index])
        return self._real[index]

    def __str__(self) -> str:
        return self.visible

    # -- mutation -----------------------------------------------------------

    def insert_char(self, cursor: int, c: str) -> None:
        """Insert *c* at *cursor*; the caller advances the cursor."""
        self._visible.insert(self._visible_offset(cursor), c)
        self._real.insert(cursor, c)
        self._breaks = [b + 1 if b > cursor else b for b in self._breaks]

    def delete_at(self, cursor: int) -> None:
        """Remove the character at *cursor*, if there is one."""
        if not self._real or not 0 <= cursor < len(self._real):
            return
        del self._visible[self._visible_offset(cursor)]
        del self._real[cursor]
        self._breaks = [b - 1 if b > cursor else b for b in self._breaks]

    def replace(self, start: int, end: int, text: str) -> None:
        """Replace the real range ``[start, end)`` with *text*."""
        for _ in range(end - start):
            self.delete_at(start)
        for offset, c in enumerate(text):
            self.insert_char(start + offset, c)

    def set(self, text: str) -> None:
        """Replace both sequences wholesale, dropping display breaks."""
        self._real = list(text)
        self._visible = list(text)
        self._breaks = []

    def clear(self) -> None:
        self._real.clear()
        self._visible.clear()
        self._breaks.clear()

    def break_line(self) -> None:
        """Start a new display line without changing the real text."""
        self._visible.append(LINE_BREAK)
        self._breaks.append(len(self._real))

    def _visible_offset(self, cursor: int) -> int:
        return cursor + sum(1 for b in self._breaks if b <= cursor)
