"""Prefix trie with insertion ordering and JSON persistence.

Nodes are stored in a flat arena addressed by integer indices; node 0 is the
root.  Every terminal node records the word it completes and the value of
the trie's insertion counter at the time the word was last inserted, so
lookups can return matches in chronological order.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

_ROOT = 0


class TrieFormatError(ValueError):
    """Raised when a persisted trie document cannot be decoded."""


@dataclass
class _Node:
    children: dict[str, int] = field(default_factory=dict)
    word: str | None = None
    index: int | None = None


class PrefixTrie:
    """Ordered prefix index over strings."""

    def __init__(self) -> None:
        self._nodes: list[_Node] = [_Node()]
        self._counter: int = 0
        self._size: int = 0

    # -- construction -------------------------------------------------------

    @classmethod
    def from_words(cls, words: Iterable[str]) -> PrefixTrie:
        """Build a trie by inserting *words* in order."""
        trie = cls()
        for word in words:
            trie.insert(word)
        return trie

    # -- properties ---------------------------------------------------------

    @property
    def counter(self) -> int:
        """The index the next inserted word will receive."""
        return self._counter

    def __len__(self) -> int:
        return self._size

    def __contains__(self, word: object) -> bool:
        if not isinstance(word, str):
            return False
        node = self._walk(word)
        return node is not None and self._nodes[node].word is not None

    # -- core operations ----------------------------------------------------

    def insert(self, word: str) -> None:
        """Insert *word*, making it the most recent entry.

        Re-inserting an existing word only refreshes its insertion index.
        """
        node = _ROOT
        for ch in word:
            child = self._nodes[node].children.get(ch)
            if child is None:
                child = len(self._nodes)
                self._nodes.append(_Node())
                self._nodes[node].children[ch] = child
            node = child

        terminal = self._nodes[node]
        if terminal.word is None:
            self._size += 1
        terminal.word = word
        terminal.index = self._counter
        self._counter += 1

    def search_all(self, prefix: str) -> list[str]:
        """Return every stored word starting with *prefix*, oldest first."""
        start = self._walk(prefix)
        if start is None:
            return []

        found: list[_Node] = []
        stack = [start]
        while stack:
            node = self._nodes[stack.pop()]
            if node.word is not None:
                found.append(node)
            stack.extend(node.children.values())

        # Sibling order carries no meaning; chronology comes from the index.
        found.sort(key=lambda n: n.index)
        return [n.word for n in found]

    def _walk(self, prefix: str) -> int | None:
        node = _ROOT
        for ch in prefix:
            child = self._nodes[node].children.get(ch)
            if child is None:
                return None
            node = child
        return node

    # -- serialization ------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": FORMAT_VERSION,
            "counter": self._counter,
            "nodes": [
                {"children": dict(n.children), "word": n.word, "index": n.index}
                for n in self._nodes
            ],
        }

    @classmethod
    def from_dict(cls, data: Any) -> PrefixTrie:
        """Rebuild a trie from :meth:`to_dict` output.

        Raises :class:`TrieFormatError` unless *data* describes a well-formed
        tree rooted at node 0.
        """
        if not isinstance(data, dict):
            raise TrieFormatError("trie document must be an object")
        if data.get("version") != FORMAT_VERSION:
            raise TrieFormatError(f"unsupported trie version: {data.get('version')!r}")

        counter = data.get("counter")
        raw_nodes = data.get("nodes")
        if not isinstance(counter, int) or isinstance(counter, bool) or counter < 0:
            raise TrieFormatError("counter must be a non-negative integer")
        if not isinstance(raw_nodes, list) or not raw_nodes:
            raise TrieFormatError("nodes must be a non-empty list")

        nodes: list[_Node] = []
        referenced: set[int] = set()
        size = 0
        for position, raw in enumerate(raw_nodes):
            if not isinstance(raw, dict):
                raise TrieFormatError(f"node {position} must be an object")
            children = raw.get("children", {})
            word = raw.get("word")
            index = raw.get("index")
            if not isinstance(children, dict):
                raise TrieFormatError(f"node {position}: children must be an object")

            for edge, child in children.items():
                if len(edge) != 1:
                    raise TrieFormatError(f"node {position}: edge {edge!r} is not one character")
                if not isinstance(child, int) or isinstance(child, bool):
                    raise TrieFormatError(f"node {position}: child index must be an integer")
                if child <= _ROOT or child >= len(raw_nodes):
                    raise TrieFormatError(f"node {position}: child index {child} out of range")
                if child in referenced:
                    raise TrieFormatError(f"node {child} has more than one parent")
                referenced.add(child)

            if word is not None:
                if not isinstance(word, str):
                    raise TrieFormatError(f"node {position}: word must be a string")
                if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < counter:
                    raise TrieFormatError(f"node {position}: invalid insertion index {index!r}")
                size += 1
            else:
                index = None

            nodes.append(_Node(children=dict(children), word=word, index=index))

        # Unique parents alone still admit detached cycles; require reachability.
        # A stored word must spell the edge path that leads to its node.
        reachable = 0
        seen_indices: set[int] = set()
        stack: list[tuple[int, str]] = [(_ROOT, "")]
        while stack:
            position, path = stack.pop()
            node = nodes[position]
            reachable += 1
            if node.word is not None:
                if node.word != path:
                    raise TrieFormatError(
                        f"node {position}: word {node.word!r} does not match path {path!r}"
                    )
                if node.index in seen_indices:
                    raise TrieFormatError(
                        f"node {position}: insertion index {node.index} is not unique"
                    )
                seen_indices.add(node.index)
            stack.extend((child, path + edge) for edge, child in node.children.items())
        if reachable != len(nodes):
            raise TrieFormatError("document contains unreachable nodes")

        trie = cls()
        trie._nodes = nodes
        trie._counter = counter
        trie._size = size
        return trie

    def save(self, path: str | os.PathLike[str]) -> None:
        """Write the trie to *path*, replacing any existing file atomically."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"

        fd, tmp_path = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, target)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> PrefixTrie:
        """Read a trie saved by :meth:`save`.

        Raises :class:`FileNotFoundError` if *path* does not exist and
        :class:`TrieFormatError` if its content cannot be decoded.
        """
        content = Path(path).read_text(encoding="utf-8")
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise TrieFormatError(f"invalid JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def load_or_new(cls, path: str | os.PathLike[str]) -> PrefixTrie:
        """Like :meth:`load`, but fall back to an empty trie on any failure."""
        try:
            return cls.load(path)
        except FileNotFoundError:
            logger.debug("No trie at %s, starting empty", path)
        except (OSError, UnicodeDecodeError, TrieFormatError) as e:
            logger.warning("Could not load trie from %s, starting empty: %s", path, e)
        return cls()
