"""oxisql: interactive MySQL shell with a history- and schema-aware line editor."""

# Completion
from oxisql.completion import HistoryRecall, SymbolCompleter, extract_current_word

# Editor
from oxisql.editor import DEFAULT_PROMPT, EditorConfig, EditorSession

# Keybindings
from oxisql.keybindings import (
    DEFAULT_EDITOR_KEYBINDINGS,
    EditorAction,
    EditorKeybindingsManager,
)

# Keyboard input handling
from oxisql.keys import KeyId, matches_key, parse_key

# Query buffer
from oxisql.query_buffer import QueryBuffer

# Terminal
from oxisql.terminal import ProcessTerminal, Terminal

# Prefix trie
from oxisql.trie import PrefixTrie, TrieFormatError

__all__ = [
    # Completion
    "HistoryRecall",
    "SymbolCompleter",
    "extract_current_word",
    # Editor
    "DEFAULT_PROMPT",
    "EditorConfig",
    "EditorSession",
    # Keybindings
    "DEFAULT_EDITOR_KEYBINDINGS",
    "EditorAction",
    "EditorKeybindingsManager",
    # Keys
    "KeyId",
    "matches_key",
    "parse_key",
    # Query buffer
    "QueryBuffer",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    # Prefix trie
    "PrefixTrie",
    "TrieFormatError",
]
