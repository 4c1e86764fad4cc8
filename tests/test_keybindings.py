"""Tests for oxisql.keybindings -- editor keybindings manager."""

from __future__ import annotations

import logging

from oxisql.keybindings import (
    DEFAULT_EDITOR_KEYBINDINGS,
    EDITOR_ACTIONS,
    EditorKeybindingsManager,
)


# ---------------------------------------------------------------------------
# DEFAULT_EDITOR_KEYBINDINGS constant
# ---------------------------------------------------------------------------


class TestDefaultEditorKeybindings:
    """DEFAULT_EDITOR_KEYBINDINGS binds every editor action."""

    def test_every_action_has_a_default(self):
        for action in EDITOR_ACTIONS:
            assert action in DEFAULT_EDITOR_KEYBINDINGS, f"Missing action: {action}"

    def test_core_bindings(self):
        assert DEFAULT_EDITOR_KEYBINDINGS["submit"] == "enter"
        assert DEFAULT_EDITOR_KEYBINDINGS["complete"] == "tab"
        assert DEFAULT_EDITOR_KEYBINDINGS["endOfInput"] == "ctrl+d"
        assert "up" in DEFAULT_EDITOR_KEYBINDINGS["historyPrevious"]
        assert "down" in DEFAULT_EDITOR_KEYBINDINGS["historyNext"]


# ---------------------------------------------------------------------------
# EditorKeybindingsManager
# ---------------------------------------------------------------------------


class TestEditorKeybindingsManager:
    def test_default_actions(self):
        kb = EditorKeybindingsManager()
        assert kb.action_for("\x1b[D") == "cursorLeft"
        assert kb.action_for("\x1b[C") == "cursorRight"
        assert kb.action_for("\x7f") == "deleteCharBackward"
        assert kb.action_for("\x1b[A") == "historyPrevious"
        assert kb.action_for("\x1b[B") == "historyNext"
        assert kb.action_for("\t") == "complete"
        assert kb.action_for("\r") == "submit"
        assert kb.action_for("\x04") == "endOfInput"

    def test_emacs_style_aliases(self):
        kb = EditorKeybindingsManager()
        assert kb.action_for("\x02") == "cursorLeft"
        assert kb.action_for("\x06") == "cursorRight"
        assert kb.action_for("\x10") == "historyPrevious"
        assert kb.action_for("\x0e") == "historyNext"

    def test_unbound_input(self):
        kb = EditorKeybindingsManager()
        assert kb.action_for("a") is None
        assert kb.action_for("\x1b[3~") is None

    def test_matches(self):
        kb = EditorKeybindingsManager()
        assert kb.matches("\t", "complete")
        assert not kb.matches("\t", "submit")

    def test_override_replaces_default(self):
        kb = EditorKeybindingsManager({"complete": "ctrl+space"})
        assert kb.action_for("\x00") == "complete"
        assert kb.action_for("\t") is None
        assert not kb.matches("\t", "complete")

    def test_override_with_list(self):
        kb = EditorKeybindingsManager({"endOfInput": ["ctrl+d", "escape"]})
        assert kb.action_for("\x1b") == "endOfInput"
        assert kb.action_for("\x04") == "endOfInput"

    def test_unknown_action_is_ignored(self, caplog):
        with caplog.at_level(logging.WARNING, logger="oxisql.keybindings"):
            kb = EditorKeybindingsManager({"teleport": "ctrl+t"})
        assert kb.action_for("\x14") is None
        assert "teleport" in caplog.text

    def test_set_config_rebuilds(self):
        kb = EditorKeybindingsManager({"submit": "ctrl+j"})
        kb.set_config({})
        assert kb.action_for("\r") == "submit"

    def test_non_string_keys_are_dropped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="oxisql.keybindings"):
            kb = EditorKeybindingsManager({"submit": 5, "complete": ["tab", None]})
        assert kb.action_for("\r") is None
        assert kb.action_for("a") is None
        assert kb.action_for("\t") == "complete"
        assert "5" in caplog.text
