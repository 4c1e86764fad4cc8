"""Editor keybindings manager."""

from __future__ import annotations

import logging
from typing import Literal, get_args

from oxisql.keys import KeyId, matches_key

logger = logging.getLogger(__name__)

EditorAction = Literal[
    # Cursor movement
    "cursorLeft",
    "cursorRight",
    # Deletion
    "deleteCharBackward",
    # History
    "historyPrevious",
    "historyNext",
    # Completion
    "complete",
    # Input control
    "submit",
    "endOfInput",
]

EDITOR_ACTIONS: tuple[str, ...] = get_args(EditorAction)

EditorKeybindingsConfig = dict[EditorAction, KeyId | list[KeyId]]

DEFAULT_EDITOR_KEYBINDINGS: dict[EditorAction, KeyId | list[KeyId]] = {
    # Cursor movement
    "cursorLeft": ["left", "ctrl+b"],
    "cursorRight": ["right", "ctrl+f"],
    # Deletion
    "deleteCharBackward": "backspace",
    # History
    "historyPrevious": ["up", "ctrl+p"],
    "historyNext": ["down", "ctrl+n"],
    # Completion
    "complete": "tab",
    # Input control
    "submit": "enter",
    "endOfInput": "ctrl+d",
}


def _as_key_list(keys: KeyId | list[KeyId]) -> list[KeyId]:
    return list(keys) if isinstance(keys, list) else [keys]


def _valid_keys(action: str, keys: object) -> list[KeyId]:
    """Key ids bound to *action*, without entries that are not strings."""
    valid: list[KeyId] = []
    for key in keys if isinstance(keys, list) else [keys]:
        if isinstance(key, str):
            valid.append(key)
        else:
            logger.warning("Ignoring non-string key %r bound to %r", key, action)
    return valid


class EditorKeybindingsManager:
    """Resolves raw key input to editor actions.

    User bindings replace the defaults of the actions they name; actions
    they leave out keep their default keys.
    """

    def __init__(self, config: EditorKeybindingsConfig | None = None) -> None:
        self._bindings: dict[EditorAction, list[KeyId]] = {}
        self.set_config(config or {})

    def set_config(self, config: EditorKeybindingsConfig) -> None:
        """Rebuild the bindings from the defaults plus *config*."""
        bindings = {action: _as_key_list(keys) for action, keys in DEFAULT_EDITOR_KEYBINDINGS.items()}
        for action, keys in config.items():
            if action not in EDITOR_ACTIONS:
                logger.warning("Ignoring keybinding for unknown action %r", action)
                continue
            bindings[action] = _valid_keys(action, keys)
        self._bindings = bindings

    def matches(self, data: str, action: EditorAction) -> bool:
        return any(matches_key(data, key) for key in self._bindings.get(action, ()))

    def action_for(self, data: str) -> EditorAction | None:
        """Return the first action bound to *data*, in declaration order."""
        return next((action for action in EDITOR_ACTIONS if self.matches(data, action)), None)
