"""Shell settings loaded from a JSON file.

Precedence: CLI overrides > settings file > built-in defaults.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from oxisql.editor import DEFAULT_PROMPT, EditorConfig
from oxisql.keybindings import EditorKeybindingsConfig

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".oxisql"


def _settings_defaults() -> dict[str, Any]:
    """Default settings values."""
    return {
        "prompt": DEFAULT_PROMPT,
        "historyPath": default_history_path(),
        "historyEnabled": True,
        "symbolCompletion": True,
        "keybindings": {},
    }


def default_history_path() -> str:
    """Per-user cache location of the command history trie."""
    return os.path.join(os.path.expanduser("~"), ".cache", "oxisql", "queries.trie.json")


def default_settings_path() -> str:
    return os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME, "settings.json")


# --- Deep merge ---


def deep_merge_settings(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Return *base* updated with *overrides*.

    Nested objects such as ``keybindings`` merge key by key; any other value
    in *overrides* replaces the base value, and ``None`` leaves it alone.
    """
    result = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge_settings(result[key], value)
        else:
            result[key] = value
    return result


# --- SettingsManager ---


class SettingsManager:
    """Holds the merged shell settings.

    Build one with :meth:`create` (file backed) or :meth:`in_memory`.
    """

    def __init__(
        self,
        *,
        initial_settings: dict[str, Any],
        load_error: Exception | None = None,
    ) -> None:
        self._load_error = load_error
        self._settings = deep_merge_settings(_settings_defaults(), initial_settings)

    # --- Factory methods ---

    @classmethod
    def create(cls, settings_path: str | None = None) -> SettingsManager:
        """Create a settings manager backed by *settings_path*."""
        path = settings_path or default_settings_path()
        settings, error = _load_from_file(path)
        if error is not None:
            logger.warning("Ignoring unreadable settings file %s: %s", path, error)
        return cls(initial_settings=settings, load_error=error)

    @classmethod
    def in_memory(cls, settings: dict[str, Any] | None = None) -> SettingsManager:
        """Create an in-memory settings manager for testing."""
        return cls(initial_settings=settings or {})

    # --- Core operations ---

    def apply_overrides(self, overrides: dict[str, Any]) -> None:
        """Layer command-line overrides over the file and default settings."""
        self._settings = deep_merge_settings(self._settings, overrides)

    @property
    def settings(self) -> dict[str, Any]:
        """Merged settings; treat as read-only."""
        return self._settings

    @property
    def load_error(self) -> Exception | None:
        return self._load_error

    # --- Getters ---

    def get_prompt(self) -> str:
        return str(self._settings.get("prompt") or DEFAULT_PROMPT)

    def get_history_path(self) -> str:
        return os.path.expanduser(str(self._settings.get("historyPath") or default_history_path()))

    def get_history_enabled(self) -> bool:
        return bool(self._settings.get("historyEnabled", True))

    def get_symbol_completion(self) -> bool:
        return bool(self._settings.get("symbolCompletion", True))

    def get_keybindings(self) -> EditorKeybindingsConfig:
        keybindings = self._settings.get("keybindings")
        if not isinstance(keybindings, dict):
            return {}
        return dict(keybindings)

    def editor_config(self) -> EditorConfig:
        """Build the editor configuration described by these settings."""
        return EditorConfig(
            prompt=self.get_prompt(),
            history_enabled=self.get_history_enabled(),
            symbol_completion_enabled=self.get_symbol_completion(),
            keybindings=self.get_keybindings(),
        )


# --- File I/O helpers ---


def _load_from_file(path: str) -> tuple[dict[str, Any], Exception | None]:
    """Load settings from a JSON file. Returns (settings, error)."""
    if not os.path.exists(path):
        return {}, None
    try:
        content = Path(path).read_text(encoding="utf-8")
        settings = json.loads(content)
    except (OSError, ValueError) as e:
        # ValueError covers both JSONDecodeError and UnicodeDecodeError.
        return {}, e
    if not isinstance(settings, dict):
        return {}, ValueError("settings file must contain a JSON object")
    return settings, None
