"""Tests for oxisql.keys -- keyboard input parsing and matching."""

from __future__ import annotations

import pytest

from oxisql.keys import (
    LEGACY_KEY_SEQUENCES,
    LEGACY_MODIFIED_SEQUENCES,
    is_printable_input,
    matches_key,
    normalize_key_id,
    parse_key,
)


# ---------------------------------------------------------------------------
# parse_key
# ---------------------------------------------------------------------------


class TestParseKey:
    @pytest.mark.parametrize(
        "data, expected",
        [
            ("\x1b[A", "up"),
            ("\x1b[B", "down"),
            ("\x1b[C", "right"),
            ("\x1b[D", "left"),
            ("\x1bOA", "up"),
            ("\x1b[3~", "delete"),
            ("\x1b[Z", "shift+tab"),
        ],
    )
    def test_legacy_sequences(self, data, expected):
        assert parse_key(data) == expected

    def test_modified_arrows(self):
        assert parse_key("\x1b[1;5D") == "ctrl+left"
        assert parse_key("\x1b[1;2A") == "shift+up"
        assert parse_key("\x1b[1;3C") == "alt+right"
        assert parse_key("\x1b[1;8B") == "ctrl+shift+alt+down"

    @pytest.mark.parametrize(
        "data, expected",
        [
            ("\r", "enter"),
            ("\n", "enter"),
            ("\t", "tab"),
            (" ", "space"),
            ("\x7f", "backspace"),
            ("\x08", "backspace"),
            ("\x1b", "escape"),
            ("\x00", "ctrl+space"),
        ],
    )
    def test_single_byte_keys(self, data, expected):
        assert parse_key(data) == expected

    def test_ctrl_letters(self):
        assert parse_key("\x04") == "ctrl+d"
        assert parse_key("\x01") == "ctrl+a"
        assert parse_key("\x10") == "ctrl+p"

    def test_alt_combinations(self):
        assert parse_key("\x1bb") == "alt+b"
        assert parse_key("\x1bB") == "shift+alt+b"
        assert parse_key("\x1b\r") == "alt+enter"
        assert parse_key("\x1b\x7f") == "alt+backspace"

    def test_printable(self):
        assert parse_key("a") == "a"
        assert parse_key("A") == "A"
        assert parse_key(";") == ";"

    def test_unknown_input(self):
        assert parse_key("") is None
        assert parse_key("\x1b[99x") is None
        assert parse_key("abc") is None

    def test_every_legacy_sequence_parses(self):
        for data, name in {**LEGACY_KEY_SEQUENCES, **LEGACY_MODIFIED_SEQUENCES}.items():
            assert parse_key(data) == name


# ---------------------------------------------------------------------------
# normalize_key_id / matches_key
# ---------------------------------------------------------------------------


class TestNormalizeKeyId:
    def test_modifier_order_is_canonical(self):
        assert normalize_key_id("alt+ctrl+x") == "ctrl+alt+x"
        assert normalize_key_id("shift+ctrl+up") == "ctrl+shift+up"

    def test_aliases(self):
        assert normalize_key_id("esc") == "escape"
        assert normalize_key_id("Return") == "enter"
        assert normalize_key_id("PageUp") == "pageUp"

    def test_ctrl_letters_are_case_insensitive(self):
        assert normalize_key_id("Ctrl+D") == "ctrl+d"

    def test_invalid(self):
        assert normalize_key_id("") is None
        assert normalize_key_id("ctrl+") is None
        assert normalize_key_id("hyper+x") is None


class TestMatchesKey:
    def test_matches_named_keys(self):
        assert matches_key("\x1b[A", "up")
        assert matches_key("\t", "tab")
        assert matches_key("\r", "enter")
        assert matches_key("\x04", "ctrl+d")

    def test_non_matching(self):
        assert not matches_key("\x1b[A", "down")
        assert not matches_key("a", "ctrl+a")
        assert not matches_key("\x1b[99x", "up")

    def test_printable_is_case_sensitive_without_modifiers(self):
        assert matches_key("a", "a")
        assert not matches_key("A", "a")


class TestIsPrintableInput:
    def test_plain_text(self):
        assert is_printable_input("SELECT 1;")
        assert is_printable_input("日本")

    def test_control_characters(self):
        assert not is_printable_input("")
        assert not is_printable_input("\x1b[A")
        assert not is_printable_input("a\tb")
        assert not is_printable_input("\x7f")
