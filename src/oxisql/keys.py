"""Keyboard input parsing and matching for the shell's line editor.

Translates raw terminal input (legacy xterm/VT sequences, control bytes and
plain characters) into key identifiers such as ``"up"``, ``"ctrl+d"`` or
``"shift+tab"``, and checks whether input matches a given identifier.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Type alias
# ---------------------------------------------------------------------------

KeyId = str

ESC = "\x1b"


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

_MODIFIER_ORDER = ("ctrl", "shift", "alt")

_KEY_ALIASES: dict[str, str] = {
    "esc": "escape",
    "return": "enter",
    "pageup": "pageUp",
    "pagedown": "pageDown",
}

# Legacy escape sequences -> key names
LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[4~": "end",
    "\x1b[5~": "pageUp",
    "\x1b[6~": "pageDown",
    "\x1b[7~": "home",
    "\x1b[8~": "end",
    "\x1b[Z": "shift+tab",
}

# xterm encodes modifiers as a parameter: 1 + bitmask(shift=1, alt=2, ctrl=4)
_CSI_FINAL_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}

_CSI_TILDE_KEYS: dict[str, str] = {
    "2": "insert",
    "3": "delete",
    "5": "pageUp",
    "6": "pageDown",
}


def _modifier_prefix(bits: int) -> str:
    return "".join(f"{name}+" for name in _MODIFIER_ORDER if bits & MODIFIERS[name])


def _build_modified_sequences() -> dict[str, str]:
    sequences: dict[str, str] = {}
    for bits in range(1, 8):
        param = bits + 1
        prefix = _modifier_prefix(bits)
        for final, name in _CSI_FINAL_KEYS.items():
            sequences[f"\x1b[1;{param}{final}"] = prefix + name
        for number, name in _CSI_TILDE_KEYS.items():
            sequences[f"\x1b[{number};{param}~"] = prefix + name
    return sequences


LEGACY_MODIFIED_SEQUENCES: dict[str, str] = _build_modified_sequences()


# ---------------------------------------------------------------------------
# Key identifiers
# ---------------------------------------------------------------------------


def normalize_key_id(key_id: KeyId) -> KeyId | None:
    """Return *key_id* in canonical form (``ctrl+shift+alt+<key>``).

    Returns ``None`` if *key_id* names no base key.
    """
    if not key_id:
        return None

    *modifiers, base = key_id.split("+")
    bits = 0
    for modifier in modifiers:
        lower = modifier.lower()
        if lower not in MODIFIERS:
            return None
        bits |= MODIFIERS[lower]

    if not base:
        return None
    if len(base) > 1:
        lower = base.lower()
        base = _KEY_ALIASES.get(lower, lower)
    elif bits & (MODIFIERS["ctrl"] | MODIFIERS["alt"]):
        base = base.lower()
    return _modifier_prefix(bits) + base


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_key(data: str) -> KeyId | None:
    """Parse raw terminal input and return the key identifier, or ``None``.

    The returned string uses the same format :func:`matches_key` expects:
    e.g. ``"a"``, ``"ctrl+a"``, ``"shift+up"``.
    """
    if not data:
        return None

    # --- Legacy escape sequences ---
    if data in LEGACY_MODIFIED_SEQUENCES:
        return LEGACY_MODIFIED_SEQUENCES[data]
    if data in LEGACY_KEY_SEQUENCES:
        return LEGACY_KEY_SEQUENCES[data]

    # --- Simple single-byte keys ---
    if data == ESC:
        return "escape"
    if data == "\r" or data == "\n":
        return "enter"
    if data == "\t":
        return "tab"
    if data == " ":
        return "space"
    if data == "\x7f" or data == "\x08":
        return "backspace"
    if data == "\x00":
        return "ctrl+space"

    # --- Ctrl + letter (0x01 - 0x1a) ---
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return "ctrl+" + chr(ord(data) + ord("a") - 1)

    # --- Alt + key (ESC prefix) ---
    if len(data) == 2 and data[0] == ESC:
        ch = data[1]
        if ch == "\r" or ch == "\n":
            return "alt+enter"
        if ch == "\x7f" or ch == "\x08":
            return "alt+backspace"
        if 1 <= ord(ch) <= 26:
            return "ctrl+alt+" + chr(ord(ch) + ord("a") - 1)
        if ch.isupper():
            return "shift+alt+" + ch.lower()
        if ch.isprintable():
            return "alt+" + ch.lower()

    # --- Plain printable character ---
    if len(data) == 1 and data.isprintable():
        return data

    return None


def matches_key(data: str, key_id: KeyId) -> bool:
    """Return ``True`` if *data* (raw terminal input) matches *key_id*."""
    parsed = parse_key(data)
    if parsed is None:
        return False
    return parsed == normalize_key_id(key_id)


def is_printable_input(data: str) -> bool:
    """Return ``True`` if *data* is plain text with no control characters."""
    if not data:
        return False
    return not any(
        ord(ch) < 32 or ord(ch) == 0x7F or (0x80 <= ord(ch) <= 0x9F)
        for ch in data
    )
