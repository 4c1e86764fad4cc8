"""Display-width helpers for terminal output."""

from __future__ import annotations

import functools
import re
import unicodedata

import grapheme
from wcwidth import wcwidth

# CSI sequences (colors, cursor movement) take no columns.
_ANSI_CSI = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")


def _is_emoji_modifier(cp: int) -> bool:
    # VS16, ZWJ, skin tones, regional indicators
    return cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF


def cluster_width(cluster: str) -> int:
    """Columns taken by one grapheme cluster.

    Clusters led by a control, format or combining character take none,
    multi-codepoint emoji take two, and anything else is measured by
    wcwidth on its leading code point.
    """
    if not cluster:
        return 0
    if len(cluster) > 1 and any(_is_emoji_modifier(ord(ch)) for ch in cluster):
        return 2

    lead = cluster[0]
    category = unicodedata.category(lead)
    if category in ("Cc", "Cf") or category.startswith("M"):
        return 0
    return max(wcwidth(lead), 0)


@functools.lru_cache(maxsize=512)
def _measure(plain: str) -> int:
    return sum(cluster_width(c) for c in grapheme.graphemes(plain))


def visible_width(text: str) -> int:
    """Columns *text* occupies on screen, ignoring ANSI CSI sequences."""
    if not text:
        return 0
    plain = _ANSI_CSI.sub("", text)
    if plain.isascii() and plain.isprintable():
        return len(plain)
    return _measure(plain)


def pad_start(text: str, width: int) -> str:
    """Right-align *text* in a field of *width* display columns."""
    return " " * max(0, width - visible_width(text)) + text
