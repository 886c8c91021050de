"""Terminal text utilities: ANSI handling, width measurement, byte/text conversion.

Provides functions for measuring the display width of grapheme clusters,
skipping the escape sequences a styled prompt may carry, and truncating hint
text to a column budget.
"""

from __future__ import annotations

import unicodedata

import grapheme
import wcwidth as _wcwidth

# Final bytes that terminate a CSI sequence we know how to skip in a prompt.
_CSI_FINAL_BYTES = frozenset(b"ABCDEFGHJKSTfm")


# ---------------------------------------------------------------------------
# Byte <-> text
# ---------------------------------------------------------------------------


def decode(data: bytes) -> str:
    """Decode buffer bytes to text without losing undecodable bytes."""
    return data.decode("utf-8", errors="surrogateescape")


def encode(text: str) -> bytes:
    """Inverse of :func:`decode`."""
    return text.encode("utf-8", errors="surrogateescape")


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------


def grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster.

    Rules:
    1. Zero-width characters (control, combining marks, etc.) -> 0
    2. Emoji (multi-codepoint, contains VS16 U+FE0F, ZWJ sequences, etc.) -> 2
    3. Otherwise delegate to wcwidth for the first meaningful codepoint.
    """
    if not g:
        return 0

    # Single codepoint fast path
    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        # Lone surrogate escapes stand for undecodable bytes; show one cell.
        if 0xDC80 <= cp <= 0xDCFF:
            return 1
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):  # VS16, ZWJ
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF:  # Skin tone modifiers
            return 2
        if 0x1F1E6 <= cp <= 0x1F1FF:  # Regional indicators
            return 2

    first = g[0]
    if ord(first) >= 0x1F000 or 0x2600 <= ord(first) <= 0x27BF:
        return 2

    cat = unicodedata.category(first)
    if cat.startswith("M") or cat == "Cf":
        return 0

    return max(_wcwidth.wcwidth(first), 0)


def text_width(text: str) -> int:
    """Sum of grapheme widths of *text* (no escape handling)."""
    if text.isascii() and text.isprintable():
        return len(text)
    return sum(grapheme_width(g) for g in grapheme.graphemes(text))


def truncate_to_columns(text: str, max_cols: int) -> str:
    """Return the longest prefix of *text* that fits in *max_cols* cells."""
    if max_cols <= 0:
        return ""
    used = 0
    out: list[str] = []
    for g in grapheme.graphemes(text):
        w = grapheme_width(g)
        if used + w > max_cols:
            break
        used += w
        out.append(g)
    return "".join(out)


# ---------------------------------------------------------------------------
# Escape sequences embedded in prompts
# ---------------------------------------------------------------------------


def ansi_escape_length(data: bytes, pos: int = 0) -> int:
    """Length of the CSI sequence starting at *pos*, or 0 if there is none.

    Only ``ESC [`` sequences ending in a cursor, erase or SGR final byte are
    recognised; anything else is treated as printable text.
    """
    if len(data) - pos <= 2 or data[pos : pos + 2] != b"\x1b[":
        return 0
    i = pos + 2
    while i < len(data):
        b = data[i]
        i += 1
        if b in _CSI_FINAL_BYTES:
            return i - pos
    return 0


def strip_ansi(data: bytes) -> bytes:
    """Remove the escape sequences recognised by :func:`ansi_escape_length`."""
    out = bytearray()
    pos = 0
    while pos < len(data):
        n = ansi_escape_length(data, pos)
        if n:
            pos += n
            continue
        out.append(data[pos])
        pos += 1
    return bytes(out)
