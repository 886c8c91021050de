"""Pluggable character encoding strategies.

The edit buffer and render engine never assume one byte per character: every
cursor step and every width computation goes through an ``Encoding``. Two
strategies ship with the package:

* :class:`AsciiEncoding` -- one byte is one character is one column (default).
* :class:`Utf8Encoding` -- UTF-8 input, grapheme-cluster navigation and
  ``wcwidth`` column widths.

A strategy is always replaced as a whole; there is no way to swap only one of
its three operations.
"""

from __future__ import annotations

from typing import BinaryIO, Protocol

import grapheme

from pi.lineedit.utils import decode, encode, grapheme_width

# How far around the cursor to look when decoding a grapheme cluster.
_WINDOW = 64


class Encoding(Protocol):
    """Interface for character width and input decoding."""

    def prev_width(self, buf: bytes, length: int, pos: int) -> tuple[int, int]:
        """Return ``(byte_len, column_width)`` of the character before *pos*."""
        ...

    def next_width(self, buf: bytes, length: int, pos: int) -> tuple[int, int]:
        """Return ``(byte_len, column_width)`` of the character at *pos*."""
        ...

    def read_char(self, stream: BinaryIO) -> tuple[bytes, int]:
        """Read one logical character.

        Returns the raw bytes and the code point. End of input is signalled
        by empty bytes and a code of ``-1``.
        """
        ...


class AsciiEncoding:
    """One byte per character, one column per character."""

    def prev_width(self, buf: bytes, length: int, pos: int) -> tuple[int, int]:
        return 1, 1

    def next_width(self, buf: bytes, length: int, pos: int) -> tuple[int, int]:
        return 1, 1

    def read_char(self, stream: BinaryIO) -> tuple[bytes, int]:
        data = stream.read(1)
        if not data:
            return b"", -1
        return data, data[0]


def _utf8_sequence_length(lead: int) -> int:
    if lead < 0x80:
        return 1
    if lead & 0xE0 == 0xC0:
        return 2
    if lead & 0xF0 == 0xE0:
        return 3
    if lead & 0xF8 == 0xF0:
        return 4
    return 1


class Utf8Encoding:
    """UTF-8 aware strategy stepping over whole grapheme clusters."""

    def prev_width(self, buf: bytes, length: int, pos: int) -> tuple[int, int]:
        if pos <= 0:
            return 0, 0
        start = max(0, pos - _WINDOW)
        # Do not start the window in the middle of a sequence.
        while start > 0 and start < pos and buf[start] & 0xC0 == 0x80:
            start -= 1
        clusters = list(grapheme.graphemes(decode(bytes(buf[start:pos]))))
        last = clusters[-1]
        return len(encode(last)), grapheme_width(last)

    def next_width(self, buf: bytes, length: int, pos: int) -> tuple[int, int]:
        if pos >= length:
            return 0, 0
        end = min(length, pos + _WINDOW)
        text = decode(bytes(buf[pos:end]))
        first = next(iter(grapheme.graphemes(text)))
        return len(encode(first)), grapheme_width(first)

    def read_char(self, stream: BinaryIO) -> tuple[bytes, int]:
        data = stream.read(1)
        if not data:
            return b"", -1
        need = _utf8_sequence_length(data[0]) - 1
        while need > 0:
            more = stream.read(1)
            if not more:
                break
            data += more
            need -= 1
        text = data.decode("utf-8", errors="replace")
        return data, ord(text[0])
