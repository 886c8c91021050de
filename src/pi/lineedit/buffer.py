"""Edit buffer - the line's bytes plus a cursor.

Invariants kept by every operation:

* ``0 <= cursor <= length < capacity``
* the cursor sits on a character boundary as defined by the ``Encoding``

Operations return ``True`` when the visible state changed, so the caller
knows whether a redraw is needed.
"""

from __future__ import annotations

from pi.lineedit.encoding import AsciiEncoding, Encoding
from pi.lineedit.errors import CapacityExceeded

_SPACE = b" "


class EditBuffer:
    """Fixed-capacity byte buffer with cursor-relative editing operations."""

    def __init__(self, capacity: int, encoding: Encoding | None = None) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._buf = bytearray()
        self._cursor = 0
        self._capacity = capacity
        self.encoding: Encoding = encoding or AsciiEncoding()

    # -- accessors ------------------------------------------------------------

    @property
    def content(self) -> bytes:
        return bytes(self._buf)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def length(self) -> int:
        return len(self._buf)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def at_end(self) -> bool:
        return self._cursor == len(self._buf)

    def __len__(self) -> int:
        return len(self._buf)

    def __bytes__(self) -> bytes:
        return bytes(self._buf)

    def set_content(self, data: bytes) -> None:
        """Replace the whole line and put the cursor at its end.

        Content longer than the buffer allows is cut at the last character
        boundary that fits.
        """
        limit = self._capacity - 1
        if len(data) > limit:
            end = 0
            while end < len(data):
                step, _ = self.encoding.next_width(data, len(data), end)
                if end + step > limit:
                    break
                end += step
            data = data[:end]
        self._buf[:] = data
        self._cursor = len(self._buf)

    # -- character helpers ------------------------------------------------------

    def _prev_len(self, pos: int) -> int:
        return self.encoding.prev_width(self._buf, len(self._buf), pos)[0]

    def _next_len(self, pos: int) -> int:
        return self.encoding.next_width(self._buf, len(self._buf), pos)[0]

    def _is_space_before(self, pos: int) -> bool:
        n = self._prev_len(pos)
        return self._buf[pos - n : pos] == _SPACE

    def _is_space_at(self, pos: int) -> bool:
        n = self._next_len(pos)
        return self._buf[pos : pos + n] == _SPACE

    def _word_start(self) -> int:
        pos = self._cursor
        while pos > 0 and self._is_space_before(pos):
            pos -= self._prev_len(pos)
        while pos > 0 and not self._is_space_before(pos):
            pos -= self._prev_len(pos)
        return pos

    def _word_end(self) -> int:
        pos = self._cursor
        length = len(self._buf)
        while pos < length and self._is_space_at(pos):
            pos += self._next_len(pos)
        while pos < length and not self._is_space_at(pos):
            pos += self._next_len(pos)
        return pos

    # -- insertion --------------------------------------------------------------

    def insert(self, data: bytes, *, strict: bool = False) -> bool:
        """Insert *data* at the cursor.

        Args:
            data: Raw bytes of one or more whole characters.
            strict: Raise instead of returning ``False`` when *data* does not fit.

        Returns:
            ``True`` if the bytes were inserted. On ``False`` the buffer is
            left untouched.

        Raises:
            CapacityExceeded: If *strict* and the line would reach capacity.
        """
        if not data:
            return False
        if len(self._buf) + len(data) >= self._capacity:
            if strict:
                raise CapacityExceeded(
                    f"{len(data)} bytes do not fit "
                    f"({len(self._buf)}/{self._capacity - 1} used)"
                )
            return False
        self._buf[self._cursor : self._cursor] = data
        self._cursor += len(data)
        return True

    # -- motion ---------------------------------------------------------------

    def move_left(self) -> bool:
        if self._cursor == 0:
            return False
        self._cursor -= self._prev_len(self._cursor)
        return True

    def move_right(self) -> bool:
        if self._cursor == len(self._buf):
            return False
        self._cursor += self._next_len(self._cursor)
        return True

    def move_word_start(self) -> bool:
        pos = self._word_start()
        if pos == self._cursor:
            return False
        self._cursor = pos
        return True

    def move_word_end(self) -> bool:
        pos = self._word_end()
        if pos == self._cursor:
            return False
        self._cursor = pos
        return True

    def move_home(self) -> bool:
        if self._cursor == 0:
            return False
        self._cursor = 0
        return True

    def move_end(self) -> bool:
        if self._cursor == len(self._buf):
            return False
        self._cursor = len(self._buf)
        return True

    # -- deletion -------------------------------------------------------------

    def delete(self) -> bool:
        """Remove the character under the cursor."""
        if self._cursor >= len(self._buf):
            return False
        n = self._next_len(self._cursor)
        del self._buf[self._cursor : self._cursor + n]
        return True

    def backspace(self) -> bool:
        """Remove the character before the cursor."""
        if self._cursor == 0:
            return False
        n = self._prev_len(self._cursor)
        del self._buf[self._cursor - n : self._cursor]
        self._cursor -= n
        return True

    def delete_prev_word(self) -> bool:
        start = self._word_start()
        if start == self._cursor:
            return False
        del self._buf[start : self._cursor]
        self._cursor = start
        return True

    def delete_next_word(self) -> bool:
        end = self._word_end()
        if end == self._cursor:
            return False
        del self._buf[self._cursor : end]
        return True

    def kill_to_end(self) -> bool:
        if self._cursor == len(self._buf):
            return False
        del self._buf[self._cursor :]
        return True

    def kill_line(self) -> bool:
        if not self._buf:
            return False
        self._buf.clear()
        self._cursor = 0
        return True

    def transpose(self) -> bool:
        """Swap the characters on either side of the cursor.

        The cursor moves past the swapped pair unless it was on the last
        character of the line.

        Returns:
            ``False`` at either end of the line, where there is no pair.
        """
        pos = self._cursor
        length = len(self._buf)
        if not 0 < pos < length:
            return False
        before = self._prev_len(pos)
        after = self._next_len(pos)
        left = bytes(self._buf[pos - before : pos])
        right = bytes(self._buf[pos : pos + after])
        self._buf[pos - before : pos + after] = right + left
        if pos + after == length:
            self._cursor = pos - before + after
        else:
            self._cursor = pos + after
        return True
