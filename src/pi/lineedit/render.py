"""Render engine: redraw the prompt and edit buffer on the terminal.

Each refresh builds a complete escape-sequence program in one ``bytearray``
and returns it; the caller writes it with a single call so the terminal never
shows a half-drawn line.

Single-line mode scrolls a window over the buffer so the cursor stays
visible. Multi-line mode lets the line wrap over several rows and remembers
how many rows it has used so they can all be cleared on the next refresh.
"""

from __future__ import annotations

import bisect
import logging
from typing import TYPE_CHECKING

from pi.lineedit.completion import HintProvider, HintReleaser
from pi.lineedit.encoding import AsciiEncoding, Encoding
from pi.lineedit.utils import decode, encode, strip_ansi, truncate_to_columns

if TYPE_CHECKING:
    from pi.lineedit.session import EditSession

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Escape sequences
# ---------------------------------------------------------------------------

CURSOR_TO_COLUMN_0 = b"\r"
ERASE_TO_EOL = b"\x1b[0K"
CURSOR_UP_ONE = b"\x1b[1A"
STYLE_RESET = b"\x1b[0m"
CLEAR_SCREEN = b"\x1b[H\x1b[2J"


def cursor_up(n: int) -> bytes:
    return b"\x1b[%dA" % n


def cursor_down(n: int) -> bytes:
    return b"\x1b[%dB" % n


def cursor_forward(n: int) -> bytes:
    return b"\x1b[%dC" % n


def cursor_back(n: int) -> bytes:
    return b"\x1b[%dD" % n


def set_column(col: int) -> bytes:
    """Carriage return, then move right *col* cells."""
    if col:
        return CURSOR_TO_COLUMN_0 + cursor_forward(col)
    return CURSOR_TO_COLUMN_0


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------


class Renderer:
    """Computes refresh programs for an :class:`EditSession`."""

    def __init__(
        self,
        encoding: Encoding | None = None,
        *,
        multiline: bool = False,
        hint_provider: HintProvider | None = None,
        hint_releaser: HintReleaser | None = None,
    ) -> None:
        self.encoding: Encoding = encoding or AsciiEncoding()
        self.multiline = multiline
        self.hint_provider = hint_provider
        self.hint_releaser = hint_releaser

    # -- width math -----------------------------------------------------------

    def column_pos(self, buf: bytes, length: int, pos: int) -> int:
        """Display columns taken by ``buf[:pos]``."""
        cols = 0
        off = 0
        while off < pos:
            step, width = self.encoding.next_width(buf, length, off)
            if step <= 0:
                break
            off += step
            cols += width
        return cols

    def column_pos_multiline(
        self, buf: bytes, length: int, pos: int, cols: int, ini_pos: int
    ) -> int:
        """Wrapped column position of *pos* when the line starts at *ini_pos*.

        A character that does not fit on the rest of a row moves to the next
        one; the cells it leaves empty are counted, so ``(ini_pos + result)``
        divided by the terminal width gives the row and remainder the column.
        """
        ret = 0
        row_width = ini_pos
        off = 0
        while off < length:
            step, width = self.encoding.next_width(buf, length, off)
            if step <= 0:
                break
            excess = row_width + width - cols
            if excess > 0:
                ret += excess
                row_width = width
            elif excess == 0:
                row_width = 0
            else:
                row_width += width

            if off >= pos:
                break
            off += step
            ret += width
        return ret

    def prompt_columns(self, prompt: bytes) -> int:
        """Display width of *prompt*, ignoring embedded styling sequences."""
        visible = strip_ansi(prompt)
        return self.column_pos(visible, len(visible), len(visible))

    def content_rows(self, prompt_cols: int, content_cols: int, cols: int) -> int:
        """Terminal rows used by a prompt and content of the given widths."""
        cols = max(cols, 1)
        return (prompt_cols + content_cols + cols - 1) // cols

    # -- hints ----------------------------------------------------------------

    def _append_hint(
        self, ab: bytearray, session: EditSession, content: bytes, prompt_cols: int
    ) -> None:
        if self.hint_provider is None:
            return
        used = prompt_cols + self.column_pos(content, len(content), len(content))
        if used >= session.columns:
            return
        hint = self.hint_provider.hint(decode(content))
        if hint is None:
            return
        style = hint.style().encode("ascii")
        ab += style
        ab += encode(truncate_to_columns(hint.text, session.columns - used))
        if style:
            ab += STYLE_RESET
        if self.hint_releaser is not None:
            self.hint_releaser.release(hint)

    # -- refresh ----------------------------------------------------------------

    def refresh(
        self,
        session: EditSession,
        content: bytes | None = None,
        pos: int | None = None,
        *,
        hints: bool = True,
    ) -> bytes:
        """Program redrawing *content* (default: the session buffer)."""
        if content is None:
            content = session.buffer.content
        if pos is None:
            pos = session.buffer.cursor
        if self.multiline:
            return self.refresh_multi_line(session, content, pos, hints=hints)
        return self.refresh_single_line(session, content, pos, hints=hints)

    def refresh_single_line(
        self, session: EditSession, content: bytes, pos: int, *, hints: bool = True
    ) -> bytes:
        cols = session.columns
        prompt_cols = self.prompt_columns(session.prompt)
        offsets, widths = self._measure(content)
        cursor = bisect.bisect_left(offsets, pos)

        # Scroll the visible window instead of touching the buffer.
        first = 0
        before_cursor = sum(widths[:cursor])
        while first < cursor and prompt_cols + before_cursor >= cols:
            before_cursor -= widths[first]
            first += 1
        last = len(widths)
        visible = before_cursor + sum(widths[cursor:])
        while last > cursor and prompt_cols + visible > cols:
            last -= 1
            visible -= widths[last]

        ab = bytearray()
        ab += CURSOR_TO_COLUMN_0
        ab += session.prompt
        ab += content[offsets[first] : offsets[last]]
        if hints:
            self._append_hint(ab, session, content, prompt_cols)
        ab += ERASE_TO_EOL
        ab += set_column(before_cursor + prompt_cols)
        return bytes(ab)

    def _measure(self, content: bytes) -> tuple[list[int], list[int]]:
        """Character start offsets (plus the end offset) and column widths."""
        offsets = [0]
        widths: list[int] = []
        off = 0
        length = len(content)
        while off < length:
            step, width = self.encoding.next_width(content, length, off)
            off += max(step, 1)
            offsets.append(min(off, length))
            widths.append(width)
        return offsets, widths

    def refresh_multi_line(
        self, session: EditSession, content: bytes, pos: int, *, hints: bool = True
    ) -> bytes:
        cols = max(session.columns, 1)
        length = len(content)
        prompt_cols = self.prompt_columns(session.prompt)
        colpos = self.column_pos_multiline(content, length, length, cols, prompt_cols)
        rows = self.content_rows(prompt_cols, colpos, cols)
        cursor_row = (prompt_cols + session.old_cursor_column + cols) // cols
        old_rows = session.max_rows_used

        if rows > session.max_rows_used:
            session.max_rows_used = rows

        ab = bytearray()

        # Go to the last row used so far, then clear upwards.
        if old_rows - cursor_row > 0:
            logger.debug("go down %d", old_rows - cursor_row)
            ab += cursor_down(old_rows - cursor_row)
        for _ in range(old_rows - 1):
            ab += CURSOR_TO_COLUMN_0 + ERASE_TO_EOL + CURSOR_UP_ONE
        logger.debug("clear+up %d", max(old_rows - 1, 0))
        ab += CURSOR_TO_COLUMN_0 + ERASE_TO_EOL

        ab += session.prompt
        ab += content
        if hints:
            self._append_hint(ab, session, content, prompt_cols)

        cursor_colpos = self.column_pos_multiline(content, length, pos, cols, prompt_cols)

        # Cursor at the very end of a full row: open the next row explicitly.
        if pos and pos == length and (cursor_colpos + prompt_cols) % cols == 0:
            logger.debug("<newline>")
            ab += b"\n" + CURSOR_TO_COLUMN_0
            rows += 1
            if rows > session.max_rows_used:
                session.max_rows_used = rows

        new_cursor_row = (prompt_cols + cursor_colpos + cols) // cols
        if rows - new_cursor_row > 0:
            logger.debug("go up %d", rows - new_cursor_row)
            ab += cursor_up(rows - new_cursor_row)

        col = (prompt_cols + cursor_colpos) % cols
        logger.debug("rows %d cursor row %d set col %d", rows, new_cursor_row, 1 + col)
        ab += set_column(col)

        session.old_cursor_column = cursor_colpos
        return bytes(ab)
