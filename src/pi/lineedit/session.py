"""Per-call editing state and the edit operations that redraw it."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import BinaryIO

from pi.lineedit.buffer import EditBuffer
from pi.lineedit.history import History, HistoryDirection
from pi.lineedit.render import CLEAR_SCREEN, Renderer
from pi.lineedit.utils import decode, encode

logger = logging.getLogger(__name__)


@dataclass
class EditSession:
    """State of one ``read_line`` call.

    ``max_rows_used`` and ``old_cursor_column`` are only used in multi-line
    mode, to know how far to move up before redrawing.
    """

    buffer: EditBuffer
    prompt: bytes
    columns: int
    out: BinaryIO
    renderer: Renderer
    history: History
    max_rows_used: int = 0
    old_cursor_column: int = 0
    history_index: int = 0
    write_log_path: str = field(default="", repr=False)

    @property
    def line(self) -> str:
        return decode(self.buffer.content)

    # -- output ---------------------------------------------------------------

    def write(self, data: bytes) -> None:
        self.out.write(data)
        self.out.flush()
        if self.write_log_path:
            try:
                with open(self.write_log_path, "ab") as f:
                    f.write(data)
            except OSError:
                pass

    def refresh(
        self,
        content: bytes | None = None,
        pos: int | None = None,
        *,
        hints: bool = True,
    ) -> None:
        self.write(self.renderer.refresh(self, content, pos, hints=hints))

    def _refresh_if(self, changed: bool) -> bool:
        if changed:
            self.refresh()
        return changed

    # -- editing --------------------------------------------------------------

    def insert(self, data: bytes) -> bool:
        buf = self.buffer
        appending = buf.at_end
        if not buf.insert(data):
            return False
        renderer = self.renderer
        if (
            appending
            and not renderer.multiline
            and renderer.hint_provider is None
            and renderer.prompt_columns(self.prompt)
            + renderer.column_pos(buf.content, buf.length, buf.length)
            < self.columns
        ):
            # Appending within the visible width: echo instead of redrawing.
            self.write(data)
        else:
            self.refresh()
        return True

    def move_left(self) -> bool:
        return self._refresh_if(self.buffer.move_left())

    def move_right(self) -> bool:
        return self._refresh_if(self.buffer.move_right())

    def move_word_start(self) -> bool:
        return self._refresh_if(self.buffer.move_word_start())

    def move_word_end(self) -> bool:
        return self._refresh_if(self.buffer.move_word_end())

    def move_home(self) -> bool:
        return self._refresh_if(self.buffer.move_home())

    def move_end(self) -> bool:
        return self._refresh_if(self.buffer.move_end())

    def delete(self) -> bool:
        return self._refresh_if(self.buffer.delete())

    def backspace(self) -> bool:
        return self._refresh_if(self.buffer.backspace())

    def delete_prev_word(self) -> bool:
        return self._refresh_if(self.buffer.delete_prev_word())

    def delete_next_word(self) -> bool:
        return self._refresh_if(self.buffer.delete_next_word())

    def kill_to_end(self) -> bool:
        return self._refresh_if(self.buffer.kill_to_end())

    def kill_line(self) -> bool:
        return self._refresh_if(self.buffer.kill_line())

    def transpose(self) -> bool:
        return self._refresh_if(self.buffer.transpose())

    def clear_screen(self) -> None:
        self.write(CLEAR_SCREEN)
        self.refresh()

    def history_step(self, direction: HistoryDirection) -> bool:
        """Replace the line with the previous or next history entry."""
        step = self.history.navigate(self.history_index, self.line, direction)
        if step is None:
            return False
        self.history_index, entry = step
        self.buffer.set_content(encode(entry))
        self.refresh()
        return True
