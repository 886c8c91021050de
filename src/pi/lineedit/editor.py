"""The line editor: one blocking edit loop per ``read_line`` call.

``LineEditor`` owns everything that outlives a single call -- history,
registered providers, the encoding and the single/multi-line switch -- so a
program can keep several independent editors instead of sharing globals::

    editor = LineEditor()
    editor.load_history("history.txt")
    while True:
        try:
            line = editor.read_line("> ")
        except (Interrupted, EndOfInput):
            break
        print(line)
"""

from __future__ import annotations

import io
import logging
import os
import sys
from typing import BinaryIO, Callable

from pi.lineedit.buffer import EditBuffer
from pi.lineedit.completion import (
    CompletionProvider,
    Completions,
    HintProvider,
    HintReleaser,
)
from pi.lineedit.config import LineEditorConfig
from pi.lineedit.encoding import AsciiEncoding, Encoding
from pi.lineedit.errors import EndOfInput, Interrupted
from pi.lineedit.history import History
from pi.lineedit.keys import ESC, TAB, KeyDecoder, KeyEvent
from pi.lineedit.render import Renderer
from pi.lineedit.session import EditSession
from pi.lineedit.terminal import (
    beep,
    clear_screen,
    get_columns,
    is_unsupported_term,
    raw_mode,
    wait_readable,
)
from pi.lineedit.utils import encode

logger = logging.getLogger(__name__)

_EDIT_ACTIONS: dict[str, Callable[[EditSession], object]] = {
    "delete": EditSession.delete,
    "backspace": EditSession.backspace,
    "transpose": EditSession.transpose,
    "move_left": EditSession.move_left,
    "move_right": EditSession.move_right,
    "move_word_start": EditSession.move_word_start,
    "move_word_end": EditSession.move_word_end,
    "move_home": EditSession.move_home,
    "move_end": EditSession.move_end,
    "clear_screen": EditSession.clear_screen,
    "kill_line": EditSession.kill_line,
    "kill_to_end": EditSession.kill_to_end,
    "delete_prev_word": EditSession.delete_prev_word,
    "delete_next_word": EditSession.delete_next_word,
}


class LineEditor:
    """Interactive line editing over a character terminal."""

    def __init__(
        self,
        config: LineEditorConfig | None = None,
        *,
        encoding: Encoding | None = None,
        history: History | None = None,
    ) -> None:
        self.config = config or LineEditorConfig()
        self.history = history if history is not None else History(self.config.history_max_len)
        self.encoding: Encoding = encoding or AsciiEncoding()
        self.multiline: bool = self.config.multiline

        self.completion_provider: CompletionProvider | None = None
        self.hint_provider: HintProvider | None = None
        self.hint_releaser: HintReleaser | None = None

    # -- registration ---------------------------------------------------------

    def set_completion_provider(self, provider: CompletionProvider | None) -> None:
        self.completion_provider = provider

    def set_hint_provider(
        self,
        provider: HintProvider | None,
        releaser: HintReleaser | None = None,
    ) -> None:
        """Register the hint callback.

        Args:
            provider: Called with the current line on every redraw.
            releaser: Called with each hint once it has been drawn.
        """
        self.hint_provider = provider
        self.hint_releaser = releaser

    def set_encoding(self, encoding: Encoding) -> None:
        self.encoding = encoding

    def set_multiline(self, enabled: bool) -> None:
        self.multiline = enabled

    # -- history --------------------------------------------------------------

    def add_history(self, line: str) -> bool:
        return self.history.add(line)

    def set_history_max_len(self, max_len: int) -> None:
        self.history.set_max_len(max_len)

    def load_history(self, path: str | os.PathLike[str]) -> None:
        self.history.load(path)

    def save_history(self, path: str | os.PathLike[str]) -> None:
        self.history.save(path)

    def add_history_completions(self, line: str, completions: Completions) -> None:
        """Offer every history entry that starts with *line* as a completion."""
        for entry in self.history.matching(line):
            completions.add(entry)

    # -- screen ---------------------------------------------------------------

    def clear_screen(self, out: BinaryIO | None = None) -> None:
        clear_screen(out if out is not None else sys.stdout.buffer)

    # -- reading ----------------------------------------------------------------

    def read_line(self, prompt: str) -> str:
        """Read one line from the terminal.

        Falls back to plain line reading when stdin is not a terminal or the
        terminal is known not to support escape sequences.

        Args:
            prompt: Text written before the line; may carry SGR styling.

        Returns:
            The accepted line without its terminator.

        Raises:
            Interrupted: On Ctrl-C.
            EndOfInput: On Ctrl-D with an empty line, or end of input.
        """
        if not _stdin_is_tty():
            line = self._read_no_tty()
        elif is_unsupported_term():
            logger.info("unsupported terminal %r, reading without editing", os.environ.get("TERM"))
            line = self._read_unsupported(prompt)
        else:
            line = self._read_raw(prompt)
        if self.config.auto_history and line:
            self.history.add(line)
        return line

    def _read_no_tty(self) -> str:
        line = sys.stdin.readline()
        if not line:
            raise EndOfInput("end of input")
        return line[:-1] if line.endswith("\n") else line

    def _read_unsupported(self, prompt: str) -> str:
        sys.stdout.write(prompt)
        sys.stdout.flush()
        line = sys.stdin.readline()
        if not line:
            raise EndOfInput("end of input")
        return line.rstrip("\r\n")

    def _read_raw(self, prompt: str) -> str:
        sys.stdout.flush()
        in_fd = sys.stdin.fileno()
        out_fd = sys.stdout.fileno()
        inp = open(in_fd, "rb", buffering=0, closefd=False)
        out = open(out_fd, "wb", buffering=0, closefd=False)
        try:
            with raw_mode(in_fd):
                columns = get_columns(in_fd, out_fd)
                line = self.edit(inp, out, prompt, columns=columns)
        except (Interrupted, EndOfInput):
            out.write(b"\n")
            raise
        else:
            out.write(b"\n")
            return line
        finally:
            inp.close()
            out.close()

    def edit(
        self,
        inp: BinaryIO,
        out: BinaryIO,
        prompt: str,
        *,
        columns: int | None = None,
    ) -> str:
        """Run the edit loop on already-raw binary streams.

        Args:
            inp: Source of key presses.
            out: Where the prompt and redraws are written.
            prompt: Prompt text.
            columns: Terminal width; ``config.default_columns`` when omitted.

        Returns:
            The accepted line.
        """
        return self.run_session(self.create_session(out, prompt, columns=columns), inp)

    def create_session(
        self, out: BinaryIO, prompt: str, *, columns: int | None = None
    ) -> EditSession:
        return EditSession(
            buffer=EditBuffer(self.config.max_line, self.encoding),
            prompt=encode(prompt),
            columns=columns or self.config.default_columns,
            out=out,
            renderer=Renderer(
                self.encoding,
                multiline=self.multiline,
                hint_provider=self.hint_provider,
                hint_releaser=self.hint_releaser,
            ),
            history=self.history,
            write_log_path=self.config.write_log_path,
        )

    def run_session(self, session: EditSession, inp: BinaryIO) -> str:
        """Edit until a line is accepted.

        The newest history slot mirrors the line while editing and is removed
        again however the loop ends.
        """
        scratch_added = self.history.add("")
        try:
            session.write(session.prompt)
            return self._edit_loop(session, inp)
        finally:
            if scratch_added:
                self.history.pop_newest()
            else:
                self.history.replace_newest("")

    def _edit_loop(self, session: EditSession, inp: BinaryIO) -> str:
        decoder = KeyDecoder()
        while True:
            data, code = self.encoding.read_char(inp)
            if data and code == TAB and self.completion_provider is not None:
                data, code = self._complete_line(session, inp)
                if not data and code == 0:
                    continue
            if not data:
                return self._end_of_stream(session)

            event = decoder.feed(data, code)
            while decoder.pending:
                if not wait_readable(inp, self.config.escape_timeout):
                    decoder.reset()
                    break
                byte = inp.read(1)
                if not byte:
                    decoder.reset()
                    break
                event = decoder.feed(byte, byte[0])
            if event is None:
                continue

            line = self._dispatch(session, event)
            if line is not None:
                return line

    def _end_of_stream(self, session: EditSession) -> str:
        if session.buffer.length:
            logger.debug("input ended, accepting partial line")
            return session.line
        raise EndOfInput("end of input")

    def _dispatch(self, session: EditSession, event: KeyEvent) -> str | None:
        action = event.action
        if action == "accept":
            if self.multiline:
                session.move_end()
            if self.hint_provider is not None:
                # Leave the line on screen as typed, without the hint.
                session.refresh(hints=False)
            logger.debug("line accepted (%d bytes)", session.buffer.length)
            return session.line
        if action == "interrupt":
            logger.debug("interrupted")
            raise Interrupted("interrupted")
        if action == "delete_or_eof":
            if session.buffer.length:
                session.delete()
                return None
            logger.debug("end of input on empty line")
            raise EndOfInput("end of input")
        if action == "insert":
            session.insert(event.data)
        elif action == "history_prev":
            session.history_step("prev")
        elif action == "history_next":
            session.history_step("next")
        else:
            _EDIT_ACTIONS[action](session)
        return None

    def _complete_line(self, session: EditSession, inp: BinaryIO) -> tuple[bytes, int]:
        """Cycle through completions on repeated Tab.

        Returns the character that ended completion so the caller can handle
        it, ``(b"", 0)`` when there was nothing to complete, or ``(b"", -1)``
        at end of input.
        """
        completions = Completions()
        assert self.completion_provider is not None
        self.completion_provider.complete(session.line, completions)
        if not completions:
            beep()
            return b"", 0

        count = len(completions)
        index = 0
        while True:
            if index < count:
                candidate = encode(completions[index])
                session.refresh(candidate, len(candidate))
            else:
                session.refresh()

            data, code = self.encoding.read_char(inp)
            if not data:
                return b"", -1

            if code == TAB:
                index = (index + 1) % (count + 1)
                if index == count:
                    beep()
            elif code == ESC:
                if index < count:
                    session.refresh()
                return data, code
            else:
                if index < count:
                    session.buffer.set_content(encode(completions[index]))
                return data, code


def _stdin_is_tty() -> bool:
    try:
        return os.isatty(sys.stdin.fileno())
    except (AttributeError, ValueError, io.UnsupportedOperation):
        return False
