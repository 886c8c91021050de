"""Tests for pi.lineedit.render -- single-line and multi-line refresh."""

from __future__ import annotations

import re

import pytest

from pi.lineedit.completion import Hint
from pi.lineedit.encoding import Utf8Encoding
from pi.lineedit.render import Renderer

WORLD = "世".encode()


class StaticHint:
    def __init__(self, hint: Hint | None) -> None:
        self._hint = hint
        self.calls: list[str] = []

    def hint(self, line: str) -> Hint | None:
        self.calls.append(line)
        return self._hint


class RecordingReleaser:
    def __init__(self) -> None:
        self.released: list[Hint] = []

    def release(self, hint: Hint) -> None:
        self.released.append(hint)


class CountingEncoding(Utf8Encoding):
    def __init__(self) -> None:
        self.calls = 0

    def prev_width(self, buf: bytes, length: int, pos: int) -> tuple[int, int]:
        self.calls += 1
        return super().prev_width(buf, length, pos)

    def next_width(self, buf: bytes, length: int, pos: int) -> tuple[int, int]:
        self.calls += 1
        return super().next_width(buf, length, pos)


# ---------------------------------------------------------------------------
# Width math
# ---------------------------------------------------------------------------


class TestColumnMath:
    def test_column_pos_ascii(self) -> None:
        assert Renderer().column_pos(b"hello", 5, 3) == 3

    def test_column_pos_wide(self) -> None:
        buf = b"a" + WORLD + b"b"
        assert Renderer(Utf8Encoding()).column_pos(buf, len(buf), len(buf)) == 4

    def test_prompt_columns_ignore_styling(self) -> None:
        assert Renderer().prompt_columns(b"\x1b[1;32m> \x1b[0m") == 2

    def test_rows_for_wrapped_content(self) -> None:
        renderer = Renderer()
        colpos = renderer.column_pos_multiline(b"a" * 25, 25, 25, 10, 0)
        assert colpos == 25
        assert renderer.content_rows(0, colpos, 10) == 3

    def test_rows_include_prompt(self) -> None:
        assert Renderer().content_rows(2, 9, 10) == 2

    def test_wide_character_wraps_to_next_row(self) -> None:
        renderer = Renderer(Utf8Encoding())
        buf = b"abcd" + WORLD
        # One empty cell is left at the end of the first row.
        assert renderer.column_pos_multiline(buf, len(buf), len(buf), 5, 0) == 7
        assert renderer.column_pos_multiline(buf, len(buf), 4, 5, 0) == 5


# ---------------------------------------------------------------------------
# Single-line mode
# ---------------------------------------------------------------------------


class TestSingleLine:
    def test_short_line(self, make_session) -> None:
        session = make_session(b"hello")
        assert session.renderer.refresh(session) == b"\r> hello\x1b[0K\r\x1b[7C"

    def test_cursor_in_middle(self, make_session) -> None:
        session = make_session(b"hello", cursor=1)
        assert session.renderer.refresh(session) == b"\r> hello\x1b[0K\r\x1b[3C"

    def test_column_zero_uses_bare_carriage_return(self, make_session) -> None:
        session = make_session(b"hi", cursor=0, prompt=b"")
        assert session.renderer.refresh(session) == b"\rhi\x1b[0K\r"

    def test_long_line_scrolls_to_cursor(self, make_session) -> None:
        session = make_session(b"abcdefghijklmnop", columns=10)
        assert session.renderer.refresh(session) == b"\r> jklmnop\x1b[0K\r\x1b[9C"

    def test_long_line_with_cursor_at_start(self, make_session) -> None:
        session = make_session(b"abcdefghijklmnop", cursor=0, columns=10)
        assert session.renderer.refresh(session) == b"\r> abcdefgh\x1b[0K\r\x1b[2C"

    @pytest.mark.parametrize("cursor", range(17))
    def test_window_contains_cursor_and_fits(self, make_session, cursor: int) -> None:
        content = b"abcdefghijklmnop"
        session = make_session(content, cursor=cursor, columns=10)
        out = session.renderer.refresh(session)
        window = out[len(b"\r> ") : out.index(b"\x1b[0K")]
        start = content.index(window)
        assert len(window) <= 10 - 2
        assert start <= cursor <= start + len(window)
        match = re.search(rb"\r(?:\x1b\[(\d+)C)?$", out)
        assert match is not None
        column = int(match.group(1) or 0)
        assert column == 2 + cursor - start
        assert column < 10

    def test_styled_prompt_is_written_verbatim(self, make_session) -> None:
        session = make_session(b"x", prompt=b"\x1b[32m> \x1b[0m")
        out = session.renderer.refresh(session)
        assert out == b"\r\x1b[32m> \x1b[0mx\x1b[0K\r\x1b[3C"

    def test_explicit_content_does_not_touch_buffer(self, make_session) -> None:
        session = make_session(b"h")
        out = session.renderer.refresh(session, b"hello", 5)
        assert out == b"\r> hello\x1b[0K\r\x1b[7C"
        assert session.buffer.content == b"h"

    @pytest.mark.parametrize(("chars_before_cursor", "shown"), [(0, 78), (500, 78), (1000, 77)])
    def test_long_line_measures_each_character_once(
        self, make_session, chars_before_cursor: int, shown: int
    ) -> None:
        encoding = CountingEncoding()
        content = "\u00e9".encode() * 1000
        session = make_session(
            content, cursor=2 * chars_before_cursor, columns=80, encoding=encoding
        )
        encoding.calls = 0
        out = session.renderer.refresh(session)
        assert encoding.calls <= 1000 + len(session.prompt)
        window = out[len(b"\r> ") : out.index(b"\x1b[0K")]
        assert len(window.decode()) == shown


# ---------------------------------------------------------------------------
# Hints
# ---------------------------------------------------------------------------


class TestHints:
    def test_colored_hint(self, make_session) -> None:
        session = make_session(b"hello", hint_provider=StaticHint(Hint(" World", color=35)))
        assert (
            session.renderer.refresh(session)
            == b"\r> hello\x1b[0;35;49m World\x1b[0m\x1b[0K\r\x1b[7C"
        )

    def test_bold_without_color_defaults_to_white(self, make_session) -> None:
        session = make_session(b"a", hint_provider=StaticHint(Hint("b", bold=True)))
        assert b"\x1b[1;37;49mb\x1b[0m" in session.renderer.refresh(session)

    def test_plain_hint_has_no_styling(self, make_session) -> None:
        session = make_session(b"a", hint_provider=StaticHint(Hint("bc")))
        assert session.renderer.refresh(session) == b"\r> abc\x1b[0K\r\x1b[3C"

    def test_hint_is_truncated_to_remaining_columns(self, make_session) -> None:
        session = make_session(
            b"hello", columns=10, hint_provider=StaticHint(Hint(" World"))
        )
        assert session.renderer.refresh(session) == b"\r> hello Wo\x1b[0K\r\x1b[7C"

    def test_no_hint_when_line_fills_terminal(self, make_session) -> None:
        provider = StaticHint(Hint("x"))
        session = make_session(b"12345678", columns=10, hint_provider=provider)
        session.renderer.refresh(session)
        assert provider.calls == []

    def test_provider_sees_line_text(self, make_session) -> None:
        provider = StaticHint(None)
        session = make_session(b"hello", hint_provider=provider)
        session.renderer.refresh(session)
        assert provider.calls == ["hello"]

    def test_hints_can_be_suppressed(self, make_session) -> None:
        session = make_session(b"a", hint_provider=StaticHint(Hint("bc")))
        assert session.renderer.refresh(session, hints=False) == b"\r> a\x1b[0K\r\x1b[3C"

    def test_hint_is_released_after_drawing(self, make_session) -> None:
        hint = Hint("!")
        session = make_session(b"a", hint_provider=StaticHint(hint))
        releaser = RecordingReleaser()
        session.renderer.hint_releaser = releaser
        session.renderer.refresh(session)
        assert releaser.released == [hint]


# ---------------------------------------------------------------------------
# Multi-line mode
# ---------------------------------------------------------------------------


class TestMultiLine:
    def test_first_refresh_of_wrapped_line(self, make_session) -> None:
        session = make_session(b"a" * 25, prompt=b"", columns=10, multiline=True)
        out = session.renderer.refresh(session)
        assert out == b"\r\x1b[0K" + b"a" * 25 + b"\r\x1b[5C"
        assert session.max_rows_used == 3
        assert session.old_cursor_column == 25

    def test_second_refresh_clears_previous_rows(self, make_session) -> None:
        session = make_session(b"a" * 25, prompt=b"", columns=10, multiline=True)
        session.renderer.refresh(session)
        session.buffer.move_home()
        out = session.renderer.refresh(session)
        assert out == (
            b"\r\x1b[0K\x1b[1A" * 2
            + b"\r\x1b[0K"
            + b"a" * 25
            + b"\x1b[2A"
            + b"\r"
        )
        assert session.old_cursor_column == 0

    def test_moves_down_to_last_row_before_clearing(self, make_session) -> None:
        session = make_session(b"a" * 25, cursor=0, prompt=b"", columns=10, multiline=True)
        session.renderer.refresh(session)
        out = session.renderer.refresh(session)
        assert out.startswith(b"\x1b[2B" + b"\r\x1b[0K\x1b[1A" * 2)

    def test_cursor_at_end_of_full_row_opens_next_row(self, make_session) -> None:
        session = make_session(b"a" * 10, prompt=b"", columns=10, multiline=True)
        out = session.renderer.refresh(session)
        assert out == b"\r\x1b[0K" + b"a" * 10 + b"\n\r" + b"\r"
        assert session.max_rows_used == 2

    def test_max_rows_never_decreases(self, make_session) -> None:
        session = make_session(b"a" * 25, prompt=b"", columns=10, multiline=True)
        session.renderer.refresh(session)
        session.buffer.kill_line()
        session.renderer.refresh(session)
        assert session.max_rows_used == 3

    def test_prompt_counts_towards_first_row(self, make_session) -> None:
        session = make_session(b"abcdefghij", prompt=b"> ", columns=10, multiline=True)
        out = session.renderer.refresh(session)
        assert out == b"\r\x1b[0K> abcdefghij\r\x1b[2C"
        assert session.max_rows_used == 2

    def test_wide_character_cursor_column(self, make_session) -> None:
        session = make_session(
            b"abcd" + WORLD,
            prompt=b"",
            columns=5,
            multiline=True,
            encoding=Utf8Encoding(),
        )
        out = session.renderer.refresh(session)
        assert out.endswith(b"\r\x1b[2C")
        assert session.max_rows_used == 2
