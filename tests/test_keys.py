"""Tests for pi.lineedit.keys -- the key decoder state machine."""

from __future__ import annotations

import pytest

from pi.lineedit.keys import DecoderState, KeyDecoder, KeyEvent


def feed_all(decoder: KeyDecoder, data: bytes) -> list[KeyEvent]:
    events = []
    for b in data:
        event = decoder.feed(bytes([b]), b)
        if event is not None:
            events.append(event)
    return events


class TestPrintable:
    def test_printable_is_insert(self) -> None:
        assert KeyDecoder().feed(b"a", ord("a")) == KeyEvent("insert", b"a")

    def test_multibyte_character_keeps_bytes(self) -> None:
        data = "世".encode()
        assert KeyDecoder().feed(data, 0x4E16) == KeyEvent("insert", data)

    def test_tab_is_inserted(self) -> None:
        assert KeyDecoder().feed(b"\t", 9) == KeyEvent("insert", b"\t")


class TestControlCharacters:
    @pytest.mark.parametrize(
        "code, action",
        [
            (13, "accept"),
            (10, "accept"),
            (3, "interrupt"),
            (4, "delete_or_eof"),
            (127, "backspace"),
            (8, "backspace"),
            (20, "transpose"),
            (2, "move_left"),
            (6, "move_right"),
            (16, "history_prev"),
            (14, "history_next"),
            (1, "move_home"),
            (5, "move_end"),
            (12, "clear_screen"),
            (21, "kill_line"),
            (11, "kill_to_end"),
            (23, "delete_prev_word"),
        ],
    )
    def test_mapping(self, code: int, action: str) -> None:
        assert KeyDecoder().feed(bytes([code]), code) == KeyEvent(action)  # type: ignore[arg-type]


class TestEscapeSequences:
    @pytest.mark.parametrize(
        "seq, action",
        [
            (b"\x1b[A", "history_prev"),
            (b"\x1b[B", "history_next"),
            (b"\x1b[C", "move_right"),
            (b"\x1b[D", "move_left"),
            (b"\x1b[H", "move_home"),
            (b"\x1b[F", "move_end"),
            (b"\x1b[d", "delete_next_word"),
            (b"\x1b[3~", "delete"),
            (b"\x1b[1~", "move_home"),
            (b"\x1b[4~", "move_end"),
            (b"\x1bOH", "move_home"),
            (b"\x1bOF", "move_end"),
            (b"\x1bf", "move_word_end"),
            (b"\x1bb", "move_word_start"),
            (b"\x1bd", "delete_next_word"),
        ],
    )
    def test_recognised(self, seq: bytes, action: str) -> None:
        assert feed_all(KeyDecoder(), seq) == [KeyEvent(action)]  # type: ignore[arg-type]

    def test_pending_while_incomplete(self) -> None:
        decoder = KeyDecoder()
        decoder.feed(b"\x1b", 27)
        assert decoder.pending
        assert decoder.state is DecoderState.ESCAPE_SEEN
        decoder.feed(b"[", ord("["))
        assert decoder.state is DecoderState.ESCAPE_BRACKET_SEEN
        decoder.feed(b"3", ord("3"))
        assert decoder.state is DecoderState.ESCAPE_BRACKET_DIGIT_SEEN
        decoder.feed(b"~", ord("~"))
        assert not decoder.pending

    @pytest.mark.parametrize(
        "seq",
        [b"\x1bx", b"\x1b[Z", b"\x1b[3x", b"\x1b[5~", b"\x1bOA", b"\x1b5x"],
    )
    def test_unknown_sequences_are_discarded(self, seq: bytes) -> None:
        decoder = KeyDecoder()
        assert feed_all(decoder, seq) == []
        assert decoder.state is DecoderState.NORMAL

    def test_input_after_discarded_sequence(self) -> None:
        decoder = KeyDecoder()
        assert feed_all(decoder, b"\x1b[Zab") == [
            KeyEvent("insert", b"a"),
            KeyEvent("insert", b"b"),
        ]

    def test_reset_drops_partial_sequence(self) -> None:
        decoder = KeyDecoder()
        decoder.feed(b"\x1b", 27)
        decoder.reset()
        assert decoder.feed(b"D", ord("D")) == KeyEvent("insert", b"D")
