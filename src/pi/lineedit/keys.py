"""Raw key decoding.

Turns the characters read from the terminal into editing actions. Control
characters map directly to actions; escape sequences are recognised by a
small state machine fed one byte at a time, so the decoder can be tested
without a terminal::

    decoder = KeyDecoder()
    decoder.feed(b"\\x1b", 0x1B)   # -> None, waiting for more bytes
    decoder.feed(b"[", 0x5B)       # -> None
    decoder.feed(b"D", 0x44)       # -> KeyEvent("move_left")

Unknown or truncated sequences are dropped without producing an event.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

# ---------------------------------------------------------------------------
# Key codes
# ---------------------------------------------------------------------------

CTRL_A = 1
CTRL_B = 2
CTRL_C = 3
CTRL_D = 4
CTRL_E = 5
CTRL_F = 6
CTRL_H = 8
TAB = 9
LINE_FEED = 10
CTRL_K = 11
CTRL_L = 12
ENTER = 13
CTRL_N = 14
CTRL_P = 16
CTRL_T = 20
CTRL_U = 21
CTRL_W = 23
ESC = 27
BACKSPACE = 127

EditAction = Literal[
    "insert",
    "accept",
    "interrupt",
    "delete_or_eof",
    "delete",
    "backspace",
    "transpose",
    "move_left",
    "move_right",
    "move_word_start",
    "move_word_end",
    "move_home",
    "move_end",
    "history_prev",
    "history_next",
    "clear_screen",
    "kill_line",
    "kill_to_end",
    "delete_prev_word",
    "delete_next_word",
]

CONTROL_ACTIONS: dict[int, EditAction] = {
    ENTER: "accept",
    LINE_FEED: "accept",
    CTRL_C: "interrupt",
    CTRL_D: "delete_or_eof",
    BACKSPACE: "backspace",
    CTRL_H: "backspace",
    CTRL_T: "transpose",
    CTRL_B: "move_left",
    CTRL_F: "move_right",
    CTRL_P: "history_prev",
    CTRL_N: "history_next",
    CTRL_A: "move_home",
    CTRL_E: "move_end",
    CTRL_L: "clear_screen",
    CTRL_U: "kill_line",
    CTRL_K: "kill_to_end",
    CTRL_W: "delete_prev_word",
}

# ESC <byte>
META_ACTIONS: dict[int, EditAction] = {
    ord("f"): "move_word_end",
    ord("b"): "move_word_start",
    ord("d"): "delete_next_word",
}

# ESC [ <byte>
CSI_ACTIONS: dict[int, EditAction] = {
    ord("A"): "history_prev",
    ord("B"): "history_next",
    ord("C"): "move_right",
    ord("D"): "move_left",
    ord("H"): "move_home",
    ord("F"): "move_end",
    ord("d"): "delete_next_word",
}

# ESC [ <digit> ~
TILDE_ACTIONS: dict[int, EditAction] = {
    ord("1"): "move_home",
    ord("3"): "delete",
    ord("4"): "move_end",
    ord("7"): "move_home",
    ord("8"): "move_end",
}

# ESC O <byte>
SS3_ACTIONS: dict[int, EditAction] = {
    ord("H"): "move_home",
    ord("F"): "move_end",
}


@dataclass(frozen=True)
class KeyEvent:
    """A decoded editing action, with the raw bytes for insertions."""

    action: EditAction
    data: bytes = b""


class DecoderState(Enum):
    NORMAL = "normal"
    ESCAPE_SEEN = "escape"
    ESCAPE_BRACKET_SEEN = "escape_bracket"
    ESCAPE_BRACKET_DIGIT_SEEN = "escape_bracket_digit"


def _is_digit(b: int) -> bool:
    return 0x30 <= b <= 0x39


class KeyDecoder:
    """Byte-driven state machine producing :class:`KeyEvent` values."""

    def __init__(self) -> None:
        self.state = DecoderState.NORMAL
        self._lead = 0
        self._digit = 0
        self._transitions = {
            DecoderState.NORMAL: self._on_normal,
            DecoderState.ESCAPE_SEEN: self._on_escape,
            DecoderState.ESCAPE_BRACKET_SEEN: self._on_escape_bracket,
            DecoderState.ESCAPE_BRACKET_DIGIT_SEEN: self._on_escape_bracket_digit,
        }

    @property
    def pending(self) -> bool:
        """True while an escape sequence is partially read."""
        return self.state is not DecoderState.NORMAL

    def reset(self) -> None:
        """Drop any partially read sequence."""
        self.state = DecoderState.NORMAL
        self._lead = 0
        self._digit = 0

    def feed(self, data: bytes, code: int) -> KeyEvent | None:
        """Advance the machine with one character.

        *data* is the raw bytes of the character and *code* its code point
        (inside an escape sequence this is simply the byte value). Returns
        the completed event, or ``None`` when more input is needed or the
        sequence was discarded.
        """
        return self._transitions[self.state](data, code)

    # -- transitions --------------------------------------------------------

    def _on_normal(self, data: bytes, code: int) -> KeyEvent | None:
        if code == ESC:
            self.state = DecoderState.ESCAPE_SEEN
            return None
        action = CONTROL_ACTIONS.get(code)
        if action is not None:
            return KeyEvent(action)
        return KeyEvent("insert", data)

    def _on_escape(self, data: bytes, code: int) -> KeyEvent | None:
        if code in (ord("["), ord("O")) or _is_digit(code):
            self._lead = code
            self.state = DecoderState.ESCAPE_BRACKET_SEEN
            return None
        self.reset()
        action = META_ACTIONS.get(code)
        return KeyEvent(action) if action is not None else None

    def _on_escape_bracket(self, data: bytes, code: int) -> KeyEvent | None:
        lead = self._lead
        if lead == ord("[") and _is_digit(code):
            self._digit = code
            self.state = DecoderState.ESCAPE_BRACKET_DIGIT_SEEN
            return None
        self.reset()
        if lead == ord("["):
            action = CSI_ACTIONS.get(code)
        elif lead == ord("O"):
            action = SS3_ACTIONS.get(code)
        else:
            action = None
        return KeyEvent(action) if action is not None else None

    def _on_escape_bracket_digit(self, data: bytes, code: int) -> KeyEvent | None:
        digit = self._digit
        self.reset()
        if code != ord("~"):
            return None
        action = TILDE_ACTIONS.get(digit)
        return KeyEvent(action) if action is not None else None
