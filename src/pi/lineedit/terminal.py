"""Low-level terminal handling: raw mode, width discovery, screen control.

Raw mode is process-wide state. :func:`raw_mode` hands it to at most one
caller at a time and always restores the saved attributes when the ``with``
block exits; an ``atexit`` hook, registered once, restores them if the
process exits while still raw.
"""

from __future__ import annotations

import atexit
import contextlib
import logging
import os
import re
import select
import sys
import termios
import tty
from typing import BinaryIO, Iterator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_CURSOR_POSITION_QUERY = b"\x1b[6n"
_CURSOR_TO_RIGHT_MARGIN = b"\x1b[999C"
_CURSOR_BACK_FMT = b"\x1b[%dD"
_CLEAR_SCREEN = b"\x1b[H\x1b[2J"
_BEL = "\x07"

_CURSOR_REPORT_RE = re.compile(rb"^\x1b\[(\d+);(\d+)$")

UNSUPPORTED_TERMS = ("dumb", "cons25", "emacs")

DEFAULT_COLUMNS = 80

# ---------------------------------------------------------------------------
# Process-wide raw mode state
# ---------------------------------------------------------------------------

_raw_fd: int | None = None
_original_termios: list | None = None
_atexit_registered = False


def is_unsupported_term() -> bool:
    """True when ``$TERM`` names a terminal without basic escape support."""
    term = os.environ.get("TERM")
    if term is None:
        return False
    return term.lower() in UNSUPPORTED_TERMS


def is_raw_mode_active() -> bool:
    return _raw_fd is not None


def enable_raw_mode(fd: int) -> None:
    """Put *fd* in raw mode, remembering its attributes for restore.

    Raises ``OSError`` if *fd* is not a terminal and ``RuntimeError`` if raw
    mode is already held.
    """
    global _raw_fd, _original_termios, _atexit_registered

    if _raw_fd is not None:
        raise RuntimeError("raw mode is already enabled")
    if not os.isatty(fd):
        raise OSError(f"fd {fd} is not a terminal")
    if not _atexit_registered:
        atexit.register(_restore_at_exit)
        _atexit_registered = True

    original = termios.tcgetattr(fd)
    tty.setraw(fd, termios.TCSAFLUSH)
    _original_termios = original
    _raw_fd = fd


def disable_raw_mode() -> None:
    """Restore the attributes saved by :func:`enable_raw_mode`."""
    global _raw_fd, _original_termios

    if _raw_fd is None:
        return
    fd, original = _raw_fd, _original_termios
    _raw_fd = None
    _original_termios = None
    if original is not None:
        termios.tcsetattr(fd, termios.TCSAFLUSH, original)


@contextlib.contextmanager
def raw_mode(fd: int) -> Iterator[None]:
    """Hold raw mode on *fd* for the duration of the block."""
    enable_raw_mode(fd)
    try:
        yield
    finally:
        disable_raw_mode()


def _restore_at_exit() -> None:
    try:
        disable_raw_mode()
    except termios.error:
        pass


# ---------------------------------------------------------------------------
# Terminal size
# ---------------------------------------------------------------------------


def get_cursor_position(ifd: int, ofd: int) -> int | None:
    """Ask the terminal where the cursor is and return its column.

    Sends ``ESC [ 6n`` and parses the ``ESC [ row ; col R`` reply.
    """
    if os.write(ofd, _CURSOR_POSITION_QUERY) != len(_CURSOR_POSITION_QUERY):
        return None

    reply = bytearray()
    while len(reply) < 31:
        ch = os.read(ifd, 1)
        if len(ch) != 1 or ch == b"R":
            break
        reply += ch

    match = _CURSOR_REPORT_RE.match(bytes(reply))
    if match is None:
        return None
    return int(match.group(2))


def get_columns(ifd: int, ofd: int) -> int:
    """Terminal width in cells, or 80 when it cannot be determined."""
    try:
        columns = os.get_terminal_size(ofd).columns
    except OSError:
        columns = 0
    if columns > 0:
        return columns

    # No window size from the OS: measure by moving to the right margin.
    try:
        start = get_cursor_position(ifd, ofd)
        if start is None:
            return DEFAULT_COLUMNS
        os.write(ofd, _CURSOR_TO_RIGHT_MARGIN)
        columns = get_cursor_position(ifd, ofd)
        if columns is None:
            return DEFAULT_COLUMNS
        if columns > start:
            os.write(ofd, _CURSOR_BACK_FMT % (columns - start))
    except OSError:
        logger.debug("cursor position query failed", exc_info=True)
        return DEFAULT_COLUMNS
    logger.debug("terminal width from cursor position: %d", columns)
    return columns


# ---------------------------------------------------------------------------
# Screen / input helpers
# ---------------------------------------------------------------------------


def clear_screen(out: BinaryIO) -> None:
    """Move home and clear the whole screen."""
    out.write(_CLEAR_SCREEN)
    out.flush()


def beep() -> None:
    """Ring the bell on stderr."""
    sys.stderr.write(_BEL)
    sys.stderr.flush()


def wait_readable(stream: BinaryIO, timeout: float | None) -> bool:
    """Wait up to *timeout* seconds for *stream* to have input.

    Streams without a file descriptor (in-memory buffers) are always
    considered readable. A ``None`` timeout does not wait at all.
    """
    if timeout is None:
        return True
    try:
        fd = stream.fileno()
    except (AttributeError, OSError, ValueError):
        return True
    ready, _, _ = select.select([fd], [], [], timeout)
    return bool(ready)


def print_key_codes(fd: int, out: BinaryIO) -> None:
    """Echo the code of every key pressed until ``quit`` is typed.

    A debugging aid for finding out what a terminal sends.
    """
    out.write(
        b"Key codes debugging mode.\n"
        b"Press keys to see scan codes. Type 'quit' at any time to exit.\n"
    )
    out.flush()
    window = bytearray(b"    ")
    with raw_mode(fd):
        while True:
            data = os.read(fd, 1)
            if not data:
                break
            c = data[0]
            window = window[1:] + data
            if window == b"quit":
                break
            shown = chr(c) if 0x20 <= c < 0x7F else "?"
            out.write(f"'{shown}' {c:02x} ({c}) (type quit to exit)\n\r".encode())
            out.flush()
