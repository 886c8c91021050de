"""Exceptions raised by the line editor."""

from __future__ import annotations


class LineEditError(Exception):
    """Base class for line editor errors."""


class Interrupted(LineEditError):
    """The user pressed Ctrl-C while editing."""


class EndOfInput(LineEditError, EOFError):
    """Ctrl-D on an empty line, or the input stream ended."""


class CapacityExceeded(LineEditError):
    """An insertion would not fit in the edit buffer."""


class HistoryError(LineEditError, ValueError):
    """Invalid history configuration."""
