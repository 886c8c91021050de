"""Completion and hint provider interfaces."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

# SGR colour used when a hint asks for bold without naming a colour.
DEFAULT_BOLD_HINT_COLOR = 37


@dataclass
class Completions:
    """Candidate lines collected by a :class:`CompletionProvider`."""

    candidates: list[str] = field(default_factory=list)

    def add(self, candidate: str) -> None:
        self.candidates.append(candidate)

    def __len__(self) -> int:
        return len(self.candidates)

    def __getitem__(self, index: int) -> str:
        return self.candidates[index]


@dataclass
class Hint:
    """Text shown to the right of the cursor.

    ``color`` is an SGR foreground colour (30-37, 90-97) or ``-1`` for the
    terminal default.
    """

    text: str
    color: int = -1
    bold: bool = False

    def style(self) -> str:
        """SGR sequence that starts the hint, or ``""`` when unstyled."""
        color = self.color
        if self.bold and color == -1:
            color = DEFAULT_BOLD_HINT_COLOR
        if color == -1 and not self.bold:
            return ""
        return f"\x1b[{int(self.bold)};{color};49m"


class CompletionProvider(Protocol):
    """Adds candidate replacements for the current line on Tab."""

    def complete(self, line: str, completions: Completions) -> None: ...


class HintProvider(Protocol):
    """Returns the hint to display after the current line, if any."""

    def hint(self, line: str) -> Hint | None: ...


class HintReleaser(Protocol):
    """Called with each hint once it has been drawn."""

    def release(self, hint: Hint) -> None: ...
