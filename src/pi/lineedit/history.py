"""Bounded line history with adjacent-duplicate suppression.

The newest entry doubles as a scratch slot while a line is being edited: the
editor pushes an empty entry when a session starts and keeps it in sync with
the live buffer during up/down navigation, so leaving an in-progress line and
coming back to it loses nothing.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, Literal

from pi.lineedit.errors import HistoryError

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_MAX_LEN = 100

HistoryDirection = Literal["prev", "next"]


class History:
    """Ordered history entries, oldest first."""

    def __init__(self, max_len: int = DEFAULT_HISTORY_MAX_LEN) -> None:
        if max_len < 0:
            raise HistoryError("history length cannot be negative")
        self._entries: list[str] = []
        self._max_len = max_len

    # -- accessors ------------------------------------------------------------

    @property
    def max_len(self) -> int:
        return self._max_len

    @property
    def entries(self) -> list[str]:
        """A copy of the entries, oldest first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __getitem__(self, index: int) -> str:
        return self._entries[index]

    # -- mutation -------------------------------------------------------------

    def add(self, line: str) -> bool:
        """Append *line*, evicting the oldest entry when full.

        Args:
            line: The entry to record.

        Returns:
            ``False`` when nothing was added, because history is disabled
            (capacity zero) or *line* equals the newest entry.
        """
        if self._max_len == 0:
            return False
        if self._entries and self._entries[-1] == line:
            return False
        if len(self._entries) == self._max_len:
            del self._entries[0]
        self._entries.append(line)
        return True

    def set_max_len(self, max_len: int) -> None:
        """Change the capacity, keeping only the newest entries.

        Args:
            max_len: New capacity, at least 1.

        Raises:
            HistoryError: If *max_len* is below 1.
        """
        if max_len < 1:
            raise HistoryError(f"history length must be at least 1, got {max_len}")
        kept = self._entries[-max_len:]
        self._entries = kept
        self._max_len = max_len

    def clear(self) -> None:
        self._entries = []

    def replace_newest(self, line: str) -> None:
        if self._entries:
            self._entries[-1] = line

    def pop_newest(self) -> str | None:
        return self._entries.pop() if self._entries else None

    # -- navigation -----------------------------------------------------------

    def navigate(
        self, index: int, current: str, direction: HistoryDirection
    ) -> tuple[int, str] | None:
        """Step away from the entry at *index*.

        The entry at *index* is first overwritten with *current* so edits to a
        recalled line survive moving away from it.

        Args:
            index: Distance from the newest entry, 0 being the newest.
            current: The live buffer contents.
            direction: ``"prev"`` for older entries, ``"next"`` for newer ones.

        Returns:
            ``(new_index, entry)`` to display, or ``None`` when there is
            nothing to navigate or the step would run past either end.
        """
        count = len(self._entries)
        if count <= 1:
            return None
        self._entries[count - 1 - index] = current
        index += 1 if direction == "prev" else -1
        if index < 0 or index >= count:
            return None
        return index, self._entries[count - 1 - index]

    # -- persistence ----------------------------------------------------------

    def save(self, path: str | os.PathLike[str]) -> None:
        """Write all entries, one per line, to a file only the owner can read."""
        path = Path(path)
        old_umask = os.umask(0o177)
        try:
            with open(path, "w", encoding="utf-8", errors="surrogateescape") as f:
                os.chmod(path, 0o600)
                for line in self._entries:
                    f.write(line + "\n")
        finally:
            os.umask(old_umask)
        logger.debug("Saved %d history entries to %s", len(self._entries), path)

    def load(self, path: str | os.PathLike[str]) -> None:
        """Feed every line of *path* through :meth:`add`.

        Raises ``FileNotFoundError`` when the file does not exist.
        """
        path = Path(path)
        count = 0
        # Only "\n" ends an entry; anything after a "\r" on the line is dropped.
        with open(
            path, encoding="utf-8", errors="surrogateescape", newline="\n"
        ) as f:
            for raw in f:
                line = raw
                cut = line.find("\r")
                if cut == -1:
                    cut = line.find("\n")
                if cut != -1:
                    line = line[:cut]
                self.add(line)
                count += 1
        logger.debug("Loaded %d history lines from %s", count, path)

    # -- completion helper ----------------------------------------------------

    def matching(self, prefix: str) -> list[str]:
        """Entries starting with *prefix*, compared case-insensitively."""
        folded = prefix.casefold()
        n = len(prefix)
        return [e for e in self._entries if e[:n].casefold() == folded]
