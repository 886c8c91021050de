"""Configuration for the line editor."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from pi.lineedit.history import DEFAULT_HISTORY_MAX_LEN

DEFAULT_MAX_LINE = 4096


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name, "")
    try:
        return int(value) if value else default
    except ValueError:
        return default


@dataclass
class LineEditorConfig:
    """Editor settings.

    ``escape_timeout`` is the number of seconds to wait for the byte after an
    ESC before treating it as a lone Escape key press.
    """

    max_line: int = DEFAULT_MAX_LINE
    history_max_len: int = DEFAULT_HISTORY_MAX_LEN
    multiline: bool = False
    escape_timeout: float | None = 0.01
    auto_history: bool = True
    default_columns: int = 80
    write_log_path: str = field(
        default_factory=lambda: os.environ.get("PI_LINEEDIT_WRITE_LOG", "")
    )

    @classmethod
    def from_env(cls) -> LineEditorConfig:
        """Defaults overridden by ``PI_LINEEDIT_*`` environment variables."""
        config = cls()
        config.multiline = os.environ.get("PI_LINEEDIT_MULTILINE") == "1"
        config.history_max_len = _env_int(
            "PI_LINEEDIT_HISTORY_MAX_LEN", config.history_max_len
        )
        timeout_ms = _env_int("PI_LINEEDIT_ESCAPE_TIMEOUT_MS", -1)
        if timeout_ms >= 0:
            config.escape_timeout = timeout_ms / 1000.0
        return config
