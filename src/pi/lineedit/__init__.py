"""pi-lineedit: interactive single-line editing for character terminals."""

# Buffer
from pi.lineedit.buffer import EditBuffer

# Completion and hints
from pi.lineedit.completion import (
    CompletionProvider,
    Completions,
    Hint,
    HintProvider,
    HintReleaser,
)

# Configuration
from pi.lineedit.config import LineEditorConfig

# Editor
from pi.lineedit.editor import LineEditor

# Encoding strategies
from pi.lineedit.encoding import AsciiEncoding, Encoding, Utf8Encoding

# Errors
from pi.lineedit.errors import (
    CapacityExceeded,
    EndOfInput,
    HistoryError,
    Interrupted,
    LineEditError,
)

# History
from pi.lineedit.history import History

# Key decoding
from pi.lineedit.keys import DecoderState, EditAction, KeyDecoder, KeyEvent

# Rendering
from pi.lineedit.render import Renderer

# Session
from pi.lineedit.session import EditSession

# Terminal
from pi.lineedit.terminal import (
    get_columns,
    is_unsupported_term,
    print_key_codes,
    raw_mode,
)

__all__ = [
    # Buffer
    "EditBuffer",
    # Completion and hints
    "CompletionProvider",
    "Completions",
    "Hint",
    "HintProvider",
    "HintReleaser",
    # Configuration
    "LineEditorConfig",
    # Editor
    "LineEditor",
    # Encoding
    "AsciiEncoding",
    "Encoding",
    "Utf8Encoding",
    # Errors
    "CapacityExceeded",
    "EndOfInput",
    "HistoryError",
    "Interrupted",
    "LineEditError",
    # History
    "History",
    # Keys
    "DecoderState",
    "EditAction",
    "KeyDecoder",
    "KeyEvent",
    # Rendering
    "Renderer",
    # Session
    "EditSession",
    # Terminal
    "get_columns",
    "is_unsupported_term",
    "print_key_codes",
    "raw_mode",
]
