from __future__ import annotations

import io

import pytest

from pi.lineedit.buffer import EditBuffer
from pi.lineedit.completion import HintProvider
from pi.lineedit.encoding import Encoding
from pi.lineedit.history import History
from pi.lineedit.render import Renderer
from pi.lineedit.session import EditSession


@pytest.fixture
def make_session():
    """Build an EditSession writing to an in-memory stream."""

    def _make(
        content: bytes = b"",
        cursor: int | None = None,
        *,
        prompt: bytes = b"> ",
        columns: int = 80,
        multiline: bool = False,
        hint_provider: HintProvider | None = None,
        encoding: Encoding | None = None,
        capacity: int = 4096,
    ) -> EditSession:
        renderer = Renderer(encoding, multiline=multiline, hint_provider=hint_provider)
        buffer = EditBuffer(capacity, renderer.encoding)
        buffer.set_content(content)
        if cursor is not None:
            while buffer.cursor > cursor and buffer.move_left():
                pass
        return EditSession(
            buffer=buffer,
            prompt=prompt,
            columns=columns,
            out=io.BytesIO(),
            renderer=renderer,
            history=History(),
        )

    return _make
