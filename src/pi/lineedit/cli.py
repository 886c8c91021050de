"""Entry point for the pi-lineedit demo REPL."""

from __future__ import annotations

import argparse
import logging
import sys

from pi.lineedit.completion import Completions, Hint
from pi.lineedit.config import LineEditorConfig
from pi.lineedit.editor import LineEditor
from pi.lineedit.encoding import Utf8Encoding
from pi.lineedit.errors import EndOfInput, HistoryError, Interrupted
from pi.lineedit.terminal import print_key_codes

logger = logging.getLogger(__name__)


class DemoCompletion:
    def complete(self, line: str, completions: Completions) -> None:
        if line.startswith("h"):
            completions.add("hello")
            completions.add("hello there")


class DemoHints:
    def hint(self, line: str) -> Hint | None:
        if line.lower() == "hello":
            return Hint(" World", color=35, bold=False)
        return None


def main() -> None:
    parser = argparse.ArgumentParser(description="pi-lineedit: line editing demo")
    parser.add_argument("--multiline", action="store_true", help="Enable multi-line mode")
    parser.add_argument("--keycodes", action="store_true", help="Print key codes and exit")
    parser.add_argument("--utf8", action="store_true", help="Use UTF-8 aware editing")
    parser.add_argument(
        "--history-file", default="history.txt", help="History file (default: history.txt)"
    )
    parser.add_argument("--log-level", default="warning", choices=["debug", "info", "warning", "error"])
    parser.add_argument("--log-file", default=None, help="Write logs here instead of stderr")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        filename=args.log_file,
    )

    if args.keycodes:
        print_key_codes(sys.stdin.fileno(), sys.stdout.buffer)
        return

    config = LineEditorConfig.from_env()
    if args.multiline:
        config.multiline = True
    config.auto_history = False

    editor = LineEditor(config, encoding=Utf8Encoding() if args.utf8 else None)
    editor.set_completion_provider(DemoCompletion())
    editor.set_hint_provider(DemoHints())

    try:
        editor.load_history(args.history_file)
    except FileNotFoundError:
        logger.info("No history file at %s", args.history_file)

    while True:
        try:
            line = editor.read_line("hello> ")
        except (Interrupted, EndOfInput):
            break

        if line.startswith("/historylen"):
            try:
                editor.set_history_max_len(int(line.split()[1]))
            except (IndexError, ValueError, HistoryError) as e:
                print(f"Invalid history length: {e}")
            continue
        if line.startswith("/"):
            print(f"Unrecognized command: {line}")
            continue
        if line:
            print(f"echo: '{line}'")
            editor.add_history(line)
            editor.save_history(args.history_file)


if __name__ == "__main__":
    main()
