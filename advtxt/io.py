"""Console front end: one REPL line in, turn replies out."""

from __future__ import annotations

import sys
from typing import TextIO

from .interfaces import IOBackend, ReplySink


class ConsoleIO(IOBackend, ReplySink):
    """Read commands from stdin and print replies, one per line.

    ``stream`` defaults to the current ``sys.stdout`` at write time, so
    redirections made after construction still apply.
    """

    def __init__(self, prompt: str = "> ", stream: TextIO | None = None) -> None:
        self.prompt = prompt
        self.stream = stream

    def get_input(self, prompt: str | None = None) -> str:
        return input(self.prompt if prompt is None else prompt)

    def output(self, text: str) -> None:
        print(text, file=self.stream or sys.stdout, flush=True)

    def emit(self, reply: str) -> None:
        self.output(reply)


__all__ = ["ConsoleIO"]
