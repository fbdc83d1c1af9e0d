"""Tab completion of command names for the interactive prompt."""

from __future__ import annotations

import os
import readline
import sys
from collections.abc import Callable, Iterable
from typing import TextIO

from . import config

BELL = "\a"


class CommandCompleter:
    """readline completer over builtin and executable names.

    A unique match completes with a trailing space. With several matches the
    first TAB extends to their common prefix or rings the bell, and the second
    TAB lists every candidate.
    """

    def __init__(
        self,
        names: Iterable[str],
        *,
        output: TextIO | None = None,
        line_buffer: Callable[[], str] = readline.get_line_buffer,
        prompt: str = config.PROMPT,
    ) -> None:
        self.names = sorted(set(names))
        self.output = output or sys.stdout
        self.line_buffer = line_buffer
        self.prompt = prompt
        self._last_text: str | None = None
        self._matches: list[str] = []
        self._tab_count = 0

    def matches(self, text: str) -> list[str]:
        return [name for name in self.names if name.startswith(text)]

    def complete(self, text: str, state: int) -> str | None:
        if state != 0:
            return None
        if text != self._last_text:
            self._last_text = text
            self._matches = self.matches(text)
            self._tab_count = 0
        if not self._matches:
            return None
        if len(self._matches) == 1:
            return f"{self._matches[0]} "
        common = os.path.commonprefix(self._matches)
        if len(common) > len(text):
            return common
        self._tab_count += 1
        if self._tab_count == 1:
            self.output.write(BELL)
        else:
            self.output.write(f"\n{'  '.join(self._matches)}\n{self.prompt}{self.line_buffer()}")
            self._tab_count = 0
        self.output.flush()
        return None


def install(completer: CommandCompleter) -> None:
    readline.set_completer_delims(" \t\n")
    readline.set_completer(completer.complete)
    readline.parse_and_bind("tab: complete")


__all__ = ["CommandCompleter", "install"]
