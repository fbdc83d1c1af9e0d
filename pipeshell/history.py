"""In-memory command history with an on-disk flush cursor."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

logger = logging.getLogger(__name__)


def _read_lines(path: str) -> list[str]:
    with open(path, encoding="utf-8") as handle:
        return [line.rstrip("\n") for line in handle if line.strip()]


def _write_lines(path: str, lines: Iterable[str], *, append: bool) -> None:
    with open(path, "a" if append else "w", encoding="utf-8") as handle:
        for line in lines:
            handle.write(f"{line}\n")


class History:
    """Append-only list of input lines.

    ``flushed`` counts the leading entries already persisted, so
    :meth:`append_new` only ever writes the lines typed since the last flush.
    """

    def __init__(self, entries: Iterable[str] | None = None) -> None:
        self._entries: list[str] = list(entries or [])
        self._flushed = 0

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def flushed(self) -> int:
        return self._flushed

    def entries(self) -> list[str]:
        return list(self._entries)

    def append(self, line: str) -> None:
        self._entries.append(line)

    def tail(self, count: int | None = None) -> list[tuple[int, str]]:
        """Return ``(number, line)`` pairs for the last ``count`` entries."""
        total = len(self._entries)
        if count is None:
            count = total
        count = max(0, min(count, total))
        start = total - count
        return [(start + offset + 1, line) for offset, line in enumerate(self._entries[start:])]

    def load(self, path: str) -> int:
        """Seed history from ``path``, keeping buffered entries after the file's."""
        if not os.path.exists(path):
            logger.debug("history file %s does not exist yet", path)
            return 0
        persisted = _read_lines(path)
        self._entries = persisted + self._entries
        self._flushed = len(persisted)
        logger.debug("loaded %d history entries from %s", len(persisted), path)
        return len(persisted)

    def read(self, path: str) -> int:
        lines = _read_lines(path)
        self._entries.extend(lines)
        return len(lines)

    def write(self, path: str) -> int:
        _write_lines(path, self._entries, append=False)
        self._flushed = len(self._entries)
        return len(self._entries)

    def append_new(self, path: str) -> int:
        pending = self._entries[self._flushed :]
        if pending:
            _write_lines(path, pending, append=True)
        self._flushed = len(self._entries)
        return len(pending)


__all__ = ["History"]
