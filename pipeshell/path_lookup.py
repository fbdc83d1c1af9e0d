"""Index of executables reachable through the search path."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

logger = logging.getLogger(__name__)


class ExecutableIndex:
    """Map command names to the first executable found on the search path."""

    def __init__(self, executables: dict[str, str] | None = None) -> None:
        self._executables: dict[str, str] = dict(executables or {})

    @classmethod
    def scan(cls, search_path: str | None = None) -> "ExecutableIndex":
        if search_path is None:
            search_path = os.environ.get("PATH", os.defpath)
        return cls(_scan_directories(search_path.split(os.pathsep)))

    def resolve(self, name: str) -> str | None:
        return self._executables.get(name)

    def names(self) -> set[str]:
        return set(self._executables)

    def __contains__(self, name: object) -> bool:
        return name in self._executables

    def __len__(self) -> int:
        return len(self._executables)


def _scan_directories(directories: Iterable[str]) -> dict[str, str]:
    found: dict[str, str] = {}
    for directory in directories:
        if not directory or not os.path.isdir(directory):
            continue
        try:
            entries = list(os.scandir(directory))
        except OSError as exc:
            logger.debug("skipping unreadable path entry %s: %s", directory, exc)
            continue
        for entry in entries:
            if entry.name in found:
                continue
            try:
                is_file = entry.is_file()
            except OSError:
                continue
            if is_file and os.access(entry.path, os.X_OK):
                found[entry.name] = os.path.abspath(entry.path)
    logger.debug("indexed %d executables", len(found))
    return found


__all__ = ["ExecutableIndex"]
