"""Helpers for resolving directory arguments against the shell's cwd."""

from __future__ import annotations

import posixpath

ROOT = "/"


def parent_directory(path: str) -> str:
    """Return the parent of an absolute path, clamped at the root."""
    parent = posixpath.dirname(path.rstrip("/") or ROOT)
    return parent or ROOT


def resolve_directory(path: str, cwd: str, home: str) -> str:
    """Rewrite ``~``, ``..``, ``../`` and ``./`` forms relative to ``cwd``.

    Anything else is returned unchanged; existence checks are left to the
    caller.
    """
    if path.startswith("~"):
        path = home + path[1:]

    if path == "..":
        return parent_directory(cwd)

    if path.startswith("../"):
        base = cwd
        while path.startswith("../"):
            path = path[3:]
            base = parent_directory(base)
        return posixpath.join(base, path) if path else base

    if path.startswith("./"):
        path = posixpath.join(cwd, path[2:])

    return path


def absolute_path(path: str, cwd: str) -> str:
    """Anchor ``path`` at ``cwd`` unless it is already absolute."""
    return posixpath.normpath(posixpath.join(cwd, path))


__all__ = ["ROOT", "absolute_path", "parent_directory", "resolve_directory"]
