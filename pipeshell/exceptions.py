"""Exception hierarchy for pipeshell."""

from __future__ import annotations


class ShellError(Exception):
    """Base class for shell errors."""


class InvalidCommand(ShellError):
    """Raised when a token group cannot form a command."""


class RedirectError(ShellError):
    """Raised when a redirect target cannot be opened."""

    def __init__(self, path: str, error: OSError | ValueError) -> None:
        self.path = path
        self.error = error
        super().__init__(f"{path}: {getattr(error, 'strerror', None) or error}")


__all__ = ["ShellError", "InvalidCommand", "RedirectError"]
