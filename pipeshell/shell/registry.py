"""Registry for shell builtins."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .common import ShellCommand

BUILTIN_NAMES = frozenset({"exit", "echo", "type", "pwd", "cd", "history"})


@dataclass(slots=True)
class BuiltinSpec:
    name: str
    handler: ShellCommand
    # stop starting later pipeline stages once this one has started
    terminates: bool = False


class CommandRegistry:
    """Handlers for the closed set of builtin names, matched case-insensitively."""

    def __init__(self) -> None:
        self._commands: dict[str, BuiltinSpec] = {}

    def register(
        self,
        name: str,
        handler: ShellCommand,
        *,
        terminates: bool = False,
    ) -> ShellCommand:
        key = name.lower()
        if key not in BUILTIN_NAMES:
            raise ValueError(f"{name} is not a shell builtin")
        self._commands[key] = BuiltinSpec(key, handler, terminates)
        return handler

    def command(
        self,
        name: str,
        *,
        terminates: bool = False,
    ) -> Callable[[ShellCommand], ShellCommand]:
        """Decorator variant for registering builtins."""

        def decorator(func: ShellCommand) -> ShellCommand:
            return self.register(name, func, terminates=terminates)

        return decorator

    @staticmethod
    def is_builtin(name: str) -> bool:
        return name.lower() in BUILTIN_NAMES

    def lookup(self, name: str) -> BuiltinSpec | None:
        return self._commands.get(name.lower())

    def names(self) -> list[str]:
        return sorted(BUILTIN_NAMES)


COMMAND_REGISTRY = CommandRegistry()


__all__ = ["BUILTIN_NAMES", "COMMAND_REGISTRY", "BuiltinSpec", "CommandRegistry"]
