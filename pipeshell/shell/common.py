"""Shared shell types."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, BinaryIO, Union

from .. import config
from ..history import History
from ..path_lookup import ExecutableIndex

if TYPE_CHECKING:
    from .registry import CommandRegistry


@dataclass(frozen=True, slots=True)
class ExitRequest:
    """Returned by a builtin that asks the whole shell to terminate."""

    status: int = 0


StageStatus = Union[int, ExitRequest]


@dataclass(slots=True)
class ShellState:
    """Long-lived state shared by every stage of every pipeline.

    Builtins may run concurrently inside one pipeline, so mutations go
    through ``lock``.
    """

    cwd: str
    home: str = config.HOME
    history: History = field(default_factory=History)
    executables: ExecutableIndex = field(default_factory=ExecutableIndex)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)


@dataclass(slots=True)
class PipelineResult:
    statuses: list[StageStatus] = field(default_factory=list)

    @property
    def exit_request(self) -> ExitRequest | None:
        for status in self.statuses:
            if isinstance(status, ExitRequest):
                return status
        return None

    @property
    def exit_code(self) -> int:
        """Status of the last stage that ran, 0 for an empty pipeline."""
        if not self.statuses:
            return 0
        last = self.statuses[-1]
        return last.status if isinstance(last, ExitRequest) else last

    @property
    def exit_codes(self) -> list[int]:
        return [s.status if isinstance(s, ExitRequest) else s for s in self.statuses]


@dataclass(slots=True)
class BuiltinContext:
    """What a builtin handler sees: shared state plus its resolved streams."""

    state: ShellState
    stdout: BinaryIO
    stderr: BinaryIO
    registry: "CommandRegistry"

    def write(self, text: str) -> None:
        self.stdout.write(text.encode())
        self.stdout.flush()

    def write_line(self, text: str) -> None:
        self.write(f"{text}\n")

    def error(self, text: str) -> None:
        self.stderr.write(f"{text}\n".encode())
        self.stderr.flush()


ShellCommand = Callable[[BuiltinContext, list[str]], Union[int, ExitRequest, None]]


__all__ = [
    "BuiltinContext",
    "ExitRequest",
    "PipelineResult",
    "ShellCommand",
    "ShellState",
    "StageStatus",
]
