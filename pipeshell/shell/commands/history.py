"""History builtin."""

from __future__ import annotations

import logging

from ..common import BuiltinContext
from ..registry import COMMAND_REGISTRY
from ...path_utils import absolute_path

logger = logging.getLogger(__name__)

_FILE_OPTIONS = ("-r", "-w", "-a")


def _file_operation(ctx: BuiltinContext, option: str, args: list[str]) -> int:
    if not args:
        ctx.error(f"history: {option}: option requires an argument")
        return 2
    book = ctx.state.history
    with ctx.state.lock:
        path = absolute_path(args[0], ctx.state.cwd)
        try:
            if option == "-r":
                book.read(path)
            elif option == "-w":
                book.write(path)
            else:
                book.append_new(path)
        except OSError as exc:
            logger.warning("history %s %s failed: %s", option, path, exc)
            ctx.error(f"history: {args[0]}: {exc.strerror or exc}")
            return 1
    return 0


@COMMAND_REGISTRY.command("history")
def history(ctx: BuiltinContext, args: list[str]) -> int:
    if args and args[0] in _FILE_OPTIONS:
        return _file_operation(ctx, args[0], args[1:])
    count: int | None = None
    if args:
        try:
            count = int(args[0])
        except ValueError:
            ctx.error(f"history: {args[0]}: numeric argument required")
            return 2
    with ctx.state.lock:
        entries = ctx.state.history.tail(count)
    ctx.write("".join(f"{number:>5}  {line}\n" for number, line in entries))
    return 0
