"""Builtins that talk about the shell itself."""

from __future__ import annotations

from ..common import BuiltinContext, ExitRequest
from ..registry import COMMAND_REGISTRY


@COMMAND_REGISTRY.command("exit", terminates=True)
def exit(ctx: BuiltinContext, _: list[str]) -> ExitRequest:  # noqa: A001
    return ExitRequest(0)


@COMMAND_REGISTRY.command("echo")
def echo(ctx: BuiltinContext, args: list[str]) -> int:
    newline = True
    if args and args[0] == "-n":
        newline = False
        args = args[1:]
    text = " ".join(args)
    ctx.write(f"{text}\n" if newline else text)
    return 0


@COMMAND_REGISTRY.command("type")
def type(ctx: BuiltinContext, args: list[str]) -> int:  # noqa: A001
    status = 0
    for name in args:
        if ctx.registry.is_builtin(name):
            ctx.write_line(f"{name} is a shell builtin")
            continue
        path = ctx.state.executables.resolve(name)
        if path is not None:
            ctx.write_line(f"{name} is {path}")
            continue
        ctx.error(f"{name}: not found")
        status = 1
    return status
