"""Navigation-oriented builtins."""

from __future__ import annotations

import os

from ..common import BuiltinContext
from ..registry import COMMAND_REGISTRY
from ...path_utils import absolute_path, resolve_directory


@COMMAND_REGISTRY.command("pwd")
def pwd(ctx: BuiltinContext, _: list[str]) -> int:
    with ctx.state.lock:
        cwd = ctx.state.cwd
    ctx.write_line(cwd)
    return 0


@COMMAND_REGISTRY.command("cd")
def cd(ctx: BuiltinContext, args: list[str]) -> int:
    if len(args) > 1:
        ctx.error("cd: too many arguments")
        return 1
    target = args[0] if args else "~"
    with ctx.state.lock:
        resolved = resolve_directory(target, ctx.state.cwd, ctx.state.home)
        candidate = absolute_path(resolved, ctx.state.cwd)
        if not os.path.exists(candidate):
            ctx.error(f"cd: {resolved}: No such file or directory")
            return 1
        if not os.path.isdir(candidate):
            ctx.error(f"cd: {resolved}: Not a directory")
            return 1
        ctx.state.cwd = candidate
    return 0
