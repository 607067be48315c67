"""
Salvo execution orchestrator.
"""
import logging

from .commands import LazyCommand, resolve_lazy_command
from .decorators import fold_runners
from .utils import settle

logger = logging.getLogger(__name__)


async def _noop(ctx, /):
    return None


async def execute_command(command, ctx, command_decorators=(), /, *, name=None):
    """
    Run `command` with `ctx` through the command-decorator chain and lifecycle hooks.

    Sequence
    - lazy commands are loaded first (LazyCommandError propagates before any hook);
    - the base runner is the command's `run`, or a no-op when it has none;
    - the runner is folded through `command_decorators` (see fold_runners);
    - env.on_before_command(ctx), the decorated runner, env.on_after_command(ctx, result).

    Returns
    - the runner's result when it is a string, None otherwise.

    Failure
    - an exception raised by the before hook, a decorator or the runner calls
      env.on_error_command(ctx, error) once, then the very same exception is
      re-raised. A failing error hook is logged and never replaces the original.
    """
    if isinstance(command, LazyCommand):
        command = await resolve_lazy_command(command, name, load=True)
    runner = fold_runners(command_decorators, command.run or _noop)

    env = ctx.env
    try:
        if env.on_before_command is not None:
            await settle(env.on_before_command(ctx))
        result = await runner(ctx)
        if env.on_after_command is not None:
            await settle(env.on_after_command(ctx, result))
    except Exception as error:
        if env.on_error_command is not None:
            try:
                await settle(env.on_error_command(ctx, error))
            except Exception:
                logger.exception("Error in on_error_command hook")
        raise

    return result if isinstance(result, str) else None


__all__ = (
    "execute_command",
)
