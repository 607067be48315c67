"""
Salvo command context.

CommandEnvironment
- frozen view of the cli configuration for one invocation (names, margins,
  renderers, lifecycle hooks, output console).

CommandContext
- frozen record handed to runners, decorators, renderers and hooks: resolved values,
  tokens, the resolution outcome and the plugin extensions.

create_command_context(...)
- builds the core context, runs every extension factory against it in plugin
  order, then runs each plugin's on_extension hook on the finished context.
"""
from types import MappingProxyType

from rich.console import Console

from .commands import name_of, resolve_lazy_command
from .utils import Record, Unset, coalesce, settle


class CommandEnvironment(Record):
    """
    Read-only cli configuration.

    Renderer fields hold a coroutine function, or None when the rendering is disabled.
    """
    __slots__ = (
        "cwd",
        "name",
        "descr",
        "version",
        "left_margin",
        "middle_margin",
        "usage_option_type",
        "usage_option_value",
        "usage_silent",
        "sub_commands",
        "render_header",
        "render_usage",
        "render_validation_errors",
        "on_before_command",
        "on_after_command",
        "on_error_command",
        "console",
    )

    def __init__(
            self,
            *,
            cwd=None,
            name=None,
            descr=None,
            version=None,
            left_margin=2,
            middle_margin=10,
            usage_option_type=False,
            usage_option_value=True,
            usage_silent=False,
            sub_commands=None,
            render_header=None,
            render_usage=None,
            render_validation_errors=None,
            on_before_command=None,
            on_after_command=None,
            on_error_command=None,
            console=Unset,
    ):
        super().__init__(
            cwd=cwd,
            name=name,
            descr=descr,
            version=version,
            left_margin=left_margin,
            middle_margin=middle_margin,
            usage_option_type=bool(usage_option_type),
            usage_option_value=bool(usage_option_value),
            usage_silent=bool(usage_silent),
            sub_commands=dict(sub_commands or {}),
            render_header=render_header,
            render_usage=render_usage,
            render_validation_errors=render_validation_errors,
            on_before_command=on_before_command,
            on_after_command=on_after_command,
            on_error_command=on_error_command,
            console=coalesce(console, None) or Console(),
        )


class CommandContext(Record):
    """
    Execution context of one command.

    Fields
    - name / descr: identity of the selected command (name may be None for an anonymous entry).
    - command: the selected Command / LazyCommand node.
    - env: CommandEnvironment
    - args: merged schema (global options, then the command's own args).
    - values / explicit: resolved values, and which of them came from the command line.
    - positionals / rest: positional values left after the command path, values after "--".
    - argv / tokens: the raw command line and its tokens.
    - omitted / call_mode / command_path / depth / level_sub_commands: resolution outcome.
    - validation_error: ArgumentsValidationError | None
    - extensions: read-only mapping plugin id → extension value (values stay as built).
    """
    __slots__ = (
        "name",
        "descr",
        "command",
        "env",
        "args",
        "values",
        "explicit",
        "positionals",
        "rest",
        "argv",
        "tokens",
        "omitted",
        "call_mode",
        "command_path",
        "depth",
        "level_sub_commands",
        "validation_error",
        "extensions",
    )
    __thawed__ = ("command", "env", "validation_error", "extensions")

    def log(self, *messages):
        """
        Print to the environment console, unless usage output is silenced.
        """
        if self.env.usage_silent:
            return
        self.env.console.print(*messages, markup=False, highlight=False)

    async def load_commands(self):
        """
        Return ResolvedCommand records for this level's sub-commands (metadata only).
        """
        return [
            await resolve_lazy_command(node, name)
            for name, node in (self.level_sub_commands or {}).items()
        ]


async def create_command_context(
        *,
        command,
        env,
        args=None,
        values=None,
        explicit=None,
        positionals=(),
        rest=(),
        argv=(),
        tokens=(),
        omitted=False,
        call_mode="entry",
        command_path=(),
        depth=0,
        level_sub_commands=None,
        validation_error=None,
        extensions=None,
):
    """
    Assemble the context of `command` and apply plugin extensions.

    Parameters
    - extensions: Mapping[str, Extension] | None, as returned by collect_extensions().

    Behavior
    - every factory receives the core context (no extensions yet) and the command node;
      factories run in mapping order and are awaited one at a time.
    - on_factory hooks run afterwards, in the same order, with the finished context.
    """
    core = CommandContext(
        name=name_of(command),
        descr=getattr(command, "descr", None) or None,
        command=command,
        env=env,
        args=dict(args or {}),
        values=dict(values or {}),
        explicit=dict(explicit or {}),
        positionals=tuple(positionals),
        rest=tuple(rest),
        argv=tuple(argv),
        tokens=tuple(tokens),
        omitted=bool(omitted),
        call_mode=call_mode,
        command_path=tuple(command_path),
        depth=depth,
        level_sub_commands=level_sub_commands,
        validation_error=validation_error,
        extensions=MappingProxyType({}),
    )
    if not extensions:
        return core

    values = {}
    for id, extension in extensions.items():
        values[id] = await settle(extension.factory(core, command))
    ctx = core.__replace__(extensions=MappingProxyType(values))

    for extension in extensions.values():
        if extension.on_factory is not None:
            await settle(extension.on_factory(ctx, command))
    return ctx


__all__ = (
    "CommandEnvironment",
    "CommandContext",
    "create_command_context",
)
