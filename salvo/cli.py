"""
Salvo cli pipeline.

Scope
- CliOptions: configuration of one cli (names, margins, renderers, hooks, plugins).
- cli_core(argv, entry, options, plugins): the bare pipeline, only the given plugins.
- cli(argv, entry, options): cli_core() with the built-in globals and renderer plugins.
- generate(command, entry, options): the usage text of a command, without running it.
- run(entry, argv, options): blocking shell entry point; faults are printed with rich
  and end the process with status 1.

Pipeline
1. resolve the plugin order (configuration faults raise here, before any setup);
2. install plugins on a fresh PluginContext, then seal it;
3. build the CommandEnvironment (renderer chains, hooks);
4. tokenize argv and resolve the command tree from the leading positionals;
5. an unexpected command raises CommandNotFoundError with a suggestion;
6. resolve argument values (path segments skipped), build the context with extensions;
7. execute the command through the command-decorator chain.

Example
    from salvo import Arg, command, run

    @command(args={"name": Arg(default="world")})
    def hello(ctx):
        ctx.log(f"hello {ctx.values['name']}")

    if __name__ == "__main__":
        run(hello, options={"name": "hello", "version": "1.0.0"})
"""
import asyncio
import difflib
import logging
import sys
from collections.abc import Mapping

from rich.logging import RichHandler

from . import faults
from .builtins import builtin_plugins
from .commands import ANONYMOUS_COMMAND_NAME, entry_alias, entry_command, name_of
from .context import CommandEnvironment, create_command_context
from .decorators import Decorators
from .execution import execute_command
from .faults import CommandNotFoundError, SalvoException, trigger
from .installer import PluginContext, collect_extensions, install
from .plugins import Plugin, resolve_dependencies
from .resolution import CallMode, resolve_command_tree
from .tokens import leading_positionals, parse_args, resolve_args
from .utils import Record, Unset, coalesce, coroutine

logger = logging.getLogger(__name__)


class CliOptions(Record):
    """
    Cli configuration.

    Every field defaults to Unset and is materialized when the environment is built.

    Renderers (render_header, render_usage, render_validation_errors)
    - Unset: the decorator chain registered by plugins;
    - None: rendering disabled;
    - callable: used instead of the chain.

    Hooks (on_before_command, on_after_command, on_error_command) may be sync or async.
    """
    __slots__ = (
        "cwd",
        "name",
        "descr",
        "version",
        "sub_commands",
        "plugins",
        "fallback_to_entry",
        "usage_silent",
        "usage_option_type",
        "usage_option_value",
        "left_margin",
        "middle_margin",
        "render_header",
        "render_usage",
        "render_validation_errors",
        "on_before_command",
        "on_after_command",
        "on_error_command",
        "console",
        "colorful",
        "fancy",
    )
    __thawed__ = ("console",)

    def __init__(self, **options):
        unknown = options.keys() - set(CliOptions.__slots__)
        if unknown:
            raise TypeError(f"unknown cli options: {', '.join(sorted(unknown))}")
        for name in (
            "on_before_command",
            "on_after_command",
            "on_error_command",
            "render_header",
            "render_usage",
            "render_validation_errors",
        ):
            value = options.get(name)
            if value is not None and value is not Unset and not callable(value):
                raise TypeError(f"cli option {name!r} must be callable or None")
        plugins = options.get("plugins") or ()
        if not all(isinstance(plugin, Plugin) for plugin in plugins):
            raise TypeError("cli option 'plugins' must contain Plugin descriptors")
        super().__init__(**{name: options.get(name, Unset) for name in CliOptions.__slots__})


def _options(options):
    if options is None:
        return CliOptions()
    if isinstance(options, CliOptions):
        return options
    if isinstance(options, Mapping):
        return CliOptions(**options)
    raise TypeError("cli options must be CliOptions or a mapping")


def _initial_sub_commands(options, entry):
    sub_commands = dict(coalesce(options.sub_commands, None) or {})
    if sub_commands:
        sub_commands[name_of(entry) or ANONYMOUS_COMMAND_NAME] = entry_alias(entry)
    return sub_commands


def _renderer(option, default):
    if option is Unset:
        return default
    if option is None:
        return None
    return coroutine(option)


def _hook(option):
    option = coalesce(option, None)
    return coroutine(option) if option is not None else None


def _environment(options, sub_commands, decorators):
    return CommandEnvironment(
        cwd=coalesce(options.cwd, None),
        name=coalesce(options.name, None),
        descr=coalesce(options.descr, None),
        version=coalesce(options.version, None),
        left_margin=coalesce(options.left_margin, 2),
        middle_margin=coalesce(options.middle_margin, 10),
        usage_option_type=coalesce(options.usage_option_type, False),
        usage_option_value=coalesce(options.usage_option_value, True),
        usage_silent=coalesce(options.usage_silent, False),
        sub_commands=sub_commands,
        render_header=_renderer(options.render_header, decorators.header_renderer()),
        render_usage=_renderer(options.render_usage, decorators.usage_renderer()),
        render_validation_errors=_renderer(options.render_validation_errors, decorators.validation_errors_renderer()),
        on_before_command=_hook(options.on_before_command),
        on_after_command=_hook(options.on_after_command),
        on_error_command=_hook(options.on_error_command),
        console=options.console,
    )


def _not_found(resolution):
    candidates = [
        name for name, node in (resolution.level_sub_commands or {}).items()
        if not node.internal and not node.entry
    ]
    hint = Unset
    if candidates:
        hint = f"available commands: {', '.join(candidates)}"
        if matches := difflib.get_close_matches(resolution.command_name, candidates, n=1):
            hint = f"did you mean {matches[0]!r}? {hint}"
    return CommandNotFoundError(resolution.command_name, hint=hint, candidates=tuple(candidates))


async def cli_core(argv, entry, options=None, plugins=(), /):
    """
    Run the cli pipeline for `argv`.

    Parameters
    - argv: Iterable[str], without the program name.
    - entry: Command | LazyCommand | Callable, the root command.
    - options: CliOptions | Mapping | None
    - plugins: Iterable[Plugin], installed before options.plugins.

    Returns
    - str | None, the command's textual result.

    Raises
    - ConfigurationError subclasses (plugin graph, duplicate registrations).
    - CommandNotFoundError when the first positional names no command.
    - whatever the command, its decorators or its lazy loader raise.
    """
    argv = list(argv)
    options = _options(options)
    entry = entry_command(entry)

    decorators = Decorators()
    surface = PluginContext(decorators, _initial_sub_commands(options, entry))
    ordered = resolve_dependencies([*plugins, *(coalesce(options.plugins, None) or ())])
    installed = await install(ordered, surface)
    snapshot = surface.seal()
    env = _environment(options, snapshot.sub_commands, decorators)

    tokens = parse_args(argv)
    resolution = resolve_command_tree(
        leading_positionals(tokens),
        entry,
        snapshot.sub_commands,
        fallback_to_entry=bool(coalesce(options.fallback_to_entry, False)),
    )
    if resolution.call_mode == CallMode.UNEXPECTED:
        raise _not_found(resolution)

    command = resolution.command
    args = {**snapshot.global_options, **command.args}
    resolved = resolve_args(args, tokens, skip_positional=resolution.depth)
    logger.debug("resolved %s command %r at depth %d", resolution.call_mode, resolution.command_name, resolution.depth)

    ctx = await create_command_context(
        command=command,
        env=env,
        args=args,
        values=resolved.values,
        explicit=resolved.explicit,
        positionals=resolved.positionals,
        rest=resolved.rest,
        argv=argv,
        tokens=tokens,
        omitted=resolution.omitted,
        call_mode=resolution.call_mode,
        command_path=resolution.command_path,
        depth=resolution.depth,
        level_sub_commands=resolution.level_sub_commands,
        validation_error=resolved.error,
        extensions=collect_extensions(installed),
    )
    return await execute_command(
        command,
        ctx,
        decorators.command_decorators,
        name=resolution.command_name or ANONYMOUS_COMMAND_NAME,
    )


async def cli(argv, entry, options=None, /):
    """
    Run the cli pipeline with the built-in plugins (help, version, default renderers).
    """
    return await cli_core(argv, entry, options, builtin_plugins())


async def generate(command, entry, options=None, /):
    """
    Render the usage text of `command` (the entry when None) without running it.

    Usage output is forced silent; the rendered text is returned instead, or "" when
    nothing was rendered.
    """
    argv = ["-h"] if command is None else [command, "-h"]
    return await cli(argv, entry, _options(options).__replace__(usage_silent=True)) or ""


def _configure_logging():
    root = logging.getLogger("salvo")
    if not root.handlers:
        root.addHandler(RichHandler(console=faults.console, show_path=False))


def run(entry, /, argv=None, options=None):
    """
    Blocking entry point for scripts.

    - argv defaults to sys.argv[1:].
    - salvo faults are printed to stderr with rich and exit with status 1.
    - returns the command's textual result.
    """
    _configure_logging()
    options = _options(options)
    try:
        return asyncio.run(cli(sys.argv[1:] if argv is None else argv, entry, options))
    except SalvoException as fault:
        trigger(
            fault,
            shell=True,
            prog=coalesce(options.name, None) or "salvo",
            colorful=coalesce(options.colorful, True),
            fancy=coalesce(options.fancy, False),
        )


__all__ = (
    "CliOptions",
    "cli_core",
    "cli",
    "generate",
    "run",
)
