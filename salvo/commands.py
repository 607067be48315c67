"""
Salvo command layer: concrete, lazy and resolved command nodes.

What this module provides
- Command: a concrete command (metadata + `run` callable + optional nested
  sub-commands). Immutable once built.
- LazyCommand: a loader callable carrying the same metadata upfront; its body is
  loaded only when it is executed. Its identity (`command_name`) is assigned once,
  from its own metadata or from the key that registered it.
- ResolvedCommand: the frozen, fully loaded record handed to execution.

- Factories and helpers
  • command(run, ...): create a Command or a decorator that produces one.
  • lazy(loader, ...): create a LazyCommand or a decorator that produces one.
  • entry_command(entry): normalize the cli entry (Command, LazyCommand or bare runner).
  • name_of(node) / sub_commands_of(node) / named(node, name) / entry_alias(node, name).
  • resolve_lazy_command(node, name, load=False): produce a ResolvedCommand.

Core ideas
- Caller-supplied nodes are never mutated: naming a node yields a shallow copy
  (see named()), first assignment wins.
- Sub-command maps are ordered mappings name → node; insertion order is listing order.

Quick start
    from salvo import command, lazy

    @command(descr="build the project")
    def build(ctx):
        return "built"

    @lazy(descr="deploy the project")
    def deploy():
        from myproject.deploy import run
        return run
"""
import inspect
from collections.abc import Mapping

from .arguments import Arg
from .faults import LazyCommandError
from .utils import Record, Unset, coalesce, rename, settle

ANONYMOUS_COMMAND_NAME = "(anonymous)"


def _check_metadata(typename, name, descr, args, sub_commands):
    if name is not Unset and name is not None and (not isinstance(name, str) or not name.strip()):
        raise TypeError(f"{typename} 'name' must be a non-empty string")
    if descr is not Unset and not isinstance(descr, str):
        raise TypeError(f"{typename} 'descr' must be a string")
    if args is not None and (
        not isinstance(args, Mapping) or
        not all(isinstance(key, str) and isinstance(value, Arg) for key, value in args.items())
    ):
        raise TypeError(f"{typename} 'args' must map names to Arg schemas")
    if sub_commands is not None and (
        not isinstance(sub_commands, Mapping) or
        not all(isinstance(key, str) and isinstance(value, Command | LazyCommand) for key, value in sub_commands.items())
    ):
        raise TypeError(f"{typename} 'sub_commands' must map names to commands")


class Command(Record):
    """
    Concrete command.

    Fields
    - name: str | None, None until assigned from a registering key.
    - descr: str, one-line description for usage listings.
    - args: Mapping[str, Arg], argument schema.
    - run: Callable[[CommandContext], Any] | None, sync or async runner.
    - sub_commands: Mapping[str, Command | LazyCommand], nested commands.
    - entry: bool, marks the default/root command.
    - examples: str | Callable[[CommandContext], str] | None.
    - internal: bool, hidden from listings.
    """
    __slots__ = ("name", "descr", "args", "run", "sub_commands", "entry", "examples", "internal")

    def __init__(
            self,
            run=Unset,
            /,
            *,
            name=Unset,
            descr=Unset,
            args=None,
            sub_commands=None,
            entry=False,
            examples=Unset,
            internal=False,
    ):
        if run is not Unset and run is not None and not callable(run):
            raise TypeError("command 'run' must be callable")
        _check_metadata("command", name, descr, args, sub_commands)
        super().__init__(
            name=coalesce(name),
            descr=coalesce(descr, ""),
            args=dict(args or {}),
            run=coalesce(run),
            sub_commands=dict(sub_commands or {}),
            entry=bool(entry),
            examples=coalesce(examples),
            internal=bool(internal),
        )


class LazyCommand(Record):
    """
    Lazily-loaded command.

    The loader is a zero-argument callable (sync or async) returning either a runner
    or a Command. Metadata (command_name, descr, args, sub_commands, ...) is known
    upfront so routing and listings never need to load the body.
    """
    __slots__ = ("loader", "command_name", "descr", "args", "sub_commands", "entry", "examples", "internal")

    def __init__(
            self,
            loader,
            /,
            *,
            name=Unset,
            descr=Unset,
            args=None,
            sub_commands=None,
            entry=False,
            examples=Unset,
            internal=False,
    ):
        if not callable(loader):
            raise TypeError("lazy command 'loader' must be callable")
        _check_metadata("lazy command", name, descr, args, sub_commands)
        super().__init__(
            loader=loader,
            command_name=coalesce(name),
            descr=coalesce(descr, ""),
            args=dict(args or {}),
            sub_commands=dict(sub_commands or {}),
            entry=bool(entry),
            examples=coalesce(examples),
            internal=bool(internal),
        )

    def __call__(self):
        return self.loader()


class ResolvedCommand(Record):
    """
    Frozen, loaded command record produced by resolve_lazy_command().

    Distinct from the caller-supplied Command/LazyCommand so that execution never
    aliases user definitions.
    """
    __slots__ = ("name", "descr", "args", "run", "sub_commands", "entry", "examples", "internal")


def name_of(node, /):
    """
    Return the identity of a node (None when it has not been named yet).
    """
    if isinstance(node, LazyCommand):
        return node.command_name
    return getattr(node, "name", None)


def named(node, name, /):
    """
    Return `node` carrying `name` as its identity.

    First assignment wins: a node that already has a name is returned unchanged;
    otherwise a shallow copy with the name assigned is returned. The input is never
    mutated.
    """
    if name_of(node) is not None:
        return node
    if isinstance(node, LazyCommand):
        return node.__replace__(command_name=name)
    return node.__replace__(name=name)


def entry_alias(node, name=None, /):
    """
    Return a copy of `node` flagged as an entry, so it can be listed next to its own children.
    """
    return named(node, name).__replace__(entry=True) if name is not None else node.__replace__(entry=True)


def sub_commands_of(node, /):
    """
    Return the node's nested sub-command map, or None when it has none.

    Lazy commands answer from their declared metadata; their body is not loaded.
    """
    sub_commands = getattr(node, "sub_commands", None)
    return sub_commands if sub_commands else None


def entry_command(entry, /):
    """
    Normalize the cli entry point.

    - Command / LazyCommand → returned as-is.
    - bare callable → anonymous entry Command wrapping it as `run`.
    """
    if isinstance(entry, Command | LazyCommand):
        return entry
    if callable(entry):
        return Command(entry, entry=True)
    raise TypeError("entry must be a command, a lazy command or a callable runner")


async def resolve_lazy_command(node, name=None, /, *, load=False):
    """
    Produce a ResolvedCommand from any command node.

    Parameters
    - node: Command | LazyCommand
    - name: str | None, fallback identity when the node carries none.
    - load: bool, when True a lazy node's loader is invoked (and awaited).

    Loaded bodies
    - a callable becomes `run`;
    - a Command replaces the lazy metadata (its nested sub-commands fall back to the
      lazy declaration when it declares none) and must carry `run`.

    Raises
    - LazyCommandError when the loader yields anything else, or a Command without `run`.
    """
    if isinstance(node, LazyCommand):
        fields = {
            "name": node.command_name,
            "descr": node.descr,
            "args": node.args,
            "run": None,
            "sub_commands": node.sub_commands,
            "entry": node.entry,
            "examples": node.examples,
            "internal": node.internal,
        }
        if load:
            loaded = await settle(node())
            label = node.command_name or name
            if isinstance(loaded, Command):
                if loaded.run is None:
                    raise LazyCommandError(f"'run' is required in command: {label}")
                fields |= {
                    "name": loaded.name or node.command_name,
                    "descr": loaded.descr or node.descr,
                    "args": loaded.args,
                    "run": loaded.run,
                    "sub_commands": loaded.sub_commands or node.sub_commands,
                    "entry": loaded.entry or node.entry,
                    "examples": loaded.examples if loaded.examples is not None else node.examples,
                    "internal": loaded.internal,
                }
            elif callable(loaded):
                fields["run"] = loaded
            else:
                raise LazyCommandError(f"Cannot resolve command: {label}")
    elif isinstance(node, Command):
        fields = {field: getattr(node, field) for field in ResolvedCommand.__slots__}
    else:
        raise TypeError("resolve_lazy_command() argument must be a command or a lazy command")

    if fields["name"] is None and name:
        fields["name"] = name
    return ResolvedCommand(**fields)


def command(run=Unset, /, **metadata):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct:    cmd = command(func, name="x")
    - Decorator: @command(descr="...") def func(ctx): ...
                 @command def func(ctx): ...

    Defaults
    - name: the function's __name__ when it is a plain identifier (lambdas stay unnamed,
      so the registering key names them).
    - descr: the function's docstring.
    """
    @rename("command")
    def wrapper(run, /):
        if not callable(run):
            raise TypeError("@command() must be applied to a callable")
        defaults = {}
        if isinstance(name := getattr(run, "__name__", None), str) and name.isidentifier():
            defaults["name"] = name
        if docstring := inspect.getdoc(run):
            defaults["descr"] = docstring
        return Command(run, **defaults | metadata)

    return wrapper(run) if run is not Unset else wrapper


def lazy(loader=Unset, /, **metadata):
    """
    Create a LazyCommand or return a decorator to build it later.

    The decorated function is the loader: it runs only when the command is executed.
    The loader's __name__ is used as the default name, as with command().
    """
    @rename("lazy")
    def wrapper(loader, /):
        if not callable(loader):
            raise TypeError("@lazy() must be applied to a callable")
        defaults = {}
        if isinstance(name := getattr(loader, "__name__", None), str) and name.isidentifier():
            defaults["name"] = name
        return LazyCommand(loader, **defaults | metadata)

    return wrapper(loader) if loader is not Unset else wrapper


__all__ = (
    "ANONYMOUS_COMMAND_NAME",
    "Command",
    "LazyCommand",
    "ResolvedCommand",
    "command",
    "lazy",
    "name_of",
    "named",
    "entry_alias",
    "sub_commands_of",
    "entry_command",
    "resolve_lazy_command",
)
