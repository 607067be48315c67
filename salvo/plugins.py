"""
Salvo plugins: descriptors and dependency ordering.

A plugin is a plain record, never a callable carrying attributes:

    Plugin(id, name, dependencies, setup, extension, on_extension)

- setup(ctx) receives the installer surface (salvo.installer.PluginContext) and
  registers global options, sub-commands and decorators. It may be async.
- extension(core, command) builds the value exposed as ctx.extensions[id]. It runs
  once per command execution, after argument values are resolved. It may be async.
- on_extension(ctx, command) runs after every extension of the invocation exists.

resolve_dependencies(plugins) returns the installation order: each plugin after all
of its required dependencies, input order kept wherever dependencies allow it.
"""
import logging

from .faults import CircularDependencyError, DuplicatePluginWarning, MissingDependencyError, trigger
from .utils import Record, Unset, coalesce, rename

logger = logging.getLogger(__name__)


class Dependency(Record):
    """
    Edge of the plugin graph: `id` must load first; an `optional` one may be absent.
    """
    __slots__ = ("id", "optional")

    def __init__(self, id, /, *, optional=False):
        if not isinstance(id, str) or not id:
            raise TypeError("dependency 'id' must be a non-empty string")
        super().__init__(id=id, optional=bool(optional))


class Extension(Record):
    """
    Context extension declared by a plugin: `factory` builds the value, `on_factory`
    observes the finished context.
    """
    __slots__ = ("id", "factory", "on_factory")


class Plugin(Record):
    """
    Plugin descriptor.

    Parameters
    - id: str, unique identifier (also the extension key).
    - name: str | None, display name.
    - dependencies: Iterable[str | Dependency], plain strings are required dependencies.
    - setup: Callable[[PluginContext], Awaitable[None] | None] | None
    - extension: Callable[[CommandContext, Command], Any] | None
    - on_extension: Callable[[CommandContext, Command], Awaitable[None] | None] | None
    """
    __slots__ = ("id", "name", "dependencies", "setup", "extension")

    def __init__(self, id, /, *, name=Unset, dependencies=(), setup=None, extension=None, on_extension=None):
        if not isinstance(id, str) or not id:
            raise TypeError("plugin 'id' must be a non-empty string")
        if name is not Unset and name is not None and not isinstance(name, str):
            raise TypeError("plugin 'name' must be a string")
        for label, function in (("setup", setup), ("extension", extension), ("on_extension", on_extension)):
            if function is not None and not callable(function):
                raise TypeError(f"plugin {label!r} must be callable")
        if on_extension is not None and extension is None:
            raise TypeError("plugin 'on_extension' requires an 'extension'")
        super().__init__(
            id=id,
            name=coalesce(name),
            dependencies=tuple(
                dependency if isinstance(dependency, Dependency) else Dependency(dependency)
                for dependency in dependencies
            ),
            setup=setup,
            extension=Extension(id=id, factory=extension, on_factory=on_extension) if extension else None,
        )


def plugin(id, /, **options):
    """
    Return a decorator turning a setup function into a Plugin.

        @plugin("my:plugin", dependencies=["g:globals"])
        async def setup(ctx):
            ctx.add_global_option("verbose", Arg("boolean"))

    Plugins without a setup function are built with Plugin(...) directly.
    """
    if "setup" in options:
        raise TypeError("@plugin() takes the setup function as the decorated callable")

    @rename("plugin")
    def wrapper(setup, /):
        if not callable(setup):
            raise TypeError("@plugin() must be applied to a callable")
        return Plugin(id, setup=setup, **options)

    return wrapper


def resolve_dependencies(plugins, /):
    """
    Order plugins so that every plugin follows its required dependencies.

    Behavior
    - Depth-first, in input order: independent plugins keep their relative order.
    - A missing required dependency raises MissingDependencyError naming both ids;
      a missing optional one is skipped.
    - A dependency back onto the current path raises CircularDependencyError whose
      message renders the cycle, e.g. "a -> b -> a".
    - Duplicate ids warn (DuplicatePluginWarning) and are both kept; dependencies
      on that id resolve to its first registration.

    Nothing is installed here, so failures happen before any setup runs.
    """
    plugins = list(plugins)
    registry = {}
    for plugin in plugins:
        if plugin.id in registry:
            trigger(DuplicatePluginWarning(plugin.id))
        else:
            registry[plugin.id] = plugin

    ordered = []
    visited = set()
    path = []

    def visit(plugin):
        if id(plugin) in visited:
            return
        if plugin in path:
            cycle = [each.id for each in path[path.index(plugin):]]
            raise CircularDependencyError([*cycle, plugin.id])
        path.append(plugin)
        for dependency in plugin.dependencies:
            target = registry.get(dependency.id)
            if target is None:
                if dependency.optional:
                    logger.debug("optional dependency %r of %r is not installed", dependency.id, plugin.id)
                    continue
                raise MissingDependencyError(dependency.id, plugin.id)
            visit(target)
        path.pop()
        visited.add(id(plugin))
        ordered.append(plugin)

    for plugin in plugins:
        visit(plugin)
    return ordered


__all__ = (
    "Dependency",
    "Extension",
    "Plugin",
    "plugin",
    "resolve_dependencies",
)
