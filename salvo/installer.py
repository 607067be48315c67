"""
Salvo plugin installation.

PluginContext is the registration surface handed to every plugin's setup: global
options, sub-commands and the four decorator registries. It lives for a single
installation pass, after which seal() hands out an immutable Snapshot and refuses
any further registration.

install(plugins, ctx)
- runs each setup in the given (already dependency-resolved) order, awaiting it;
- configuration faults (duplicate global option, duplicate command) abort the pass;
- any other exception is logged and the remaining plugins still install;
- returns the plugins whose setup completed.

collect_extensions(plugins)
- maps plugin id → Extension; a second registration for the same id is ignored
  with a DuplicateExtensionWarning (the first one wins).
"""
import logging

from .arguments import Arg
from .commands import Command, LazyCommand
from .faults import ConfigurationError, DuplicateCommandError, DuplicateExtensionWarning, DuplicateGlobalOptionError, trigger
from .utils import Record, settle

logger = logging.getLogger(__name__)


class Snapshot(Record):
    """
    Frozen result of an installation pass: global options and sub-commands.
    """
    __slots__ = ("global_options", "sub_commands")


class PluginContext:
    """
    Installer surface.

    Parameters
    - decorators: salvo.decorators.Decorators, the registries of this invocation.
    - sub_commands: Mapping[str, Command | LazyCommand], initial top-level commands.
    """

    def __init__(self, decorators, sub_commands=None, /):
        self._decorators = decorators
        self._global_options = {}
        self._sub_commands = dict(sub_commands or {})
        self._sealed = False

    def _ensure_open(self):
        if self._sealed:
            raise RuntimeError("plugin context is sealed; registrations are only allowed during setup")

    @property
    def global_options(self):
        return dict(self._global_options)

    @property
    def sub_commands(self):
        return dict(self._sub_commands)

    def add_global_option(self, name, schema, /):
        """
        Register an option available to every command.

        Raises
        - ValueError: empty name.
        - DuplicateGlobalOptionError: name already registered.
        """
        self._ensure_open()
        if not isinstance(name, str) or not name:
            raise ValueError("global option name must be a non-empty string")
        if not isinstance(schema, Arg):
            raise TypeError("global option schema must be an Arg")
        if name in self._global_options:
            raise DuplicateGlobalOptionError(name)
        self._global_options[name] = schema

    def has_command(self, name, /):
        return name in self._sub_commands

    def add_command(self, name, command, /):
        self._ensure_open()
        if not isinstance(name, str) or not name:
            raise ValueError("command name must be a non-empty string")
        if not isinstance(command, Command | LazyCommand):
            raise TypeError("add_command() expects a command or a lazy command")
        if name in self._sub_commands:
            raise DuplicateCommandError(name)
        self._sub_commands[name] = command

    def decorate_header_renderer(self, decorator, /):
        self._ensure_open()
        self._decorators.add_header_decorator(decorator)

    def decorate_usage_renderer(self, decorator, /):
        self._ensure_open()
        self._decorators.add_usage_decorator(decorator)

    def decorate_validation_errors_renderer(self, decorator, /):
        self._ensure_open()
        self._decorators.add_validation_errors_decorator(decorator)

    def decorate_command(self, decorator, /):
        self._ensure_open()
        self._decorators.add_command_decorator(decorator)

    def seal(self):
        """
        Close the surface and return its immutable Snapshot.
        """
        self._sealed = True
        return Snapshot(global_options=self._global_options, sub_commands=self._sub_commands)

    def _checkpoint(self):
        return (
            set(self._global_options),
            set(self._sub_commands),
            {name: len(registry) for name, registry in self._registries()},
        )

    def _rollback(self, checkpoint, /):
        options, commands, lengths = checkpoint
        for name in self._global_options.keys() - options:
            del self._global_options[name]
        for name in self._sub_commands.keys() - commands:
            del self._sub_commands[name]
        for name, registry in self._registries():
            del registry[lengths[name]:]

    def _registries(self):
        decorators = self._decorators
        return (
            ("header", decorators.header),
            ("usage", decorators.usage),
            ("validation_errors", decorators.validation_errors),
            ("command", decorators.command),
        )


async def install(plugins, ctx, /):
    """
    Run each plugin's setup against `ctx`, in order.

    A setup that raises anything but a ConfigurationError is logged and its partial
    registrations (options, commands, decorators) are rolled back, so the remaining
    plugins and the cli keep working without it.
    """
    installed = []
    for plugin in plugins:
        if plugin.setup is None:
            installed.append(plugin)
            continue
        checkpoint = ctx._checkpoint()
        try:
            await settle(plugin.setup(ctx))
        except ConfigurationError:
            raise
        except Exception:
            logger.exception("Error loading plugin %r", plugin.id)
            ctx._rollback(checkpoint)
            continue
        installed.append(plugin)
    return installed


def collect_extensions(plugins, /):
    extensions = {}
    for plugin in plugins:
        if plugin.extension is None:
            continue
        if plugin.id in extensions:
            trigger(DuplicateExtensionWarning(plugin.id))
            continue
        extensions[plugin.id] = plugin.extension
    return extensions


__all__ = (
    "PluginContext",
    "Snapshot",
    "install",
    "collect_extensions",
)
