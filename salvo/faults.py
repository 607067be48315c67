"""
Salvo faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue raised by the
  resolution engine, grouped by domain so logs and searches stay predictable.
- SalvoException / SalvoWarning: base types that carry a message plus read-only
  options (code, title, hint, ...) and know how to render themselves with rich.
- trigger(): central entry point to surface a fault, either by raising/warning
  (library use) or by printing to stderr and exiting (shell use, see salvo.run).

Taxonomy
- configuration errors (fatal, raised before any command runs):
  duplicate global option, duplicate command, missing dependency, circular dependency.
- resolution errors: command not found (raised by the cli pipeline, never by the
  resolver itself).
- lazy command errors: a loader produced something that is not a command.
- argument errors: collected by the tokenizer and attached to the command context.
- warnings (recovered): duplicate plugin id, duplicate extension registration.

Integration
- Host applications may expose __styles__ (palette overrides) and __prog__ (program
  name) in __main__; both are read lazily at render time.
"""
import inspect
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across salvo (stable identifiers).

    grouping
    - configuration (2110x): duplicate names and broken plugin graphs.
    - resolution (2120x): commands that cannot be found or loaded.
    - arguments (2130x): values rejected by the argument resolver.
    - warnings (2210x): recovered, non-fatal conditions.
    """
    # --- configuration errors ---
    DUPLICATE_GLOBAL_OPTION     = 21101
    DUPLICATE_COMMAND           = 21102
    MISSING_DEPENDENCY          = 21103
    CIRCULAR_DEPENDENCY         = 21104

    # --- resolution errors ---
    COMMAND_NOT_FOUND           = 21201
    UNRESOLVABLE_COMMAND        = 21202

    # --- argument errors ---
    INVALID_ARGUMENT            = 21301
    MISSING_ARGUMENT            = 21302

    # --- warnings ---
    DUPLICATE_PLUGIN            = 22101
    DUPLICATE_EXTENSION         = 22102

    def normalize(self):
        """
        return a host-normalized label for this code.

        the host application can provide a __codes__ mapping in __main__ to replace
        numeric ids with friendlier labels.
        """
        return str(getattr(sys.modules.get("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, kind, palette):
    main = sys.modules.get("__main__")
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = fault.options.get("colorful", True)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style] if colorful else "")

    prog = getattr(main, "__prog__", None) or fault.options.get("prog") or "salvo"
    code = fault.options.get("code")
    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else kind, "code"),
        " | ",
        text(str(fault.options.get("title", kind)).title(), kind + "-title"),
        " ]"
    )
    body = [text(fault.message, kind + "-message")]
    if hint := fault.options.get("hint"):
        body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if fault.options.get("fancy", False):
        return Panel(Group(*body), title=header, title_align="left")
    return Group(header, *body)


class SalvoException(Exception):
    """
    Base class of every salvo error.

    Attributes
    - message: str, the one-sentence description shown to users.
    - options: read-only mapping with rendering context (code, title, hint, shell,
      colorful, fancy, prog) plus any fault-specific payload.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)
        super().__init__(self.message)

    def __str__(self):
        return self.message

    def __rich__(self):
        return _render(self, "error", {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        replaced = type(self).__new__(type(self))
        SalvoException.__init__(replaced, self.message, **{**self.options, **overrides})
        return replaced


class ConfigurationError(SalvoException):
    """
    Fatal programmer error detected while assembling the cli (plugins, options, commands).
    """


class DuplicateGlobalOptionError(ConfigurationError):
    def __init__(self, name, /, **options):
        super().__init__(
            f"global option {name!r} is already registered",
            **{
                "code": FaultCode.DUPLICATE_GLOBAL_OPTION,
                "title": "duplicate global option",
                "hint": "rename the option or drop one of the plugins registering it",
                "option": name,
            } | options,
        )


class DuplicateCommandError(ConfigurationError):
    def __init__(self, name, /, **options):
        super().__init__(
            f"command {name!r} is already registered",
            **{
                "code": FaultCode.DUPLICATE_COMMAND,
                "title": "duplicate command",
                "hint": "check has_command() before adding a command from a plugin",
                "command": name,
            } | options,
        )


class MissingDependencyError(ConfigurationError):
    def __init__(self, dependency, plugin, /, **options):
        super().__init__(
            f"Missing required dependency: {dependency!r} on {plugin!r}",
            **{
                "code": FaultCode.MISSING_DEPENDENCY,
                "title": "missing dependency",
                "hint": f"install the {dependency!r} plugin or declare it as optional",
                "dependency": dependency,
                "plugin": plugin,
            } | options,
        )


class CircularDependencyError(ConfigurationError):
    def __init__(self, cycle, /, **options):
        cycle = tuple(cycle)
        super().__init__(
            f"Circular dependency detected: {' -> '.join(cycle)}",
            **{
                "code": FaultCode.CIRCULAR_DEPENDENCY,
                "title": "circular dependency",
                "hint": "break the cycle by making one of the dependencies optional",
                "cycle": cycle,
            } | options,
        )


class CommandNotFoundError(SalvoException):
    def __init__(self, name, /, *, hint=Unset, **options):
        super().__init__(
            f"Command not found: {coalesce(name, '') or ''}",
            **{
                "code": FaultCode.COMMAND_NOT_FOUND,
                "title": "unknown command",
                "hint": coalesce(hint, "run with '--help' to see available commands"),
                "command": name,
            } | options,
        )


class LazyCommandError(SalvoException, TypeError):
    def __init__(self, message, /, **options):
        super().__init__(
            message,
            **{
                "code": FaultCode.UNRESOLVABLE_COMMAND,
                "title": "unresolvable command",
                "hint": "a lazy loader must return a runner or a command with 'run'",
            } | options,
        )


class ArgumentError(SalvoException, ValueError):
    """
    A single argument value rejected by the resolver (carried inside ArgumentsValidationError).
    """

    def __init__(self, message, /, *, argument=None, **options):
        super().__init__(
            message,
            **{
                "code": FaultCode.INVALID_ARGUMENT,
                "title": "invalid argument",
                "argument": argument,
            } | options,
        )


class ArgumentsValidationError(ExceptionGroup):
    """
    Aggregate of every ArgumentError found while resolving one invocation.
    """

    def __new__(cls, errors, /):
        return super().__new__(cls, "argument validation failed", tuple(errors))

    def derive(self, errors):
        return ArgumentsValidationError(errors)


class SalvoWarning(Warning):
    """
    Base class of recovered, non-fatal conditions.

    Outside shell mode the warning is emitted through warnings.warn (observable with
    assertWarns / warnings.catch_warnings); in shell mode it is printed with rich.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)
        super().__init__(self.message)

    def __str__(self):
        return self.message

    def __rich__(self):
        return _render(self, "warning", {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "warning-title": "bold #FFC2E0",
            "warning-message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        replaced = type(self).__new__(type(self))
        SalvoWarning.__init__(replaced, self.message, **{**self.options, **overrides})
        return replaced


class DuplicatePluginWarning(SalvoWarning):
    def __init__(self, id, /, **options):
        super().__init__(
            f"Duplicate plugin id detected: {id!r}",
            **{
                "code": FaultCode.DUPLICATE_PLUGIN,
                "title": "duplicate plugin",
                "hint": "dependencies on this id resolve to its first registration",
                "plugin": id,
            } | options,
        )


class DuplicateExtensionWarning(SalvoWarning):
    def __init__(self, id, /, **options):
        super().__init__(
            f"Plugin {id!r} is already installed. Ignore it for command context extending.",
            **{
                "code": FaultCode.DUPLICATE_EXTENSION,
                "title": "duplicate extension",
                "hint": "the first registered extension is kept",
                "plugin": id,
            } | options,
        )


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - errors raise outside shell mode and print + exit(1) inside it; warnings warn
      outside shell mode and print inside it.
    """
    if (
        not callable(getattr(fault, "__trigger__", None)) or
        not callable(getattr(fault, "__replace__", None))
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "SalvoException",
    "ConfigurationError",
    "DuplicateGlobalOptionError",
    "DuplicateCommandError",
    "MissingDependencyError",
    "CircularDependencyError",
    "CommandNotFoundError",
    "LazyCommandError",
    "ArgumentError",
    "ArgumentsValidationError",
    "SalvoWarning",
    "DuplicatePluginWarning",
    "DuplicateExtensionWarning",
    "trigger",
)
