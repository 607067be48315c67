"""
Salvo utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the resolution engine, the plugin layer and the
  execution pipeline, so every module speaks the same sentinel/immutability language.

Overview
- UnsetType / Unset
  • Singleton sentinel for “value not provided” when None is meaningful.
- coalesce(value, default=None)
  • Replace Unset with a concrete default, preserving None/0/""/[].
- rename(callable, name) / @rename("name")
  • Stable __name__/__qualname__ for composed wrappers (readable tracebacks).
- settle(object) / coroutine(callable)
  • Bridge sync and async user code: plugins, runners, hooks and decorators may
    return plain values or awaitables; the pipeline awaits each in turn.
- freeze(object, ignores=())
  • Recursive snapshot: Mapping → MappingProxyType, Sequence → tuple, Set → frozenset.
- Record
  • Slotted, read-only record base with __replace__ and rich-friendly repr.

Stability and contract
- Names in __all__ are supported; anything else may change without notice.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> freeze({"a": [1, 2]})["a"]
    (1, 2)
"""
import builtins
import functools
import inspect
import re
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and singleton per process.
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0, "" or [] are preserved; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator that will.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name)           -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


async def settle(object, /):
    """
    Await `object` when it is awaitable; otherwise return it unchanged.

    This is the single suspension point used by the pipeline, so user code may be
    written either as plain functions or as coroutines.
    """
    if inspect.isawaitable(object):
        return await object
    return object


def coroutine(function, /):
    """
    Normalize a callable into a coroutine function.

    Behavior
    - Coroutine functions are returned unchanged.
    - Any other callable is wrapped so that calling it always yields an awaitable;
      the wrapped result is settled (awaited when it is itself awaitable).

    Decorator authors can therefore always write `await base(ctx)` regardless of how
    the wrapped runner or renderer was declared.
    """
    if not callable(function):
        raise TypeError("coroutine() argument must be callable")
    if inspect.iscoroutinefunction(function):
        return function

    async def wrapper(*args, **kwargs):
        return await settle(function(*args, **kwargs))

    return rename(wrapper, getattr(function, "__name__", type(function).__name__))


def freeze(object, /, ignores=()):
    """
    Return a recursively read-only snapshot of `object`.

    Freezing rules
    - Mapping (non-Record) → MappingProxyType over a fresh dict (insertion order kept)
    - Sequence (non-string) → tuple
    - Set → frozenset
    - Record instances and anything else → returned as-is

    Parameters
    - ignores: Iterable[str]
      Mapping keys whose values are kept as-is (neither copied nor frozen). Applied at
      every nesting level, for fields that are intentionally left mutable.
    """
    if isinstance(object, (str, bytes, bytearray, Record)):
        return object
    if isinstance(object, Mapping):
        return MappingProxyType({
            key: value if key in ignores else freeze(value, ignores)
            for key, value in object.items()
        })
    if isinstance(object, Sequence):
        return tuple(freeze(item, ignores) for item in object)
    if isinstance(object, Set):
        return frozenset(object)
    return object


class Record:
    """
    Read-only slotted record.

    Subclasses declare their fields through __slots__ (order matters for repr) and
    assign them once through Record.__init__(**fields). Every value is frozen on the
    way in, except for the names listed in __thawed__, which are stored untouched.

    Copies are produced with __replace__(**overrides); the original is never mutated.
    """
    __slots__ = ()
    __thawed__ = ()
    __typename__ = "record"

    def __init_subclass__(cls, **options):
        super().__init_subclass__(**options)
        cls.__typename__ = re.sub(r"(?<!^)(?=[A-Z])", r"-", cls.__name__).lower()

    def __init__(self, **fields):
        for name in type(self).__slots__:
            try:
                value = fields.pop(name)
            except KeyError:
                raise TypeError(f"{type(self).__typename__} missing field {name!r}") from None
            object.__setattr__(self, name, value if name in type(self).__thawed__ else freeze(value))
        if fields:
            raise TypeError(f"{type(self).__typename__} got unexpected fields {', '.join(map(repr, fields))}")

    def __setattr__(self, name, value, /):
        raise AttributeError(f"{type(self).__typename__} object is read-only")

    def __delattr__(self, name, /):
        raise AttributeError(f"{type(self).__typename__} object is read-only")

    def __replace__(self, /, **overrides):
        fields = {name: getattr(self, name) for name in type(self).__slots__}
        unknown = overrides.keys() - fields.keys()
        if unknown:
            raise TypeError(f"{type(self).__typename__} has no fields {', '.join(map(repr, sorted(unknown)))}")
        clone = object.__new__(type(self))
        Record.__init__(clone, **fields | overrides)
        return clone

    def __rich_repr__(self):
        for name in type(self).__slots__:
            yield name, getattr(self, name)

    def __repr__(self):
        return f"{type(self).__typename__}({', '.join('%s=%r' % pair for pair in self.__rich_repr__())})"


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Pair with coalesce(): value = coalesce(user_value, default) materializes a fallback
only when user_value is Unset (None and other falsey values are preserved).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "settle",
    "coroutine",
    "freeze",

    # Types
    "UnsetType",
    "Record",

    # Constants
    "Unset",
)
