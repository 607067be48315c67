r"""
Salvo argument schemas.

Overview
- Arg: one entry of a command's `args` mapping (or of the global option registry).
  The mapping key is the long name (`--key`); the schema carries everything the
  tokenizer needs to turn tokens into a typed value.

Kinds
- "string"     named option carrying a text value (the default).
- "boolean"    presence-only flag; `negatable=True` also accepts `--no-<key>`.
- "number"     named option converted with int() (falling back to float()).
- "enum"       named option restricted to `choices`.
- "custom"     named option converted by the `parse` callable.
- "positional" value taken from the positional tokens, in declaration order.

Validation highlights
- short must be a single alphanumeric character.
- enum requires non-empty choices; custom requires a callable parse.
- positional arguments cannot be negatable nor carry a short alias.

The engine never interprets these beyond handing them to salvo.tokens: argument
grammar is the tokenizer's business, the engine only decides which command gets
which schema.
"""
import re
from types import MappingProxyType

from .utils import Record, Unset, coalesce

KINDS = frozenset({"string", "boolean", "number", "enum", "custom", "positional"})


class Arg(Record):
    """
    Argument schema.

    Parameters
    - kind: str (positional-only), one of KINDS.
    - short: str | Unset, single-character alias (`-x`).
    - descr: str | Unset, help text for usage rendering.
    - default: Any | Unset, value used when the argument is absent.
    - required: bool, missing values are reported as validation errors.
    - multiple: bool, repeated occurrences accumulate into a tuple.
    - negatable: bool, booleans only; `--no-<key>` sets False.
    - choices: Iterable[str], enum kind only.
    - parse: Callable[[str], Any] | Unset, custom kind only.
    - metavar: str | Unset, label for the value in usage output.
    """
    __slots__ = (
        "kind",
        "short",
        "descr",
        "default",
        "required",
        "multiple",
        "negatable",
        "choices",
        "parse",
        "metavar",
    )

    def __init__(
            self,
            kind="string",
            /,
            *,
            short=Unset,
            descr=Unset,
            default=Unset,
            required=False,
            multiple=False,
            negatable=False,
            choices=(),
            parse=Unset,
            metavar=Unset,
    ):
        if kind not in KINDS:
            raise ValueError(f"arg 'kind' must be one of {', '.join(sorted(KINDS))}")
        if short is not Unset:
            if not isinstance(short, str) or not re.fullmatch(r"[^\W_]", short):
                raise ValueError("arg 'short' must be a single alphanumeric character")
            if kind == "positional":
                raise ValueError("positional arg cannot have a 'short' alias")
        if negatable and kind != "boolean":
            raise ValueError("only boolean args can be 'negatable'")
        if kind == "enum" and not choices:
            raise ValueError("enum arg requires 'choices'")
        if choices and kind != "enum":
            raise ValueError("only enum args accept 'choices'")
        if kind == "custom" and not callable(parse):
            raise TypeError("custom arg requires a callable 'parse'")
        if descr is not Unset and not isinstance(descr, str):
            raise TypeError("arg 'descr' must be a string")
        super().__init__(
            kind=kind,
            short=short,
            descr=coalesce(descr, ""),
            default=default,
            required=bool(required),
            multiple=bool(multiple),
            negatable=bool(negatable),
            choices=tuple(choices),
            parse=parse,
            metavar=metavar,
        )

    @property
    def positional(self):
        return self.kind == "positional"

    @property
    def valued(self):
        """True when the argument consumes a value token (everything except booleans)."""
        return self.kind not in ("boolean", "positional")


COMMON_ARGS = MappingProxyType({
    "help": Arg("boolean", short="h", descr="Display this help message"),
    "version": Arg("boolean", short="v", descr="Display this version"),
})
"""
Global options registered by the built-in globals plugin.
"""


__all__ = (
    "Arg",
    "KINDS",
    "COMMON_ARGS",
)
