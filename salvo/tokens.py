"""
Salvo tokenizer: argv → tokens → values.

This is the thin external collaborator the resolution engine talks to. It knows the
shape of a command line, not the shape of a command tree.

parse_args(argv)
- "--name=value" → option token (inline value)
- "--name"       → option token (value may follow as the next positional token)
- "-abc"         → three short option tokens sharing the same index
- "--"           → option-terminator; everything after it is positional
- anything else (including "-" and negative numbers) → positional token

resolve_args(args, tokens, skip_positional=0)
- binds option tokens to the schemas in `args`, converts values, assigns
  positional schemas from the positional tokens left after skipping the first
  `skip_positional` (the command-path segments), applies defaults and required
  checks, and collects every problem into a single ArgumentsValidationError.
- unknown options are ignored (they remain visible in the token list).
"""
import re

from .faults import ArgumentError, ArgumentsValidationError, FaultCode
from .utils import Record, Unset

POSITIONAL = "positional"
OPTION = "option"
TERMINATOR = "option-terminator"


class ArgToken(Record):
    """
    One lexical unit of the command line.

    Fields
    - kind: "positional" | "option" | "option-terminator"
    - index: position of the originating argv entry
    - name: option name without dashes (None for positionals/terminator)
    - value: positional text or inline option value (None when absent)
    - inline: True for "--name=value"
    - short: True for "-x" style options
    """
    __slots__ = ("kind", "index", "name", "value", "inline", "short")

    def __init__(self, kind, index, /, *, name=None, value=None, inline=False, short=False):
        super().__init__(kind=kind, index=index, name=name, value=value, inline=inline, short=short)


class ArgsResolution(Record):
    __slots__ = ("values", "explicit", "positionals", "rest", "error")


def parse_args(argv, /):
    """
    Split argv into ArgToken objects, in argv order.
    """
    tokens = []
    terminated = False
    for index, item in enumerate(argv):
        if not isinstance(item, str):
            raise TypeError("parse_args() argument must be an iterable of strings")
        if terminated:
            tokens.append(ArgToken(POSITIONAL, index, value=item))
        elif item == "--":
            terminated = True
            tokens.append(ArgToken(TERMINATOR, index))
        elif item.startswith("--"):
            name, separator, value = item[2:].partition("=")
            tokens.append(ArgToken(OPTION, index, name=name, value=value if separator else None, inline=bool(separator)))
        elif item.startswith("-") and len(item) > 1 and not re.fullmatch(r"-\d+(\.\d+)?", item):
            for letter in item[1:]:
                tokens.append(ArgToken(OPTION, index, name=letter, short=True))
        else:
            tokens.append(ArgToken(POSITIONAL, index, value=item))
    return tokens


def leading_positionals(tokens, /):
    """
    Return the values of the contiguous run of positional tokens that opens the command line.

    These are the only candidates for command-path segments; a positional token that
    follows an option may be that option's value and is never routed.
    """
    values = []
    for token in sorted(tokens, key=lambda token: token.index):
        if token.kind != POSITIONAL:
            break
        values.append(token.value)
    return values


def _convert(key, schema, raw):
    match schema.kind:
        case "number":
            try:
                return int(raw)
            except ValueError:
                try:
                    return float(raw)
                except ValueError:
                    raise ArgumentError(f"Option '--{key}' expects a number, got {raw!r}", argument=key) from None
        case "enum":
            if raw not in schema.choices:
                raise ArgumentError(
                    f"Option '--{key}' must be one of {', '.join(map(repr, schema.choices))}, got {raw!r}",
                    argument=key,
                )
            return raw
        case "custom":
            try:
                return schema.parse(raw)
            except Exception as error:
                raise ArgumentError(f"Option '--{key}' could not be parsed: {error}", argument=key) from error
        case _:
            return raw


def _store(values, key, schema, value):
    if schema.multiple:
        values[key] = (*values.get(key, ()), value)
    else:
        values[key] = value


def resolve_args(args, tokens, /, *, skip_positional=0):
    """
    Resolve typed values for `args` from `tokens`.

    Parameters
    - args: Mapping[str, Arg], the merged global options and command args.
    - tokens: Iterable[ArgToken], as produced by parse_args().
    - skip_positional: int, leading positionals consumed as command-path segments.

    Returns
    - ArgsResolution(values, explicit, positionals, rest, error) where error is an
      ArgumentsValidationError or None.
    """
    longs = {key: schema for key, schema in args.items() if not schema.positional}
    shorts = {schema.short: key for key, schema in longs.items() if schema.short is not Unset}

    values = {}
    explicit = dict.fromkeys(args, False)
    errors = []
    positionals = []
    rest = []

    tokens = sorted(tokens, key=lambda token: token.index)
    consumed = set()
    terminated = False
    for position, token in enumerate(tokens):
        if position in consumed:
            continue
        if terminated:
            rest.append(token.value)
            continue
        if token.kind == TERMINATOR:
            terminated = True
            continue
        if token.kind == POSITIONAL:
            positionals.append(token.value)
            continue

        negated = False
        if token.short:
            key = shorts.get(token.name)
        elif token.name in longs:
            key = token.name
        elif token.name.startswith("no-") and getattr(longs.get(token.name[3:]), "negatable", False):
            key, negated = token.name[3:], True
        else:
            key = None
        if key is None:
            continue

        schema = args[key]
        if schema.kind == "boolean":
            if token.inline:
                errors.append(ArgumentError(f"Option '--{key}' does not take a value", argument=key))
                continue
            value = not negated
        else:
            if token.value is not None:
                raw = token.value
            elif position + 1 < len(tokens) and tokens[position + 1].kind == POSITIONAL:
                raw = tokens[position + 1].value
                consumed.add(position + 1)
            else:
                errors.append(ArgumentError(f"Option '--{key}' requires a value", argument=key))
                continue
            try:
                value = _convert(key, schema, raw)
            except ArgumentError as error:
                errors.append(error)
                continue
        explicit[key] = True
        _store(values, key, schema, value)

    positionals = positionals[skip_positional:]
    remaining = list(positionals)
    for key, schema in args.items():
        if not schema.positional or not remaining:
            continue
        if schema.multiple:
            values[key], remaining = tuple(remaining), []
        else:
            values[key] = remaining.pop(0)
        explicit[key] = True

    for key, schema in args.items():
        if key in values:
            continue
        if schema.default is not Unset:
            values[key] = schema.default
        elif schema.required:
            label = f"Positional argument '{key}'" if schema.positional else f"Option '--{key}'"
            errors.append(ArgumentError(
                f"{label} is required", argument=key, code=FaultCode.MISSING_ARGUMENT, title="missing argument"
            ))

    return ArgsResolution(
        values=values,
        explicit=explicit,
        positionals=positionals,
        rest=rest,
        error=ArgumentsValidationError(errors) if errors else None,
    )


__all__ = (
    "ArgToken",
    "ArgsResolution",
    "parse_args",
    "leading_positionals",
    "resolve_args",
    "POSITIONAL",
    "OPTION",
    "TERMINATOR",
)
