"""
Salvo default text renderers.

- render_header(ctx): "<descr> (<name> v<version>)", or "" when the cli has no name.
- render_usage(ctx): the help screen, with sections in this order:
    description (when a command was actually selected), USAGE, COMMANDS (when the
    selected level has more than one listable command), ARGUMENTS, OPTIONS, EXAMPLES.
- render_validation_errors(ctx, error): one line per ArgumentError message.

Layout follows env.left_margin (indentation) and env.middle_margin (gap between a
symbol column and its description). Output is plain text; styling is left to the
console that prints it.
"""
from .arguments import COMMON_ARGS
from .commands import ANONYMOUS_COMMAND_NAME
from .utils import Unset, settle


def _indent(ctx, line):
    return " " * ctx.env.left_margin + line


def _options(ctx):
    return {key: schema for key, schema in ctx.args.items() if not schema.positional}


def _positionals(ctx):
    return {key: schema for key, schema in ctx.args.items() if schema.positional}


def _options_symbol(ctx):
    options = _options(ctx)
    if not options:
        return ""
    if all(schema.kind == "boolean" or schema.default is not Unset for schema in options.values()):
        return "[OPTIONS]"
    return "<OPTIONS>"


def _positionals_symbol(ctx):
    return " ".join(f"<{key}>" for key in _positionals(ctx))


def _option_pair(key, schema):
    return f"-{schema.short}, --{key}" if schema.short is not Unset else f"--{key}"


async def _listed_commands(ctx):
    return [command for command in await ctx.load_commands() if not command.internal]


async def render_header(ctx):
    env = ctx.env
    if not env.name:
        return ""
    title = env.descr or env.name
    version = f" v{env.version}" if env.version else ""
    return f"{title} ({env.name}{version})"


async def render_validation_errors(ctx, error):
    return "\n".join(str(exception) for exception in error.exceptions)


async def render_usage(ctx):
    """
    Render the usage screen of the selected command.
    """
    commands = await _listed_commands(ctx) if ctx.omitted else []
    listing = len(commands) > 1
    lines = []

    if not ctx.omitted and ctx.descr:
        lines += [ctx.descr, ""]

    lines += ["USAGE:", _indent(ctx, _usage_symbols(ctx, listing)), ""]

    if listing:
        lines += [*_commands_section(ctx, commands), ""]

    if _positionals(ctx):
        lines += ["ARGUMENTS:", *_positionals_section(ctx), ""]

    if _options(ctx):
        lines += ["OPTIONS:", *_options_section(ctx), ""]

    if examples := await _examples(ctx):
        lines += ["EXAMPLES:", *(_indent(ctx, example) for example in examples.split("\n")), ""]

    return "\n".join(lines)


def _usage_symbols(ctx, listing):
    parts = [ctx.env.name or "COMMAND"]
    if listing:
        parts += [*ctx.command_path, "[COMMANDS]"]
    elif ctx.call_mode == "subCommand":
        parts.append(" ".join(ctx.command_path) or ctx.name or "SUBCOMMAND")
    if options := _options_symbol(ctx):
        parts.append(options)
    if positionals := _positionals_symbol(ctx):
        parts.append(positionals)
    return " ".join(parts)


def _command_symbol(ctx, command):
    if command.entry:
        symbol = "" if command.name in (None, ANONYMOUS_COMMAND_NAME) else f"[{command.name}]"
    else:
        symbol = command.name or ""
    for extra in (_options_symbol(ctx), _positionals_symbol(ctx)):
        if extra:
            symbol = f"{symbol} {extra}" if symbol else extra
    return symbol


def _commands_section(ctx, commands):
    lines = ["COMMANDS:"]
    symbols = [_command_symbol(ctx, command) for command in commands]
    width = max(map(len, symbols)) + ctx.env.middle_margin
    for command, symbol in zip(commands, symbols):
        lines.append(_indent(ctx, f"{symbol.ljust(width)}{command.descr}".rstrip()))

    lines += ["", "For more info, run any command with the `--help` flag:"]
    prefix = " ".join(filter(None, (ctx.env.name, *ctx.command_path)))
    for command in commands:
        path = "" if command.entry else command.name or ""
        lines.append(_indent(ctx, " ".join(filter(None, (prefix, path, "--help")))))
    return lines


def _positionals_section(ctx):
    positionals = _positionals(ctx)
    width = max(map(len, positionals))
    return [
        _indent(ctx, f"{key.ljust(width + ctx.env.middle_margin)} {schema.descr}".rstrip())
        for key, schema in positionals.items()
    ]


def _display_value(key, schema):
    if key in COMMON_ARGS:
        return ""
    default = f"DEFAULT: {schema.default}" if schema.default is not Unset else ""
    if schema.kind == "enum":
        choices = f"CHOICES: {' | '.join(schema.choices)}"
        return f"({default}, {choices})" if default else f"({choices})"
    return f"({default})" if default else ""


def _options_section(ctx):
    pairs = {}
    for key, schema in _options(ctx).items():
        pair = _option_pair(key, schema)
        if schema.kind != "boolean":
            pair = f"{pair} [{key}]" if schema.default is not Unset else f"{pair} <{key}>"
        pairs[key] = (pair, schema.descr, _display_value(key, schema), schema.kind)
        if schema.kind == "boolean" and schema.negatable and key not in COMMON_ARGS:
            pairs[f"no-{key}"] = (f"--no-{key}", f"Negatable of {_option_pair(key, schema)}", "", schema.kind)

    width = max(len(pair) for pair, *_ in pairs.values())
    kind_width = max(len(kind) for *_, kind in pairs.values()) if ctx.env.usage_option_type else 0
    lines = []
    for pair, descr, display, kind in pairs.values():
        if ctx.env.usage_option_type:
            descr = f"[{kind}] ".ljust(kind_width + 3) + descr
        column = (width if descr or display else 0) + ctx.env.middle_margin
        line = f"{pair.ljust(column)}{descr}"
        if display and ctx.env.usage_option_value:
            line += f" {display}"
        lines.append(_indent(ctx, line.rstrip()))
    return lines


async def _examples(ctx):
    examples = getattr(ctx.command, "examples", None)
    if callable(examples):
        examples = await settle(examples(ctx))
    return examples or ""


__all__ = (
    "render_header",
    "render_usage",
    "render_validation_errors",
)
