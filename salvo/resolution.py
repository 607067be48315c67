"""
Salvo command-tree resolution.

resolve_command_tree(positionals, entry, root_sub_commands, fallback_to_entry=False)
walks the leading positional tokens through nested sub-command maps and answers
"which command receives the invocation, and how many tokens were path segments".

Properties
- Pure and synchronous: no loader is invoked, no fault is raised. An unmatched
  top-level token is reported as CallMode.UNEXPECTED; turning that into
  "Command not found" is the caller's job.
- Nested maps are read from declared metadata only, so lazy commands are never
  loaded while routing.
- Matched nodes that carry no name are named after the token that selected them
  (shallow copy, first assignment wins; see salvo.commands.named).
"""
from enum import StrEnum

from .commands import ANONYMOUS_COMMAND_NAME, entry_alias, name_of, named, sub_commands_of
from .utils import Record


class CallMode(StrEnum):
    ENTRY = "entry"
    SUB_COMMAND = "subCommand"
    UNEXPECTED = "unexpected"


class ResolutionResult(Record):
    """
    Outcome of one walk through the command tree.

    Fields
    - command_name: str | None, resolved name (the unmatched token when UNEXPECTED).
    - command: Command | LazyCommand | None, the selected node (None when UNEXPECTED).
    - call_mode: CallMode
    - command_path: tuple[str, ...], matched names from the root to the node.
    - depth: int, positional tokens consumed as path segments.
    - omitted: bool, the node exposes sub-commands that no token selected.
    - level_sub_commands: Mapping[str, node] | None, the listing for this level.
    """
    __slots__ = (
        "command_name",
        "command",
        "call_mode",
        "command_path",
        "depth",
        "omitted",
        "level_sub_commands",
    )


def _entry_result(entry, root_sub_commands, omitted):
    return ResolutionResult(
        command_name=name_of(entry),
        command=entry,
        call_mode=CallMode.ENTRY,
        command_path=(),
        depth=0,
        omitted=omitted,
        level_sub_commands=root_sub_commands or None,
    )


def resolve_command_tree(positionals, entry, root_sub_commands, /, *, fallback_to_entry=False):
    """
    Resolve the command selected by `positionals`.

    Parameters
    - positionals: Sequence[str], the leading positional tokens, in index order.
    - entry: Command | LazyCommand, the root command.
    - root_sub_commands: Mapping[str, node], the installed top-level map.
    - fallback_to_entry: bool, an unknown first token runs the entry instead of
      being reported as UNEXPECTED.

    Returns
    - ResolutionResult
    """
    positionals = list(positionals)
    if not positionals or not root_sub_commands:
        return _entry_result(entry, root_sub_commands, omitted=bool(root_sub_commands))

    level = root_sub_commands
    parent = None
    path = []
    node = None
    for token in positionals:
        if token not in level:
            break
        node = named(level[token], token)
        path.append(token)
        parent = level
        nested = sub_commands_of(node)
        if nested is None:
            break
        level = nested

    if node is None:
        if fallback_to_entry:
            return _entry_result(entry, root_sub_commands, omitted=False)
        return ResolutionResult(
            command_name=positionals[0],
            command=None,
            call_mode=CallMode.UNEXPECTED,
            command_path=(),
            depth=0,
            omitted=False,
            level_sub_commands=root_sub_commands,
        )

    nested = sub_commands_of(node)
    if nested is not None:
        name = name_of(node) or ANONYMOUS_COMMAND_NAME
        level_sub_commands = dict(nested)
        level_sub_commands[name] = entry_alias(node)
    else:
        level_sub_commands = parent

    return ResolutionResult(
        command_name=name_of(node),
        command=node,
        call_mode=CallMode.SUB_COMMAND,
        command_path=tuple(path),
        depth=len(path),
        omitted=nested is not None,
        level_sub_commands=level_sub_commands,
    )


__all__ = (
    "CallMode",
    "ResolutionResult",
    "resolve_command_tree",
)
