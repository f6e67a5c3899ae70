"""Assemble escaped VBoxManage argument vectors."""

from __future__ import annotations

from typing import Any, Mapping, Sequence, Union

from vbox_tools.utils.shell_escape import escape_arg

CommandArgs = Union[str, Sequence[str], None]
Options = Mapping[str, Any]


def option_value_to_str(value: Any) -> str:
    """Render a non-flag option value the way VBoxManage expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_command(command: CommandArgs, options: Options | None = None) -> list[str]:
    """Return the escaped token list for *command* plus *options*.

    *command* may be a single string (promoted to a one-element list) or a
    sequence of positional tokens; their order is kept.  Each option becomes
    ``--<name>``; a value of ``True`` means a bare flag, anything else
    (``False`` included) is escaped and appended as the next token.  Option
    names are emitted verbatim.
    """
    if command is None:
        tokens: list[str] = []
    elif isinstance(command, str):
        tokens = [command]
    else:
        tokens = list(command)

    argv = [escape_arg(str(tok)) for tok in tokens]

    for name, value in (options or {}).items():
        argv.append(f"--{name}")
        if value is not True:
            argv.append(escape_arg(option_value_to_str(value)))

    return argv


def join_command(argv: Sequence[str]) -> str:
    return " ".join(argv)
