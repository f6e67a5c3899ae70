"""Quoting of single arguments for the host shell that runs VBoxManage.

The command line is handed to a shell as one string, so every argument is
escaped on its own before the tokens are joined with spaces.

Known gap: the POSIX rules only escape ``space tab \\ | ; & " ` $``.  Single
quotes, ``<``, ``>``, ``*``, ``(`` and friends pass through untouched.
Hardening this would change the exact bytes of existing command lines, so it
is left as is.
"""

from __future__ import annotations

import re
import sys

_WINDOWS_NEEDS_QUOTES_RE = re.compile(r'[\s\\"&]')

_POSIX_SPECIAL_CHARS = frozenset(' \t\\|;&"`$')


def escape_arg_windows(arg: str) -> str:
    """cmd.exe convention: wrap in double quotes, embedded ``"`` becomes ``\"\"\"``."""
    if not _WINDOWS_NEEDS_QUOTES_RE.search(arg):
        return arg
    return '"' + arg.replace('"', '"""') + '"'


def escape_arg_posix(arg: str) -> str:
    """Backslash-escape the characters ``/bin/sh`` would otherwise interpret."""
    return "".join("\\" + ch if ch in _POSIX_SPECIAL_CHARS else ch for ch in arg)


IS_WINDOWS_HOST = sys.platform.startswith("win")

# Chosen once at import time
escape_arg = escape_arg_windows if IS_WINDOWS_HOST else escape_arg_posix


# ---------------------------------------------------------------------------
# Characters the host escaper leaves live
# ---------------------------------------------------------------------------

# Control characters (tab excepted, it is escaped on both hosts)
_CONTROL_CHARS = "".join(chr(c) for c in range(0x20) if c != 0x09) + "\x7f"

_POSIX_UNSAFE_RE = re.compile("[" + re.escape(_CONTROL_CHARS + "<>*?'(){}[]~#!") + "]")
_WINDOWS_UNSAFE_RE = re.compile("[" + re.escape(_CONTROL_CHARS + "<>|^%!") + "]")

_UNSAFE_RE = _WINDOWS_UNSAFE_RE if IS_WINDOWS_HOST else _POSIX_UNSAFE_RE

_OPTION_NAME_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.-]*")


def check_shell_safe(arg: str) -> str:
    """Return *arg* unchanged, or raise ``ValueError`` if escaping would not cover it.

    Used on untrusted input before it reaches a command line.
    """
    m = _UNSAFE_RE.search(arg)
    if m:
        raise ValueError(f"character {m.group(0)!r} is not allowed in an argument")
    return arg


def check_option_name(name: str) -> str:
    """Option names are emitted unescaped, so only plain flag identifiers pass."""
    if not _OPTION_NAME_RE.fullmatch(name):
        raise ValueError(f"invalid option name: {name!r}")
    return name
