"""Allowlist / denylist for the ``/manage`` escape hatch.

Default mode: only read-only subcommands are allowed.
Maintenance mode: any subcommand, but destructive ones stay blocked.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Sequence

from vbox_tools.config import settings
from vbox_tools.utils.logging import get_logger

log = get_logger(__name__)

# ── ALWAYS-DENIED patterns (blocked even in maintenance mode) ─────────────
# Searched anywhere in the command so leading global options cannot hide them
DENY_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(?:^|\s)unregistervm\b", re.I),
    re.compile(r"(?:^|\s)closemedium\b.*--delete\b", re.I),
    re.compile(r"(?:^|\s)snapshot\s+\S+\s+delete\b", re.I),
    re.compile(r"(?:^|\s)mediumproperty\b.*\bdelete\b", re.I),
    re.compile(r"(?:^|\s)extpack\s+(uninstall|cleanup)\b", re.I),
    re.compile(r"(?:^|\s)setproperty\s+machinefolder\b", re.I),
]

# Options that turn an otherwise harmless subcommand destructive
DENY_OPTIONS = frozenset({"delete"})

# guestcontrol verbs denied wherever they sit after the VM name, so
# credentials or other options in front of them do not hide them
GUESTCONTROL_DENY_VERBS = frozenset({
    "run",
    "start",
    "rmdir",
    "removedir",
    "removedirectory",
    "removefile",
    "rm",
    "closeprocess",
    "closesession",
    "updatega",
    "updateadditions",
})

# ── read-only allow patterns ──────────────────────────────────────────────
ALLOW_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"^\s*--version\s*$", re.I),
    re.compile(r"^\s*list\b", re.I),
    re.compile(r"^\s*showvminfo\b", re.I),
    re.compile(r"^\s*showmediuminfo\b", re.I),
    re.compile(r"^\s*showhdinfo\b", re.I),
    re.compile(r"^\s*guestproperty\s+(get|enumerate)\b", re.I),
    re.compile(r"(?:^|\s)snapshot\s+\S+\s+(list|showvminfo)\b", re.I),
    re.compile(r"^\s*metrics\s+(list|query)\b", re.I),
    re.compile(r"^\s*guestcontrol\s+\S+\s+stat\b", re.I),
]


# ── Public API ────────────────────────────────────────────────────────────

class CommandFilterResult:
    __slots__ = ("allowed", "reason")

    def __init__(self, allowed: bool, reason: str):
        self.allowed = allowed
        self.reason = reason

    def __bool__(self) -> bool:
        return self.allowed


def _strip_global_options(tokens: list[str]) -> list[str]:
    """Drop leading ``-nologo``-style global options in front of the subcommand."""
    i = 0
    while i < len(tokens) and tokens[i].startswith("-"):
        i += 1
    # A bare ``--version`` has no subcommand behind it
    return tokens[i:] or tokens


def check_manage_command(
    command: Sequence[str],
    options: Mapping[str, Any] | None = None,
) -> CommandFilterResult:
    """Check whether a raw subcommand + options map may be run."""
    tokens = " ".join(command).split()
    if not tokens:
        return CommandFilterResult(False, "empty command")
    full = " ".join(tokens)
    lowered = [tok.lower() for tok in tokens]

    flags = [name.lower() for name in options or {}]
    flags += [tok[2:] for tok in lowered if tok.startswith("--")]
    for flag in flags:
        if flag in DENY_OPTIONS:
            log.info("filter.denied_option", command=full, option=flag)
            return CommandFilterResult(False, f"denied by safety rule: --{flag}")

    if "guestcontrol" in lowered:
        for tok in lowered[lowered.index("guestcontrol") + 2:]:
            if tok in GUESTCONTROL_DENY_VERBS:
                log.info("filter.denied", command=full, verb=tok)
                return CommandFilterResult(
                    False, f"denied by safety rule: guestcontrol {tok}",
                )

    for pat in DENY_PATTERNS:
        if pat.search(full):
            log.info("filter.denied", command=full, pattern=pat.pattern)
            return CommandFilterResult(False, f"denied by safety rule: {pat.pattern}")

    cmd = " ".join(_strip_global_options(tokens))
    for pat in ALLOW_PATTERNS:
        if pat.search(cmd):
            return CommandFilterResult(True, "allowed read-only command")

    if settings.vbox_maintenance_mode:
        return CommandFilterResult(True, "maintenance mode: command allowed")

    return CommandFilterResult(False, "command not in allowlist")
