"""Utilities for parsing VBoxManage output.

Every parser here is a pure function of captured stdout.  Text that does not
match a known shape degrades to the most conservative answer (absent value,
path does not exist, line skipped); nothing in this module raises on
unrecognised output.
"""

from __future__ import annotations

import re
from typing import Optional

from vbox_tools.models.vm import StatResult, VmInfo, VmListEntry

NO_VALUE_SENTINEL = "No value set!"


# ---------------------------------------------------------------------------
# guestproperty get
# ---------------------------------------------------------------------------

def parse_property(output: str) -> Optional[str]:
    """Parse ``Value: <text>`` into ``<text>``; ``None`` when no value is set.

    Everything after the first colon is the value, so the English prefix is
    never compared.
    """
    value = output[output.find(":") + 1:].strip()
    if value == NO_VALUE_SENTINEL:
        return None
    return value


# ---------------------------------------------------------------------------
# showvminfo --machinereadable
# ---------------------------------------------------------------------------

def parse_machine_readable(output: str) -> VmInfo:
    """Parse a ``key=value`` dump into a dict.

    Keys lose one pair of surrounding double quotes.  Quoted values are cut
    at the *last* double quote on the line, so a value with unescaped inner
    quotes comes back as written between the first and last quote.  Unquoted
    values lose trailing whitespace only.  Later duplicates win.  Lines
    without an ``=`` carry no key and are skipped.
    """
    info: VmInfo = {}
    for line in output.split("\n"):
        if not line:
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        if len(key) >= 2 and key[0] == '"' and key[-1] == '"':
            key = key[1:-1]
        if value.startswith('"'):
            end = value.rfind('"')
            # A lone opening quote is kept as the whole value
            value = value[1:end] if end > 0 else value[:1]
        else:
            value = value.rstrip()
        info[key] = value
    return info


def is_windows_guest(info: VmInfo) -> bool:
    """Guest OS family check used to pick cmd.exe or /bin/sh."""
    return re.search(r"windows", info.get("ostype", ""), re.IGNORECASE) is not None


# ---------------------------------------------------------------------------
# guestcontrol stat
# ---------------------------------------------------------------------------

_STAT_DIRECTORY_RE = re.compile(r"Is a directory$")
_STAT_FILE_RE = re.compile(r"Is a file")
_STAT_UNKNOWN_TYPE_RE = re.compile(r"found, type unknown \([0-9]+\)")


def parse_stat(output: str) -> StatResult:
    """Classify ``guestcontrol stat`` output.

    Checked in order, first match wins: directory suffix, file, unknown
    type (reported as a link), any other text (exists, kind unknown),
    nothing at all (does not exist).
    """
    if _STAT_DIRECTORY_RE.search(output):
        return StatResult(exists=True, is_directory=True)
    if _STAT_FILE_RE.search(output):
        return StatResult(exists=True, is_file=True)
    if _STAT_UNKNOWN_TYPE_RE.search(output):
        return StatResult(exists=True, is_link=True)
    if output.strip():
        return StatResult(exists=True)
    return StatResult()


# ---------------------------------------------------------------------------
# list vms
# ---------------------------------------------------------------------------

_VM_LIST_RE = re.compile(r'^"(?P<name>.*)"\s+\{(?P<uuid>[0-9a-fA-F-]+)\}\s*$')


def parse_vm_list(output: str) -> list[VmListEntry]:
    """Parse ``"name" {uuid}`` lines; anything else is skipped."""
    vms: list[VmListEntry] = []
    for line in output.splitlines():
        m = _VM_LIST_RE.match(line.strip())
        if m:
            vms.append(VmListEntry(name=m.group("name"), uuid=m.group("uuid")))
    return vms
