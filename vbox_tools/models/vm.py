"""Structured values parsed out of VBoxManage output."""

from __future__ import annotations

from pydantic import BaseModel

# showvminfo --machinereadable, keys and values with quoting stripped
VmInfo = dict[str, str]


class StatResult(BaseModel):
    """State of a guest filesystem path at the moment of the probe."""

    exists: bool = False
    is_directory: bool = False
    is_file: bool = False
    is_link: bool = False


class VmListEntry(BaseModel):
    name: str
    uuid: str
