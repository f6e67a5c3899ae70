"""Common API request/response models."""

from __future__ import annotations

from typing import Annotated, Any, Optional, Union

from pydantic import AfterValidator, BaseModel

from vbox_tools.utils.shell_escape import check_option_name, check_shell_safe

# Request strings end up on a shell command line
SafeArg = Annotated[str, AfterValidator(check_shell_safe)]
OptionName = Annotated[str, AfterValidator(check_option_name)]
OptionValue = Union[bool, int, float, SafeArg]
Options = dict[OptionName, OptionValue]


class HealthResponse(BaseModel):
    status: str
    version: str


class VBoxHealthResponse(BaseModel):
    reachable: bool
    vbox_version: Optional[str] = None
    error: Optional[str] = None


class CommandResponse(BaseModel):
    command: str
    stdout: str
    stderr: str = ""


class ManageRequest(BaseModel):
    """Escape hatch: any subcommand plus an options map."""

    command: list[SafeArg]
    options: Options = {}


class OptionsRequest(BaseModel):
    options: Options = {}


class StartRequest(BaseModel):
    gui: bool = False
    options: Options = {}


class ControlRequest(BaseModel):
    # reset, resume, savestate, poweroff, acpipowerbutton, acpisleepbutton
    action: str


class SnapshotRequest(BaseModel):
    name: SafeArg


class CloneRequest(BaseModel):
    new_name: SafeArg
    snapshot: Optional[SafeArg] = None
    options: Options = {}


class ImportRequest(BaseModel):
    ovf: SafeArg
    options: Options = {}


class PropertyValue(BaseModel):
    value: SafeArg
    options: Options = {}


class PropertyResponse(BaseModel):
    name: str
    value: Optional[str] = None


class RegisteredResponse(BaseModel):
    vm: str
    registered: bool


class IPAddressResponse(BaseModel):
    vm: str
    ip: Optional[str] = None


class VmInfoResponse(BaseModel):
    vm: str
    info: dict[str, str]


class GuestCredentials(BaseModel):
    username: Optional[SafeArg] = None
    password: Optional[SafeArg] = None


class GuestPathRequest(GuestCredentials):
    path: SafeArg
    recursive: bool = False
    parents: bool = False
    force: bool = False


class GuestCopyRequest(GuestCredentials):
    source: Union[SafeArg, list[SafeArg]]
    dest: SafeArg
    recursive: bool = False


class GuestMoveRequest(GuestCredentials):
    source: Union[SafeArg, list[SafeArg]]
    dest: SafeArg


class GuestExecRequest(GuestCredentials):
    """Command text is checked like any other argument before it is sent."""

    cmd: SafeArg
    params: list[SafeArg] = []
    wait: bool = True


class GuestKillRequest(GuestCredentials):
    name: SafeArg


class ErrorResponse(BaseModel):
    detail: str
    stderr: Any = None
