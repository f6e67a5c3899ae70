"""VM inventory, lifecycle, snapshot and clone endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from vbox_tools.auth import require_api_key
from vbox_tools.dependencies import require_safe_path_params
from vbox_tools.models.commands import ExecutionResult
from vbox_tools.models.responses import (
    CloneRequest,
    CommandResponse,
    ControlRequest,
    IPAddressResponse,
    ImportRequest,
    OptionsRequest,
    RegisteredResponse,
    SnapshotRequest,
    StartRequest,
    VmInfoResponse,
)
from vbox_tools.models.vm import VmListEntry
from vbox_tools.services.vbox_manager import CONTROL_ACTIONS, vbox_manager

router = APIRouter(
    prefix="/vms",
    tags=["vms"],
    dependencies=[Depends(require_api_key), Depends(require_safe_path_params)],
)


def _response(result: ExecutionResult) -> CommandResponse:
    return CommandResponse(
        command=result.command,
        stdout=result.stdout,
        stderr=result.stderr,
    )


@router.get("", response_model=list[VmListEntry])
async def list_vms() -> list[VmListEntry]:
    return await vbox_manager.list_vms()


@router.post("/import", response_model=CommandResponse)
async def import_appliance(req: ImportRequest) -> CommandResponse:
    return _response(await vbox_manager.import_appliance(req.ovf, req.options))


@router.get("/{vm}/info", response_model=VmInfoResponse)
async def vm_info(vm: str) -> VmInfoResponse:
    return VmInfoResponse(vm=vm, info=await vbox_manager.get_info(vm))


@router.get("/{vm}/registered", response_model=RegisteredResponse)
async def vm_registered(vm: str) -> RegisteredResponse:
    return RegisteredResponse(vm=vm, registered=await vbox_manager.is_registered(vm))


@router.get("/{vm}/ip", response_model=IPAddressResponse)
async def vm_ip(
    vm: str,
    timeout: float = Query(0, description="Seconds to wait; negative waits forever"),
) -> IPAddressResponse:
    """Wait (up to *timeout* seconds) for the guest to report its IPv4 address."""
    ip = await vbox_manager.get_ip_address(vm, timeout=timeout)
    return IPAddressResponse(vm=vm, ip=ip)


@router.post("/{vm}/start", response_model=CommandResponse)
async def start_vm(vm: str, req: StartRequest) -> CommandResponse:
    return _response(await vbox_manager.start(vm, req.gui, req.options))


@router.post("/{vm}/control", response_model=CommandResponse)
async def control_vm(vm: str, req: ControlRequest) -> CommandResponse:
    if req.action not in CONTROL_ACTIONS:
        raise HTTPException(
            status_code=422,
            detail=f"action must be one of {sorted(CONTROL_ACTIONS)}",
        )
    return _response(await vbox_manager.control(vm, req.action))


@router.post("/{vm}/modify", response_model=CommandResponse)
async def modify_vm(vm: str, req: OptionsRequest) -> CommandResponse:
    return _response(await vbox_manager.modify(vm, req.options))


@router.post("/{vm}/snapshots", response_model=CommandResponse)
async def take_snapshot(vm: str, req: SnapshotRequest) -> CommandResponse:
    return _response(await vbox_manager.take_snapshot(vm, req.name))


@router.post("/{vm}/snapshots/{snapshot}/restore", response_model=CommandResponse)
async def restore_snapshot(vm: str, snapshot: str) -> CommandResponse:
    return _response(await vbox_manager.restore_snapshot(vm, snapshot))


@router.post("/{vm}/clone", response_model=CommandResponse)
async def clone_vm(vm: str, req: CloneRequest) -> CommandResponse:
    options = dict(req.options)
    if req.snapshot:
        options["snapshot"] = req.snapshot
    return _response(await vbox_manager.clone(vm, req.new_name, options))
