"""Guest control endpoints: files and processes inside a running VM."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from vbox_tools.auth import require_api_key
from vbox_tools.dependencies import require_safe_path_params
from vbox_tools.models.commands import ExecutionResult
from vbox_tools.models.responses import (
    CommandResponse,
    GuestCopyRequest,
    GuestExecRequest,
    GuestKillRequest,
    GuestMoveRequest,
    GuestPathRequest,
)
from vbox_tools.models.vm import StatResult
from vbox_tools.services.vbox_manager import vbox_manager

router = APIRouter(
    prefix="/vms/{vm}/guest",
    tags=["guest"],
    dependencies=[Depends(require_api_key), Depends(require_safe_path_params)],
)


def _response(result: ExecutionResult) -> CommandResponse:
    return CommandResponse(
        command=result.command,
        stdout=result.stdout,
        stderr=result.stderr,
    )


@router.post("/stat", response_model=StatResult)
async def stat(vm: str, req: GuestPathRequest) -> StatResult:
    return await vbox_manager.stat(vm, req.username, req.password, req.path)


@router.post("/mkdir", response_model=CommandResponse)
async def mkdir(vm: str, req: GuestPathRequest) -> CommandResponse:
    return _response(
        await vbox_manager.mkdir(vm, req.username, req.password, req.path, req.parents),
    )


@router.post("/rmdir", response_model=CommandResponse)
async def rmdir(vm: str, req: GuestPathRequest) -> CommandResponse:
    return _response(
        await vbox_manager.rmdir(vm, req.username, req.password, req.path, req.recursive),
    )


@router.post("/remove", response_model=CommandResponse)
async def remove_file(vm: str, req: GuestPathRequest) -> CommandResponse:
    return _response(
        await vbox_manager.remove_file(vm, req.username, req.password, req.path, req.force),
    )


@router.post("/move", response_model=CommandResponse)
async def move(vm: str, req: GuestMoveRequest) -> CommandResponse:
    return _response(
        await vbox_manager.move(vm, req.username, req.password, req.source, req.dest),
    )


@router.post("/copyto", response_model=CommandResponse)
async def copy_to(vm: str, req: GuestCopyRequest) -> CommandResponse:
    return _response(
        await vbox_manager.copy_to_vm(
            vm, req.username, req.password, req.source, req.dest, req.recursive,
        ),
    )


@router.post("/copyfrom", response_model=CommandResponse)
async def copy_from(vm: str, req: GuestCopyRequest) -> CommandResponse:
    return _response(
        await vbox_manager.copy_from_vm(
            vm, req.username, req.password, req.source, req.dest, req.recursive,
        ),
    )


@router.post("/exec", response_model=CommandResponse)
async def exec_on_vm(vm: str, req: GuestExecRequest) -> CommandResponse:
    """Run a command through the guest's shell (cmd.exe or /bin/sh)."""
    return _response(
        await vbox_manager.exec_on_vm(
            vm, req.username, req.password, req.cmd, req.params, wait=req.wait,
        ),
    )


@router.post("/kill", response_model=CommandResponse)
async def kill_on_vm(vm: str, req: GuestKillRequest) -> CommandResponse:
    return _response(
        await vbox_manager.kill_on_vm(vm, req.username, req.password, req.name),
    )
