"""Guest property endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from vbox_tools.auth import require_api_key
from vbox_tools.dependencies import require_safe_path_params
from vbox_tools.models.responses import CommandResponse, PropertyResponse, PropertyValue
from vbox_tools.services.vbox_manager import vbox_manager

router = APIRouter(
    prefix="/vms/{vm}/properties",
    tags=["properties"],
    dependencies=[Depends(require_api_key), Depends(require_safe_path_params)],
)


def _prop_name(path: str) -> str:
    # Property names are absolute (/VirtualBox/GuestInfo/...)
    return path if path.startswith("/") else "/" + path


@router.get("/{path:path}", response_model=PropertyResponse)
async def get_property(vm: str, path: str) -> PropertyResponse:
    name = _prop_name(path)
    return PropertyResponse(name=name, value=await vbox_manager.get_property(vm, name))


@router.put("/{path:path}", response_model=CommandResponse)
async def set_property(vm: str, path: str, req: PropertyValue) -> CommandResponse:
    result = await vbox_manager.set_property(vm, _prop_name(path), req.value, req.options)
    return CommandResponse(command=result.command, stdout=result.stdout, stderr=result.stderr)


@router.delete("/{path:path}", response_model=CommandResponse)
async def delete_property(vm: str, path: str) -> CommandResponse:
    result = await vbox_manager.delete_property(vm, _prop_name(path))
    return CommandResponse(command=result.command, stdout=result.stdout, stderr=result.stderr)
