"""Raw VBoxManage subcommands (escape hatch)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from vbox_tools.auth import require_api_key
from vbox_tools.models.responses import CommandResponse, ManageRequest
from vbox_tools.services.command_filter import check_manage_command
from vbox_tools.services.vbox_manager import vbox_manager

router = APIRouter(tags=["manage"], dependencies=[Depends(require_api_key)])


@router.post("/manage", response_model=CommandResponse)
async def run_manage_command(req: ManageRequest) -> CommandResponse:
    """Run an allowlisted subcommand with an options map."""
    filt = check_manage_command(req.command, req.options)
    if not filt.allowed:
        raise HTTPException(status_code=403, detail=filt.reason)

    result = await vbox_manager.manage(req.command, req.options)
    return CommandResponse(
        command=result.command,
        stdout=result.stdout,
        stderr=result.stderr,
    )
