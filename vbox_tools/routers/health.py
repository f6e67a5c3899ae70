"""Health-check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from vbox_tools import __version__
from vbox_tools.auth import require_api_key
from vbox_tools.models.responses import HealthResponse, VBoxHealthResponse
from vbox_tools.services.vbox_manager import vbox_manager

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def service_health() -> HealthResponse:
    """Basic liveness probe (no auth required)."""
    return HealthResponse(status="ok", version=__version__)


@router.get(
    "/vbox/health",
    response_model=VBoxHealthResponse,
    dependencies=[Depends(require_api_key)],
)
async def vbox_health() -> VBoxHealthResponse:
    """Check that VBoxManage can be run on this host."""
    try:
        version = await vbox_manager.version()
        return VBoxHealthResponse(reachable=True, vbox_version=version)
    except Exception as exc:
        return VBoxHealthResponse(reachable=False, error=str(exc))
