"""FastAPI application entry-point."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from vbox_tools import __version__
from vbox_tools.routers import guest, health, manage, properties, vms
from vbox_tools.services.executor import VBoxManageError
from vbox_tools.utils.logging import get_logger, setup_logging

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown hooks."""
    setup_logging()
    log.info("app.started", version=__version__)
    yield


app = FastAPI(
    title="VBox Tools API",
    description="VirtualBox VM management over VBoxManage",
    version=__version__,
    lifespan=lifespan,
)


@app.exception_handler(VBoxManageError)
async def vboxmanage_error_handler(request: Request, exc: VBoxManageError) -> JSONResponse:
    log.warning("vbox.request_failed", path=request.url.path, rc=exc.returncode)
    return JSONResponse(
        status_code=502,
        content={"detail": str(exc).splitlines()[0], "stderr": exc.stderr},
    )


app.include_router(health.router)
app.include_router(vms.router)
app.include_router(properties.router)
app.include_router(guest.router)
app.include_router(manage.router)
