"""Request guards shared by the routers."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from vbox_tools.utils.shell_escape import check_shell_safe


async def require_safe_path_params(request: Request) -> None:
    """Reject path parameters (VM names, snapshot names, property paths)
    that the host escaper cannot make safe for the shell."""
    for name, value in request.path_params.items():
        try:
            check_shell_safe(str(value))
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"{name}: {exc}",
            ) from exc
