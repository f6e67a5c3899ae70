"""Command-related data structures."""

from __future__ import annotations

from pydantic import BaseModel


class ExecutionResult(BaseModel):
    """Captured output of one successful VBoxManage invocation.

    Nonzero exits never produce a result; they raise ``VBoxManageError``.
    """

    command: str
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0
    elapsed_time: float = 0.0
