"""Process executor: one VBoxManage invocation per call, no retries.

The assembled command line is run through the host shell with
``asyncio.create_subprocess_shell`` so the event loop is never blocked.  Each
call spawns its own process; there is no pooling and no concurrency limit.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from typing import Optional, Protocol, Sequence

from vbox_tools.config import Settings, settings
from vbox_tools.models.commands import ExecutionResult
from vbox_tools.services.command_builder import join_command
from vbox_tools.utils.logging import get_logger

log = get_logger(__name__)


class VBoxManageError(RuntimeError):
    """VBoxManage could not be spawned or exited nonzero."""

    def __init__(
        self,
        message: str,
        *,
        command: str,
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class Executor(Protocol):
    async def execute(self, argv: Sequence[str]) -> ExecutionResult: ...


class ProcessExecutor:
    """Runs ``<binary> <argv...>`` and captures stdout/stderr."""

    def __init__(
        self,
        binary: str | None = None,
        *,
        debug: bool | None = None,
        cfg: Settings | None = None,
    ) -> None:
        self._cfg = cfg or settings
        self.binary = binary or self._cfg.resolve_binary()
        self.debug = self._cfg.vbox_debug if debug is None else debug

    def command_line(self, argv: Sequence[str]) -> str:
        return join_command([self.binary, *argv])

    async def execute(self, argv: Sequence[str]) -> ExecutionResult:
        """Run one already-escaped argument vector.

        Raises :class:`VBoxManageError` on spawn failure or nonzero exit,
        with whatever stderr was captured attached.
        """
        if self.debug:
            log.warning("$ VBoxManage " + join_command(argv))

        cmdline = self.command_line(argv)
        start = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_shell(
                cmdline,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as exc:
            # ValueError: embedded null byte in the command line
            log.error("vbox.spawn_failed", command=cmdline, error=str(exc))
            raise VBoxManageError(
                f"failed to start {self.binary}: {exc}", command=cmdline,
            ) from exc

        try:
            stdout, stderr = await proc.communicate()
        except asyncio.CancelledError:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            log.info("vbox.exec_cancelled", command=cmdline)
            raise

        out = stdout.decode(errors="replace")
        err = stderr.decode(errors="replace")
        elapsed = time.monotonic() - start

        if proc.returncode != 0:
            log.info(
                "vbox.exec_failed",
                command=cmdline, rc=proc.returncode, stderr=err[:200],
            )
            raise VBoxManageError(
                f"Command failed: {cmdline}\n{err}",
                command=cmdline,
                returncode=proc.returncode,
                stderr=err,
            )

        log.debug("vbox.exec", command=cmdline, rc=proc.returncode, out=out[:200])
        return ExecutionResult(
            command=cmdline,
            stdout=out,
            stderr=err,
            returncode=proc.returncode,
            elapsed_time=elapsed,
        )
