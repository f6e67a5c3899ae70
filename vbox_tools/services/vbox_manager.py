"""High-level VBoxManage operations.

Each operation is one :func:`build_command` call run through the executor,
plus at most one output parser.  The executor is injected so tests (and
callers wanting a different transport) can swap it out.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional, Sequence, Union

from vbox_tools.config import Settings, settings
from vbox_tools.models.commands import ExecutionResult
from vbox_tools.models.vm import StatResult, VmInfo, VmListEntry
from vbox_tools.services.command_builder import CommandArgs, build_command
from vbox_tools.services.executor import Executor, ProcessExecutor, VBoxManageError
from vbox_tools.services.polling import poll_until_value
from vbox_tools.utils.logging import get_logger
from vbox_tools.utils.vbox_parser import (
    is_windows_guest,
    parse_machine_readable,
    parse_property,
    parse_stat,
    parse_vm_list,
)

log = get_logger(__name__)

Paths = Union[str, Sequence[str]]

CONTROL_ACTIONS = frozenset({
    "reset",
    "resume",
    "savestate",
    "poweroff",
    "acpipowerbutton",
    "acpisleepbutton",
})


def _as_list(paths: Paths) -> list[str]:
    if isinstance(paths, str):
        return [paths]
    return list(paths)


class VBoxManager:
    """Operation facade over the ``VBoxManage`` command-line tool."""

    def __init__(self, executor: Executor | None = None, cfg: Settings | None = None) -> None:
        self._cfg = cfg or settings
        self.executor = executor or ProcessExecutor(cfg=self._cfg)

    # ── escape hatch ──────────────────────────────────────────────────

    async def manage(
        self,
        command: CommandArgs,
        options: Mapping[str, Any] | None = None,
    ) -> ExecutionResult:
        """Run any subcommand with any options map."""
        return await self.executor.execute(build_command(command, options))

    async def version(self) -> str:
        std = await self.manage(["--version"])
        return std.stdout.strip()

    async def list_vms(self) -> list[VmListEntry]:
        std = await self.manage(["list", "vms"])
        return parse_vm_list(std.stdout)

    # ── guest properties ──────────────────────────────────────────────

    async def get_property(self, vmname: str, prop: str) -> Optional[str]:
        std = await self.manage(["guestproperty", "get", vmname, prop])
        return parse_property(std.stdout)

    async def set_property(
        self,
        vmname: str,
        prop: str,
        value: str,
        options: Mapping[str, Any] | None = None,
    ) -> ExecutionResult:
        return await self.manage(["guestproperty", "set", vmname, prop, value], options)

    async def delete_property(self, vmname: str, prop: str) -> ExecutionResult:
        return await self.manage(["guestproperty", "delete", vmname, prop])

    # ── clone / snapshot / import ─────────────────────────────────────

    async def clone(
        self,
        vmname: str,
        new_name: str,
        options: Mapping[str, Any] | None = None,
    ) -> ExecutionResult:
        opts = dict(options or {})
        opts["name"] = new_name
        return await self.manage(["clonevm", vmname], opts)

    async def clone_snapshot(self, vmname: str, snapshot: str, new_name: str) -> ExecutionResult:
        return await self.clone(vmname, new_name, {"snapshot": snapshot})

    async def take_snapshot(self, vmname: str, snapshot: str) -> ExecutionResult:
        return await self.manage(["snapshot", vmname, "take", snapshot])

    async def restore_snapshot(self, vmname: str, snapshot: str) -> ExecutionResult:
        return await self.manage(["snapshot", vmname, "restore", snapshot])

    async def import_appliance(
        self, ovfname: str, options: Mapping[str, Any] | None = None,
    ) -> ExecutionResult:
        return await self.manage(["import", ovfname], options)

    # ── machine info ──────────────────────────────────────────────────

    async def get_info(self, vmname: str) -> VmInfo:
        std = await self.manage(["showvminfo", vmname], {"machinereadable": True})
        return parse_machine_readable(std.stdout)

    async def is_registered(self, vmname: str) -> bool:
        """True when ``showvminfo`` succeeds; any VBoxManage failure means False."""
        try:
            await self.get_info(vmname)
        except VBoxManageError as exc:
            log.debug("vbox.not_registered", vm=vmname, rc=exc.returncode)
            return False
        return True

    async def get_ip_address(
        self,
        vmname: str,
        timeout: float = -1,
        cancel: asyncio.Event | None = None,
    ) -> Optional[str]:
        """Wait for the guest additions to publish the first IPv4 address.

        *timeout* is in seconds, negative for no limit.  Returns ``None`` if
        the wait runs out or *cancel* is set first.
        """
        prop = self._cfg.vbox_ip_property

        async def fetch() -> Optional[str]:
            return await self.get_property(vmname, prop)

        return await poll_until_value(
            fetch,
            timeout=timeout,
            interval=self._cfg.vbox_ip_poll_interval_seconds,
            cancel=cancel,
            name="vbox.ip_poll",
        )

    # ── lifecycle ─────────────────────────────────────────────────────

    async def modify(self, vmname: str, options: Mapping[str, Any] | None = None) -> ExecutionResult:
        return await self.manage(["modifyvm", vmname], options)

    async def start(
        self,
        vmname: str,
        gui: bool = False,
        options: Mapping[str, Any] | None = None,
    ) -> ExecutionResult:
        opts = dict(options or {})
        opts["type"] = "gui" if gui else "headless"
        return await self.manage(["-nologo", "startvm", vmname], opts)

    async def control(self, vmname: str, action: str) -> ExecutionResult:
        if action not in CONTROL_ACTIONS:
            raise ValueError(f"unknown controlvm action: {action}")
        return await self.manage(["controlvm", vmname, action])

    async def reset(self, vmname: str) -> ExecutionResult:
        return await self.control(vmname, "reset")

    async def resume(self, vmname: str) -> ExecutionResult:
        return await self.control(vmname, "resume")

    async def stop_and_save_state(self, vmname: str) -> ExecutionResult:
        return await self.control(vmname, "savestate")

    async def power_off(self, vmname: str) -> ExecutionResult:
        return await self.control(vmname, "poweroff")

    async def acpi_power_button(self, vmname: str) -> ExecutionResult:
        return await self.control(vmname, "acpipowerbutton")

    async def acpi_sleep_button(self, vmname: str) -> ExecutionResult:
        return await self.control(vmname, "acpisleepbutton")

    # ── guest files ───────────────────────────────────────────────────

    @staticmethod
    def _guestcontrol(
        vmname: str,
        subcommand: str | None,
        username: str | None,
        password: str | None,
    ) -> list[str]:
        args = ["guestcontrol", vmname]
        if subcommand:
            args.append(subcommand)
        if username:
            args += ["--username", username]
        if password:
            args += ["--password", password]
        return args

    async def copy_to_vm(
        self,
        vmname: str,
        username: str | None,
        password: str | None,
        source: Paths,
        dest: str,
        recursive: bool = False,
    ) -> ExecutionResult:
        args = self._guestcontrol(vmname, "copyto", username, password)
        if recursive:
            args.append("--recursive")
        args += ["--target-directory", dest]
        args += _as_list(source)
        return await self.manage(args)

    async def copy_from_vm(
        self,
        vmname: str,
        username: str | None,
        password: str | None,
        source: Paths,
        dest: str,
        recursive: bool = False,
    ) -> ExecutionResult:
        args = self._guestcontrol(vmname, "copyfrom", username, password)
        if recursive:
            args.append("--recursive")
        args += ["--target-directory", dest]
        args += _as_list(source)
        return await self.manage(args)

    async def mkdir(
        self,
        vmname: str,
        username: str | None,
        password: str | None,
        path: str,
        parents: bool = False,
    ) -> ExecutionResult:
        args = self._guestcontrol(vmname, "mkdir", username, password)
        if parents:
            args.append("--parents")
        args.append(path)
        return await self.manage(args)

    async def rmdir(
        self,
        vmname: str,
        username: str | None,
        password: str | None,
        path: str,
        recursive: bool = False,
    ) -> ExecutionResult:
        args = self._guestcontrol(vmname, "rmdir", username, password)
        if recursive:
            args.append("--recursive")
        args.append(path)
        return await self.manage(args)

    async def remove_file(
        self,
        vmname: str,
        username: str | None,
        password: str | None,
        path: str,
        force: bool = False,
    ) -> ExecutionResult:
        args = self._guestcontrol(vmname, "removefile", username, password)
        if force:
            args.append("--force")
        args.append(path)
        return await self.manage(args)

    async def move(
        self,
        vmname: str,
        username: str | None,
        password: str | None,
        source: Paths,
        dest: str,
    ) -> ExecutionResult:
        args = self._guestcontrol(vmname, "mv", username, password)
        args += _as_list(source)
        args.append(dest)
        return await self.manage(args)

    mv = move

    async def stat(
        self,
        vmname: str,
        username: str | None,
        password: str | None,
        path: str,
    ) -> StatResult:
        args = self._guestcontrol(vmname, "stat", username, password)
        args.append(path)
        std = await self.manage(args)
        return parse_stat(std.stdout)

    # ── guest processes ───────────────────────────────────────────────

    async def exec_on_vm(
        self,
        vmname: str,
        username: str | None,
        password: str | None,
        cmd: str,
        params: Sequence[str] | None = None,
        wait: bool = True,
    ) -> ExecutionResult:
        """Run *cmd* through the guest's shell.

        The guest OS family is looked up on every call; a failing lookup is
        raised before the command itself is attempted.  ``wait=False`` uses
        ``guestcontrol start`` and returns as soon as the process is spawned.
        """
        info = await self.get_info(vmname)

        args = self._guestcontrol(vmname, None, username, password)
        args.append("run" if wait else "start")
        if is_windows_guest(info):
            args += ["--exe", "cmd.exe", "--", "cmd.exe", "/c"]
        else:
            args += ["--exe", "/bin/sh", "--", "/bin/sh", "-c"]
        args.append(cmd + " " + " ".join(params or []))

        return await self.manage(args)

    async def kill_on_vm(
        self,
        vmname: str,
        username: str | None,
        password: str | None,
        task_name: str,
    ) -> ExecutionResult:
        info = await self.get_info(vmname)
        if is_windows_guest(info):
            path, params = "taskkill.exe", ["/f", "/im", task_name]
        else:
            path, params = "sudo", ["killall", task_name]
        return await self.exec_on_vm(vmname, username, password, path, params)


# Singleton – import this from anywhere
vbox_manager = VBoxManager()
