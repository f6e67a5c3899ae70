"""Application settings loaded from environment variables."""

from __future__ import annotations

import sys

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is driven by environment variables."""

    # VBoxManage executable
    vbox_manage_path: str = ""
    vbox_install_path: str = ""
    vbox_msi_install_path: str = ""

    # Echo every assembled command line before running it
    vbox_debug: bool = False

    # Guest IP discovery
    vbox_ip_property: str = "/VirtualBox/GuestInfo/Net/0/V4/IP"
    vbox_ip_poll_interval_seconds: float = 1.0

    # API key
    vbox_api_key: str = ""

    # Maintenance mode widens the /manage allowlist
    vbox_maintenance_mode: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def resolve_binary(self) -> str:
        """Return the VBoxManage invocation prefix for this host."""
        if self.vbox_manage_path:
            return self.vbox_manage_path
        if sys.platform.startswith("win"):
            # The installer does not always put VBoxManage.exe on PATH
            install_dir = self.vbox_install_path or self.vbox_msi_install_path
            if install_dir:
                return '"' + install_dir.rstrip("\\") + '\\VBoxManage.exe"'
            return "VBoxManage.exe"
        return "vboxmanage"


# Singleton – import this from anywhere
settings = Settings()
