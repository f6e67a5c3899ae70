"""Shared pytest fixtures."""

from __future__ import annotations

import os

# Force settings to use test-safe defaults before any import
os.environ.setdefault("VBOX_API_KEY", "")
os.environ.setdefault("VBOX_DEBUG", "false")
os.environ.setdefault("VBOX_MAINTENANCE_MODE", "false")
os.environ.setdefault("VBOX_IP_POLL_INTERVAL_SECONDS", "0.05")

import pytest
from httpx import ASGITransport, AsyncClient

from tests.mock_vbox import MockExecutor


@pytest.fixture
def mock_executor():
    """Provide a fresh MockExecutor."""
    return MockExecutor()


@pytest.fixture
def fast_settings():
    """Settings with a short IP polling interval."""
    from vbox_tools.config import Settings

    return Settings(vbox_ip_poll_interval_seconds=0.05, vbox_api_key="")


@pytest.fixture
def manager(mock_executor, fast_settings):
    from vbox_tools.services.vbox_manager import VBoxManager

    return VBoxManager(mock_executor, fast_settings)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def client(manager, monkeypatch):
    """Async test client with the mock executor injected."""
    monkeypatch.setenv("VBOX_API_KEY", "")

    # Patch the modules that import the singleton
    import vbox_tools.routers.guest as rg
    import vbox_tools.routers.health as rh
    import vbox_tools.routers.manage as rm
    import vbox_tools.routers.properties as rp
    import vbox_tools.routers.vms as rv
    import vbox_tools.services.vbox_manager as vm_mod

    for mod in (vm_mod, rg, rh, rm, rp, rv):
        monkeypatch.setattr(mod, "vbox_manager", manager)

    from vbox_tools.main import app as fastapi_app

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
