"""
Pytest fixtures for MCP Adapter tests.
"""

import sys
import time
from pathlib import Path
from typing import Generator

import pytest

# Add project root to path for mcp_adapter imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from mcp_adapter.bridge import Bridge  # noqa: E402
from mcp_adapter.configs.settings import Settings  # noqa: E402

FAKE_SERVER = Path(__file__).parent / "fake_mcp_server.py"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


def make_settings(**overrides) -> Settings:
    """Settings that run the fake MCP server with short test timeouts."""
    values = {
        "command": sys.executable,
        "args": ["-u", str(FAKE_SERVER)],
        "request_timeout": 5.0,
        "handshake_timeout": 5.0,
        "keepalive_interval": 0.05,
        "activity_interval": 0.05,
        "shutdown_timeout": 2.0,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def record_file(tmp_path: Path, monkeypatch) -> Path:
    """File the fake server appends every received line to."""
    path = tmp_path / "received.log"
    monkeypatch.setenv("FAKE_RECORD_FILE", str(path))
    return path


@pytest.fixture
def bridge_factory() -> Generator:
    """Build and start Bridges around the fake server; stops them afterwards."""
    bridges = []

    def factory(health=None, **overrides) -> Bridge:
        bridge = Bridge(make_settings(**overrides), health=health)
        bridge.start()
        bridges.append(bridge)
        return bridge

    yield factory

    for bridge in bridges:
        bridge.stop()


@pytest.fixture
def bridge(bridge_factory) -> Bridge:
    """A running Bridge around the fake MCP server."""
    return bridge_factory()


@pytest.fixture
def client(bridge):
    """HTTP test client bound to the running bridge."""
    from fastapi.testclient import TestClient

    from mcp_adapter.controllers.http import create_app

    return TestClient(create_app(bridge))


def wait_for(predicate, timeout: float = 5.0) -> bool:
    """Poll until predicate() is true or the timeout passes."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return False
