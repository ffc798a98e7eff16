"""
Tests for the HTTP endpoints against a real fake MCP server subprocess.
"""

import json
import time
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient

from mcp_adapter.bridge import RequestBridge
from mcp_adapter.controllers.http import create_app
from mcp_adapter.exceptions import ChannelClosedError
from mcp_adapter.process.health import HealthState

from conftest import wait_for


class TestPostMcp:
    """Tests for POST /mcp."""

    def test_ping_returns_reply_verbatim(self, client):
        """Test the request/response scenario byte for byte."""
        response = client.post("/mcp", content=b'{"jsonrpc":"2.0","id":1,"method":"ping"}')

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert response.content == b'{"jsonrpc":"2.0","id":1,"result":"ok"}'

    def test_notification_returns_204(self, record_file, client):
        """Test that notifications are forwarded and answered immediately."""
        body = b'{"jsonrpc":"2.0","method":"notifications/initialized"}'

        response = client.post("/mcp", content=body)

        assert response.status_code == 204
        assert response.content == b""
        assert wait_for(lambda: record_file.exists() and record_file.read_bytes() == body + b"\n")

    def test_null_id_is_notification(self, client, bridge):
        """Test that an explicit null id does not wait for a reply."""
        response = client.post("/mcp", content=b'{"jsonrpc":"2.0","id":null,"method":"ping"}')

        assert response.status_code == 204
        assert bridge.router.pending_count == 0

    def test_malformed_body_is_forwarded_and_awaits_reply(self, record_file, client):
        """Test that unparseable input still reaches the subprocess."""
        response = client.post("/mcp", content=b"{not json")

        assert response.status_code == 200
        assert json.loads(response.content)["error"]["code"] == -32700
        assert record_file.read_bytes() == b"{not json\n"

    def test_timeout_returns_504(self, bridge_factory):
        """Test gateway timeout when the subprocess never answers."""
        bridge = bridge_factory(request_timeout=0.3)
        client = TestClient(create_app(bridge))

        response = client.post("/mcp", content=b'{"jsonrpc":"2.0","id":5,"method":"silent"}')

        assert response.status_code == 504
        assert bridge.router.pending_count == 0

    def test_more_than_ten_concurrent_callers_all_get_replies(self, client):
        """Test that overlapping callers each wait for their reply instead of being turned away."""
        bodies = [
            json.dumps({
                "jsonrpc": "2.0", "id": i, "method": "delayed", "params": {"delay": 0.5, "tag": i},
            }).encode()
            for i in range(12)
        ]

        with ThreadPoolExecutor(max_workers=12) as pool:
            responses = list(pool.map(lambda body: client.post("/mcp", content=body), bodies))

        assert [r.status_code for r in responses] == [200] * 12
        assert [json.loads(r.content)["result"] for r in responses] == list(range(12))

    def test_other_verbs_not_allowed(self, client):
        """Test that only GET and POST are routed on /mcp."""
        assert client.put("/mcp", content=b"{}").status_code == 405


class TestConcurrentCallers:
    """Tests for id-based correlation under overlapping requests."""

    def test_out_of_order_replies_reach_their_callers(self, bridge):
        """Test that a slow reply does not get handed to a faster caller."""
        forward = RequestBridge(bridge).forward
        slow = b'{"jsonrpc":"2.0","id":"slow","method":"delayed","params":{"delay":0.5,"tag":"slow"}}'
        fast = b'{"jsonrpc":"2.0","id":"fast","method":"delayed","params":{"delay":0.05,"tag":"fast"}}'

        with ThreadPoolExecutor(max_workers=2) as pool:
            slow_reply = pool.submit(forward, slow)
            time.sleep(0.05)
            fast_reply = pool.submit(forward, fast)

            assert json.loads(fast_reply.result(timeout=5))["result"] == "fast"
            assert json.loads(slow_reply.result(timeout=5))["result"] == "slow"

    def test_many_parallel_pings(self, bridge):
        """Test that parallel writers neither interleave nor cross replies."""
        forward = RequestBridge(bridge).forward
        bodies = [
            json.dumps({"jsonrpc": "2.0", "id": i, "method": "ping"}).encode()
            for i in range(8)
        ]

        with ThreadPoolExecutor(max_workers=8) as pool:
            replies = list(pool.map(forward, bodies))

        assert [json.loads(r)["id"] for r in replies] == list(range(8))


class TestHealth:
    """Tests for GET /health."""

    def test_healthy(self, client):
        """Test 200 OK while the subprocess runs."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.text == "OK"

    def test_inactive(self, bridge_factory, fake_clock):
        """Test 503 once no activity was seen within the limit."""
        bridge = bridge_factory(health=HealthState(clock=fake_clock))
        client = TestClient(create_app(bridge))

        fake_clock.advance(61)
        response = client.get("/health")

        assert response.status_code == 503
        assert response.text == "MCP server inactive"


class TestSubprocessExit:
    """Tests for subprocess death being fatal."""

    def test_exit_releases_waiters_and_fails_health(self, bridge, client):
        """Test the unexpected-exit scenario end to end."""
        forward = RequestBridge(bridge).forward

        with ThreadPoolExecutor(max_workers=1) as pool:
            pending = pool.submit(forward, b'{"jsonrpc":"2.0","id":9,"method":"silent"}')
            assert wait_for(lambda: bridge.router.pending_count == 1)

            exit_response = client.post("/mcp", content=b'{"jsonrpc":"2.0","method":"exit"}')
            assert exit_response.status_code == 204

            with pytest.raises(ChannelClosedError):
                pending.result(timeout=5)

        assert wait_for(lambda: bridge.terminated)
        health = client.get("/health")
        assert health.status_code == 503
        assert health.text == "MCP server not running"

        after = client.post("/mcp", content=b'{"jsonrpc":"2.0","id":10,"method":"ping"}')
        assert after.status_code == 500


class TestInfo:
    """Tests for GET /info."""

    def test_reports_runtime(self, bridge_factory):
        """Test runtime fields; override values are never exposed."""
        bridge = bridge_factory(env_overrides={"API_TOKEN": "secret-value"})
        client = TestClient(create_app(bridge))
        client.post("/mcp", content=b'{"jsonrpc":"2.0","id":1,"method":"ping"}')

        response = client.get("/info")

        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "running"
        assert data["pid"] == bridge.channel.pid
        assert data["env_keys"] == ["API_TOKEN"]
        assert data["frames_read"] >= 1
        assert "secret-value" not in response.text

    def test_override_reaches_child(self, bridge_factory, monkeypatch):
        """Test that a ${NAME} override is resolved before the child starts."""
        monkeypatch.setenv("ADAPTER_SECRET", "resolved-value")
        bridge = bridge_factory(env_overrides={"CHILD_SECRET": "${ADAPTER_SECRET}"})
        client = TestClient(create_app(bridge))

        response = client.post(
            "/mcp",
            content=b'{"jsonrpc":"2.0","id":1,"method":"getenv","params":{"name":"CHILD_SECRET"}}',
        )

        assert json.loads(response.content)["result"] == "resolved-value"
