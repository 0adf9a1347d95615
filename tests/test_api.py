"""HTTP API 路由测试。"""
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from statuswatch.core.exceptions import UnsupportedKindError
from statuswatch.models import GameServerProbeResult, HttpProbeResult, ProbeResult, ReachabilityProbeResult
from tests.conftest import make_service


async def fake_probe(definition, timeouts=None):
    if definition.kind is None:
        raise UnsupportedKindError(definition.type, service_id=definition.id)
    if definition.type == "url":
        return HttpProbeResult(online=True, status_code=200, response_time_ms=40)
    return ProbeResult(online=False, error="Connection failed")


@pytest.fixture
async def populated(registry):
    await registry.add(make_service("web", "url", url="https://example.org"))
    await registry.add(make_service("db", "tcp", port=5432))
    registry._services.append(make_service("mail", "smtp"))
    return registry


class TestServices:
    async def test_list_empty(self, client: AsyncClient):
        resp = await client.get("/api/services")
        assert resp.status_code == 200
        assert resp.json() == []

    async def test_add_and_list(self, client: AsyncClient):
        resp = await client.post("/api/services", json={
            "id": "web", "name": "Website", "type": "url", "url": "https://example.org",
        })
        assert resp.status_code == 201
        assert resp.json()["id"] == "web"

        listed = (await client.get("/api/services")).json()
        assert listed == [{"id": "web", "name": "Website", "type": "url", "url": "https://example.org"}]

    async def test_add_generates_id(self, client: AsyncClient):
        resp = await client.post("/api/services", json={"type": "ping", "host": "10.0.0.1"})
        assert resp.status_code == 201
        assert resp.json()["id"]

    async def test_add_duplicate(self, client: AsyncClient, populated):
        resp = await client.post("/api/services", json={"id": "web", "type": "url", "url": "http://x"})
        assert resp.status_code == 409
        assert resp.json()["error"] == "conflict"

    async def test_add_unsupported_kind(self, client: AsyncClient):
        resp = await client.post("/api/services", json={"id": "mail", "type": "smtp", "host": "mx"})
        assert resp.status_code == 422
        assert resp.json()["error"] == "unsupported_kind"

    async def test_remove(self, client: AsyncClient, populated):
        resp = await client.delete("/api/services/db")
        assert resp.status_code == 200
        assert [s.id for s in await populated.list()] == ["web", "mail"]

    async def test_remove_unknown(self, client: AsyncClient):
        resp = await client.delete("/api/services/ghost")
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"


class TestStatus:
    async def test_status_runs_a_cycle(self, client: AsyncClient, populated, monitor):
        with patch("statuswatch.scheduler.run_probe", new=fake_probe):
            resp = await client.get("/api/status")
        assert resp.status_code == 200
        data = resp.json()
        assert [d["service_id"] for d in data] == ["web", "db"]
        assert data[0]["status_code"] == 200
        assert data[1]["online"] is False
        assert data[1]["response_time_ms"] == 0
        assert len(monitor.history()) == 1

    async def test_history_oldest_first(self, client: AsyncClient, populated):
        with patch("statuswatch.scheduler.run_probe", new=fake_probe):
            await client.get("/api/status")
            await client.get("/api/status")
        history = (await client.get("/api/status/history")).json()
        assert len(history) == 2
        assert history[0]["timestamp"] <= history[1]["timestamp"]
        assert history[0]["checks"][0]["status_code"] == 200

    async def test_stats(self, client: AsyncClient, populated):
        with patch("statuswatch.scheduler.run_probe", new=fake_probe):
            await client.get("/api/status")
        resp = await client.get("/api/stats/web")
        assert resp.status_code == 200
        stats = resp.json()
        assert stats["total_checks"] == 1
        assert stats["uptime_percentage"] == 100.0
        assert stats["average_response_time_ms"] == 40.0

    async def test_stats_missing(self, client: AsyncClient):
        resp = await client.get("/api/stats/missing")
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "not_found"
        assert body["detail"] == "missing"

    async def test_summary(self, client: AsyncClient, populated):
        assert (await client.get("/api/status/summary")).json()["total_services"] == 0
        with patch("statuswatch.scheduler.run_probe", new=fake_probe):
            await client.get("/api/status")
        summary = (await client.get("/api/status/summary")).json()
        assert summary["total_services"] == 2
        assert summary["online_services"] == 1
        assert summary["uptime_percentage"] == 50.0

    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert resp.json()["poller_running"] is False


class TestPublicChecks:
    async def test_check_url(self, client: AsyncClient, monitor):
        probe = AsyncMock(return_value=HttpProbeResult(
            online=False, status_code=404, error="Request failed with status code 404",
        ))
        with patch("statuswatch.monitor.check_url", new=probe):
            resp = await client.get("/api/public/check-url", params={"url": "https://example.org/x"})
        assert resp.status_code == 200
        assert resp.json()["status_code"] == 404
        assert resp.json()["online"] is False
        probe.assert_awaited_once_with("https://example.org/x", timeout=monitor.timeouts.http)
        assert monitor.history() == ()

    async def test_check_url_requires_param(self, client: AsyncClient):
        resp = await client.get("/api/public/check-url")
        assert resp.status_code == 400
        assert resp.json()["message"] == "URL parameter is required"

    async def test_check_minecraft(self, client: AsyncClient):
        probe = AsyncMock(return_value=GameServerProbeResult(
            online=True, response_time_ms=8, players=1, max_players=10, version="1.21", motd="hi",
        ))
        with patch("statuswatch.monitor.check_game_server", new=probe):
            resp = await client.get("/api/public/check-minecraft", params={"host": "mc.example.org"})
        assert resp.json()["players"] == 1
        assert probe.await_args.args == ("mc.example.org", 25565)

    async def test_check_minecraft_bad_port(self, client: AsyncClient):
        resp = await client.get("/api/public/check-minecraft", params={"host": "h", "port": 0})
        assert resp.status_code == 422

    async def test_check_minecraft_requires_host(self, client: AsyncClient):
        resp = await client.get("/api/public/check-minecraft")
        assert resp.status_code == 400

    async def test_check_host(self, client: AsyncClient):
        probe = AsyncMock(return_value=ReachabilityProbeResult(online=True, response_time_ms=3, port=22))
        with patch("statuswatch.monitor.check_reachability", new=probe):
            resp = await client.get("/api/public/check-host", params={"host": "box.local"})
        assert resp.json()["port"] == 22

    async def test_check_host_requires_host(self, client: AsyncClient):
        resp = await client.get("/api/public/check-host")
        assert resp.status_code == 400


class TestErrorBodies:
    async def test_unknown_route_uses_error_body(self, client: AsyncClient):
        resp = await client.get("/api/nothing-here")
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "http_error"
        assert body["status_code"] == 404
        assert body["message"] == "Not Found"

    async def test_method_not_allowed_uses_error_body(self, client: AsyncClient):
        resp = await client.delete("/api/status")
        assert resp.status_code == 405
        assert resp.json()["error"] == "http_error"
