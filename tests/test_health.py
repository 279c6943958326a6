"""Tests for the health server."""

import time
from unittest.mock import patch

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer

from data_feed_monitor.health import (
    DEFAULT_STALE_AFTER_SECONDS,
    HealthReport,
    HealthServer,
    HealthStatus,
)


class TestHealthReport:
    """Tests for the HealthReport dataclass."""

    def test_defaults(self) -> None:
        """Test default values."""
        report = HealthReport(status=HealthStatus.HEALTHY)

        assert report.last_success_time is None
        assert report.consecutive_failures == 0
        assert report.cycles_completed == 0


class TestHealthStatus:
    """Tests for status determination."""

    def test_unhealthy_before_first_success(self) -> None:
        """No successful cycle yet is unhealthy."""
        assert HealthServer().get_health_report().status == HealthStatus.UNHEALTHY

    def test_healthy_after_success(self) -> None:
        """A recent success is healthy."""
        health = HealthServer()
        health.record_success()

        report = health.get_health_report()
        assert report.status == HealthStatus.HEALTHY
        assert report.cycles_completed == 1

    def test_degraded_after_failure(self) -> None:
        """A failure after a recent success is degraded."""
        health = HealthServer()
        health.record_success()
        health.record_failure("feed source timeout")

        report = health.get_health_report()
        assert report.status == HealthStatus.DEGRADED
        assert report.consecutive_failures == 1
        assert report.last_error == "feed source timeout"

    def test_success_resets_failures(self) -> None:
        """A success clears consecutive failures."""
        health = HealthServer()
        health.record_failure("a")
        health.record_failure("b")
        health.record_success()

        report = health.get_health_report()
        assert report.status == HealthStatus.HEALTHY
        assert report.consecutive_failures == 0

    def test_unhealthy_when_success_is_stale(self) -> None:
        """An old success is unhealthy."""
        health = HealthServer(stale_after_seconds=60)
        health.record_success()

        with patch("data_feed_monitor.health.time.time", return_value=time.time() + 120):
            assert health.get_health_report().status == HealthStatus.UNHEALTHY

    def test_default_stale_after(self) -> None:
        """Test the default staleness window."""
        health = HealthServer()
        assert health._stale_after == DEFAULT_STALE_AFTER_SECONDS


class TestHealthServerHTTPEndpoints:
    """Tests for HTTP endpoints."""

    @pytest.fixture
    def health(self) -> HealthServer:
        """Create a health server instance."""
        return HealthServer()

    @pytest.fixture
    def app(self, health: HealthServer) -> web.Application:
        """Create the aiohttp application."""
        return health._create_app()

    async def test_health_endpoint_healthy(
        self, health: HealthServer, app: web.Application
    ) -> None:
        """Test /health endpoint when healthy."""
        health.record_success()

        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/health")
            assert resp.status == 200

            data = await resp.json()
            assert data["status"] == "healthy"
            assert data["cycles_completed"] == 1

    async def test_health_endpoint_degraded(
        self, health: HealthServer, app: web.Application
    ) -> None:
        """Test /health endpoint stays up while degraded."""
        health.record_success()
        health.record_failure("boom")

        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/health")
            assert resp.status == 200
            assert (await resp.json())["status"] == "degraded"

    async def test_health_endpoint_unhealthy(self, app: web.Application) -> None:
        """Test /health endpoint before any success."""
        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/health")
            assert resp.status == 503
            assert (await resp.json())["status"] == "unhealthy"

    async def test_ready_endpoint(self, health: HealthServer, app: web.Application) -> None:
        """Test /ready flips after the first success."""
        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/ready")
            assert resp.status == 503

            health.record_success()
            resp = await client.get("/ready")
            assert resp.status == 200
            assert (await resp.json())["ready"] is True

    async def test_live_endpoint(self, app: web.Application) -> None:
        """Test /live always answers."""
        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/live")
            assert resp.status == 200

    async def test_metrics_endpoint(self, app: web.Application) -> None:
        """Test /metrics exposes Prometheus text."""
        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/metrics")
            assert resp.status == 200

            text = await resp.text()
            assert "feed_monitor_health_status" in text

    async def test_start_stop_http_server(self, health: HealthServer) -> None:
        """Test starting and stopping the HTTP server."""
        await health.start_http_server(port=18090)
        await health.start_http_server(port=18090)  # Should not raise
        await health.stop_http_server()
        await health.stop_http_server()
