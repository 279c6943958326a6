"""Health tracking with HTTP endpoints.

This module records the outcome of check cycles and exposes health,
readiness, liveness and Prometheus metrics endpoints.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from aiohttp import web
from prometheus_client import Gauge, generate_latest

logger = logging.getLogger(__name__)

DEFAULT_STALE_AFTER_SECONDS = 900
DEFAULT_HTTP_PORT = 8080


class HealthStatus(Enum):
    """Overall health status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthReport:
    """Snapshot of the monitor's health."""

    status: HealthStatus
    last_success_time: float | None = None
    last_failure_time: float | None = None
    last_error: str | None = None
    consecutive_failures: int = 0
    cycles_completed: int = 0
    uptime_seconds: float = 0.0
    timestamp: float = field(default_factory=time.time)


HEALTH_STATUS = Gauge(
    "feed_monitor_health_status",
    "Overall health status (1=healthy, 0.5=degraded, 0=unhealthy)",
)


class HealthServer:
    """Track check cycle outcomes and serve health endpoints.

    The monitor is healthy while the last cycle succeeded and is recent,
    degraded while cycles fail but the last success is still recent, and
    unhealthy before the first success or once the last success is older
    than ``stale_after_seconds``.

    Example:
        ```python
        health = HealthServer(stale_after_seconds=900)
        await health.start_http_server(port=8080)

        health.record_success()
        health.record_failure("feed source timeout")

        # HTTP endpoints: /health, /ready, /live and /metrics
        ```
    """

    def __init__(self, *, stale_after_seconds: float = DEFAULT_STALE_AFTER_SECONDS) -> None:
        """Initialize the health server.

        Args:
            stale_after_seconds: Seconds after the last successful cycle
                before the monitor is reported unhealthy.
        """
        self._stale_after = stale_after_seconds
        self._start_time = time.time()

        self._last_success_time: float | None = None
        self._last_failure_time: float | None = None
        self._last_error: str | None = None
        self._consecutive_failures = 0
        self._cycles_completed = 0

        # HTTP server
        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None

    def record_success(self) -> None:
        """Record a successful check cycle."""
        self._last_success_time = time.time()
        self._consecutive_failures = 0
        self._cycles_completed += 1

    def record_failure(self, error: str | None = None) -> None:
        """Record a failed check cycle.

        Args:
            error: Optional error description.
        """
        self._last_failure_time = time.time()
        self._last_error = error
        self._consecutive_failures += 1
        logger.debug("Cycle failure recorded (%d in a row)", self._consecutive_failures)

    def _determine_status(self, now: float) -> HealthStatus:
        if self._last_success_time is None:
            return HealthStatus.UNHEALTHY
        if now - self._last_success_time > self._stale_after:
            return HealthStatus.UNHEALTHY
        if self._consecutive_failures:
            return HealthStatus.DEGRADED
        return HealthStatus.HEALTHY

    def get_health_report(self) -> HealthReport:
        """Generate a health report.

        Returns:
            HealthReport with the current status.
        """
        now = time.time()
        status = self._determine_status(now)
        HEALTH_STATUS.set(
            1.0 if status == HealthStatus.HEALTHY
            else 0.5 if status == HealthStatus.DEGRADED
            else 0.0
        )

        return HealthReport(
            status=status,
            last_success_time=self._last_success_time,
            last_failure_time=self._last_failure_time,
            last_error=self._last_error,
            consecutive_failures=self._consecutive_failures,
            cycles_completed=self._cycles_completed,
            uptime_seconds=now - self._start_time,
            timestamp=now,
        )

    # HTTP Server methods

    async def _handle_health(self, _request: web.Request) -> web.Response:
        """Handle /health endpoint."""
        report = self.get_health_report()

        status_code = 503 if report.status == HealthStatus.UNHEALTHY else 200

        body: dict[str, Any] = {
            "status": report.status.value,
            "uptime_seconds": report.uptime_seconds,
            "cycles_completed": report.cycles_completed,
            "consecutive_failures": report.consecutive_failures,
            "last_success_time": report.last_success_time,
            "last_failure_time": report.last_failure_time,
            "last_error": report.last_error,
        }
        return web.json_response(body, status=status_code)

    async def _handle_metrics(self, _request: web.Request) -> web.Response:
        """Handle /metrics endpoint (Prometheus format)."""
        self.get_health_report()

        return web.Response(
            body=generate_latest(),
            content_type="text/plain",
            charset="utf-8",
        )

    async def _handle_ready(self, _request: web.Request) -> web.Response:
        """Handle /ready endpoint; ready once a cycle has succeeded."""
        if self._last_success_time is None:
            return web.json_response(
                {"ready": False, "reason": "no successful cycle yet"},
                status=503,
            )
        return web.json_response({"ready": True}, status=200)

    async def _handle_live(self, _request: web.Request) -> web.Response:
        """Handle /live endpoint."""
        return web.json_response({"live": True}, status=200)

    def _create_app(self) -> web.Application:
        """Create the aiohttp application."""
        app = web.Application()
        app.router.add_get("/health", self._handle_health)
        app.router.add_get("/metrics", self._handle_metrics)
        app.router.add_get("/ready", self._handle_ready)
        app.router.add_get("/live", self._handle_live)
        return app

    async def start_http_server(self, port: int = DEFAULT_HTTP_PORT) -> None:
        """Start the HTTP server for health and metrics endpoints.

        Args:
            port: Port to listen on.
        """
        if self._runner:
            logger.warning("HTTP server already running")
            return

        self._app = self._create_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        site = web.TCPSite(self._runner, "0.0.0.0", port)
        await site.start()

        logger.info("Health HTTP server started on port %d", port)

    async def stop_http_server(self) -> None:
        """Stop the HTTP server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._app = None
            logger.info("Health HTTP server stopped")
