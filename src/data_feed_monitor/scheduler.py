"""Periodic execution of check cycles."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from data_feed_monitor.feeds.client import FeedSourceError

if TYPE_CHECKING:
    from data_feed_monitor.health import HealthServer
    from data_feed_monitor.monitor.cycle import DataFeedMonitor
    from data_feed_monitor.monitor.models import CycleResult

logger = logging.getLogger(__name__)

DEFAULT_CHECK_INTERVAL_SECONDS = 300.0


class MonitorScheduler:
    """Run a DataFeedMonitor cycle now and then once per interval.

    A failed cycle is logged and reported to the health server; the
    next cycle runs on schedule.
    """

    def __init__(
        self,
        monitor: DataFeedMonitor,
        *,
        interval_seconds: float = DEFAULT_CHECK_INTERVAL_SECONDS,
        health: HealthServer | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            monitor: Monitor whose cycles are scheduled.
            interval_seconds: Seconds between the start of two cycles.
            health: Optional health server receiving cycle outcomes.
        """
        self.monitor = monitor
        self.interval_seconds = interval_seconds
        self.health = health

        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()

    @property
    def is_running(self) -> bool:
        """Return True while the scheduling loop is active."""
        return self._task is not None and not self._task.done()

    async def run_once(self) -> CycleResult | None:
        """Run a single cycle, logging and recording any failure.

        Returns:
            The cycle result, or None if the cycle failed.
        """
        try:
            result = await self.monitor.check_feeds_status()
        except FeedSourceError as e:
            logger.error("Feed check failed: %s", e)
            if self.health:
                self.health.record_failure(str(e))
            return None
        except Exception as e:
            logger.exception("Unexpected error during feed check: %s", e)
            if self.health:
                self.health.record_failure(str(e))
            return None

        if self.health:
            self.health.record_success()
        return result

    async def _loop(self) -> None:
        while not self._stop_event.is_set():
            await self.run_once()
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)

    async def start(self) -> None:
        """Start the scheduling loop in the background."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._task = asyncio.create_task(self._loop())
        logger.info("Scheduler started (interval %.0fs)", self.interval_seconds)

    async def stop(self) -> None:
        """Stop the loop, letting a running cycle finish."""
        if self._task is None:
            return

        self._stop_event.set()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Scheduler stopped")
