"""Graceful shutdown handling for the monitor process.

Traps SIGTERM and SIGINT so the scheduler can finish its current cycle
and the health server can close before the process exits.

Usage:
    ```python
    async with GracefulShutdown() as shutdown:
        shutdown.register_cleanup(scheduler.stop)
        await scheduler.start()
        await shutdown.wait()
    ```
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from collections.abc import Callable
from contextlib import suppress
from types import FrameType
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_TIMEOUT = 30.0

SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT)


class GracefulShutdown:
    """Signal-driven shutdown coordination.

    The first signal sets an event the main coroutine awaits; a second
    signal exits immediately. Cleanup callbacks (sync or async) run on
    context exit, each bounded by the shutdown timeout.
    """

    def __init__(self, timeout: float = DEFAULT_SHUTDOWN_TIMEOUT) -> None:
        """Initialize the shutdown handler.

        Args:
            timeout: Maximum seconds to wait for each cleanup callback.
        """
        self._timeout = timeout
        self._event: asyncio.Event | None = None
        self._requested = False
        self._cleanup_callbacks: list[Callable[[], Any]] = []
        self._original_handlers: dict[signal.Signals, Any] = {}
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def timeout(self) -> float:
        """Cleanup timeout in seconds."""
        return self._timeout

    @property
    def is_shutdown_requested(self) -> bool:
        """Check if shutdown has been requested."""
        return self._requested

    def register_cleanup(self, callback: Callable[[], Any]) -> None:
        """Register a callback to run on shutdown."""
        self._cleanup_callbacks.append(callback)

    def request_shutdown(self) -> None:
        """Request shutdown from application code."""
        if self._requested:
            return
        self._requested = True
        logger.info("Shutdown requested")
        if self._event:
            self._event.set()

    async def wait(self) -> None:
        """Block until shutdown is requested."""
        if self._event is None:
            self._event = asyncio.Event()
            if self._requested:
                self._event.set()
        await self._event.wait()

    def install_signal_handlers(self) -> None:
        """Trap shutdown signals on the running loop."""
        self._loop = asyncio.get_running_loop()
        if self._event is None:
            self._event = asyncio.Event()

        for sig in SHUTDOWN_SIGNALS:
            try:
                if sys.platform == "win32":
                    self._original_handlers[sig] = signal.signal(sig, self._handle_signal_sync)
                else:
                    self._loop.add_signal_handler(sig, self._handle_signal, sig)
            except (ValueError, OSError, NotImplementedError) as e:
                logger.warning("Could not install handler for %s: %s", sig.name, e)

    def remove_signal_handlers(self) -> None:
        """Restore the default signal handling."""
        if sys.platform == "win32":
            for sig, original in self._original_handlers.items():
                with suppress(ValueError, OSError):
                    signal.signal(sig, original)
            self._original_handlers.clear()
        elif self._loop is not None:
            for sig in SHUTDOWN_SIGNALS:
                with suppress(ValueError, OSError, NotImplementedError):
                    self._loop.remove_signal_handler(sig)

    def _handle_signal(self, sig: signal.Signals) -> None:
        if self._requested:
            logger.warning("Received %s again - forcing exit!", sig.name)
            sys.exit(128 + sig.value)
        logger.info("Received %s - stopping monitor...", sig.name)
        self.request_shutdown()

    def _handle_signal_sync(self, sig: int, _frame: FrameType | None) -> None:
        self._handle_signal(signal.Signals(sig))

    async def run_cleanup_callbacks(self) -> None:
        """Run all registered cleanup callbacks in registration order."""
        for callback in self._cleanup_callbacks:
            try:
                result = callback()
                if asyncio.iscoroutine(result):
                    await asyncio.wait_for(result, timeout=self._timeout)
            except TimeoutError:
                logger.error("Cleanup callback timed out after %.1fs", self._timeout)
            except Exception as e:
                logger.error("Cleanup callback failed: %s", e)

    async def __aenter__(self) -> GracefulShutdown:
        self.install_signal_handlers()
        return self

    async def __aexit__(self, *_args: Any) -> None:
        self.remove_signal_handlers()
        await self.run_cleanup_callbacks()
