"""Check cycle orchestration.

One cycle fetches every feed, updates the tracked status of each network
and posts a summary per network class when something changed (or on the
very first cycle).
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import defaultdict
from typing import TYPE_CHECKING

from data_feed_monitor import metrics
from data_feed_monitor.monitor.models import CycleResult, NetworkClass, State, StatusRules
from data_feed_monitor.monitor.status import now_ms
from data_feed_monitor.monitor.summary import (
    create_messages,
    should_send_messages,
    split_state_by_class,
)
from data_feed_monitor.monitor.tracker import StatusTracker

if TYPE_CHECKING:
    from data_feed_monitor.alerter.dispatcher import NotificationDispatcher
    from data_feed_monitor.feeds.client import FeedSource
    from data_feed_monitor.feeds.models import Feed

logger = logging.getLogger(__name__)


def group_by_network(feeds: list[Feed]) -> dict[str, list[Feed]]:
    """Group feeds by network, preserving source order."""
    grouped: dict[str, list[Feed]] = defaultdict(list)
    for feed in feeds:
        grouped[feed.network].append(feed)
    return dict(grouped)


class DataFeedMonitor:
    """Runs check cycles over the feeds of a feed source.

    Cycles are serialised: a call made while another cycle is running
    waits for it to finish.

    Example:
        ```python
        monitor = DataFeedMonitor(client, dispatcher, rules)
        result = await monitor.check_feeds_status()
        ```
    """

    def __init__(
        self,
        feed_source: FeedSource,
        dispatcher: NotificationDispatcher,
        rules: StatusRules,
        *,
        state: State | None = None,
    ) -> None:
        """Initialize the monitor.

        Args:
            feed_source: Source of the feed list.
            dispatcher: Delivery of summaries per network class.
            rules: Staleness rules.
            state: Optional initial state.
        """
        self.feed_source = feed_source
        self.dispatcher = dispatcher
        self.rules = rules
        self.tracker = StatusTracker(rules, state)
        self._lock = asyncio.Lock()

    @property
    def state(self) -> State:
        """Return a copy of the tracked state."""
        return self.tracker.state

    async def check_feeds_status(self, now: int | None = None) -> CycleResult:
        """Run one check cycle.

        Args:
            now: Current time in milliseconds since epoch. Defaults to the
                wall clock.

        Returns:
            CycleResult describing what was sent.

        Raises:
            FeedSourceError: If the feeds cannot be fetched. The state is
                left untouched in that case.
        """
        async with self._lock:
            started = time.perf_counter()
            try:
                result = await self._run_cycle(now_ms() if now is None else now)
            except Exception:
                metrics.CYCLES_TOTAL.labels(result="error").inc()
                raise

            metrics.CYCLES_TOTAL.labels(result="success").inc()
            metrics.CYCLE_DURATION.observe(time.perf_counter() - started)
            metrics.LAST_CYCLE_TIMESTAMP.set(time.time())
            return result

    async def _run_cycle(self, now: int) -> CycleResult:
        feeds = await self.feed_source.fetch_feeds()
        monitorable = [feed for feed in feeds if feed.is_monitorable]
        feeds_by_network = group_by_network(monitorable)

        is_first_check = self.tracker.is_empty

        for network, network_feeds in feeds_by_network.items():
            self.tracker.update(network, network_feeds, now)

        state = self.tracker.state
        self._record_feed_metrics(state)

        decision = should_send_messages(state)
        result = CycleResult(
            is_first_check=is_first_check,
            decision=decision,
            feeds_checked=len(monitorable),
        )

        logger.info(
            "Checked %d feeds on %d networks (first check: %s, changed: mainnet=%s testnet=%s)",
            len(monitorable),
            len(feeds_by_network),
            is_first_check,
            decision.mainnet,
            decision.testnet,
        )

        for network_class, class_state in split_state_by_class(state).items():
            if not class_state:
                continue
            if is_first_check or decision.for_class(network_class):
                result.messages[network_class] = create_messages(
                    class_state, self.rules.days_to_request
                )

        if result.messages:
            outcomes = await asyncio.gather(
                *(self._dispatch(cls, text) for cls, text in result.messages.items())
            )
            result.delivered = dict(zip(result.messages, outcomes, strict=True))

        return result

    async def _dispatch(self, network_class: NetworkClass, text: str) -> bool:
        """Send one summary; failures are logged, never raised."""
        try:
            delivered = await self.dispatcher.send(network_class, text)
        except Exception as e:
            logger.error("Failed to send %s summary: %s", network_class.value, e)
            delivered = False
        else:
            if not delivered:
                logger.error("Failed to send %s summary", network_class.value)

        metrics.NOTIFICATIONS_TOTAL.labels(
            network_class=network_class.value,
            result="success" if delivered else "failure",
        ).inc()
        return delivered

    @staticmethod
    def _record_feed_metrics(state: State) -> None:
        for network, statuses in state.items():
            metrics.FEEDS.labels(network=network).set(len(statuses))
            metrics.OUTDATED_FEEDS.labels(network=network).set(
                sum(1 for info in statuses.values() if info.is_outdated)
            )
