"""Status tracking across check cycles."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from data_feed_monitor.monitor.models import (
    FeedsStatusByNetwork,
    FeedStatusInfo,
    State,
    StatusRules,
)
from data_feed_monitor.monitor.status import (
    get_feed_ms_to_be_updated,
    is_feed_outdated,
    is_mainnet_network,
)

if TYPE_CHECKING:
    from data_feed_monitor.feeds.models import Feed

logger = logging.getLogger(__name__)


def update_network_status(
    network: str,
    feeds: Iterable[Feed],
    previous: Mapping[str, FeedStatusInfo] | None,
    now: int,
    rules: StatusRules,
) -> FeedsStatusByNetwork:
    """Compute the statuses of a network's feeds and merge them with the previous ones.

    A feed only reports a status change when it had a previous entry whose
    outdated flag differs. Entries for feeds missing from ``feeds`` are kept.

    Args:
        network: Network the feeds belong to.
        feeds: Monitorable feeds of the network.
        previous: Statuses from the previous cycle, if any.
        now: Current time in milliseconds since epoch.
        rules: Staleness rules.

    Returns:
        A new mapping; ``previous`` is not modified.
    """
    merged: FeedsStatusByNetwork = dict(previous or {})
    is_mainnet = is_mainnet_network(network, rules)

    for feed in feeds:
        ms_to_be_updated = get_feed_ms_to_be_updated(feed, now, rules)
        is_outdated = is_feed_outdated(ms_to_be_updated)

        prior = merged.get(feed.feed_full_name)
        status_changed = prior is not None and prior.is_outdated != is_outdated

        merged[feed.feed_full_name] = FeedStatusInfo(
            is_outdated=is_outdated,
            ms_to_be_updated=ms_to_be_updated,
            status_changed=status_changed,
            is_mainnet=is_mainnet,
        )

    return merged


class StatusTracker:
    """Owns the per-network feed status state for the process lifetime.

    Example:
        ```python
        tracker = StatusTracker(rules)
        tracker.update("ethereum-mainnet", feeds, now=now_ms())
        tracker.state["ethereum-mainnet"]["Price-ETH/USD-6"].is_outdated
        ```
    """

    def __init__(self, rules: StatusRules, state: State | None = None) -> None:
        """Initialize the tracker.

        Args:
            rules: Staleness rules applied to every update.
            state: Optional initial state.
        """
        self.rules = rules
        self._state: State = {network: dict(feeds) for network, feeds in (state or {}).items()}

    @property
    def state(self) -> State:
        """Return a shallow copy of the current state."""
        return {network: dict(feeds) for network, feeds in self._state.items()}

    @property
    def is_empty(self) -> bool:
        """Return True if no network has been recorded yet."""
        return not self._state

    @property
    def networks(self) -> list[str]:
        """Return tracked network names."""
        return list(self._state)

    def get(self, network: str) -> FeedsStatusByNetwork:
        """Return a copy of the statuses recorded for a network."""
        return dict(self._state.get(network, {}))

    def merge(self, network: str, statuses: Mapping[str, FeedStatusInfo]) -> None:
        """Replace a network's statuses."""
        self._state[network] = dict(statuses)

    def update(self, network: str, feeds: Iterable[Feed], now: int) -> FeedsStatusByNetwork:
        """Evaluate a network's feeds and merge the result into the state.

        Returns:
            The merged statuses for the network.
        """
        statuses = update_network_status(
            network, feeds, self._state.get(network), now, self.rules
        )
        self.merge(network, statuses)

        changed = [name for name, info in statuses.items() if info.status_changed]
        if changed:
            logger.info("Status changed on %s: %s", network, ", ".join(sorted(changed)))
        return statuses
