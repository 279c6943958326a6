"""Per-feed staleness computation.

Heartbeats and delays are integer milliseconds. Request timestamps are
seconds since epoch.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from data_feed_monitor.feeds.models import Feed, Request
    from data_feed_monitor.monitor.models import StatusRules

MS_PER_DAY = 24 * 60 * 60 * 1000


def now_ms() -> int:
    """Return the current time in milliseconds since epoch."""
    return int(time.time() * 1000)


def is_feed_outdated(ms_to_be_updated: int) -> bool:
    """Return True if the feed is past its admissible delay."""
    return ms_to_be_updated < 0


def is_mainnet_network(network: str, rules: StatusRules) -> bool:
    """Return True if the network name contains a mainnet keyword."""
    return any(keyword in network for keyword in rules.mainnet_keywords)


def is_fast_update_feed(feed_full_name: str, rules: StatusRules) -> bool:
    """Return True if the feed name contains a fast-update keyword."""
    return any(keyword in feed_full_name for keyword in rules.fast_update_keywords)


def select_admissible_delay(feed_full_name: str, rules: StatusRules) -> int | None:
    """Pick the heartbeat divisor that applies to a feed."""
    if is_fast_update_feed(feed_full_name, rules):
        return rules.admissible_delay_long
    return rules.admissible_delay


def calculate_admissible_delay(heartbeat: int, correction: int | None = None) -> int:
    """Return the heartbeat plus its tolerance.

    A correction of N adds heartbeat // N on top of the heartbeat. A missing
    or zero correction leaves the heartbeat unchanged.
    """
    if not correction:
        return heartbeat
    return heartbeat + heartbeat // correction


def get_ms_to_be_updated(
    now: int,
    heartbeat: int,
    last_request: Request | None,
    *,
    correction: int | None = None,
    days_to_consider_inactive: int = 1,
) -> int:
    """Compute signed milliseconds until a feed must update.

    Args:
        now: Current time in milliseconds since epoch.
        heartbeat: Required update interval in milliseconds.
        last_request: Most recent request, or None if the feed never updated.
        correction: Optional admissible delay divisor.
        days_to_consider_inactive: Days of silence assumed when there is no
            request at all.

    Returns:
        Milliseconds remaining; negative when the feed is overdue.
    """
    if last_request is None:
        # Clamped so a feed that never updated stays outdated for any clock.
        return min(-(now - days_to_consider_inactive * MS_PER_DAY), -1)

    admissible_delay = calculate_admissible_delay(heartbeat, correction)
    ms_since_last_update = now - last_request.timestamp * 1000
    return admissible_delay - ms_since_last_update


def get_feed_ms_to_be_updated(feed: Feed, now: int, rules: StatusRules) -> int:
    """Compute milliseconds until a feed must update under the given rules."""
    return get_ms_to_be_updated(
        now,
        feed.heartbeat or 0,
        feed.last_request(),
        correction=select_admissible_delay(feed.feed_full_name, rules),
        days_to_consider_inactive=rules.days_to_consider_inactive,
    )
