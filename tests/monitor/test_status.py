"""Tests for per-feed staleness computation."""

import pytest

from data_feed_monitor.feeds.models import Feed, Request
from data_feed_monitor.monitor.models import StatusRules
from data_feed_monitor.monitor.status import (
    MS_PER_DAY,
    calculate_admissible_delay,
    get_feed_ms_to_be_updated,
    get_ms_to_be_updated,
    is_fast_update_feed,
    is_feed_outdated,
    is_mainnet_network,
    select_admissible_delay,
)

NOW = 1_700_000_000_000  # ms
HOUR_MS = 3_600_000


class TestIsFeedOutdated:
    """Tests for the staleness classifier."""

    @pytest.mark.parametrize(
        ("ms_to_be_updated", "expected"),
        [(-1, True), (-10_000_000, True), (0, False), (1, False), (HOUR_MS, False)],
    )
    def test_sign_boundary(self, ms_to_be_updated: int, expected: bool) -> None:
        """Only negative values are outdated."""
        assert is_feed_outdated(ms_to_be_updated) is expected


class TestCalculateAdmissibleDelay:
    """Tests for admissible delay calculation."""

    def test_with_correction(self) -> None:
        """A correction adds heartbeat // correction."""
        assert calculate_admissible_delay(HOUR_MS, 4) == 4_500_000

    def test_floors_fraction(self) -> None:
        """The tolerance is floored."""
        assert calculate_admissible_delay(1000, 3) == 1333

    def test_without_correction(self) -> None:
        """No correction leaves the heartbeat unchanged."""
        assert calculate_admissible_delay(HOUR_MS) == HOUR_MS

    def test_zero_correction(self) -> None:
        """A zero correction is ignored."""
        assert calculate_admissible_delay(HOUR_MS, 0) == HOUR_MS


class TestGetMsToBeUpdated:
    """Tests for the delay calculator."""

    def test_fresh_feed(self) -> None:
        """A feed updated 10 minutes ago has 50 minutes left on a 1h heartbeat."""
        last = Request(timestamp=(NOW - 600_000) // 1000)
        assert get_ms_to_be_updated(NOW, HOUR_MS, last) == 3_000_000

    def test_overdue_feed(self) -> None:
        """A feed updated 2h ago is 1h overdue on a 1h heartbeat."""
        last = Request(timestamp=(NOW - 2 * HOUR_MS) // 1000)
        assert get_ms_to_be_updated(NOW, HOUR_MS, last) == -HOUR_MS

    def test_correction_extends_deadline(self) -> None:
        """The correction is added to the deadline."""
        last = Request(timestamp=(NOW - HOUR_MS) // 1000)
        assert get_ms_to_be_updated(NOW, HOUR_MS, last, correction=4) == 900_000

    def test_exact_deadline_is_not_outdated(self) -> None:
        """Reaching the deadline exactly gives zero."""
        last = Request(timestamp=(NOW - HOUR_MS) // 1000)
        ms = get_ms_to_be_updated(NOW, HOUR_MS, last)
        assert ms == 0
        assert is_feed_outdated(ms) is False

    def test_no_request_is_always_outdated(self) -> None:
        """A feed without requests gets a large negative value."""
        ms = get_ms_to_be_updated(NOW, HOUR_MS, None, days_to_consider_inactive=1)
        assert ms == -(NOW - MS_PER_DAY)
        assert is_feed_outdated(ms) is True

    @pytest.mark.parametrize("now", [0, 1000, MS_PER_DAY, 2 * MS_PER_DAY])
    def test_no_request_outdated_with_small_clock(self, now: int) -> None:
        """The sentinel stays negative even when now is within the inactive window."""
        ms = get_ms_to_be_updated(now, HOUR_MS, None, days_to_consider_inactive=2)
        assert ms == -1
        assert is_feed_outdated(ms) is True

    @pytest.mark.parametrize("heartbeat", [1, HOUR_MS, 365 * MS_PER_DAY])
    def test_no_request_ignores_heartbeat(self, heartbeat: int) -> None:
        """The sentinel does not depend on the heartbeat."""
        assert get_ms_to_be_updated(NOW, heartbeat, None) < 0


class TestKeywordMatching:
    """Tests for keyword-based classification."""

    def test_mainnet_keywords(self) -> None:
        """Network names containing a mainnet keyword are mainnet."""
        rules = StatusRules()
        assert is_mainnet_network("ethereum-mainnet", rules) is True
        assert is_mainnet_network("metis-tethys", rules) is True
        assert is_mainnet_network("ethereum-goerli", rules) is False

    def test_custom_mainnet_keywords(self) -> None:
        """Custom keywords replace the defaults."""
        rules = StatusRules(mainnet_keywords=("prod",))
        assert is_mainnet_network("conflux-prod", rules) is True
        assert is_mainnet_network("ethereum-mainnet", rules) is False

    def test_fast_update_selects_long_delay(self) -> None:
        """Fast-update feeds use the long correction."""
        rules = StatusRules(
            admissible_delay=4,
            admissible_delay_long=2,
            fast_update_keywords=("Price-ETH",),
        )
        assert is_fast_update_feed("Price-ETH/USD-6", rules) is True
        assert select_admissible_delay("Price-ETH/USD-6", rules) == 2
        assert select_admissible_delay("Price-BTC/USD-6", rules) == 4

    def test_fast_update_without_long_delay(self) -> None:
        """A fast-update feed without a long correction uses the heartbeat."""
        rules = StatusRules(admissible_delay=4, fast_update_keywords=("ETH",))
        assert select_admissible_delay("Price-ETH/USD-6", rules) is None


class TestGetFeedMsToBeUpdated:
    """Tests for the rule-aware feed wrapper."""

    def test_uses_latest_request(self) -> None:
        """Only the most recent request counts, regardless of order."""
        feed = Feed(
            feed_full_name="Price-BTC/USD-6",
            network="ethereum-mainnet",
            heartbeat=HOUR_MS,
            requests=(
                Request(timestamp=(NOW - 5 * HOUR_MS) // 1000),
                Request(timestamp=(NOW - 600_000) // 1000),
                Request(timestamp=(NOW - 3 * HOUR_MS) // 1000),
            ),
        )
        assert get_feed_ms_to_be_updated(feed, NOW, StatusRules()) == 3_000_000

    def test_applies_rules(self) -> None:
        """The selected correction and inactivity days are applied."""
        rules = StatusRules(admissible_delay=4, days_to_consider_inactive=2)
        fresh = Feed(
            feed_full_name="Price-BTC/USD-6",
            network="ethereum-mainnet",
            heartbeat=HOUR_MS,
            requests=(Request(timestamp=(NOW - HOUR_MS) // 1000),),
        )
        silent = Feed(feed_full_name="Price-X", network="n", heartbeat=HOUR_MS)

        assert get_feed_ms_to_be_updated(fresh, NOW, rules) == 900_000
        assert get_feed_ms_to_be_updated(silent, NOW, rules) == -(NOW - 2 * MS_PER_DAY)
