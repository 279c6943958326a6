"""Tests for feed source data models."""

import pytest

from data_feed_monitor.feeds.models import Feed, FeedParseError, Request


class TestRequest:
    """Tests for Request model."""

    def test_from_dict_string_timestamp(self) -> None:
        """Numeric string timestamps are converted to int."""
        assert Request.from_dict({"timestamp": "1700000000"}) == Request(timestamp=1700000000)

    def test_from_dict_int_timestamp(self) -> None:
        """Integer timestamps are accepted."""
        assert Request.from_dict({"timestamp": 42}).timestamp == 42

    def test_from_dict_invalid_timestamp(self) -> None:
        """Unparseable timestamps raise FeedParseError."""
        with pytest.raises(FeedParseError, match="timestamp"):
            Request.from_dict({"timestamp": "yesterday"})

    @pytest.mark.parametrize(("raw", "expected"), [("1700000000.5", 1700000000), (42.9, 42)])
    def test_from_dict_fractional_timestamp(self, raw: str | float, expected: int) -> None:
        """Fractional timestamps are truncated toward zero."""
        assert Request.from_dict({"timestamp": raw}).timestamp == expected

    @pytest.mark.parametrize("raw", [None, "nan", "inf", ""])
    def test_from_dict_non_numeric_timestamp(self, raw: str | None) -> None:
        """Non-numeric timestamps raise FeedParseError."""
        with pytest.raises(FeedParseError):
            Request.from_dict({"timestamp": raw})

    @pytest.mark.parametrize("data", [None, 5, "1700000000"])
    def test_from_dict_not_a_dict(self, data: object) -> None:
        """A request that is not an object raises FeedParseError."""
        with pytest.raises(FeedParseError):
            Request.from_dict(data)  # type: ignore[arg-type]

    def test_from_dict_missing_timestamp(self) -> None:
        """A missing timestamp raises FeedParseError."""
        with pytest.raises(FeedParseError):
            Request.from_dict({})


class TestFeed:
    """Tests for Feed model."""

    def test_from_dict(self) -> None:
        """Test creating Feed from a source record."""
        data = {
            "feedFullName": "ethereum-mainnet_eth/usd_6",
            "network": "ethereum-mainnet",
            "heartbeat": "3600000",
            "requests": [{"timestamp": "100"}, {"timestamp": "300"}],
        }
        feed = Feed.from_dict(data)

        assert feed.feed_full_name == "ethereum-mainnet_eth/usd_6"
        assert feed.network == "ethereum-mainnet"
        assert feed.heartbeat == 3_600_000
        assert feed.requests == (Request(100), Request(300))
        assert feed.is_monitorable is True

    @pytest.mark.parametrize("heartbeat", [None, "", "0"])
    def test_not_monitorable(self, heartbeat: str | None) -> None:
        """Feeds without a heartbeat are not monitorable."""
        feed = Feed.from_dict({"feedFullName": "a", "network": "n", "heartbeat": heartbeat})
        assert feed.is_monitorable is False

    def test_missing_requests(self) -> None:
        """Missing or null requests give an empty tuple."""
        feed = Feed.from_dict({"feedFullName": "a", "network": "n", "requests": None})
        assert feed.requests == ()
        assert feed.last_request() is None

    def test_missing_name(self) -> None:
        """A record without a name raises FeedParseError."""
        with pytest.raises(FeedParseError, match="feedFullName"):
            Feed.from_dict({"network": "n"})

    def test_invalid_heartbeat(self) -> None:
        """An unparseable heartbeat raises FeedParseError."""
        with pytest.raises(FeedParseError, match="heartbeat"):
            Feed.from_dict({"feedFullName": "a", "network": "n", "heartbeat": "1h"})

    def test_last_request(self) -> None:
        """The most recent request is picked regardless of order."""
        feed = Feed(
            feed_full_name="a",
            network="n",
            heartbeat=1,
            requests=(Request(200), Request(500), Request(100)),
        )
        assert feed.last_request() == Request(500)

    def test_frozen(self) -> None:
        """Test that Feed is immutable."""
        feed = Feed(feed_full_name="a", network="n")
        with pytest.raises(AttributeError):
            feed.network = "m"  # type: ignore[misc]
