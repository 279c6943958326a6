"""Data models for the feed source."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any


class FeedParseError(ValueError):
    """Raised when a feed record cannot be converted into a Feed."""


def _parse_int(value: Any, field_name: str) -> int:
    """Convert a numeric string (or number) into an int, truncating fractions."""
    try:
        return int(Decimal(str(value).strip()))
    except (TypeError, ValueError, ArithmeticError) as e:
        raise FeedParseError(f"Invalid {field_name}: {value!r}") from e


@dataclass(frozen=True)
class Request:
    """A single observed update of a feed."""

    timestamp: int  # seconds since epoch

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Request":
        """Create a Request from a dictionary."""
        if not isinstance(data, dict):
            raise FeedParseError(f"Invalid request: {data!r}")
        if "timestamp" not in data:
            raise FeedParseError("Request is missing timestamp")
        return cls(timestamp=_parse_int(data["timestamp"], "timestamp"))


@dataclass(frozen=True)
class Feed:
    """A named data feed expected to update once per heartbeat.

    Attributes:
        feed_full_name: Unique feed identifier.
        network: Network the feed is published on (opaque identifier).
        heartbeat: Required update interval in milliseconds, None if unset.
        requests: Observed update events, in source order.
    """

    feed_full_name: str
    network: str
    heartbeat: int | None = None
    requests: tuple[Request, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Feed":
        """Create a Feed from a feed source record.

        Raises:
            FeedParseError: If a required field is missing or a numeric
                field cannot be parsed.
        """
        try:
            feed_full_name = str(data["feedFullName"])
            network = str(data["network"])
        except KeyError as e:
            raise FeedParseError(f"Feed is missing {e.args[0]}") from e

        raw_heartbeat = data.get("heartbeat")
        heartbeat = None
        if raw_heartbeat not in (None, ""):
            heartbeat = _parse_int(raw_heartbeat, "heartbeat")

        raw_requests = data.get("requests") or []
        if not isinstance(raw_requests, list):
            raise FeedParseError(f"Invalid requests: {raw_requests!r}")
        requests = tuple(Request.from_dict(r) for r in raw_requests)

        return cls(
            feed_full_name=feed_full_name,
            network=network,
            heartbeat=heartbeat,
            requests=requests,
        )

    @property
    def is_monitorable(self) -> bool:
        """Return True if the feed declares a heartbeat."""
        return bool(self.heartbeat)

    def last_request(self) -> Request | None:
        """Return the most recent request by timestamp, or None."""
        if not self.requests:
            return None
        return max(self.requests, key=lambda r: r.timestamp)
