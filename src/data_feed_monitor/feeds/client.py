"""GraphQL client for the data feed source."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from data_feed_monitor.feeds.models import Feed, FeedParseError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

FEEDS_QUERY = """
query feeds {
  feeds {
    feeds {
      feedFullName
      network
      heartbeat
      requests {
        timestamp
      }
    }
    total
  }
}
"""


class FeedSourceError(Exception):
    """Raised when the feed list cannot be retrieved."""


class FeedSource(Protocol):
    """Protocol for anything that can list feeds."""

    async def fetch_feeds(self) -> list[Feed]:
        """Return every feed known to the source."""
        ...


def parse_feeds(records: list[dict[str, Any]]) -> list[Feed]:
    """Convert raw feed records into Feeds, skipping malformed ones.

    Args:
        records: Feed dictionaries as returned by the source.

    Returns:
        Parsed feeds in source order.
    """
    feeds: list[Feed] = []
    for record in records:
        if not isinstance(record, dict):
            logger.warning("Skipping non-object feed record: %r", record)
            continue
        try:
            feeds.append(Feed.from_dict(record))
        except FeedParseError as e:
            logger.warning(
                "Skipping malformed feed %s: %s", record.get("feedFullName", "<unknown>"), e
            )
    return feeds


class GraphQLFeedClient:
    """Fetches feeds from a GraphQL endpoint.

    Example:
        >>> client = GraphQLFeedClient("https://feeds.example.com/graphql")
        >>> feeds = await client.fetch_feeds()
    """

    def __init__(self, url: str, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize the client.

        Args:
            url: GraphQL endpoint URL.
            timeout: HTTP request timeout in seconds.
        """
        self.url = url
        self.timeout = timeout

    async def _query(self, query: str) -> dict[str, Any]:
        """Run a GraphQL query and return its data section."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url, json={"query": query})
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as e:
            raise FeedSourceError(f"Feed source request failed: {e}") from e
        except ValueError as e:
            raise FeedSourceError(f"Feed source returned invalid JSON: {e}") from e

        if body.get("errors"):
            messages = ", ".join(str(err.get("message", err)) for err in body["errors"])
            raise FeedSourceError(f"Feed source query failed: {messages}")

        data = body.get("data")
        if not isinstance(data, dict):
            raise FeedSourceError("Feed source response has no data")
        return data

    async def fetch_feeds(self) -> list[Feed]:
        """Fetch all feeds.

        Returns:
            List of parsed Feed objects.

        Raises:
            FeedSourceError: If the request fails or the payload is unusable.
        """
        data = await self._query(FEEDS_QUERY)

        try:
            records = data["feeds"]["feeds"]
        except (KeyError, TypeError) as e:
            raise FeedSourceError("Feed source response is missing feeds") from e

        feeds = parse_feeds(records or [])
        logger.debug("Fetched %d feeds (%d records)", len(feeds), len(records or []))
        return feeds
