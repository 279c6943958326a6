"""Feed source layer - retrieval of the monitored feed list."""

from data_feed_monitor.feeds.client import (
    FEEDS_QUERY,
    FeedSource,
    FeedSourceError,
    GraphQLFeedClient,
    parse_feeds,
)
from data_feed_monitor.feeds.models import Feed, FeedParseError, Request

__all__ = [
    # Client
    "FEEDS_QUERY",
    "FeedSource",
    "FeedSourceError",
    "GraphQLFeedClient",
    "parse_feeds",
    # Models
    "Feed",
    "FeedParseError",
    "Request",
]
