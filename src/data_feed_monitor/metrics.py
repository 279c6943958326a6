"""Prometheus metrics for the feed monitor."""

from prometheus_client import Counter, Gauge, Histogram

CYCLES_TOTAL = Counter(
    "feed_monitor_cycles_total",
    "Total number of check cycles",
    ["result"],
)

FEEDS = Gauge(
    "feed_monitor_feeds",
    "Number of monitored feeds",
    ["network"],
)

OUTDATED_FEEDS = Gauge(
    "feed_monitor_outdated_feeds",
    "Number of outdated feeds",
    ["network"],
)

NOTIFICATIONS_TOTAL = Counter(
    "feed_monitor_notifications_total",
    "Total number of notification attempts",
    ["network_class", "result"],
)

LAST_CYCLE_TIMESTAMP = Gauge(
    "feed_monitor_last_cycle_timestamp",
    "Unix timestamp of the last successful cycle",
)

CYCLE_DURATION = Histogram(
    "feed_monitor_cycle_duration_seconds",
    "Duration of check cycles in seconds",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)
