"""Status engine - staleness evaluation, tracking and summaries."""

from data_feed_monitor.monitor.cycle import DataFeedMonitor, group_by_network
from data_feed_monitor.monitor.models import (
    CycleResult,
    FeedsStatusByNetwork,
    FeedStatusInfo,
    NetworkClass,
    NotificationDecision,
    State,
    StatusColor,
    StatusRules,
)
from data_feed_monitor.monitor.status import (
    calculate_admissible_delay,
    get_feed_ms_to_be_updated,
    get_ms_to_be_updated,
    is_feed_outdated,
    is_mainnet_network,
)
from data_feed_monitor.monitor.summary import (
    create_messages,
    create_network_message,
    format_delay_string,
    should_send_messages,
    split_state_by_class,
)
from data_feed_monitor.monitor.tracker import StatusTracker, update_network_status

__all__ = [
    # Orchestration
    "DataFeedMonitor",
    "group_by_network",
    # Models
    "CycleResult",
    "FeedStatusInfo",
    "FeedsStatusByNetwork",
    "NetworkClass",
    "NotificationDecision",
    "State",
    "StatusColor",
    "StatusRules",
    # Staleness
    "calculate_admissible_delay",
    "get_feed_ms_to_be_updated",
    "get_ms_to_be_updated",
    "is_feed_outdated",
    "is_mainnet_network",
    # Summaries
    "create_messages",
    "create_network_message",
    "format_delay_string",
    "should_send_messages",
    "split_state_by_class",
    # Tracking
    "StatusTracker",
    "update_network_status",
]
