"""Alerting layer - delivery of feed status summaries."""

from data_feed_monitor.alerter.channels.telegram import TelegramChannel
from data_feed_monitor.alerter.dispatcher import (
    ChannelNotConfiguredError,
    NotificationChannel,
    NotificationDispatcher,
)

__all__ = [
    "ChannelNotConfiguredError",
    "NotificationChannel",
    "NotificationDispatcher",
    "TelegramChannel",
]
