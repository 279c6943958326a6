"""Notification channel implementations."""

from data_feed_monitor.alerter.channels.telegram import TelegramChannel

__all__ = [
    "TelegramChannel",
]
