"""Notification dispatcher routing messages to a channel per network class."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Protocol

from data_feed_monitor.monitor.models import NetworkClass

logger = logging.getLogger(__name__)


class NotificationChannel(Protocol):
    """Protocol for notification delivery channels."""

    name: str

    async def send(self, text: str) -> bool:
        """Send text to the channel. Returns True on success."""
        ...


class ChannelNotConfiguredError(Exception):
    """Raised when no channel is configured for a network class."""

    def __init__(self, network_class: NetworkClass) -> None:
        super().__init__(f"No notification channel configured for {network_class.value}")
        self.network_class = network_class


class NotificationDispatcher:
    """Sends status summaries to the channel of a network class.

    Example:
        ```python
        dispatcher = NotificationDispatcher(
            {
                NetworkClass.MAINNET: TelegramChannel(token, "@mainnet_feeds"),
                NetworkClass.TESTNET: TelegramChannel(token, "@testnet_feeds"),
            }
        )
        await dispatcher.send(NetworkClass.MAINNET, "🟢 ethereum-mainnet (3/3)")
        ```
    """

    def __init__(
        self,
        channels: Mapping[NetworkClass, NotificationChannel],
        *,
        dry_run: bool = False,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            channels: Channel per network class. Classes may be missing.
            dry_run: Log messages instead of sending them.
        """
        self.channels = dict(channels)
        self.dry_run = dry_run

    def get_channel(self, network_class: NetworkClass) -> NotificationChannel:
        """Return the channel for a network class.

        Raises:
            ChannelNotConfiguredError: If the class has no channel.
        """
        channel = self.channels.get(network_class)
        if channel is None:
            raise ChannelNotConfiguredError(network_class)
        return channel

    async def send(self, network_class: NetworkClass, text: str) -> bool:
        """Send text to the channel of a network class.

        Returns:
            True if the channel accepted the message.

        Raises:
            ChannelNotConfiguredError: If the class has no channel and
                dry-run mode is off.
        """
        if self.dry_run:
            logger.info("[dry-run] %s message:\n%s", network_class.value, text)
            return True

        channel = self.get_channel(network_class)
        return await channel.send(text)
