"""Telegram Bot API channel implementation."""

from __future__ import annotations

import asyncio
import logging

import httpx

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org/bot{token}/sendMessage"
MAX_RETRY_AFTER_SECONDS = 30.0


class TelegramChannel:
    """Telegram Bot API channel for posting status summaries.

    Messages are sent with legacy Markdown parsing so that ``*text*``
    renders bold. A 429 response is retried once after the advertised
    ``retry_after``; any other failure is reported to the caller.
    """

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        *,
        name: str = "telegram",
        timeout: float = 10.0,
        parse_mode: str = "Markdown",
    ) -> None:
        """Initialize Telegram channel.

        Args:
            bot_token: Telegram bot token.
            chat_id: Target chat/channel ID.
            name: Channel name used in logs.
            timeout: HTTP request timeout in seconds.
            parse_mode: Telegram parse mode for message text.
        """
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.name = name
        self.timeout = timeout
        self.parse_mode = parse_mode

        self._api_url = TELEGRAM_API_BASE.format(token=bot_token)

    async def send(self, text: str) -> bool:
        """Send a message to the Telegram chat.

        Args:
            text: Message text.

        Returns:
            True if delivery succeeded, False otherwise.
        """
        payload = {
            "chat_id": self.chat_id,
            "text": text,
            "parse_mode": self.parse_mode,
            "disable_web_page_preview": True,
        }

        for attempt in range(2):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self._api_url, json=payload)
                    result = response.json()
            except httpx.TimeoutException:
                logger.error("Telegram API timeout on %s", self.name)
                return False
            except httpx.HTTPError as e:
                logger.error("Telegram API error on %s: %s", self.name, e)
                return False
            except ValueError:
                logger.error("Telegram API returned invalid JSON on %s", self.name)
                return False

            if result.get("ok"):
                logger.info("Telegram message delivered to %s", self.name)
                return True

            error_code = result.get("error_code", 0)
            description = result.get("description", "Unknown error")

            if error_code == 429 and attempt == 0:
                retry_after = result.get("parameters", {}).get("retry_after", 1)
                retry_after = min(float(retry_after), MAX_RETRY_AFTER_SECONDS)
                logger.warning(
                    "Telegram rate limited on %s, retry after %.1fs", self.name, retry_after
                )
                await asyncio.sleep(retry_after)
                continue

            logger.error("Telegram API error on %s: %s - %s", self.name, error_code, description)
            return False

        return False
