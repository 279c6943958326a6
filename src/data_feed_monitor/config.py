"""Configuration management service with Pydantic Settings.

This module provides centralized configuration management for the
Data Feed Monitor, loading and validating environment variables at
startup.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from data_feed_monitor.monitor.models import (
    DEFAULT_DAYS_TO_CONSIDER_INACTIVE,
    DEFAULT_DAYS_TO_REQUEST,
    DEFAULT_MAINNET_KEYWORDS,
    StatusRules,
)


def _split_keywords(v: object) -> object:
    """Split a comma-separated string into a list of stripped keywords."""
    if isinstance(v, str):
        return [keyword.strip() for keyword in v.split(",") if keyword.strip()]
    return v


class FeedSourceSettings(BaseSettings):
    """Feed source (GraphQL) settings."""

    model_config = SettingsConfigDict(env_prefix="FEED_SOURCE_")

    url: str = Field(
        alias="FEED_SOURCE_URL",
        description="GraphQL endpoint listing the feeds",
    )
    timeout: float = Field(
        default=10.0,
        alias="FEED_SOURCE_TIMEOUT",
        description="HTTP timeout in seconds",
        gt=0,
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate feed source URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("FEED_SOURCE_URL must be an HTTP(S) endpoint")
        return v


class TelegramSettings(BaseSettings):
    """Telegram notification settings, one bot and channel per network class."""

    model_config = SettingsConfigDict(env_prefix="TELEGRAM_")

    mainnet_bot_token: SecretStr | None = Field(
        default=None,
        alias="TELEGRAM_MAINNET_BOT_TOKEN",
        description="Telegram bot token for mainnet summaries",
    )
    testnet_bot_token: SecretStr | None = Field(
        default=None,
        alias="TELEGRAM_TESTNET_BOT_TOKEN",
        description="Telegram bot token for testnet summaries",
    )
    mainnet_channel_id: str | None = Field(
        default=None,
        alias="CHANNEL_ID_MAINNET",
        description="Telegram chat ID for mainnet summaries",
    )
    testnet_channel_id: str | None = Field(
        default=None,
        alias="CHANNEL_ID_TESTNET",
        description="Telegram chat ID for testnet summaries",
    )

    @property
    def mainnet_enabled(self) -> bool:
        """Check if mainnet notifications are configured."""
        return self.mainnet_bot_token is not None and self.mainnet_channel_id is not None

    @property
    def testnet_enabled(self) -> bool:
        """Check if testnet notifications are configured."""
        return self.testnet_bot_token is not None and self.testnet_channel_id is not None


class MonitorSettings(BaseSettings):
    """Feed staleness rules."""

    model_config = SettingsConfigDict(env_prefix="")

    admissible_delay: int | None = Field(
        default=None,
        alias="ADMISSIBLE_DELAY",
        description="Heartbeat divisor added as tolerance (heartbeat + heartbeat // N)",
        ge=0,
    )
    admissible_delay_long: int | None = Field(
        default=None,
        alias="ADMISSIBLE_DELAY_LONG",
        description="Heartbeat divisor used for fast-update feeds",
        ge=0,
    )
    fast_update_keywords: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        alias="FAST_UPDATE_FEED_KEYWORDS",
        description="Comma-separated feed name fragments using ADMISSIBLE_DELAY_LONG",
    )
    mainnet_keywords: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_MAINNET_KEYWORDS),
        alias="MAINNET_KEYWORDS",
        description="Comma-separated network name fragments marking mainnet",
    )
    days_to_consider_inactive: int = Field(
        default=DEFAULT_DAYS_TO_CONSIDER_INACTIVE,
        alias="DAYS_TO_CONSIDER_FEED_INACTIVE",
        description="Days of silence assumed for feeds without requests",
        ge=0,
    )
    days_to_request: int = Field(
        default=DEFAULT_DAYS_TO_REQUEST,
        alias="DAYS_TO_REQUEST",
        description="Overdue days above which delays are shown as '> Nd'",
        ge=0,
    )

    @field_validator("admissible_delay", "admissible_delay_long", mode="before")
    @classmethod
    def empty_delay_is_unset(cls, v: object) -> object:
        """Treat an empty value as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("fast_update_keywords", "mainnet_keywords", mode="before")
    @classmethod
    def split_keywords(cls, v: object) -> object:
        """Accept comma-separated keyword strings."""
        return _split_keywords(v)

    def to_rules(self) -> StatusRules:
        """Build the staleness rules used by the status engine."""
        return StatusRules(
            admissible_delay=self.admissible_delay,
            admissible_delay_long=self.admissible_delay_long,
            fast_update_keywords=tuple(self.fast_update_keywords),
            mainnet_keywords=tuple(self.mainnet_keywords),
            days_to_consider_inactive=self.days_to_consider_inactive,
            days_to_request=self.days_to_request,
        )


class Settings(BaseSettings):
    """Main application settings.

    Loads configuration from environment variables with support for
    .env files via python-dotenv.

    Example:
        ```python
        from data_feed_monitor.config import get_settings

        settings = get_settings()
        print(settings.feed_source.url)
        print(settings.check_interval_seconds)
        ```
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Nested configuration groups
    feed_source: FeedSourceSettings = Field(default_factory=FeedSourceSettings)
    telegram: TelegramSettings = Field(default_factory=TelegramSettings)
    monitor: MonitorSettings = Field(default_factory=MonitorSettings)

    # Application settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )
    check_interval_seconds: int = Field(
        default=300,
        alias="CHECK_INTERVAL_SECONDS",
        description="Seconds between check cycles",
        ge=1,
    )
    health_port: int = Field(
        default=8080,
        alias="HEALTH_PORT",
        description="HTTP port for health check endpoints",
        ge=1,
        le=65535,
    )
    dry_run: bool = Field(
        default=False,
        alias="DRY_RUN",
        description="Log summaries instead of sending them",
    )

    def get_logging_level(self) -> int:
        """Get the numeric logging level."""
        level: int = getattr(logging, self.log_level)
        return level

    def redacted_summary(self) -> dict[str, str | dict[str, str]]:
        """Get a summary of settings with secrets redacted.

        Returns:
            Dictionary of settings with sensitive values masked.
        """
        return {
            "feed_source_url": self.feed_source.url,
            "telegram": {
                "mainnet_bot_token": "(set)" if self.telegram.mainnet_bot_token else "(not set)",
                "mainnet_channel_id": self.telegram.mainnet_channel_id or "(not set)",
                "testnet_bot_token": "(set)" if self.telegram.testnet_bot_token else "(not set)",
                "testnet_channel_id": self.telegram.testnet_channel_id or "(not set)",
            },
            "mainnet_enabled": str(self.telegram.mainnet_enabled),
            "testnet_enabled": str(self.telegram.testnet_enabled),
            "mainnet_keywords": ",".join(self.monitor.mainnet_keywords),
            "log_level": self.log_level,
            "check_interval_seconds": str(self.check_interval_seconds),
            "health_port": str(self.health_port),
            "dry_run": str(self.dry_run),
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Uses LRU cache to ensure settings are loaded only once and
    reused across the application.

    Returns:
        The Settings instance.

    Raises:
        ValidationError: If required environment variables are missing
            or have invalid values.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing when you need to reload settings with
    different environment variables.
    """
    get_settings.cache_clear()
