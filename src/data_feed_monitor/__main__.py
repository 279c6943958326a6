"""CLI entry point for Data Feed Monitor.

Usage:
    python -m data_feed_monitor [options]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.config
import sys
from typing import NoReturn

from pydantic import ValidationError

from data_feed_monitor import __version__
from data_feed_monitor.alerter.channels.telegram import TelegramChannel
from data_feed_monitor.alerter.dispatcher import NotificationChannel, NotificationDispatcher
from data_feed_monitor.config import Settings, clear_settings_cache, get_settings
from data_feed_monitor.feeds.client import FeedSourceError, GraphQLFeedClient
from data_feed_monitor.health import HealthServer
from data_feed_monitor.monitor.cycle import DataFeedMonitor
from data_feed_monitor.monitor.models import NetworkClass
from data_feed_monitor.scheduler import MonitorScheduler
from data_feed_monitor.shutdown import GracefulShutdown

# Application info
APP_NAME = "Data Feed Monitor"
APP_VERSION = __version__

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130

# Health is unhealthy after this many missed intervals
STALE_INTERVALS = 3


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="data-feed-monitor",
        description="Report outdated data feeds to Telegram channels.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m data_feed_monitor                    Check feeds every interval
  python -m data_feed_monitor --once             Run a single check and exit
  python -m data_feed_monitor --config-check     Validate config and exit
  python -m data_feed_monitor --dry-run          Log summaries instead of sending
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {APP_VERSION}",
    )

    parser.add_argument(
        "--config-check",
        action="store_true",
        help="Validate configuration and exit without checking feeds",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single check cycle and exit",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level (default: from settings)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Check feeds but log summaries instead of sending them",
    )

    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        help="Override seconds between checks (default: from settings)",
    )

    parser.add_argument(
        "--health-port",
        type=int,
        default=None,
        help="Override health check port (default: from settings)",
    )

    return parser


def configure_logging(level: str) -> None:
    """Configure logging for the application.

    Args:
        level: Logging level string (DEBUG, INFO, etc.)
    """
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": (
                    "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "detailed" if level == "DEBUG" else "standard",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
        # Quieter logging for noisy libraries
        "loggers": {
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
            "aiohttp.access": {"level": "WARNING"},
        },
    }
    logging.config.dictConfig(config)


def print_banner() -> None:
    """Print the application startup banner."""
    print(f"{APP_NAME} v{APP_VERSION}")
    print()


def print_config_summary(settings: Settings, dry_run: bool) -> None:
    """Print a summary of the configuration.

    Args:
        settings: Application settings.
        dry_run: Whether dry-run mode is enabled.
    """
    summary = settings.redacted_summary()
    print("Configuration:")
    print(f"  Feed source: {summary['feed_source_url']}")
    print(f"  Check interval: {summary['check_interval_seconds']}s")
    print(f"  Mainnet keywords: {summary['mainnet_keywords']}")
    print(f"  Log Level: {summary['log_level']}")
    print(f"  Health Port: {summary['health_port']}")
    print(f"  Dry Run: {dry_run}")
    print(f"  Mainnet channel: {'enabled' if summary['mainnet_enabled'] == 'True' else 'disabled'}")
    print(f"  Testnet channel: {'enabled' if summary['testnet_enabled'] == 'True' else 'disabled'}")
    print()


def validate_config() -> Settings | None:
    """Validate and load configuration.

    Returns:
        Settings instance if valid, None if invalid.
    """
    try:
        clear_settings_cache()
        return get_settings()
    except ValidationError as e:
        print("Configuration validation failed:", file=sys.stderr)
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            msg = error["msg"]
            print(f"  {field}: {msg}", file=sys.stderr)
        return None


def run_config_check(settings: Settings) -> int:
    """Run configuration check and exit.

    Args:
        settings: Validated settings.

    Returns:
        Exit code (0 for success).
    """
    print("Configuration is valid!")
    print()
    print_config_summary(settings, dry_run=False)

    print("Checking notification channels...")
    for label, enabled in (
        ("Mainnet", settings.telegram.mainnet_enabled),
        ("Testnet", settings.telegram.testnet_enabled),
    ):
        print(f"  {label}: {'configured' if enabled else 'not configured'}")

    print()
    print("All checks passed. Ready to run.")
    return EXIT_SUCCESS


def build_dispatcher(settings: Settings, dry_run: bool) -> NotificationDispatcher:
    """Create the dispatcher with a Telegram channel per configured class.

    Unconfigured classes are left out; sending to them fails at dispatch
    time and is logged by the monitor.
    """
    telegram = settings.telegram
    channels: dict[NetworkClass, NotificationChannel] = {}

    if telegram.mainnet_bot_token and telegram.mainnet_channel_id:
        channels[NetworkClass.MAINNET] = TelegramChannel(
            telegram.mainnet_bot_token.get_secret_value(),
            telegram.mainnet_channel_id,
            name="telegram-mainnet",
        )
    if telegram.testnet_bot_token and telegram.testnet_channel_id:
        channels[NetworkClass.TESTNET] = TelegramChannel(
            telegram.testnet_bot_token.get_secret_value(),
            telegram.testnet_channel_id,
            name="telegram-testnet",
        )

    return NotificationDispatcher(channels, dry_run=dry_run)


def build_monitor(settings: Settings, dry_run: bool) -> DataFeedMonitor:
    """Wire the feed client, dispatcher and rules into a monitor."""
    client = GraphQLFeedClient(settings.feed_source.url, timeout=settings.feed_source.timeout)
    return DataFeedMonitor(
        client,
        build_dispatcher(settings, dry_run),
        settings.monitor.to_rules(),
    )


async def run_once(settings: Settings, dry_run: bool) -> int:
    """Run a single check cycle.

    Returns:
        Exit code.
    """
    logger = logging.getLogger(__name__)
    monitor = build_monitor(settings, dry_run)

    try:
        result = await monitor.check_feeds_status()
    except FeedSourceError as e:
        logger.error("Feed check failed: %s", e)
        return EXIT_ERROR

    logger.info(
        "Check complete: %d feeds, notified %s",
        result.feeds_checked,
        ", ".join(cls.value for cls in result.notified_classes) or "nobody",
    )
    return EXIT_SUCCESS


async def run_scheduler(
    settings: Settings,
    dry_run: bool,
    interval_seconds: int,
    health_port: int,
) -> int:
    """Run periodic checks until a shutdown signal arrives.

    Returns:
        Exit code.
    """
    logger = logging.getLogger(__name__)
    shutdown = GracefulShutdown()
    health = HealthServer(stale_after_seconds=interval_seconds * STALE_INTERVALS)

    try:
        async with shutdown:
            scheduler = MonitorScheduler(
                build_monitor(settings, dry_run),
                interval_seconds=interval_seconds,
                health=health,
            )

            shutdown.register_cleanup(scheduler.stop)
            shutdown.register_cleanup(health.stop_http_server)

            await health.start_http_server(port=health_port)
            await scheduler.start()

            logger.info("Monitor running. Press Ctrl+C to stop.")
            await shutdown.wait()
            logger.info("Shutdown signal received, stopping monitor...")

        return EXIT_SUCCESS
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.exception("Monitor failed: %s", e)
        return EXIT_ERROR


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:]).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = validate_config()
    if settings is None:
        sys.exit(EXIT_CONFIG_ERROR)

    configure_logging(args.log_level or settings.log_level)

    print_banner()

    if args.config_check:
        sys.exit(run_config_check(settings))

    dry_run = args.dry_run or settings.dry_run
    print_config_summary(settings, dry_run)

    if args.once:
        sys.exit(asyncio.run(run_once(settings, dry_run)))

    exit_code = asyncio.run(
        run_scheduler(
            settings,
            dry_run,
            interval_seconds=args.interval or settings.check_interval_seconds,
            health_port=args.health_port or settings.health_port,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
