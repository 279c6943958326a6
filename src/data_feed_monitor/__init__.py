"""Data Feed Monitor - heartbeat watchdog for published data feeds."""

__version__ = "0.1.0"
