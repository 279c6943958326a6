"""Data models for the feed status engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

DEFAULT_MAINNET_KEYWORDS = ("mainnet", "tethys")
DEFAULT_DAYS_TO_CONSIDER_INACTIVE = 1
DEFAULT_DAYS_TO_REQUEST = 2


class StatusColor(Enum):
    """Color glyph summarising a network's feed health."""

    GREEN = "🟢"
    YELLOW = "🟡"
    RED = "🔴"


class NetworkClass(Enum):
    """Notification class a network belongs to."""

    MAINNET = "mainnet"
    TESTNET = "testnet"


@dataclass(frozen=True)
class StatusRules:
    """Rules used to evaluate feed staleness.

    Attributes:
        admissible_delay: Heartbeat divisor for the default tolerance.
        admissible_delay_long: Heartbeat divisor for fast-update feeds.
        fast_update_keywords: Feed name fragments selecting the long divisor.
        mainnet_keywords: Network name fragments marking a mainnet network.
        days_to_consider_inactive: Days of silence assumed for feeds that
            never reported a request.
        days_to_request: Overdue days above which the delay is capped in
            messages.
    """

    admissible_delay: int | None = None
    admissible_delay_long: int | None = None
    fast_update_keywords: tuple[str, ...] = ()
    mainnet_keywords: tuple[str, ...] = DEFAULT_MAINNET_KEYWORDS
    days_to_consider_inactive: int = DEFAULT_DAYS_TO_CONSIDER_INACTIVE
    days_to_request: int = DEFAULT_DAYS_TO_REQUEST


@dataclass(frozen=True)
class FeedStatusInfo:
    """Status of a single feed for one check cycle."""

    is_outdated: bool
    ms_to_be_updated: int
    status_changed: bool
    is_mainnet: bool


# Feed name -> status
FeedsStatusByNetwork = dict[str, FeedStatusInfo]
# Network name -> feed name -> status
State = dict[str, FeedsStatusByNetwork]


@dataclass(frozen=True)
class NotificationDecision:
    """Whether each network class has a status change to report."""

    mainnet: bool = False
    testnet: bool = False

    def for_class(self, network_class: NetworkClass) -> bool:
        """Return the decision for a network class."""
        if network_class is NetworkClass.MAINNET:
            return self.mainnet
        return self.testnet


@dataclass
class CycleResult:
    """Outcome of one check cycle."""

    is_first_check: bool
    decision: NotificationDecision
    feeds_checked: int = 0
    messages: dict[NetworkClass, str] = field(default_factory=dict)
    delivered: dict[NetworkClass, bool] = field(default_factory=dict)

    @property
    def notified_classes(self) -> list[NetworkClass]:
        """Return the classes a message was attempted for."""
        return list(self.messages)
