"""Network summaries and notification decisions.

Turns the tracked state into one line of text per network and decides
which network classes should be notified this cycle.
"""

from __future__ import annotations

from collections.abc import Mapping

from data_feed_monitor.monitor.models import (
    DEFAULT_DAYS_TO_REQUEST,
    FeedStatusInfo,
    NetworkClass,
    NotificationDecision,
    State,
    StatusColor,
)

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * SECONDS_PER_MINUTE
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR


def format_delay_string(
    ms_to_be_updated: int, days_to_request: int = DEFAULT_DAYS_TO_REQUEST
) -> str:
    """Format an overdue delay as a short human-readable string.

    Args:
        ms_to_be_updated: Negative milliseconds-to-update value.
        days_to_request: Overdue days above which the output is capped.

    Returns:
        One of ``"> Nd"``, ``"Dd Hh Mm"``, ``"Hh Mm"`` or ``"Mm"``.
    """
    seconds = -ms_to_be_updated // 1000

    days, seconds = divmod(seconds, SECONDS_PER_DAY)
    hours, seconds = divmod(seconds, SECONDS_PER_HOUR)
    minutes = seconds // SECONDS_PER_MINUTE

    if days > days_to_request:
        return f"> {days_to_request}d"
    if days > 0:
        return f"{days}d {hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def get_status_color(outdated_count: int, total_count: int) -> StatusColor:
    """Pick the color for a network from its outdated feed count."""
    if outdated_count == 0:
        return StatusColor.GREEN
    if outdated_count == total_count:
        return StatusColor.RED
    return StatusColor.YELLOW


def create_network_message(
    statuses: Mapping[str, FeedStatusInfo],
    network: str,
    days_to_request: int = DEFAULT_DAYS_TO_REQUEST,
) -> str:
    """Build the summary line for one network.

    The line is bold (Telegram Markdown) when any feed changed status.
    """
    infos = list(statuses.values())
    outdated = [info for info in infos if info.is_outdated]
    total = len(infos)

    color = get_status_color(len(outdated), total)

    delay = ""
    if outdated:
        largest_delay_ms = min(info.ms_to_be_updated for info in outdated)
        delay = format_delay_string(largest_delay_ms, days_to_request)

    message = f"{color.value} {network} ({total - len(outdated)}/{total}) {delay}".rstrip()

    if any(info.status_changed for info in infos):
        return f"*{message}*"
    return message


def get_network_class(statuses: Mapping[str, FeedStatusInfo]) -> NetworkClass | None:
    """Return the class of a network from its entries, or None when empty."""
    first = next(iter(statuses.values()), None)
    if first is None:
        return None
    return NetworkClass.MAINNET if first.is_mainnet else NetworkClass.TESTNET


def should_send_messages(state: State) -> NotificationDecision:
    """Decide per network class whether any feed changed status.

    Networks without entries do not contribute to either class.
    """
    mainnet = False
    testnet = False

    for statuses in state.values():
        network_class = get_network_class(statuses)
        if network_class is None:
            continue

        changed = any(info.status_changed for info in statuses.values())
        if network_class is NetworkClass.MAINNET:
            mainnet = mainnet or changed
        else:
            testnet = testnet or changed

    return NotificationDecision(mainnet=mainnet, testnet=testnet)


def split_state_by_class(state: State) -> dict[NetworkClass, State]:
    """Split the state into mainnet and testnet networks."""
    split: dict[NetworkClass, State] = {
        NetworkClass.MAINNET: {},
        NetworkClass.TESTNET: {},
    }
    for network, statuses in state.items():
        network_class = get_network_class(statuses)
        if network_class is not None:
            split[network_class][network] = statuses
    return split


def create_messages(state: State, days_to_request: int = DEFAULT_DAYS_TO_REQUEST) -> str:
    """Build the newline-joined summary for every network in ``state``."""
    return "\n".join(
        create_network_message(statuses, network, days_to_request)
        for network, statuses in state.items()
    )
