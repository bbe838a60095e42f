"""Chat command parsing - Pure functions.

Maps free-text chat messages to intents the chat handler acts on.
"""

import re
from dataclasses import dataclass
from enum import Enum

from orbital.core.subscription import Topic, normalize_schedule


class Intent(str, Enum):
    """What the user asked for."""
    REPORT = "report"
    AURORA = "aurora"
    SOLAR = "solar"
    SATELLITE = "satellite"
    CME_LIST = "cme-list"
    SUBSCRIPTION_MENU = "subscription-menu"
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"
    INVALID_SCHEDULE = "invalid-schedule"
    LIST_SUBSCRIPTIONS = "list-subscriptions"
    MENU = "menu"


@dataclass(frozen=True)
class Command:
    """A parsed chat command.

    Attributes:
        intent: Requested action
        topic: Topic for subscribe/unsubscribe, if given
        schedule: Delivery time for daily-report subscriptions, if given
    """
    intent: Intent
    topic: Topic | None = None
    schedule: str | None = None


_KEYWORDS: dict[str, Intent] = {
    "report": Intent.REPORT,
    "space weather": Intent.REPORT,
    "aurora": Intent.AURORA,
    "kp": Intent.AURORA,
    "solar": Intent.SOLAR,
    "solar wind": Intent.SOLAR,
    "iss": Intent.SATELLITE,
    "station": Intent.SATELLITE,
    "cme": Intent.CME_LIST,
    "subscribe": Intent.SUBSCRIPTION_MENU,
    "settings": Intent.SUBSCRIPTION_MENU,
    "my subscriptions": Intent.LIST_SUBSCRIPTIONS,
    "menu": Intent.MENU,
    "help": Intent.MENU,
}

_TOPIC_ALIASES: dict[str, Topic] = {
    "daily": Topic.DAILY_REPORT,
    "report": Topic.DAILY_REPORT,
    "aurora": Topic.GEOMAGNETIC_ALERT,
    "kp": Topic.GEOMAGNETIC_ALERT,
    "geomagnetic": Topic.GEOMAGNETIC_ALERT,
    "flare": Topic.FLARE_ALERT,
    "cme": Topic.CME_ALERT,
}

_TIME_PATTERN = re.compile(r"\b(\d{1,2}:\d{2})\b")


def _resolve_topic(word: str) -> Topic | None:
    word = word.strip().lower()
    if word in _TOPIC_ALIASES:
        return _TOPIC_ALIASES[word]
    try:
        return Topic(word)
    except ValueError:
        return None


def parse_command(text: str) -> Command:
    """Parse a chat message into a Command.

    Pure function. Unrecognized input maps to the main menu.

    Examples:
        'subscribe daily 20:00' -> SUBSCRIBE daily-report at 20:00
        'subscribe daily 20:30' -> INVALID_SCHEDULE (hour granularity only)
        'unsubscribe flare'     -> UNSUBSCRIBE flare-alert
        'unsubscribe all'       -> UNSUBSCRIBE all topics
        'unsubscribe iss'       -> SUBSCRIPTION_MENU (unknown topic)

    Args:
        text: Raw message text

    Returns:
        Parsed command
    """
    normalized = " ".join(text.strip().lower().split())
    words = normalized.split()
    verb, args = (words[0], words[1:]) if words else ("", [])

    if verb == "unsubscribe":
        if not args or args[0] == "all":
            return Command(Intent.UNSUBSCRIBE)
        topic = _resolve_topic(args[0])
        if topic is None:
            return Command(Intent.SUBSCRIPTION_MENU)
        return Command(Intent.UNSUBSCRIBE, topic=topic)

    if verb == "subscribe" and args:
        topic = _resolve_topic(args[0])
        if topic is None:
            return Command(Intent.SUBSCRIPTION_MENU)
        time_match = _TIME_PATTERN.search(normalized)
        schedule = time_match.group(1) if time_match else None
        if topic == Topic.DAILY_REPORT and schedule and normalize_schedule(schedule) is None:
            return Command(Intent.INVALID_SCHEDULE, topic=topic, schedule=schedule)
        return Command(Intent.SUBSCRIBE, topic=topic, schedule=schedule)

    return Command(_KEYWORDS.get(normalized, Intent.MENU))
