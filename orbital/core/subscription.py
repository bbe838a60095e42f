"""Subscription models and lifecycle rules - Pure functions.

A subscription is identified by (subscriber_id, topic). Records are never
hard-deleted: unsubscribing flips the status to inactive so the history of
who subscribed to what is retained.

Persistence is handled by the imperative shell (subscription store and its
repository adapters). This module only decides what the stored record
should look like after each lifecycle action.
"""

import re
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum


class Topic(str, Enum):
    """Notification topics a subscriber can follow."""
    DAILY_REPORT = "daily-report"
    GEOMAGNETIC_ALERT = "geomagnetic-alert"
    FLARE_ALERT = "flare-alert"
    CME_ALERT = "cme-alert"


class SubscriptionStatus(str, Enum):
    """Lifecycle status of a subscription record."""
    ACTIVE = "active"
    INACTIVE = "inactive"


# Topics that are triggered by threshold crossings rather than a clock
ALERT_TOPICS = (Topic.GEOMAGNETIC_ALERT, Topic.FLARE_ALERT, Topic.CME_ALERT)

# Default display names used when the caller does not supply one
DEFAULT_DISPLAY_NAMES: dict[Topic, str] = {
    Topic.DAILY_REPORT: "Daily space weather report",
    Topic.GEOMAGNETIC_ALERT: "Aurora alert (Kp >= 5)",
    Topic.FLARE_ALERT: "X-class solar flare alert",
    Topic.CME_ALERT: "Earth-directed CME alert",
}

DEFAULT_DAILY_SCHEDULE = "08:00"

_SCHEDULE_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


@dataclass(frozen=True)
class Subscription:
    """A subscriber's interest in one topic.

    Attributes:
        subscriber_id: Chat user identifier
        topic: Subscribed topic
        display_name: Human-readable subscription name
        schedule: Preferred delivery hour ('HH:00'), daily-report only
        status: Active or inactive
        subscribed_at: When the record was first created
        last_delivered_at: When the last scheduled delivery succeeded
    """
    subscriber_id: str
    topic: Topic
    display_name: str
    schedule: str | None
    status: SubscriptionStatus
    subscribed_at: datetime
    last_delivered_at: datetime | None = None

    @property
    def key(self) -> tuple[str, Topic]:
        """Return the (subscriber_id, topic) identity of this record."""
        return (self.subscriber_id, self.topic)

    @property
    def is_active(self) -> bool:
        return self.status == SubscriptionStatus.ACTIVE


@dataclass(frozen=True)
class Subscriber:
    """A resolved delivery target for a topic.

    Attributes:
        subscriber_id: Chat user identifier
        schedule: Preferred delivery hour, if any
    """
    subscriber_id: str
    schedule: str | None = None


def parse_topic(value: str | Topic) -> Topic | None:
    """Parse a topic from its string value.

    Pure function.

    Returns:
        Matching Topic or None if unknown
    """
    if isinstance(value, Topic):
        return value
    try:
        return Topic(value.strip().lower())
    except ValueError:
        return None


def normalize_schedule(schedule: str | None) -> str | None:
    """Normalize a delivery time to an hour label ('HH:00').

    Pure function. Scheduling is hour-granular, so minutes other than
    ':00' are rejected.

    Args:
        schedule: Time string such as '8:00' or '20:00'

    Returns:
        Normalized label like '08:00', or None if missing or invalid
    """
    if not schedule:
        return None

    match = _SCHEDULE_PATTERN.match(schedule.strip())
    if not match:
        return None

    hour, minute = int(match.group(1)), int(match.group(2))
    if not 0 <= hour <= 23 or minute != 0:
        return None

    return f"{hour:02d}:00"


def apply_subscribe(
    existing: Subscription | None,
    subscriber_id: str,
    topic: Topic,
    display_name: str | None,
    schedule: str | None,
    now: datetime,
) -> Subscription:
    """Compute the record to store after a subscribe action.

    Pure function. Re-subscribing updates the existing record in place
    (schedule and status) instead of creating a duplicate. Without a new
    schedule a daily report keeps its current delivery time.

    Args:
        existing: Current record for (subscriber_id, topic), if any
        subscriber_id: Chat user identifier
        topic: Topic being subscribed to
        display_name: Optional display name
        schedule: Optional preferred delivery time
        now: Current time

    Returns:
        The subscription record to upsert

    Raises:
        ValueError: If a daily-report schedule is given but not on the hour
    """
    if topic == Topic.DAILY_REPORT:
        resolved_schedule = normalize_schedule(schedule)
        if schedule and resolved_schedule is None:
            raise ValueError(f"Invalid delivery time: {schedule}")
        if resolved_schedule is None:
            current = existing.schedule if existing is not None else None
            resolved_schedule = current or DEFAULT_DAILY_SCHEDULE
    else:
        resolved_schedule = None

    if existing is not None:
        return replace(
            existing,
            schedule=resolved_schedule,
            status=SubscriptionStatus.ACTIVE,
        )

    return Subscription(
        subscriber_id=subscriber_id,
        topic=topic,
        display_name=display_name or DEFAULT_DISPLAY_NAMES[topic],
        schedule=resolved_schedule,
        status=SubscriptionStatus.ACTIVE,
        subscribed_at=now,
    )


def apply_unsubscribe(
    records: list[Subscription],
    topic: Topic | None = None,
) -> list[Subscription]:
    """Compute which records change after an unsubscribe action.

    Pure function.

    Args:
        records: All records belonging to one subscriber
        topic: Topic to deactivate, or None for every topic

    Returns:
        Records that must be stored with status inactive
    """
    return [
        replace(record, status=SubscriptionStatus.INACTIVE)
        for record in records
        if record.is_active and (topic is None or record.topic == topic)
    ]


def select_active(records: list[Subscription]) -> list[Subscription]:
    """Keep only active records.

    Pure function.
    """
    return [r for r in records if r.is_active]


def to_subscribers(records: list[Subscription]) -> list[Subscriber]:
    """Convert active records into delivery targets.

    Pure function.
    """
    return [
        Subscriber(subscriber_id=r.subscriber_id, schedule=r.schedule)
        for r in records
        if r.is_active
    ]


def count_by_topic(records: list[Subscription]) -> dict[str, int]:
    """Count active subscriptions per topic, plus a total.

    Pure function.
    """
    stats = {"total": 0}
    for topic in Topic:
        stats[topic.value] = 0

    for record in select_active(records):
        stats["total"] += 1
        stats[record.topic.value] += 1

    return stats
