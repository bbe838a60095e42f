"""Scheduled delivery timing - Pure functions.

Daily reports are scheduled with hour granularity. On every tick the
dispatcher asks whether the local time sits exactly on an hour boundary
and, if so, which subscribers chose that hour. No per-subscriber timer
state is kept.
"""

from datetime import datetime

from orbital.core.subscription import Subscriber


def truncate_to_minute(now: datetime) -> datetime:
    """Drop seconds and microseconds.

    Pure function.
    """
    return now.replace(second=0, microsecond=0)


def is_hour_boundary(now: datetime) -> bool:
    """Check whether a local time falls on ':00'.

    Pure function.
    """
    return truncate_to_minute(now).minute == 0


def hour_label(now: datetime) -> str:
    """Format the hour of a local time as 'HH:00'.

    Pure function.
    """
    return f"{now.hour:02d}:00"


def due_subscribers(
    subscribers: list[Subscriber],
    now: datetime,
) -> list[Subscriber]:
    """Select subscribers whose preferred delivery hour is now.

    Pure function.

    Args:
        subscribers: Active daily-report subscribers
        now: Current local time

    Returns:
        Subscribers to deliver to; empty unless now is on an hour boundary
    """
    if not is_hour_boundary(now):
        return []

    label = hour_label(now)
    return [s for s in subscribers if s.schedule == label]
