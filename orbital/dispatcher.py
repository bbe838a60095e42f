"""Scheduled Dispatcher - daily report delivery.

Runs once a minute. Only on an exact hour boundary in the configured
zone does it look up the daily-report subscribers who chose that hour,
refresh the snapshot and fan out the full report.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

from orbital.core.delivery_time import due_subscribers, hour_label, is_hour_boundary, truncate_to_minute
from orbital.core.formatter import format_report
from orbital.core.subscription import Topic
from orbital.fanout import NotificationFanout
from orbital.shell.reading_cache import ReadingCache
from orbital.shell.subscription_store import SubscriptionStore


logger = logging.getLogger(__name__)


DEFAULT_TIMEZONE = "Asia/Taipei"


@dataclass
class DispatchResult:
    """Result of one dispatcher tick.

    Attributes:
        local_time: Tick time in the configured zone, truncated to the minute
        ran: Whether the tick fell on an hour boundary
        sent: Accepted pushes
        total: Subscribers due this hour
        errors: Errors that occurred
    """
    local_time: datetime
    ran: bool = False
    sent: int = 0
    total: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.errors) == 0


class ScheduledDispatcher:
    """Delivers the daily report at each subscriber's chosen hour."""

    def __init__(
        self,
        cache: ReadingCache,
        store: SubscriptionStore,
        fanout: NotificationFanout,
        timezone_name: str = DEFAULT_TIMEZONE,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.cache = cache
        self.store = store
        self.fanout = fanout
        self.zone = ZoneInfo(timezone_name)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def run_tick(self, now: datetime | None = None) -> DispatchResult:
        """Run one dispatcher tick.

        Args:
            now: Tick time, any zone (defaults to the clock)

        Returns:
            DispatchResult; ran is False off the hour boundary
        """
        local = truncate_to_minute((now or self.clock()).astimezone(self.zone))
        result = DispatchResult(local_time=local)

        if not is_hour_boundary(local):
            return result
        result.ran = True

        subscribers = due_subscribers(
            self.store.list_subscribers_by_topic(Topic.DAILY_REPORT),
            local,
        )
        result.total = len(subscribers)
        if not subscribers:
            logger.info("No daily reports due at %s", hour_label(local))
            return result

        cached = self.cache.get(force_refresh=True)
        snapshot = cached.snapshot if cached.success else cached.stale
        if snapshot is None:
            logger.error("Daily report at %s skipped, no snapshot: %s", hour_label(local), cached.error)
            result.errors.append(f"Snapshot unavailable: {cached.error}")
            return result
        if not cached.success:
            logger.warning("Daily report at %s uses last good snapshot: %s", hour_label(local), cached.error)

        report = format_report(snapshot, local)
        delivery = self.fanout.deliver(subscribers, report, Topic.DAILY_REPORT.value)
        result.sent = delivery.sent

        delivered_at = local.astimezone(timezone.utc)
        for subscriber_id in delivery.delivered:
            self.store.mark_delivered(subscriber_id, Topic.DAILY_REPORT, delivered_at)

        logger.info(
            "Daily report %s delivered to %d/%d subscribers",
            hour_label(local),
            delivery.sent,
            delivery.total,
        )
        return result
