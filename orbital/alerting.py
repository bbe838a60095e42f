"""Alert Evaluator - threshold alerts with a per-topic cooldown.

On every check the evaluator reads the current snapshot, asks the pure
rules which alert topics cross their threshold and are armed, and fans
out an alert to the topic's subscribers. The cooldown state and the set
of already-alerted CME activity IDs are owned by this evaluator alone.

A topic's firing time is recorded only after fan-out returns. When a
topic has no subscribers nothing is sent and the topic stays armed.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable

from orbital.core.cooldown import ALERT_COOLDOWN, CooldownState, record_fired, remaining_cooldown
from orbital.core.dedup import compute_ids_to_expire, get_cme_ids
from orbital.core.formatter import format_alert
from orbital.core.rules import AlertDecision, make_alert_decisions
from orbital.core.snapshot import Snapshot
from orbital.core.subscription import Topic
from orbital.fanout import NotificationFanout
from orbital.shell.reading_cache import ReadingCache
from orbital.shell.subscription_store import SubscriptionStore


logger = logging.getLogger(__name__)


@dataclass
class FiredAlert:
    """An alert that was dispatched.

    Attributes:
        topic: Alert topic
        sent: Accepted pushes
        total: Subscribers attempted
    """
    topic: Topic
    sent: int
    total: int


@dataclass
class AlertCheckResult:
    """Result of one alert check.

    Attributes:
        fired: Alerts dispatched in this check
        suppressed: Topics whose threshold held but were cooling down
        no_subscribers: Topics whose threshold held but had no subscribers
        errors: Errors that occurred
    """
    fired: list[FiredAlert] = field(default_factory=list)
    suppressed: list[Topic] = field(default_factory=list)
    no_subscribers: list[Topic] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Returns True if no errors occurred."""
        return len(self.errors) == 0

    @property
    def summary(self) -> str:
        """Human-readable summary of the check."""
        fired = ", ".join(f"{f.topic.value} ({f.sent}/{f.total})" for f in self.fired)
        return (
            f"Fired: {fired or 'none'}; "
            f"{len(self.suppressed)} cooling, "
            f"{len(self.no_subscribers)} without subscribers"
        )


class AlertEvaluator:
    """Evaluates alert thresholds and dispatches alerts."""

    def __init__(
        self,
        cache: ReadingCache,
        store: SubscriptionStore,
        fanout: NotificationFanout,
        clock: Callable[[], datetime] | None = None,
        window: timedelta = ALERT_COOLDOWN,
    ) -> None:
        """Initialize evaluator.

        Args:
            cache: Reading cache
            store: Subscription store
            fanout: Notification fan-out
            clock: Returns the current UTC time
            window: Cooldown window per topic
        """
        self.cache = cache
        self.store = store
        self.fanout = fanout
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.window = window
        self._cooldown = CooldownState()
        self._alerted_cme_ids: set[str] = set()
        self._lock = threading.Lock()

    @property
    def cooldown(self) -> CooldownState:
        return self._cooldown

    @property
    def alerted_cme_ids(self) -> frozenset[str]:
        return frozenset(self._alerted_cme_ids)

    def _dispatch(
        self,
        decision: AlertDecision,
        snapshot: Snapshot,
        now: datetime,
        result: AlertCheckResult,
    ) -> None:
        topic = decision.topic
        subscribers = self.store.list_subscribers_by_topic(topic)
        if not subscribers:
            logger.info("Alert %s triggered but has no subscribers", topic.value)
            result.no_subscribers.append(topic)
            return

        segments = format_alert(topic, snapshot, list(decision.cme_events))

        try:
            delivery = self.fanout.deliver(subscribers, segments, topic.value)
        except Exception as e:
            logger.exception("Fan-out for %s failed", topic.value)
            result.errors.append(f"{topic.value}: {e}")
            return

        self._cooldown = record_fired(self._cooldown, topic, now)
        if topic == Topic.CME_ALERT:
            self._alerted_cme_ids |= get_cme_ids(list(decision.cme_events))

        logger.info(
            "Alert %s sent to %d/%d subscribers",
            topic.value,
            delivery.sent,
            delivery.total,
        )
        result.fired.append(FiredAlert(topic=topic, sent=delivery.sent, total=delivery.total))

    def run_tick(self, now: datetime | None = None) -> AlertCheckResult:
        """Run one alert check.

        Args:
            now: Evaluation time (defaults to the clock)

        Returns:
            AlertCheckResult
        """
        result = AlertCheckResult()

        cached = self.cache.get(force_refresh=True)
        snapshot = cached.snapshot if cached.success else cached.stale
        if snapshot is None:
            logger.error("Alert check skipped, no snapshot: %s", cached.error)
            result.errors.append(f"Snapshot unavailable: {cached.error}")
            return result
        if not cached.success:
            logger.warning("Refresh failed, evaluating last good snapshot: %s", cached.error)

        with self._lock:
            now = now or self.clock()
            decisions = make_alert_decisions(
                snapshot,
                self._cooldown,
                now,
                self._alerted_cme_ids,
                self.window,
            )

            for decision in decisions:
                if decision.should_fire:
                    self._dispatch(decision, snapshot, now, result)
                elif decision.crossed:
                    remaining = remaining_cooldown(self._cooldown, decision.topic, now, self.window)
                    logger.info(
                        "Alert %s suppressed by cooldown, %d min remaining",
                        decision.topic.value,
                        remaining.total_seconds() // 60,
                    )
                    result.suppressed.append(decision.topic)

            # Forget CME IDs that dropped out of the upstream window
            if snapshot.cmes:
                expired = compute_ids_to_expire(
                    self._alerted_cme_ids,
                    get_cme_ids(list(snapshot.cmes)),
                )
                self._alerted_cme_ids -= expired

        logger.info("Alert check complete: %s", result.summary)
        return result
