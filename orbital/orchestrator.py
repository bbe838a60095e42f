"""Orchestrator - Wires Functional Core and Imperative Shell.

This module builds every component from configuration and exposes the
operations used by the HTTP surface, the Cloud Function entry points
and the local scheduler loop.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from orbital.alerting import AlertCheckResult, AlertEvaluator
from orbital.chat import ChatHandler, ChatResult
from orbital.core.commands import Intent
from orbital.core.config import Config
from orbital.core.history import HISTORY_CATEGORIES, history_window
from orbital.core.subscription import Subscriber, Subscription, Topic, parse_topic
from orbital.dispatcher import DispatchResult, ScheduledDispatcher
from orbital.fanout import NotificationFanout
from orbital.recorder import RecordingResult, SnapshotRecorder
from orbital.scheduler import PeriodicScheduler
from orbital.shell.aggregator import SnapshotAggregator
from orbital.shell.donki_client import DONKIClient
from orbital.shell.iss_client import ISSClient
from orbital.shell.line_client import LineClient, validate_signature
from orbital.shell.reading_cache import CacheResult, ReadingCache
from orbital.shell.subscription_store import Storage, StoreResult, SubscriptionStore, open_storage
from orbital.shell.swpc_client import SWPCClient


logger = logging.getLogger(__name__)


# Message kinds accepted by test_push
TEST_PUSH_KINDS: dict[str, Intent] = {
    "space-weather": Intent.REPORT,
    "aurora": Intent.AURORA,
    "solar": Intent.SOLAR,
    "iss": Intent.SATELLITE,
    "cme": Intent.CME_LIST,
}


@dataclass
class BroadcastResult:
    """Result of an administrative broadcast.

    Attributes:
        success: Whether the broadcast ran
        sent: Accepted pushes
        total: Subscribers attempted
        message: Error description when success is False
    """
    success: bool
    sent: int = 0
    total: int = 0
    message: str | None = None


class Orchestrator:
    """Coordinates space weather alerting and subscription delivery.

    This class wires together:
    - Reading cache (in front of the SWPC, DONKI and ISS clients)
    - Subscription store and history log (Firestore or fallbacks)
    - Notification fan-out (LINE push)
    - Alert evaluator, scheduled dispatcher and snapshot recorder
    - Chat webhook handler
    """

    def __init__(
        self,
        config: Config,
        cache: ReadingCache,
        store: SubscriptionStore,
        history_log: Any,
        line_client: LineClient,
        fanout: NotificationFanout,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self.cache = cache
        self.store = store
        self.history_log = history_log
        self.line_client = line_client
        self.fanout = fanout
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        self.alerts = AlertEvaluator(cache, store, fanout, clock=self.clock)
        self.dispatcher = ScheduledDispatcher(
            cache, store, fanout, timezone_name=config.timezone, clock=self.clock
        )
        self.recorder = SnapshotRecorder(cache, history_log, clock=self.clock)
        self.chat = ChatHandler(
            cache, store, line_client, timezone_name=config.timezone, clock=self.clock
        )

    @classmethod
    def from_config(
        cls,
        config: Config,
        storage: Storage | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> "Orchestrator":
        """Build all components from configuration.

        Args:
            config: Application configuration
            storage: Repository adapters (opened from config if None)
            clock: Returns the current UTC time

        Returns:
            Ready-to-use orchestrator
        """
        timeout = config.request_timeout_seconds
        aggregator = SnapshotAggregator(
            swpc_client=SWPCClient(timeout=timeout),
            donki_client=DONKIClient(api_key=config.nasa_api_key, timeout=timeout),
            iss_client=ISSClient(timeout=timeout),
            clock=clock,
        )
        cache = ReadingCache(aggregator, ttl_seconds=config.cache_ttl_seconds, clock=clock)

        storage = storage or open_storage(config.storage)
        store = SubscriptionStore(storage.subscriptions, clock=clock, degraded=storage.degraded)

        line_client = LineClient(config.line.channel_access_token, timeout=timeout)
        fanout = NotificationFanout(
            line_client,
            storage.history,
            pacing_ms=config.pacing_ms,
            clock=clock,
        )

        return cls(config, cache, store, storage.history, line_client, fanout, clock=clock)

    # Readings

    def get_snapshot(self, force_refresh: bool = False) -> CacheResult:
        return self.cache.get(force_refresh=force_refresh)

    def history(
        self,
        category: str,
        days: int = 7,
        limit: int = 100,
    ) -> list[dict[str, Any]]:
        """Recorded rows for a category, newest first.

        Raises:
            ValueError: If the category is unknown
        """
        if category not in HISTORY_CATEGORIES:
            raise ValueError(f"Unknown history category: {category}")

        since, limit = history_window(self.clock(), days, limit)
        try:
            return self.history_log.query(category, since, limit)
        except Exception as e:
            logger.error("Failed to query %s history: %s", category, str(e))
            return []

    # Subscriptions

    def subscribe(
        self,
        subscriber_id: str,
        topic: Topic,
        display_name: str | None = None,
        schedule: str | None = None,
    ) -> StoreResult:
        return self.store.subscribe(subscriber_id, topic, display_name, schedule)

    def unsubscribe(self, subscriber_id: str, topic: Topic | None = None) -> StoreResult:
        return self.store.unsubscribe(subscriber_id, topic)

    def list_subscriptions(self, subscriber_id: str) -> list[Subscription]:
        return self.store.list_active(subscriber_id)

    def list_subscribers_by_topic(self, topic: Topic) -> list[Subscriber]:
        return self.store.list_subscribers_by_topic(topic)

    def subscription_stats(self) -> dict[str, int]:
        return self.store.stats()

    # Ticks

    def run_delivery_tick(self, now: datetime | None = None) -> DispatchResult:
        return self.dispatcher.run_tick(now)

    def run_alert_tick(self, now: datetime | None = None) -> AlertCheckResult:
        return self.alerts.run_tick(now)

    def run_recording_tick(self) -> RecordingResult:
        return self.recorder.run_tick()

    def schedule_ticks(self, scheduler: PeriodicScheduler) -> PeriodicScheduler:
        """Register the three periodic ticks on a scheduler."""
        intervals = self.config.schedule
        scheduler.every_minute("scheduled-delivery", self.run_delivery_tick)
        scheduler.every("alert-check", intervals.alert_tick_seconds, self.run_alert_tick)
        scheduler.every("recording", intervals.recording_tick_seconds, self.run_recording_tick)
        return scheduler

    # Administration

    def broadcast(self, topic: str | None, message: str | None) -> BroadcastResult:
        """Push a free-form message to every active subscriber of a topic."""
        if not topic or not message:
            return BroadcastResult(success=False, message="Missing required parameters: type and message")

        parsed = parse_topic(topic)
        if parsed is None:
            return BroadcastResult(success=False, message=f"Unknown topic: {topic}")

        subscribers = self.store.list_subscribers_by_topic(parsed)
        delivery = self.fanout.deliver(subscribers, message, "broadcast")
        logger.info("Broadcast to %s: %d/%d", parsed.value, delivery.sent, delivery.total)
        return BroadcastResult(success=True, sent=delivery.sent, total=delivery.total)

    def test_push(self, subscriber_id: str | None, kind: str = "space-weather") -> BroadcastResult:
        """Push a freshly rendered message to a single user."""
        if not subscriber_id:
            return BroadcastResult(success=False, message="Missing user ID")

        cached = self.cache.get(force_refresh=True)
        snapshot = cached.snapshot if cached.success else cached.stale
        if snapshot is None:
            return BroadcastResult(success=False, total=1, message=f"Snapshot unavailable: {cached.error}")

        intent = TEST_PUSH_KINDS.get(kind, Intent.REPORT)
        text = self.chat.render_snapshot(intent, snapshot)
        delivery = self.fanout.deliver([subscriber_id], text, "test")
        if delivery.sent:
            return BroadcastResult(success=True, sent=1, total=1, message="Sent")
        return BroadcastResult(success=False, total=1, message="Push failed")

    # Chat

    def verify_signature(self, body: bytes, signature: str | None) -> bool:
        """Validate a webhook signature; always valid without a channel secret."""
        secret = self.config.line.channel_secret
        if not secret or secret.startswith("${"):
            return True
        return validate_signature(body, signature, secret)

    def handle_chat_events(self, events: list[dict[str, Any]]) -> ChatResult:
        return self.chat.handle_events(events)

    # Health

    def health(self) -> dict[str, Any]:
        return {
            "status": "degraded" if self.store.degraded else "ok",
            "timestamp": self.clock().isoformat(),
            "storage": "not configured" if self.store.degraded else self.config.storage.backend,
            "line_bot": "configured" if self.line_client.enabled else "not configured",
            "cache": "valid" if self.cache.last_fetched_at else "empty",
        }
