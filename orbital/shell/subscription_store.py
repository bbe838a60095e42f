"""Subscription Store - Imperative Shell.

Durable (subscriber_id, topic) -> subscription mapping with upsert and
soft-delete semantics. The record to write is always computed by the
pure core (apply_subscribe / apply_unsubscribe); the repository adapter
only stores it.

Repository errors never propagate: writes return a failed StoreResult
and reads return empty lists.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from orbital.core.config import StorageConfig
from orbital.core.subscription import (
    Subscriber,
    Subscription,
    Topic,
    apply_subscribe,
    apply_unsubscribe,
    count_by_topic,
    select_active,
    to_subscribers,
)
from orbital.shell.firestore_client import (
    FirestoreConfig,
    FirestoreHistoryLog,
    FirestoreSubscriptionRepository,
    make_client,
)
from orbital.shell.memory_store import (
    MemoryHistoryLog,
    MemorySubscriptionRepository,
    NullHistoryLog,
    NullSubscriptionRepository,
)


logger = logging.getLogger(__name__)


@dataclass
class StoreResult:
    """Result of a subscription write.

    Attributes:
        success: Whether the write was stored
        message: Human-readable outcome
        subscriptions: Records written by the operation
    """
    success: bool
    message: str = ""
    subscriptions: list[Subscription] = field(default_factory=list)


@dataclass
class Storage:
    """Repository adapters selected for a deployment.

    Attributes:
        subscriptions: Subscription repository
        history: History and delivery log
        degraded: True when running without durable persistence
    """
    subscriptions: Any
    history: Any
    degraded: bool = False


def open_storage(config: StorageConfig) -> Storage:
    """Select and initialise repository adapters.

    Falls back to the null adapters when Firestore cannot be initialised,
    so the rest of the system keeps running without persistence.

    Args:
        config: Storage configuration

    Returns:
        Storage with the chosen adapters
    """
    if config.backend == "memory":
        logger.warning("Using in-memory storage; subscriptions are lost on restart")
        return Storage(MemorySubscriptionRepository(), MemoryHistoryLog())

    if config.backend == "firestore":
        fs_config = FirestoreConfig(
            project_id=config.project_id,
            database=config.database,
            subscriptions_collection=config.subscriptions_collection,
            deliveries_collection=config.deliveries_collection,
            history_prefix=config.history_prefix,
        )
        try:
            client = make_client(fs_config)
        except Exception as e:
            logger.warning("Firestore unavailable, running without persistence: %s", str(e))
        else:
            return Storage(
                FirestoreSubscriptionRepository(fs_config, client),
                FirestoreHistoryLog(fs_config, client),
            )
    else:
        logger.warning("Persistence disabled (backend=%s)", config.backend)

    return Storage(NullSubscriptionRepository(), NullHistoryLog(), degraded=True)


class SubscriptionStore:
    """Subscription lifecycle on top of a repository adapter."""

    def __init__(
        self,
        repository: Any,
        clock: Callable[[], datetime] | None = None,
        degraded: bool = False,
    ) -> None:
        """Initialize store.

        Args:
            repository: Subscription repository adapter
            clock: Returns the current UTC time
            degraded: Whether the repository is a null stand-in
        """
        self.repository = repository
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.degraded = degraded

    def subscribe(
        self,
        subscriber_id: str,
        topic: Topic,
        display_name: str | None = None,
        schedule: str | None = None,
    ) -> StoreResult:
        """Create or reactivate a subscription.

        Subscribing again to the same topic updates the existing record
        (schedule and status) rather than adding a new one.

        Args:
            subscriber_id: Chat user identifier
            topic: Topic to follow
            display_name: Optional display name
            schedule: Preferred delivery time for daily reports

        Returns:
            StoreResult with the stored record
        """
        try:
            existing = self.repository.find_one(subscriber_id, topic)
            record = apply_subscribe(
                existing,
                subscriber_id,
                topic,
                display_name,
                schedule,
                self.clock(),
            )
            self.repository.save(record)
        except ValueError as e:
            logger.warning("Rejected subscription for %s: %s", subscriber_id, str(e))
            return StoreResult(success=False, message=str(e))
        except Exception as e:
            logger.error("Failed to subscribe %s to %s: %s", subscriber_id, topic.value, str(e))
            return StoreResult(success=False, message=f"Subscription failed: {e}")

        action = "updated" if existing is not None else "created"
        logger.info("Subscription %s: %s -> %s", action, subscriber_id, topic.value)
        return StoreResult(
            success=True,
            message=f"Subscription {action}",
            subscriptions=[record],
        )

    def unsubscribe(self, subscriber_id: str, topic: Topic | None = None) -> StoreResult:
        """Deactivate one topic, or every topic when topic is None.

        Records are kept with status inactive.
        """
        try:
            records = self.repository.find_by_subscriber(subscriber_id)
            changed = apply_unsubscribe(records, topic)
            for record in changed:
                self.repository.save(record)
        except Exception as e:
            logger.error("Failed to unsubscribe %s: %s", subscriber_id, str(e))
            return StoreResult(success=False, message=f"Unsubscribe failed: {e}")

        logger.info(
            "Deactivated %d subscription(s) for %s",
            len(changed),
            subscriber_id,
        )
        return StoreResult(
            success=True,
            message=f"Deactivated {len(changed)} subscription(s)",
            subscriptions=changed,
        )

    def list_active(self, subscriber_id: str) -> list[Subscription]:
        """Active subscriptions of one subscriber."""
        try:
            return select_active(self.repository.find_by_subscriber(subscriber_id))
        except Exception as e:
            logger.error("Failed to list subscriptions for %s: %s", subscriber_id, str(e))
            return []

    def list_subscribers_by_topic(self, topic: Topic) -> list[Subscriber]:
        """Active delivery targets for a topic."""
        try:
            return to_subscribers(self.repository.find_active_by_topic(topic))
        except Exception as e:
            logger.error("Failed to list subscribers for %s: %s", topic.value, str(e))
            return []

    def mark_delivered(self, subscriber_id: str, topic: Topic, when: datetime) -> bool:
        """Record a successful scheduled delivery."""
        try:
            self.repository.set_last_delivered(subscriber_id, topic, when)
            return True
        except Exception as e:
            logger.error("Failed to mark delivery for %s: %s", subscriber_id, str(e))
            return False

    def stats(self) -> dict[str, int]:
        """Active subscription counts per topic, plus a total."""
        try:
            records = self.repository.find_all()
        except Exception as e:
            logger.error("Failed to compute subscription stats: %s", str(e))
            records = []
        return count_by_topic(records)
