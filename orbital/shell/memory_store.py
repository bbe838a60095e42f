"""In-process storage adapters - Imperative Shell.

MemorySubscriptionRepository and MemoryHistoryLog keep records in process
memory for local development and tests. The Null variants are used when
persistence is not configured or cannot be initialised: writes succeed
and reads return nothing.

All adapters share the method names of the Firestore adapters so the
subscription store and recorder can use any of them.
"""

import threading
from dataclasses import replace
from datetime import datetime
from typing import Any

from orbital.core.subscription import Subscription, Topic


class MemorySubscriptionRepository:
    """Subscription records held in a dict keyed by (subscriber_id, topic)."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, Topic], Subscription] = {}
        self._lock = threading.Lock()

    def find_one(self, subscriber_id: str, topic: Topic) -> Subscription | None:
        return self._records.get((subscriber_id, topic))

    def find_by_subscriber(self, subscriber_id: str) -> list[Subscription]:
        return [r for r in self._records.values() if r.subscriber_id == subscriber_id]

    def find_active_by_topic(self, topic: Topic) -> list[Subscription]:
        return [r for r in self._records.values() if r.topic == topic and r.is_active]

    def find_all(self) -> list[Subscription]:
        return list(self._records.values())

    def save(self, subscription: Subscription) -> None:
        with self._lock:
            self._records[subscription.key] = subscription

    def set_last_delivered(
        self,
        subscriber_id: str,
        topic: Topic,
        when: datetime,
    ) -> None:
        with self._lock:
            record = self._records.get((subscriber_id, topic))
            if record is not None:
                self._records[record.key] = replace(record, last_delivered_at=when)


class MemoryHistoryLog:
    """History rows and delivery records held in lists."""

    def __init__(self) -> None:
        self.rows: dict[str, list[dict[str, Any]]] = {}
        self.deliveries: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def append(self, category: str, row: dict[str, Any], recorded_at: datetime) -> None:
        with self._lock:
            self.rows.setdefault(category, []).append({**row, "recorded_at": recorded_at})

    def query(
        self,
        category: str,
        since: datetime,
        limit: int,
    ) -> list[dict[str, Any]]:
        rows = [r for r in self.rows.get(category, []) if r["recorded_at"] >= since]
        rows.sort(key=lambda r: r["recorded_at"], reverse=True)
        return rows[:limit]

    def append_delivery(self, record: dict[str, Any]) -> None:
        with self._lock:
            self.deliveries.append(record)


class NullSubscriptionRepository:
    """Stand-in used when no persistence is available."""

    def find_one(self, subscriber_id: str, topic: Topic) -> Subscription | None:
        return None

    def find_by_subscriber(self, subscriber_id: str) -> list[Subscription]:
        return []

    def find_active_by_topic(self, topic: Topic) -> list[Subscription]:
        return []

    def find_all(self) -> list[Subscription]:
        return []

    def save(self, subscription: Subscription) -> None:
        pass

    def set_last_delivered(
        self,
        subscriber_id: str,
        topic: Topic,
        when: datetime,
    ) -> None:
        pass


class NullHistoryLog:
    """Stand-in used when no persistence is available."""

    def append(self, category: str, row: dict[str, Any], recorded_at: datetime) -> None:
        pass

    def query(
        self,
        category: str,
        since: datetime,
        limit: int,
    ) -> list[dict[str, Any]]:
        return []

    def append_delivery(self, record: dict[str, Any]) -> None:
        pass
