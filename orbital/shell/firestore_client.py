"""Firestore Client - Imperative Shell.

This module persists subscriptions, delivery records and historical
readings in Google Cloud Firestore. All I/O is contained here; the
subscription lifecycle rules live in the core module.

Subscription documents are keyed by '{subscriber_id}_{topic}', so saving
a record for an existing (subscriber_id, topic) pair overwrites it in
place and no duplicate can arise.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from google.cloud import firestore

from orbital.core.subscription import (
    Subscription,
    SubscriptionStatus,
    Topic,
)


logger = logging.getLogger(__name__)


DEFAULT_SUBSCRIPTIONS_COLLECTION = "subscriptions"
DEFAULT_DELIVERIES_COLLECTION = "deliveries"
DEFAULT_HISTORY_PREFIX = "history_"


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
        subscriptions_collection: Collection holding subscription records
        deliveries_collection: Collection holding delivery records
        history_prefix: Prefix for per-category history collections
    """
    project_id: str | None = None
    database: str | None = None
    subscriptions_collection: str = DEFAULT_SUBSCRIPTIONS_COLLECTION
    deliveries_collection: str = DEFAULT_DELIVERIES_COLLECTION
    history_prefix: str = DEFAULT_HISTORY_PREFIX


def make_client(config: FirestoreConfig) -> firestore.Client:
    """Create a Firestore client from configuration."""
    kwargs = {}
    if config.project_id:
        kwargs["project"] = config.project_id
    if config.database:
        kwargs["database"] = config.database
    return firestore.Client(**kwargs)


def document_id(subscriber_id: str, topic: Topic) -> str:
    """Document ID for a subscription record."""
    return f"{subscriber_id}_{topic.value}"


def subscription_to_dict(subscription: Subscription) -> dict[str, Any]:
    return {
        "subscriber_id": subscription.subscriber_id,
        "topic": subscription.topic.value,
        "display_name": subscription.display_name,
        "schedule": subscription.schedule,
        "status": subscription.status.value,
        "subscribed_at": subscription.subscribed_at,
        "last_delivered_at": subscription.last_delivered_at,
    }


def subscription_from_dict(data: dict[str, Any]) -> Subscription:
    return Subscription(
        subscriber_id=data["subscriber_id"],
        topic=Topic(data["topic"]),
        display_name=data.get("display_name", ""),
        schedule=data.get("schedule"),
        status=SubscriptionStatus(data.get("status", SubscriptionStatus.ACTIVE.value)),
        subscribed_at=data["subscribed_at"],
        last_delivered_at=data.get("last_delivered_at"),
    )


class FirestoreSubscriptionRepository:
    """Subscription records stored in Firestore.

    This is part of the imperative shell - it handles database I/O.
    Methods raise on backend errors; the subscription store turns those
    into failed results.

    Document structure:
    {
        "subscriber_id": "U1234...",
        "topic": "daily-report",
        "display_name": "Daily space weather report",
        "schedule": "08:00",
        "status": "active",
        "subscribed_at": <timestamp>,
        "last_delivered_at": <timestamp or null>
    }
    """

    def __init__(
        self,
        config: FirestoreConfig | None = None,
        client: firestore.Client | None = None,
    ) -> None:
        """Initialize repository.

        Args:
            config: Firestore configuration
            client: Existing Firestore client (created lazily if None)
        """
        self.config = config or FirestoreConfig()
        self._client = client

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            self._client = make_client(self.config)
        return self._client

    def _collection(self) -> Any:
        return self.client.collection(self.config.subscriptions_collection)

    def find_one(self, subscriber_id: str, topic: Topic) -> Subscription | None:
        """Fetch the record for (subscriber_id, topic), if any."""
        doc = self._collection().document(document_id(subscriber_id, topic)).get()
        if not doc.exists:
            return None
        return subscription_from_dict(doc.to_dict())

    def find_by_subscriber(self, subscriber_id: str) -> list[Subscription]:
        """Fetch every record belonging to a subscriber."""
        query = self._collection().where(
            filter=firestore.FieldFilter("subscriber_id", "==", subscriber_id)
        )
        return [subscription_from_dict(doc.to_dict()) for doc in query.stream()]

    def find_active_by_topic(self, topic: Topic) -> list[Subscription]:
        """Fetch active records for a topic."""
        query = (
            self._collection()
            .where(filter=firestore.FieldFilter("topic", "==", topic.value))
            .where(filter=firestore.FieldFilter("status", "==", SubscriptionStatus.ACTIVE.value))
        )
        return [subscription_from_dict(doc.to_dict()) for doc in query.stream()]

    def find_all(self) -> list[Subscription]:
        """Fetch every record."""
        return [subscription_from_dict(doc.to_dict()) for doc in self._collection().stream()]

    def save(self, subscription: Subscription) -> None:
        """Insert or overwrite a record."""
        doc_id = document_id(subscription.subscriber_id, subscription.topic)
        self._collection().document(doc_id).set(subscription_to_dict(subscription))

    def set_last_delivered(
        self,
        subscriber_id: str,
        topic: Topic,
        when: datetime,
    ) -> None:
        """Update only the last delivery time of a record."""
        self._collection().document(document_id(subscriber_id, topic)).set(
            {"last_delivered_at": when},
            merge=True,
        )


class FirestoreHistoryLog:
    """Append-only delivery records and historical readings in Firestore.

    Each history category is its own collection ('{prefix}{category}').
    """

    def __init__(
        self,
        config: FirestoreConfig | None = None,
        client: firestore.Client | None = None,
    ) -> None:
        self.config = config or FirestoreConfig()
        self._client = client

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            self._client = make_client(self.config)
        return self._client

    def append(self, category: str, row: dict[str, Any], recorded_at: datetime) -> None:
        """Append one historical row.

        This method performs database I/O.
        """
        collection = f"{self.config.history_prefix}{category}"
        self.client.collection(collection).add({**row, "recorded_at": recorded_at})

    def query(
        self,
        category: str,
        since: datetime,
        limit: int,
    ) -> list[dict[str, Any]]:
        """Fetch rows recorded at or after `since`, newest first.

        This method performs database I/O.
        """
        collection = f"{self.config.history_prefix}{category}"
        query = (
            self.client.collection(collection)
            .where(filter=firestore.FieldFilter("recorded_at", ">=", since))
            .order_by("recorded_at", direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        return [doc.to_dict() for doc in query.stream()]

    def append_delivery(self, record: dict[str, Any]) -> None:
        """Append one delivery audit record.

        This method performs database I/O.
        """
        self.client.collection(self.config.deliveries_collection).add(record)
