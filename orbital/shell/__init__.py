"""Imperative Shell - I/O operations.

This module contains all side-effecting operations:
- HTTP clients (NOAA SWPC, NASA DONKI, ISS tracker, LINE Messaging API)
- Snapshot aggregation and the reading cache
- Subscription and history persistence (Firestore, in-memory, null)
- Configuration loading and Secret Manager access

These are kept thin, with business logic delegated to the core.
"""

from orbital.shell.aggregator import SnapshotAggregator, UpstreamFetchError
from orbital.shell.reading_cache import CacheResult, ReadingCache
from orbital.shell.line_client import LineClient, LineResponse, validate_signature
from orbital.shell.subscription_store import Storage, StoreResult, SubscriptionStore, open_storage

__all__ = [
    "SnapshotAggregator",
    "UpstreamFetchError",
    "CacheResult",
    "ReadingCache",
    "LineClient",
    "LineResponse",
    "validate_signature",
    "Storage",
    "StoreResult",
    "SubscriptionStore",
    "open_storage",
]
