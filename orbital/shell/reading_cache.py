"""Reading Cache - Imperative Shell.

Holds the most recent Snapshot for a short time-to-live so repeated
requests do not hit the upstream services. The cached value and its
fetch time are stored together as one tuple and swapped under a lock,
so readers never see a new snapshot paired with an old timestamp.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from orbital.core.snapshot import Snapshot
from orbital.shell.aggregator import SnapshotAggregator


logger = logging.getLogger(__name__)


DEFAULT_TTL_SECONDS = 60


@dataclass
class CacheResult:
    """Outcome of a cache read.

    Attributes:
        success: Whether a fresh or cached snapshot is returned
        snapshot: The snapshot (None on failure)
        error: Error message if the refresh failed
        stale: Last good snapshot, returned alongside a failure
        from_cache: Whether the snapshot came from the cache
    """
    success: bool
    snapshot: Snapshot | None = None
    error: str | None = None
    stale: Snapshot | None = None
    from_cache: bool = False


class ReadingCache:
    """TTL cache in front of the snapshot aggregator."""

    def __init__(
        self,
        aggregator: SnapshotAggregator,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize cache.

        Args:
            aggregator: Source of fresh snapshots
            ttl_seconds: Time-to-live for a cached snapshot
            clock: Returns the current UTC time
        """
        self.aggregator = aggregator
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self._entry: tuple[Snapshot, datetime] | None = None
        self._lock = threading.Lock()

    @property
    def last_fetched_at(self) -> datetime | None:
        entry = self._entry
        return entry[1] if entry else None

    def _fresh(self, now: datetime) -> Snapshot | None:
        entry = self._entry
        if entry is None:
            return None
        snapshot, fetched_at = entry
        if now - fetched_at < self.ttl:
            return snapshot
        return None

    def get(self, force_refresh: bool = False) -> CacheResult:
        """Return the current snapshot, refreshing it when expired.

        Never raises. On refresh failure the cache keeps its previous
        entry and the result carries it as `stale`.

        Args:
            force_refresh: Bypass the TTL check

        Returns:
            CacheResult
        """
        if not force_refresh:
            cached = self._fresh(self.clock())
            if cached is not None:
                return CacheResult(success=True, snapshot=cached, from_cache=True)

        with self._lock:
            now = self.clock()
            # Another caller may have refreshed while we waited for the lock
            if not force_refresh:
                cached = self._fresh(now)
                if cached is not None:
                    return CacheResult(success=True, snapshot=cached, from_cache=True)

            try:
                snapshot = self.aggregator.fetch()
            except Exception as e:
                logger.error("Snapshot refresh failed: %s", str(e))
                previous = self._entry
                return CacheResult(
                    success=False,
                    error=str(e),
                    stale=previous[0] if previous else None,
                )

            self._entry = (snapshot, now)

        logger.info(
            "Snapshot refreshed (kp=%.1f, flare=%s)",
            snapshot.kp.kp,
            snapshot.xray.full_class,
        )
        return CacheResult(success=True, snapshot=snapshot)
