"""Snapshot Recorder - appends readings to the history log."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from orbital.core.history import build_history_rows
from orbital.shell.reading_cache import ReadingCache


logger = logging.getLogger(__name__)


@dataclass
class RecordingResult:
    """Result of one recording tick.

    Attributes:
        written: Categories appended
        skipped: Categories absent from the snapshot
        failed: Categories whose write failed
        errors: Errors that occurred
    """
    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed and not self.errors


class SnapshotRecorder:
    """Writes one history row per category from a fresh snapshot.

    Each category is written independently; one failed write does not
    prevent the others.
    """

    def __init__(
        self,
        cache: ReadingCache,
        history_log: Any,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.cache = cache
        self.history_log = history_log
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def run_tick(self) -> RecordingResult:
        """Refresh the snapshot and record it."""
        result = RecordingResult()

        cached = self.cache.get(force_refresh=True)
        if not cached.success:
            logger.error("Recording skipped, no snapshot: %s", cached.error)
            result.errors.append(f"Snapshot unavailable: {cached.error}")
            return result

        recorded_at = self.clock()
        for category, row in build_history_rows(cached.snapshot).items():
            if row is None:
                result.skipped.append(category)
                continue
            try:
                self.history_log.append(category, row, recorded_at)
                result.written.append(category)
            except Exception as e:
                logger.error("Failed to record %s: %s", category, str(e))
                result.failed.append(category)

        logger.info(
            "Recorded %d categories (%d skipped, %d failed)",
            len(result.written),
            len(result.skipped),
            len(result.failed),
        )
        return result
