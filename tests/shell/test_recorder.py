"""Tests for the snapshot recorder."""

from datetime import datetime, timezone
from unittest.mock import Mock

from orbital.core.snapshot import build_snapshot, make_satellite_position
from orbital.recorder import SnapshotRecorder
from orbital.shell.memory_store import MemoryHistoryLog
from orbital.shell.reading_cache import CacheResult


NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


def cache_returning(snapshot):
    cache = Mock()
    cache.get.return_value = CacheResult(success=True, snapshot=snapshot)
    return cache


class TestRunTick:
    """Tests for SnapshotRecorder.run_tick()."""

    def test_writes_every_category(self):
        snapshot = build_snapshot(
            timestamp=NOW,
            satellite=make_satellite_position(10.0, 10.0, 420.0, 27600.0),
        )
        log = MemoryHistoryLog()

        result = SnapshotRecorder(cache_returning(snapshot), log, clock=lambda: NOW).run_tick()

        assert sorted(result.written) == ["geomagnetic", "radiation", "satellite", "solar-wind"]
        assert log.rows["geomagnetic"][0]["recorded_at"] == NOW

    def test_missing_satellite_is_skipped(self):
        log = MemoryHistoryLog()

        result = SnapshotRecorder(cache_returning(build_snapshot(timestamp=NOW)), log).run_tick()

        assert result.skipped == ["satellite"]
        assert "satellite" not in log.rows
        assert result.success is True

    def test_one_failed_write_does_not_block_others(self):
        log = Mock()
        log.append.side_effect = [None, RuntimeError("quota"), None, None]
        snapshot = build_snapshot(
            timestamp=NOW,
            satellite=make_satellite_position(10.0, 10.0, 420.0, 27600.0),
        )

        result = SnapshotRecorder(cache_returning(snapshot), log).run_tick()

        assert len(result.written) == 3
        assert len(result.failed) == 1
        assert result.success is False

    def test_forces_refresh(self):
        cache = cache_returning(build_snapshot(timestamp=NOW))

        SnapshotRecorder(cache, MemoryHistoryLog()).run_tick()

        cache.get.assert_called_once_with(force_refresh=True)

    def test_snapshot_failure(self):
        cache = Mock()
        cache.get.return_value = CacheResult(success=False, error="down")
        log = Mock()

        result = SnapshotRecorder(cache, log).run_tick()

        assert result.success is False
        log.append.assert_not_called()
