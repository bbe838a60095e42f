"""Unit tests for history rows and query windows.

Pure function tests - fast, no mocks needed.
"""

from datetime import datetime, timedelta, timezone

from orbital.core.history import (
    GEOMAGNETIC,
    HISTORY_CATEGORIES,
    MAX_HISTORY_LIMIT,
    RADIATION,
    SATELLITE,
    SOLAR_WIND,
    build_history_rows,
    history_window,
)
from orbital.core.snapshot import build_snapshot, make_kp_reading, make_satellite_position


NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


class TestBuildHistoryRows:
    """Tests for build_history_rows()."""

    def test_one_row_per_category(self):
        snapshot = build_snapshot(
            timestamp=NOW,
            kp=make_kp_reading(5.3),
            satellite=make_satellite_position(10.0, -150.0, 415.0, 27580.0),
        )

        rows = build_history_rows(snapshot)

        assert set(rows) == set(HISTORY_CATEGORIES)
        assert rows[GEOMAGNETIC] == {"kp": 5.3, "level": "storm", "g_scale": "G1"}
        assert rows[SOLAR_WIND]["speed"] == 400.0
        assert rows[SOLAR_WIND]["bt"] == 5.0
        assert rows[SATELLITE]["location"] == "Over the ocean"
        assert rows[RADIATION]["flare_class"] == "B1.0"

    def test_missing_satellite_row_is_none(self):
        rows = build_history_rows(build_snapshot(timestamp=NOW))
        assert rows[SATELLITE] is None


class TestHistoryWindow:
    """Tests for history_window()."""

    def test_defaults(self):
        since, limit = history_window(NOW)
        assert since == NOW - timedelta(days=7)
        assert limit == 100

    def test_limit_clamped(self):
        assert history_window(NOW, limit=5000)[1] == MAX_HISTORY_LIMIT
        assert history_window(NOW, limit=0)[1] == 1

    def test_days_floor(self):
        since, _ = history_window(NOW, days=0)
        assert since == NOW - timedelta(days=1)
