"""Unit tests for message formatting.

Pure function tests - fast, no mocks needed.
"""

import pytest
from datetime import datetime, timezone

from orbital.core.formatter import (
    MAX_SEGMENTS,
    as_segments,
    format_alert,
    format_aurora,
    format_cme_list,
    format_report,
    format_satellite,
    format_subscription_list,
    get_kp_emoji,
    message_preview,
    redact_subscriber_id,
    text_message,
    truncate_segments,
)
from orbital.core.snapshot import (
    CMEEvent,
    build_snapshot,
    make_kp_reading,
    make_satellite_position,
    make_xray_reading,
)
from orbital.core.subscription import Topic, apply_subscribe


NOW = datetime(2024, 5, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def snapshot():
    return build_snapshot(
        timestamp=NOW,
        kp=make_kp_reading(7.3),
        xray=make_xray_reading(2.5e-4),
        satellite=make_satellite_position(25.0, 121.5, 420.0, 27600.0),
    )


@pytest.fixture
def quiet_snapshot():
    return build_snapshot(timestamp=NOW)


class TestSegments:
    """Tests for segment helpers."""

    def test_text_message(self):
        assert text_message("hi") == {"type": "text", "text": "hi"}

    def test_as_segments_from_string(self):
        assert as_segments("hi") == [{"type": "text", "text": "hi"}]

    def test_as_segments_from_dict(self):
        segment = {"type": "flex", "altText": "card"}
        assert as_segments(segment) == [segment]

    def test_as_segments_mixed_list(self):
        segments = as_segments(["a", {"type": "text", "text": "b"}])
        assert [s["text"] for s in segments] == ["a", "b"]

    def test_truncate_to_channel_limit(self):
        segments = [text_message(str(i)) for i in range(7)]
        truncated = truncate_segments(segments)
        assert len(truncated) == MAX_SEGMENTS
        assert truncated[-1]["text"] == "4"

    def test_preview(self):
        assert message_preview([text_message("x" * 80)]) == "x" * 50

    def test_preview_of_non_text_segment(self):
        assert message_preview([{"type": "flex", "altText": "Report card"}]) == "Report card"

    def test_preview_empty(self):
        assert message_preview([]) == ""


class TestRedactSubscriberId:
    """Tests for redact_subscriber_id()."""

    def test_long_id_truncated(self):
        assert redact_subscriber_id("U1234567890abcdef") == "U123456789..."

    def test_short_id_unchanged(self):
        assert redact_subscriber_id("U1") == "U1"


class TestKpEmoji:
    """Tests for get_kp_emoji()."""

    @pytest.mark.parametrize("kp,emoji", [(1.0, "🟢"), (3.0, "🟡"), (5.0, "🟠"), (8.0, "🔴")])
    def test_bands(self, kp, emoji):
        assert get_kp_emoji(kp) == emoji


class TestFormatReport:
    """Tests for format_report()."""

    def test_contains_readings(self, snapshot):
        local = datetime(2024, 5, 10, 8, 0)
        report = format_report(snapshot, local)

        assert "Kp index: 7.3" in report
        assert "Flare class: X2.5" in report
        assert "Over Japan/Taiwan" in report
        assert "Updated: 2024-05-10 08:00" in report
        assert "Active alerts" in report

    def test_quiet_report_has_no_alerts(self, quiet_snapshot):
        report = format_report(quiet_snapshot, datetime(2024, 5, 10, 8, 0))
        assert "Active alerts" not in report
        assert "Position unavailable" in report


class TestFormatAurora:
    """Tests for format_aurora()."""

    def test_lists_japan_chance(self):
        text = format_aurora(build_snapshot(timestamp=NOW, kp=make_kp_reading(6.0)))
        assert "Kp index: 6.0" in text
        assert "🇯🇵 Japan: 60%" in text


class TestFormatSatellite:
    """Tests for format_satellite()."""

    def test_position(self, snapshot):
        text = format_satellite(snapshot)
        assert "Latitude: 25.0000°" in text
        assert "Velocity: 27,600 km/h" in text

    def test_unavailable(self, quiet_snapshot):
        assert "temporarily unavailable" in format_satellite(quiet_snapshot)


class TestFormatCmeList:
    """Tests for format_cme_list()."""

    def test_empty(self, quiet_snapshot):
        assert "No CME events" in format_cme_list(quiet_snapshot)

    def test_earth_directed_marker(self):
        cmes = [CMEEvent(activity_id="CME-1", time="2024-05-10T06:36Z", speed=1200.0, earth_directed=True)]
        text = format_cme_list(build_snapshot(timestamp=NOW, cmes=cmes))
        assert "Speed: 1200 km/s" in text
        assert "Earth-directed" in text


class TestFormatAlert:
    """Tests for format_alert()."""

    def test_geomagnetic(self, snapshot):
        segments = format_alert(Topic.GEOMAGNETIC_ALERT, snapshot)
        assert len(segments) == 2
        assert "Kp index has reached 7.3" in segments[0]["text"]

    def test_flare(self, snapshot):
        segments = format_alert(Topic.FLARE_ALERT, snapshot)
        assert "X2.5" in segments[0]["text"]

    def test_cme(self, snapshot):
        events = [CMEEvent(activity_id="CME-1", time="2024-05-10T06:36Z", speed=1500.0)]
        segments = format_alert(Topic.CME_ALERT, snapshot, events)
        assert "1500 km/s" in segments[0]["text"]

    def test_daily_report_rejected(self, snapshot):
        with pytest.raises(ValueError):
            format_alert(Topic.DAILY_REPORT, snapshot)


class TestFormatSubscriptionList:
    """Tests for format_subscription_list()."""

    def test_empty(self):
        assert "no active subscriptions" in format_subscription_list([])

    def test_shows_schedule(self):
        daily = apply_subscribe(None, "U1", Topic.DAILY_REPORT, None, "20:00", NOW)
        flare = apply_subscribe(None, "U1", Topic.FLARE_ALERT, None, None, NOW)

        text = format_subscription_list([daily, flare])

        assert "✅ Daily space weather report (20:00)" in text
        assert "✅ X-class solar flare alert" in text
