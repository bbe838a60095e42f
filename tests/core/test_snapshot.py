"""Unit tests for snapshot models and classification.

Pure function tests - fast, no mocks needed.
"""

import pytest
from datetime import datetime, timezone

from orbital.core.snapshot import (
    DEFAULT_ELECTRON,
    DEFAULT_MAGNETIC_FIELD,
    DEFAULT_SOLAR_WIND,
    SolarWind,
    build_snapshot,
    classify_flare,
    classify_kp,
    classify_radiation,
    compute_alert_summary,
    compute_aurora_chances,
    describe_location,
    make_kp_reading,
    make_proton_reading,
    make_satellite_position,
    make_xray_reading,
)


NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


class TestClassifyFlare:
    """Tests for classify_flare() pure function."""

    def test_x_class_with_sub_level(self):
        """2.5e-4 W/m^2 is an X2.5 flare."""
        assert classify_flare(2.5e-4) == ("X", 2.5)

    def test_m_class(self):
        assert classify_flare(3.2e-5) == ("M", 3.2)

    def test_c_class(self):
        assert classify_flare(1e-6) == ("C", 1.0)

    def test_b_class(self):
        assert classify_flare(4.4e-7) == ("B", 4.4)

    def test_below_b_threshold_is_a(self):
        """Flux below 1e-7 is class A with level 0."""
        assert classify_flare(5e-8) == ("A", 0.0)

    def test_boundary_is_inclusive(self):
        """Exactly 1e-4 is X1.0, not M10."""
        assert classify_flare(1e-4) == ("X", 1.0)

    def test_full_class_label(self):
        reading = make_xray_reading(2.5e-4)
        assert reading.full_class == "X2.5"


class TestClassifyKp:
    """Tests for classify_kp() pure function."""

    @pytest.mark.parametrize("kp,expected", [
        (0.0, ("quiet", "G0")),
        (2.0, ("quiet", "G0")),
        (3.3, ("active", "G0")),
        (5.0, ("storm", "G1")),
        (6.0, ("storm", "G2")),
        (7.0, ("severe", "G3")),
        (8.3, ("severe", "G4")),
        (9.0, ("severe", "G5")),
    ])
    def test_levels_and_scales(self, kp, expected):
        assert classify_kp(kp) == expected

    def test_make_kp_reading_derives_fields(self):
        reading = make_kp_reading(5.33, time="2024-05-10 12:00:00")
        assert reading.g_scale == "G1"
        assert reading.level == "storm"
        assert reading.time == "2024-05-10 12:00:00"


class TestClassifyRadiation:
    """Tests for classify_radiation() pure function."""

    @pytest.mark.parametrize("flux,expected", [
        (1.0, "S0"),
        (10.0, "S1"),
        (150.0, "S2"),
        (1000.0, "S3"),
        (20000.0, "S4"),
        (100000.0, "S5"),
    ])
    def test_s_scale(self, flux, expected):
        assert classify_radiation(flux) == expected


class TestDescribeLocation:
    """Tests for describe_location() pure function."""

    def test_over_taiwan(self):
        assert describe_location(25.0, 121.5) == "Over Japan/Taiwan"

    def test_first_matching_region_wins(self):
        """Japan/Taiwan is checked before the wider Asia box."""
        assert describe_location(35.0, 135.0) == "Over Japan/Taiwan"

    def test_polar_fallback(self):
        assert describe_location(-70.0, 0.0) == "Over the polar region"

    def test_ocean_fallback(self):
        assert describe_location(-10.0, -150.0) == "Over the ocean"

    def test_satellite_position_gets_location(self):
        position = make_satellite_position(40.0, -100.0, 420.0, 27600.0)
        assert position.location == "Over the United States"


class TestAuroraChances:
    """Tests for compute_aurora_chances() pure function."""

    def test_quiet_conditions(self):
        chances = compute_aurora_chances(2.0)
        assert chances.iceland == 70
        assert chances.hokkaido == 5
        assert chances.new_zealand == 5

    def test_high_latitude_regions_are_capped(self):
        chances = compute_aurora_chances(9.0)
        assert chances.iceland == 95
        assert chances.norway == 90
        assert chances.alaska == 75

    def test_japan_tracks_hokkaido(self):
        chances = compute_aurora_chances(6.0)
        assert chances.japan == 60
        assert chances.japan == chances.hokkaido
        assert compute_aurora_chances(2.0).japan == 5


class TestAlertSummary:
    """Tests for compute_alert_summary() pure function."""

    def test_normal_conditions(self):
        level, messages = compute_alert_summary(
            make_kp_reading(2.0), make_xray_reading(1e-7), make_proton_reading(1.0)
        )
        assert level == "normal"
        assert messages == []

    def test_storm_is_warning(self):
        level, messages = compute_alert_summary(
            make_kp_reading(5.3), make_xray_reading(1e-7), make_proton_reading(1.0)
        )
        assert level == "warning"
        assert len(messages) == 1

    def test_x_flare_is_severe(self):
        level, messages = compute_alert_summary(
            make_kp_reading(5.3), make_xray_reading(2.5e-4), make_proton_reading(1.0)
        )
        assert level == "severe"
        assert any("X2.5" in m for m in messages)

    def test_strong_radiation_storm_is_severe(self):
        level, _ = compute_alert_summary(
            make_kp_reading(1.0), make_xray_reading(1e-7), make_proton_reading(2000.0)
        )
        assert level == "severe"


class TestBuildSnapshot:
    """Tests for build_snapshot() pure function."""

    def test_defaults_for_missing_sources(self):
        """Every missing sub-record falls back to its documented default."""
        snapshot = build_snapshot(timestamp=NOW)

        assert snapshot.kp.kp == 2.0
        assert snapshot.solar_wind == DEFAULT_SOLAR_WIND
        assert snapshot.magnetic_field == DEFAULT_MAGNETIC_FIELD
        assert snapshot.xray.flux == 1e-7
        assert snapshot.xray.flare_class == "B"
        assert snapshot.proton.s_scale == "S0"
        assert snapshot.electron == DEFAULT_ELECTRON
        assert snapshot.cmes == ()
        assert snapshot.satellite is None
        assert snapshot.alert_level == "normal"

    def test_keeps_provided_readings(self):
        wind = SolarWind(speed=650.0, density=12.0, temperature=300000.0)
        snapshot = build_snapshot(
            timestamp=NOW,
            kp=make_kp_reading(6.7),
            solar_wind=wind,
        )

        assert snapshot.solar_wind is wind
        assert snapshot.kp.g_scale == "G2"
        assert snapshot.alert_level == "warning"
        assert snapshot.aurora is not None

    def test_snapshot_is_immutable(self):
        snapshot = build_snapshot(timestamp=NOW)
        with pytest.raises(AttributeError):
            snapshot.alert_level = "severe"
