"""Upstream payload parsing - Pure functions.

This module turns raw JSON from NOAA SWPC, NASA DONKI and the satellite
tracker into typed readings. All functions are pure with no side effects.

SWPC product files are tables: a list of rows where the first row may be
a header (``["time_tag", ...]``). Newer SWPC feeds return a list of
objects instead; both shapes are accepted. Every parser returns None (or
an empty list) when the payload holds nothing usable.
"""

from typing import Any

from orbital.core.snapshot import (
    CMEEvent,
    ElectronReading,
    FlareEvent,
    KpReading,
    MagneticField,
    ProtonReading,
    SatellitePosition,
    SolarWind,
    XrayReading,
    make_kp_reading,
    make_proton_reading,
    make_satellite_position,
    make_xray_reading,
)


def _to_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _data_rows(data: Any) -> list[Any]:
    """Strip the header row from an SWPC table."""
    if not isinstance(data, list):
        return []
    return [
        row for row in data
        if not (isinstance(row, list) and row and row[0] == "time_tag")
    ]


def _latest(data: Any) -> Any | None:
    rows = _data_rows(data)
    return rows[-1] if rows else None


def _field(row: Any, index: int, key: str) -> Any:
    """Read a column by position (table rows) or key (object rows)."""
    if isinstance(row, dict):
        return row.get(key)
    if isinstance(row, list) and len(row) > index:
        return row[index]
    return None


def parse_solar_wind(data: Any) -> SolarWind | None:
    """Parse the latest row of the plasma table.

    Columns: time_tag, density, speed, temperature.
    """
    row = _latest(data)
    if row is None:
        return None
    return SolarWind(
        speed=_to_float(_field(row, 2, "speed")),
        density=_to_float(_field(row, 1, "density")),
        temperature=_to_float(_field(row, 3, "temperature")),
        time=_field(row, 0, "time_tag"),
    )


def parse_magnetic_field(data: Any) -> MagneticField | None:
    """Parse the latest row of the magnetometer table.

    Columns: time_tag, bx_gsm, by_gsm, bz_gsm, lon_gsm, lat_gsm, bt.
    """
    row = _latest(data)
    if row is None:
        return None
    return MagneticField(
        bx=_to_float(_field(row, 1, "bx_gsm")),
        by=_to_float(_field(row, 2, "by_gsm")),
        bz=_to_float(_field(row, 3, "bz_gsm")),
        bt=_to_float(_field(row, 6, "bt")),
        time=_field(row, 0, "time_tag"),
    )


def parse_kp(data: Any) -> KpReading | None:
    """Parse the latest planetary K-index row."""
    row = _latest(data)
    if row is None:
        return None
    kp = _field(row, 1, "Kp")
    if kp is None and isinstance(row, dict):
        kp = row.get("kp_index", row.get("kp"))
    return make_kp_reading(_to_float(kp), time=_field(row, 0, "time_tag"))


def parse_xray(data: Any) -> XrayReading | None:
    """Parse the latest GOES X-ray flux row."""
    row = _latest(data)
    if row is None:
        return None
    return make_xray_reading(
        _to_float(_field(row, 1, "flux")),
        time=_field(row, 0, "time_tag"),
    )


def parse_proton(data: Any) -> ProtonReading | None:
    """Parse the latest GOES proton flux row."""
    row = _latest(data)
    if row is None:
        return None
    return make_proton_reading(
        _to_float(_field(row, 1, "flux")),
        time=_field(row, 0, "time_tag"),
    )


def parse_electron(data: Any) -> ElectronReading | None:
    """Parse the latest GOES electron flux row."""
    row = _latest(data)
    if row is None:
        return None
    return ElectronReading(
        flux=_to_float(_field(row, 1, "flux")),
        time=_field(row, 0, "time_tag"),
    )


def _earth_directed(analysis: dict[str, Any]) -> bool | None:
    """Read Earth impact from the ENLIL model runs attached to an analysis.

    Returns None when no model run exists, since direction is then unknown.
    """
    runs = analysis.get("enlilList") or []
    if not runs:
        return None
    return any(
        run.get("estimatedShockArrivalTime") is not None or run.get("isEarthGB") is True
        for run in runs
    )


def parse_cmes(data: Any, limit: int = 10) -> list[CMEEvent]:
    """Parse DONKI CME records, keeping the most recent `limit`."""
    if not isinstance(data, list):
        return []

    events = []
    for item in data[-limit:]:
        if not isinstance(item, dict):
            continue
        analyses = item.get("cmeAnalyses") or []
        analysis = next(
            (a for a in analyses if a.get("isMostAccurate")),
            analyses[0] if analyses else {},
        )
        events.append(CMEEvent(
            activity_id=item.get("activityID") or item.get("startTime", ""),
            time=item.get("startTime", ""),
            speed=_to_float(analysis.get("speed")),
            cme_type=analysis.get("type") or "Unknown",
            half_angle=_to_float(analysis.get("halfAngle")),
            note=item.get("note") or "",
            link=item.get("link") or "",
            earth_directed=_earth_directed(analysis) if analysis else None,
        ))
    return events


def parse_flares(data: Any, limit: int = 10) -> list[FlareEvent]:
    """Parse DONKI flare records, keeping the most recent `limit`."""
    if not isinstance(data, list):
        return []

    return [
        FlareEvent(
            flare_id=item.get("flrID") or item.get("beginTime", ""),
            begin_time=item.get("beginTime", ""),
            class_type=item.get("classType") or "",
            peak_time=item.get("peakTime"),
            end_time=item.get("endTime"),
            source_location=item.get("sourceLocation"),
            active_region=item.get("activeRegionNum"),
            link=item.get("link") or "",
        )
        for item in data[-limit:]
        if isinstance(item, dict)
    ]


def parse_satellite(data: Any) -> SatellitePosition | None:
    """Parse a satellite tracker response."""
    if not isinstance(data, dict):
        return None
    if data.get("latitude") is None or data.get("longitude") is None:
        return None
    return make_satellite_position(
        latitude=_to_float(data["latitude"]),
        longitude=_to_float(data["longitude"]),
        altitude=_to_float(data.get("altitude")),
        velocity=_to_float(data.get("velocity")),
        visibility=data.get("visibility") or "",
    )
