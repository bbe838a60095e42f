"""Historical recording rows - Pure functions.

The recorder appends one row per category per tick. This module decides
what each row contains; the history log adapter only stores it.
"""

from datetime import datetime, timedelta
from typing import Any

from orbital.core.snapshot import Snapshot


SOLAR_WIND = "solar-wind"
GEOMAGNETIC = "geomagnetic"
SATELLITE = "satellite"
RADIATION = "radiation"

HISTORY_CATEGORIES = (SOLAR_WIND, GEOMAGNETIC, SATELLITE, RADIATION)

# Bounds for history queries
DEFAULT_HISTORY_DAYS = 7
DEFAULT_HISTORY_LIMIT = 100
MAX_HISTORY_LIMIT = 1000


def solar_wind_row(snapshot: Snapshot) -> dict[str, Any]:
    wind = snapshot.solar_wind
    imf = snapshot.magnetic_field
    return {
        "speed": wind.speed,
        "density": wind.density,
        "temperature": wind.temperature,
        "bz": imf.bz,
        "bt": imf.bt,
    }


def geomagnetic_row(snapshot: Snapshot) -> dict[str, Any]:
    return {
        "kp": snapshot.kp.kp,
        "level": snapshot.kp.level,
        "g_scale": snapshot.kp.g_scale,
    }


def satellite_row(snapshot: Snapshot) -> dict[str, Any] | None:
    sat = snapshot.satellite
    if sat is None:
        return None
    return {
        "latitude": sat.latitude,
        "longitude": sat.longitude,
        "altitude": sat.altitude,
        "velocity": sat.velocity,
        "location": sat.location,
    }


def radiation_row(snapshot: Snapshot) -> dict[str, Any]:
    return {
        "xray_flux": snapshot.xray.flux,
        "flare_class": snapshot.xray.full_class,
        "proton_flux": snapshot.proton.flux,
        "s_scale": snapshot.proton.s_scale,
        "electron_flux": snapshot.electron.flux,
    }


def build_history_rows(snapshot: Snapshot) -> dict[str, dict[str, Any] | None]:
    """Build one row per history category.

    Pure function. A category maps to None when its sub-record is absent
    from the snapshot and must be skipped.

    Args:
        snapshot: Snapshot to record

    Returns:
        Mapping of category to row (or None)
    """
    return {
        SOLAR_WIND: solar_wind_row(snapshot),
        GEOMAGNETIC: geomagnetic_row(snapshot),
        SATELLITE: satellite_row(snapshot),
        RADIATION: radiation_row(snapshot),
    }


def history_window(
    now: datetime,
    days: int = DEFAULT_HISTORY_DAYS,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> tuple[datetime, int]:
    """Compute the start time and clamped row limit for a history query.

    Pure function.

    Args:
        now: Current time
        days: How many days back to query
        limit: Requested maximum number of rows

    Returns:
        Tuple of (since, limit)
    """
    days = max(1, days)
    limit = max(1, min(limit, MAX_HISTORY_LIMIT))
    return now - timedelta(days=days), limit
