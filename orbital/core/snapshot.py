"""Space-weather snapshot models and classification - Pure functions.

This module turns raw numeric readings into typed, immutable records and
derives the categorical fields (storm level, G-scale, flare class, S-scale,
satellite region) from them. All functions are pure with no side effects.

Every derived field is a function of its numeric input only. When an
upstream source is missing, the snapshot falls back to the documented
defaults below instead of failing as a whole.
"""

from dataclasses import dataclass, field
from datetime import datetime

from orbital.core.geo import describe_location


@dataclass(frozen=True)
class KpReading:
    """Planetary K-index reading.

    Attributes:
        kp: Kp index value (0-9)
        level: Activity level (quiet/active/storm/severe)
        g_scale: NOAA geomagnetic storm scale label (G0-G5)
        time: Upstream time tag
    """
    kp: float
    level: str
    g_scale: str
    time: str | None = None


@dataclass(frozen=True)
class SolarWind:
    """Solar wind plasma reading.

    Attributes:
        speed: Bulk speed in km/s
        density: Proton density in p/cm^3
        temperature: Temperature in Kelvin
        time: Upstream time tag
    """
    speed: float
    density: float
    temperature: float
    time: str | None = None


@dataclass(frozen=True)
class MagneticField:
    """Interplanetary magnetic field reading (nT)."""
    bx: float
    by: float
    bz: float
    bt: float
    time: str | None = None


@dataclass(frozen=True)
class XrayReading:
    """GOES X-ray flux reading.

    Attributes:
        flux: X-ray flux in W/m^2
        flare_class: Flare class letter (A, B, C, M, X)
        flare_level: Sub-level within the class (e.g. 2.5 for X2.5)
        time: Upstream time tag
    """
    flux: float
    flare_class: str
    flare_level: float
    time: str | None = None

    @property
    def full_class(self) -> str:
        """Return the combined class label, e.g. 'X2.5'."""
        return f"{self.flare_class}{self.flare_level:.1f}"


@dataclass(frozen=True)
class ProtonReading:
    """GOES proton flux reading.

    Attributes:
        flux: Integral proton flux in pfu
        s_scale: NOAA solar radiation storm scale label (S0-S5)
        time: Upstream time tag
    """
    flux: float
    s_scale: str
    time: str | None = None


@dataclass(frozen=True)
class ElectronReading:
    """GOES electron flux reading."""
    flux: float
    time: str | None = None


@dataclass(frozen=True)
class CMEEvent:
    """Coronal mass ejection event.

    Attributes:
        activity_id: Upstream activity identifier
        time: Start time
        speed: Estimated speed in km/s
        cme_type: Speed type classification (S, C, O, R, ER)
        half_angle: Angular half width in degrees
        note: Free-text note from the analyst
        link: Link to the event page
        earth_directed: True/False when the upstream model states whether
            the CME reaches Earth, None when it says nothing
    """
    activity_id: str
    time: str
    speed: float = 0.0
    cme_type: str = "Unknown"
    half_angle: float = 0.0
    note: str = ""
    link: str = ""
    earth_directed: bool | None = None


@dataclass(frozen=True)
class FlareEvent:
    """Solar flare event from the flare catalogue."""
    flare_id: str
    begin_time: str
    class_type: str
    peak_time: str | None = None
    end_time: str | None = None
    source_location: str | None = None
    active_region: int | None = None
    link: str = ""


@dataclass(frozen=True)
class SatellitePosition:
    """Satellite ground-track position.

    Attributes:
        latitude: Sub-satellite latitude
        longitude: Sub-satellite longitude
        altitude: Altitude in km
        velocity: Velocity in km/h
        visibility: Illumination state (daylight/eclipsed)
        location: Human-readable region description
    """
    latitude: float
    longitude: float
    altitude: float
    velocity: float
    visibility: str = ""
    location: str = "Over the ocean"


@dataclass(frozen=True)
class AuroraChances:
    """Aurora visibility chances (percent) for selected regions."""
    iceland: int
    norway: int
    finland: int
    canada: int
    alaska: int
    hokkaido: int
    japan: int
    scotland: int
    new_zealand: int


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time aggregate of all space-weather readings.

    Attributes:
        timestamp: When the snapshot was assembled (UTC)
        kp: Geomagnetic index reading
        solar_wind: Solar wind plasma reading
        magnetic_field: IMF reading
        xray: X-ray flux reading
        proton: Proton flux reading
        electron: Electron flux reading
        cmes: Recent CME events
        flares: Recent flare events
        satellite: Satellite position (None if unavailable)
        aurora: Aurora visibility chances
        alert_level: Overall severity (normal/warning/severe)
        alert_messages: Human-readable alert lines
    """
    timestamp: datetime
    kp: KpReading
    solar_wind: SolarWind
    magnetic_field: MagneticField
    xray: XrayReading
    proton: ProtonReading
    electron: ElectronReading
    cmes: tuple[CMEEvent, ...] = field(default_factory=tuple)
    flares: tuple[FlareEvent, ...] = field(default_factory=tuple)
    satellite: SatellitePosition | None = None
    aurora: AuroraChances | None = None
    alert_level: str = "normal"
    alert_messages: tuple[str, ...] = field(default_factory=tuple)


# Defaults substituted when an upstream source is unavailable
DEFAULT_KP = 2.0
DEFAULT_SOLAR_WIND = SolarWind(speed=400.0, density=4.0, temperature=100000.0)
DEFAULT_MAGNETIC_FIELD = MagneticField(bx=0.0, by=0.0, bz=0.0, bt=5.0)
DEFAULT_XRAY_FLUX = 1e-7
DEFAULT_PROTON_FLUX = 1.0
DEFAULT_ELECTRON = ElectronReading(flux=10000.0)

# Flare class thresholds in W/m^2, highest first
FLARE_CLASS_THRESHOLDS: tuple[tuple[str, float], ...] = (
    ("X", 1e-4),
    ("M", 1e-5),
    ("C", 1e-6),
    ("B", 1e-7),
)

# S-scale thresholds in pfu, highest first
S_SCALE_THRESHOLDS: tuple[tuple[str, float], ...] = (
    ("S5", 100000.0),
    ("S4", 10000.0),
    ("S3", 1000.0),
    ("S2", 100.0),
    ("S1", 10.0),
)


def classify_kp(kp: float) -> tuple[str, str]:
    """Classify a Kp value into (level, G-scale).

    Pure function.

    Args:
        kp: Kp index value

    Returns:
        Tuple of (activity level, G-scale label)
    """
    if kp >= 9:
        g_scale = "G5"
    elif kp >= 8:
        g_scale = "G4"
    elif kp >= 7:
        g_scale = "G3"
    elif kp >= 6:
        g_scale = "G2"
    elif kp >= 5:
        g_scale = "G1"
    else:
        g_scale = "G0"

    if kp > 6:
        level = "severe"
    elif kp > 4:
        level = "storm"
    elif kp > 2:
        level = "active"
    else:
        level = "quiet"

    return level, g_scale


def classify_flare(flux: float) -> tuple[str, float]:
    """Classify an X-ray flux into (flare class, sub-level).

    Pure function.

    Args:
        flux: X-ray flux in W/m^2

    Returns:
        Tuple of (class letter, sub-level rounded to one decimal).
        Flux below the B threshold is class 'A' with level 0.0.
    """
    for flare_class, base in FLARE_CLASS_THRESHOLDS:
        if flux >= base:
            return flare_class, round(flux / base, 1)
    return "A", 0.0


def classify_radiation(flux: float) -> str:
    """Classify proton flux into an S-scale label.

    Pure function.
    """
    for label, threshold in S_SCALE_THRESHOLDS:
        if flux >= threshold:
            return label
    return "S0"


def make_kp_reading(kp: float, time: str | None = None) -> KpReading:
    """Build a KpReading with derived level and G-scale."""
    level, g_scale = classify_kp(kp)
    return KpReading(kp=kp, level=level, g_scale=g_scale, time=time)


def make_xray_reading(flux: float, time: str | None = None) -> XrayReading:
    """Build an XrayReading with derived flare class."""
    flare_class, flare_level = classify_flare(flux)
    return XrayReading(
        flux=flux,
        flare_class=flare_class,
        flare_level=flare_level,
        time=time,
    )


def make_proton_reading(flux: float, time: str | None = None) -> ProtonReading:
    """Build a ProtonReading with derived S-scale."""
    return ProtonReading(flux=flux, s_scale=classify_radiation(flux), time=time)


def make_satellite_position(
    latitude: float,
    longitude: float,
    altitude: float,
    velocity: float,
    visibility: str = "",
) -> SatellitePosition:
    """Build a SatellitePosition with a derived region description."""
    return SatellitePosition(
        latitude=latitude,
        longitude=longitude,
        altitude=altitude,
        velocity=velocity,
        visibility=visibility,
        location=describe_location(latitude, longitude),
    )


def compute_aurora_chances(kp: float) -> AuroraChances:
    """Estimate aurora visibility chances from Kp.

    Pure function. High-latitude regions are capped from above,
    mid-latitude regions are floored from below.
    """
    base = kp * 15
    return AuroraChances(
        iceland=min(95, round(base + 40)),
        norway=min(90, round(base + 30)),
        finland=min(85, round(base + 20)),
        canada=min(80, round(base + 10)),
        alaska=min(75, round(base + 5)),
        hokkaido=max(5, round(base - 30)),
        japan=max(5, round(base - 30)),
        scotland=max(10, round(base - 20)),
        new_zealand=max(5, round(base - 35)),
    )


def compute_alert_summary(
    kp: KpReading,
    xray: XrayReading,
    proton: ProtonReading,
) -> tuple[str, list[str]]:
    """Derive the overall alert severity and alert message lines.

    Pure function.

    Args:
        kp: Geomagnetic reading
        xray: X-ray reading
        proton: Proton reading

    Returns:
        Tuple of (alert level, list of alert messages)
    """
    level = "normal"
    messages: list[str] = []

    if kp.kp >= 7:
        level = "severe"
        messages.append(f"🔴 Severe geomagnetic storm {kp.g_scale}")
    elif kp.kp >= 5:
        level = "warning"
        messages.append(f"🟠 Geomagnetic storm {kp.g_scale}")

    if xray.flare_class == "X":
        level = "severe"
        messages.append(f"🔴 X-class solar flare {xray.full_class}")
    elif xray.flare_class == "M":
        if level == "normal":
            level = "warning"
        messages.append(f"🟠 M-class solar flare {xray.full_class}")

    if proton.s_scale != "S0":
        if proton.s_scale >= "S3":
            level = "severe"
        elif level == "normal":
            level = "warning"
        messages.append(f"☢️ Radiation storm {proton.s_scale}")

    return level, messages


def build_snapshot(
    timestamp: datetime,
    kp: KpReading | None = None,
    solar_wind: SolarWind | None = None,
    magnetic_field: MagneticField | None = None,
    xray: XrayReading | None = None,
    proton: ProtonReading | None = None,
    electron: ElectronReading | None = None,
    cmes: list[CMEEvent] | None = None,
    flares: list[FlareEvent] | None = None,
    satellite: SatellitePosition | None = None,
) -> Snapshot:
    """Assemble a Snapshot, substituting defaults for missing parts.

    Pure function.

    Args:
        timestamp: Assembly time
        kp..satellite: Sub-records; None means the source was unavailable

    Returns:
        Complete Snapshot with derived severity and aurora chances
    """
    kp = kp or make_kp_reading(DEFAULT_KP)
    xray = xray or make_xray_reading(DEFAULT_XRAY_FLUX)
    proton = proton or make_proton_reading(DEFAULT_PROTON_FLUX)
    alert_level, alert_messages = compute_alert_summary(kp, xray, proton)

    return Snapshot(
        timestamp=timestamp,
        kp=kp,
        solar_wind=solar_wind or DEFAULT_SOLAR_WIND,
        magnetic_field=magnetic_field or DEFAULT_MAGNETIC_FIELD,
        xray=xray,
        proton=proton,
        electron=electron or DEFAULT_ELECTRON,
        cmes=tuple(cmes or ()),
        flares=tuple(flares or ()),
        satellite=satellite,
        aurora=compute_aurora_chances(kp.kp),
        alert_level=alert_level,
        alert_messages=tuple(alert_messages),
    )
