"""Message formatting - Pure functions.

This module formats snapshots, alerts and subscription listings into chat
message segments. All functions are pure with no side effects.

A message segment is a LINE message object (``{"type": "text", ...}``).
The channel accepts at most MAX_SEGMENTS segments per push or reply.
"""

from datetime import datetime
from typing import Any

from orbital.core.snapshot import CMEEvent, Snapshot
from orbital.core.subscription import Subscription, Topic


# Channel-side batch limit per push/reply call
MAX_SEGMENTS = 5

# Characters of the first segment kept in delivery records
PREVIEW_LENGTH = 50

DIVIDER = "━━━━━━━━━━━━━━━━"


def text_message(text: str) -> dict[str, Any]:
    """Wrap plain text as a message segment.

    Pure function.
    """
    return {"type": "text", "text": text}


def as_segments(messages: str | dict[str, Any] | list[Any]) -> list[dict[str, Any]]:
    """Normalize text, a single segment or a list into a segment list.

    Pure function.
    """
    if isinstance(messages, str):
        return [text_message(messages)]
    if isinstance(messages, dict):
        return [messages]
    return [text_message(m) if isinstance(m, str) else m for m in messages]


def truncate_segments(
    segments: list[dict[str, Any]],
    limit: int = MAX_SEGMENTS,
) -> list[dict[str, Any]]:
    """Keep at most `limit` segments; the rest are dropped.

    Pure function.
    """
    return list(segments[:limit])


def message_preview(
    segments: list[dict[str, Any]],
    length: int = PREVIEW_LENGTH,
) -> str:
    """Short preview of the first segment for audit records.

    Pure function.
    """
    if not segments:
        return ""
    first = segments[0]
    text = first.get("text")
    if text:
        return text[:length]
    return first.get("altText", "FlexMessage")[:length]


def redact_subscriber_id(subscriber_id: str, keep: int = 10) -> str:
    """Truncate a subscriber ID for storage in audit logs.

    Pure function.
    """
    if len(subscriber_id) <= keep:
        return subscriber_id
    return subscriber_id[:keep] + "..."


def get_kp_emoji(kp: float) -> str:
    """Get an emoji representing geomagnetic activity.

    Pure function.
    """
    if kp <= 2:
        return "🟢"
    elif kp <= 4:
        return "🟡"
    elif kp <= 6:
        return "🟠"
    else:
        return "🔴"


def get_kp_status(kp: float) -> str:
    """Get a human-readable geomagnetic status label.

    Pure function.
    """
    if kp <= 2:
        return "Quiet"
    elif kp <= 4:
        return "Active"
    elif kp <= 6:
        return "Storm"
    else:
        return "Severe"


def _satellite_lines(snapshot: Snapshot) -> list[str]:
    sat = snapshot.satellite
    if sat is None:
        return ["📍 Position unavailable"]
    return [
        f"📍 {sat.location}",
        f"🌐 {sat.latitude:.2f}°, {sat.longitude:.2f}°",
        f"📡 Altitude: {round(sat.altitude)} km",
    ]


def format_report(snapshot: Snapshot, local_time: datetime) -> str:
    """Format the full space weather report.

    Pure function.

    Args:
        snapshot: Snapshot to report
        local_time: Time shown as 'updated at', already in local zone

    Returns:
        Report text
    """
    kp = snapshot.kp
    lines = [
        "🛰️ Space Weather Report",
        DIVIDER,
        "",
        "🌌 Aurora forecast",
        f"{get_kp_emoji(kp.kp)} Kp index: {kp.kp:.1f} ({get_kp_status(kp.kp)})",
        f"📊 Geomagnetic scale: {kp.g_scale}",
    ]

    if snapshot.aurora is not None:
        lines.extend([
            "",
            "🌍 Aurora visibility",
            f"🇮🇸 Iceland: {snapshot.aurora.iceland}%",
            f"🇳🇴 Norway: {snapshot.aurora.norway}%",
            f"🇫🇮 Finland: {snapshot.aurora.finland}%",
            f"🇯🇵 Hokkaido: {snapshot.aurora.hokkaido}%",
        ])

    lines.extend([
        "",
        DIVIDER,
        "",
        "☀️ Solar activity",
        f"🔥 Flare class: {snapshot.xray.full_class}",
        f"💨 Solar wind: {round(snapshot.solar_wind.speed)} km/s",
        f"🧲 IMF Bz: {snapshot.magnetic_field.bz:.1f} nT",
        f"☢️ Radiation: {snapshot.proton.s_scale}",
        "",
        DIVIDER,
        "",
        "🚀 Space station",
        *_satellite_lines(snapshot),
    ])

    if snapshot.alert_messages:
        lines.extend(["", DIVIDER, "", "⚠️ Active alerts", *snapshot.alert_messages])

    lines.extend([
        "",
        f"⏰ Updated: {local_time.strftime('%Y-%m-%d %H:%M')}",
    ])
    return "\n".join(lines)


def format_aurora(snapshot: Snapshot) -> str:
    """Format the aurora forecast.

    Pure function.
    """
    kp = snapshot.kp
    lines = [
        "🌌 Aurora forecast",
        DIVIDER,
        f"{get_kp_emoji(kp.kp)} Kp index: {kp.kp:.1f} ({get_kp_status(kp.kp)})",
        f"📊 Geomagnetic scale: {kp.g_scale}",
    ]
    if snapshot.aurora is not None:
        a = snapshot.aurora
        lines.extend([
            "",
            f"🇮🇸 Iceland: {a.iceland}%",
            f"🇳🇴 Norway: {a.norway}%",
            f"🇫🇮 Finland: {a.finland}%",
            f"🇨🇦 Canada: {a.canada}%",
            f"🇺🇸 Alaska: {a.alaska}%",
            f"🏴 Scotland: {a.scotland}%",
            f"🇯🇵 Hokkaido: {a.hokkaido}%",
            f"🇯🇵 Japan: {a.japan}%",
            f"🇳🇿 New Zealand: {a.new_zealand}%",
        ])
    return "\n".join(lines)


def format_solar(snapshot: Snapshot) -> str:
    """Format solar wind, IMF, X-ray and radiation readings.

    Pure function.
    """
    wind = snapshot.solar_wind
    imf = snapshot.magnetic_field
    return "\n".join([
        "☀️ Solar wind",
        DIVIDER,
        f"💨 Speed: {round(wind.speed)} km/s",
        f"📊 Density: {wind.density:.1f} p/cm³",
        f"🌡️ Temperature: {wind.temperature / 1000:.0f}K",
        "",
        "🧲 Interplanetary magnetic field",
        f"Bz: {imf.bz:.1f} nT",
        f"Bt: {imf.bt:.1f} nT",
        "",
        f"🔥 Flare class: {snapshot.xray.full_class}",
        f"X-ray flux: {snapshot.xray.flux:.2e} W/m²",
        f"☢️ Proton flux: {snapshot.proton.flux:.1f} pfu ({snapshot.proton.s_scale})",
    ])


def format_satellite(snapshot: Snapshot) -> str:
    """Format the space station position.

    Pure function.
    """
    sat = snapshot.satellite
    if sat is None:
        return "🚀 Space station data is temporarily unavailable"
    return "\n".join([
        "🚀 Space station position",
        DIVIDER,
        f"📍 {sat.location}",
        f"Latitude: {sat.latitude:.4f}°",
        f"Longitude: {sat.longitude:.4f}°",
        f"Altitude: {round(sat.altitude)} km",
        f"Velocity: {round(sat.velocity):,} km/h",
    ])


def format_cme_list(snapshot: Snapshot, limit: int = 5) -> str:
    """Format the most recent CME events.

    Pure function.
    """
    if not snapshot.cmes:
        return "🌋 No CME events detected in the past 7 days"

    lines = ["🌋 Recent coronal mass ejections", DIVIDER]
    for cme in snapshot.cmes[-limit:]:
        lines.append("")
        lines.append(f"📅 {cme.time}")
        lines.append(f"💨 Speed: {round(cme.speed)} km/s")
        lines.append(f"📐 Type: {cme.cme_type}")
        if cme.earth_directed:
            lines.append("🌍 Earth-directed")
    return "\n".join(lines)


def format_geomagnetic_alert(snapshot: Snapshot) -> list[dict[str, Any]]:
    """Format the geomagnetic (aurora) alert segments.

    Pure function.
    """
    header = "\n".join([
        "🌌 ⚠️ Aurora alert!",
        "",
        f"Kp index has reached {snapshot.kp.kp:.1f}",
        f"Geomagnetic storm scale: {snapshot.kp.g_scale}",
    ])
    return [text_message(header), text_message(format_aurora(snapshot))]


def format_flare_alert(snapshot: Snapshot) -> list[dict[str, Any]]:
    """Format the X-class flare alert segments.

    Pure function.
    """
    return [text_message("\n".join([
        "🔥 ⚠️ X-class solar flare alert!",
        "",
        f"Detected a {snapshot.xray.full_class} solar flare",
        f"X-ray flux: {snapshot.xray.flux:.2e} W/m²",
        "",
        "Possible effects:",
        "• HF radio blackouts",
        "• Degraded GPS accuracy",
        "• Satellite communication interference",
    ]))]


def format_cme_alert(events: list[CMEEvent]) -> list[dict[str, Any]]:
    """Format the Earth-directed CME alert segments.

    Pure function.
    """
    lines = ["🌋 ⚠️ Earth-directed CME alert!", ""]
    for event in events:
        lines.append(f"📅 {event.time}  💨 {round(event.speed)} km/s  📐 {event.cme_type}")
    lines.extend(["", "Geomagnetic activity may increase in 1-3 days"])
    return [text_message("\n".join(lines))]


def format_alert(
    topic: Topic,
    snapshot: Snapshot,
    cme_events: list[CMEEvent] | None = None,
) -> list[dict[str, Any]]:
    """Format the alert segments for a topic.

    Pure function.
    """
    if topic == Topic.GEOMAGNETIC_ALERT:
        return format_geomagnetic_alert(snapshot)
    if topic == Topic.FLARE_ALERT:
        return format_flare_alert(snapshot)
    if topic == Topic.CME_ALERT:
        return format_cme_alert(list(cme_events or []))
    raise ValueError(f"Not an alert topic: {topic}")


def format_subscription_list(subscriptions: list[Subscription]) -> str:
    """Format a subscriber's active subscriptions.

    Pure function.
    """
    if not subscriptions:
        return "📭 You have no active subscriptions\n\nSend 'subscribe' to see options"

    lines = ["📬 Your subscriptions", DIVIDER]
    for sub in subscriptions:
        if sub.schedule:
            lines.append(f"✅ {sub.display_name} ({sub.schedule})")
        else:
            lines.append(f"✅ {sub.display_name}")
    lines.extend(["", "Send 'unsubscribe' to cancel all"])
    return "\n".join(lines)


def format_subscription_menu() -> str:
    """List the available subscription commands.

    Pure function.
    """
    return "\n".join([
        "🔔 Subscriptions",
        DIVIDER,
        "subscribe daily 08:00 - daily report at 08:00",
        "subscribe aurora - Kp >= 5 alert",
        "subscribe flare - X-class flare alert",
        "subscribe cme - Earth-directed CME alert",
        "unsubscribe <topic> - cancel one topic",
        "unsubscribe all - cancel everything",
        "my subscriptions - list what you follow",
    ])


def format_main_menu() -> str:
    """List the available commands.

    Pure function.
    """
    return "\n".join([
        "🛰️ Orbital Command",
        DIVIDER,
        "report - full space weather report",
        "aurora - aurora forecast",
        "solar - solar wind and flares",
        "iss - space station position",
        "cme - recent CMEs",
        "subscribe - notification options",
    ])


def format_welcome() -> str:
    """Greeting pushed to new followers.

    Pure function.
    """
    return "\n".join([
        "🛰️ Welcome to Orbital Command!",
        "",
        "🌌 Aurora forecasts",
        "☀️ Solar activity monitoring",
        "🚀 Space station tracking",
        "⚠️ Space weather alerts",
        "",
        "Send 'menu' to get started.",
    ])
