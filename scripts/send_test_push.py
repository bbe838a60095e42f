#!/usr/bin/env python3
"""Send a test message to one LINE user, or preview a synthetic alert.

⚠️  WARNING: Without --dry-run this script pushes a REAL message.

The report and alert texts are rendered from a live snapshot with the
same formatting as production. A [TEST] marker is added.

Usage:
    # Preview the report and all alert texts, no sends
    python scripts/send_test_push.py --dry-run

    # Push the full report to a user
    python scripts/send_test_push.py --user U1234567890abcdef

    # Push a synthetic flare alert to a user
    python scripts/send_test_push.py --user U1234567890abcdef --alert flare-alert

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml)
    LINE_CHANNEL_ACCESS_TOKEN: Channel token when no config file is used
"""

import argparse
import logging
import os
import sys
from dataclasses import replace
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from orbital.core.formatter import as_segments, format_alert, format_report
from orbital.core.snapshot import CMEEvent, Snapshot, make_kp_reading, make_xray_reading
from orbital.core.subscription import ALERT_TOPICS, Topic, parse_topic
from orbital.shell.aggregator import SnapshotAggregator
from orbital.shell.config_loader import load_config
from orbital.shell.line_client import LineClient

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def make_alert_snapshot(snapshot: Snapshot) -> Snapshot:
    """Raise Kp and X-ray flux so every alert text has something to show."""
    return replace(
        snapshot,
        kp=make_kp_reading(7.3, time=snapshot.kp.time),
        xray=make_xray_reading(2.5e-4, time=snapshot.xray.time),
    )


def synthetic_cme() -> CMEEvent:
    return CMEEvent(
        activity_id="TEST-CME-001",
        time=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%MZ"),
        speed=1450.0,
        cme_type="O",
        earth_directed=True,
    )


def add_test_marker(segments: list[dict]) -> list[dict]:
    if segments and segments[0].get("type") == "text":
        segments[0] = {**segments[0], "text": "[TEST] " + segments[0]["text"]}
    return segments


def render(topic: Topic | None, snapshot: Snapshot, zone: ZoneInfo) -> list[dict]:
    if topic is None:
        return as_segments(format_report(snapshot, datetime.now(zone)))
    return format_alert(topic, make_alert_snapshot(snapshot), [synthetic_cme()])


def main():
    parser = argparse.ArgumentParser(
        description="Send a test push to one LINE user",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--user",
        help="LINE user ID to push to",
    )
    parser.add_argument(
        "--alert",
        choices=[t.value for t in ALERT_TOPICS],
        help="Send a synthetic alert instead of the report",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview messages without sending",
    )
    args = parser.parse_args()

    if not args.dry_run and not args.user:
        parser.error("--user is required unless --dry-run is given")

    config = load_config()
    zone = ZoneInfo(config.timezone)

    logger.info("Fetching current snapshot...")
    snapshot = SnapshotAggregator().fetch()

    topics = [parse_topic(args.alert)] if args.alert else [None]
    if args.dry_run and not args.alert:
        topics = [None, *ALERT_TOPICS]

    if args.dry_run:
        for topic in topics:
            label = topic.value if topic else "daily-report"
            print(f"\n===== {label} =====")
            for segment in add_test_marker(render(topic, snapshot, zone)):
                print(segment.get("text", segment))
        return 0

    client = LineClient(config.line.channel_access_token)
    segments = add_test_marker(render(topics[0], snapshot, zone))
    response = client.push(args.user, segments)

    if response.success:
        logger.info("Test message sent")
        return 0

    logger.error("Test message failed: %s", response.error)
    return 1


if __name__ == "__main__":
    sys.exit(main())
