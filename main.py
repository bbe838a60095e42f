"""Cloud Function Entry Point - Root Module.

This is the root-level entry point for Google Cloud Functions.
It imports from the orbital package.
"""

from orbital.main import (
    alert_check_tick,
    recording_tick,
    scheduled_delivery_tick,
    tick_pubsub,
)

__all__ = [
    "alert_check_tick",
    "recording_tick",
    "scheduled_delivery_tick",
    "tick_pubsub",
]
