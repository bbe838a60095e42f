"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Snapshot models and classification (Kp, flare class, S-scale)
- Subscription lifecycle (upsert, soft delete)
- Alert cooldown and threshold rules
- Scheduled delivery timing
- Message formatting and chat command parsing

All functions here are deterministic and have no I/O.
"""

from orbital.core.snapshot import Snapshot, build_snapshot, classify_flare, classify_kp
from orbital.core.subscription import Subscription, Subscriber, Topic, apply_subscribe, apply_unsubscribe
from orbital.core.cooldown import CooldownState, is_armed, record_fired
from orbital.core.rules import AlertDecision, make_alert_decisions
from orbital.core.delivery_time import due_subscribers, hour_label, is_hour_boundary
from orbital.core.commands import Command, Intent, parse_command

__all__ = [
    # Snapshot
    "Snapshot",
    "build_snapshot",
    "classify_flare",
    "classify_kp",
    # Subscription
    "Subscription",
    "Subscriber",
    "Topic",
    "apply_subscribe",
    "apply_unsubscribe",
    # Cooldown
    "CooldownState",
    "is_armed",
    "record_fired",
    # Rules
    "AlertDecision",
    "make_alert_decisions",
    # Delivery time
    "due_subscribers",
    "hour_label",
    "is_hour_boundary",
    # Commands
    "Command",
    "Intent",
    "parse_command",
]
