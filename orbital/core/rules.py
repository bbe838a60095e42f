"""Alert threshold rules - Pure functions.

This module decides, per alert topic, whether the current snapshot crosses
the topic's threshold and whether the topic is armed. Topics are evaluated
independently; more than one may fire in the same pass.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from orbital.core.cooldown import ALERT_COOLDOWN, CooldownState, is_armed
from orbital.core.dedup import filter_already_alerted
from orbital.core.snapshot import CMEEvent, Snapshot
from orbital.core.subscription import ALERT_TOPICS, Topic


# Kp value at or above which the geomagnetic alert fires (G1 storm)
GEOMAGNETIC_KP_THRESHOLD = 5.0

# Flare class letter that triggers the flare alert
FLARE_ALERT_CLASS = "X"


@dataclass(frozen=True)
class AlertDecision:
    """Result of evaluating one topic against a snapshot.

    Attributes:
        topic: Alert topic
        crossed: Whether the threshold condition holds
        armed: Whether the cooldown has elapsed
        cme_events: Earth-directed CME events that triggered a CME alert
    """
    topic: Topic
    crossed: bool
    armed: bool
    cme_events: tuple[CMEEvent, ...] = field(default_factory=tuple)

    @property
    def should_fire(self) -> bool:
        """Returns True if the threshold holds and the topic is armed."""
        return self.crossed and self.armed


def geomagnetic_threshold_crossed(snapshot: Snapshot) -> bool:
    """Check the geomagnetic alert condition (Kp >= 5).

    Pure function.
    """
    return snapshot.kp.kp >= GEOMAGNETIC_KP_THRESHOLD


def flare_threshold_crossed(snapshot: Snapshot) -> bool:
    """Check the flare alert condition (current class is X).

    Pure function.
    """
    return snapshot.xray.flare_class == FLARE_ALERT_CLASS


def new_earth_directed_cmes(
    snapshot: Snapshot,
    alerted_cme_ids: set[str],
) -> list[CMEEvent]:
    """Find newly observed CME events that are Earth-directed.

    Pure function.

    Only events whose upstream model explicitly reports Earth impact
    count. Events with unknown direction never trigger an alert.

    Args:
        snapshot: Current snapshot
        alerted_cme_ids: Activity IDs already alerted on

    Returns:
        Earth-directed events not yet alerted
    """
    earth_directed = [e for e in snapshot.cmes if e.earth_directed is True]
    return filter_already_alerted(earth_directed, alerted_cme_ids)


def evaluate_topic(
    topic: Topic,
    snapshot: Snapshot,
    cooldown: CooldownState,
    now: datetime,
    alerted_cme_ids: set[str] | None = None,
    window: timedelta = ALERT_COOLDOWN,
) -> AlertDecision:
    """Evaluate a single alert topic.

    Pure function.

    Args:
        topic: Alert topic to evaluate
        snapshot: Current snapshot
        cooldown: Current cooldown state
        now: Current time
        alerted_cme_ids: CME activity IDs already alerted on
        window: Cooldown window

    Returns:
        AlertDecision for the topic

    Raises:
        ValueError: If topic is not an alert topic
    """
    armed = is_armed(cooldown, topic, now, window)

    if topic == Topic.GEOMAGNETIC_ALERT:
        return AlertDecision(topic, geomagnetic_threshold_crossed(snapshot), armed)

    if topic == Topic.FLARE_ALERT:
        return AlertDecision(topic, flare_threshold_crossed(snapshot), armed)

    if topic == Topic.CME_ALERT:
        events = new_earth_directed_cmes(snapshot, alerted_cme_ids or set())
        return AlertDecision(topic, bool(events), armed, tuple(events))

    raise ValueError(f"Not an alert topic: {topic}")


def make_alert_decisions(
    snapshot: Snapshot,
    cooldown: CooldownState,
    now: datetime,
    alerted_cme_ids: set[str] | None = None,
    window: timedelta = ALERT_COOLDOWN,
) -> list[AlertDecision]:
    """Evaluate every alert topic.

    Pure function.

    Returns:
        One decision per alert topic, in a fixed order
    """
    return [
        evaluate_topic(topic, snapshot, cooldown, now, alerted_cme_ids, window)
        for topic in ALERT_TOPICS
    ]
