"""Alert cooldown logic - Pure functions.

Each alert topic is either 'armed' (may fire) or 'cooling' (fired within
the cooldown window). The state is coarse-grained per topic, not per
subscriber: one global event notifies every subscriber once.

There is no explicit cooling -> armed transition. A topic is armed again
as soon as the wall clock passes last_fired + window, which is evaluated
lazily on every check.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from orbital.core.subscription import Topic


# Minimum interval between two alerts of the same topic
ALERT_COOLDOWN = timedelta(hours=1)

ARMED = "armed"
COOLING = "cooling"


@dataclass(frozen=True)
class CooldownState:
    """Last successful dispatch time per alert topic.

    Attributes:
        last_fired: Mapping of topic to the time its last alert was dispatched
    """
    last_fired: dict[Topic, datetime] = field(default_factory=dict)


def topic_state(
    state: CooldownState,
    topic: Topic,
    now: datetime,
    window: timedelta = ALERT_COOLDOWN,
) -> str:
    """Return 'armed' or 'cooling' for a topic.

    Pure function.

    Args:
        state: Current cooldown state
        topic: Alert topic
        now: Current time
        window: Cooldown window

    Returns:
        ARMED if the topic may fire, COOLING otherwise
    """
    last = state.last_fired.get(topic)
    if last is None or now - last > window:
        return ARMED
    return COOLING


def is_armed(
    state: CooldownState,
    topic: Topic,
    now: datetime,
    window: timedelta = ALERT_COOLDOWN,
) -> bool:
    """Check whether a topic may fire now.

    Pure function.
    """
    return topic_state(state, topic, now, window) == ARMED


def record_fired(
    state: CooldownState,
    topic: Topic,
    now: datetime,
) -> CooldownState:
    """Record a dispatched alert and return updated state.

    Pure function - returns new state without modifying input.

    Args:
        state: Current cooldown state
        topic: Topic that fired
        now: Dispatch time

    Returns:
        New state with the topic's last-fired time set to now
    """
    last_fired = dict(state.last_fired)
    last_fired[topic] = now
    return CooldownState(last_fired=last_fired)


def remaining_cooldown(
    state: CooldownState,
    topic: Topic,
    now: datetime,
    window: timedelta = ALERT_COOLDOWN,
) -> timedelta:
    """Time left until a cooling topic is armed again.

    Pure function. Returns zero for armed topics.
    """
    last = state.last_fired.get(topic)
    if last is None:
        return timedelta(0)
    return max(timedelta(0), last + window - now)
