"""CME deduplication logic - Pure functions.

The CME alert fires for newly observed events only. These functions decide
which CME events have already been alerted on. The set of alerted IDs is
held by the alert evaluator; this module only contains the pure logic.
"""

from orbital.core.snapshot import CMEEvent


def get_cme_ids(events: list[CMEEvent]) -> set[str]:
    """Extract activity IDs from a list of CME events.

    Pure function.
    """
    return {e.activity_id for e in events}


def filter_already_alerted(
    events: list[CMEEvent],
    already_alerted_ids: set[str],
) -> list[CMEEvent]:
    """Filter out CME events that have already been alerted.

    Pure function.

    Args:
        events: CME events to filter
        already_alerted_ids: Activity IDs that have already been alerted

    Returns:
        Events that haven't been alerted yet
    """
    return [e for e in events if e.activity_id not in already_alerted_ids]


def compute_ids_to_expire(
    stored_ids: set[str],
    current_ids: set[str],
) -> set[str]:
    """Compute which stored IDs can be forgotten.

    Pure function.

    IDs still present in the upstream window must be kept to prevent
    re-alerting; anything that has dropped out of the window can go.

    Args:
        stored_ids: Currently remembered activity IDs
        current_ids: Activity IDs in the latest snapshot

    Returns:
        Set of IDs that can be removed
    """
    return stored_ids - current_ids
