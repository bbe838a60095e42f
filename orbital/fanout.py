"""Notification Fan-out - delivers one message to many subscribers.

Pushes are sent sequentially in subscriber order with a fixed pause
between consecutive pushes to stay inside channel rate limits. A failure
for one subscriber never stops delivery to the rest, and every attempt
leaves a DeliveryRecord in the history log.
"""

import logging
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from orbital.core.formatter import (
    as_segments,
    message_preview,
    redact_subscriber_id,
    truncate_segments,
)
from orbital.core.subscription import Subscriber
from orbital.shell.line_client import LineClient


logger = logging.getLogger(__name__)


DEFAULT_PACING_MS = 100


@dataclass
class DeliveryRecord:
    """Audit record of one push attempt.

    Attributes:
        recipient: Redacted subscriber ID
        topic: Topic or message kind ('broadcast', 'test', ...)
        success: Whether the push was accepted
        preview: First characters of the message
        attempted_at: Time of the attempt (UTC)
        error: Error message if failed
    """
    recipient: str
    topic: str
    success: bool
    preview: str
    attempted_at: datetime
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DeliveryResult:
    """Outcome of a fan-out.

    Attributes:
        sent: Number of accepted pushes
        total: Number of subscribers attempted
        delivered: Subscriber IDs whose push succeeded
        failed: Subscriber IDs whose push failed
    """
    sent: int
    total: int
    delivered: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class NotificationFanout:
    """Sequential, paced push to a list of subscribers."""

    def __init__(
        self,
        line_client: LineClient,
        history_log: Any,
        pacing_ms: int = DEFAULT_PACING_MS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize fan-out.

        Args:
            line_client: Push client
            history_log: Sink for delivery records
            pacing_ms: Pause between consecutive pushes
            sleep: Sleep function (injectable for tests)
            clock: Returns the current UTC time
        """
        self.line_client = line_client
        self.history_log = history_log
        self.pacing_seconds = pacing_ms / 1000
        self.sleep = sleep
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _push_one(
        self,
        subscriber_id: str,
        segments: list[dict[str, Any]],
    ) -> tuple[bool, str | None]:
        try:
            response = self.line_client.push(subscriber_id, segments)
        except Exception as e:
            logger.exception("Push to %s raised", redact_subscriber_id(subscriber_id))
            return False, str(e)
        return response.success, response.error

    def _record(self, record: DeliveryRecord) -> None:
        try:
            self.history_log.append_delivery(record.to_dict())
        except Exception as e:
            logger.error("Failed to store delivery record: %s", str(e))

    def deliver(
        self,
        subscribers: list[Subscriber] | list[str],
        messages: str | dict[str, Any] | list[Any],
        topic: str,
    ) -> DeliveryResult:
        """Push the same message to every subscriber.

        Never raises.

        Args:
            subscribers: Delivery targets, in delivery order
            messages: Text, a message segment, or a list of either
            topic: Topic value recorded with each attempt

        Returns:
            DeliveryResult with sent/total counts
        """
        segments = truncate_segments(as_segments(messages))
        preview = message_preview(segments)
        result = DeliveryResult(sent=0, total=len(subscribers))

        for index, subscriber in enumerate(subscribers):
            subscriber_id = subscriber if isinstance(subscriber, str) else subscriber.subscriber_id

            if index > 0 and self.pacing_seconds > 0:
                self.sleep(self.pacing_seconds)

            success, error = self._push_one(subscriber_id, segments)
            if success:
                result.sent += 1
                result.delivered.append(subscriber_id)
            else:
                result.failed.append(subscriber_id)

            self._record(DeliveryRecord(
                recipient=redact_subscriber_id(subscriber_id),
                topic=topic,
                success=success,
                preview=preview,
                attempted_at=self.clock(),
                error=error,
            ))

        logger.info(
            "Delivered %s to %d/%d subscribers",
            topic,
            result.sent,
            result.total,
        )
        return result
