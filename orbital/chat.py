"""Chat webhook handling.

Turns LINE webhook events into subscription changes and replies:

- follow: push the welcome message
- unfollow: deactivate every subscription of the user
- text message: parse a command and reply
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable
from zoneinfo import ZoneInfo

from orbital.core.commands import Command, Intent, parse_command
from orbital.core.formatter import (
    format_aurora,
    format_cme_list,
    format_main_menu,
    format_report,
    format_satellite,
    format_solar,
    format_subscription_list,
    format_subscription_menu,
    format_welcome,
)
from orbital.core.snapshot import Snapshot
from orbital.shell.line_client import LineClient
from orbital.shell.reading_cache import ReadingCache
from orbital.shell.subscription_store import SubscriptionStore


logger = logging.getLogger(__name__)


UNAVAILABLE_MESSAGE = "⚠️ Space weather data is temporarily unavailable, please try again later"

SNAPSHOT_INTENTS = {
    Intent.REPORT,
    Intent.AURORA,
    Intent.SOLAR,
    Intent.SATELLITE,
    Intent.CME_LIST,
}


@dataclass
class ChatResult:
    """Result of handling a batch of webhook events.

    Attributes:
        handled: Events acted on
        ignored: Events of unsupported types
        errors: Errors that occurred
    """
    handled: int = 0
    ignored: int = 0
    errors: list[str] = field(default_factory=list)


class ChatHandler:
    """Handles webhook events from the chat channel."""

    def __init__(
        self,
        cache: ReadingCache,
        store: SubscriptionStore,
        line_client: LineClient,
        timezone_name: str = "Asia/Taipei",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.cache = cache
        self.store = store
        self.line_client = line_client
        self.zone = ZoneInfo(timezone_name)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _snapshot(self) -> Snapshot | None:
        cached = self.cache.get()
        if cached.success:
            return cached.snapshot
        return cached.stale

    def render_snapshot(self, intent: Intent, snapshot: Snapshot) -> str:
        if intent == Intent.REPORT:
            return format_report(snapshot, self.clock().astimezone(self.zone))
        if intent == Intent.AURORA:
            return format_aurora(snapshot)
        if intent == Intent.SOLAR:
            return format_solar(snapshot)
        if intent == Intent.SATELLITE:
            return format_satellite(snapshot)
        return format_cme_list(snapshot)

    def respond(self, user_id: str, command: Command) -> str:
        """Build the reply text for a parsed command."""
        if command.intent in SNAPSHOT_INTENTS:
            snapshot = self._snapshot()
            if snapshot is None:
                return UNAVAILABLE_MESSAGE
            return self.render_snapshot(command.intent, snapshot)

        if command.intent == Intent.SUBSCRIBE:
            result = self.store.subscribe(user_id, command.topic, schedule=command.schedule)
            if not result.success:
                return "⚠️ Subscription failed, please try again later"
            record = result.subscriptions[0]
            if record.schedule:
                return f"✅ Subscribed to {record.display_name}\n⏰ Delivery time: {record.schedule}"
            return f"✅ Subscribed to {record.display_name}"

        if command.intent == Intent.INVALID_SCHEDULE:
            return (
                f"⚠️ {command.schedule} is not a valid delivery time\n"
                "Reports go out on the hour, e.g. 'subscribe daily 20:00'"
            )

        if command.intent == Intent.UNSUBSCRIBE:
            result = self.store.unsubscribe(user_id, command.topic)
            if not result.success:
                return "⚠️ Unsubscribe failed, please try again later"
            if not result.subscriptions:
                return "📭 No matching active subscriptions"
            names = "\n".join(f"❌ {s.display_name}" for s in result.subscriptions)
            return f"Unsubscribed:\n{names}"

        if command.intent == Intent.LIST_SUBSCRIPTIONS:
            return format_subscription_list(self.store.list_active(user_id))

        if command.intent == Intent.SUBSCRIPTION_MENU:
            return format_subscription_menu()

        return format_main_menu()

    def handle_event(self, event: dict[str, Any]) -> bool:
        """Handle one webhook event.

        Returns:
            True if the event type is supported
        """
        event_type = event.get("type")
        user_id = (event.get("source") or {}).get("userId")

        if event_type == "follow" and user_id:
            logger.info("New follower %s", user_id[:10])
            self.line_client.push(user_id, format_welcome())
            return True

        if event_type == "unfollow" and user_id:
            logger.info("Follower left %s", user_id[:10])
            self.store.unsubscribe(user_id)
            return True

        message = event.get("message") or {}
        if event_type == "message" and message.get("type") == "text" and user_id:
            command = parse_command(message.get("text", ""))
            reply = self.respond(user_id, command)
            self.line_client.reply(event.get("replyToken", ""), reply)
            return True

        return False

    def handle_events(self, events: list[dict[str, Any]]) -> ChatResult:
        """Handle a webhook batch; one failing event does not stop the rest."""
        result = ChatResult()
        for event in events:
            try:
                if self.handle_event(event):
                    result.handled += 1
                else:
                    result.ignored += 1
            except Exception as e:
                logger.exception("Failed to handle %s event", event.get("type"))
                result.errors.append(str(e))
        return result
