"""Unit tests for chat command parsing.

Pure function tests - fast, no mocks needed.
"""

import pytest

from orbital.core.commands import Command, Intent, parse_command
from orbital.core.subscription import Topic


class TestParseCommand:
    """Tests for parse_command()."""

    @pytest.mark.parametrize("text,intent", [
        ("report", Intent.REPORT),
        ("Space Weather", Intent.REPORT),
        ("aurora", Intent.AURORA),
        ("KP", Intent.AURORA),
        ("solar  wind", Intent.SOLAR),
        ("iss", Intent.SATELLITE),
        ("cme", Intent.CME_LIST),
        ("subscribe", Intent.SUBSCRIPTION_MENU),
        ("my subscriptions", Intent.LIST_SUBSCRIPTIONS),
        ("help", Intent.MENU),
    ])
    def test_keywords(self, text, intent):
        assert parse_command(text).intent == intent

    def test_unknown_text_maps_to_menu(self):
        assert parse_command("what's up?") == Command(Intent.MENU)

    def test_subscribe_daily_with_time(self):
        command = parse_command("subscribe daily 20:00")
        assert command == Command(Intent.SUBSCRIBE, topic=Topic.DAILY_REPORT, schedule="20:00")

    def test_subscribe_alert_without_time(self):
        command = parse_command("Subscribe aurora")
        assert command == Command(Intent.SUBSCRIBE, topic=Topic.GEOMAGNETIC_ALERT)

    def test_subscribe_by_topic_value(self):
        assert parse_command("subscribe cme-alert").topic == Topic.CME_ALERT

    def test_subscribe_unknown_topic_shows_menu(self):
        assert parse_command("subscribe weather").intent == Intent.SUBSCRIPTION_MENU

    def test_unsubscribe_one_topic(self):
        assert parse_command("unsubscribe flare") == Command(Intent.UNSUBSCRIBE, topic=Topic.FLARE_ALERT)

    def test_unsubscribe_all(self):
        assert parse_command("unsubscribe") == Command(Intent.UNSUBSCRIBE)

    def test_unsubscribe_all_keyword(self):
        assert parse_command("Unsubscribe ALL") == Command(Intent.UNSUBSCRIBE)

    def test_unsubscribe_unknown_topic_shows_menu(self):
        """An unrecognised topic must never widen to every topic."""
        assert parse_command("unsubscribe iss") == Command(Intent.SUBSCRIPTION_MENU)

    def test_unsubscribe_must_be_whole_word(self):
        assert parse_command("unsubscribed").intent == Intent.MENU
        assert parse_command("unsubscribeflare").intent == Intent.MENU

    def test_subscribe_must_be_whole_word(self):
        assert parse_command("subscribers daily").intent == Intent.MENU

    def test_subscribe_daily_off_the_hour(self):
        command = parse_command("subscribe daily 08:30")
        assert command == Command(Intent.INVALID_SCHEDULE, topic=Topic.DAILY_REPORT, schedule="08:30")

    def test_subscribe_alert_ignores_time(self):
        command = parse_command("subscribe flare 08:30")
        assert command.intent == Intent.SUBSCRIBE
