"""Tests for the Configuration Loader module.

Tests configuration loading from YAML files and environment variables.
"""

import os
import pytest
from unittest.mock import Mock, patch

from orbital.shell.config_loader import (
    _get_secret_manager_client,
    _parse_schedule,
    _parse_storage,
    _resolve_value,
    load_config,
    load_config_from_dict,
    load_config_from_env,
)


class TestResolveValue:
    """Tests for _resolve_value function."""

    def test_returns_non_string_unchanged(self):
        """Non-string values are returned unchanged."""
        assert _resolve_value(123) == 123
        assert _resolve_value(None) is None

    def test_returns_plain_string_unchanged(self):
        assert _resolve_value("hello") == "hello"

    def test_resolves_env_var_placeholder(self):
        with patch.dict(os.environ, {"TEST_VAR": "test_value"}):
            assert _resolve_value("${TEST_VAR}") == "test_value"

    def test_returns_placeholder_if_env_var_not_set(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _resolve_value("${UNDEFINED_VAR}") == "${UNDEFINED_VAR}"

    def test_uses_secret_client_when_provided(self):
        mock_client = Mock()
        mock_client.resolve.return_value = "secret_value"

        result = _resolve_value("${secret:my-secret}", mock_client)

        mock_client.resolve.assert_called_once_with("${secret:my-secret}")
        assert result == "secret_value"

    def test_ignores_secret_placeholder_without_client(self):
        assert _resolve_value("${secret:my-secret}", None) == "${secret:my-secret}"


class TestGetSecretManagerClient:
    """Tests for _get_secret_manager_client function."""

    def test_none_without_project(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _get_secret_manager_client() is None

    def test_uses_gcp_project(self):
        with patch.dict(os.environ, {"GCP_PROJECT": "demo"}, clear=True):
            client = _get_secret_manager_client()
            assert client.config.project_id == "demo"


class TestParseSections:
    """Tests for the section parsers."""

    def test_storage_defaults(self):
        storage = _parse_storage({})
        assert storage.backend == "firestore"
        assert storage.subscriptions_collection == "subscriptions"

    def test_storage_overrides(self):
        storage = _parse_storage({"backend": "memory", "history_prefix": "h_"})
        assert storage.backend == "memory"
        assert storage.history_prefix == "h_"

    def test_schedule_converts_to_int(self):
        schedule = _parse_schedule({"alert_tick_seconds": "120"})
        assert schedule.alert_tick_seconds == 120


class TestLoadConfigFromDict:
    """Tests for load_config_from_dict function."""

    def test_full_document(self):
        data = {
            "timezone": "Europe/Oslo",
            "cache_ttl_seconds": 30,
            "pacing_ms": 250,
            "nasa_api_key": "${NASA_KEY}",
            "line": {"channel_access_token": "tok", "channel_secret": "sec"},
            "storage": {"backend": "memory"},
            "schedule": {"recording_tick_seconds": 600},
        }
        with patch.dict(os.environ, {"NASA_KEY": "nasa-123"}, clear=True):
            config = load_config_from_dict(data)

        assert config.timezone == "Europe/Oslo"
        assert config.cache_ttl_seconds == 30
        assert config.pacing_ms == 250
        assert config.nasa_api_key == "nasa-123"
        assert config.line.channel_access_token == "tok"
        assert config.storage.backend == "memory"
        assert config.schedule.recording_tick_seconds == 600

    def test_empty_document_uses_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_config_from_dict({})

        assert config.timezone == "Asia/Taipei"
        assert config.cache_ttl_seconds == 60
        assert config.line.channel_access_token is None


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("timezone: UTC\npacing_ms: 50\nstorage:\n  backend: none\n")

        with patch.dict(os.environ, {}, clear=True):
            config = load_config(path)

        assert config.timezone == "UTC"
        assert config.pacing_ms == 50
        assert config.storage.backend == "none"

    def test_missing_file_falls_back_to_env(self, tmp_path):
        env = {"TIMEZONE": "UTC", "LINE_CHANNEL_ACCESS_TOKEN": "env-token"}
        with patch.dict(os.environ, env, clear=True):
            config = load_config(tmp_path / "missing.yaml")

        assert config.timezone == "UTC"
        assert config.line.channel_access_token == "env-token"

    def test_empty_file_falls_back_to_env(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        with patch.dict(os.environ, {"PACING_MS": "0"}, clear=True):
            config = load_config(path)

        assert config.pacing_ms == 0


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env function."""

    def test_reads_environment(self):
        env = {
            "LINE_CHANNEL_ACCESS_TOKEN": "tok",
            "LINE_CHANNEL_SECRET": "sec",
            "NASA_API_KEY": "nasa",
            "ADMIN_API_KEY": "admin",
            "CACHE_TTL_SECONDS": "45",
            "STORAGE_BACKEND": "memory",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config_from_env()

        assert config.line.channel_secret == "sec"
        assert config.nasa_api_key == "nasa"
        assert config.admin_api_key == "admin"
        assert config.cache_ttl_seconds == 45
        assert config.storage.backend == "memory"

    def test_uses_secret_manager_when_project_set(self):
        with patch.dict(os.environ, {"GCP_PROJECT": "demo"}, clear=True):
            with patch("orbital.shell.config_loader.SecretManagerClient") as mock_class:
                mock_class.return_value.get_secret_or_env.return_value = "from-secret"
                config = load_config_from_env()

        assert config.line.channel_access_token == "from-secret"
        mock_class.return_value.get_secret_or_env.assert_any_call(
            "line-channel-access-token", "LINE_CHANNEL_ACCESS_TOKEN"
        )
