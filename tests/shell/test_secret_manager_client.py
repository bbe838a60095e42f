"""Tests for the Secret Manager client.

The Google client is replaced with a Mock.
"""

import os
import pytest
from unittest.mock import Mock, patch

from orbital.shell.secret_manager_client import SecretManagerClient, SecretManagerConfig


@pytest.fixture
def client():
    sm = SecretManagerClient(SecretManagerConfig(project_id="demo"))
    sm._client = Mock()
    return sm


def secret_payload(value):
    response = Mock()
    response.payload.data = value.encode("UTF-8")
    return response


class TestGetSecret:
    """Tests for SecretManagerClient.get_secret()."""

    def test_fetches_latest_version(self, client):
        client._client.access_secret_version.return_value = secret_payload("s3cret")

        assert client.get_secret("line-channel-secret") == "s3cret"
        client._client.access_secret_version.assert_called_once_with(
            request={"name": "projects/demo/secrets/line-channel-secret/versions/latest"}
        )

    def test_error_returns_none(self, client):
        client._client.access_secret_version.side_effect = RuntimeError("denied")
        assert client.get_secret("missing") is None

    def test_no_project_returns_none(self):
        assert SecretManagerClient().get_secret("anything") is None


class TestGetSecretOrEnv:
    """Tests for SecretManagerClient.get_secret_or_env()."""

    def test_falls_back_to_env(self, client):
        client._client.access_secret_version.side_effect = RuntimeError("denied")
        with patch.dict(os.environ, {"LINE_CHANNEL_SECRET": "from-env"}):
            assert client.get_secret_or_env("line-channel-secret", "LINE_CHANNEL_SECRET") == "from-env"


class TestResolve:
    """Tests for SecretManagerClient.resolve()."""

    def test_plain_value(self, client):
        assert client.resolve("plain") == "plain"

    def test_secret_placeholder(self, client):
        client._client.access_secret_version.return_value = secret_payload("tok")
        assert client.resolve("${secret:line-token}") == "tok"

    def test_unresolved_secret_is_unchanged(self, client):
        client._client.access_secret_version.side_effect = RuntimeError("denied")
        assert client.resolve("${secret:line-token}") == "${secret:line-token}"

    def test_env_placeholder(self, client):
        with patch.dict(os.environ, {"NASA_API_KEY": "nasa"}):
            assert client.resolve("${NASA_API_KEY}") == "nasa"
