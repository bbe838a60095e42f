"""Tests for the LINE Messaging API client.

Uses unittest.mock to mock HTTP calls.
"""

import base64
import hashlib
import hmac

import pytest
import requests
from unittest.mock import Mock, patch

from orbital.shell.line_client import LineClient, validate_signature


@pytest.fixture
def client():
    return LineClient(channel_access_token="test-token")


def ok_response():
    response = Mock()
    response.status_code = 200
    response.text = "{}"
    return response


class TestLineClientPush:
    """Tests for LineClient.push()."""

    @patch("orbital.shell.line_client.requests.post")
    def test_successful_push(self, mock_post, client):
        mock_post.return_value = ok_response()

        result = client.push("U123", "hello")

        assert result.success is True
        assert result.status_code == 200
        url = mock_post.call_args[0][0]
        assert url == "https://api.line.me/v2/bot/message/push"
        payload = mock_post.call_args[1]["json"]
        assert payload == {"to": "U123", "messages": [{"type": "text", "text": "hello"}]}
        headers = mock_post.call_args[1]["headers"]
        assert headers["Authorization"] == "Bearer test-token"

    @patch("orbital.shell.line_client.requests.post")
    def test_segments_truncated_to_five(self, mock_post, client):
        mock_post.return_value = ok_response()

        client.push("U123", [f"part {i}" for i in range(8)])

        payload = mock_post.call_args[1]["json"]
        assert len(payload["messages"]) == 5

    @patch("orbital.shell.line_client.requests.post")
    def test_non_200_is_failure(self, mock_post, client):
        response = Mock()
        response.status_code = 429
        response.text = "rate limited"
        mock_post.return_value = response

        result = client.push("U123", "hello")

        assert result.success is False
        assert result.status_code == 429
        assert result.error == "rate limited"

    @patch("orbital.shell.line_client.requests.post")
    def test_timeout_is_failure(self, mock_post, client):
        mock_post.side_effect = requests.Timeout()

        result = client.push("U123", "hello")

        assert result.success is False
        assert result.error == "Request timed out"

    @patch("orbital.shell.line_client.requests.post")
    def test_connection_error_is_failure(self, mock_post, client):
        mock_post.side_effect = requests.ConnectionError("refused")

        result = client.push("U123", "hello")

        assert result.success is False
        assert "refused" in result.error

    @pytest.mark.parametrize("token", [None, "", "${LINE_CHANNEL_ACCESS_TOKEN}"])
    @patch("orbital.shell.line_client.requests.post")
    def test_disabled_without_token(self, mock_post, token):
        client = LineClient(channel_access_token=token)

        result = client.push("U123", "hello")

        assert client.enabled is False
        assert result.success is False
        mock_post.assert_not_called()


class TestLineClientReply:
    """Tests for LineClient.reply()."""

    @patch("orbital.shell.line_client.requests.post")
    def test_reply_payload(self, mock_post, client):
        mock_post.return_value = ok_response()

        result = client.reply("reply-token", {"type": "text", "text": "hi"})

        assert result.success is True
        assert mock_post.call_args[0][0].endswith("/reply")
        payload = mock_post.call_args[1]["json"]
        assert payload == {"replyToken": "reply-token", "messages": [{"type": "text", "text": "hi"}]}


class TestValidateSignature:
    """Tests for validate_signature()."""

    def _sign(self, body, secret):
        digest = hmac.new(secret.encode(), body, hashlib.sha256).digest()
        return base64.b64encode(digest).decode()

    def test_valid_signature(self):
        body = b'{"events": []}'
        assert validate_signature(body, self._sign(body, "secret"), "secret") is True

    def test_wrong_secret(self):
        body = b'{"events": []}'
        assert validate_signature(body, self._sign(body, "other"), "secret") is False

    def test_missing_signature(self):
        assert validate_signature(b"{}", None, "secret") is False
