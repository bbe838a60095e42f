"""LINE Messaging API Client - Imperative Shell.

This module handles HTTP communication with the LINE Messaging API
(push and reply) and webhook signature validation. All I/O is contained
here; message formatting is in the core module.
"""

import base64
import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Any

import requests

from orbital.core.formatter import MAX_SEGMENTS, as_segments, truncate_segments


logger = logging.getLogger(__name__)


LINE_API_BASE = "https://api.line.me/v2/bot/message"

# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 10


@dataclass
class LineResponse:
    """Response from the LINE Messaging API.

    Attributes:
        success: Whether the message was accepted
        status_code: HTTP status code (0 if no request was made)
        error: Error message if failed
    """
    success: bool
    status_code: int
    error: str | None = None


def validate_signature(body: bytes, signature: str | None, channel_secret: str) -> bool:
    """Check the X-Line-Signature header of a webhook request.

    Args:
        body: Raw request body
        signature: Header value
        channel_secret: Channel secret

    Returns:
        True if the signature matches
    """
    if not signature:
        return False
    digest = hmac.new(channel_secret.encode("utf-8"), body, hashlib.sha256).digest()
    expected = base64.b64encode(digest).decode("utf-8")
    return hmac.compare_digest(expected, signature)


class LineClient:
    """Client for pushing and replying to LINE users.

    This is part of the imperative shell - it handles HTTP I/O.
    Without a channel access token the client is disabled: every call
    returns a failed LineResponse without making a request.
    """

    def __init__(
        self,
        channel_access_token: str | None = None,
        base_url: str = LINE_API_BASE,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize LINE client.

        Args:
            channel_access_token: Bearer token for the channel
            base_url: Messaging API base URL
            timeout: Request timeout in seconds
        """
        self.channel_access_token = channel_access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        if not self.enabled:
            logger.warning("LINE channel access token not configured; push and reply disabled")

    @property
    def enabled(self) -> bool:
        token = self.channel_access_token
        return bool(token) and not token.startswith("${")

    def _post(self, endpoint: str, payload: dict[str, Any]) -> LineResponse:
        if not self.enabled:
            return LineResponse(
                success=False,
                status_code=0,
                error="LINE channel access token not configured",
            )

        try:
            response = requests.post(
                f"{self.base_url}/{endpoint}",
                json=payload,
                timeout=self.timeout,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.channel_access_token}",
                },
            )

            if response.status_code == 200:
                return LineResponse(success=True, status_code=response.status_code)

            error_text = response.text
            logger.warning(
                "LINE %s returned non-200: %d - %s",
                endpoint,
                response.status_code,
                error_text,
            )
            return LineResponse(
                success=False,
                status_code=response.status_code,
                error=error_text,
            )

        except requests.Timeout:
            logger.error("LINE %s request timed out", endpoint)
            return LineResponse(
                success=False,
                status_code=0,
                error="Request timed out",
            )
        except requests.RequestException as e:
            logger.error("LINE %s request failed: %s", endpoint, str(e))
            return LineResponse(
                success=False,
                status_code=0,
                error=str(e),
            )

    def push(
        self,
        to: str,
        messages: str | dict[str, Any] | list[Any],
    ) -> LineResponse:
        """Push messages to a user.

        This method performs HTTP I/O. At most MAX_SEGMENTS segments are
        sent; extra segments are dropped.

        Args:
            to: LINE user ID
            messages: Text, a message segment, or a list of either

        Returns:
            LineResponse indicating success or failure
        """
        segments = truncate_segments(as_segments(messages), MAX_SEGMENTS)
        return self._post("push", {"to": to, "messages": segments})

    def reply(
        self,
        reply_token: str,
        messages: str | dict[str, Any] | list[Any],
    ) -> LineResponse:
        """Reply to a webhook event.

        This method performs HTTP I/O.

        Args:
            reply_token: Token from the webhook event
            messages: Text, a message segment, or a list of either

        Returns:
            LineResponse indicating success or failure
        """
        segments = truncate_segments(as_segments(messages), MAX_SEGMENTS)
        return self._post("reply", {"replyToken": reply_token, "messages": segments})
