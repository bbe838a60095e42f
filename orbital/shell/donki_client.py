"""NASA DONKI Client - Imperative Shell.

This module handles HTTP communication with the NASA DONKI (Space Weather
Database Of Notifications, Knowledge, Information) API for coronal mass
ejections and solar flares.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any

import requests


logger = logging.getLogger(__name__)


# NASA DONKI base URL
DONKI_API_BASE = "https://api.nasa.gov/DONKI"

# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 10

# How far back event queries reach
DEFAULT_LOOKBACK_DAYS = 7


class DONKIClient:
    """Client for fetching CME and flare events from NASA DONKI.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        api_key: str = "DEMO_KEY",
        base_url: str = DONKI_API_BASE,
        timeout: int = DEFAULT_TIMEOUT,
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    ) -> None:
        """Initialize DONKI client.

        Args:
            api_key: NASA API key
            base_url: DONKI base URL
            timeout: Request timeout in seconds
            lookback_days: Size of the event query window in days
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.lookback_days = lookback_days

    def _build_params(self, today: date) -> dict[str, str]:
        start = today - timedelta(days=self.lookback_days)
        return {
            "startDate": start.isoformat(),
            "endDate": today.isoformat(),
            "api_key": self.api_key,
        }

    def _fetch(self, endpoint: str, today: date | None = None) -> list[dict[str, Any]]:
        if today is None:
            today = datetime.now(timezone.utc).date()

        params = self._build_params(today)
        logger.debug(
            "Fetching DONKI %s from %s to %s",
            endpoint,
            params["startDate"],
            params["endDate"],
        )

        response = requests.get(
            f"{self.base_url}/{endpoint}",
            params=params,
            timeout=self.timeout,
        )
        response.raise_for_status()

        data = response.json()
        if not isinstance(data, list):
            logger.warning("Unexpected DONKI %s payload type: %s", endpoint, type(data).__name__)
            return []

        logger.debug("Fetched %d DONKI %s events", len(data), endpoint)
        return data

    def fetch_cmes(self, today: date | None = None) -> list[dict[str, Any]]:
        """Fetch CME records for the lookback window.

        This method performs HTTP I/O.

        Args:
            today: End date of the window (defaults to the current UTC date)

        Returns:
            Raw DONKI CME records

        Raises:
            requests.RequestException: If the request fails
        """
        return self._fetch("CME", today)

    def fetch_flares(self, today: date | None = None) -> list[dict[str, Any]]:
        """Fetch flare records for the lookback window.

        This method performs HTTP I/O.

        Raises:
            requests.RequestException: If the request fails
        """
        return self._fetch("FLR", today)
