"""Satellite Tracker Client - Imperative Shell.

Fetches the current position of the International Space Station.
"""

import logging
from typing import Any

import requests


logger = logging.getLogger(__name__)


# wheretheiss.at API base URL
ISS_API_BASE = "https://api.wheretheiss.at/v1/satellites"

# NORAD catalog number of the ISS
ISS_NORAD_ID = 25544

# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 10


class ISSClient:
    """Client for fetching the ISS position.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        base_url: str = ISS_API_BASE,
        satellite_id: int = ISS_NORAD_ID,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.satellite_id = satellite_id
        self.timeout = timeout

    def fetch_position(self) -> dict[str, Any]:
        """Fetch the current satellite position.

        This method performs HTTP I/O.

        Returns:
            Raw tracker response (latitude, longitude, altitude, velocity, ...)

        Raises:
            requests.RequestException: If the request fails
        """
        response = requests.get(
            f"{self.base_url}/{self.satellite_id}",
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()
