"""NOAA SWPC Client - Imperative Shell.

This module handles HTTP communication with the NOAA Space Weather
Prediction Center JSON products. All I/O is contained here; parsing
lives in orbital.core.parsing.
"""

import logging
from typing import Any

import requests


logger = logging.getLogger(__name__)


# NOAA SWPC services base URL
SWPC_API_BASE = "https://services.swpc.noaa.gov"

# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 10

# Product paths, relative to the base URL
PLASMA_PATH = "/products/solar-wind/plasma-7-day.json"
MAG_PATH = "/products/solar-wind/mag-7-day.json"
KP_PATH = "/products/noaa-planetary-k-index.json"
XRAY_PATH = "/products/goes-primary-xray.json"
PROTON_PATH = "/products/goes-proton-flux.json"
ELECTRON_PATH = "/products/goes-electron-flux.json"


class SWPCClient:
    """Client for fetching space weather products from NOAA SWPC.

    This is part of the imperative shell - it handles HTTP I/O.
    Every fetch method returns the raw JSON document and raises
    requests.RequestException on failure.
    """

    def __init__(
        self,
        base_url: str = SWPC_API_BASE,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize SWPC client.

        Args:
            base_url: SWPC services base URL
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch_product(self, path: str) -> Any:
        """Fetch one SWPC product.

        This method performs HTTP I/O.

        Args:
            path: Product path, e.g. '/products/noaa-planetary-k-index.json'

        Returns:
            Decoded JSON document

        Raises:
            requests.RequestException: If the request fails
        """
        url = f"{self.base_url}{path}"
        logger.debug("Fetching SWPC product %s", path)

        response = requests.get(url, timeout=self.timeout)
        response.raise_for_status()

        data = response.json()
        logger.debug(
            "Fetched %d rows from %s",
            len(data) if isinstance(data, list) else 0,
            path,
        )
        return data

    def fetch_plasma(self) -> Any:
        """Solar wind plasma (density, speed, temperature)."""
        return self.fetch_product(PLASMA_PATH)

    def fetch_mag(self) -> Any:
        """Solar wind magnetic field (Bx, By, Bz, Bt)."""
        return self.fetch_product(MAG_PATH)

    def fetch_kp(self) -> Any:
        """Planetary K-index."""
        return self.fetch_product(KP_PATH)

    def fetch_xray(self) -> Any:
        """GOES primary X-ray flux."""
        return self.fetch_product(XRAY_PATH)

    def fetch_proton(self) -> Any:
        """GOES integral proton flux."""
        return self.fetch_product(PROTON_PATH)

    def fetch_electron(self) -> Any:
        """GOES integral electron flux."""
        return self.fetch_product(ELECTRON_PATH)
