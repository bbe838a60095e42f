"""Snapshot Aggregator - Imperative Shell.

Fetches every upstream source concurrently and assembles one Snapshot.
A failing source contributes None and is replaced by its default in
build_snapshot; only a total outage fails the aggregation.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable

from orbital.core.parsing import (
    parse_cmes,
    parse_electron,
    parse_flares,
    parse_kp,
    parse_magnetic_field,
    parse_proton,
    parse_satellite,
    parse_solar_wind,
    parse_xray,
)
from orbital.core.snapshot import Snapshot, build_snapshot
from orbital.shell.donki_client import DONKIClient
from orbital.shell.iss_client import ISSClient
from orbital.shell.swpc_client import SWPCClient


logger = logging.getLogger(__name__)


class UpstreamFetchError(Exception):
    """Raised when no upstream source returned usable data."""


class SnapshotAggregator:
    """Assembles snapshots from NOAA SWPC, NASA DONKI and the ISS tracker.

    This is part of the imperative shell - it coordinates HTTP I/O.
    """

    def __init__(
        self,
        swpc_client: SWPCClient | None = None,
        donki_client: DONKIClient | None = None,
        iss_client: ISSClient | None = None,
        clock: Callable[[], datetime] | None = None,
        max_workers: int = 9,
    ) -> None:
        """Initialize aggregator.

        Args:
            swpc_client: NOAA SWPC client
            donki_client: NASA DONKI client
            iss_client: Satellite tracker client
            clock: Returns the current UTC time
            max_workers: Concurrent fetches
        """
        self.swpc_client = swpc_client or SWPCClient()
        self.donki_client = donki_client or DONKIClient()
        self.iss_client = iss_client or ISSClient()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.max_workers = max_workers

    def _sources(self) -> dict[str, tuple[Callable[[], Any], Callable[[Any], Any]]]:
        """Map each snapshot field to its (fetch, parse) pair."""
        return {
            "solar_wind": (self.swpc_client.fetch_plasma, parse_solar_wind),
            "magnetic_field": (self.swpc_client.fetch_mag, parse_magnetic_field),
            "kp": (self.swpc_client.fetch_kp, parse_kp),
            "xray": (self.swpc_client.fetch_xray, parse_xray),
            "proton": (self.swpc_client.fetch_proton, parse_proton),
            "electron": (self.swpc_client.fetch_electron, parse_electron),
            "cmes": (self.donki_client.fetch_cmes, parse_cmes),
            "flares": (self.donki_client.fetch_flares, parse_flares),
            "satellite": (self.iss_client.fetch_position, parse_satellite),
        }

    @staticmethod
    def _fetch_one(
        name: str,
        fetch: Callable[[], Any],
        parse: Callable[[Any], Any],
    ) -> Any:
        try:
            return parse(fetch())
        except Exception as e:
            logger.warning("Source %s unavailable, using default: %s", name, str(e))
            return None

    def fetch(self) -> Snapshot:
        """Fetch all sources and build a snapshot.

        This method performs HTTP I/O.

        Returns:
            Snapshot with defaults substituted for failed sources

        Raises:
            UpstreamFetchError: If every source failed
        """
        sources = self._sources()

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                name: executor.submit(self._fetch_one, name, fetch, parse)
                for name, (fetch, parse) in sources.items()
            }
            parts = {name: future.result() for name, future in futures.items()}

        available = [name for name, value in parts.items() if value is not None]
        if not available:
            raise UpstreamFetchError("All upstream sources failed")

        logger.info(
            "Fetched %d/%d upstream sources",
            len(available),
            len(sources),
        )

        return build_snapshot(timestamp=self.clock(), **parts)
