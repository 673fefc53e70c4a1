"""HTTP client for interacting with OSRM services."""

from __future__ import annotations

import logging
import time
from typing import Sequence

import httpx

from ...config import Settings

logger = logging.getLogger(__name__)


class OSRMResponseError(ValueError):
    """OSRM answered, but not with a usable table."""


class OSRMClient:
    def __init__(
        self,
        base_url: str,
        profile: str = "walking",
        timeout: float = 10.0,
        max_retries: int = 0,
        backoff_seconds: float = 0.5,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.base_url = base_url.rstrip("/")
        self.profile = profile
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self._transport = transport

    @classmethod
    def from_settings(cls, config: Settings) -> "OSRMClient":
        return cls(
            base_url=config.osrm_base_url,
            profile=config.osrm_profile,
            timeout=config.osrm_timeout_seconds,
            max_retries=config.osrm_max_retries,
            backoff_seconds=config.osrm_backoff_seconds,
        )

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
            transport=self._transport,
        )

    def table(self, coordinates: Sequence[tuple[float, float]]) -> dict:
        """Get the full distance/duration matrix for (lat, lon) coordinates in one request."""
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required for OSRM table.")

        # OSRM expects "lon,lat;lon,lat;..."
        coordinate_str = ";".join(f"{lon},{lat}" for lat, lon in coordinates)
        params = {"annotations": "distance,duration"}
        url = f"{self.base_url}/table/v1/{self.profile}/{coordinate_str}"

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, dict):
                        raise OSRMResponseError("OSRM response body is not a JSON object.")
                    code = data.get("code", "Ok")
                    if code != "Ok":
                        raise OSRMResponseError(
                            f"OSRM table request failed: {data.get('message', code)}"
                        )
                    if "durations" not in data or "distances" not in data:
                        raise OSRMResponseError("OSRM response missing durations/distances.")
                    return data
                except (httpx.TimeoutException, httpx.NetworkError) as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Failed to connect to OSRM service at {self.base_url}: {exc}"
                        ) from exc
                    logger.debug(
                        f"OSRM network error, retrying in {self.backoff_seconds * attempt:.1f}s "
                        f"(attempt {attempt}/{self.max_retries}): {exc}"
                    )
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.HTTPStatusError:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    time.sleep(self.backoff_seconds * attempt)
        finally:
            client.close()


def check_health(client: OSRMClient) -> bool:
    """Check OSRM service health by making a minimal two-point table request."""
    try:
        data = client.table([(52.517037, 13.388860), (52.496891, 13.385983)])
    except (httpx.HTTPError, ConnectionError, ValueError) as exc:
        logger.debug(f"OSRM health check failed: {exc}")
        return False
    return isinstance(data.get("durations"), list)
