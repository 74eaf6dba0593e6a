"""BusTime mobile site client."""

from __future__ import annotations

import logging

import requests

BUSTIME_MOBILE_URL = "https://bustime.mta.info/m/"

logger = logging.getLogger(__name__)


class BusTimeClientError(Exception):
    """Raised when a BusTime request fails or returns a non-200 response."""


class BusTimeClient:
    """Thin wrapper around the BusTime mobile stop page using requests."""

    def __init__(self, base_url: str = BUSTIME_MOBILE_URL, timeout_seconds: float = 10) -> None:
        self._base_url = base_url
        self._timeout_seconds = timeout_seconds

    @property
    def base_url(self) -> str:
        return self._base_url

    def get_stop_html(self, stop_code: str) -> str:
        """Fetch the raw stop page HTML for a stop code."""
        stop_code = str(stop_code).strip()
        if not stop_code:
            raise ValueError("Missing stop code")

        try:
            response = requests.get(
                self._base_url,
                params={"q": stop_code},
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            raise BusTimeClientError(f"BusTime request failed: {exc}") from exc

        if response.status_code != 200:
            logger.debug("BusTime returned %s for stop %s", response.status_code, stop_code)
            raise BusTimeClientError(f"HTTP {response.status_code}")

        return response.text


__all__ = ["BUSTIME_MOBILE_URL", "BusTimeClient", "BusTimeClientError"]
