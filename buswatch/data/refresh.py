"""Refresh policy: single-flight fetches with a minimum gap between requests."""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
import logging
import math
import threading
import time
from typing import Callable

from buswatch.data.bustime_client import BusTimeClientError
from buswatch.data.extractor import extract
from buswatch.data.models import StopSnapshot

DEFAULT_MIN_REQUEST_GAP_SECONDS = 10.0

IDLE = "IDLE"
COOLING = "COOLING"
IN_FLIGHT = "IN_FLIGHT"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshState:
    """Bookkeeping for the most recently issued request."""

    last_request_issued_at: float | None
    next_allowed_at: float
    in_flight: bool


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of the latest refresh.

    On a transport failure ``snapshot`` and ``updated_at`` still hold the last
    successful values so the board keeps showing them next to the error.
    """

    snapshot: StopSnapshot | None
    updated_at: float | None
    fetched_at: float | None
    error: str | None


class RefreshController:
    """Decides whether a refresh request actually fetches.

    Concurrent callers share the outstanding request; requests issued within
    ``min_request_gap_seconds`` of the last issued one are dropped.
    ``clock`` times the gap and cooldown; ``wall_clock`` stamps results.
    """

    def __init__(
        self,
        fetch_html: Callable[[], str],
        min_request_gap_seconds: float = DEFAULT_MIN_REQUEST_GAP_SECONDS,
        extractor: Callable[[str], StopSnapshot] = extract,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        if min_request_gap_seconds < 0:
            raise ValueError("min_request_gap_seconds must not be negative")
        self._fetch_html = fetch_html
        self._min_request_gap_seconds = min_request_gap_seconds
        self._extractor = extractor
        self._clock = clock
        self._wall_clock = wall_clock
        self._lock = threading.Lock()
        self._last_request_issued_at: float | None = None
        self._next_allowed_at = 0.0
        self._in_flight: Future | None = None
        self._latest = RefreshResult(snapshot=None, updated_at=None, fetched_at=None, error=None)

    @property
    def min_request_gap_seconds(self) -> float:
        return self._min_request_gap_seconds

    def request_refresh(self) -> RefreshResult | None:
        """Fetch unless cooling down; returns None when the request is dropped."""
        with self._lock:
            pending = self._in_flight
            if pending is not None:
                owner = False
            else:
                now = self._clock()
                if self._is_cooling(now):
                    logger.debug(
                        "Refresh dropped, %ss of cooldown left",
                        self._cooldown_seconds(now),
                    )
                    return None
                self._last_request_issued_at = now
                self._next_allowed_at = now + self._min_request_gap_seconds
                pending = Future()
                self._in_flight = pending
                owner = True

        if not owner:
            logger.debug("Joining in-flight refresh")
            return pending.result()

        try:
            result = self._perform()
        except BaseException as exc:
            with self._lock:
                self._in_flight = None
            pending.set_exception(exc)
            raise

        with self._lock:
            self._latest = result
            self._in_flight = None
        pending.set_result(result)
        return result

    def get_cooldown_seconds_remaining(self, now: float | None = None) -> int:
        """Whole seconds until the next request may be issued."""
        with self._lock:
            return self._cooldown_seconds(self._clock() if now is None else now)

    def is_refreshing(self) -> bool:
        with self._lock:
            return self._in_flight is not None

    def get_phase(self) -> str:
        """Current state: IDLE, COOLING or IN_FLIGHT."""
        with self._lock:
            if self._in_flight is not None:
                return IN_FLIGHT
            if self._is_cooling(self._clock()):
                return COOLING
            return IDLE

    def get_state(self) -> RefreshState:
        with self._lock:
            return RefreshState(
                last_request_issued_at=self._last_request_issued_at,
                next_allowed_at=self._next_allowed_at,
                in_flight=self._in_flight is not None,
            )

    def get_latest(self) -> RefreshResult:
        """Return the most recent refresh result."""
        with self._lock:
            return self._latest

    def _is_cooling(self, now: float) -> bool:
        if self._last_request_issued_at is None:
            return False
        return now - self._last_request_issued_at < self._min_request_gap_seconds

    def _cooldown_seconds(self, now: float) -> int:
        return max(0, math.ceil(self._next_allowed_at - now))

    def _perform(self) -> RefreshResult:
        logger.info("Refreshing stop data")
        try:
            html = self._fetch_html()
        except BusTimeClientError as exc:
            logger.warning("Refresh failed: %s", exc)
            previous = self.get_latest()
            return RefreshResult(
                snapshot=previous.snapshot,
                updated_at=previous.updated_at,
                fetched_at=self._wall_clock(),
                error=str(exc),
            )

        snapshot = self._extractor(html)
        now = self._wall_clock()
        logger.info("Refreshed %d routes", len(snapshot.routes))
        return RefreshResult(snapshot=snapshot, updated_at=now, fetched_at=now, error=None)


__all__ = [
    "COOLING",
    "DEFAULT_MIN_REQUEST_GAP_SECONDS",
    "IDLE",
    "IN_FLIGHT",
    "RefreshController",
    "RefreshResult",
    "RefreshState",
]
