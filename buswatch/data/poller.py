"""Threaded scheduler that drives automatic refreshes and the cooldown tick."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from buswatch.data.refresh import RefreshController, RefreshResult

DEFAULT_AUTO_REFRESH_INTERVAL_SECONDS = 30.0
DEFAULT_COOLDOWN_TICK_SECONDS = 1.0

logger = logging.getLogger(__name__)


def _always_visible() -> bool:
    return True


class RefreshScheduler:
    """Background timers around a RefreshController.

    One thread issues an initial refresh and then one automatic refresh per
    interval, skipping ticks while ``is_visible`` reports False. A second
    thread publishes the cooldown countdown once per tick.
    """

    def __init__(
        self,
        controller: RefreshController,
        auto_refresh_interval_seconds: float = DEFAULT_AUTO_REFRESH_INTERVAL_SECONDS,
        is_visible: Callable[[], bool] | None = None,
        on_result: Callable[[RefreshResult], None] | None = None,
        on_tick: Callable[[int], None] | None = None,
        tick_seconds: float = DEFAULT_COOLDOWN_TICK_SECONDS,
    ) -> None:
        if auto_refresh_interval_seconds <= 0:
            raise ValueError("auto_refresh_interval_seconds must be positive")
        if tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")
        self._controller = controller
        self._interval_seconds = auto_refresh_interval_seconds
        self._is_visible = is_visible or _always_visible
        self._on_result = on_result
        self._on_tick = on_tick
        self._tick_seconds = tick_seconds
        self._dispatch_lock = threading.Lock()
        self._last_dispatched: RefreshResult | None = None
        self._stop_event = threading.Event()
        self._threads: list[threading.Thread] = []

    def start(self) -> None:
        """Start the refresh and countdown threads."""
        if any(thread.is_alive() for thread in self._threads):
            return
        self._stop_event.clear()
        self._threads = [
            threading.Thread(target=self._run_refresh_loop, name="buswatch-refresh", daemon=True),
            threading.Thread(target=self._run_tick_loop, name="buswatch-tick", daemon=True),
        ]
        for thread in self._threads:
            thread.start()

    def stop(self) -> None:
        """Signal both threads to stop."""
        self._stop_event.set()

    def join(self, timeout: float | None = None) -> None:
        for thread in self._threads:
            thread.join(timeout)

    def refresh_now(self) -> RefreshResult | None:
        """Manual refresh; not gated on visibility."""
        return self._dispatch(self._controller.request_refresh())

    def tick_auto_refresh(self) -> RefreshResult | None:
        """Run one timer tick: refresh only while the board is visible."""
        if not self._is_visible():
            logger.debug("Board hidden, skipping automatic refresh")
            return None
        return self._dispatch(self._controller.request_refresh())

    def _dispatch(self, result: RefreshResult | None) -> RefreshResult | None:
        if result is None:
            return None
        # Callers that joined one request share its result; notify once.
        with self._dispatch_lock:
            if result is self._last_dispatched:
                return result
            self._last_dispatched = result
        if self._on_result is not None:
            self._on_result(result)
        return result

    def _run_guarded(self, step: Callable[[], RefreshResult | None]) -> None:
        try:
            step()
        except Exception:
            logger.exception("Automatic refresh failed")

    def _run_refresh_loop(self) -> None:
        self._run_guarded(self.refresh_now)
        while not self._stop_event.wait(timeout=self._interval_seconds):
            self._run_guarded(self.tick_auto_refresh)

    def _run_tick_loop(self) -> None:
        while not self._stop_event.wait(timeout=self._tick_seconds):
            if self._on_tick is not None:
                self._on_tick(self._controller.get_cooldown_seconds_remaining())


__all__ = [
    "DEFAULT_AUTO_REFRESH_INTERVAL_SECONDS",
    "DEFAULT_COOLDOWN_TICK_SECONDS",
    "RefreshScheduler",
]
