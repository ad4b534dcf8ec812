"""
Per-client fixed-window request rate limiter.

Each client key gets ``max_requests`` requests per ``window_ms`` window. The
window starts at the key's first request and restarts on the first request
after it expires, so a client can land up to ``2 * max_requests`` requests
across a window boundary.

Expired entries are removed by a sweep job on an owned APScheduler
``BackgroundScheduler`` that runs every ``window_ms``. ``start()`` and
``stop()`` are wired into the FastAPI lifespan.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from apscheduler.schedulers.background import BackgroundScheduler

from app.services.errors import RateLimitExceededError

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "rate_limit_sweep"


def _epoch_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class RateLimitEntry:
    count: int
    reset_time_ms: int


@dataclass(frozen=True)
class RateLimitDecision:
    """
    Outcome of one admitted request, used for response headers.
    """

    limit: int
    remaining: int
    reset_time_ms: int


class FixedWindowRateLimiter:
    """
    Thread-safe fixed-window counter keyed by client identity.
    """

    def __init__(
        self,
        *,
        max_requests: int,
        window_ms: int,
        clock: Callable[[], int] = _epoch_ms,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")
        self._max_requests = max_requests
        self._window_ms = window_ms
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()
        self._scheduler: BackgroundScheduler | None = None

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_ms(self) -> int:
        return self._window_ms

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def check(self, key: str, now_ms: int | None = None) -> RateLimitDecision:
        """
        Count one request for ``key``.

        Returns the decision when admitted; raises RateLimitExceededError when
        the request pushes the key past ``max_requests`` in its window.
        """

        now = self._clock() if now_ms is None else now_ms

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = RateLimitEntry(count=1, reset_time_ms=now + self._window_ms)
                self._entries[key] = entry
            elif now > entry.reset_time_ms:
                entry.count = 1
                entry.reset_time_ms = now + self._window_ms
            else:
                entry.count += 1

            count = entry.count
            reset_time_ms = entry.reset_time_ms

        if count > self._max_requests:
            retry_after_seconds = math.ceil((reset_time_ms - now) / 1000)
            logger.warning(
                "Rate limit exceeded key=%s count=%s limit=%s retry_after=%s",
                key,
                count,
                self._max_requests,
                retry_after_seconds,
            )
            raise RateLimitExceededError(
                retry_after_seconds=retry_after_seconds,
                limit=self._max_requests,
                remaining=0,
                reset_time_ms=reset_time_ms,
            )

        return RateLimitDecision(
            limit=self._max_requests,
            remaining=max(0, self._max_requests - count),
            reset_time_ms=reset_time_ms,
        )

    def get_entry(self, key: str) -> RateLimitEntry | None:
        with self._lock:
            entry = self._entries.get(key)
            return RateLimitEntry(entry.count, entry.reset_time_ms) if entry is not None else None

    def active_keys(self) -> int:
        with self._lock:
            return len(self._entries)

    def sweep_expired(self, now_ms: int | None = None) -> int:
        """
        Remove entries whose window has passed; return how many were removed.
        """

        now = self._clock() if now_ms is None else now_ms
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.reset_time_ms < now]
            for key in expired:
                del self._entries[key]
            remaining = len(self._entries)

        logger.debug("Rate limit sweep removed=%s active=%s", len(expired), remaining)
        return len(expired)

    def start(self) -> None:
        """
        Schedule the recurring sweep. Calling start twice is a no-op.
        """

        if self.is_running:
            return
        scheduler = BackgroundScheduler(timezone="UTC")
        scheduler.add_job(
            self.sweep_expired,
            trigger="interval",
            seconds=self._window_ms / 1000,
            id=SWEEP_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info(
            "Rate limiter sweep started limit=%s window_ms=%s",
            self._max_requests,
            self._window_ms,
        )

    def stop(self) -> None:
        """
        Cancel the sweep job and stop its scheduler.
        """

        scheduler = self._scheduler
        self._scheduler = None
        if scheduler is None or not scheduler.running:
            return
        scheduler.shutdown(wait=False)
        logger.info("Rate limiter sweep stopped")
