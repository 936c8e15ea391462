"""
leadflow/notifications/rate_limit.py - Per-organization alert throttling.

A burst of form spam should not page a practice's staff dozens of times a
minute. Fixed window per organization: the first event opens the window,
events beyond `max_events` inside it are refused.
"""

import threading
import time
from typing import Callable


class NotificationRateLimiter:
    def __init__(
        self,
        max_events: int = 10,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_events = max_events
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, tuple[int, float]] = {}   # org id -> (count, reset_at)
        self._lock = threading.Lock()

    def allow(self, organization_id: str) -> bool:
        """Record one event for the organization; False if it is over the limit."""
        now = self._clock()
        with self._lock:
            self._prune(now)
            count, reset_at = self._windows.get(organization_id, (0, now + self.window_seconds))
            if count >= self.max_events:
                self._windows[organization_id] = (count, reset_at)
                return False
            self._windows[organization_id] = (count + 1, reset_at)
            return True

    def _prune(self, now: float) -> None:
        # caller holds the lock
        expired = [org_id for org_id, (_, reset_at) in self._windows.items() if now >= reset_at]
        for org_id in expired:
            del self._windows[org_id]
