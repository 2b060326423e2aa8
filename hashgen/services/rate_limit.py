"""In-memory sliding-window rate limiting for the public endpoints."""
from __future__ import annotations

import threading
import time
from typing import Callable


class RateLimiter:
    """Simple in-memory rate limiter keyed by client identifier."""

    def __init__(
        self,
        window_seconds: float,
        max_requests: int,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_seconds = max(0.0, window_seconds)
        self.max_requests = max(1, max_requests)
        self._clock = clock
        self._bucket: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        """Record a request for ``key`` and report whether it fits in the current window."""

        now = self._clock()
        with self._lock:
            self._evict_idle(now)
            events = [
                timestamp
                for timestamp in self._bucket.get(key, [])
                if now - timestamp < self.window_seconds
            ]
            if len(events) >= self.max_requests:
                self._bucket[key] = events
                return False
            events.append(now)
            self._bucket[key] = events
            return True

    def tracked_clients(self) -> int:
        """Return how many clients currently have requests inside the window."""

        with self._lock:
            return len(self._bucket)

    def _evict_idle(self, now: float) -> None:
        idle = [
            key
            for key, events in self._bucket.items()
            if not events or now - events[-1] >= self.window_seconds
        ]
        for key in idle:
            del self._bucket[key]


__all__ = ["RateLimiter"]
