"""Fixed-window request limiting per client IP."""

import time
from threading import Lock

CLEANUP_INTERVAL_SECONDS = 60


class RateLimiter:
    def __init__(self, max_requests: int, window_seconds: int, clock=time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict = {}
        self._last_cleanup = clock()
        self._lock = Lock()

    def allow(self, key: str):
        """Count one request for ``key``; returns (allowed, retry_after_seconds)."""
        now = self._clock()
        with self._lock:
            self._cleanup(now)
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            if count >= self.max_requests:
                retry_after = max(1, int(self.window_seconds - (now - started)))
                return False, retry_after
            self._windows[key] = (started, count + 1)
            return True, 0

    def _cleanup(self, now: float) -> None:
        if now - self._last_cleanup < CLEANUP_INTERVAL_SECONDS:
            return
        self._last_cleanup = now
        expired = [key for key, (started, _) in self._windows.items() if now - started >= self.window_seconds]
        for key in expired:
            self._windows.pop(key, None)

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._windows)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
