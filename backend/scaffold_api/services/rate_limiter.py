"""In-process sliding-window rate limiting for authentication endpoints."""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Deque, Dict


class InMemoryRateLimiter:
    """Sliding-window limiter keyed by arbitrary strings; single-node only.

    Keys are client supplied (IP plus email for login), so idle keys are
    dropped: a key whose window empties is removed on access, and every
    ``sweep_interval`` seconds all keys with no hit inside their window are
    swept.
    """

    def __init__(self, sweep_interval: float = 60.0) -> None:
        self._lock = threading.Lock()
        self._hits: Dict[str, Deque[float]] = {}
        self._windows: Dict[str, int] = {}
        self._sweep_interval = sweep_interval
        self._last_sweep = time.monotonic()

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)

    def _trim(self, key: str, window_seconds: int, now: float) -> Deque[float]:
        hits = self._hits.get(key)
        if hits is None:
            return deque()
        cutoff = now - window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()
        if not hits:
            del self._hits[key]
            self._windows.pop(key, None)
        return hits

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self._sweep_interval:
            return
        self._last_sweep = now
        idle = [
            key for key, hits in self._hits.items()
            if not hits or hits[-1] <= now - self._windows.get(key, 0)
        ]
        for key in idle:
            del self._hits[key]
            self._windows.pop(key, None)

    def allow(self, key: str, limit: int, window_seconds: int) -> bool:
        """Record a hit for key unless limit hits already fall inside the window."""
        now = time.monotonic()
        with self._lock:
            self._sweep(now)
            hits = self._trim(key, window_seconds, now)
            if len(hits) >= limit:
                return False
            hits.append(now)
            self._hits[key] = hits
            self._windows[key] = window_seconds
            return True

    def retry_after(self, key: str, limit: int, window_seconds: int) -> int:
        """Seconds until key may be allowed again (0 if it may proceed now)."""
        now = time.monotonic()
        with self._lock:
            hits = self._trim(key, window_seconds, now)
            if len(hits) < limit:
                return 0
            return max(1, int(hits[0] + window_seconds - now + 0.999))

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
            self._windows.clear()


rate_limiter = InMemoryRateLimiter()
