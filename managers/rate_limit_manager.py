from typing import Optional, Dict, Deque, Callable
from threading import Lock
from collections import deque
import time
import os


class RateLimitManager:
    """Sliding-window request counter keyed by client address."""
    _instance: Optional['RateLimitManager'] = None
    _lock = Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance.configure(
                        max_requests=int(os.getenv("SIMPAY_RATE_LIMIT_MAX", "20")),
                        window=int(os.getenv("SIMPAY_RATE_LIMIT_WINDOW", "60")),
                    )
                    cls._instance = instance
        return cls._instance

    def __init__(self):
        pass

    def configure(self, max_requests: int, window: int, clock: Callable[[], float] = time.monotonic) -> None:
        self.max_requests = max_requests
        self.window = window
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()

    def hit(self, key: str) -> bool:
        """Record one request for key. False once the key is over its limit."""
        now = self.clock()
        with self._lock:
            if now - self._last_sweep >= self.window:
                self._sweep(now)
            hits = self._hits.setdefault(key, deque())
            self._prune(hits, now)
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            return True

    def _prune(self, hits: Deque[float], now: float) -> None:
        while hits and now - hits[0] >= self.window:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        """Drop keys with no requests left in the window. Caller holds the lock."""
        for key in list(self._hits):
            self._prune(self._hits[key], now)
            if not self._hits[key]:
                del self._hits[key]
        self._last_sweep = now

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)


def get_rate_limiter() -> RateLimitManager:
    return RateLimitManager()
