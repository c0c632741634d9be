"""
Evaluation request budget
Fixed window counter per caller, checked before any test case is dispatched.
"""

import time
from typing import Callable, Dict, Tuple

from codenest import config
from codenest.errors import RateLimitExceeded


class RequestBudget:
    def __init__(
        self,
        max_requests: int = config.RATE_LIMIT_MAX_REQUESTS,
        window_seconds: int = config.RATE_LIMIT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}  # caller -> (window start, count)

    def _evict_expired(self, now: float) -> None:
        expired = [k for k, (start, _) in self._windows.items() if now - start >= self.window_seconds]
        for key in expired:
            del self._windows[key]

    def consume(self, caller_id: str) -> int:
        """Count one request for caller_id; returns the remaining budget or raises RateLimitExceeded"""
        now = self._clock()
        self._evict_expired(now)

        start, count = self._windows.get(caller_id, (now, 0))
        if count >= self.max_requests:
            retry_after = int(self.window_seconds - (now - start)) + 1
            raise RateLimitExceeded(retry_after)

        self._windows[caller_id] = (start, count + 1)
        return self.max_requests - count - 1

    def reset(self) -> None:
        self._windows.clear()
