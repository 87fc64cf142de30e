"""
In-memory rate limiting for magic link requests and verification.

Single-process only. Multiple workers each keep their own counters.
"""

from __future__ import annotations

import time
from collections import defaultdict, deque
from collections.abc import Callable


class RateLimiter:
    """
    Sliding-window rate limiter.

    Tracks request timestamps per key (email or IP) within a time window.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        # key -> timestamps of accepted requests, oldest first
        self._requests: dict[str, deque[float]] = defaultdict(deque)
        self._clock = clock

    def check_rate_limit(self, key: str, max_requests: int, window_seconds: int = 3600) -> bool:
        """
        Check if a key has exceeded the rate limit, recording the request if not.

        Args:
            key: Identifier to rate limit (e.g. "email:a@b.com" or "ip:1.2.3.4")
            max_requests: Maximum requests allowed in the window
            window_seconds: Time window in seconds (default one hour)

        Returns:
            True if under the limit, False if limit exceeded
        """
        now = self._clock()
        timestamps = self._requests[key]
        while timestamps and timestamps[0] <= now - window_seconds:
            timestamps.popleft()

        if len(timestamps) >= max_requests:
            return False

        timestamps.append(now)
        return True

    def cleanup_old_entries(self, max_age_seconds: int = 7200) -> int:
        """
        Drop timestamps older than max_age_seconds and forget empty keys.

        Returns:
            Number of keys removed
        """
        cutoff = self._clock() - max_age_seconds
        removed = 0
        for key in list(self._requests.keys()):
            timestamps = self._requests[key]
            while timestamps and timestamps[0] <= cutoff:
                timestamps.popleft()
            if not timestamps:
                del self._requests[key]
                removed += 1
        return removed

    def reset(self) -> None:
        self._requests.clear()


# Global rate limiter instance
rate_limiter = RateLimiter()
