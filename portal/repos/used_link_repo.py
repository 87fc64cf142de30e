"""Single-use tracking for magic links."""

from __future__ import annotations

import time
from collections.abc import Callable


class UsedLinkRepo:
    """
    Remembers consumed magic links until they would have expired anyway.

    Keyed by the token's signature segment. In-memory and per-process.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        # signature -> exp (epoch millis)
        self._used: dict[str, int] = {}
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def mark_used(self, signature: str, expires_at_ms: int) -> bool:
        """
        Record a magic link as consumed.

        Args:
            signature: Signature segment of the token
            expires_at_ms: The token's ``exp`` claim

        Returns:
            True if the link was fresh, False if it had already been used
        """
        if self.is_used(signature):
            return False
        self._used[signature] = expires_at_ms
        return True

    def is_used(self, signature: str) -> bool:
        exp = self._used.get(signature)
        return exp is not None and exp > self._now_ms()

    def cleanup_expired(self) -> int:
        """
        Forget links whose expiry has passed. The codec rejects those on its own.

        Returns:
            Number of entries removed
        """
        now = self._now_ms()
        expired = [sig for sig, exp in self._used.items() if exp <= now]
        for sig in expired:
            del self._used[sig]
        return len(expired)

    def __len__(self) -> int:
        return len(self._used)


used_link_repo = UsedLinkRepo()
