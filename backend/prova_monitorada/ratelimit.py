"""
Prova Monitorada Backend - Rate Limit Counter Store
=====================================================

What:  Per-client request counters over a fixed time window.
How:   Each key gets a counter and a reset time. The window of a key starts
       at its first hit and lasts `window` seconds; when a hit arrives after
       the reset time the counter starts over at 1.
Who:   Injected into RateLimitMiddleware by create_app(); tests build their
       own instance with a fake clock to control time.

Algorithm: Fixed Window Counter
    hit(key):
    1. If the key has no entry, or its entry expired → new entry, count 0,
       reset_at = now + window
    2. count += 1
    3. Return the entry; the caller compares count against its limit

    Rejected hits still count. Counters are never lowered before their
    window ends; reset()/reset_all() exist for operators and tests.

Concurrency:
    hit() never awaits, so under asyncio each call runs to completion
    without interleaving. Single process only: every worker process keeps
    its own counters.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class WindowEntry:
    """Hit count of one key and the clock value at which it resets."""

    count: int
    reset_at: float


class FixedWindowStore:
    """
    In-memory fixed window counter store.

    Args:
        window: Window length in seconds.
        clock:  Monotonic time source; time.monotonic unless overridden.
        cleanup_every: Purge expired keys after this many hits.
    """

    def __init__(
        self,
        window: float,
        clock: Callable[[], float] = time.monotonic,
        cleanup_every: int = 1000,
    ):
        if window <= 0:
            raise ValueError("window must be positive")
        self.window = window
        self._clock = clock
        self._cleanup_every = cleanup_every
        self._entries: Dict[str, WindowEntry] = {}
        self._hits_since_cleanup = 0

    def hit(self, key: str) -> WindowEntry:
        """Record one request for `key` and return its updated entry."""
        now = self._clock()
        entry = self._entries.get(key)
        if entry is None or now >= entry.reset_at:
            entry = WindowEntry(count=0, reset_at=now + self.window)
            self._entries[key] = entry
        entry.count += 1

        self._hits_since_cleanup += 1
        if self._hits_since_cleanup >= self._cleanup_every:
            self._hits_since_cleanup = 0
            self.purge_expired()

        return entry

    def get(self, key: str) -> Optional[WindowEntry]:
        """Return the live entry for `key`, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None or self._clock() >= entry.reset_at:
            return None
        return entry

    def seconds_until_reset(self, key: str) -> int:
        entry = self.get(key)
        if entry is None:
            return 0
        # Round up: a client retrying after this many seconds is admitted
        remaining = entry.reset_at - self._clock()
        return max(1, int(remaining) + (remaining % 1 > 0))

    def reset(self, key: str) -> None:
        self._entries.pop(key, None)

    def reset_all(self) -> None:
        self._entries.clear()
        self._hits_since_cleanup = 0

    def purge_expired(self) -> int:
        """Drop entries whose window has elapsed; returns how many."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.reset_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Purged %d expired rate-limit entries", len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
