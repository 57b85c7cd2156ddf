"""Call-rate governor for outbound calls to a rate-limited external API.

Two sliding windows are enforced at the same time: a short one (last 60s)
and a long one (last hour). Timestamps are kept in epoch milliseconds in a
deque, appended in real time order, so the deque is implicitly sorted.
Stale entries (older than an hour) are pruned lazily on every check; there
is no background sweep.

The limiter is advisory: it never blocks or refuses a call on its own. The
caller asks `can_make_call()` first and reports with `record_call()` after
the call actually happened. `try_acquire()` does both atomically for callers
sharing one instance across threads/tasks.
"""
from __future__ import annotations
import asyncio
import threading
import time
from collections import deque
from typing import Callable, Deque, List, Optional

from wpbot.infra.logging import log_warning

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * 60 * 1000
# flat backoff reported when only the hourly quota is exhausted
HOURLY_FALLBACK_WAIT_MS = MINUTE_MS

def _wall_clock_ms() -> int:
    return int(time.time() * 1000)

class RateLimiter:
    def __init__(
        self,
        max_calls_per_minute: int = 10,
        max_calls_per_hour: int = 100,
        clock: Optional[Callable[[], int]] = None,
    ):
        self._max_calls_per_minute = max_calls_per_minute
        self._max_calls_per_hour = max_calls_per_hour
        self._clock = clock or _wall_clock_ms
        self._calls: Deque[int] = deque()
        self._lock = threading.RLock()

    @property
    def max_calls_per_minute(self) -> int:
        return self._max_calls_per_minute

    @property
    def max_calls_per_hour(self) -> int:
        return self._max_calls_per_hour

    def _prune(self, now: int) -> None:
        cutoff = now - HOUR_MS
        while self._calls and self._calls[0] <= cutoff:
            self._calls.popleft()

    def _calls_in_last_minute(self, now: int) -> List[int]:
        cutoff = now - MINUTE_MS
        return [ts for ts in self._calls if ts > cutoff]

    def _check(self, now: int, log: bool = True) -> bool:
        self._prune(now)
        in_minute = len(self._calls_in_last_minute(now))
        if in_minute >= self._max_calls_per_minute:
            if log:
                log_warning("rate_limit_minute", calls=in_minute, max=self._max_calls_per_minute)
            return False
        in_hour = len(self._calls)
        if in_hour >= self._max_calls_per_hour:
            if log:
                log_warning("rate_limit_hour", calls=in_hour, max=self._max_calls_per_hour)
            return False
        return True

    def can_make_call(self) -> bool:
        """Return True if a new call is allowed right now.

        Prunes entries older than one hour as a side effect, whatever the outcome.
        """
        with self._lock:
            return self._check(self._clock())

    def record_call(self) -> None:
        """Record a call that has just been made. No pruning here."""
        with self._lock:
            self._calls.append(self._clock())

    def get_wait_time(self) -> int:
        """Milliseconds until the next call would be allowed, 0 if allowed now.

        Denials are not logged here; callers usually just got one from can_make_call().
        """
        with self._lock:
            return self._wait_time(self._clock())

    def _wait_time(self, now: int) -> int:
        if self._check(now, log=False):
            return 0
        recent = self._calls_in_last_minute(now)
        if len(recent) >= self._max_calls_per_minute:
            return min(recent) + MINUTE_MS - now
        # hourly quota exhausted: flat one minute, not the exact slot time
        return HOURLY_FALLBACK_WAIT_MS

    def _acquire_or_wait(self) -> int:
        """Record a call and return 0 if admitted, else the wait in ms."""
        with self._lock:
            now = self._clock()
            if self._check(now):
                self._calls.append(now)
                return 0
            return max(self._wait_time(now), 1)

    def try_acquire(self) -> bool:
        """Check and record in one critical section."""
        return self._acquire_or_wait() == 0

    async def wait_for_slot(self, max_wait_ms: Optional[int] = None) -> bool:
        """Sleep until a call is admitted, then record it.

        Returns False without recording when the next wait would exceed max_wait_ms.
        """
        while True:
            wait_ms = self._acquire_or_wait()
            if wait_ms == 0:
                return True
            if max_wait_ms is not None and wait_ms > max_wait_ms:
                return False
            await asyncio.sleep(wait_ms / 1000)

    def reset(self) -> None:
        """Forget all recorded calls (for tests)."""
        with self._lock:
            self._calls.clear()

    @property
    def recent_call_count(self) -> int:
        """Recorded calls not yet pruned."""
        return len(self._calls)

# Factory helper, kept so callers don't depend on the constructor signature
def build_rate_limiter(max_calls_per_minute: int = 10, max_calls_per_hour: int = 100) -> RateLimiter:
    return RateLimiter(max_calls_per_minute=max_calls_per_minute, max_calls_per_hour=max_calls_per_hour)

__all__ = ["RateLimiter", "build_rate_limiter", "MINUTE_MS", "HOUR_MS", "HOURLY_FALLBACK_WAIT_MS"]
