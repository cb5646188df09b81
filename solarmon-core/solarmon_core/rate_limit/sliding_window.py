"""
Sliding Window Rate Limiter
===========================
In-process sliding window limiter that throttles callers by delaying them.
"""

from typing import Dict, List, Optional
import structlog

from solarmon_core.http.exceptions import RateLimitTimeoutError
from solarmon_core.timing import Clock, SYSTEM_CLOCK

logger = structlog.get_logger(__name__)


class SlidingWindowRateLimiter:
    """
    At most ``max_requests`` admissions per trailing ``window_ms`` per key.

    A caller over quota sleeps until the oldest timestamp leaves the window
    instead of being rejected. There is no cap on how long a caller may
    wait unless ``max_wait_ms`` is passed to :meth:`acquire`.

    No locking: two coroutines can both observe a non-full window before
    either records, briefly overshooting the quota.
    """

    def __init__(
        self,
        max_requests: int,
        window_ms: float,
        clock: Clock = SYSTEM_CLOCK,
        name: str = "default",
    ):
        self.max_requests = max_requests
        self.window_ms = window_ms
        self.name = name
        self._clock = clock
        self._windows: Dict[str, List[float]] = {}

    @property
    def active_keys(self) -> int:
        """Number of keys with a tracked window."""
        return len(self._windows)

    def window(self, key: str) -> List[float]:
        """Snapshot of the timestamps currently tracked for a key."""
        return list(self._windows.get(key, []))

    def _prune(self, key: str, now: float) -> List[float]:
        valid = [ts for ts in self._windows.get(key, []) if now - ts < self.window_ms]
        self._windows[key] = valid
        return valid

    async def acquire(self, key: str, max_wait_ms: Optional[float] = None) -> float:
        """
        Wait until a slot is available for ``key`` and record it.

        Args:
            key: Rate limit key (base URL + endpoint)
            max_wait_ms: Optional deadline; exceeding it raises instead of waiting

        Returns:
            Milliseconds spent waiting (0 when admitted immediately)

        Raises:
            RateLimitTimeoutError: If the required wait exceeds ``max_wait_ms``
        """
        now = self._clock.now_ms()
        valid = self._prune(key, now)

        if len(valid) < self.max_requests:
            valid.append(now)
            return 0.0

        wait_ms = self.window_ms - (now - valid[0])

        if max_wait_ms is not None and wait_ms > max_wait_ms:
            raise RateLimitTimeoutError(key, wait_ms, max_wait_ms, service=self.name)

        logger.warning(
            "rate_limit_wait",
            client=self.name,
            key=key,
            wait_ms=round(wait_ms),
            requests_in_window=len(valid),
        )
        await self._clock.sleep_ms(wait_ms)

        now = self._clock.now_ms()
        self._prune(key, now).append(now)
        return wait_ms
