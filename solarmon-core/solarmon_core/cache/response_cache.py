"""
Response Cache
==============
In-memory TTL cache for successful GET responses.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional
import structlog

from solarmon_core.timing import Clock, SYSTEM_CLOCK

logger = structlog.get_logger(__name__)


def make_cache_key(method: str, url: str, body: Any = None) -> str:
    """Build ``METHOD:url:json(body)``; an absent body serializes as ``""``."""
    payload = json.dumps(body, separators=(",", ":"), default=str) if body is not None else ""
    return f"{method.upper()}:{url}:{payload}"


@dataclass
class CacheEntry:
    data: Any
    stored_at_ms: float
    ttl_ms: float

    def is_valid(self, now_ms: float) -> bool:
        return now_ms - self.stored_at_ms < self.ttl_ms


class ResponseCache:
    """
    TTL-keyed response store.

    Expiry is checked on every read and expired entries are evicted then;
    there is no background sweep, so expired entries still count towards
    ``size`` until they are looked up or invalidated.
    """

    def __init__(
        self,
        enabled: bool = True,
        default_ttl_ms: float = 55 * 60 * 1000,
        clock: Clock = SYSTEM_CLOCK,
    ):
        self.enabled = enabled
        self.default_ttl_ms = default_ttl_ms
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self.hits = 0
        self.misses = 0

    @property
    def size(self) -> int:
        return len(self._entries)

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    def lookup(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for ``key`` or None."""
        if not self.enabled:
            return None

        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        if not entry.is_valid(self._clock.now_ms()):
            del self._entries[key]
            self.misses += 1
            return None

        self.hits += 1
        return entry

    def store(self, key: str, data: Any, ttl_ms: Optional[float] = None) -> None:
        if not self.enabled:
            return
        self._entries[key] = CacheEntry(
            data=data,
            stored_at_ms=self._clock.now_ms(),
            ttl_ms=ttl_ms if ttl_ms is not None else self.default_ttl_ms,
        )

    def invalidate(self, pattern: Optional[str] = None) -> int:
        """
        Remove cached entries.

        Args:
            pattern: Substring to match against keys; None clears everything

        Returns:
            Number of entries removed
        """
        if pattern is None:
            removed = len(self._entries)
            self._entries.clear()
        else:
            matching = [key for key in self._entries if pattern in key]
            for key in matching:
                del self._entries[key]
            removed = len(matching)

        logger.info("cache_invalidated", pattern=pattern, removed=removed)
        return removed
