"""
Timing Primitives
=================
Monotonic millisecond clock and async sleep used by every pipeline stage.

Components take a ``Clock`` so tests can substitute a fake one that
advances time on sleep instead of waiting.
"""

import asyncio
import time


class Clock:
    """Monotonic clock in milliseconds with an async sleep."""

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0

    async def sleep_ms(self, ms: float) -> None:
        await asyncio.sleep(max(ms, 0) / 1000.0)


SYSTEM_CLOCK = Clock()
