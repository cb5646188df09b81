"""
Shared fixtures: a fake clock that advances on sleep and a scripted transport.
"""

import asyncio
from types import SimpleNamespace

import pytest

from solarmon_core.http import TransportResponse
from solarmon_core.settings import Settings
from solarmon_core.timing import Clock


class FakeClock(Clock):
    """Deterministic clock: sleeping advances time instantly."""

    def __init__(self, start_ms: float = 0.0):
        self.now = start_ms
        self.sleeps = []

    def now_ms(self) -> float:
        return self.now

    async def sleep_ms(self, ms: float) -> None:
        self.sleeps.append(ms)
        self.now += max(ms, 0)
        await asyncio.sleep(0)

    def advance(self, ms: float) -> None:
        self.now += ms


class FakeTransport:
    """Transport double returning scripted outcomes (responses or exceptions)."""

    def __init__(self, clock: FakeClock, outcomes=None):
        self.clock = clock
        self.outcomes = list(outcomes or [])
        self.calls = []
        self.closed = False

    def queue(self, *outcomes):
        self.outcomes.extend(outcomes)

    async def send(self, url, method="GET", headers=None, body=None, timeout_ms=None):
        self.calls.append(SimpleNamespace(
            url=url,
            method=method,
            headers=headers,
            body=body,
            timeout_ms=timeout_ms,
            at_ms=self.clock.now_ms(),
        ))
        outcome = self.outcomes.pop(0) if self.outcomes else TransportResponse(
            data={"ok": True}, status=200, headers={"content-type": "application/json"}
        )
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def aclose(self):
        self.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport(clock):
    return FakeTransport(clock)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def make_client(clock, transport):
    """Build an ApiClient on the fake clock/transport with config overrides."""
    from solarmon_core.client import ApiClient
    from solarmon_core.config import ClientConfig, RetryPolicy

    def _make(**overrides):
        overrides.setdefault("base_url", "https://api.example.com")
        overrides.setdefault("retry", RetryPolicy(max_attempts=1, base_delay_ms=100))
        overrides.setdefault("name", "test-client")
        return ApiClient(ClientConfig(**overrides), transport=transport, clock=clock)

    return _make
