"""
Resilient API Client
====================
Single request pipeline for unreliable, rate-limited monitoring APIs.

Per request:
    circuit check -> cache lookup (GET) -> rate limit -> retried transport
    -> circuit outcome -> cache store (GET, 2xx)

All cache, rate-window and circuit state is owned by the client instance.
Two clients pointed at the same provider do not share quota tracking.

Usage:
    async with ApiClient(ClientConfig(base_url="https://monitoringapi.solaredge.com")) as client:
        response = await client.get("/site/1234/overview")
        print(response.data, response.cached, response.duration)
"""

import asyncio
from typing import Any, Optional
import structlog

from solarmon_core.cache import ResponseCache, make_cache_key
from solarmon_core.circuit_breaker import CircuitBreaker, CircuitState
from solarmon_core.config import ClientConfig
from solarmon_core.http import HttpTransport, CircuitOpenError, RateLimitTimeoutError
from solarmon_core.metrics import (
    CACHE_LOOKUPS,
    RATE_LIMIT_WAIT,
    record_circuit_state,
    record_error,
    record_request,
)
from solarmon_core.models import (
    ApiResponse,
    ClientStats,
    HealthReport,
    HealthStatus,
    RequestSpec,
    worst_status,
)
from solarmon_core.rate_limit import SlidingWindowRateLimiter
from solarmon_core.retry import RetryExecutor
from solarmon_core.timing import Clock, SYSTEM_CLOCK

logger = structlog.get_logger(__name__)


class ApiClient:
    """
    Outbound HTTP client combining circuit breaking, TTL caching,
    sliding-window rate limiting and exponential-backoff retry.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[HttpTransport] = None,
        clock: Clock = SYSTEM_CLOCK,
    ):
        self.config = config
        self.name = config.name
        self._clock = clock
        self._transport = transport or HttpTransport(config)
        self._cache = ResponseCache(
            enabled=config.cache.enabled,
            default_ttl_ms=config.cache.ttl_ms,
            clock=clock,
        )
        self._rate_limiter = SlidingWindowRateLimiter(
            max_requests=config.rate_limit.max_requests,
            window_ms=config.rate_limit.window_ms,
            clock=clock,
            name=self.name,
        )
        self._breaker = CircuitBreaker(
            config.circuit_breaker,
            clock=clock,
            name=self.name,
            on_state_change=self._on_circuit_change,
        )
        self._retry = RetryExecutor(clock=clock, name=self.name)

        logger.info(
            "api_client_initialized",
            client=self.name,
            base_url=config.base_url,
            cache_enabled=config.cache.enabled,
            rate_limit=f"{config.rate_limit.max_requests}/{config.rate_limit.window_ms}ms",
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    async def aclose(self):
        await self._transport.aclose()

    def _on_circuit_change(self, circuit_key: str, state: CircuitState) -> None:
        record_circuit_state(self.name, circuit_key, state.value)

    def circuit_key(self, endpoint: str) -> str:
        return f"{self.config.base_url}:{endpoint}"

    async def request(self, endpoint: str, spec: Optional[RequestSpec] = None) -> ApiResponse:
        """
        Run one request through the resilience pipeline.

        Args:
            endpoint: Path appended to the base URL (e.g. ``/site/1/overview``)
            spec: Method, headers, body and per-call overrides

        Returns:
            ApiResponse with ``cached`` and ``duration`` (ms) filled in

        Raises:
            CircuitOpenError: Circuit for this endpoint is open; nothing was sent
            RateLimitTimeoutError: Wait exceeded ``spec.max_rate_limit_wait_ms``
            RequestTimeoutError, HttpError, NetworkError, ParseError: after retries
        """
        spec = spec or RequestSpec()
        method = spec.method.upper()
        url = f"{self.config.base_url}{endpoint}"
        circuit_key = self.circuit_key(endpoint)

        if not self._breaker.can_proceed(circuit_key):
            retry_after_ms = self._breaker.retry_after_ms(circuit_key)
            trial_in_progress = self._breaker.state(circuit_key) == CircuitState.HALF_OPEN
            logger.warning(
                "request_rejected_circuit_open",
                client=self.name,
                method=method,
                endpoint=endpoint,
                retry_after_ms=round(retry_after_ms),
                trial_in_progress=trial_in_progress,
            )
            record_request(self.name, method, endpoint, "circuit_open", 0)
            raise CircuitOpenError(
                circuit_key,
                retry_after_ms,
                service=self.name,
                trial_in_progress=trial_in_progress,
            )

        cache_key = make_cache_key(method, url, spec.body)
        if method == "GET" and not spec.skip_cache and self._cache.enabled:
            entry = self._cache.lookup(cache_key)
            if entry is not None:
                self._breaker.release_trial(circuit_key)
                CACHE_LOOKUPS.labels(client=self.name, result="hit").inc()
                record_request(self.name, method, endpoint, "cached", 0)
                logger.debug("cache_hit", client=self.name, url=url)
                return ApiResponse(data=entry.data, status=200, headers={}, cached=True, duration=0)
            CACHE_LOOKUPS.labels(client=self.name, result="miss").inc()

        if not spec.skip_rate_limit:
            try:
                waited_ms = await self._rate_limiter.acquire(
                    circuit_key, max_wait_ms=spec.max_rate_limit_wait_ms
                )
            except (RateLimitTimeoutError, asyncio.CancelledError):
                self._breaker.release_trial(circuit_key)
                raise
            if waited_ms:
                RATE_LIMIT_WAIT.labels(client=self.name).observe(waited_ms / 1000)

        started_ms = self._clock.now_ms()

        try:
            response = await self._retry.run(
                lambda: self._transport.send(
                    url,
                    method=method,
                    headers=spec.headers,
                    body=spec.body,
                    timeout_ms=spec.timeout_ms,
                ),
                max_attempts=self.config.retry.max_attempts,
                base_delay_ms=self.config.retry.base_delay_ms,
                retry_predicate=spec.retry_condition,
                context=f"{method} {endpoint}",
            )
        except asyncio.CancelledError:
            self._breaker.release_trial(circuit_key)
            raise
        except Exception as e:
            duration = round(self._clock.now_ms() - started_ms)
            self._breaker.record_outcome(circuit_key, False)
            record_request(self.name, method, endpoint, "error", duration)
            record_error(self.name, type(e).__name__)
            logger.error(
                "request_failed",
                client=self.name,
                method=method,
                url=url,
                duration_ms=duration,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        duration = round(self._clock.now_ms() - started_ms)
        self._breaker.record_outcome(circuit_key, True)

        if method == "GET" and 200 <= response.status < 300:
            self._cache.store(cache_key, response.data, ttl_ms=spec.cache_ttl_ms)

        record_request(self.name, method, endpoint, "success", duration)
        logger.info(
            "request_succeeded",
            client=self.name,
            method=method,
            url=url,
            status=response.status,
            duration_ms=duration,
        )
        return ApiResponse(
            data=response.data,
            status=response.status,
            headers=response.headers,
            cached=False,
            duration=duration,
        )

    # Convenience verbs

    async def get(self, endpoint: str, **options) -> ApiResponse:
        return await self.request(endpoint, RequestSpec(method="GET", **options))

    async def post(self, endpoint: str, body: Any = None, **options) -> ApiResponse:
        return await self.request(endpoint, RequestSpec(method="POST", body=body, **options))

    async def put(self, endpoint: str, body: Any = None, **options) -> ApiResponse:
        return await self.request(endpoint, RequestSpec(method="PUT", body=body, **options))

    async def patch(self, endpoint: str, body: Any = None, **options) -> ApiResponse:
        return await self.request(endpoint, RequestSpec(method="PATCH", body=body, **options))

    async def delete(self, endpoint: str, **options) -> ApiResponse:
        return await self.request(endpoint, RequestSpec(method="DELETE", **options))

    # Management

    def clear_cache(self, pattern: Optional[str] = None) -> int:
        """Drop cached responses whose key contains ``pattern`` (all when None)."""
        return self._cache.invalidate(pattern)

    def reset_circuit(self, endpoint: Optional[str] = None) -> None:
        """Close the circuit for one endpoint, or every circuit when None."""
        self._breaker.reset(self.circuit_key(endpoint) if endpoint is not None else None)

    def get_stats(self) -> ClientStats:
        return ClientStats(
            cache_size=self._cache.size,
            cache_hits=self._cache.hits,
            cache_misses=self._cache.misses,
            hit_rate=round(self._cache.hit_rate, 4),
            circuit_breakers=self._breaker.snapshot(),
            active_rate_limits=self._rate_limiter.active_keys,
        )

    def health_check(self) -> HealthReport:
        """
        Point-in-time health derived from circuit and cache state.

        Any open circuit makes the client at least degraded, more than
        ``health.unhealthy_open_circuits`` makes it unhealthy, and a cache
        above ``health.max_cache_entries`` makes it at least degraded.
        Read-only: never transitions circuits or evicts cache entries.
        """
        stats = self.get_stats()
        open_circuits = self._breaker.open_circuits()
        status = HealthStatus.HEALTHY

        if open_circuits > self.config.health.unhealthy_open_circuits:
            status = HealthStatus.UNHEALTHY
        elif open_circuits > 0:
            status = HealthStatus.DEGRADED

        if stats.cache_size > self.config.health.max_cache_entries:
            status = worst_status(status, HealthStatus.DEGRADED)

        return HealthReport(
            status=status,
            client=self.name,
            base_url=self.config.base_url,
            open_circuits=open_circuits,
            stats=stats,
        )
