"""
Outbound API Metrics
====================
Prometheus metrics for the resilient API client pipeline.

Tracks:
- Request latency and counts by outcome
- Cache hits and misses
- Retry attempts
- Rate limiter waits
- Circuit breaker states

Usage:
    from solarmon_core.metrics import get_metrics_text

    @app.get("/metrics")
    async def metrics():
        return Response(get_metrics_text(), media_type=CONTENT_TYPE_LATEST)
"""

import re

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

# Custom registry so several processes/tests can import without clashing
API_CLIENT_REGISTRY = CollectorRegistry()

REQUEST_LATENCY = Histogram(
    name="solarmon_api_request_duration_seconds",
    documentation="Time spent on outbound monitoring API requests",
    labelnames=["client", "method", "endpoint", "outcome"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
    registry=API_CLIENT_REGISTRY,
)

REQUEST_TOTAL = Counter(
    name="solarmon_api_requests_total",
    documentation="Total outbound monitoring API requests",
    labelnames=["client", "method", "endpoint", "outcome"],
    registry=API_CLIENT_REGISTRY,
)

REQUEST_ERRORS = Counter(
    name="solarmon_api_errors_total",
    documentation="Failed requests by error type",
    labelnames=["client", "error_type"],
    registry=API_CLIENT_REGISTRY,
)

CACHE_LOOKUPS = Counter(
    name="solarmon_api_cache_lookups_total",
    documentation="Response cache lookups by result",
    labelnames=["client", "result"],
    registry=API_CLIENT_REGISTRY,
)

RETRY_ATTEMPTS = Counter(
    name="solarmon_api_retries_total",
    documentation="Retries scheduled after a failed attempt",
    labelnames=["client"],
    registry=API_CLIENT_REGISTRY,
)

RATE_LIMIT_WAIT = Histogram(
    name="solarmon_api_rate_limit_wait_seconds",
    documentation="Time callers were delayed by the rate limiter",
    labelnames=["client"],
    buckets=[0.1, 0.5, 1.0, 5.0, 15.0, 30.0, 60.0],
    registry=API_CLIENT_REGISTRY,
)

CIRCUIT_BREAKER_STATE = Gauge(
    name="solarmon_api_circuit_breaker_state",
    documentation="Circuit breaker state (0=closed, 1=half-open, 2=open)",
    labelnames=["client", "circuit"],
    registry=API_CLIENT_REGISTRY,
)

CIRCUIT_STATE_VALUES = {"closed": 0, "half_open": 1, "open": 2}


def record_request(client: str, method: str, endpoint: str, outcome: str, duration_ms: float) -> None:
    """
    Record one finished request.

    Args:
        client: Client name
        method: HTTP method
        endpoint: Request path; IDs are normalized away
        outcome: success, error, cached or circuit_open
        duration_ms: Request duration in milliseconds
    """
    labels = {
        "client": client,
        "method": method,
        "endpoint": _normalize_endpoint(endpoint),
        "outcome": outcome,
    }
    REQUEST_TOTAL.labels(**labels).inc()
    REQUEST_LATENCY.labels(**labels).observe(duration_ms / 1000)


def record_error(client: str, error_type: str) -> None:
    REQUEST_ERRORS.labels(client=client, error_type=error_type).inc()


def record_circuit_state(client: str, circuit: str, state: str) -> None:
    CIRCUIT_BREAKER_STATE.labels(
        client=client,
        circuit=_normalize_endpoint(circuit),
    ).set(CIRCUIT_STATE_VALUES[state])


def _normalize_endpoint(endpoint: str) -> str:
    """Replace UUIDs, numeric IDs and query strings to keep label cardinality low."""
    endpoint = endpoint.split("?", 1)[0]
    endpoint = re.sub(
        r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}',
        '{uuid}',
        endpoint,
        flags=re.IGNORECASE,
    )
    return re.sub(r'/\d+(?=/|$)', '/{id}', endpoint)


def get_metrics_text() -> bytes:
    """Render all client metrics in the Prometheus exposition format."""
    return generate_latest(API_CLIENT_REGISTRY)


__all__ = [
    "API_CLIENT_REGISTRY",
    "CONTENT_TYPE_LATEST",
    "REQUEST_LATENCY",
    "REQUEST_TOTAL",
    "REQUEST_ERRORS",
    "CACHE_LOOKUPS",
    "RETRY_ATTEMPTS",
    "RATE_LIMIT_WAIT",
    "CIRCUIT_BREAKER_STATE",
    "record_request",
    "record_circuit_state",
    "record_error",
    "get_metrics_text",
]
