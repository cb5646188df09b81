"""
SolarMon Core Library
=====================
Resilient outbound API client for solar inverter monitoring clouds.
"""

__version__ = "0.3.0"

# Configuration
from solarmon_core.config import (
    ClientConfig,
    AuthCredential,
    RetryPolicy,
    RateLimitPolicy,
    CachePolicy,
    CircuitBreakerPolicy,
    HealthPolicy,
)
from solarmon_core.settings import Settings, get_settings

# Errors
from solarmon_core.http import (
    ApiClientError,
    ConfigurationError,
    CircuitOpenError,
    RequestTimeoutError,
    HttpError,
    NetworkError,
    ParseError,
    RateLimitTimeoutError,
    HttpTransport,
)

# Pipeline components
from solarmon_core.rate_limit import SlidingWindowRateLimiter
from solarmon_core.circuit_breaker import CircuitBreaker, CircuitState
from solarmon_core.cache import ResponseCache, CacheEntry, make_cache_key
from solarmon_core.retry import RetryExecutor, default_retry_predicate, typed_retry_predicate
from solarmon_core.timing import Clock

# Client
from solarmon_core.models import (
    RequestSpec,
    ApiResponse,
    ClientStats,
    HealthReport,
    HealthStatus,
)
from solarmon_core.client import ApiClient

# Providers
from solarmon_core.providers import (
    PROVIDER_PROFILES,
    create_provider_client,
    create_sungrow_client,
    create_solaredge_client,
)

# Health / Logging
from solarmon_core.health import create_health_router
from solarmon_core.logging_config import setup_logging

__all__ = [
    # Configuration
    "ClientConfig",
    "AuthCredential",
    "RetryPolicy",
    "RateLimitPolicy",
    "CachePolicy",
    "CircuitBreakerPolicy",
    "HealthPolicy",
    "Settings",
    "get_settings",
    # Errors
    "ApiClientError",
    "ConfigurationError",
    "CircuitOpenError",
    "RequestTimeoutError",
    "HttpError",
    "NetworkError",
    "ParseError",
    "RateLimitTimeoutError",
    # Pipeline components
    "HttpTransport",
    "SlidingWindowRateLimiter",
    "CircuitBreaker",
    "CircuitState",
    "ResponseCache",
    "CacheEntry",
    "make_cache_key",
    "RetryExecutor",
    "default_retry_predicate",
    "typed_retry_predicate",
    "Clock",
    # Client
    "RequestSpec",
    "ApiResponse",
    "ClientStats",
    "HealthReport",
    "HealthStatus",
    "ApiClient",
    # Providers
    "PROVIDER_PROFILES",
    "create_provider_client",
    "create_sungrow_client",
    "create_solaredge_client",
    # Health / Logging
    "create_health_router",
    "setup_logging",
]
