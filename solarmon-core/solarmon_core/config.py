"""
Client Configuration
====================
Immutable configuration for one logical remote monitoring service.
"""

from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

from solarmon_core import __version__
from solarmon_core.http.exceptions import ConfigurationError
from solarmon_core.settings import Settings, get_settings

DEFAULT_USER_AGENT = f"SolarMon-ApiClient/{__version__}"


@dataclass(frozen=True)
class AuthCredential:
    """Header injected into every outbound request."""
    header_name: str
    value: str = field(repr=False)

    @classmethod
    def bearer(cls, token: str) -> "AuthCredential":
        return cls("Authorization", f"Bearer {token}")

    @classmethod
    def access_key(cls, key: str) -> "AuthCredential":
        return cls("x-access-key", key)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay_ms: int = 350

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ConfigurationError("retry.max_attempts must be >= 1")
        if self.base_delay_ms < 0:
            raise ConfigurationError("retry.base_delay_ms must be >= 0")


@dataclass(frozen=True)
class RateLimitPolicy:
    max_requests: int = 10
    window_ms: int = 60000

    def __post_init__(self):
        if self.max_requests < 1:
            raise ConfigurationError("rate_limit.max_requests must be >= 1")
        if self.window_ms <= 0:
            raise ConfigurationError("rate_limit.window_ms must be > 0")


@dataclass(frozen=True)
class CachePolicy:
    enabled: bool = True
    ttl_ms: int = 55 * 60 * 1000

    def __post_init__(self):
        if self.ttl_ms <= 0:
            raise ConfigurationError("cache.ttl_ms must be > 0")


@dataclass(frozen=True)
class CircuitBreakerPolicy:
    failure_threshold: int = 5        # Consecutive failures before opening
    cooldown_ms: int = 60000          # Time open before the half-open trial

    def __post_init__(self):
        if self.failure_threshold < 1:
            raise ConfigurationError("circuit_breaker.failure_threshold must be >= 1")
        if self.cooldown_ms < 0:
            raise ConfigurationError("circuit_breaker.cooldown_ms must be >= 0")


@dataclass(frozen=True)
class HealthPolicy:
    max_cache_entries: int = 1000     # Above this the client reports degraded
    unhealthy_open_circuits: int = 2  # More open circuits than this is unhealthy


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for one remote service, fixed for the client's lifetime."""
    base_url: str
    auth: Optional[AuthCredential] = None
    timeout_ms: int = 30000
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    rate_limit: RateLimitPolicy = field(default_factory=RateLimitPolicy)
    cache: CachePolicy = field(default_factory=CachePolicy)
    circuit_breaker: CircuitBreakerPolicy = field(default_factory=CircuitBreakerPolicy)
    health: HealthPolicy = field(default_factory=HealthPolicy)
    user_agent: str = DEFAULT_USER_AGENT
    name: str = ""

    def __post_init__(self):
        if not self.base_url:
            raise ConfigurationError("base_url is required")
        if self.timeout_ms <= 0:
            raise ConfigurationError("timeout_ms must be > 0")

        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        if not self.name:
            object.__setattr__(self, "name", urlparse(self.base_url).netloc or self.base_url)

    @classmethod
    def from_settings(
        cls,
        base_url: str,
        settings: Optional[Settings] = None,
        **overrides,
    ) -> "ClientConfig":
        """Build a config whose defaults come from environment settings."""
        settings = settings or get_settings()
        kwargs = {
            "timeout_ms": settings.request_timeout_ms,
            "retry": RetryPolicy(
                max_attempts=settings.max_retry_attempts,
                base_delay_ms=settings.min_request_interval,
            ),
            "cache": CachePolicy(enabled=True, ttl_ms=settings.cache_ttl_ms),
        }
        kwargs.update(overrides)
        return cls(base_url=base_url, **kwargs)
