"""
Environment Settings
====================
Validated environment defaults shared by every client built in a process.

Variables (all optional):
    SOLARMON_LOG_LEVEL              DEBUG | INFO | WARNING | ERROR | CRITICAL
    SOLARMON_MIN_REQUEST_INTERVAL   base retry delay in ms (100-5000)
    SOLARMON_MAX_RETRY_ATTEMPTS     attempts per request (1-10)
    SOLARMON_CACHE_TTL_MINUTES      GET cache TTL (1-1440)
    SOLARMON_REQUEST_TIMEOUT_MS     per-request network budget
"""

from functools import lru_cache
from typing import Literal

import structlog
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from solarmon_core.http.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

ENV_PREFIX = "SOLARMON_"


class Settings(BaseSettings):
    """Process-wide defaults loaded from the environment."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    min_request_interval: int = Field(
        default=350,
        description="Base retry delay in milliseconds",
        ge=100,
        le=5000,
    )
    max_retry_attempts: int = Field(default=3, description="Attempts per request", ge=1, le=10)
    cache_ttl_minutes: int = Field(default=55, description="GET cache TTL", ge=1, le=1440)
    request_timeout_ms: int = Field(default=30000, description="Per-request network budget", ge=1)

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value):
        if isinstance(value, str):
            value = value.strip().upper()
            if value == "WARN":
                return "WARNING"
        return value

    @property
    def cache_ttl_ms(self) -> int:
        return self.cache_ttl_minutes * 60 * 1000

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from ``SOLARMON_*`` environment variables.

        Raises:
            ConfigurationError: listing every invalid variable
        """
        try:
            return cls()
        except ValidationError as e:
            details = ", ".join(
                f"{ENV_PREFIX}{'.'.join(str(p) for p in err['loc']).upper()}: {err['msg']}"
                for err in e.errors()
            )
            logger.critical("environment_invalid", errors=details)
            raise ConfigurationError(f"Invalid environment: {details}", details=e.errors()) from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings loaded once from ``os.environ``."""
    return Settings.from_env()
