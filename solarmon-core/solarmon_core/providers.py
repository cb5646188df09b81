"""
Provider Profiles
=================
Client configurations tuned to each inverter cloud's published quota.

Sungrow iSolarCloud allows few requests per minute and rotates its session
tokens roughly hourly, so responses are cached for 55 minutes. SolarEdge
Monitoring allows 300 requests per minute and data is refreshed every
15 minutes.

Usage:
    client = create_solaredge_client(api_key="...")
    overview = await client.get(f"/site/{site_id}/overview")
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from solarmon_core.client import ApiClient
from solarmon_core.config import (
    AuthCredential,
    CachePolicy,
    ClientConfig,
    RateLimitPolicy,
    RetryPolicy,
)
from solarmon_core.http.exceptions import ConfigurationError
from solarmon_core.settings import Settings, get_settings


@dataclass(frozen=True)
class ProviderProfile:
    """Static per-provider client settings."""
    name: str
    base_url: str
    auth: Callable[[str], AuthCredential]
    timeout_ms: int
    max_attempts: int
    max_requests: int
    window_ms: int
    cache_ttl_ms: int


PROVIDER_PROFILES: Dict[str, ProviderProfile] = {
    "sungrow": ProviderProfile(
        name="sungrow",
        base_url="https://gateway.isolarcloud.com.hk",
        auth=AuthCredential.access_key,
        timeout_ms=45000,
        max_attempts=3,
        max_requests=8,
        window_ms=60000,
        cache_ttl_ms=55 * 60 * 1000,
    ),
    "solaredge": ProviderProfile(
        name="solaredge",
        base_url="https://monitoringapi.solaredge.com",
        auth=AuthCredential.bearer,
        timeout_ms=30000,
        max_attempts=3,
        max_requests=300,
        window_ms=60000,
        cache_ttl_ms=15 * 60 * 1000,
    ),
}


def provider_config(
    provider: str,
    credential: str,
    base_url: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> ClientConfig:
    """Build the ClientConfig for a known provider."""
    profile = PROVIDER_PROFILES.get(provider)
    if profile is None:
        raise ConfigurationError(
            f"Unknown provider '{provider}'. Known: {', '.join(sorted(PROVIDER_PROFILES))}"
        )
    if not credential:
        raise ConfigurationError(f"Missing credential for provider '{provider}'")

    settings = settings or get_settings()
    return ClientConfig(
        base_url=base_url or profile.base_url,
        auth=profile.auth(credential),
        timeout_ms=profile.timeout_ms,
        retry=RetryPolicy(
            max_attempts=profile.max_attempts,
            base_delay_ms=settings.min_request_interval,
        ),
        rate_limit=RateLimitPolicy(
            max_requests=profile.max_requests,
            window_ms=profile.window_ms,
        ),
        cache=CachePolicy(enabled=True, ttl_ms=profile.cache_ttl_ms),
        name=profile.name,
    )


def create_provider_client(provider: str, credential: str, base_url: Optional[str] = None, **kwargs) -> ApiClient:
    settings = kwargs.pop("settings", None)
    return ApiClient(provider_config(provider, credential, base_url, settings), **kwargs)


def create_sungrow_client(access_key: str, base_url: Optional[str] = None, **kwargs) -> ApiClient:
    """Client for Sungrow iSolarCloud (``x-access-key`` header)."""
    return create_provider_client("sungrow", access_key, base_url, **kwargs)


def create_solaredge_client(api_key: str, base_url: Optional[str] = None, **kwargs) -> ApiClient:
    """Client for SolarEdge Monitoring (bearer token)."""
    return create_provider_client("solaredge", api_key, base_url, **kwargs)
