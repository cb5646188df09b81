"""
Tests for provider client factories.
"""

import pytest

from solarmon_core.http import ConfigurationError
from solarmon_core.settings import Settings


class TestProviderConfig:
    """Tests for provider_config."""

    def test_sungrow_profile(self, settings):
        """Should use the access key header and the tight Sungrow quota."""
        from solarmon_core.providers import provider_config

        config = provider_config("sungrow", "key-123", settings=settings)

        assert config.name == "sungrow"
        assert config.base_url == "https://gateway.isolarcloud.com.hk"
        assert config.auth.header_name == "x-access-key"
        assert config.auth.value == "key-123"
        assert config.timeout_ms == 45000
        assert config.retry.max_attempts == 3
        assert config.rate_limit.max_requests == 8
        assert config.rate_limit.window_ms == 60000
        assert config.cache.ttl_ms == 55 * 60 * 1000

    def test_solaredge_profile(self, settings):
        """Should use bearer auth and the SolarEdge quota."""
        from solarmon_core.providers import provider_config

        config = provider_config("solaredge", "token", settings=settings)

        assert config.base_url == "https://monitoringapi.solaredge.com"
        assert config.auth.header_name == "Authorization"
        assert config.auth.value == "Bearer token"
        assert config.rate_limit.max_requests == 300
        assert config.cache.ttl_ms == 15 * 60 * 1000

    def test_base_delay_follows_settings(self):
        from solarmon_core.providers import provider_config

        config = provider_config("sungrow", "k", settings=Settings(min_request_interval=1200))

        assert config.retry.base_delay_ms == 1200

    def test_base_url_override(self, settings):
        from solarmon_core.providers import provider_config

        config = provider_config("sungrow", "k", base_url="https://gateway.isolarcloud.eu/", settings=settings)

        assert config.base_url == "https://gateway.isolarcloud.eu"
        assert config.name == "sungrow"

    def test_unknown_provider(self, settings):
        from solarmon_core.providers import provider_config

        with pytest.raises(ConfigurationError) as exc_info:
            provider_config("fronius", "k", settings=settings)

        assert "solaredge" in str(exc_info.value)

    def test_missing_credential(self, settings):
        from solarmon_core.providers import provider_config

        with pytest.raises(ConfigurationError):
            provider_config("solaredge", "", settings=settings)


class TestProviderClients:
    """Tests for the client factory functions."""

    @pytest.mark.asyncio
    async def test_create_sungrow_client(self, settings, transport, clock):
        from solarmon_core.providers import create_sungrow_client

        client = create_sungrow_client("key", settings=settings, transport=transport, clock=clock)
        await client.get("/openapi/getPowerStationList")

        assert client.name == "sungrow"
        assert transport.calls[0].url == "https://gateway.isolarcloud.com.hk/openapi/getPowerStationList"

    @pytest.mark.asyncio
    async def test_create_solaredge_client(self, settings, transport, clock):
        from solarmon_core.providers import create_solaredge_client

        client = create_solaredge_client("token", settings=settings, transport=transport, clock=clock)
        await client.get("/site/1234/overview")

        assert client.name == "solaredge"
        assert client.config.auth.value == "Bearer token"
        assert transport.calls[0].url == "https://monitoringapi.solaredge.com/site/1234/overview"
