"""
Tests for the health router, metrics and logging setup.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from solarmon_core.health import aggregate_health, create_health_router
from solarmon_core.http import HttpError
from solarmon_core.models import HealthStatus


async def _open_circuit(client, transport, endpoint="/plants"):
    transport.queue(*[HttpError(500, "Internal Server Error") for _ in range(5)])
    for _ in range(5):
        with pytest.raises(HttpError):
            await client.get(endpoint, skip_cache=True)


class TestHealthRouter:
    """Tests for the client health endpoints."""

    def test_all_healthy(self, make_client):
        """Should report healthy when every client is healthy."""
        app = FastAPI()
        app.include_router(create_health_router({"sungrow": make_client(name="sungrow")}))

        response = TestClient(app).get("/health/clients")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["clients"]["sungrow"]["status"] == "healthy"
        assert "timestamp" in body

    def test_single_client(self, make_client):
        app = FastAPI()
        app.include_router(create_health_router({"solaredge": make_client(name="solaredge")}))

        response = TestClient(app).get("/health/clients/solaredge")

        assert response.status_code == 200
        assert response.json()["client"] == "solaredge"

    def test_unknown_client_404(self, make_client):
        app = FastAPI()
        app.include_router(create_health_router({"sungrow": make_client()}))

        response = TestClient(app).get("/health/clients/fronius")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_worst_status_wins(self, make_client, transport):
        """One degraded client makes the aggregate degraded."""
        failing = make_client(base_url="https://a.example.com", name="a")
        healthy = make_client(base_url="https://b.example.com", name="b")
        await _open_circuit(failing, transport)

        report = aggregate_health({"a": failing, "b": healthy})

        assert report.status == HealthStatus.DEGRADED
        assert report.clients["b"].status == HealthStatus.HEALTHY

    def test_no_clients_is_healthy(self):
        assert aggregate_health({}).status == HealthStatus.HEALTHY


class TestMetrics:
    """Tests for Prometheus recording."""

    def test_endpoint_normalization(self):
        from solarmon_core.metrics import _normalize_endpoint

        assert _normalize_endpoint("/site/1234/overview?startDate=2024") == "/site/{id}/overview"
        assert _normalize_endpoint(
            "/plants/123e4567-e89b-12d3-a456-426614174000"
        ) == "/plants/{uuid}"

    @pytest.mark.asyncio
    async def test_requests_are_recorded(self, make_client):
        from solarmon_core.metrics import get_metrics_text

        client = make_client(name="metrics-client")
        await client.get("/site/42/overview")

        text = get_metrics_text().decode()

        assert 'solarmon_api_requests_total{client="metrics-client"' in text
        assert 'endpoint="/site/{id}/overview"' in text

    @pytest.mark.asyncio
    async def test_circuit_gauge_label_is_normalized(self, make_client, transport):
        """Site IDs and query strings should not create new circuit series."""
        from solarmon_core.metrics import get_metrics_text

        client = make_client(name="gauge-client")
        await _open_circuit(client, transport, "/site/4711/energy?startDate=2024-01-01")

        text = get_metrics_text().decode()

        assert 'circuit="https://api.example.com:/site/{id}/energy"' in text
        assert "4711" not in text


class TestLoggingSetup:
    """Tests for structlog configuration."""

    def test_setup_logging_json(self, capsys):
        import json
        import logging
        import structlog
        from solarmon_core.logging_config import setup_logging

        setup_logging("solarmon-test", level="INFO")
        structlog.get_logger("test").info("hello", plant=1)

        lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
        event = json.loads(lines[-1])
        assert event["event"] == "hello"
        assert event["service"] == "solarmon-test"
        assert event["level"] == "info"
        structlog.contextvars.clear_contextvars()
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()
