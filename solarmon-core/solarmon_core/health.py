"""
Client Health Endpoints
=======================
Exposes API client health so dashboards can render status badges.
"""

import time
from typing import Dict, Mapping

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
import structlog

from solarmon_core.client import ApiClient
from solarmon_core.models import HealthReport, HealthStatus, worst_status

logger = structlog.get_logger(__name__)


class ClientsHealthResponse(BaseModel):
    status: HealthStatus
    clients: Dict[str, HealthReport]
    timestamp: float


def aggregate_health(clients: Mapping[str, ApiClient]) -> ClientsHealthResponse:
    """Worst client status wins; no clients means healthy."""
    reports = {name: client.health_check() for name, client in clients.items()}
    status = worst_status(*(report.status for report in reports.values()))
    if status != HealthStatus.HEALTHY:
        logger.warning(
            "api_clients_not_healthy",
            status=status.value,
            clients={name: r.status.value for name, r in reports.items()},
        )
    return ClientsHealthResponse(status=status, clients=reports, timestamp=time.time())


def create_health_router(clients: Mapping[str, ApiClient], prefix: str = "/health/clients") -> APIRouter:
    """
    Create a router reporting the health of outbound API clients.

    Args:
        clients: Mapping of display name to client (e.g. {"sungrow": ...})
        prefix: Mount path for the endpoints

    Returns:
        FastAPI router with ``{prefix}`` and ``{prefix}/{name}`` endpoints
    """
    router = APIRouter(prefix=prefix, tags=["Health"])

    @router.get("", response_model=ClientsHealthResponse)
    async def clients_health() -> ClientsHealthResponse:
        """Aggregate health of every registered client."""
        return aggregate_health(clients)

    @router.get("/{name}", response_model=HealthReport)
    async def client_health(name: str) -> HealthReport:
        client = clients.get(name)
        if client is None:
            raise HTTPException(status_code=404, detail=f"Unknown client '{name}'")
        return client.health_check()

    return router
