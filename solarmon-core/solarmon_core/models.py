"""
Client Models
=============
Request/response shapes and health/stats reports for the API client.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel


@dataclass
class RequestSpec:
    """Per-call request description and overrides."""
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    timeout_ms: Optional[float] = None
    skip_cache: bool = False
    skip_rate_limit: bool = False
    retry_condition: Optional[Callable[[BaseException], bool]] = None
    cache_ttl_ms: Optional[float] = None          # Overrides the configured TTL on store
    max_rate_limit_wait_ms: Optional[float] = None  # Fail instead of waiting longer than this


@dataclass
class ApiResponse:
    """Result of a successful request."""
    data: Any
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    cached: bool = False
    duration: int = 0  # Milliseconds


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


HEALTH_SEVERITY = {
    HealthStatus.HEALTHY: 0,
    HealthStatus.DEGRADED: 1,
    HealthStatus.UNHEALTHY: 2,
}


def worst_status(*statuses: HealthStatus) -> HealthStatus:
    return max(statuses, key=HEALTH_SEVERITY.__getitem__, default=HealthStatus.HEALTHY)


class ClientStats(BaseModel):
    cache_size: int
    cache_hits: int
    cache_misses: int
    hit_rate: float
    circuit_breakers: Dict[str, Dict[str, Any]]
    active_rate_limits: int


class HealthReport(BaseModel):
    status: HealthStatus
    client: str
    base_url: str
    open_circuits: int
    stats: ClientStats
