"""
Circuit Breaker Models
======================
Data models and enums for the per-endpoint circuit breaker.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional


class CircuitState(str, Enum):
    """Circuit breaker phases."""
    CLOSED = "closed"        # Normal operation
    OPEN = "open"            # Failing, reject requests
    HALF_OPEN = "half_open"  # One trial request allowed


@dataclass
class CircuitBreakerState:
    """Runtime state of one circuit."""
    phase: CircuitState = CircuitState.CLOSED
    consecutive_failures: int = 0
    last_failure_at_ms: Optional[float] = None
    trial_in_flight: bool = False

    # Metrics
    total_successes: int = 0
    total_failures: int = 0
    total_rejections: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["phase"] = self.phase.value
        return data
