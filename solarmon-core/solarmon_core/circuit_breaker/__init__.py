"""
SolarMon Core - Circuit Breaker
===============================
Per-endpoint circuit breaker for calls to third-party monitoring APIs.

States:

1. CLOSED: Normal operation, requests flow through
2. OPEN: Endpoint is failing, requests are immediately rejected
3. HALF-OPEN: One trial request tests whether the endpoint recovered
"""

from .models import CircuitState, CircuitBreakerState
from .breaker import CircuitBreaker

__all__ = [
    "CircuitState",
    "CircuitBreakerState",
    "CircuitBreaker",
]
