"""
Circuit Breaker Core
====================
Keyed circuit breaker tracking logical request failures per endpoint.
"""

from typing import Any, Callable, Dict, Optional
import structlog

from solarmon_core.config import CircuitBreakerPolicy
from solarmon_core.timing import Clock, SYSTEM_CLOCK

from .models import CircuitState, CircuitBreakerState

logger = structlog.get_logger(__name__)


class CircuitBreaker:
    """
    Per-key circuit breaker with a lazily evaluated cooldown.

    States:
    - CLOSED: requests flow through
    - OPEN: requests fail fast until ``cooldown_ms`` has passed since the
      last failure; the first check after that moves the circuit to HALF_OPEN
    - HALF_OPEN: exactly one trial request is admitted; its outcome closes
      or re-opens the circuit

    Example:
        breaker = CircuitBreaker(CircuitBreakerPolicy())

        if not breaker.can_proceed(key):
            raise CircuitOpenError(key, breaker.retry_after_ms(key))
        try:
            result = await call()
        except Exception:
            breaker.record_outcome(key, False)
            raise
        breaker.record_outcome(key, True)
    """

    def __init__(
        self,
        policy: Optional[CircuitBreakerPolicy] = None,
        clock: Clock = SYSTEM_CLOCK,
        name: str = "default",
        on_state_change: Optional[Callable[[str, CircuitState], None]] = None,
    ):
        self.policy = policy or CircuitBreakerPolicy()
        self.name = name
        self._clock = clock
        self._circuits: Dict[str, CircuitBreakerState] = {}
        self._on_state_change = on_state_change

    def _get(self, key: str) -> CircuitBreakerState:
        if key not in self._circuits:
            self._circuits[key] = CircuitBreakerState()
        return self._circuits[key]

    def _transition(self, key: str, state: CircuitBreakerState, phase: CircuitState) -> None:
        state.phase = phase
        if self._on_state_change:
            self._on_state_change(key, phase)

    def state(self, key: str) -> CircuitState:
        """Current phase for a key without triggering any transition."""
        circuit = self._circuits.get(key)
        return circuit.phase if circuit else CircuitState.CLOSED

    def can_proceed(self, key: str) -> bool:
        """Check and possibly transition state. Returns True if the call may go out."""
        circuit = self._get(key)

        if circuit.phase == CircuitState.CLOSED:
            return True

        if circuit.phase == CircuitState.OPEN:
            elapsed = self._clock.now_ms() - (circuit.last_failure_at_ms or 0)
            if elapsed > self.policy.cooldown_ms:
                self._transition(key, circuit, CircuitState.HALF_OPEN)
                circuit.trial_in_flight = True
                logger.info("circuit_half_open", client=self.name, circuit=key, after_ms=round(elapsed))
                return True
            circuit.total_rejections += 1
            return False

        # HALF_OPEN: only the single trial
        if not circuit.trial_in_flight:
            circuit.trial_in_flight = True
            return True
        circuit.total_rejections += 1
        return False

    def release_trial(self, key: str) -> None:
        """Give back a half-open trial that ended without a network outcome."""
        circuit = self._circuits.get(key)
        if circuit and circuit.phase == CircuitState.HALF_OPEN:
            circuit.trial_in_flight = False

    def record_outcome(self, key: str, success: bool) -> None:
        """Record the final outcome of one logical request."""
        circuit = self._get(key)
        circuit.trial_in_flight = False

        if success:
            circuit.total_successes += 1
            circuit.consecutive_failures = 0
            if circuit.phase == CircuitState.HALF_OPEN:
                self._transition(key, circuit, CircuitState.CLOSED)
                logger.info("circuit_closed", client=self.name, circuit=key)
            return

        circuit.total_failures += 1
        circuit.consecutive_failures += 1
        circuit.last_failure_at_ms = self._clock.now_ms()

        if circuit.phase == CircuitState.HALF_OPEN:
            self._transition(key, circuit, CircuitState.OPEN)
            logger.warning("circuit_reopened", client=self.name, circuit=key)
        elif (
            circuit.phase == CircuitState.CLOSED
            and circuit.consecutive_failures >= self.policy.failure_threshold
        ):
            self._transition(key, circuit, CircuitState.OPEN)
            logger.warning(
                "circuit_opened",
                client=self.name,
                circuit=key,
                failures=circuit.consecutive_failures,
            )

    def retry_after_ms(self, key: str) -> float:
        """Milliseconds until an open circuit will admit its trial."""
        circuit = self._circuits.get(key)
        if not circuit or circuit.phase != CircuitState.OPEN:
            return 0.0
        elapsed = self._clock.now_ms() - (circuit.last_failure_at_ms or 0)
        return max(0.0, self.policy.cooldown_ms - elapsed)

    def open_circuits(self) -> int:
        return sum(1 for c in self._circuits.values() if c.phase == CircuitState.OPEN)

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        """Plain-dict copy of every circuit's state."""
        return {key: circuit.to_dict() for key, circuit in self._circuits.items()}

    def reset(self, key: Optional[str] = None) -> None:
        """Reset one circuit, or all of them, to closed (for admin use)."""
        keys = [key] if key is not None else list(self._circuits)
        for k in keys:
            if k in self._circuits:
                self._circuits[k] = CircuitBreakerState()
                if self._on_state_change:
                    self._on_state_change(k, CircuitState.CLOSED)
                logger.info("circuit_reset", client=self.name, circuit=k)
