"""
Tests for the keyed circuit breaker.
"""

from solarmon_core.circuit_breaker import CircuitBreaker, CircuitState
from solarmon_core.config import CircuitBreakerPolicy

KEY = "https://api.example.com:/plants"


def _open(breaker, key=KEY, failures=5):
    for _ in range(failures):
        assert breaker.can_proceed(key)
        breaker.record_outcome(key, False)


class TestCircuitBreakerClosed:
    """Tests for the closed phase and the failure threshold."""

    def test_new_key_is_closed(self, clock):
        """Should admit requests for an unseen key."""
        breaker = CircuitBreaker(clock=clock)

        assert breaker.state(KEY) == CircuitState.CLOSED
        assert breaker.can_proceed(KEY)

    def test_opens_after_threshold(self, clock):
        """Five consecutive failures open the circuit; the sixth call is rejected."""
        breaker = CircuitBreaker(clock=clock)

        _open(breaker)

        assert breaker.state(KEY) == CircuitState.OPEN
        assert not breaker.can_proceed(KEY)
        state = breaker.snapshot()[KEY]
        assert state["consecutive_failures"] == 5
        assert state["total_rejections"] == 1

    def test_stays_closed_below_threshold(self, clock):
        """Four failures keep the circuit closed."""
        breaker = CircuitBreaker(clock=clock)

        _open(breaker, failures=4)

        assert breaker.state(KEY) == CircuitState.CLOSED
        assert breaker.can_proceed(KEY)

    def test_success_resets_failure_count(self, clock):
        """A success in between should reset the consecutive failure count."""
        breaker = CircuitBreaker(clock=clock)

        _open(breaker, failures=4)
        breaker.record_outcome(KEY, True)
        _open(breaker, failures=4)

        assert breaker.state(KEY) == CircuitState.CLOSED
        assert breaker.snapshot()[KEY]["consecutive_failures"] == 4

    def test_keys_are_isolated(self, clock):
        """An open circuit on one endpoint should not affect another."""
        breaker = CircuitBreaker(clock=clock)

        _open(breaker)

        assert breaker.can_proceed("https://api.example.com:/devices")
        assert breaker.open_circuits() == 1

    def test_custom_threshold(self, clock):
        """Should honour a configured threshold."""
        breaker = CircuitBreaker(CircuitBreakerPolicy(failure_threshold=2), clock=clock)

        _open(breaker, failures=2)

        assert breaker.state(KEY) == CircuitState.OPEN


class TestCircuitBreakerRecovery:
    """Tests for cooldown, the half-open trial and reset."""

    def test_rejects_until_cooldown_strictly_elapsed(self, clock):
        """Exactly cooldown_ms after the last failure is still open."""
        breaker = CircuitBreaker(clock=clock)
        _open(breaker)

        clock.advance(60000)

        assert not breaker.can_proceed(KEY)
        assert breaker.state(KEY) == CircuitState.OPEN

    def test_admits_exactly_one_trial(self, clock):
        """After cooldown the first caller is admitted and the next is rejected."""
        breaker = CircuitBreaker(clock=clock)
        _open(breaker)

        clock.advance(60001)

        assert breaker.can_proceed(KEY)
        assert breaker.state(KEY) == CircuitState.HALF_OPEN
        assert not breaker.can_proceed(KEY)

    def test_trial_success_closes(self, clock):
        """A successful trial closes the circuit and clears failures."""
        breaker = CircuitBreaker(clock=clock)
        _open(breaker)
        clock.advance(60001)
        breaker.can_proceed(KEY)

        breaker.record_outcome(KEY, True)

        assert breaker.state(KEY) == CircuitState.CLOSED
        assert breaker.snapshot()[KEY]["consecutive_failures"] == 0
        assert breaker.can_proceed(KEY)

    def test_trial_failure_reopens(self, clock):
        """A failed trial re-opens immediately with a fresh cooldown."""
        breaker = CircuitBreaker(clock=clock)
        _open(breaker)
        clock.advance(60001)
        breaker.can_proceed(KEY)

        breaker.record_outcome(KEY, False)

        assert breaker.state(KEY) == CircuitState.OPEN
        assert not breaker.can_proceed(KEY)
        assert breaker.retry_after_ms(KEY) == 60000

    def test_release_trial_frees_slot(self, clock):
        """A released trial lets the next caller probe instead."""
        breaker = CircuitBreaker(clock=clock)
        _open(breaker)
        clock.advance(60001)
        breaker.can_proceed(KEY)

        breaker.release_trial(KEY)

        assert breaker.state(KEY) == CircuitState.HALF_OPEN
        assert breaker.can_proceed(KEY)

    def test_retry_after_counts_down(self, clock):
        breaker = CircuitBreaker(clock=clock)
        _open(breaker)

        clock.advance(15000)

        assert breaker.retry_after_ms(KEY) == 45000
        assert breaker.retry_after_ms("unknown") == 0

    def test_reset_closes_circuit(self, clock):
        """Reset should return an open circuit to a fresh closed state."""
        changes = []
        breaker = CircuitBreaker(clock=clock, on_state_change=lambda k, s: changes.append((k, s)))
        _open(breaker)

        breaker.reset(KEY)

        assert breaker.state(KEY) == CircuitState.CLOSED
        assert breaker.can_proceed(KEY)
        assert changes == [(KEY, CircuitState.OPEN), (KEY, CircuitState.CLOSED)]

    def test_reset_all(self, clock):
        breaker = CircuitBreaker(clock=clock)
        _open(breaker, key="a")
        _open(breaker, key="b")

        breaker.reset()

        assert breaker.open_circuits() == 0
