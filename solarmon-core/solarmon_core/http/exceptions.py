from typing import Optional, Any


class ApiClientError(Exception):
    """Base exception for all outbound monitoring API errors."""
    def __init__(self, message: str, service: str = "unknown", status_code: Optional[int] = None, details: Any = None):
        self.message = message
        self.service = service
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ConfigurationError(ApiClientError):
    """Raised when a client config or the environment is invalid."""
    pass


class CircuitOpenError(ApiClientError):
    """Raised when the circuit for an endpoint is open and the call is rejected."""
    def __init__(
        self,
        circuit_key: str,
        retry_after_ms: float,
        service: str = "unknown",
        trial_in_progress: bool = False,
    ):
        self.circuit_key = circuit_key
        self.retry_after_ms = retry_after_ms
        self.trial_in_progress = trial_in_progress
        if trial_in_progress:
            message = f"Circuit breaker half-open for '{circuit_key}'. Recovery trial in progress"
        else:
            message = f"Circuit breaker open for '{circuit_key}'. Retry after {retry_after_ms / 1000:.1f}s"
        super().__init__(message, service=service)


class RequestTimeoutError(ApiClientError, TimeoutError):
    """Raised when the transport exceeds its timeout budget."""
    def __init__(self, timeout_ms: float, service: str = "unknown"):
        self.timeout_ms = timeout_ms
        super().__init__(f"Request timeout after {int(timeout_ms)}ms", service=service)


class HttpError(ApiClientError):
    """Raised for non-2xx responses."""
    def __init__(self, status_code: int, reason: str = "", service: str = "unknown", details: Any = None):
        self.reason = reason
        super().__init__(
            f"HTTP {status_code}: {reason}" if reason else f"HTTP {status_code}",
            service=service,
            status_code=status_code,
            details=details,
        )


class NetworkError(ApiClientError):
    """Raised on connection-level failures (reset, refused, DNS)."""
    pass


class ParseError(ApiClientError):
    """Raised when a response body is not valid JSON."""
    pass


class RateLimitTimeoutError(ApiClientError):
    """Raised when a rate-limit wait would exceed the caller's deadline."""
    def __init__(self, key: str, wait_ms: float, max_wait_ms: float, service: str = "unknown"):
        self.key = key
        self.wait_ms = wait_ms
        self.max_wait_ms = max_wait_ms
        super().__init__(
            f"Rate limit wait of {wait_ms:.0f}ms for '{key}' exceeds deadline of {max_wait_ms:.0f}ms",
            service=service,
        )
