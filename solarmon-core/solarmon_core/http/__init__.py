from .exceptions import (
    ApiClientError,
    ConfigurationError,
    CircuitOpenError,
    RequestTimeoutError,
    HttpError,
    NetworkError,
    ParseError,
    RateLimitTimeoutError,
)
from .transport import HttpTransport, TransportResponse

__all__ = [
    "HttpTransport",
    "TransportResponse",
    "ApiClientError",
    "ConfigurationError",
    "CircuitOpenError",
    "RequestTimeoutError",
    "HttpError",
    "NetworkError",
    "ParseError",
    "RateLimitTimeoutError",
]
