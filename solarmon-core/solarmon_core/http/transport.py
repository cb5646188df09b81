import asyncio
import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional

import httpx
import structlog

from .exceptions import (
    ApiClientError,
    HttpError,
    NetworkError,
    ParseError,
    RequestTimeoutError,
)

if TYPE_CHECKING:
    from solarmon_core.config import ClientConfig

logger = structlog.get_logger(__name__)


@dataclass
class TransportResponse:
    data: Any
    status: int
    headers: Dict[str, str] = field(default_factory=dict)


class HttpTransport:
    """
    Performs a single outbound HTTP call.

    Features:
    - Default JSON and client identifier headers, auth header injection.
    - Total timeout budget per call (not per connection phase).
    - httpx exceptions mapped to the client's error taxonomy.
    """

    def __init__(self, config: "ClientConfig", client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.service_name = config.name
        self._client = client or httpx.AsyncClient()

    async def aclose(self):
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def build_headers(self, headers: Optional[Dict[str, str]] = None) -> httpx.Headers:
        merged = httpx.Headers({
            "Content-Type": "application/json",
            "User-Agent": self.config.user_agent,
        })
        if headers:
            merged.update(headers)
        if self.config.auth:
            merged[self.config.auth.header_name] = self.config.auth.value
        return merged

    def _map_exception(self, exc: Exception, timeout_ms: float) -> Exception:
        """Map httpx exceptions to client exceptions."""
        if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError)):
            return RequestTimeoutError(timeout_ms, service=self.service_name)
        if isinstance(exc, httpx.TransportError):
            return NetworkError(f"Network error: {exc}", service=self.service_name)
        return ApiClientError(f"Unexpected error: {exc}", service=self.service_name)

    async def send(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        body: Any = None,
        timeout_ms: Optional[float] = None,
    ) -> TransportResponse:
        """
        Send one request and decode its JSON body.

        Raises:
            RequestTimeoutError: Budget elapsed before a response arrived
            NetworkError: Connection-level failure
            HttpError: Non-2xx status
            ParseError: Body is not valid JSON
        """
        timeout_ms = timeout_ms or self.config.timeout_ms
        content = json.dumps(body) if body is not None else None

        try:
            response = await asyncio.wait_for(
                self._client.request(
                    method,
                    url,
                    headers=self.build_headers(headers),
                    content=content,
                    timeout=timeout_ms / 1000,
                ),
                timeout=timeout_ms / 1000,
            )
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            raise self._map_exception(e, timeout_ms) from e

        if not response.is_success:
            raise HttpError(
                response.status_code,
                response.reason_phrase,
                service=self.service_name,
                details=response.text,
            )

        if response.status_code == 204 or not response.content:
            data = None
        else:
            try:
                data = response.json()
            except ValueError as e:
                logger.warning(
                    "response_parse_failed",
                    client=self.service_name,
                    url=url,
                    status=response.status_code,
                )
                raise ParseError(
                    "Response body is not valid JSON",
                    service=self.service_name,
                    status_code=response.status_code,
                ) from e

        return TransportResponse(
            data=data,
            status=response.status_code,
            headers=dict(response.headers),
        )
