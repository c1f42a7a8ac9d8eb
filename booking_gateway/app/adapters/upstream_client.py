"""
Upstream booking API client for Gateway.
"""

import json
import time
from dataclasses import dataclass
from typing import Any, AsyncIterable, Dict, Optional, Sequence, Tuple, Union

import httpx

from shared.logging import get_logger
from shared.errors import InternalFailureError, UpstreamUnreachableError


# Marks a request that carries no JSON body (``None`` is a valid JSON body).
NO_BODY: Any = object()

QueryParams = Union[Dict[str, Any], Sequence[Tuple[str, Any]]]


@dataclass(frozen=True)
class MultipartStream:
    """Inbound multipart body, forwarded byte-for-byte."""

    chunks: AsyncIterable[bytes]
    media_type: str


@dataclass(frozen=True)
class OutboundRequest:
    """Fully built upstream request."""

    method: str
    url: str
    headers: Tuple[Tuple[str, str], ...]
    body: Optional[bytes] = None
    stream: Optional[MultipartStream] = None

    def header(self, name: str) -> Optional[str]:
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None


@dataclass(frozen=True)
class UpstreamResult:
    """Raw upstream answer."""

    status_code: int
    body: bytes
    content_type: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class UpstreamClient:
    """Client for forwarding calls to the upstream booking API.

    Every call is made exactly once: there is no retry and no circuit
    breaker, transport failures surface immediately as
    ``UpstreamUnreachableError``.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = httpx.Timeout(timeout_seconds)
        self._transport = transport
        self.logger = get_logger("gateway.upstream_client")

    def build_request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        json_body: Any = NO_BODY,
        multipart: Optional[MultipartStream] = None,
        query: Optional[QueryParams] = None,
    ) -> OutboundRequest:
        """Build an immutable outbound request for ``path`` under the base URL."""
        method = method.upper()
        if json_body is not NO_BODY and multipart is not None:
            raise InternalFailureError(
                "Request cannot carry both a JSON and a multipart body",
                details={"path": path},
            )

        url = str(httpx.URL(f"{self.base_url}/{path.lstrip('/')}", params=query or None))

        headers = [("Accept", "application/json")]
        if token:
            headers.append(("Authorization", f"Bearer {token}"))
        if method == "GET":
            headers.append(("Cache-Control", "no-store"))
            headers.append(("Pragma", "no-cache"))

        body = None
        if json_body is not NO_BODY:
            body = json.dumps(json_body).encode("utf-8")
            headers.append(("Content-Type", "application/json"))

        # Multipart bodies get no Content-Type here; the stream carries its own.
        return OutboundRequest(
            method=method,
            url=url,
            headers=tuple(headers),
            body=body,
            stream=multipart,
        )

    def _to_httpx_request(self, outbound: OutboundRequest) -> httpx.Request:
        headers = httpx.Headers(list(outbound.headers))
        if outbound.stream is not None:
            headers["Content-Type"] = outbound.stream.media_type
            return httpx.Request(outbound.method, outbound.url, headers=headers, content=outbound.stream.chunks)
        return httpx.Request(outbound.method, outbound.url, headers=headers, content=outbound.body)

    async def send(self, outbound: OutboundRequest) -> UpstreamResult:
        """Issue the single network call for ``outbound``."""
        request = self._to_httpx_request(outbound)
        start_time = time.time()

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.send(request)
        except httpx.TimeoutException as e:
            self.logger.error(
                "Upstream request timed out",
                method=outbound.method,
                url=outbound.url,
                error=str(e),
            )
            raise UpstreamUnreachableError(
                "Upstream request timed out",
                details={"url": outbound.url, "error": str(e)},
            )
        except httpx.TransportError as e:
            self.logger.error(
                "Upstream transport error",
                method=outbound.method,
                url=outbound.url,
                error=str(e),
            )
            raise UpstreamUnreachableError(
                "Upstream service unavailable",
                details={"url": outbound.url, "error": str(e)},
            )

        self.logger.info(
            "Upstream call",
            method=outbound.method,
            url=outbound.url,
            status_code=response.status_code,
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )
        return UpstreamResult(
            status_code=response.status_code,
            body=response.content,
            content_type=response.headers.get("content-type", ""),
        )

    async def check_health(self) -> UpstreamResult:
        """Probe the upstream ``/health`` endpoint."""
        return await self.send(self.build_request("GET", "/health"))
