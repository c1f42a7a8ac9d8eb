"""
Per-request composition of the gateway pipeline.

    extract credential -> forward -> normalize -> [room assets] -> envelope

Every stage either hands its result to the next one or raises a gateway
error; the handler converts any error into exactly one failure envelope.
Local request validation errors are left to the service's exception
handlers.
"""

import asyncio
import json
import time
from typing import Any, Dict, Optional
from urllib.parse import quote

from fastapi import Request
from fastapi.responses import JSONResponse

from shared.base_service import envelope_response
from shared.errors import (
    BookingGatewayException,
    ErrorKind,
    InternalFailureError,
    ResponseEnvelope,
    UpstreamUnreachableError,
    ValidationError,
)
from shared.logging import get_logger, set_route
from shared.metrics import MetricsCollector
from booking_gateway.app.adapters.upstream_client import (
    MultipartStream,
    OutboundRequest,
    QueryParams,
    UpstreamClient,
    UpstreamResult,
)
from booking_gateway.app.domain.classifier import Classification, ErrorClassifier
from booking_gateway.app.domain.credentials import Credential, CredentialExtractor
from booking_gateway.app.domain.normalizer import ResponseNormalizer, decode_body, excerpt
from booking_gateway.app.domain.room_assets import RoomAssetNormalizer
from booking_gateway.app.domain.routes import BodyKind, RouteSpec

ERROR_KIND_HEADER = "X-Gateway-Error"


class GatewayHandler:
    """Runs one route's request through the gateway pipeline."""

    def __init__(
        self,
        upstream: UpstreamClient,
        extractor: CredentialExtractor,
        room_assets: RoomAssetNormalizer,
        metrics: MetricsCollector,
        normalizer: Optional[ResponseNormalizer] = None,
        classifier: Optional[ErrorClassifier] = None,
        disconnect_poll_seconds: float = 0.1,
    ):
        self.upstream = upstream
        self.extractor = extractor
        self.room_assets = room_assets
        self.metrics = metrics
        self.normalizer = normalizer or ResponseNormalizer()
        self.classifier = classifier or ErrorClassifier()
        self.disconnect_poll_seconds = disconnect_poll_seconds
        self.logger = get_logger("gateway.handler")

    async def handle(
        self,
        route: RouteSpec,
        request: Request,
        path_params: Optional[Dict[str, str]] = None,
        query: Optional[QueryParams] = None,
    ) -> JSONResponse:
        set_route(route.name)
        try:
            credential = self._authenticate(route, request)
            outbound = await self._build_outbound(route, request, credential, path_params or {}, query)
            result = await self._forward(route, request, outbound)
            normalized = self.normalizer.normalize(result, route.action)

            data = normalized.data
            if route.room_assets:
                data = self.room_assets.normalize_payload(data)
        except ValidationError:
            raise
        except Exception as exc:
            return self._failure(route, exc)

        status_code = 200 if normalized.status_code in (204, 205) else normalized.status_code
        return envelope_response(ResponseEnvelope.ok(data, normalized.message), status_code=status_code)

    def _authenticate(self, route: RouteSpec, request: Request) -> Optional[Credential]:
        if not route.requires_credential:
            return None
        return self.extractor.extract(request.headers, request.cookies, route.credential)

    async def _build_outbound(
        self,
        route: RouteSpec,
        request: Request,
        credential: Optional[Credential],
        path_params: Dict[str, str],
        query: Optional[QueryParams],
    ) -> OutboundRequest:
        path = self._upstream_path(route, path_params)
        if query is None and route.forward_query:
            query = request.query_params.multi_items()
        token = credential.token if credential else None

        if route.body is BodyKind.JSON:
            body = await self._read_json(request)
            self._check_required_fields(route, body)
            return self.upstream.build_request(route.method, path, token=token, json_body=body, query=query)

        if route.body is BodyKind.MULTIPART:
            content_type = request.headers.get("content-type", "")
            if not content_type.lower().startswith("multipart/form-data"):
                raise ValidationError("Expected a multipart/form-data body")
            stream = MultipartStream(chunks=request.stream(), media_type=content_type)
            return self.upstream.build_request(route.method, path, token=token, multipart=stream, query=query)

        return self.upstream.build_request(route.method, path, token=token, query=query)

    @staticmethod
    def _upstream_path(route: RouteSpec, path_params: Dict[str, str]) -> str:
        values = {}
        for key, value in path_params.items():
            if key == "path":
                segments = [segment for segment in str(value).split("/") if segment]
                if any(segment in (".", "..") for segment in segments):
                    raise ValidationError("Invalid proxy path", details={"path": value})
                values[key] = "/".join(quote(segment, safe="") for segment in segments)
            else:
                values[key] = quote(str(value), safe="")
        return route.upstream_path.format(**values)

    @staticmethod
    async def _read_json(request: Request) -> Any:
        raw = await request.body()
        try:
            return json.loads(raw)
        except ValueError:
            raise ValidationError("Invalid request body")

    @staticmethod
    def _check_required_fields(route: RouteSpec, body: Any) -> None:
        if not route.required_fields:
            return
        if not isinstance(body, dict) or any(not body.get(name) for name in route.required_fields):
            fields = " and ".join(route.required_fields)
            raise ValidationError(f"{fields.capitalize()} are required")

    async def _forward(self, route: RouteSpec, request: Request, outbound: OutboundRequest) -> UpstreamResult:
        start_time = time.time()
        try:
            if outbound.stream is not None:
                # Streaming bodies fail on their own when the caller goes away.
                result = await self.upstream.send(outbound)
            else:
                result = await self._send_watching_disconnect(request, outbound)
        except BookingGatewayException as exc:
            self.metrics.record_upstream_call(route.name, exc.code.lower(), time.time() - start_time)
            raise

        self.metrics.record_upstream_call(route.name, f"{result.status_code // 100}xx", time.time() - start_time)
        return result

    async def _send_watching_disconnect(self, request: Request, outbound: OutboundRequest) -> UpstreamResult:
        """Send ``outbound``, cancelling it if the caller disconnects first."""
        task = asyncio.create_task(self.upstream.send(outbound))
        try:
            while True:
                done, _ = await asyncio.wait({task}, timeout=self.disconnect_poll_seconds)
                if done:
                    return task.result()
                if await request.is_disconnected():
                    self.logger.info("Caller disconnected, cancelling upstream call", url=outbound.url)
                    raise InternalFailureError("Request aborted by caller")
        finally:
            if not task.done():
                task.cancel()

    def _failure(self, route: RouteSpec, exc: Exception) -> JSONResponse:
        classification = self.classifier.classify(exc)
        self._log_failure(route, classification, exc)
        self.metrics.record_error(classification.kind.value)
        return envelope_response(
            classification.to_envelope(),
            status_code=classification.status_code,
            headers={ERROR_KIND_HEADER: classification.kind.value},
        )

    def _log_failure(self, route: RouteSpec, classification: Classification, exc: Exception) -> None:
        details = getattr(exc, "details", {})
        if classification.kind is ErrorKind.AUTH_MISSING:
            self.logger.warning("Missing credential", action=route.action, details=details)
        elif classification.kind is ErrorKind.UPSTREAM_REJECTED:
            self.logger.warning(
                "Upstream rejected request",
                action=route.action,
                status_code=classification.status_code,
                message=classification.message,
            )
        elif classification.kind is ErrorKind.INTERNAL_FAILURE and not isinstance(exc, BookingGatewayException):
            self.logger.error("Unexpected gateway failure", action=route.action, error=str(exc), exc_info=True)
        else:
            self.logger.error(
                "Gateway request failed",
                action=route.action,
                kind=classification.kind.value,
                details=details,
            )

    async def check_upstream(self) -> JSONResponse:
        """Report whether the upstream API answers its health endpoint."""
        backend_url = self.upstream.base_url
        try:
            result = await self.upstream.check_health()
        except UpstreamUnreachableError as exc:
            self.logger.error("Upstream health check failed", details=exc.details)
            return envelope_response(
                ResponseEnvelope(
                    success=False,
                    message="Failed to connect to backend API",
                    data={"backend_url": backend_url},
                ),
                status_code=500,
                headers={ERROR_KIND_HEADER: ErrorKind.UPSTREAM_UNREACHABLE.value},
            )

        text = decode_body(result)
        if not result.ok:
            self.logger.error(
                "Upstream health check returned error status",
                status_code=result.status_code,
                excerpt=excerpt(text),
            )
            return envelope_response(
                ResponseEnvelope(
                    success=False,
                    message="Backend API is not responding correctly",
                    data={"backend_url": backend_url, "backend_status": result.status_code},
                ),
                status_code=500,
                headers={ERROR_KIND_HEADER: ErrorKind.UPSTREAM_REJECTED.value},
            )

        try:
            backend_data = json.loads(text)
        except ValueError:
            backend_data = {"text": excerpt(text)}

        return envelope_response(
            ResponseEnvelope.ok(
                {
                    "backend_url": backend_url,
                    "backend_status": result.status_code,
                    "backend_data": backend_data,
                },
                message="Proxy API is connected to backend",
            )
        )
