"""
Booking Gateway service.
"""

from typing import Optional

import httpx
from fastapi import Query, Request

from shared.base_service import BaseService
from shared.config import GatewayConfig, get_config
from shared.errors import BookingGatewayException
from booking_gateway.app.adapters.upstream_client import UpstreamClient
from booking_gateway.app.domain import routes
from booking_gateway.app.domain.classifier import ErrorClassifier
from booking_gateway.app.domain.credentials import CredentialExtractor
from booking_gateway.app.domain.gateway_handler import GatewayHandler
from booking_gateway.app.domain.room_assets import RoomAssetNormalizer, RoomAssetPolicy


class GatewayService(BaseService):
    """Booking Gateway service implementation."""

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        config = config or get_config()
        super().__init__(config.service_name, config)

        self.upstream_client = UpstreamClient(
            config.upstream_base_url,
            timeout_seconds=config.upstream_timeout_seconds,
            transport=transport,
        )
        self.classifier = ErrorClassifier()
        self.room_assets = RoomAssetNormalizer(
            RoomAssetPolicy(
                fallback_url=config.asset_fallback_url,
                trusted_hosts=tuple(config.trusted_asset_hosts),
            ),
            on_substitution=self.metrics.record_asset_substitution,
        )
        self.handler = GatewayHandler(
            self.upstream_client,
            CredentialExtractor(cookie_name=config.auth_cookie_name),
            self.room_assets,
            self.metrics,
            classifier=self.classifier,
            disconnect_poll_seconds=config.disconnect_poll_seconds,
        )

        self._setup_gateway_routes()
        self._setup_room_routes()
        self._setup_admin_routes()
        self._setup_proxy_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.gateway_service = self

    def _status_for(self, exc: BookingGatewayException) -> int:
        if exc.kind is None:
            return 400
        return self.classifier.classify(exc).status_code

    def _setup_gateway_routes(self):
        """Set up gateway metadata routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": self.service_name,
                "message": "Booking Gateway",
                "version": "1.0.0",
                "upstream": self.upstream_client.base_url,
            }

    def _setup_room_routes(self):
        """Public room listings with image normalization."""

        @self.app.get("/api/rooms")
        async def list_rooms(request: Request):
            return await self.handler.handle(routes.LIST_ROOMS, request)

        @self.app.get("/api/rooms/top-rated")
        async def top_rated_rooms(request: Request, limit: int = Query(5, ge=1, le=100)):
            return await self.handler.handle(routes.TOP_RATED_ROOMS, request, query={"limit": limit})

    def _setup_admin_routes(self):
        """Authenticated admin routes and admin login."""

        @self.app.post("/api/auth/admin-login")
        async def admin_login(request: Request):
            return await self.handler.handle(routes.ADMIN_LOGIN, request)

        @self.app.get("/api/admin/dashboard")
        async def admin_dashboard(request: Request):
            return await self.handler.handle(routes.ADMIN_DASHBOARD, request)

        @self.app.get("/api/admin/users")
        async def admin_list_users(request: Request):
            return await self.handler.handle(routes.ADMIN_LIST_USERS, request)

        @self.app.get("/api/admin/rooms")
        async def admin_list_rooms(request: Request):
            return await self.handler.handle(routes.ADMIN_LIST_ROOMS, request)

        @self.app.post("/api/admin/rooms")
        async def admin_create_room(request: Request):
            return await self.handler.handle(routes.ADMIN_CREATE_ROOM, request)

        @self.app.post("/api/admin/rooms/upload-image")
        async def admin_upload_image(request: Request):
            return await self.handler.handle(routes.ADMIN_UPLOAD_IMAGE, request)

        @self.app.post("/api/admin/rooms/upload-multiple-images")
        async def admin_upload_images(request: Request):
            return await self.handler.handle(routes.ADMIN_UPLOAD_IMAGES, request)

        @self.app.get("/api/admin/rooms/{room_id}")
        async def admin_get_room(room_id: str, request: Request):
            return await self.handler.handle(routes.ADMIN_GET_ROOM, request, path_params={"room_id": room_id})

        @self.app.put("/api/admin/rooms/{room_id}")
        async def admin_update_room(room_id: str, request: Request):
            return await self.handler.handle(routes.ADMIN_UPDATE_ROOM, request, path_params={"room_id": room_id})

        @self.app.delete("/api/admin/rooms/{room_id}")
        async def admin_delete_room(room_id: str, request: Request):
            return await self.handler.handle(routes.ADMIN_DELETE_ROOM, request, path_params={"room_id": room_id})

    def _setup_proxy_routes(self):
        """Generic pass-through proxy under /api/proxy."""

        @self.app.get("/api/proxy/health")
        async def proxy_health():
            """Verify the gateway can reach the upstream API."""
            return await self.handler.check_upstream()

        @self.app.get("/api/proxy/{path:path}")
        async def proxy_get(path: str, request: Request):
            return await self.handler.handle(routes.PROXY_GET, request, path_params={"path": path})

        @self.app.post("/api/proxy/{path:path}")
        async def proxy_post(path: str, request: Request):
            return await self.handler.handle(routes.PROXY_POST, request, path_params={"path": path})


def create_app(
    config: Optional[GatewayConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
):
    """Create FastAPI application."""
    service = GatewayService(config=config, transport=transport)
    return service.app


if __name__ == "__main__":
    service = GatewayService()
    service.run()
