"""
Shared fixtures for Booking Gateway tests.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from shared.config import GatewayConfig
from booking_gateway.app.main import create_app

UPSTREAM_URL = "http://upstream.test"


class UpstreamStub:
    """Scripted upstream API served through ``httpx.MockTransport``."""

    def __init__(self):
        self.requests = []
        self._responder = lambda request: httpx.Response(200, json={"success": True, "data": []})

    def respond_with(self, responder):
        self._responder = responder

    def respond_json(self, status_code, payload):
        self._responder = lambda request: httpx.Response(status_code, json=payload)

    def _handle(self, request: httpx.Request):
        self.requests.append(request)
        return self._responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)


@pytest.fixture
def upstream():
    return UpstreamStub()


@pytest.fixture
def gateway_config():
    return GatewayConfig(api_url=UPSTREAM_URL, env="test")


@pytest.fixture
def client(upstream, gateway_config):
    """Test client wired to the scripted upstream."""
    app = create_app(config=gateway_config, transport=upstream.transport)
    return TestClient(app)


@pytest.fixture
def service(client):
    return client.app.state.gateway_service


@pytest.fixture
def auth_headers():
    return {"Authorization": "Bearer admin-token"}
