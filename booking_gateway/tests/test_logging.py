"""
Unit tests for shared logging helpers.
"""

import pytest
import structlog

from shared.logging import add_service_context, clear_context, redact_credentials, set_request_id, set_route


@pytest.fixture(autouse=True)
def clean_context():
    clear_context()
    yield
    clear_context()


def test_request_context_is_bound_and_cleared():
    request_id = set_request_id("req-1")
    set_route("rooms.list")

    assert request_id == "req-1"
    assert structlog.contextvars.get_contextvars() == {"request_id": "req-1", "route": "rooms.list"}

    clear_context()
    assert structlog.contextvars.get_contextvars() == {}


def test_request_id_generated_when_missing():
    assert set_request_id()
    assert structlog.contextvars.get_contextvars()["request_id"]


def test_credentials_are_redacted():
    event = redact_credentials(None, "info", {"event": "Upstream call", "token": "abc", "url": "http://x"})

    assert event["token"] == "[redacted]"
    assert event["url"] == "http://x"


def test_service_taken_from_logger_name():
    assert add_service_context(None, "info", {"logger": "gateway.handler"})["service"] == "gateway"
    assert "service" not in add_service_context(None, "info", {"logger": "root"})
