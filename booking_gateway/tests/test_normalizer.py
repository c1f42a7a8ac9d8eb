"""
Unit tests for ResponseNormalizer.
"""

import json

import pytest

from booking_gateway.app.adapters.upstream_client import UpstreamResult
from booking_gateway.app.domain.normalizer import EXCERPT_LIMIT, ResponseNormalizer, decode_body
from shared.errors import UpstreamMalformedError, UpstreamRejectedError


def _json_result(status_code, payload):
    return UpstreamResult(status_code, json.dumps(payload).encode(), "application/json")


@pytest.fixture
def normalizer():
    return ResponseNormalizer()


def test_upstream_envelope_is_unwrapped(normalizer):
    result = _json_result(200, {"success": True, "message": "ok", "data": [{"_id": "r1"}]})

    normalized = normalizer.normalize(result, "fetch rooms")

    assert normalized.data == [{"_id": "r1"}]
    assert normalized.message == "ok"
    assert normalized.status_code == 200


def test_extra_fields_next_to_data_are_kept(normalizer):
    result = _json_result(200, {"success": True, "token": "jwt", "data": {"username": "admin"}})

    normalized = normalizer.normalize(result, "log in")

    assert normalized.data == {"token": "jwt", "data": {"username": "admin"}}


def test_plain_object_drops_envelope_keys(normalizer):
    normalized = normalizer.normalize(_json_result(200, {"success": True, "totalRooms": 12}), "fetch stats")
    assert normalized.data == {"totalRooms": 12}


def test_non_object_payload_passes_through(normalizer):
    normalized = normalizer.normalize(_json_result(200, [1, 2, 3]), "fetch rooms")
    assert normalized.data == [1, 2, 3]


def test_empty_success_body_has_no_data(normalizer):
    normalized = normalizer.normalize(UpstreamResult(204, b"", ""), "delete room")

    assert normalized.data is None
    assert normalized.status_code == 204


def test_html_body_is_malformed_with_bounded_excerpt(normalizer):
    html = "<html><body>" + "x" * 5000 + "</body></html>"
    result = UpstreamResult(502, html.encode(), "text/html")

    with pytest.raises(UpstreamMalformedError) as exc_info:
        normalizer.normalize(result, "fetch rooms")

    error = exc_info.value
    assert error.message == "Failed to fetch rooms: Server returned an invalid response"
    assert len(error.details["excerpt"]) == EXCERPT_LIMIT
    assert error.details["status_code"] == 502
    assert "<html>" not in error.message


def test_malformed_wins_over_success_status(normalizer):
    with pytest.raises(UpstreamMalformedError):
        normalizer.normalize(UpstreamResult(200, b"not json", "application/json"), "fetch users")


def test_rejected_carries_upstream_message(normalizer):
    with pytest.raises(UpstreamRejectedError) as exc_info:
        normalizer.normalize(_json_result(404, {"message": "not found"}), "fetch room")

    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "not found"


def test_rejected_falls_back_to_error_field(normalizer):
    with pytest.raises(UpstreamRejectedError) as exc_info:
        normalizer.normalize(_json_result(403, {"error": "Forbidden"}), "fetch users")
    assert exc_info.value.message == "Forbidden"


@pytest.mark.parametrize("payload", [{}, {"message": ""}, {"message": 42}, ["a"]])
def test_rejected_generic_message(normalizer, payload):
    with pytest.raises(UpstreamRejectedError) as exc_info:
        normalizer.normalize(_json_result(422, payload), "create room")
    assert exc_info.value.message == "Failed to create room (upstream status 422)"


def test_rejected_empty_body(normalizer):
    with pytest.raises(UpstreamRejectedError) as exc_info:
        normalizer.normalize(UpstreamResult(401, b"", ""), "fetch users")
    assert exc_info.value.status_code == 401


def test_decode_body_honours_charset():
    result = UpstreamResult(200, "café".encode("latin-1"), "application/json; charset=latin-1")
    assert decode_body(result) == "café"


def test_decode_body_unknown_charset_falls_back_to_utf8():
    result = UpstreamResult(200, "café".encode("utf-8"), "application/json; charset=bogus")
    assert decode_body(result) == "café"


def test_success_false_on_2xx_is_rejected(normalizer):
    with pytest.raises(UpstreamRejectedError) as exc_info:
        normalizer.normalize(_json_result(200, {"success": False, "message": "Room is not available"}), "create booking")

    assert exc_info.value.status_code == 200
    assert exc_info.value.message == "Room is not available"


def test_success_false_without_message(normalizer):
    with pytest.raises(UpstreamRejectedError) as exc_info:
        normalizer.normalize(_json_result(201, {"success": False}), "create room")
    assert exc_info.value.message == "Failed to create room"


def test_listing_count_kept_next_to_data(normalizer):
    result = _json_result(200, {"success": True, "count": 1, "data": [{"_id": "r1"}]})

    normalized = normalizer.normalize(result, "fetch rooms")

    assert normalized.data == {"count": 1, "data": [{"_id": "r1"}]}
