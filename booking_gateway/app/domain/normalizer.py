"""
Parsing of upstream response bodies into data or classified errors.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional

from shared.errors import UpstreamMalformedError, UpstreamRejectedError
from booking_gateway.app.adapters.upstream_client import UpstreamResult

# Upper bound on body text kept for diagnostics.
EXCERPT_LIMIT = 500

_ENVELOPE_KEYS = ("success", "message")


def excerpt(text: str, limit: int = EXCERPT_LIMIT) -> str:
    """First ``limit`` characters of ``text``."""
    return text[:limit]


def decode_body(result: UpstreamResult) -> str:
    """Decode raw upstream bytes using the declared charset, else UTF-8."""
    charset = "utf-8"
    for part in result.content_type.split(";")[1:]:
        key, _, value = part.strip().partition("=")
        if key.lower() == "charset" and value:
            charset = value.strip('"')
    try:
        return result.body.decode(charset, errors="replace")
    except LookupError:
        return result.body.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class NormalizedResponse:
    """Parsed successful upstream answer."""

    status_code: int
    data: Any = None
    message: Optional[str] = None


class ResponseNormalizer:
    """Turns an ``UpstreamResult`` into data, or a classified error."""

    def __init__(self, excerpt_limit: int = EXCERPT_LIMIT):
        self.excerpt_limit = excerpt_limit

    def normalize(self, result: UpstreamResult, action: str) -> NormalizedResponse:
        text = decode_body(result)

        if not text.strip():
            payload = None
        else:
            try:
                payload = json.loads(text)
            except ValueError:
                raise UpstreamMalformedError(
                    f"Failed to {action}: Server returned an invalid response",
                    details={
                        "status_code": result.status_code,
                        "content_type": result.content_type,
                        "excerpt": excerpt(text, self.excerpt_limit),
                    },
                )

        if not result.ok:
            raise UpstreamRejectedError(
                result.status_code,
                self._rejection_message(payload) or f"Failed to {action} (upstream status {result.status_code})",
                details={"status_code": result.status_code},
            )

        # A 2xx body that reports its own failure is still a rejection.
        if isinstance(payload, dict) and payload.get("success") is False:
            raise UpstreamRejectedError(
                result.status_code,
                self._rejection_message(payload) or f"Failed to {action}",
                details={"status_code": result.status_code, "reported_failure": True},
            )

        return self._unwrap(result.status_code, payload)

    @staticmethod
    def _rejection_message(payload: Any) -> Optional[str]:
        if not isinstance(payload, dict):
            return None
        for key in ("message", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
        return None

    @staticmethod
    def _unwrap(status_code: int, payload: Any) -> NormalizedResponse:
        if not isinstance(payload, dict):
            return NormalizedResponse(status_code=status_code, data=payload)

        message = payload.get("message")
        if not isinstance(message, str):
            message = None

        rest = {key: value for key, value in payload.items() if key not in _ENVELOPE_KEYS}
        # A bare upstream envelope is unwrapped; siblings of "data" (a login
        # token, a listing count) keep the whole object instead.
        if set(rest) == {"data"}:
            return NormalizedResponse(status_code=status_code, data=payload["data"], message=message)
        return NormalizedResponse(status_code=status_code, data=rest or None, message=message)
