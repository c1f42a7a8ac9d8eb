"""
Shared error handling for the Booking Gateway.
"""

from enum import Enum
from typing import Dict, Any, Optional
from pydantic import BaseModel


class ResponseEnvelope(BaseModel):
    """Uniform response shape returned to every caller."""

    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None

    def to_payload(self) -> Dict[str, Any]:
        """Serialize, omitting unset optional members."""
        payload: Dict[str, Any] = {"success": self.success}
        if self.message is not None:
            payload["message"] = self.message
        if self.data is not None:
            payload["data"] = self.data
        return payload

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "ResponseEnvelope":
        return cls(success=True, message=message, data=data)

    @classmethod
    def failure(cls, message: str) -> "ResponseEnvelope":
        return cls(success=False, message=message)


class ErrorKind(str, Enum):
    """Closed set of gateway failure categories."""

    AUTH_MISSING = "AUTH_MISSING"
    UPSTREAM_UNREACHABLE = "UPSTREAM_UNREACHABLE"
    UPSTREAM_MALFORMED = "UPSTREAM_MALFORMED"
    UPSTREAM_REJECTED = "UPSTREAM_REJECTED"
    INTERNAL_FAILURE = "INTERNAL_FAILURE"


class BookingGatewayException(Exception):
    """Base exception for Booking Gateway failures."""

    kind: Optional[ErrorKind] = None

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ResponseEnvelope:
        """Convert to a failure envelope."""
        return ResponseEnvelope.failure(self.message)


class AuthMissingError(BookingGatewayException):
    """No bearer credential on the inbound request."""

    kind = ErrorKind.AUTH_MISSING

    def __init__(self, message: str = "Authentication required", details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorKind.AUTH_MISSING.value, message, details)


class UpstreamUnreachableError(BookingGatewayException):
    """Transport-level failure talking to the upstream API."""

    kind = ErrorKind.UPSTREAM_UNREACHABLE

    def __init__(self, message: str = "Upstream service unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorKind.UPSTREAM_UNREACHABLE.value, message, details)


class UpstreamMalformedError(BookingGatewayException):
    """Upstream body could not be parsed."""

    kind = ErrorKind.UPSTREAM_MALFORMED

    def __init__(
        self,
        message: str = "Server returned an invalid response",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(ErrorKind.UPSTREAM_MALFORMED.value, message, details)


class UpstreamRejectedError(BookingGatewayException):
    """Upstream answered with a parseable non-2xx response."""

    kind = ErrorKind.UPSTREAM_REJECTED

    def __init__(self, status_code: int, message: str, details: Optional[Dict[str, Any]] = None):
        self.status_code = status_code
        super().__init__(ErrorKind.UPSTREAM_REJECTED.value, message, details)


class InternalFailureError(BookingGatewayException):
    """Unexpected local fault."""

    kind = ErrorKind.INTERNAL_FAILURE

    def __init__(self, message: str = "Internal server error", details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorKind.INTERNAL_FAILURE.value, message, details)


class ValidationError(BookingGatewayException):
    """Inbound request could not be accepted for forwarding."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)
