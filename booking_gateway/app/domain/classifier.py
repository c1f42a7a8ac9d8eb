"""
Maps gateway failures onto the closed error taxonomy and caller status codes.
"""

from dataclasses import dataclass

from shared.errors import (
    BookingGatewayException,
    ErrorKind,
    ResponseEnvelope,
    UpstreamRejectedError,
)


# Fixed statuses; UPSTREAM_REJECTED passes the upstream status through instead.
STATUS_BY_KIND = {
    ErrorKind.AUTH_MISSING: 401,
    ErrorKind.UPSTREAM_UNREACHABLE: 500,
    ErrorKind.UPSTREAM_MALFORMED: 500,
    ErrorKind.INTERNAL_FAILURE: 500,
}

GENERIC_INTERNAL_MESSAGE = "Internal server error"


@dataclass(frozen=True)
class Classification:
    kind: ErrorKind
    status_code: int
    message: str

    def to_envelope(self) -> ResponseEnvelope:
        return ResponseEnvelope.failure(self.message)


class ErrorClassifier:
    """Assigns every failure exactly one ``ErrorKind`` and HTTP status."""

    def classify(self, exc: BaseException) -> Classification:
        if isinstance(exc, UpstreamRejectedError):
            return Classification(ErrorKind.UPSTREAM_REJECTED, exc.status_code, exc.message)

        if isinstance(exc, BookingGatewayException) and exc.kind is not None:
            return Classification(exc.kind, STATUS_BY_KIND[exc.kind], exc.message)

        # Unknown faults never leak their text to the caller.
        return Classification(ErrorKind.INTERNAL_FAILURE, 500, GENERIC_INTERNAL_MESSAGE)

    def to_envelope(self, exc: BaseException) -> ResponseEnvelope:
        return self.classify(exc).to_envelope()
