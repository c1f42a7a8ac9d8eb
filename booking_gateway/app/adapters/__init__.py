"""
Adapters package for the Booking Gateway.

Contains the HTTP client wrapper for the upstream booking API. The adapter
encapsulates:

- Base URL and outbound request shapes
- Credential and cache-control headers
- Mapping transport failures to shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .upstream_client import MultipartStream, OutboundRequest, UpstreamClient, UpstreamResult

__all__ = [
    "MultipartStream",
    "OutboundRequest",
    "UpstreamClient",
    "UpstreamResult",
]
