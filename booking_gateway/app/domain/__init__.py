"""
Domain components of the Booking Gateway.

Credential extraction, upstream response normalization, error
classification, room asset normalization, and the handler that composes
them per route. Nothing here holds per-request state between calls.
"""

from .classifier import ErrorClassifier
from .credentials import Credential, CredentialExtractor, CredentialSource
from .gateway_handler import GatewayHandler
from .normalizer import ResponseNormalizer
from .room_assets import RoomAssetNormalizer, RoomAssetPolicy

__all__ = [
    "Credential",
    "CredentialExtractor",
    "CredentialSource",
    "ErrorClassifier",
    "GatewayHandler",
    "ResponseNormalizer",
    "RoomAssetNormalizer",
    "RoomAssetPolicy",
]
