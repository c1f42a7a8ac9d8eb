"""
Room image normalization.

Room payloads from the upstream API carry image references that are often
unusable in the browser: empty strings, local placeholder paths that only
exist in the old front end, or links to arbitrary hosts. Every reference that
is not an http(s) URL on a trusted asset host is replaced with one fixed,
versioned fallback image, and every room leaves the gateway with a non-empty
``images`` list.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from shared.config import DEFAULT_ASSET_FALLBACK_URL
from shared.logging import get_logger

KNOWN_PLACEHOLDER_PATHS: Tuple[str, ...] = (
    "/images/room-placeholder.jpg",
    "/images/hotel-logo.png",
    "/images/default-user.png",
)

IMAGE_URL_FIELD = "imageUrl"
IMAGES_FIELD = "images"
LISTING_DATA_FIELD = "data"

SubstitutionHook = Callable[[str, int], None]


@dataclass(frozen=True)
class RoomAssetPolicy:
    fallback_url: str = DEFAULT_ASSET_FALLBACK_URL
    trusted_hosts: Tuple[str, ...] = ("cloudinary.com",)
    placeholder_paths: Tuple[str, ...] = field(default=KNOWN_PLACEHOLDER_PATHS)

    def is_acceptable(self, reference: Any) -> bool:
        """True when ``reference`` can be sent to the browser unchanged."""
        if not isinstance(reference, str) or not reference.strip():
            return False

        parsed = urlparse(reference.strip())
        if parsed.path in self.placeholder_paths:
            return False
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            return False

        host = parsed.hostname.lower()
        return any(host == trusted or host.endswith(f".{trusted}") for trusted in self.trusted_hosts)

    def resolve(self, reference: Any) -> str:
        return reference if self.is_acceptable(reference) else self.fallback_url


class RoomAssetNormalizer:
    """Applies a ``RoomAssetPolicy`` to room payloads without mutating them."""

    def __init__(self, policy: RoomAssetPolicy, on_substitution: Optional[SubstitutionHook] = None):
        self.policy = policy
        self.on_substitution = on_substitution
        self.logger = get_logger("gateway.room_assets")

    def normalize_room(self, room: Dict[str, Any]) -> Dict[str, Any]:
        result = dict(room)

        image_url = self.policy.resolve(room.get(IMAGE_URL_FIELD))
        if image_url != room.get(IMAGE_URL_FIELD):
            self._substituted(IMAGE_URL_FIELD, 1, room)
        result[IMAGE_URL_FIELD] = image_url

        images = room.get(IMAGES_FIELD)
        if isinstance(images, list):
            resolved: List[str] = [self.policy.resolve(image) for image in images]
            replaced = sum(1 for before, after in zip(images, resolved) if before != after)
            if replaced:
                self._substituted(IMAGES_FIELD, replaced, room)
        else:
            resolved = []

        if not resolved:
            resolved = [self.policy.fallback_url]
            self._substituted(IMAGES_FIELD, 1, room)
        result[IMAGES_FIELD] = resolved
        return result

    def normalize_payload(self, payload: Any) -> Any:
        """Normalize a room list or a single room; anything else passes through.

        A listing wrapper such as ``{"count": 2, "data": [...]}`` keeps its
        other keys and has its ``data`` member normalized instead.
        """
        if isinstance(payload, list):
            return [self.normalize_room(item) if isinstance(item, dict) else item for item in payload]
        if isinstance(payload, dict):
            if LISTING_DATA_FIELD in payload:
                return {**payload, LISTING_DATA_FIELD: self.normalize_payload(payload[LISTING_DATA_FIELD])}
            return self.normalize_room(payload)
        return payload

    def _substituted(self, field_name: str, count: int, room: Dict[str, Any]) -> None:
        self.logger.debug(
            "Room asset replaced with fallback",
            field=field_name,
            count=count,
            room_id=room.get("_id") or room.get("id"),
        )
        if self.on_substitution is not None:
            self.on_substitution(field_name, count)
