"""
Unit tests for room image normalization.
"""

import pytest

from booking_gateway.app.domain.room_assets import RoomAssetNormalizer, RoomAssetPolicy

FALLBACK = "https://res.cloudinary.com/demo/image/upload/v1/fallback.jpg"
TRUSTED = "https://res.cloudinary.com/demo/image/upload/v2/suite.jpg"


@pytest.fixture
def substitutions():
    return []


@pytest.fixture
def normalizer(substitutions):
    policy = RoomAssetPolicy(fallback_url=FALLBACK, trusted_hosts=("cloudinary.com",))
    return RoomAssetNormalizer(policy, on_substitution=lambda field, count: substitutions.append((field, count)))


class TestRoomAssetPolicy:
    """Reference acceptance rules."""

    @pytest.fixture
    def policy(self):
        return RoomAssetPolicy(fallback_url=FALLBACK)

    @pytest.mark.parametrize(
        "reference",
        [
            TRUSTED,
            "http://cloudinary.com/x.png",
            "https://RES.Cloudinary.com/x.png",
        ],
    )
    def test_trusted_references_kept(self, policy, reference):
        assert policy.resolve(reference) == reference

    @pytest.mark.parametrize(
        "reference",
        [
            None,
            "",
            "   ",
            42,
            "/images/room-placeholder.jpg",
            "https://res.cloudinary.com/images/room-placeholder.jpg",
            "https://evil.example/cloudinary.com/x.jpg",
            "https://cloudinary.com.evil.example/x.jpg",
            "https://notcloudinary.com/x.jpg",
            "ftp://res.cloudinary.com/x.jpg",
            "room.jpg",
        ],
    )
    def test_untrusted_references_replaced(self, policy, reference):
        assert policy.resolve(reference) == FALLBACK


def test_room_without_images_gets_fallback_collection(normalizer):
    room = normalizer.normalize_room({"_id": "r1", "name": "Deluxe"})

    assert room["imageUrl"] == FALLBACK
    assert room["images"] == [FALLBACK]
    assert room["name"] == "Deluxe"


def test_images_processed_per_item(normalizer):
    room = normalizer.normalize_room({
        "imageUrl": TRUSTED,
        "images": [TRUSTED, "/images/room-placeholder.jpg", "https://other.host/a.jpg"],
    })

    assert room["imageUrl"] == TRUSTED
    assert room["images"] == [TRUSTED, FALLBACK, FALLBACK]


def test_empty_images_list_is_synthesized(normalizer):
    assert normalizer.normalize_room({"imageUrl": TRUSTED, "images": []})["images"] == [FALLBACK]


def test_non_list_images_replaced(normalizer):
    assert normalizer.normalize_room({"images": "https://res.cloudinary.com/x.jpg"})["images"] == [FALLBACK]


def test_input_is_not_mutated(normalizer):
    original = {"imageUrl": "", "images": [""]}
    normalizer.normalize_room(original)
    assert original == {"imageUrl": "", "images": [""]}


def test_payload_list_and_single_room(normalizer):
    rooms = normalizer.normalize_payload([{"imageUrl": TRUSTED, "images": [TRUSTED]}, "not-a-room"])
    assert rooms[0]["images"] == [TRUSTED]
    assert rooms[1] == "not-a-room"

    single = normalizer.normalize_payload({"imageUrl": None})
    assert single["imageUrl"] == FALLBACK

    assert normalizer.normalize_payload(None) is None


def test_substitutions_reported(normalizer, substitutions):
    normalizer.normalize_room({"imageUrl": "", "images": [TRUSTED, "", "/images/room-placeholder.jpg"]})
    assert substitutions == [("imageUrl", 1), ("images", 2)]


def test_nothing_reported_for_clean_room(normalizer, substitutions):
    normalizer.normalize_room({"imageUrl": TRUSTED, "images": [TRUSTED]})
    assert substitutions == []


def test_listing_wrapper_normalizes_nested_rooms(normalizer):
    listing = {"count": 2, "data": [{"_id": "r1", "imageUrl": "http://evil.example/x.jpg", "images": []}, {"_id": "r2"}]}

    result = normalizer.normalize_payload(listing)

    assert result["count"] == 2
    assert "imageUrl" not in result
    assert "images" not in result
    assert [room["imageUrl"] for room in result["data"]] == [FALLBACK, FALLBACK]
    assert [room["images"] for room in result["data"]] == [[FALLBACK], [FALLBACK]]
    assert listing["data"][0]["imageUrl"] == "http://evil.example/x.jpg"
