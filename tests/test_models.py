"""Tests for memory data models and the metadata codec."""

import pytest
from pydantic import ValidationError

from memory.models import (
    JSON_KEYS_FIELD,
    MemoryItem,
    SearchOptions,
    decode_metadata,
    encode_metadata,
    validate_metadata,
)


def test_search_options_defaults():
    options = SearchOptions()
    assert options.method == "cosine"
    assert options.limit == 5


def test_search_options_rejects_negative_limit():
    with pytest.raises(ValidationError):
        SearchOptions(limit=-1)


def test_memory_item_is_immutable():
    item = MemoryItem(id="abc123", content="the sky is blue", embedding=[0.1, 0.2])

    with pytest.raises(ValidationError):
        item.content = "the sky is green"
    assert item.metadata == {}


def test_memory_item_requires_id():
    with pytest.raises(ValidationError):
        MemoryItem(id="", content="x")


def test_validate_metadata_accepts_tagged_values():
    metadata = {
        "tag": "fact",
        "count": 3,
        "weight": 0.5,
        "verified": True,
        "source": None,
        "context": {"speaker": "user", "turn": 4, "nested": {"ok": False}},
    }

    validated = validate_metadata(metadata)

    assert validated == metadata
    assert validated["verified"] is True
    assert validated["count"] == 3 and not isinstance(validated["count"], bool)


def test_validate_metadata_rejects_lists():
    with pytest.raises(ValidationError):
        validate_metadata({"tags": ["a", "b"]})


def test_validate_metadata_none_is_empty():
    assert validate_metadata(None) == {}


def test_encode_empty_metadata_is_none():
    assert encode_metadata({}) is None


def test_encode_scalars_unchanged():
    encoded = encode_metadata({"tag": "fact", "n": 1, "x": 1.5, "b": False})
    assert encoded == {"tag": "fact", "n": 1, "x": 1.5, "b": False}


def test_nested_and_null_values_survive_round_trip():
    metadata = {"tag": "fact", "source": None, "context": {"turn": 4, "who": "user"}}

    encoded = encode_metadata(metadata)

    assert isinstance(encoded["context"], str)
    assert isinstance(encoded["source"], str)
    assert JSON_KEYS_FIELD in encoded
    assert decode_metadata(encoded) == metadata


def test_reserved_key_rejected():
    with pytest.raises(ValueError, match="reserved"):
        encode_metadata({JSON_KEYS_FIELD: "x"})


def test_decode_missing_metadata():
    assert decode_metadata(None) == {}
    assert decode_metadata({}) == {}


def test_decode_keys_with_commas():
    metadata = {"a,b": {"x": 1}}
    assert decode_metadata(encode_metadata(metadata)) == metadata


@pytest.mark.parametrize(
    "metadata, message",
    [
        ({"": "x"}, "empty"),
        ({"chroma:document": 1}, "must not start with"),
        ({"#tag": 1}, "must not start with"),
        ({"$and": 1}, "must not start with"),
        ({JSON_KEYS_FIELD: "[]"}, "reserved"),
        ({"f": float("nan")}, "finite"),
        ({"f": float("inf")}, "finite"),
        ({"f": float("-inf")}, "finite"),
        ({"big": 2**70}, "64-bit"),
        ({"small": -(2**63) - 1}, "64-bit"),
        ({"ctx": {"score": float("nan")}}, "finite"),
    ],
)
def test_validate_metadata_rejects_values_chroma_would_alter(metadata, message):
    with pytest.raises(ValueError, match=message):
        validate_metadata(metadata)


def test_validate_metadata_accepts_int64_bounds():
    metadata = {"lo": -(2**63), "hi": 2**63 - 1, "dollars": "$5", "key#1": 1}
    assert validate_metadata(metadata) == metadata
