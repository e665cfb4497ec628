"""Data models for semantic memory items and search results.

MemoryItem is the unit of storage: the original text, the embedding that was
stored for it, and free-form metadata. Metadata values are restricted to a
small tagged set (strings, numbers, booleans, null and nested maps) so that
every item stays serializable.

ChromaDB only stores scalar metadata values, so nested maps and nulls are
JSON-encoded on the way in and decoded on the way out. The keys that were
encoded are recorded under a reserved metadata key.
"""

import json
import math
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from typing_extensions import TypeAliasType

MetadataValue = TypeAliasType(
    "MetadataValue",
    "Union[str, int, float, bool, None, dict[str, MetadataValue]]",
)

Metadata = dict[str, MetadataValue]

# Reserved ChromaDB metadata key listing JSON-encoded entries
JSON_KEYS_FIELD = "_memory_json_keys"

# Key prefixes ChromaDB reserves for itself or for query operators
RESERVED_KEY_PREFIXES = ("chroma:", "#", "$")

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class MemoryItem(BaseModel):
    """A stored piece of content with its embedding.

    Attributes:
        id: Randomly generated identifier, unique within a collection
        content: Original text, never modified after creation
        embedding: Vector stored for the content
        metadata: Caller-supplied key-value data, opaque to the store

    Example:
        >>> item = MemoryItem(id="3f9a0c1b2d4e", content="the sky is blue",
        ...                   embedding=[0.1, 0.2], metadata={"tag": "fact"})
        >>> item.metadata["tag"]
        'fact'
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Generated item identifier")
    content: str = Field(description="Original text")
    embedding: list[float] = Field(default_factory=list, description="Stored embedding vector")
    metadata: Metadata = Field(default_factory=dict, description="Free-form metadata")


class SearchResult(BaseModel):
    """A single hit from a similarity search.

    Attributes:
        item: The matched memory item
        score: Cosine distance reported by the database (lower = more similar)
    """

    model_config = ConfigDict(frozen=True)

    item: MemoryItem
    score: float


class SearchOptions(BaseModel):
    """Options for a similarity search.

    The distance metric is fixed when the collection is created, so
    ``method`` is accepted for interface compatibility but does not change
    how results are ranked.
    """

    method: str = Field(default="cosine", description="Similarity metric name")
    limit: int = Field(default=5, ge=0, description="Maximum number of results")


def encode_metadata(metadata: Metadata) -> dict[str, Any] | None:
    """Convert item metadata into ChromaDB-compatible scalar metadata.

    Args:
        metadata: Caller metadata

    Returns:
        Flat metadata dict, or None when there is nothing to store

    Raises:
        ValueError: If the caller uses the reserved key
    """
    if not metadata:
        return None
    if JSON_KEYS_FIELD in metadata:
        raise ValueError(f"Metadata key '{JSON_KEYS_FIELD}' is reserved")

    encoded: dict[str, Any] = {}
    json_keys = []
    for key, value in metadata.items():
        if value is None or isinstance(value, dict):
            encoded[key] = json.dumps(value, ensure_ascii=False)
            json_keys.append(key)
        else:
            encoded[key] = value

    if json_keys:
        encoded[JSON_KEYS_FIELD] = json.dumps(json_keys)
    return encoded


def decode_metadata(raw: dict[str, Any] | None) -> Metadata:
    """Restore caller metadata from what ChromaDB returned.

    Args:
        raw: Metadata dict from ChromaDB (may be None)

    Returns:
        Metadata as originally supplied to add()
    """
    if not raw:
        return {}

    decoded = dict(raw)
    json_keys = json.loads(decoded.pop(JSON_KEYS_FIELD, "[]"))
    for key in json_keys:
        if key in decoded:
            decoded[key] = json.loads(decoded[key])
    return decoded


_metadata_adapter = TypeAdapter(Metadata)


def _check_value(key: str, value: MetadataValue) -> None:
    if isinstance(value, bool) or value is None:
        return
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Metadata value for '{key}' must be a finite number, got {value}")
    if isinstance(value, int) and not INT64_MIN <= value <= INT64_MAX:
        raise ValueError(f"Metadata value for '{key}' does not fit in a 64-bit integer")
    if isinstance(value, dict):
        for nested_key, nested_value in value.items():
            _check_value(f"{key}.{nested_key}", nested_value)


def validate_metadata(metadata: Metadata | None) -> Metadata:
    """Check that metadata can be stored and read back unchanged.

    ChromaDB drops or rejects some keys and coerces some numbers, so these
    are refused up front rather than being silently altered.

    Args:
        metadata: Caller metadata, or None for no metadata

    Returns:
        Validated metadata (empty dict when None)

    Raises:
        pydantic.ValidationError: If a value is not a supported type
        ValueError: If a key is empty, reserved or uses a ChromaDB prefix,
            or a number is non-finite or outside the 64-bit integer range
    """
    validated = _metadata_adapter.validate_python(metadata or {})

    for key, value in validated.items():
        if not key:
            raise ValueError("Metadata keys must not be empty")
        if key == JSON_KEYS_FIELD:
            raise ValueError(f"Metadata key '{JSON_KEYS_FIELD}' is reserved")
        if key.startswith(RESERVED_KEY_PREFIXES):
            raise ValueError(
                f"Metadata key '{key}' must not start with {', '.join(RESERVED_KEY_PREFIXES)}"
            )
        _check_value(key, value)

    return validated
