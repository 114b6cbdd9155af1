"""
Vector database schemas.

Pydantic models for vector entries, search matches and chunk metadata,
plus the metadata filter matcher shared by local backends.

Metadata keys are camelCase on the wire (documentId, chunkIndex, ...).

Dependencies: pydantic
System role: Type definitions for vector operations
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MetadataFilter = dict[str, Any]


class ChunkMetadata(BaseModel):
    """
    Metadata attached to each chunk vector.

    ``state``, ``documentTypes`` and ``verticals`` are filterable; the
    text fields let citations be rendered without a database round trip.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    document_id: str
    chunk_index: int
    page_number: int = 1
    section_title: str | None = None
    original_start_char: int
    original_end_char: int
    title: str = ""
    state: str | None = None
    document_types: list[str] = Field(default_factory=list)
    verticals: list[str] = Field(default_factory=list)
    chunk_text: str = ""
    context_before: str = ""
    context_after: str = ""

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase keys for the vector backend."""
        return self.model_dump(by_alias=True)


class VectorEntry(BaseModel):
    """A vector plus its metadata, keyed by id."""

    id: str
    vector: list[float] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class VectorMatch(BaseModel):
    """Single ranked result from a similarity query."""

    id: str
    score: float = Field(description="Similarity score, higher is more relevant")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def document_id(self) -> str | None:
        return self.metadata.get("documentId")


class IndexStats(BaseModel):
    """Summary of a namespace."""

    namespace: str
    total_vectors: int
    dimension: int | None = None


def _value_matches(actual: Any, expected: Any) -> bool:
    if isinstance(actual, list):
        return expected in actual
    return actual == expected


def matches_filter(metadata: dict[str, Any], metadata_filter: MetadataFilter | None) -> bool:
    """
    Evaluate an equality / one-of filter against metadata.

    Supported forms per field: ``value``, ``{"$eq": value}``,
    ``{"$in": [values]}``. List-valued metadata matches when any element
    matches.

    Args:
        metadata: Entry metadata
        metadata_filter: Field conditions, all of which must hold

    Returns:
        bool: True when every condition holds (or there is no filter)
    """
    if not metadata_filter:
        return True
    for field, condition in metadata_filter.items():
        actual = metadata.get(field)
        if isinstance(condition, dict):
            if "$in" in condition:
                if not any(_value_matches(actual, option) for option in condition["$in"]):
                    return False
            elif "$eq" in condition:
                if not _value_matches(actual, condition["$eq"]):
                    return False
            else:
                raise ValueError(f"Unsupported filter operator for field {field!r}: {condition}")
        elif isinstance(condition, (list, tuple, set)):
            if not any(_value_matches(actual, option) for option in condition):
                return False
        elif not _value_matches(actual, condition):
            return False
    return True
