"""Document models — What a record looks like on the search engine side."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DocumentDescriptor(BaseModel):
    """Where and what a record is in the index.

    ``id`` always mirrors the owning record's key, even when the key is not
    auto-generated, so the document can later be fetched or deleted from the
    record alone.
    """

    model_config = ConfigDict(frozen=True)

    index: str = Field(description="Index name")
    type: str = Field(description="Type (category) name, derived from the record's table")
    id: str = Field(description="Document id, equal to the record key")
    body: dict[str, Any] = Field(default_factory=dict, description="Serialized record attributes")


class HitProvenance(BaseModel):
    """Transient metadata of a record hydrated from a search hit."""

    model_config = ConfigDict(frozen=True)

    is_document: bool = Field(default=False, description="Whether the record came from a search hit")
    score: float | None = Field(default=None, description="Relevance score of the hit")
    version: int | None = Field(default=None, description="Document version of the hit")

    @classmethod
    def from_hit(cls, hit: dict[str, Any]) -> HitProvenance:
        return cls(is_document=True, score=hit.get("_score"), version=hit.get("_version"))
