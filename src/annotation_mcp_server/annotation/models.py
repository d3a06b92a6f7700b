"""
Annotation Data Models

This module defines the canonical data model for a single chunk annotation,
the partial-update payload accepted by the annotation engine, and the result
contracts of the batch, relation, and export operations.

Wire shape
----------
ChunkAnnotation keeps snake_case field names (it is the exported document
format). Operation envelopes use camelCase aliases; serialize them with
`by_alias=True`.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------
# Chunk Annotation (Authoritative)
# ---------------------------------------------------------------------

class ChunkAnnotation(BaseModel):
    """
    Metadata attached to one configured chunk.

    `chunk_id` is the display id `{position}_{category}_{label}` once the
    chunk has both a category and a label, otherwise the original chunk id.
    Each call that sets `subtypes` has every key in that call's
    `categories`. Subtypes are only replaced by a non-empty mapping, so a
    later category change can leave stale keys behind.
    """

    chunk_id: str = Field(..., description="Format: {position}_{category}_{label}")
    position: int = Field(..., ge=0)
    categories: List[str] = Field(default_factory=list)
    labels: List[str] = Field(default_factory=list)
    subtypes: Dict[str, str] = Field(default_factory=dict)
    keywords: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    relations: Dict[str, List[str]] = Field(default_factory=dict)
    notes: str = ""
    summary: str = ""

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def empty(cls, chunk_id: str, position: int) -> "ChunkAnnotation":
        """Return a record with every annotation field empty."""
        return cls(chunk_id=chunk_id, position=position)


# ---------------------------------------------------------------------
# Partial Update Payload
# ---------------------------------------------------------------------

class AnnotateChunkInput(BaseModel):
    """
    Partial annotation for one chunk.

    `None` means "omitted": an explicitly empty list or string is a supplied
    value and overrides what is stored.
    """

    chunk_id: str = Field(..., alias="chunkId")
    categories: Optional[List[str]] = None
    labels: Optional[List[str]] = None
    subtypes: Optional[Dict[str, str]] = None
    keywords: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = None
    summary: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ---------------------------------------------------------------------
# Operation Results
# ---------------------------------------------------------------------

class AnnotationItemError(BaseModel):
    """Error summary for one failed batch item (detail fields dropped)."""
    type: str
    message: str


class AnnotationItemResult(BaseModel):
    chunk_id: str = Field(..., alias="chunkId")
    success: bool
    data: Optional[ChunkAnnotation] = None
    error: Optional[AnnotationItemError] = None

    model_config = ConfigDict(populate_by_name=True)


class BatchAnnotationResult(BaseModel):
    results: List[AnnotationItemResult] = Field(default_factory=list)
    success_count: int = Field(default=0, ge=0, alias="successCount")
    error_count: int = Field(default=0, ge=0, alias="errorCount")

    model_config = ConfigDict(populate_by_name=True)


class AddRelationResponse(BaseModel):
    message: str = "Relation added"
    source_chunk_id: str = Field(..., alias="sourceChunkId")
    target_chunk_id: str = Field(..., alias="targetChunkId")
    relation_type: str = Field(..., alias="relationType")

    model_config = ConfigDict(populate_by_name=True)


class AnnotationExport(BaseModel):
    chunks: List[ChunkAnnotation] = Field(default_factory=list)
