"""
API Models for the Annotation Server

This module defines the Pydantic models used to validate tool arguments and
HTTP request bodies before they reach the annotation core.

Design Goals
------------
- Strong typing (vocabulary fields are typed by their enumerations)
- Session IDs must be UUIDs
- Safe defaults (no shared mutable state)
- Tool input schemas are generated from these models
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, UUID4

from ..annotation.models import AnnotateChunkInput
from ..annotation.vocabulary import (
    Category,
    FeeScheduleSubtype,
    FootnotesSubtype,
    Label,
    RelationType,
)
from ..sessions.models import ConfigFile


# ---------------------------------------------------------------------
# Shared Annotation Fields
# ---------------------------------------------------------------------

class AnnotationFields(BaseModel):
    """
    Optional annotation fields shared by single and batch requests.
    """
    categories: Optional[List[Category]] = None
    labels: Optional[List[Label]] = None
    subtypes: Optional[Dict[Category, Union[FeeScheduleSubtype, FootnotesSubtype]]] = None
    keywords: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = None
    summary: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    def to_input(self, chunk_id: str) -> AnnotateChunkInput:
        """Convert to the core payload, keeping omitted fields omitted."""
        fields = self.model_dump(
            mode="json",
            include=set(AnnotationFields.model_fields),
            exclude_unset=True,
            exclude_none=True,
        )
        return AnnotateChunkInput(chunk_id=chunk_id, **fields)


# ---------------------------------------------------------------------
# Tool Arguments
# ---------------------------------------------------------------------

class StartSessionRequest(BaseModel):
    config: ConfigFile

    model_config = ConfigDict(extra="forbid")


class AnnotateChunkRequest(AnnotationFields):
    session_id: UUID4 = Field(..., alias="sessionId")
    chunk_id: str = Field(..., min_length=1, alias="chunkId")


class AnnotationItem(AnnotationFields):
    chunk_id: str = Field(..., min_length=1, alias="chunkId")


class AnnotateChunksRequest(BaseModel):
    session_id: UUID4 = Field(..., alias="sessionId")
    annotations: List[AnnotationItem] = Field(..., min_length=1)

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class AddRelationRequest(BaseModel):
    session_id: UUID4 = Field(..., alias="sessionId")
    source_chunk_id: str = Field(..., min_length=1, alias="sourceChunkId")
    target_chunk_id: str = Field(..., min_length=1, alias="targetChunkId")
    relation_type: RelationType = Field(..., alias="relationType")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class SessionRequest(BaseModel):
    """Arguments for read-only session tools (progress, export)."""
    session_id: UUID4 = Field(..., alias="sessionId")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


# ---------------------------------------------------------------------
# HTTP Bodies
# ---------------------------------------------------------------------

class BatchAnnotateBody(BaseModel):
    annotations: List[AnnotationItem] = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid")


class AddRelationBody(BaseModel):
    source_chunk_id: str = Field(..., min_length=1, alias="sourceChunkId")
    target_chunk_id: str = Field(..., min_length=1, alias="targetChunkId")
    relation_type: RelationType = Field(..., alias="relationType")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class ToolCallRequest(BaseModel):
    name: str = Field(..., min_length=1)
    arguments: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


class ToolContent(BaseModel):
    type: str = "text"
    text: str


class ToolResponse(BaseModel):
    """
    MCP-style tool result: JSON text content plus an error flag.
    """
    content: List[ToolContent]
    is_error: bool = Field(default=False, alias="isError")

    model_config = ConfigDict(populate_by_name=True)
