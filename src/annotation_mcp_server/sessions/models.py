"""
Session Data Models

Defines the chunk configuration a session is created from, the in-memory
session record, and the response contracts of session-level operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from threading import RLock
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..annotation.models import ChunkAnnotation


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------

class ConfigChunk(BaseModel):
    """
    Immutable source chunk supplied at session creation.
    """

    chunk_id: str = Field(..., min_length=1)
    position: int = Field(..., ge=0)
    text: str

    model_config = ConfigDict(frozen=True, extra="ignore")


class ConfigFile(BaseModel):
    """
    Ordered chunk list for one document.
    """

    chunks: List[ConfigChunk] = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True, extra="ignore")


# ---------------------------------------------------------------------
# Session Record
# ---------------------------------------------------------------------

class SessionState(str, Enum):
    ACTIVE = "active"
    # Reserved; no operation sets it yet
    EXPIRED = "expired"


@dataclass
class Session:
    """
    One unit of annotation work.

    `annotations` is keyed by the original chunk id. `lock` serializes
    operations on this session only.
    """

    id: str
    config: ConfigFile
    annotations: Dict[str, ChunkAnnotation] = field(default_factory=dict)
    state: SessionState = SessionState.ACTIVE
    created_at: datetime = field(default_factory=_utcnow)
    last_accessed_at: Optional[datetime] = None
    lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.last_accessed_at is None:
            self.last_accessed_at = self.created_at

    @property
    def chunks(self) -> List[ConfigChunk]:
        return self.config.chunks

    def touch(self) -> None:
        self.last_accessed_at = _utcnow()


# ---------------------------------------------------------------------
# Response Contracts
# ---------------------------------------------------------------------

class SessionCreatedResponse(BaseModel):
    session_id: str = Field(..., alias="sessionId")
    chunk_count: int = Field(..., ge=0, alias="chunkCount")
    message: str = "Session created successfully"

    model_config = ConfigDict(populate_by_name=True)


class ProgressResponse(BaseModel):
    total_chunks: int = Field(..., ge=0, alias="totalChunks")
    annotated_chunks: int = Field(..., ge=0, alias="annotatedChunks")
    pending_chunks: int = Field(..., ge=0, alias="pendingChunks")
    completion_percentage: float = Field(..., ge=0, le=100, alias="completionPercentage")
    pending_chunk_ids: List[str] = Field(default_factory=list, alias="pendingChunkIds")

    model_config = ConfigDict(populate_by_name=True)
