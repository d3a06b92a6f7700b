"""
Error Handling

This module defines the tagged error taxonomy returned by the annotation core
and the application-wide exception handler for the HTTP transport.

Design Goals
------------
- Domain failures are values, never exceptions
- Every error carries a literal `type` tag and a human-readable `message`
- Wire shape uses camelCase field names (serialize with `by_alias=True`)
- Never leak internal exception details to clients
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Union

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger("mcp.errors")


# ---------------------------------------------------------------------
# Tagged Error Models
# ---------------------------------------------------------------------

class DomainError(BaseModel):
    """
    Base class for all tagged errors.
    """
    message: str

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the camelCase wire shape."""
        return self.model_dump(by_alias=True, mode="json")


# Session errors

class SessionNotFoundError(DomainError):
    type: Literal["SessionNotFound"] = "SessionNotFound"
    session_id: str = Field(..., alias="sessionId")
    message: str = "Session not found"


class InvalidConfigError(DomainError):
    type: Literal["InvalidConfig"] = "InvalidConfig"
    issues: List[Dict[str, Any]] = Field(default_factory=list)


class DuplicateChunkIdError(DomainError):
    type: Literal["DuplicateChunkId"] = "DuplicateChunkId"
    chunk_id: str = Field(..., alias="chunkId")


# Annotation errors

class InvalidCategoryError(DomainError):
    type: Literal["InvalidCategory"] = "InvalidCategory"
    category: str
    valid_options: List[str] = Field(..., alias="validOptions")


class InvalidSubtypeError(DomainError):
    type: Literal["InvalidSubtype"] = "InvalidSubtype"
    subtype: str
    category: str
    valid_options: List[str] = Field(..., alias="validOptions")


class ChunkNotFoundError(DomainError):
    type: Literal["ChunkNotFound"] = "ChunkNotFound"
    chunk_id: str = Field(..., alias="chunkId")


class SubtypeCategoryMismatchError(DomainError):
    type: Literal["SubtypeCategoryMismatch"] = "SubtypeCategoryMismatch"
    subtype: str
    category: str


# Relation errors

class InvalidRelationTypeError(DomainError):
    type: Literal["InvalidRelationType"] = "InvalidRelationType"
    relation_type: str = Field(..., alias="relationType")
    valid_options: List[str] = Field(..., alias="validOptions")


class TargetNotFoundError(DomainError):
    type: Literal["TargetNotFound"] = "TargetNotFound"
    target_chunk_id: str = Field(..., alias="targetChunkId")


# Transport errors (produced by the tool layer, never by the core)

class ValidationFailedError(DomainError):
    type: Literal["ValidationError"] = "ValidationError"
    issues: List[Dict[str, Any]] = Field(default_factory=list)


class UnknownToolError(DomainError):
    type: Literal["UnknownTool"] = "UnknownTool"
    tool: str


class InternalError(DomainError):
    type: Literal["InternalError"] = "InternalError"


SessionError = Union[SessionNotFoundError, InvalidConfigError, DuplicateChunkIdError]

AnnotationError = Union[
    InvalidCategoryError,
    InvalidSubtypeError,
    ChunkNotFoundError,
    SubtypeCategoryMismatchError,
]

RelationError = Union[InvalidRelationTypeError, TargetNotFoundError]


# ---------------------------------------------------------------------
# HTTP Mapping
# ---------------------------------------------------------------------

_STATUS_BY_ERROR_TYPE: Dict[str, int] = {
    "SessionNotFound": 404,
    "ChunkNotFound": 404,
    "TargetNotFound": 404,
    "DuplicateChunkId": 409,
    "InvalidConfig": 422,
    "InvalidCategory": 422,
    "InvalidSubtype": 422,
    "SubtypeCategoryMismatch": 422,
    "InvalidRelationType": 422,
    "ValidationError": 422,
}


def to_http_exception(error: DomainError) -> HTTPException:
    """
    Convert a tagged domain error into an HTTPException.

    The error payload becomes the response `detail`, so clients receive the
    same tagged shape the tool layer returns.
    """
    status_code = _STATUS_BY_ERROR_TYPE.get(
        getattr(error, "type", ""),
        400,
    )
    return HTTPException(status_code=status_code, detail=error.to_payload())


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    Registered with FastAPI as the final safety net for any exception not
    otherwise handled by route-level or framework-level handlers.

    Parameters
    ----------
    request : Request
        The incoming HTTP request that triggered the exception.

    exc : Exception
        The uncaught exception instance.

    Returns
    -------
    JSONResponse
        A JSON 500 response with a minimal error payload.
    """

    # Log full traceback internally (never returned to client)
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "detail": "Internal server error",
    }

    return JSONResponse(
        status_code=500,
        content=payload,
    )
