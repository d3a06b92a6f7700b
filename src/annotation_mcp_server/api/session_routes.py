"""
Session Routes

REST-style access to the annotation core, one route per operation. These
routes share the services of the tool layer, so sessions created here are
visible to `/tools/call` and vice versa.

Domain failures are mapped to HTTP status codes and the tagged error is
returned as the response `detail`.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from .dependencies import get_tool_services
from .models import AddRelationBody, AnnotationFields, BatchAnnotateBody
from ..annotation.models import (
    AddRelationResponse,
    AnnotationExport,
    BatchAnnotationResult,
    ChunkAnnotation,
)
from ..core.errors import SessionNotFoundError, to_http_exception
from ..sessions.models import ConfigFile, ProgressResponse, SessionCreatedResponse
from ..tools.base import ToolServices

router = APIRouter(prefix="/sessions", tags=["sessions"])

Services = Annotated[ToolServices, Depends(get_tool_services)]


@router.post(
    "",
    response_model=SessionCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start an annotation session",
)
def create_session(config: ConfigFile, services: Services) -> SessionCreatedResponse:
    result = services.store.create(config)
    if not result.success:
        raise to_http_exception(result.error)
    return result.data


@router.post(
    "/{session_id}/chunks/{chunk_id}/annotation",
    response_model=ChunkAnnotation,
    summary="Annotate a single chunk",
)
def annotate_chunk(
    session_id: str,
    chunk_id: str,
    body: AnnotationFields,
    services: Services,
) -> ChunkAnnotation:
    """
    Merge a partial annotation into the chunk's stored annotation.

    Omitted fields keep their stored values; see AnnotationService for the
    per-field merge policy.
    """
    result = services.annotations.annotate_chunk(session_id, body.to_input(chunk_id))
    if not result.success:
        raise to_http_exception(result.error)
    return result.data


@router.post(
    "/{session_id}/annotations",
    response_model=BatchAnnotationResult,
    response_model_exclude_none=True,
    summary="Annotate several chunks (partial success)",
)
def annotate_chunks(
    session_id: str,
    body: BatchAnnotateBody,
    services: Services,
) -> BatchAnnotationResult:
    # Per-item failures are reported in the payload; the batch itself never fails
    result = services.batch.annotate_chunks(
        session_id,
        [item.to_input(item.chunk_id) for item in body.annotations],
    )
    return result.data


@router.post(
    "/{session_id}/relations",
    response_model=AddRelationResponse,
    summary="Add a directed relation between two chunks",
)
def add_relation(
    session_id: str,
    body: AddRelationBody,
    services: Services,
) -> AddRelationResponse:
    result = services.relations.add_relation(
        session_id,
        body.source_chunk_id,
        body.target_chunk_id,
        body.relation_type.value,
    )
    if not result.success:
        raise to_http_exception(result.error)
    return result.data


@router.get(
    "/{session_id}/progress",
    response_model=ProgressResponse,
    summary="Annotation progress for a session",
)
def get_progress(session_id: str, services: Services) -> ProgressResponse:
    result = services.store.get_progress(session_id)
    if not result.success:
        raise to_http_exception(result.error)
    return result.data


@router.get(
    "/{session_id}/export",
    response_model=AnnotationExport,
    summary="Export all annotations in configured chunk order",
)
def export_annotations(session_id: str, services: Services) -> AnnotationExport:
    result = services.annotations.export_annotations(session_id)
    if not result.success:
        raise to_http_exception(result.error)
    return result.data


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Discard a session (administrative)",
)
def delete_session(session_id: str, services: Services) -> Response:
    if not services.store.delete(session_id):
        raise to_http_exception(
            SessionNotFoundError(
                session_id=session_id,
                message=f"Session not found: {session_id}",
            )
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
