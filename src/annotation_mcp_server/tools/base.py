"""
Tool Dispatch Layer

This module defines the central dispatch mechanism for all tool calls made
by MCP clients. It enforces:

- Explicit tool allow-listing
- Schema validation of arguments before the annotation core is reached
- Dependency injection of the core services for testability
- Uniform MCP-style responses (JSON text content plus an `isError` flag)

No tool is callable unless it is explicitly registered here.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .definitions import (
    TOOL_ADD_RELATION,
    TOOL_ANNOTATE_CHUNK,
    TOOL_ANNOTATE_CHUNKS,
    TOOL_EXPORT_ANNOTATIONS,
    TOOL_GET_PROGRESS,
    TOOL_START_SESSION,
)
from ..annotation.batch import BatchProcessor
from ..annotation.relations import RelationManager
from ..annotation.service import AnnotationService
from ..api.models import (
    AddRelationRequest,
    AnnotateChunkRequest,
    AnnotateChunksRequest,
    SessionRequest,
    StartSessionRequest,
    ToolContent,
    ToolResponse,
)
from ..config import settings
from ..core.errors import (
    DomainError,
    InternalError,
    InvalidConfigError,
    UnknownToolError,
    ValidationFailedError,
)
from ..core.result import Result
from ..sessions.store import SessionStore, session_store

logger = logging.getLogger("mcp.tools")

RequestT = TypeVar("RequestT", bound=BaseModel)


# ---------------------------------------------------------------------
# Service Container
# ---------------------------------------------------------------------

class ToolServices:
    """
    Core services a tool handler may use, all sharing one session store.
    """

    def __init__(self, store: Optional[SessionStore] = None) -> None:
        self.store = store if store is not None else session_store
        self.annotations = AnnotationService(self.store)
        self.batch = BatchProcessor(self.annotations)
        self.relations = RelationManager(self.store)


class _InvalidArguments(Exception):
    def __init__(self, error: DomainError) -> None:
        super().__init__(error.message)
        self.error = error


ToolHandler = Callable[[Dict[str, Any], ToolServices], ToolResponse]


# ---------------------------------------------------------------------
# Response Helpers
# ---------------------------------------------------------------------

def _text_response(payload: Any, is_error: bool = False) -> ToolResponse:
    return ToolResponse(
        content=[ToolContent(text=json.dumps(payload, default=str))],
        is_error=is_error,
    )


def error_response(error: DomainError) -> ToolResponse:
    return _text_response(error.to_payload(), is_error=True)


def _from_result(result: Result[Any, Any]) -> ToolResponse:
    if not result.success:
        logger.warning("Tool call failed: %s", result.error.message)
        return error_response(result.error)

    data = result.data
    if isinstance(data, BaseModel):
        return _text_response(data.model_dump(mode="json", by_alias=True, exclude_none=True))
    return _text_response(data)


def _parse(model: Type[RequestT], args: Dict[str, Any], tool_name: str) -> RequestT:
    try:
        return model.model_validate(args)
    except ValidationError as exc:
        issues = [
            dict(issue)
            for issue in exc.errors(include_url=False, include_context=False, include_input=False)
        ]
        logger.warning("Invalid input for %s: %s", tool_name, issues)
        if tool_name == TOOL_START_SESSION:
            raise _InvalidArguments(
                InvalidConfigError(issues=issues, message="Invalid input parameters")
            ) from exc
        raise _InvalidArguments(
            ValidationFailedError(issues=issues, message="Invalid input parameters")
        ) from exc


# ---------------------------------------------------------------------
# Tool Registry (AUTHORITATIVE)
# ---------------------------------------------------------------------

def _handle_start_session(args: Dict[str, Any], services: ToolServices) -> ToolResponse:
    req = _parse(StartSessionRequest, args, TOOL_START_SESSION)
    return _from_result(services.store.create(req.config))


def _handle_annotate_chunk(args: Dict[str, Any], services: ToolServices) -> ToolResponse:
    req = _parse(AnnotateChunkRequest, args, TOOL_ANNOTATE_CHUNK)
    return _from_result(
        services.annotations.annotate_chunk(
            str(req.session_id),
            req.to_input(req.chunk_id),
        )
    )


def _handle_annotate_chunks(args: Dict[str, Any], services: ToolServices) -> ToolResponse:
    req = _parse(AnnotateChunksRequest, args, TOOL_ANNOTATE_CHUNKS)
    return _from_result(
        services.batch.annotate_chunks(
            str(req.session_id),
            [item.to_input(item.chunk_id) for item in req.annotations],
        )
    )


def _handle_add_relation(args: Dict[str, Any], services: ToolServices) -> ToolResponse:
    req = _parse(AddRelationRequest, args, TOOL_ADD_RELATION)
    return _from_result(
        services.relations.add_relation(
            str(req.session_id),
            req.source_chunk_id,
            req.target_chunk_id,
            req.relation_type.value,
        )
    )


def _handle_get_progress(args: Dict[str, Any], services: ToolServices) -> ToolResponse:
    req = _parse(SessionRequest, args, TOOL_GET_PROGRESS)
    return _from_result(services.store.get_progress(str(req.session_id)))


def _handle_export_annotations(args: Dict[str, Any], services: ToolServices) -> ToolResponse:
    req = _parse(SessionRequest, args, TOOL_EXPORT_ANNOTATIONS)
    return _from_result(services.annotations.export_annotations(str(req.session_id)))


TOOL_REGISTRY: Dict[str, ToolHandler] = {
    TOOL_START_SESSION: _handle_start_session,
    TOOL_ANNOTATE_CHUNK: _handle_annotate_chunk,
    TOOL_ANNOTATE_CHUNKS: _handle_annotate_chunks,
    TOOL_ADD_RELATION: _handle_add_relation,
    TOOL_GET_PROGRESS: _handle_get_progress,
    TOOL_EXPORT_ANNOTATIONS: _handle_export_annotations,
}


# ---------------------------------------------------------------------
# Public Dispatch API
# ---------------------------------------------------------------------

def dispatch_tool_call(
    tool_name: str,
    args: Dict[str, Any],
    services: ToolServices,
) -> ToolResponse:
    """
    Dispatch a tool call requested by an MCP client.

    Parameters
    ----------
    tool_name : str
        The symbolic tool name.

    args : Dict[str, Any]
        Parsed JSON arguments for the tool.

    services : ToolServices
        Core services (injected).

    Returns
    -------
    ToolResponse
        Success payload, or a tagged error with `isError` set. Unknown tools,
        invalid arguments, and unexpected exceptions are all reported this
        way; nothing is raised to the caller.
    """
    handler = TOOL_REGISTRY.get(tool_name)
    if handler is None:
        logger.warning("Unknown tool requested: %s", tool_name)
        return error_response(
            UnknownToolError(tool=tool_name, message=f"Unknown tool: {tool_name}")
        )

    logger.info("Tool call received: %s", tool_name)
    started = time.perf_counter()

    try:
        response = handler(args or {}, services)
    except _InvalidArguments as exc:
        response = error_response(exc.error)
    except Exception as exc:
        logger.exception("Tool execution failed with exception: %s", tool_name)
        response = error_response(InternalError(message=str(exc) or "Unknown error"))

    elapsed_ms = (time.perf_counter() - started) * 1000
    if elapsed_ms > settings.slow_operation_ms:
        logger.info("%s took %.1f ms", tool_name, elapsed_ms)

    logger.info(
        "Tool execution completed: %s (success=%s, %.1f ms)",
        tool_name,
        not response.is_error,
        elapsed_ms,
    )
    return response
