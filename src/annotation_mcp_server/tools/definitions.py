"""
Tool Definitions

This module defines the authoritative tool schemas exposed to MCP clients.
These definitions must remain strictly synchronized with:

- tools/base.py (TOOL_REGISTRY)
- api/models.py (the request models the input schemas are generated from)

Only tools defined here can ever be invoked through the tool layer.
"""

from __future__ import annotations

from typing import Any, Dict, Final, List, Type

from pydantic import BaseModel

from ..api.models import (
    AddRelationRequest,
    AnnotateChunkRequest,
    AnnotateChunksRequest,
    SessionRequest,
    StartSessionRequest,
)


# ---------------------------------------------------------------------
# Tool Name Constants (Single Source of Truth)
# ---------------------------------------------------------------------

TOOL_START_SESSION: Final[str] = "start_session"
TOOL_ANNOTATE_CHUNK: Final[str] = "annotate_chunk"
TOOL_ANNOTATE_CHUNKS: Final[str] = "annotate_chunks"
TOOL_ADD_RELATION: Final[str] = "add_relation"
TOOL_GET_PROGRESS: Final[str] = "get_progress"
TOOL_EXPORT_ANNOTATIONS: Final[str] = "export_annotations"


def _input_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    return model.model_json_schema(by_alias=True)


# ---------------------------------------------------------------------
# Tool Definitions
# ---------------------------------------------------------------------

TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "name": TOOL_START_SESSION,
        "description": (
            "Initialize a new annotation session with a config file "
            "containing document chunks"
        ),
        "inputSchema": _input_schema(StartSessionRequest),
    },
    {
        "name": TOOL_ANNOTATE_CHUNK,
        "description": "Annotate a single chunk with categories, subtypes, and metadata",
        "inputSchema": _input_schema(AnnotateChunkRequest),
    },
    {
        "name": TOOL_ANNOTATE_CHUNKS,
        "description": (
            "Annotate multiple chunks in a single call (partial success semantics)"
        ),
        "inputSchema": _input_schema(AnnotateChunksRequest),
    },
    {
        "name": TOOL_ADD_RELATION,
        "description": "Define a directed relation between two chunks",
        "inputSchema": _input_schema(AddRelationRequest),
    },
    {
        "name": TOOL_GET_PROGRESS,
        "description": "Query annotation progress for a session",
        "inputSchema": _input_schema(SessionRequest),
    },
    {
        "name": TOOL_EXPORT_ANNOTATIONS,
        "description": "Export complete annotation JSON for the session",
        "inputSchema": _input_schema(SessionRequest),
    },
]
