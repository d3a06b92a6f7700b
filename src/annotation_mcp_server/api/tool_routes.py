"""
Tool Routes

This module exposes the MCP tool surface over HTTP:

- `GET /tools` lists the authoritative tool definitions
- `POST /tools/call` dispatches one tool call

Tool failures are reported inside the response payload (`isError`), never
as HTTP errors, mirroring MCP `tools/call` semantics.
"""

from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, status

from .dependencies import get_tool_services
from .models import ToolCallRequest, ToolResponse
from ..tools.base import ToolServices, dispatch_tool_call
from ..tools.definitions import TOOL_DEFINITIONS

router = APIRouter(prefix="/tools", tags=["tools"])


@router.get(
    "",
    summary="List available annotation tools",
    status_code=status.HTTP_200_OK,
)
def list_tools() -> Dict[str, Any]:
    return {"tools": TOOL_DEFINITIONS}


@router.post(
    "/call",
    response_model=ToolResponse,
    response_model_by_alias=True,
    summary="Invoke an annotation tool",
    status_code=status.HTTP_200_OK,
)
def call_tool(
    req: ToolCallRequest,
    services: Annotated[ToolServices, Depends(get_tool_services)],
) -> ToolResponse:
    """
    Dispatch a tool call.

    Parameters
    ----------
    req : ToolCallRequest
        Contains:
        - name: Tool name (see `GET /tools`)
        - arguments: Tool arguments object

    Returns
    -------
    ToolResponse
        JSON text content plus the `isError` flag.
    """
    return dispatch_tool_call(req.name, req.arguments, services)
