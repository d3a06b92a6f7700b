from typing import Annotated

from fastapi import APIRouter, Depends

from .dependencies import get_tool_services
from ..config import settings
from ..tools.base import ToolServices

router = APIRouter(tags=["health"])

@router.get("/health")
def health(services: Annotated[ToolServices, Depends(get_tool_services)]):
    return {
        "status": "ok",
        "version": settings.app_version,
        "sessions": services.store.session_count,
    }
