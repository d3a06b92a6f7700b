from functools import lru_cache

from ..sessions.store import session_store
from ..tools.base import ToolServices


@lru_cache
def get_tool_services() -> ToolServices:
    # One container for the process, bound to the global session store.
    # Tests override this dependency with a container around a fresh store.
    return ToolServices(session_store)
