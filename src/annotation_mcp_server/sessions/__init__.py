"""
Sessions Package

Provides the in-memory session store and the session data models.
"""

from .models import ConfigChunk, ConfigFile, Session, SessionState
from .store import SessionStore, session_store

__all__ = [
    "ConfigChunk",
    "ConfigFile",
    "Session",
    "SessionState",
    "SessionStore",
    "session_store",
]
