"""
Session Store

In-memory storage for annotation sessions.

This module owns the mapping of session ID to session state (configured
chunks, accumulated annotations, timestamps) and the read-only progress view.

Design choices
--------------
- In-memory only (no persistence across process restarts).
- Session creation validates the chunk configuration and rejects duplicate
  chunk IDs before anything is stored.
- The session map is guarded by a re-entrant lock; each session carries its
  own lock, so unrelated sessions never serialize on each other.
- Failures are returned as tagged values (`Failure`), never raised.
- Global singleton `session_store` for typical application use, while still
  allowing custom instances to be created for tests.
"""

from __future__ import annotations

import logging
import uuid
from threading import RLock
from typing import Any, Dict, Optional, Set

from pydantic import ValidationError

from .models import (
    ConfigChunk,
    ConfigFile,
    ProgressResponse,
    Session,
    SessionCreatedResponse,
)
from ..annotation.models import ChunkAnnotation
from ..core.errors import (
    DuplicateChunkIdError,
    InvalidConfigError,
    SessionError,
    SessionNotFoundError,
)
from ..core.result import Result, failure, success

logger = logging.getLogger("mcp.sessions")


class SessionStore:
    """
    In-memory store mapping session IDs to Session records.

    Every operation that reads or writes a session refreshes its
    `last_accessed_at` timestamp.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}
        self._lock = RLock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create(self, config: Any) -> Result[SessionCreatedResponse, SessionError]:
        """
        Create a new annotation session from a chunk configuration.

        Parameters
        ----------
        config : ConfigFile | dict
            Chunk configuration. Raw mappings are validated against
            `ConfigFile` first.

        Returns
        -------
        Result[SessionCreatedResponse, SessionError]
            The new session ID and chunk count, or `InvalidConfig` /
            `DuplicateChunkId`.
        """
        if isinstance(config, ConfigFile):
            valid_config = config
        else:
            try:
                valid_config = ConfigFile.model_validate(config)
            except ValidationError as exc:
                issues = exc.errors(include_url=False, include_context=False, include_input=False)
                logger.warning("Invalid config file: %s", issues)
                return failure(
                    InvalidConfigError(
                        issues=[dict(issue) for issue in issues],
                        message="Config validation failed: "
                        + ", ".join(issue["msg"] for issue in issues),
                    )
                )

        seen: Set[str] = set()
        for chunk in valid_config.chunks:
            if chunk.chunk_id in seen:
                logger.warning("Duplicate chunk_id found: %s", chunk.chunk_id)
                return failure(
                    DuplicateChunkIdError(
                        chunk_id=chunk.chunk_id,
                        message=f"Duplicate chunk_id found: {chunk.chunk_id}",
                    )
                )
            seen.add(chunk.chunk_id)

        session = Session(id=str(uuid.uuid4()), config=valid_config)

        with self._lock:
            self._sessions[session.id] = session

        logger.info(
            "Session created: %s (%d chunks)", session.id, len(valid_config.chunks)
        )

        return success(
            SessionCreatedResponse(
                session_id=session.id,
                chunk_count=len(valid_config.chunks),
            )
        )

    def get(self, session_id: str) -> Result[Session, SessionError]:
        """
        Look up a session and refresh its last-accessed timestamp.
        """
        with self._lock:
            session = self._sessions.get(session_id)

        if session is None:
            logger.debug("Session not found: %s", session_id)
            return failure(
                SessionNotFoundError(
                    session_id=session_id,
                    message=f"Session not found: {session_id}",
                )
            )

        session.touch()
        return success(session)

    def delete(self, session_id: str) -> bool:
        """
        Remove a session. Administrative use only.

        Returns
        -------
        bool
            True if a session was removed.
        """
        with self._lock:
            removed = self._sessions.pop(session_id, None) is not None

        if removed:
            logger.info("Session deleted: %s", session_id)
        return removed

    # ------------------------------------------------------------------
    # Chunk lookups
    # ------------------------------------------------------------------

    @staticmethod
    def has_chunk(session: Session, chunk_id: str) -> bool:
        return any(chunk.chunk_id == chunk_id for chunk in session.chunks)

    @staticmethod
    def get_chunk(session: Session, chunk_id: str) -> Optional[ConfigChunk]:
        return next(
            (chunk for chunk in session.chunks if chunk.chunk_id == chunk_id),
            None,
        )

    # ------------------------------------------------------------------
    # Annotations
    # ------------------------------------------------------------------

    @staticmethod
    def save_annotation(
        session: Session,
        chunk_id: str,
        annotation: ChunkAnnotation,
    ) -> None:
        """
        Insert or replace the annotation stored under the original chunk ID.
        """
        with session.lock:
            session.annotations[chunk_id] = annotation
            session.touch()

        logger.debug("Annotation saved: %s/%s", session.id, chunk_id)

    def get_progress(self, session_id: str) -> Result[ProgressResponse, SessionError]:
        """
        Summarize annotation progress for a session.

        Any stored annotation counts as annotated, including the minimal
        records created by relation-only calls.
        """
        session_result = self.get(session_id)
        if not session_result.success:
            return session_result

        session = session_result.data
        with session.lock:
            total = len(session.chunks)
            annotated = len(session.annotations)
            pending_ids = [
                chunk.chunk_id
                for chunk in session.chunks
                if chunk.chunk_id not in session.annotations
            ]

        percentage = round(annotated / total * 100, 2) if total > 0 else 100.0

        return success(
            ProgressResponse(
                total_chunks=total,
                annotated_chunks=annotated,
                pending_chunks=total - annotated,
                completion_percentage=percentage,
                pending_chunk_ids=pending_ids,
            )
        )

    # ------------------------------------------------------------------
    # Utility operations
    # ------------------------------------------------------------------

    def clear_all(self) -> None:
        """
        Remove all sessions from the store.

        Intended primarily for test setup/teardown or administrative resets.
        """
        with self._lock:
            self._sessions.clear()

    def has_session(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    @property
    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __len__(self) -> int:
        return self.session_count


# Global singleton used by the application.
session_store = SessionStore()
