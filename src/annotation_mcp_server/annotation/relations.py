"""
Relation Manager

Records directed, typed edges between chunks of the same session. Relations
are stored on the source chunk's annotation under `relations[<kind>]`, with
targets deduplicated in first-seen order.
"""

from __future__ import annotations

import logging
from typing import Optional

from .models import AddRelationResponse, ChunkAnnotation
from ..core.errors import RelationError, TargetNotFoundError
from ..core.result import Result, failure, success
from ..sessions.store import SessionStore, session_store
from ..validation.validators import validate_relation_type

logger = logging.getLogger("mcp.relations")


class RelationManager:
    """
    Adds relations between configured chunks.
    """

    def __init__(self, store: Optional[SessionStore] = None) -> None:
        self._store = store if store is not None else session_store

    def add_relation(
        self,
        session_id: str,
        source_chunk_id: str,
        target_chunk_id: str,
        relation_type: str,
    ) -> Result[AddRelationResponse, RelationError]:
        """
        Add a directed relation from source chunk to target chunk.

        A source chunk with no annotation yet gets a minimal empty record.
        Adding an existing (source, target, kind) triple is a no-op.
        Self-relations are allowed.

        Returns
        -------
        Result[AddRelationResponse, RelationError]
            Confirmation echoing the inputs, or `InvalidRelationType` /
            `TargetNotFound` (also used when the session is missing).
        """
        session_result = self._store.get(session_id)
        if not session_result.success:
            return failure(
                TargetNotFoundError(
                    target_chunk_id=source_chunk_id,
                    message=f"Session not found: {session_id}",
                )
            )
        session = session_result.data

        kind_result = validate_relation_type(relation_type)
        if not kind_result.success:
            return kind_result
        kind = kind_result.data.value

        source_chunk = self._store.get_chunk(session, source_chunk_id)
        if source_chunk is None:
            return failure(
                TargetNotFoundError(
                    target_chunk_id=source_chunk_id,
                    message=f"Source chunk not found in session: {source_chunk_id}",
                )
            )

        if not self._store.has_chunk(session, target_chunk_id):
            return failure(
                TargetNotFoundError(
                    target_chunk_id=target_chunk_id,
                    message=f"Target chunk not found in session: {target_chunk_id}",
                )
            )

        with session.lock:
            source = session.annotations.get(source_chunk_id) or ChunkAnnotation.empty(
                source_chunk_id, source_chunk.position
            )

            relations = {k: list(targets) for k, targets in source.relations.items()}
            targets = relations.setdefault(kind, [])
            if target_chunk_id not in targets:
                targets.append(target_chunk_id)

            self._store.save_annotation(
                session,
                source_chunk_id,
                source.model_copy(update={"relations": relations}),
            )

        logger.info(
            "Relation added: %s %s -[%s]-> %s",
            session_id,
            source_chunk_id,
            kind,
            target_chunk_id,
        )

        return success(
            AddRelationResponse(
                source_chunk_id=source_chunk_id,
                target_chunk_id=target_chunk_id,
                relation_type=kind,
            )
        )
