"""
Annotation Service

This module implements the annotation engine: validating a partial
annotation for one chunk, merging it with what is already stored, and
writing the merged record back to the session store. It also provides the
full-document export view.

Merge policy
------------
- categories, labels, subtypes: replaced only by a non-empty value,
  otherwise the stored value is kept whole.
- keywords, tags, notes, summary: replaced whenever supplied (an explicit
  empty value counts as supplied).
- relations: never touched here; owned by the relation manager.

No write happens unless every supplied value validates. Returned records
are copies (callers cannot mutate stored annotations).
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .models import AnnotateChunkInput, AnnotationExport, ChunkAnnotation
from .vocabulary import Category
from ..core.errors import AnnotationError, ChunkNotFoundError, SubtypeCategoryMismatchError
from ..core.result import Result, failure, success
from ..sessions.models import ConfigChunk
from ..sessions.store import SessionStore, session_store
from ..validation.validators import (
    validate_category,
    validate_label,
    validate_subtype_for_category,
)

logger = logging.getLogger("mcp.annotation")


def format_chunk_id(
    position: int,
    category: Optional[str],
    label: Optional[str],
    fallback: str,
) -> str:
    """Return `{position}_{category}_{label}`, or `fallback` if either part is missing."""
    if category and label:
        return f"{position}_{category}_{label}"
    return fallback


class AnnotationService:
    """
    Applies partial annotations to configured chunks.
    """

    def __init__(self, store: Optional[SessionStore] = None) -> None:
        self._store = store if store is not None else session_store

    @property
    def store(self) -> SessionStore:
        return self._store

    # ------------------------------------------------------------------
    # Annotate
    # ------------------------------------------------------------------

    def annotate_chunk(
        self,
        session_id: str,
        payload: AnnotateChunkInput,
    ) -> Result[ChunkAnnotation, AnnotationError]:
        """
        Validate and merge a partial annotation for one chunk.

        Parameters
        ----------
        session_id : str
            Target session.

        payload : AnnotateChunkInput
            Chunk ID plus the fields to set. Omitted fields are `None`.

        Returns
        -------
        Result[ChunkAnnotation, AnnotationError]
            The merged, stored annotation, or the first validation error.
        """
        chunk_id = payload.chunk_id

        session_result = self._store.get(session_id)
        if not session_result.success:
            # Reported in the ChunkNotFound shape for the caller's benefit
            return failure(
                ChunkNotFoundError(
                    chunk_id=chunk_id,
                    message=f"Session not found: {session_id}",
                )
            )
        session = session_result.data

        config_chunk = self._store.get_chunk(session, chunk_id)
        if config_chunk is None:
            return failure(
                ChunkNotFoundError(
                    chunk_id=chunk_id,
                    message=f"Chunk not found in session: {chunk_id}",
                )
            )

        categories: List[str] = []
        for raw in payload.categories or []:
            result = validate_category(raw)
            if not result.success:
                return result
            categories.append(result.data.value)

        labels: List[str] = []
        for raw in payload.labels or []:
            result = validate_label(raw)
            if not result.success:
                return result
            labels.append(result.data.value)

        subtypes: Dict[str, str] = {}
        for raw_category, raw_subtype in (payload.subtypes or {}).items():
            category_result = validate_category(raw_category)
            if not category_result.success:
                return category_result
            category: Category = category_result.data

            # Checked against this call's categories, not the stored ones
            if category.value not in categories:
                return failure(
                    SubtypeCategoryMismatchError(
                        subtype=str(raw_subtype),
                        category=category.value,
                        message=(
                            f"Category '{category.value}' in subtypes "
                            "but not in categories array"
                        ),
                    )
                )

            subtype_result = validate_subtype_for_category(category, raw_subtype)
            if not subtype_result.success:
                return subtype_result
            subtypes[category.value] = subtype_result.data

        with session.lock:
            existing = session.annotations.get(chunk_id)
            annotation = self._merge(
                config_chunk,
                existing,
                payload,
                categories,
                labels,
                subtypes,
            )
            self._store.save_annotation(session, chunk_id, annotation)

        logger.debug("Chunk annotated: %s/%s", session_id, chunk_id)
        return success(annotation.model_copy(deep=True))

    @staticmethod
    def _merge(
        config_chunk: ConfigChunk,
        existing: Optional[ChunkAnnotation],
        payload: AnnotateChunkInput,
        categories: List[str],
        labels: List[str],
        subtypes: Dict[str, str],
    ) -> ChunkAnnotation:
        base = existing or ChunkAnnotation.empty(config_chunk.chunk_id, config_chunk.position)

        merged_categories = categories or list(base.categories)
        merged_labels = labels or list(base.labels)
        merged_subtypes = subtypes or dict(base.subtypes)

        return ChunkAnnotation(
            chunk_id=format_chunk_id(
                config_chunk.position,
                merged_categories[0] if merged_categories else None,
                merged_labels[0] if merged_labels else None,
                fallback=config_chunk.chunk_id,
            ),
            position=config_chunk.position,
            categories=merged_categories,
            labels=merged_labels,
            subtypes=merged_subtypes,
            keywords=list(payload.keywords) if payload.keywords is not None else list(base.keywords),
            tags=list(payload.tags) if payload.tags is not None else list(base.tags),
            relations={kind: list(targets) for kind, targets in base.relations.items()},
            notes=payload.notes if payload.notes is not None else base.notes,
            summary=payload.summary if payload.summary is not None else base.summary,
        )

    # ------------------------------------------------------------------
    # Read views
    # ------------------------------------------------------------------

    def export_annotations(self, session_id: str) -> Result[AnnotationExport, AnnotationError]:
        """
        Export one record per configured chunk, in configured order.

        Chunks without a stored annotation appear as empty placeholders.
        """
        session_result = self._store.get(session_id)
        if not session_result.success:
            return failure(
                ChunkNotFoundError(
                    chunk_id="",
                    message=f"Session not found: {session_id}",
                )
            )
        session = session_result.data

        with session.lock:
            chunks: List[ChunkAnnotation] = []
            for chunk in session.chunks:
                stored = session.annotations.get(chunk.chunk_id)
                if stored is None:
                    chunks.append(ChunkAnnotation.empty(chunk.chunk_id, chunk.position))
                else:
                    chunks.append(stored.model_copy(deep=True))
            annotated = len(session.annotations)

        logger.info(
            "Annotations exported: %s (%d chunks, %d annotated)",
            session_id,
            len(chunks),
            annotated,
        )
        return success(AnnotationExport(chunks=chunks))


annotation_service = AnnotationService()
