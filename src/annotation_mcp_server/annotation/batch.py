"""
Batch Processor

Annotates many chunks in one call with partial-success semantics: every item
is attempted independently, in input order, and a failed item never aborts
the batch.
"""

from __future__ import annotations

import logging
import time
from typing import Iterable, Optional

from .models import (
    AnnotateChunkInput,
    AnnotationItemError,
    AnnotationItemResult,
    BatchAnnotationResult,
)
from .service import AnnotationService, annotation_service
from ..config import settings
from ..core.result import Success, success

logger = logging.getLogger("mcp.batch")


class BatchProcessor:
    """
    Applies the annotation service to a list of per-chunk payloads.
    """

    def __init__(self, service: Optional[AnnotationService] = None) -> None:
        self._service = service if service is not None else annotation_service

    def annotate_chunks(
        self,
        session_id: str,
        annotations: Iterable[AnnotateChunkInput],
    ) -> Success[BatchAnnotationResult]:
        """
        Annotate each item in order and collect one result per item.

        The batch itself cannot fail; failed items carry only the error's
        type tag and message.
        """
        started = time.perf_counter()
        batch = BatchAnnotationResult()

        for item in annotations:
            result = self._service.annotate_chunk(session_id, item)

            if result.success:
                batch.results.append(
                    AnnotationItemResult(
                        chunk_id=item.chunk_id,
                        success=True,
                        data=result.data,
                    )
                )
                batch.success_count += 1
            else:
                batch.results.append(
                    AnnotationItemResult(
                        chunk_id=item.chunk_id,
                        success=False,
                        error=AnnotationItemError(
                            type=result.error.type,
                            message=result.error.message,
                        ),
                    )
                )
                batch.error_count += 1

        elapsed_ms = (time.perf_counter() - started) * 1000
        if elapsed_ms > settings.slow_operation_ms:
            logger.info(
                "Batch annotation took %.1f ms (%d items)",
                elapsed_ms,
                len(batch.results),
            )

        logger.info(
            "Batch annotation completed: %s (%d ok, %d failed)",
            session_id,
            batch.success_count,
            batch.error_count,
        )
        return success(batch)
