"""
Batch Coordinator

Runs learn() over many texts, strictly one after another. A failing item
is recorded and skipped; the batch itself only fails when no scope is
configured (checked before the first item).

Progress:
    After every item (success or failure) the optional ``on_progress``
    callback receives a BatchProgress. Async callbacks are awaited before
    the next item starts. The time estimate is the average duration of the
    items processed so far times the number of items left.

Example:
    >>> coordinator = BatchCoordinator(pipeline)
    >>> result = await coordinator.learn_batch(
    ...     ["Alice works for Acme Corp.", "Bob knows Alice."],
    ...     BatchLearnOptions(on_progress=print),
    ... )
    >>> result.summary.succeeded
    2
"""

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

from akasha.events.types import AkashaEvent, EventType
from akasha.types.options import BatchLearnItem, BatchLearnOptions, LearnOptions
from akasha.types.results import (
    BatchError,
    BatchLearnResult,
    BatchProgress,
    BatchSummary,
    ExtractResult,
)
from akasha.utils.properties import truncate_preview

if TYPE_CHECKING:
    from akasha.events.emitter import EventEmitter
    from akasha.ingestion.pipeline import IngestionPipeline

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_CHARS = 200


def _item_options(item: BatchLearnItem, options: BatchLearnOptions) -> LearnOptions:
    return LearnOptions(
        context_id=item.context_id,
        context_name=item.context_name or options.context_name,
        valid_from=item.valid_from or options.valid_from,
        valid_to=item.valid_to or options.valid_to,
        include_embeddings=options.include_embeddings,
    )


def summarize(total: int, results: list[ExtractResult], failed: int) -> BatchSummary:
    """Aggregate creation counters of the successful items."""
    return BatchSummary(
        total=total,
        succeeded=len(results),
        failed=failed,
        documents_created=sum(r.created.document for r in results),
        documents_reused=sum(1 for r in results if r.created.document == 0),
        entities_created=sum(r.created.entities for r in results),
        relationships_created=sum(r.created.relationships for r in results),
    )


class BatchCoordinator:
    """
    Sequential learn_batch() over an IngestionPipeline.

    Args:
        pipeline: Pipeline used for every item
        events: Optional emitter for batch.progress / batch.completed
        preview_chars: Length cap of text previews in progress and errors
    """

    def __init__(
        self,
        pipeline: "IngestionPipeline",
        events: "EventEmitter | None" = None,
        preview_chars: int = DEFAULT_PREVIEW_CHARS,
    ) -> None:
        self.pipeline = pipeline
        self.events = events
        self.preview_chars = preview_chars

    async def learn_batch(
        self,
        items: Sequence[str | BatchLearnItem],
        options: BatchLearnOptions | None = None,
    ) -> BatchLearnResult:
        """
        Learn every item in order.

        Args:
            items: Texts or BatchLearnItems
            options: Batch-wide defaults and progress callback

        Returns:
            BatchLearnResult; ``errors`` is None when every item succeeded

        Raises:
            ConfigurationError: No scope configured
        """
        scope = self.pipeline.require_scope()
        options = options or BatchLearnOptions()
        normalized = [
            BatchLearnItem(text=item) if isinstance(item, str) else item for item in items
        ]
        total = len(normalized)

        results: list[ExtractResult] = []
        errors: list[BatchError] = []
        started = time.perf_counter()

        for index, item in enumerate(normalized):
            try:
                result = await self.pipeline.learn(item.text, _item_options(item, options))
                results.append(result)
            except Exception as e:
                logger.warning(f"Batch item {index} failed: {e}")
                errors.append(
                    BatchError(
                        index=index,
                        text=truncate_preview(item.text, self.preview_chars),
                        error=str(e),
                    )
                )

            processed = index + 1
            elapsed_ms = (time.perf_counter() - started) * 1000
            progress = BatchProgress(
                current=index,
                total=total,
                completed=len(results),
                failed=len(errors),
                current_text=truncate_preview(item.text, self.preview_chars),
                estimated_time_remaining_ms=round(elapsed_ms / processed * (total - processed)),
            )
            await self._report(progress, options, scope.id)

        summary = summarize(total, results, len(errors))
        logger.info(
            f"Batch finished: {summary.succeeded}/{summary.total} succeeded, "
            f"{summary.failed} failed"
        )
        if self.events is not None:
            self.events.emit(
                AkashaEvent(type=EventType.BATCH_COMPLETED, scope_id=scope.id, summary=summary)
            )

        return BatchLearnResult(results=results, summary=summary, errors=errors or None)

    async def _report(
        self, progress: BatchProgress, options: BatchLearnOptions, scope_id: str
    ) -> None:
        if self.events is not None:
            self.events.emit(
                AkashaEvent(type=EventType.BATCH_PROGRESS, scope_id=scope_id, progress=progress)
            )
        if options.on_progress is None:
            return
        outcome = options.on_progress(progress)
        if inspect.isawaitable(outcome):
            await outcome
