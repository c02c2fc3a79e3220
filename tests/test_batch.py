"""
Tests for batch learning.
"""

import pytest

from conftest import ALICE_ACME, ALICE_BOB, DEFAULT_EXTRACTIONS, FakeLLM

from akasha.errors import ConfigurationError
from akasha.events.types import EventType
from akasha.ingestion.batch import BatchCoordinator
from akasha.ingestion.pipeline import IngestionPipeline
from akasha.types.options import BatchLearnItem, BatchLearnOptions

BROKEN = "This text breaks the extractor."


@pytest.fixture
def coordinator(store, embeddings, scope, events) -> BatchCoordinator:
    llm = FakeLLM(DEFAULT_EXTRACTIONS, failures=[BROKEN])
    pipeline = IngestionPipeline(store, llm, embeddings, scope=scope, events=events)
    return BatchCoordinator(pipeline, events=events)


class TestLearnBatch:
    @pytest.mark.asyncio
    async def test_failure_is_isolated(self, coordinator, store):
        result = await coordinator.learn_batch([ALICE_ACME, BROKEN, ALICE_BOB])

        assert result.summary.total == 3
        assert result.summary.succeeded == 2
        assert result.summary.failed == 1
        assert len(result.results) == 2
        assert len(result.errors) == 1
        assert result.errors[0].index == 1
        assert result.errors[0].text == BROKEN
        assert BROKEN in result.errors[0].error
        # the failing item's document was written before extraction failed
        assert await store.count_documents() == 3

    @pytest.mark.asyncio
    async def test_summary_counts(self, coordinator):
        result = await coordinator.learn_batch([ALICE_ACME, ALICE_BOB, ALICE_ACME])

        summary = result.summary
        assert summary.documents_created == 2
        assert summary.documents_reused == 1
        assert summary.entities_created == 3  # Alice, Acme Corp, Bob
        assert summary.relationships_created == 3
        assert result.errors is None

    @pytest.mark.asyncio
    async def test_items_override_batch_options(self, coordinator):
        result = await coordinator.learn_batch(
            [
                BatchLearnItem(text=ALICE_ACME, context_id="ctx-a", context_name="Own name"),
                ALICE_BOB,
            ],
            BatchLearnOptions(context_name="Batch name"),
        )
        first, second = result.results
        assert first.context.id == "ctx-a"
        assert first.context.name == "Own name"
        assert second.context.name == "Batch name"

    @pytest.mark.asyncio
    async def test_error_text_is_truncated(self, store, embeddings, scope):
        long_text = "y" * 500
        llm = FakeLLM(failures=[long_text])
        pipeline = IngestionPipeline(store, llm, embeddings, scope=scope)
        result = await BatchCoordinator(pipeline, preview_chars=50).learn_batch([long_text])

        assert result.errors[0].text == "y" * 50 + "..."

    @pytest.mark.asyncio
    async def test_empty_batch(self, coordinator):
        result = await coordinator.learn_batch([])
        assert result.summary.total == 0
        assert result.results == []
        assert result.errors is None

    @pytest.mark.asyncio
    async def test_requires_scope(self, store, llm, embeddings):
        pipeline = IngestionPipeline(store, llm, embeddings, scope=None)
        with pytest.raises(ConfigurationError):
            await BatchCoordinator(pipeline).learn_batch([ALICE_ACME])


class TestProgress:
    @pytest.mark.asyncio
    async def test_sync_callback(self, coordinator):
        updates = []
        await coordinator.learn_batch(
            [ALICE_ACME, BROKEN, ALICE_BOB], BatchLearnOptions(on_progress=updates.append)
        )

        assert [u.current for u in updates] == [0, 1, 2]
        assert [u.completed for u in updates] == [1, 1, 2]
        assert [u.failed for u in updates] == [0, 1, 1]
        assert all(u.total == 3 for u in updates)
        assert updates[1].current_text == BROKEN
        assert updates[-1].estimated_time_remaining_ms == 0

    @pytest.mark.asyncio
    async def test_async_callback_is_awaited(self, coordinator):
        seen = []

        async def on_progress(progress):
            seen.append(progress.current)

        await coordinator.learn_batch(
            [ALICE_ACME, ALICE_BOB], BatchLearnOptions(on_progress=on_progress)
        )
        assert seen == [0, 1]

    @pytest.mark.asyncio
    async def test_progress_and_completion_events(self, coordinator, events):
        progress, completed = [], []
        events.on(EventType.BATCH_PROGRESS, progress.append)
        events.on(EventType.BATCH_COMPLETED, completed.append)

        await coordinator.learn_batch([ALICE_ACME, ALICE_BOB])
        await events.drain()

        assert len(progress) == 2
        assert len(completed) == 1
        assert completed[0].summary.succeeded == 2
