"""
Tests for the Akasha facade with injected store and providers.
"""

import pytest

from conftest import ALICE_ACME, ALICE_BOB, FakeEmbeddings

from akasha import Akasha, AkashaConfig
from akasha.errors import ConfigurationError
from akasha.events.types import EventType
from akasha.storage.memory import MemoryGraphStore
from akasha.types.options import BatchLearnOptions, LearnOptions, QueryOptions, QueryStrategy


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("OPENAI_API_KEY", "AKASHA_SCOPE_ID", "AKASHA_SCOPE_NAME", "AKASHA_STORAGE_BACKEND"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config() -> AkashaConfig:
    return AkashaConfig(scope_id="S1", scope_type="tenant", scope_name="Scope One")


@pytest.fixture
def akasha(config, store, llm, embeddings) -> Akasha:
    return Akasha(config, store=store, llm=llm, embeddings=embeddings)


class BrokenStore(MemoryGraphStore):
    async def ping(self) -> None:
        raise ConnectionError("store offline")


class TestConstruction:
    def test_is_lazy(self, config):
        akasha = Akasha(config)
        assert not akasha.is_initialized
        assert akasha.scope_id == "S1"
        assert repr(akasha) == "Akasha(scope='S1', initialized=False)"

    @pytest.mark.asyncio
    async def test_context_manager(self, akasha, store):
        async with akasha as opened:
            assert opened.is_initialized
        assert not akasha.is_initialized
        with pytest.raises(RuntimeError):
            await store.ping()

    def test_validate_config(self, config):
        result = Akasha(config).validate_config()
        assert not result.valid
        assert {issue.field for issue in result.errors} == {"openai_api_key"}


class TestLearnAndAsk:
    @pytest.mark.asyncio
    async def test_learn_then_ask(self, akasha, llm):
        learned = await akasha.learn(ALICE_ACME)
        assert learned.created.entities == 2

        result = await akasha.ask("Who does Alice work for?", similarity_threshold=0.1)

        assert result.answer == llm.answer
        assert result.found_anything
        assert {entity.name for entity in result.context.entities} >= {"Alice", "Acme Corp"}

    @pytest.mark.asyncio
    async def test_learn_keyword_options(self, akasha):
        result = await akasha.learn(ALICE_ACME, context_id="ctx-kw", context_name="Notes")
        assert result.context.id == "ctx-kw"
        assert result.context.name == "Notes"

    @pytest.mark.asyncio
    async def test_ask_with_options_object(self, akasha, llm):
        await akasha.learn(ALICE_ACME)
        result = await akasha.ask(
            "Alice",
            QueryOptions(strategy=QueryStrategy.ENTITIES, similarity_threshold=0.1),
        )
        assert result.context.documents is None

    @pytest.mark.asyncio
    async def test_ask_uses_configured_threshold(self, store, llm, embeddings):
        config = AkashaConfig(scope_id="S1", scope_name="One", query_similarity_threshold=1.0)
        akasha = Akasha(config, store=store, llm=llm, embeddings=embeddings)
        await akasha.learn(ALICE_ACME)

        result = await akasha.ask("Something unrelated entirely")

        assert not result.found_anything
        assert llm.answer_calls == []

    @pytest.mark.asyncio
    async def test_options_object_and_keywords_are_exclusive(self, akasha, store):
        with pytest.raises(TypeError, match="context_name"):
            await akasha.learn(ALICE_ACME, LearnOptions(context_id="ctx-1"), context_name="Notes")
        with pytest.raises(TypeError, match="limit"):
            await akasha.ask("Alice", QueryOptions(), limit=5)
        with pytest.raises(TypeError, match="context_name"):
            await akasha.learn_batch([ALICE_ACME], BatchLearnOptions(), context_name="Notes")
        assert await store.count_documents() == 0

    @pytest.mark.asyncio
    async def test_learn_batch(self, akasha):
        result = await akasha.learn_batch([ALICE_ACME, ALICE_BOB])
        assert result.summary.succeeded == 2
        assert result.summary.entities_created == 3

    @pytest.mark.asyncio
    async def test_learn_requires_scope(self, store, llm, embeddings):
        akasha = Akasha(AkashaConfig(), store=store, llm=llm, embeddings=embeddings)
        with pytest.raises(ConfigurationError, match="Scope is required"):
            await akasha.learn(ALICE_ACME)
        with pytest.raises(ConfigurationError):
            await akasha.learn_batch([ALICE_ACME])

    @pytest.mark.asyncio
    async def test_scope_check_precedes_provider_setup(self, store):
        akasha = Akasha(AkashaConfig(), store=store)
        with pytest.raises(ConfigurationError, match="Scope is required"):
            await akasha.learn(ALICE_ACME)

    def test_sync_wrappers(self, akasha):
        akasha.learn_sync(ALICE_ACME)
        assert akasha.stats_sync() == {"documents": 1, "entities": 2, "relationships": 1}


class TestDataAccess:
    @pytest.mark.asyncio
    async def test_lookups(self, akasha):
        learned = await akasha.learn(ALICE_ACME)

        assert (await akasha.get_document(learned.document.id)).text == ALICE_ACME
        assert (await akasha.find_document_by_text(ALICE_ACME)).id == learned.document.id
        alice = await akasha.find_entity_by_name("Alice")
        assert (await akasha.get_entity(alice.id)).name == "Alice"
        rel = learned.relationships[0]
        assert (await akasha.get_relationship(rel.id)).type == "WORKS_FOR"

    @pytest.mark.asyncio
    async def test_lookups_are_scoped(self, config, store, llm, embeddings):
        tenant_one = Akasha(config, store=store, llm=llm, embeddings=embeddings)
        tenant_two = Akasha(
            config.with_overrides(scope_id="S2", scope_name="Scope Two"),
            store=store,
            llm=llm,
            embeddings=embeddings,
        )
        learned = await tenant_one.learn(ALICE_ACME)

        assert await tenant_two.get_document(learned.document.id) is None
        assert await tenant_two.find_entity_by_name("Alice") is None
        assert await tenant_two.list_entities() == []
        assert not (await tenant_two.delete_document(learned.document.id)).deleted
        assert await tenant_two.update_entity(learned.entities[0].id, {"x": 1}) is None
        assert await tenant_two.stats() == {"documents": 0, "entities": 0, "relationships": 0}

    @pytest.mark.asyncio
    async def test_listing(self, akasha):
        await akasha.learn(ALICE_ACME)
        await akasha.learn(ALICE_BOB)

        assert len(await akasha.list_documents()) == 2
        assert [e.name for e in await akasha.list_entities(label="Company")] == ["Acme Corp"]
        assert [r.type for r in await akasha.list_relationships(type="KNOWS")] == ["KNOWS"]

    @pytest.mark.asyncio
    async def test_update_and_delete_emit_events(self, akasha):
        received = []
        for event_type in (EventType.ENTITY_UPDATED, EventType.ENTITY_DELETED):
            akasha.events.on(event_type, received.append)
        learned = await akasha.learn(ALICE_ACME)
        alice = next(e for e in learned.entities if e.name == "Alice")

        updated = await akasha.update_entity(alice.id, {"role": "engineer", "scopeId": "S9"})
        deleted = await akasha.delete_entity(alice.id)
        await akasha.events.drain()

        assert updated.properties == {"name": "Alice", "role": "engineer"}
        assert updated.scope_id == "S1"
        assert deleted.deleted
        assert deleted.related_relationships_deleted == 2
        assert [event.type for event in received] == [
            EventType.ENTITY_UPDATED,
            EventType.ENTITY_DELETED,
        ]
        assert received[1].entity.id == alice.id

    @pytest.mark.asyncio
    async def test_update_document_and_relationship(self, akasha):
        learned = await akasha.learn(ALICE_ACME)

        document = await akasha.update_document(learned.document.id, {"source": "hr"})
        relationship = await akasha.update_relationship(
            learned.relationships[0].id, {"since": 2021}
        )

        assert document.metadata == {"source": "hr"}
        assert relationship.properties == {"since": 2021}
        assert (await akasha.delete_relationship(relationship.id)).deleted
        assert (await akasha.delete_document(document.id)).deleted


class TestHealth:
    @pytest.mark.asyncio
    async def test_healthy(self, akasha):
        status = await akasha.health_check()
        assert status.status == "healthy"
        assert status.store.connected
        assert status.providers.available

    @pytest.mark.asyncio
    async def test_degraded(self, config, store, llm):
        akasha = Akasha(config, store=store, llm=llm, embeddings=FakeEmbeddings(fail=True))
        status = await akasha.health_check()
        assert status.status == "degraded"
        assert status.providers.error == "embedding service unavailable"

    @pytest.mark.asyncio
    async def test_unhealthy(self, config, llm):
        akasha = Akasha(
            config, store=BrokenStore(), llm=llm, embeddings=FakeEmbeddings(fail=True)
        )
        status = await akasha.health_check()
        assert status.status == "unhealthy"
        assert status.store.error == "store offline"

    @pytest.mark.asyncio
    async def test_missing_api_key_is_reported(self, config, store):
        status = await Akasha(config, store=store).health_check()
        assert status.status == "degraded"
        assert "OPENAI_API_KEY" in status.providers.error
