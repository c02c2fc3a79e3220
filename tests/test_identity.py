"""
Tests for the identity resolver.
"""

import pytest

from conftest import FakeEmbeddings

from akasha.ingestion.metadata import generate_system_metadata
from akasha.ingestion.resolution.identity import IdentityResolver
from akasha.storage.memory import MemoryGraphStore


@pytest.fixture
def resolver(store: MemoryGraphStore, embeddings: FakeEmbeddings) -> IdentityResolver:
    return IdentityResolver(store, embeddings)


class TestResolveDocument:
    @pytest.mark.asyncio
    async def test_creates_then_reuses(self, resolver, store, embeddings):
        meta = generate_system_metadata()
        first, created_first = await resolver.resolve_document("S1", "Some text", "ctx1", meta)
        second, created_second = await resolver.resolve_document("S1", "Some text", "ctx2", meta)

        assert created_first is True
        assert created_second is False
        assert first.id == second.id
        assert second.context_ids == ("ctx1", "ctx2")

        stored = await store.find_document_by_id(first.id)
        assert stored.context_ids == ("ctx1", "ctx2")
        assert await store.count_documents() == 1

    @pytest.mark.asyncio
    async def test_same_context_twice_does_not_duplicate(self, resolver, store):
        meta = generate_system_metadata()
        doc, _ = await resolver.resolve_document("S1", "Some text", "ctx1", meta)
        again, created = await resolver.resolve_document("S1", "Some text", "ctx1", meta)

        assert created is False
        assert again.context_ids == ("ctx1",)
        assert (await store.find_document_by_id(doc.id)).context_ids == ("ctx1",)

    @pytest.mark.asyncio
    async def test_embeds_only_on_creation(self, resolver, embeddings):
        meta = generate_system_metadata()
        await resolver.resolve_document("S1", "Some text", "ctx1", meta)
        await resolver.resolve_document("S1", "Some text", "ctx2", meta)
        await resolver.resolve_document("S1", "Some text", "ctx3", meta)
        assert embeddings.calls == ["Some text"]

    @pytest.mark.asyncio
    async def test_scopes_are_isolated(self, resolver, store):
        meta = generate_system_metadata()
        a, created_a = await resolver.resolve_document("S1", "Shared", "ctx", meta)
        b, created_b = await resolver.resolve_document("S2", "Shared", "ctx", meta)
        assert created_a and created_b
        assert a.id != b.id

    @pytest.mark.asyncio
    async def test_does_not_mutate_returned_record(self, resolver):
        meta = generate_system_metadata()
        first, _ = await resolver.resolve_document("S1", "Some text", "ctx1", meta)
        await resolver.resolve_document("S1", "Some text", "ctx2", meta)
        assert first.context_ids == ("ctx1",)

    @pytest.mark.asyncio
    async def test_stamps_metadata(self, resolver):
        meta = generate_system_metadata(valid_from="2020-01-01T00:00:00Z")
        doc, _ = await resolver.resolve_document("S1", "Dated", "ctx1", meta)
        assert doc.recorded_at == meta.recorded_at
        assert doc.valid_from == meta.valid_from
        assert doc.valid_to is None

    @pytest.mark.asyncio
    async def test_embedding_failure_propagates(self, store):
        resolver = IdentityResolver(store, FakeEmbeddings(fail=True))
        with pytest.raises(ConnectionError):
            await resolver.resolve_document("S1", "text", "ctx", generate_system_metadata())
        assert await store.count_documents() == 0


class TestResolveEntity:
    @pytest.mark.asyncio
    async def test_reuse_by_name_ignores_label(self, resolver, store):
        meta = generate_system_metadata()
        person, created = await resolver.resolve_entity(
            "S1", "Acme", "Person", {"name": "Acme"}, "ctx1", meta
        )
        company, reused_created = await resolver.resolve_entity(
            "S1", "Acme", "Company", {"name": "Acme"}, "ctx2", meta
        )
        assert created is True
        assert reused_created is False
        assert company.id == person.id
        assert company.label == "Person"
        assert company.context_ids == ("ctx1", "ctx2")
        assert await store.count_entities() == 1

    @pytest.mark.asyncio
    async def test_properties_are_sanitized(self, resolver):
        entity, _ = await resolver.resolve_entity(
            "S1",
            "Alice",
            "Person",
            {"name": "Alice", "scopeId": "S9", "_recordedAt": "1999", "age": 30},
            "ctx1",
            generate_system_metadata(),
        )
        assert entity.scope_id == "S1"
        assert entity.properties == {"name": "Alice", "age": 30}

    @pytest.mark.asyncio
    async def test_embeds_entity_text_once(self, resolver, embeddings):
        meta = generate_system_metadata()
        await resolver.resolve_entity("S1", "Alice", "Person", {"name": "Alice"}, "c1", meta)
        await resolver.resolve_entity("S1", "Alice", "Person", {"name": "Alice"}, "c2", meta)
        assert embeddings.calls == ["Person Alice"]
