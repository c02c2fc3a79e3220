"""
Shared test fixtures.

FakeEmbeddings and FakeLLM are deterministic stand-ins for the real
providers, so pipelines run end-to-end against MemoryGraphStore without
network access.
"""

from __future__ import annotations

import json
import math
import re
import zlib
from collections.abc import Mapping, Sequence

import pytest

from akasha.events.emitter import EventEmitter
from akasha.providers.base import EmbeddingProvider, LLMProvider
from akasha.storage.memory import MemoryGraphStore
from akasha.types.graph import ContextIds, Document, Entity, Relationship, Scope

EXTRACTION_PREFIX = "Extract all entities and relationships from the following text:\n\n"


class FakeEmbeddings(EmbeddingProvider):
    """
    Bag-of-words hashing embeddings.

    ``vectors`` pins exact vectors for given texts; every other text is
    hashed token by token into ``dims`` buckets and L2-normalized.
    """

    provider_name = "fake"

    def __init__(
        self,
        vectors: Mapping[str, list[float]] | None = None,
        dims: int = 64,
        fail: bool = False,
    ) -> None:
        self.vectors = dict(vectors or {})
        self.dims = dims
        self.fail = fail
        self.calls: list[str] = []

    def vector(self, text: str) -> list[float]:
        if text in self.vectors:
            return list(self.vectors[text])
        buckets = [0.0] * self.dims
        for token in re.findall(r"\w+", text.lower()):
            buckets[zlib.crc32(token.encode()) % self.dims] += 1.0
        norm = math.sqrt(sum(v * v for v in buckets)) or 1.0
        return [v / norm for v in buckets]

    async def embed(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed_single(text) for text in texts]

    async def embed_single(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail:
            raise ConnectionError("embedding service unavailable")
        return self.vector(text)

    @property
    def dimensions(self) -> int:
        return self.dims

    @property
    def model_name(self) -> str:
        return "fake-embeddings"


def extraction_payload(
    entities: Sequence[tuple[str, str]] = (),
    relationships: Sequence[tuple[str, str, str]] = (),
) -> str:
    """JSON extraction response from (label, name) and (from, to, type) tuples."""
    return json.dumps(
        {
            "entities": [
                {"label": label, "properties": {"name": name}} for label, name in entities
            ],
            "relationships": [
                {"from": source, "to": target, "type": rel_type, "properties": {}}
                for source, target, rel_type in relationships
            ],
        }
    )


class FakeLLM(LLMProvider):
    """
    Scripted LLM.

    Extraction calls answer from ``extractions`` (keyed by the source text,
    default: nothing extracted); texts in ``failures`` raise. Every other
    call returns ``answer``.
    """

    provider_name = "fake"

    def __init__(
        self,
        extractions: Mapping[str, str] | None = None,
        answer: str = "Acme Corp employs Alice.",
        failures: Sequence[str] = (),
    ) -> None:
        self.extractions = dict(extractions or {})
        self.answer = answer
        self.failures = set(failures)
        self.calls: list[dict] = []

    async def generate(
        self,
        prompt: str,
        *,
        context: str = "",
        system: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 4096,
    ) -> str:
        self.calls.append(
            {"prompt": prompt, "context": context, "system": system, "temperature": temperature}
        )
        if prompt.startswith(EXTRACTION_PREFIX):
            text = prompt[len(EXTRACTION_PREFIX):]
            if text in self.failures:
                raise RuntimeError(f"LLM failed on: {text}")
            return self.extractions.get(text, extraction_payload())
        return self.answer

    @property
    def extraction_calls(self) -> list[dict]:
        return [call for call in self.calls if call["prompt"].startswith(EXTRACTION_PREFIX)]

    @property
    def answer_calls(self) -> list[dict]:
        return [call for call in self.calls if not call["prompt"].startswith(EXTRACTION_PREFIX)]

    @property
    def model_name(self) -> str:
        return "fake-llm"


ALICE_ACME = "Alice works for Acme Corp."
ALICE_BOB = "Alice knows Bob."

DEFAULT_EXTRACTIONS = {
    ALICE_ACME: extraction_payload(
        [("Person", "Alice"), ("Company", "Acme Corp")],
        [("Alice", "Acme Corp", "WORKS_FOR")],
    ),
    ALICE_BOB: extraction_payload(
        [("Person", "Alice"), ("Person", "Bob")],
        [("Alice", "Bob", "KNOWS")],
    ),
}


# -----------------------------------------------------------------------------
# Record builders
# -----------------------------------------------------------------------------

RECORDED = "2024-01-01T00:00:00Z"


def make_document(
    doc_id: str,
    text: str,
    scope_id: str = "S1",
    embedding: list[float] | None = None,
    context_ids: Sequence[str] = ("ctx-1",),
    **fields,
) -> Document:
    fields.setdefault("recorded_at", RECORDED)
    fields.setdefault("valid_from", fields["recorded_at"])
    return Document(
        id=doc_id,
        scope_id=scope_id,
        text=text,
        embedding=embedding,
        context_ids=ContextIds(context_ids),
        **fields,
    )


def make_entity(
    entity_id: str,
    name: str,
    label: str = "Person",
    scope_id: str = "S1",
    embedding: list[float] | None = None,
    context_ids: Sequence[str] = ("ctx-1",),
    **fields,
) -> Entity:
    fields.setdefault("recorded_at", RECORDED)
    fields.setdefault("valid_from", fields["recorded_at"])
    properties = {"name": name, **fields.pop("properties", {})}
    return Entity(
        id=entity_id,
        scope_id=scope_id,
        label=label,
        properties=properties,
        embedding=embedding,
        context_ids=ContextIds(context_ids),
        **fields,
    )


def make_relationship(
    rel_id: str,
    from_id: str,
    to_id: str,
    type: str = "KNOWS",
    scope_id: str = "S1",
    **fields,
) -> Relationship:
    fields.setdefault("recorded_at", RECORDED)
    fields.setdefault("valid_from", fields["recorded_at"])
    return Relationship(
        id=rel_id,
        scope_id=scope_id,
        type=type,
        from_id=from_id,
        to_id=to_id,
        **fields,
    )


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def store() -> MemoryGraphStore:
    return MemoryGraphStore()


@pytest.fixture
def embeddings() -> FakeEmbeddings:
    return FakeEmbeddings()


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM(DEFAULT_EXTRACTIONS)


@pytest.fixture
def scope() -> Scope:
    return Scope(id="S1", type="tenant", name="Scope One")


@pytest.fixture
def events() -> EventEmitter:
    return EventEmitter()
