"""
In-Memory Graph Store

Process-local backend built on dicts. Nearest-neighbour search is an exact
cosine scan over all stored vectors (scipy ``cdist``), which is plenty for
tests, notebooks and small graphs.

Example:
    >>> async with MemoryGraphStore() as store:
    ...     await store.create_document(document)
    ...     hits = await store.find_documents_by_vector(vector, limit=5)
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from typing import TypeVar

import numpy as np
from scipy.spatial.distance import cdist

from akasha.storage.base import GraphStore
from akasha.types.graph import ContextIds, Document, Entity, Relationship
from akasha.types.results import DeleteResult

R = TypeVar("R", Document, Entity, Relationship)


def _in_scope(record: Document | Entity | Relationship, scope_id: str | None) -> bool:
    return scope_id is None or record.scope_id == scope_id


def _page(records: Iterable[R], limit: int, offset: int) -> list[R]:
    return [record.model_copy(deep=True) for record in list(records)[offset : offset + limit]]


def cosine_ranking(
    query: Sequence[float],
    vectors: list[Sequence[float]],
    k: int,
) -> list[tuple[int, float]]:
    """
    Rank ``vectors`` by cosine similarity to ``query``.

    Returns:
        ``(index, similarity)`` pairs for the top ``k``, best first.
        Zero vectors (undefined similarity) are skipped.
    """
    if not vectors or k < 1:
        return []
    matrix = np.asarray(vectors, dtype=np.float64)
    distances = cdist(np.asarray([query], dtype=np.float64), matrix, metric="cosine")[0]
    similarities = 1.0 - distances
    order = np.argsort(-similarities, kind="stable")
    ranked = [(int(i), float(similarities[i])) for i in order if not np.isnan(similarities[i])]
    return ranked[:k]


class MemoryGraphStore(GraphStore):
    """
    Dict-backed graph store.

    Insertion order of the dicts is creation order, which ``list_*`` honours.
    A single asyncio lock serializes mutations within one event loop.
    """

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self._entities: dict[str, Entity] = {}
        self._relationships: dict[str, Relationship] = {}
        # document_id -> entity ids (insertion-ordered)
        self._document_entities: dict[str, dict[str, None]] = {}
        self._lock = asyncio.Lock()
        self._closed = False

    async def initialize(self) -> None:
        self._closed = False

    async def close(self) -> None:
        self._closed = True

    async def ping(self) -> None:
        if self._closed:
            raise RuntimeError("MemoryGraphStore is closed")

    # -------------------------------------------------------------------------
    # Identity Lookups
    # -------------------------------------------------------------------------

    async def find_document_by_text(self, text: str, scope_id: str) -> Document | None:
        for document in self._documents.values():
            if document.scope_id == scope_id and document.text == text:
                return document.model_copy(deep=True)
        return None

    async def find_entity_by_name(self, name: str, scope_id: str) -> Entity | None:
        for entity in self._entities.values():
            if entity.scope_id == scope_id and entity.name == name:
                return entity.model_copy(deep=True)
        return None

    async def find_document_by_id(
        self, document_id: str, scope_id: str | None = None
    ) -> Document | None:
        document = self._documents.get(document_id)
        if document is None or not _in_scope(document, scope_id):
            return None
        return document.model_copy(deep=True)

    async def find_entity_by_id(
        self, entity_id: str, scope_id: str | None = None
    ) -> Entity | None:
        entity = self._entities.get(entity_id)
        if entity is None or not _in_scope(entity, scope_id):
            return None
        return entity.model_copy(deep=True)

    async def find_relationship_by_id(
        self, relationship_id: str, scope_id: str | None = None
    ) -> Relationship | None:
        relationship = self._relationships.get(relationship_id)
        if relationship is None or not _in_scope(relationship, scope_id):
            return None
        return relationship.model_copy(deep=True)

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    async def create_document(self, document: Document) -> Document:
        async with self._lock:
            self._documents[document.id] = document.model_copy(
                update={"similarity": None}, deep=True
            )
        return document

    async def create_entities(self, entities: Sequence[Entity]) -> list[Entity]:
        async with self._lock:
            for entity in entities:
                self._entities[entity.id] = entity.model_copy(
                    update={"similarity": None}, deep=True
                )
        return list(entities)

    async def create_relationships(
        self, relationships: Sequence[Relationship]
    ) -> list[Relationship]:
        async with self._lock:
            for relationship in relationships:
                self._relationships[relationship.id] = relationship.model_copy(deep=True)
        return list(relationships)

    async def link_entity_to_document(
        self, document_id: str, entity_id: str, scope_id: str
    ) -> None:
        document = self._documents.get(document_id)
        entity = self._entities.get(entity_id)
        if document is None or document.scope_id != scope_id:
            raise KeyError(f"Document not found in scope {scope_id}: {document_id}")
        if entity is None or entity.scope_id != scope_id:
            raise KeyError(f"Entity not found in scope {scope_id}: {entity_id}")
        async with self._lock:
            self._document_entities.setdefault(document_id, {})[entity_id] = None

    async def update_document_context_ids(
        self, document_id: str, context_ids: ContextIds
    ) -> None:
        async with self._lock:
            document = self._documents[document_id]
            self._documents[document_id] = document.model_copy(
                update={"context_ids": ContextIds(context_ids)}
            )

    async def update_entity_context_ids(
        self, entity_id: str, context_ids: ContextIds
    ) -> None:
        async with self._lock:
            entity = self._entities[entity_id]
            self._entities[entity_id] = entity.model_copy(
                update={"context_ids": ContextIds(context_ids)}
            )

    async def _save_document(self, document: Document) -> None:
        async with self._lock:
            self._documents[document.id] = document.model_copy(
                update={"similarity": None}, deep=True
            )

    async def _save_entity(self, entity: Entity) -> None:
        async with self._lock:
            self._entities[entity.id] = entity.model_copy(
                update={"similarity": None}, deep=True
            )

    async def _save_relationship(self, relationship: Relationship) -> None:
        async with self._lock:
            self._relationships[relationship.id] = relationship.model_copy(deep=True)

    # -------------------------------------------------------------------------
    # Deletes
    # -------------------------------------------------------------------------

    async def delete_document(
        self, document_id: str, scope_id: str | None = None
    ) -> DeleteResult:
        document = self._documents.get(document_id)
        if document is None or not _in_scope(document, scope_id):
            return DeleteResult(deleted=False, message="Document not found")
        async with self._lock:
            links = self._document_entities.pop(document_id, {})
            del self._documents[document_id]
        return DeleteResult(
            deleted=True,
            message="Document deleted",
            related_relationships_deleted=len(links),
        )

    async def delete_entity(
        self, entity_id: str, scope_id: str | None = None
    ) -> DeleteResult:
        entity = self._entities.get(entity_id)
        if entity is None or not _in_scope(entity, scope_id):
            return DeleteResult(deleted=False, message="Entity not found")
        async with self._lock:
            related = [
                rel_id
                for rel_id, rel in self._relationships.items()
                if entity_id in (rel.from_id, rel.to_id)
            ]
            for rel_id in related:
                del self._relationships[rel_id]
            links = 0
            for entity_ids in self._document_entities.values():
                if entity_id in entity_ids:
                    del entity_ids[entity_id]
                    links += 1
            del self._entities[entity_id]
        return DeleteResult(
            deleted=True,
            message="Entity deleted",
            related_relationships_deleted=len(related) + links,
        )

    async def delete_relationship(
        self, relationship_id: str, scope_id: str | None = None
    ) -> DeleteResult:
        relationship = self._relationships.get(relationship_id)
        if relationship is None or not _in_scope(relationship, scope_id):
            return DeleteResult(deleted=False, message="Relationship not found")
        async with self._lock:
            del self._relationships[relationship_id]
        return DeleteResult(deleted=True, message="Relationship deleted")

    # -------------------------------------------------------------------------
    # Vector Search
    # -------------------------------------------------------------------------

    async def _nearest_documents(
        self, embedding: Sequence[float], k: int
    ) -> list[tuple[Document, float]]:
        candidates = [doc for doc in self._documents.values() if doc.embedding]
        ranking = cosine_ranking(embedding, [doc.embedding for doc in candidates], k)
        return [(candidates[i].model_copy(deep=True), score) for i, score in ranking]

    async def _nearest_entities(
        self, embedding: Sequence[float], k: int
    ) -> list[tuple[Entity, float]]:
        candidates = [entity for entity in self._entities.values() if entity.embedding]
        ranking = cosine_ranking(embedding, [entity.embedding for entity in candidates], k)
        return [(candidates[i].model_copy(deep=True), score) for i, score in ranking]

    # -------------------------------------------------------------------------
    # Graph Traversal
    # -------------------------------------------------------------------------

    async def get_entities(
        self, entity_ids: Sequence[str], scope_id: str | None = None
    ) -> list[Entity]:
        entities = []
        for entity_id in dict.fromkeys(entity_ids):
            entity = self._entities.get(entity_id)
            if entity is not None and _in_scope(entity, scope_id):
                entities.append(entity.model_copy(deep=True))
        return entities

    async def get_entities_from_documents(
        self, document_ids: Sequence[str], scope_id: str | None = None
    ) -> list[Entity]:
        entity_ids: dict[str, None] = {}
        for document_id in document_ids:
            document = self._documents.get(document_id)
            if document is None or not _in_scope(document, scope_id):
                continue
            entity_ids.update(self._document_entities.get(document_id, {}))
        return await self.get_entities(list(entity_ids), scope_id)

    async def get_relationships_for_entities(
        self, entity_ids: Sequence[str], scope_id: str | None = None
    ) -> list[Relationship]:
        wanted = set(entity_ids)
        return [
            rel.model_copy(deep=True)
            for rel in self._relationships.values()
            if _in_scope(rel, scope_id) and (rel.from_id in wanted or rel.to_id in wanted)
        ]

    # -------------------------------------------------------------------------
    # Listing and Statistics
    # -------------------------------------------------------------------------

    async def list_documents(
        self, limit: int = 100, offset: int = 0, scope_id: str | None = None
    ) -> list[Document]:
        return _page(
            (doc for doc in self._documents.values() if _in_scope(doc, scope_id)),
            limit,
            offset,
        )

    async def list_entities(
        self,
        label: str | None = None,
        limit: int = 100,
        offset: int = 0,
        scope_id: str | None = None,
    ) -> list[Entity]:
        return _page(
            (
                entity
                for entity in self._entities.values()
                if _in_scope(entity, scope_id) and (label is None or entity.label == label)
            ),
            limit,
            offset,
        )

    async def list_relationships(
        self,
        type: str | None = None,
        from_id: str | None = None,
        to_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
        scope_id: str | None = None,
    ) -> list[Relationship]:
        return _page(
            (
                rel
                for rel in self._relationships.values()
                if _in_scope(rel, scope_id)
                and (type is None or rel.type == type)
                and (from_id is None or rel.from_id == from_id)
                and (to_id is None or rel.to_id == to_id)
            ),
            limit,
            offset,
        )

    async def count_documents(self, scope_id: str | None = None) -> int:
        return sum(1 for doc in self._documents.values() if _in_scope(doc, scope_id))

    async def count_entities(self, scope_id: str | None = None) -> int:
        return sum(1 for entity in self._entities.values() if _in_scope(entity, scope_id))

    async def count_relationships(self, scope_id: str | None = None) -> int:
        return sum(1 for rel in self._relationships.values() if _in_scope(rel, scope_id))
