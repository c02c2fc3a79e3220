"""
Abstract Graph Store Interface

Defines the contract for all graph/vector store backends.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from akasha.query.planner import DEFAULT_SIMILARITY_THRESHOLD, plan_search
from akasha.types.graph import ContextIds, Document, Entity, Relationship
from akasha.types.results import DeleteResult
from akasha.utils.properties import sanitize_properties

# Relationship type linking a document to the entities extracted from it.
CONTAINS_ENTITY = "CONTAINS_ENTITY"


class GraphStore(ABC):
    """
    Abstract interface for graph stores.

    Every lookup honours an optional ``scope_id``: a record that belongs to
    another scope is treated exactly like a missing one.

    Vector search:
        Backends only implement exact nearest-neighbour primitives
        (``_nearest_documents`` / ``_nearest_entities``). Filtering and
        k-expansion live in ``find_documents_by_vector`` /
        ``find_entities_by_vector`` so every backend behaves identically.

    Lifecycle:
        store = DuckDBGraphStore("./graph.duckdb")
        await store.initialize()
        # ... operations ...
        await store.close()

    Or using context manager:
        async with MemoryGraphStore() as store:
            await store.create_document(document)
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize storage (open connections, create tables)."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close storage and release resources."""
        ...

    @abstractmethod
    async def ping(self) -> None:
        """Raise if the store cannot serve requests."""
        ...

    async def __aenter__(self) -> "GraphStore":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Identity Lookups
    # -------------------------------------------------------------------------

    @abstractmethod
    async def find_document_by_text(self, text: str, scope_id: str) -> Document | None:
        """Exact-text document lookup within a scope."""
        ...

    @abstractmethod
    async def find_entity_by_name(self, name: str, scope_id: str) -> Entity | None:
        """Exact-name entity lookup within a scope (label is ignored)."""
        ...

    @abstractmethod
    async def find_document_by_id(
        self, document_id: str, scope_id: str | None = None
    ) -> Document | None: ...

    @abstractmethod
    async def find_entity_by_id(
        self, entity_id: str, scope_id: str | None = None
    ) -> Entity | None: ...

    @abstractmethod
    async def find_relationship_by_id(
        self, relationship_id: str, scope_id: str | None = None
    ) -> Relationship | None: ...

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    @abstractmethod
    async def create_document(self, document: Document) -> Document: ...

    @abstractmethod
    async def create_entities(self, entities: Sequence[Entity]) -> list[Entity]: ...

    @abstractmethod
    async def create_relationships(
        self, relationships: Sequence[Relationship]
    ) -> list[Relationship]: ...

    @abstractmethod
    async def link_entity_to_document(
        self, document_id: str, entity_id: str, scope_id: str
    ) -> None:
        """Create a CONTAINS_ENTITY link; linking twice is a no-op."""
        ...

    @abstractmethod
    async def update_document_context_ids(
        self, document_id: str, context_ids: ContextIds
    ) -> None: ...

    @abstractmethod
    async def update_entity_context_ids(
        self, entity_id: str, context_ids: ContextIds
    ) -> None: ...

    @abstractmethod
    async def _save_document(self, document: Document) -> None:
        """Replace the stored document with the same id."""
        ...

    @abstractmethod
    async def _save_entity(self, entity: Entity) -> None:
        """Replace the stored entity with the same id."""
        ...

    @abstractmethod
    async def _save_relationship(self, relationship: Relationship) -> None:
        """Replace the stored relationship with the same id."""
        ...

    # -------------------------------------------------------------------------
    # Updates (reserved keys can never be overwritten)
    # -------------------------------------------------------------------------

    async def update_document(
        self,
        document_id: str,
        metadata: Mapping[str, Any],
        scope_id: str | None = None,
    ) -> Document | None:
        """Merge ``metadata`` into the document's metadata; text is immutable."""
        document = await self.find_document_by_id(document_id, scope_id)
        if document is None:
            return None
        updated = document.model_copy(
            update={"metadata": {**document.metadata, **sanitize_properties(metadata)}}
        )
        await self._save_document(updated)
        return updated

    async def update_entity(
        self,
        entity_id: str,
        properties: Mapping[str, Any],
        scope_id: str | None = None,
    ) -> Entity | None:
        """Merge ``properties`` into the entity; its label cannot change."""
        entity = await self.find_entity_by_id(entity_id, scope_id)
        if entity is None:
            return None
        updated = entity.model_copy(
            update={"properties": {**entity.properties, **sanitize_properties(properties)}}
        )
        await self._save_entity(updated)
        return updated

    async def update_relationship(
        self,
        relationship_id: str,
        properties: Mapping[str, Any],
        scope_id: str | None = None,
    ) -> Relationship | None:
        """Merge ``properties``; type and endpoints cannot change."""
        relationship = await self.find_relationship_by_id(relationship_id, scope_id)
        if relationship is None:
            return None
        updated = relationship.model_copy(
            update={
                "properties": {
                    **relationship.properties,
                    **sanitize_properties(properties),
                }
            }
        )
        await self._save_relationship(updated)
        return updated

    # -------------------------------------------------------------------------
    # Deletes
    # -------------------------------------------------------------------------

    @abstractmethod
    async def delete_document(
        self, document_id: str, scope_id: str | None = None
    ) -> DeleteResult:
        """Delete a document and its CONTAINS_ENTITY links."""
        ...

    @abstractmethod
    async def delete_entity(
        self, entity_id: str, scope_id: str | None = None
    ) -> DeleteResult:
        """Delete an entity, its relationships and its document links."""
        ...

    @abstractmethod
    async def delete_relationship(
        self, relationship_id: str, scope_id: str | None = None
    ) -> DeleteResult: ...

    # -------------------------------------------------------------------------
    # Vector Search
    # -------------------------------------------------------------------------

    @abstractmethod
    async def _nearest_documents(
        self, embedding: Sequence[float], k: int
    ) -> list[tuple[Document, float]]:
        """Top-k documents by cosine similarity, best first, unfiltered."""
        ...

    @abstractmethod
    async def _nearest_entities(
        self, embedding: Sequence[float], k: int
    ) -> list[tuple[Entity, float]]:
        """Top-k entities by cosine similarity, best first, unfiltered."""
        ...

    async def find_documents_by_vector(
        self,
        embedding: Sequence[float],
        limit: int,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        scope_id: str | None = None,
        contexts: Sequence[str] | None = None,
        valid_at: datetime | str | None = None,
    ) -> list[Document]:
        """
        Similar documents that pass every filter and the threshold.

        Results carry ``similarity`` and are ordered by it, best first.
        """
        plan = plan_search(limit, similarity_threshold, scope_id, contexts, valid_at)
        return plan.apply(await self._nearest_documents(embedding, plan.k))

    async def find_entities_by_vector(
        self,
        embedding: Sequence[float],
        limit: int,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        scope_id: str | None = None,
        contexts: Sequence[str] | None = None,
        valid_at: datetime | str | None = None,
    ) -> list[Entity]:
        """Entity counterpart of find_documents_by_vector()."""
        plan = plan_search(limit, similarity_threshold, scope_id, contexts, valid_at)
        return plan.apply(await self._nearest_entities(embedding, plan.k))

    # -------------------------------------------------------------------------
    # Graph Traversal
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_entities(
        self, entity_ids: Sequence[str], scope_id: str | None = None
    ) -> list[Entity]:
        """Entities by id, in the order of ``entity_ids``; missing ids are skipped."""
        ...

    @abstractmethod
    async def get_entities_from_documents(
        self, document_ids: Sequence[str], scope_id: str | None = None
    ) -> list[Entity]:
        """Entities linked to any of the documents, without duplicates."""
        ...

    @abstractmethod
    async def get_relationships_for_entities(
        self, entity_ids: Sequence[str], scope_id: str | None = None
    ) -> list[Relationship]:
        """Relationships with at least one endpoint in ``entity_ids``."""
        ...

    # -------------------------------------------------------------------------
    # Listing and Statistics
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_documents(
        self, limit: int = 100, offset: int = 0, scope_id: str | None = None
    ) -> list[Document]: ...

    @abstractmethod
    async def list_entities(
        self,
        label: str | None = None,
        limit: int = 100,
        offset: int = 0,
        scope_id: str | None = None,
    ) -> list[Entity]: ...

    @abstractmethod
    async def list_relationships(
        self,
        type: str | None = None,
        from_id: str | None = None,
        to_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
        scope_id: str | None = None,
    ) -> list[Relationship]: ...

    @abstractmethod
    async def count_documents(self, scope_id: str | None = None) -> int: ...

    @abstractmethod
    async def count_entities(self, scope_id: str | None = None) -> int: ...

    @abstractmethod
    async def count_relationships(self, scope_id: str | None = None) -> int: ...
