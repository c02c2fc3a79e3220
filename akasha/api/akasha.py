"""
Akasha - Primary Entry Point

The Akasha class wires a graph store, an LLM provider and an embedding
provider together and exposes the caller-facing operations:

    learn()        Text -> document, entities, relationships
    ask()          Question -> subgraph context + answer
    learn_batch()  Sequential learn() with per-item isolation

plus scoped CRUD, statistics and a health check. Everything is created
lazily: constructing an Akasha never touches the network or the disk, and
providers are only built when an operation needs them.

Example:
    >>> config = AkashaConfig(scope_id="tenant-1", scope_name="Tenant One")
    >>> async with Akasha(config) as akasha:
    ...     await akasha.learn("Alice works for Acme Corp.")
    ...     result = await akasha.ask("Who works for Acme Corp?")
    ...     print(result.answer)

    # Or with sync API
    >>> akasha = Akasha(config)
    >>> akasha.learn_sync("Alice works for Acme Corp.")
    >>> result = akasha.ask_sync("Who works for Acme Corp?")
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from akasha.errors import ConfigurationError
from akasha.events.emitter import EventEmitter
from akasha.events.types import AkashaEvent, EventType
from akasha.types.metadata import isoformat
from akasha.types.options import BatchLearnItem, BatchLearnOptions, LearnOptions, QueryOptions
from akasha.types.results import HealthStatus, ProviderHealth, StoreHealth

if TYPE_CHECKING:
    from akasha.config.settings import AkashaConfig
    from akasha.ingestion.batch import BatchCoordinator
    from akasha.ingestion.pipeline import IngestionPipeline
    from akasha.providers.base import EmbeddingProvider, LLMProvider
    from akasha.query.pipeline import RetrievalPipeline
    from akasha.storage.base import GraphStore
    from akasha.types.extraction import ExtractionPromptTemplate
    from akasha.types.graph import Document, Entity, Relationship, Scope
    from akasha.types.results import (
        AskResult,
        BatchLearnResult,
        ConfigValidationResult,
        DeleteResult,
        ExtractResult,
    )

logger = logging.getLogger(__name__)


def _reject_mixed_options(options: object, kwargs: dict[str, Any]) -> None:
    if options is not None and kwargs:
        raise TypeError(
            f"Pass either an options object or keyword options, not both "
            f"(got {', '.join(sorted(kwargs))})"
        )


class Akasha:
    """
    A scoped GraphRAG knowledge graph.

    Args:
        config: Optional configuration. Uses defaults (and env) if not provided.
        store: Graph store to use instead of the configured backend
        llm: LLM provider to use instead of the configured one
        embeddings: Embedding provider to use instead of the configured one
        events: Event emitter to publish to (a private one by default)
        template: Extraction prompt template for learn()
    """

    def __init__(
        self,
        config: "AkashaConfig | None" = None,
        *,
        store: "GraphStore | None" = None,
        llm: "LLMProvider | None" = None,
        embeddings: "EmbeddingProvider | None" = None,
        events: EventEmitter | None = None,
        template: "ExtractionPromptTemplate | None" = None,
    ) -> None:
        # Lazy import to avoid circular imports
        if config is None:
            from akasha.config import AkashaConfig
            config = AkashaConfig()
        self._config = config

        self._store = store
        self._llm = llm
        self._embeddings = embeddings
        self._events = events or EventEmitter()
        self._template = template

        self._ingestion: "IngestionPipeline | None" = None
        self._retrieval: "RetrievalPipeline | None" = None
        self._batch: "BatchCoordinator | None" = None
        self._initialized = False

    async def _ensure_initialized(self) -> None:
        """Create and open the store on first use."""
        if self._initialized:
            return
        if self._store is None:
            from akasha.storage import create_store
            self._store = create_store(self._config)
        await self._store.initialize()
        self._initialized = True

    def _require_scope(self) -> "Scope":
        scope = self.scope
        if scope is None:
            raise ConfigurationError(
                "Scope is required for learning. Configure scope_id and scope_name."
            )
        return scope

    def _get_llm(self) -> "LLMProvider":
        if self._llm is None:
            from akasha.providers.factory import create_llm_provider
            self._llm = create_llm_provider(self._config)
        return self._llm

    def _get_embeddings(self) -> "EmbeddingProvider":
        if self._embeddings is None:
            from akasha.providers.factory import create_embedding_provider
            self._embeddings = create_embedding_provider(self._config)
        return self._embeddings

    async def _get_ingestion(self) -> "IngestionPipeline":
        await self._ensure_initialized()
        if self._ingestion is None:
            from akasha.ingestion.pipeline import IngestionPipeline

            assert self._store is not None
            self._ingestion = IngestionPipeline(
                self._store,
                self._get_llm(),
                self._get_embeddings(),
                scope=self.scope,
                events=self._events,
                template=self._template,
                temperature=self._config.extraction_temperature,
            )
        return self._ingestion

    async def _get_retrieval(self) -> "RetrievalPipeline":
        await self._ensure_initialized()
        if self._retrieval is None:
            from akasha.query.pipeline import RetrievalPipeline

            assert self._store is not None
            self._retrieval = RetrievalPipeline(
                self._store,
                self._get_llm(),
                self._get_embeddings(),
                scope=self.scope,
                events=self._events,
                seed_limit=self._config.query_seed_limit,
            )
        return self._retrieval

    async def _get_store(self) -> "GraphStore":
        await self._ensure_initialized()
        assert self._store is not None
        return self._store

    def _emit(self, event_type: EventType, **payload: Any) -> None:
        self._events.emit(AkashaEvent(type=event_type, scope_id=self.scope_id, **payload))

    # === Lifecycle ===

    async def __aenter__(self) -> "Akasha":
        await self._ensure_initialized()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the store and drop the pipelines."""
        if self._store is not None and self._initialized:
            await self._store.close()
        self._ingestion = None
        self._retrieval = None
        self._batch = None
        self._initialized = False

    # === Properties ===

    @property
    def config(self) -> "AkashaConfig":
        return self._config

    @property
    def scope(self) -> "Scope | None":
        """Configured scope; learning requires one."""
        return self._config.scope

    @property
    def scope_id(self) -> str | None:
        scope = self.scope
        return scope.id if scope else None

    @property
    def events(self) -> EventEmitter:
        """Emitter receiving mutation and lifecycle events."""
        return self._events

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def validate_config(self) -> "ConfigValidationResult":
        """Validate the configuration without contacting any service."""
        return self._config.validate()

    # === Learning ===

    async def learn(
        self, text: str, options: LearnOptions | None = None, **kwargs: Any
    ) -> "ExtractResult":
        """
        Extract entities and relationships from ``text`` and store them.

        Args:
            text: Source text
            options: LearnOptions (or pass its fields as keyword arguments)

        Returns:
            ExtractResult

        Raises:
            ConfigurationError: No scope configured, or providers unavailable
            ExtractionError: The LLM payload could not be parsed
            TypeError: Both ``options`` and keyword options were given
        """
        _reject_mixed_options(options, kwargs)
        if options is None:
            options = LearnOptions(**kwargs)
        self._require_scope()
        ingestion = await self._get_ingestion()
        return await ingestion.learn(text, options)

    async def learn_batch(
        self,
        items: Sequence[str | BatchLearnItem],
        options: BatchLearnOptions | None = None,
        **kwargs: Any,
    ) -> "BatchLearnResult":
        """
        Learn several texts sequentially; failing items are recorded, not raised.

        Raises:
            ConfigurationError: No scope configured
        """
        _reject_mixed_options(options, kwargs)
        if options is None:
            options = BatchLearnOptions(**kwargs)
        self._require_scope()
        ingestion = await self._get_ingestion()
        if self._batch is None:
            from akasha.ingestion.batch import BatchCoordinator

            self._batch = BatchCoordinator(
                ingestion,
                events=self._events,
                preview_chars=self._config.batch_preview_chars,
            )
        return await self._batch.learn_batch(items, options)

    # === Querying ===

    async def ask(
        self, query: str, options: QueryOptions | None = None, **kwargs: Any
    ) -> "AskResult":
        """
        Answer a question from the knowledge graph.

        Unset options fall back to the configured query defaults.

        Args:
            query: Natural-language question
            options: QueryOptions (or pass its fields as keyword arguments)

        Returns:
            AskResult
        """
        _reject_mixed_options(options, kwargs)
        if options is None:
            defaults = {
                "limit": self._config.query_limit,
                "max_depth": self._config.query_max_depth,
                "similarity_threshold": self._config.query_similarity_threshold,
            }
            options = QueryOptions(**{**defaults, **kwargs})
        retrieval = await self._get_retrieval()
        return await retrieval.ask(query, options)

    # === Sync Wrappers ===

    def learn_sync(self, text: str, **kwargs: Any) -> "ExtractResult":
        """Sync wrapper for learn."""
        return asyncio.run(self.learn(text, **kwargs))

    def learn_batch_sync(
        self, items: Sequence[str | BatchLearnItem], **kwargs: Any
    ) -> "BatchLearnResult":
        """Sync wrapper for learn_batch."""
        return asyncio.run(self.learn_batch(items, **kwargs))

    def ask_sync(self, query: str, **kwargs: Any) -> "AskResult":
        """Sync wrapper for ask."""
        return asyncio.run(self.ask(query, **kwargs))

    def stats_sync(self) -> dict[str, int]:
        """Sync wrapper for stats."""
        return asyncio.run(self.stats())

    # === Data Access (scoped to the configured scope) ===

    async def get_document(self, document_id: str) -> "Document | None":
        store = await self._get_store()
        return await store.find_document_by_id(document_id, self.scope_id)

    async def get_entity(self, entity_id: str) -> "Entity | None":
        store = await self._get_store()
        return await store.find_entity_by_id(entity_id, self.scope_id)

    async def get_relationship(self, relationship_id: str) -> "Relationship | None":
        store = await self._get_store()
        return await store.find_relationship_by_id(relationship_id, self.scope_id)

    async def find_document_by_text(self, text: str) -> "Document | None":
        """Exact-text lookup; requires a configured scope."""
        store = await self._get_store()
        if self.scope_id is None:
            return None
        return await store.find_document_by_text(text, self.scope_id)

    async def find_entity_by_name(self, name: str) -> "Entity | None":
        """Exact-name lookup; requires a configured scope."""
        store = await self._get_store()
        if self.scope_id is None:
            return None
        return await store.find_entity_by_name(name, self.scope_id)

    async def list_documents(self, *, limit: int = 100, offset: int = 0) -> list["Document"]:
        store = await self._get_store()
        return await store.list_documents(limit=limit, offset=offset, scope_id=self.scope_id)

    async def list_entities(
        self, *, label: str | None = None, limit: int = 100, offset: int = 0
    ) -> list["Entity"]:
        store = await self._get_store()
        return await store.list_entities(
            label=label, limit=limit, offset=offset, scope_id=self.scope_id
        )

    async def list_relationships(
        self,
        *,
        type: str | None = None,
        from_id: str | None = None,
        to_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list["Relationship"]:
        store = await self._get_store()
        return await store.list_relationships(
            type=type,
            from_id=from_id,
            to_id=to_id,
            limit=limit,
            offset=offset,
            scope_id=self.scope_id,
        )

    # === Updates (reserved keys are filtered out) ===

    async def update_document(
        self, document_id: str, metadata: Mapping[str, Any]
    ) -> "Document | None":
        store = await self._get_store()
        document = await store.update_document(document_id, metadata, self.scope_id)
        if document is not None:
            self._emit(EventType.DOCUMENT_UPDATED, document=document)
        return document

    async def update_entity(
        self, entity_id: str, properties: Mapping[str, Any]
    ) -> "Entity | None":
        store = await self._get_store()
        entity = await store.update_entity(entity_id, properties, self.scope_id)
        if entity is not None:
            self._emit(EventType.ENTITY_UPDATED, entity=entity)
        return entity

    async def update_relationship(
        self, relationship_id: str, properties: Mapping[str, Any]
    ) -> "Relationship | None":
        store = await self._get_store()
        relationship = await store.update_relationship(
            relationship_id, properties, self.scope_id
        )
        if relationship is not None:
            self._emit(EventType.RELATIONSHIP_UPDATED, relationship=relationship)
        return relationship

    # === Deletes ===

    async def delete_document(self, document_id: str) -> "DeleteResult":
        """Delete a document and its entity links (entities are kept)."""
        store = await self._get_store()
        document = await store.find_document_by_id(document_id, self.scope_id)
        result = await store.delete_document(document_id, self.scope_id)
        if result.deleted:
            self._emit(EventType.DOCUMENT_DELETED, document=document)
        return result

    async def delete_entity(self, entity_id: str) -> "DeleteResult":
        """Delete an entity together with its relationships and links."""
        store = await self._get_store()
        entity = await store.find_entity_by_id(entity_id, self.scope_id)
        result = await store.delete_entity(entity_id, self.scope_id)
        if result.deleted:
            self._emit(EventType.ENTITY_DELETED, entity=entity)
        return result

    async def delete_relationship(self, relationship_id: str) -> "DeleteResult":
        store = await self._get_store()
        relationship = await store.find_relationship_by_id(relationship_id, self.scope_id)
        result = await store.delete_relationship(relationship_id, self.scope_id)
        if result.deleted:
            self._emit(EventType.RELATIONSHIP_DELETED, relationship=relationship)
        return result

    # === Statistics ===

    async def stats(self) -> dict[str, int]:
        """Record counts in the configured scope."""
        store = await self._get_store()
        return {
            "documents": await store.count_documents(self.scope_id),
            "entities": await store.count_entities(self.scope_id),
            "relationships": await store.count_relationships(self.scope_id),
        }

    # === Health ===

    async def health_check(self) -> HealthStatus:
        """
        Check the store and the embedding provider. Never raises.

        Returns:
            HealthStatus: healthy (both up), degraded (one up) or unhealthy
        """
        store_health = StoreHealth()
        try:
            store = await self._get_store()
            await store.ping()
            store_health.connected = True
        except Exception as e:
            logger.warning(f"Store health check failed: {e}")
            store_health.error = str(e) or type(e).__name__

        provider_health = ProviderHealth()
        try:
            await self._get_embeddings().embed_single("health check")
            provider_health.available = True
        except Exception as e:
            logger.warning(f"Provider health check failed: {e}")
            provider_health.error = str(e) or type(e).__name__

        up = [store_health.connected, provider_health.available]
        status = "healthy" if all(up) else "degraded" if any(up) else "unhealthy"
        return HealthStatus(
            status=status,
            store=store_health,
            providers=provider_health,
            timestamp=isoformat(datetime.now(timezone.utc)),
        )

    def __repr__(self) -> str:
        return f"Akasha(scope={self.scope_id!r}, initialized={self._initialized})"
