"""
Ingestion Pipeline ("learn")

Turns one text into graph facts. Each call walks the same fixed sequence:

    1. Require scope: no configured scope is a ConfigurationError
    2. Resolve document: exact-text create-or-reuse
    3. Extract: one LLM call producing entities and relationships
    4. Resolve entities: exact-name create-or-reuse, per extracted entity
    5. Create relationships: endpoints mapped from names to entity ids
    6. Link entities to the document (CONTAINS_ENTITY)
    7. Respond: context, summary and creation counters

All facts created by a call share one SystemMetadata stamp. Failures
propagate unchanged; records written before the failure are kept.

Example:
    >>> pipeline = IngestionPipeline(store, llm, embeddings, scope=scope)
    >>> result = await pipeline.learn("Alice works for Acme Corp.")
    >>> result.created.entities
    2
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from akasha.errors import ConfigurationError
from akasha.events.types import AkashaEvent, EventType
from akasha.ingestion.extraction.extractor import DEFAULT_EXTRACTION_TEMPERATURE, Extractor
from akasha.ingestion.metadata import generate_system_metadata
from akasha.ingestion.resolution.identity import IdentityResolver, new_id
from akasha.types.extraction import ExtractedRelationship, ExtractionPromptTemplate
from akasha.types.graph import Context, Entity, Relationship, Scope
from akasha.types.metadata import SystemMetadata
from akasha.types.options import LearnOptions
from akasha.types.results import CreatedCounts, ExtractResult
from akasha.utils.properties import sanitize_properties, scrub_embedding, scrub_embeddings

if TYPE_CHECKING:
    from akasha.events.emitter import EventEmitter
    from akasha.providers.base import EmbeddingProvider, LLMProvider
    from akasha.storage.base import GraphStore

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_NAME = "Untitled Context"


def build_summary(entities: list[Entity], relationships: list[Relationship]) -> str:
    """Human-readable account of what one learn() call produced."""
    names = {entity.id: entity.display_name for entity in entities}
    entity_lines = ", ".join(f"{entity.label}: {entity.display_name}" for entity in entities)
    relationship_lines = ", ".join(
        f"{names.get(rel.from_id, rel.from_id)} --[{rel.type}]--> "
        f"{names.get(rel.to_id, rel.to_id)}"
        for rel in relationships
    )
    return (
        f"Extracted and created {len(entities)} entities and "
        f"{len(relationships)} relationships from text.\n\n"
        f"Entities: {entity_lines}\n\n"
        f"Relationships: {relationship_lines}"
    )


class IngestionPipeline:
    """
    learn() orchestration.

    Args:
        store: Graph store
        llm: LLM provider used for extraction
        embeddings: Embedding provider used for new documents/entities
        scope: Scope stamped on every fact (required to learn)
        events: Optional emitter notified after each mutation
        template: Optional extraction prompt template
        temperature: Extraction sampling temperature
    """

    def __init__(
        self,
        store: "GraphStore",
        llm: "LLMProvider",
        embeddings: "EmbeddingProvider",
        scope: Scope | None = None,
        events: "EventEmitter | None" = None,
        template: ExtractionPromptTemplate | None = None,
        temperature: float = DEFAULT_EXTRACTION_TEMPERATURE,
    ) -> None:
        self.store = store
        self.scope = scope
        self.events = events
        self.resolver = IdentityResolver(store, embeddings)
        self.extractor = Extractor(llm, template=template, temperature=temperature)

    def require_scope(self) -> Scope:
        if self.scope is None:
            raise ConfigurationError(
                "Scope is required for learning. Configure scope_id and scope_name."
            )
        return self.scope

    def _emit(self, event_type: EventType, **payload) -> None:
        if self.events is not None:
            scope_id = self.scope.id if self.scope else None
            self.events.emit(AkashaEvent(type=event_type, scope_id=scope_id, **payload))

    async def learn(self, text: str, options: LearnOptions | None = None) -> ExtractResult:
        """
        Learn from text.

        Args:
            text: Source text
            options: Context id/name, validity window, embedding visibility

        Returns:
            ExtractResult with the context, document, resolved entities,
            created relationships and creation counters

        Raises:
            ConfigurationError: No scope configured
            ExtractionError: LLM payload could not be parsed
        """
        scope = self.require_scope()
        options = options or LearnOptions()
        self._emit(EventType.LEARN_STARTED, text=text)

        try:
            result = await self._learn(scope, text, options)
        except Exception as e:
            self._emit(EventType.LEARN_FAILED, text=text, error=str(e))
            raise

        self._emit(EventType.LEARN_COMPLETED, text=text, result=result)
        return result

    async def _learn(self, scope: Scope, text: str, options: LearnOptions) -> ExtractResult:
        metadata = generate_system_metadata(
            valid_from=options.valid_from, valid_to=options.valid_to
        )
        context_id = options.context_id or new_id()
        created = CreatedCounts()

        # Document
        document, document_created = await self.resolver.resolve_document(
            scope.id, text, context_id, metadata
        )
        if document_created:
            created.document = 1
            self._emit(EventType.DOCUMENT_CREATED, document=scrub_embedding(document))

        # Extraction
        self._emit(EventType.EXTRACTION_STARTED, text=text)
        extraction = await self.extractor.extract(text)
        self._emit(EventType.EXTRACTION_COMPLETED, text=text)

        # Entities (name -> resolved entity, first occurrence wins)
        by_name: dict[str, Entity] = {}
        for extracted in extraction.entities:
            if extracted.name in by_name:
                continue
            entity, entity_created = await self.resolver.resolve_entity(
                scope.id,
                extracted.name,
                extracted.label,
                extracted.properties,
                context_id,
                metadata,
            )
            by_name[extracted.name] = entity
            if entity_created:
                created.entities += 1
                self._emit(EventType.ENTITY_CREATED, entity=scrub_embedding(entity))

        # Relationships
        relationships = self._build_relationships(
            scope.id, extraction.relationships, by_name, metadata
        )
        if relationships:
            await self.store.create_relationships(relationships)
            created.relationships = len(relationships)
            for relationship in relationships:
                self._emit(EventType.RELATIONSHIP_CREATED, relationship=relationship)

        # Document links
        entities = list(by_name.values())
        for entity in entities:
            await self.store.link_entity_to_document(document.id, entity.id, scope.id)

        context = Context(
            id=context_id,
            scope_id=scope.id,
            name=options.context_name or DEFAULT_CONTEXT_NAME,
            source=text,
        )

        logger.info(
            f"Learned text in scope {scope.id}: document "
            f"{'created' if document_created else 'reused'}, "
            f"{created.entities}/{len(entities)} entities created, "
            f"{created.relationships} relationships created"
        )

        if not options.include_embeddings:
            document = scrub_embedding(document)
            entities = scrub_embeddings(entities)

        return ExtractResult(
            context=context,
            document=document,
            entities=entities,
            relationships=relationships,
            summary=build_summary(entities, relationships),
            created=created,
        )

    def _build_relationships(
        self,
        scope_id: str,
        extracted: list[ExtractedRelationship],
        by_name: dict[str, Entity],
        metadata: SystemMetadata,
    ) -> list[Relationship]:
        """Map name endpoints to entity ids, dropping unknown and degenerate edges."""
        relationships: list[Relationship] = []
        seen: set[tuple[str, str, str]] = set()

        for rel in extracted:
            source = by_name.get(rel.from_name)
            target = by_name.get(rel.to_name)
            if source is None or target is None:
                logger.warning(
                    f"Skipping relationship with unknown entity: "
                    f"{rel.from_name} --[{rel.type}]--> {rel.to_name}"
                )
                continue
            # Distinct names can still resolve to one stored entity
            if source.id == target.id:
                logger.warning(
                    f"Skipping self-referential relationship: "
                    f"{rel.from_name} --[{rel.type}]--> {rel.to_name}"
                )
                continue
            key = (source.id, target.id, rel.type)
            if key in seen:
                continue
            seen.add(key)

            relationships.append(
                Relationship(
                    id=new_id(),
                    scope_id=scope_id,
                    type=rel.type,
                    from_id=source.id,
                    to_id=target.id,
                    properties=sanitize_properties(rel.properties),
                    recorded_at=metadata.recorded_at,
                    valid_from=metadata.valid_from,
                    valid_to=metadata.valid_to,
                )
            )

        return relationships
