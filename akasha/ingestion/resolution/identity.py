"""
Identity Resolver

Decides whether an incoming document or entity is new or a duplicate of an
existing record, and accumulates context membership on reuse.

Identity keys are exact matches, never fuzzy:
    Document: (scope_id, text)
    Entity:   (scope_id, name)   the label is not part of the key

On creation the identifying text is embedded exactly once. Reused records
are never re-embedded; they only gain the new context id (when missing).

Concurrent resolvers on one store are not serialized: two simultaneous
first sightings of the same text can both create a record.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from typing import Any

from akasha.providers.base import EmbeddingProvider
from akasha.storage.base import GraphStore
from akasha.types.graph import ContextIds, Document, Entity
from akasha.types.metadata import SystemMetadata
from akasha.utils.properties import entity_embedding_text, sanitize_properties

logger = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


class IdentityResolver:
    """
    Create-or-reuse resolution for documents and entities.

    Args:
        store: Graph store holding existing records
        embeddings: Embedding provider (called only when creating)
        entity_text: Builds the text embedded for a new entity
    """

    def __init__(
        self,
        store: GraphStore,
        embeddings: EmbeddingProvider,
        entity_text: Callable[[str, Mapping[str, Any]], str] = entity_embedding_text,
    ) -> None:
        self.store = store
        self.embeddings = embeddings
        self.entity_text = entity_text

    async def resolve_document(
        self,
        scope_id: str,
        text: str,
        context_id: str,
        metadata: SystemMetadata,
    ) -> tuple[Document, bool]:
        """
        Find the document with this exact text in the scope, or create it.

        Returns:
            (document, created)
        """
        existing = await self.store.find_document_by_text(text, scope_id)
        if existing is not None:
            if context_id in existing.context_ids:
                return existing, False
            context_ids = existing.context_ids.add(context_id)
            await self.store.update_document_context_ids(existing.id, context_ids)
            return existing.model_copy(update={"context_ids": context_ids}), False

        embedding = await self.embeddings.embed_single(text)
        document = Document(
            id=new_id(),
            scope_id=scope_id,
            text=text,
            context_ids=ContextIds([context_id]),
            embedding=embedding,
            recorded_at=metadata.recorded_at,
            valid_from=metadata.valid_from,
            valid_to=metadata.valid_to,
        )
        await self.store.create_document(document)
        return document, True

    async def resolve_entity(
        self,
        scope_id: str,
        name: str,
        label: str,
        properties: Mapping[str, Any],
        context_id: str,
        metadata: SystemMetadata,
    ) -> tuple[Entity, bool]:
        """
        Find the entity with this name in the scope, or create it.

        On reuse the stored label and properties are kept as they are.

        Returns:
            (entity, created)
        """
        existing = await self.store.find_entity_by_name(name, scope_id)
        if existing is not None:
            if existing.label != label:
                logger.debug(
                    f"Entity '{name}' reused across labels ({existing.label} vs {label})"
                )
            if context_id in existing.context_ids:
                return existing, False
            context_ids = existing.context_ids.add(context_id)
            await self.store.update_entity_context_ids(existing.id, context_ids)
            return existing.model_copy(update={"context_ids": context_ids}), False

        clean = sanitize_properties(properties)
        embedding = await self.embeddings.embed_single(self.entity_text(label, clean))
        entity = Entity(
            id=new_id(),
            scope_id=scope_id,
            label=label,
            properties=clean,
            context_ids=ContextIds([context_id]),
            embedding=embedding,
            recorded_at=metadata.recorded_at,
            valid_from=metadata.valid_from,
            valid_to=metadata.valid_to,
        )
        await self.store.create_entities([entity])
        return entity, True
