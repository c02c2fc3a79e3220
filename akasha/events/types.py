"""
Event Types

Notifications emitted by the pipelines after each mutation or lifecycle
step. Subscribers receive an AkashaEvent; only the payload fields relevant
to the event type are set.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from akasha.types.graph import Document, Entity, Relationship
from akasha.types.metadata import isoformat


class EventType(str, Enum):
    # Graph mutations
    ENTITY_CREATED = "entity.created"
    ENTITY_UPDATED = "entity.updated"
    ENTITY_DELETED = "entity.deleted"
    RELATIONSHIP_CREATED = "relationship.created"
    RELATIONSHIP_UPDATED = "relationship.updated"
    RELATIONSHIP_DELETED = "relationship.deleted"
    DOCUMENT_CREATED = "document.created"
    DOCUMENT_UPDATED = "document.updated"
    DOCUMENT_DELETED = "document.deleted"
    # Learning lifecycle
    LEARN_STARTED = "learn.started"
    LEARN_COMPLETED = "learn.completed"
    LEARN_FAILED = "learn.failed"
    EXTRACTION_STARTED = "extraction.started"
    EXTRACTION_COMPLETED = "extraction.completed"
    # Queries
    QUERY_STARTED = "query.started"
    QUERY_COMPLETED = "query.completed"
    # Batches
    BATCH_PROGRESS = "batch.progress"
    BATCH_COMPLETED = "batch.completed"


def _now() -> str:
    return isoformat(datetime.now(timezone.utc))


class AkashaEvent(BaseModel):
    """
    One emitted event.

    Attributes:
        type: Event type
        timestamp: ISO-8601 emission time
        scope_id: Scope of the operation, when known
        entity / relationship / document: Mutated record (mutation events)
        text: Text being learned or extracted (learn/extraction events)
        query: Question being answered (query events)
        result: ExtractResult / AskResult (completed events)
        error: Error message (learn.failed)
        progress / summary: BatchProgress / BatchSummary (batch events)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    type: EventType
    timestamp: str = Field(default_factory=_now)
    scope_id: str | None = None

    entity: Entity | None = None
    relationship: Relationship | None = None
    document: Document | None = None

    text: str | None = None
    query: str | None = None
    result: Any = None
    error: str | None = None

    progress: Any = None
    summary: Any = None
