"""
Operation Options

Caller-facing options for learn(), ask() and learn_batch().
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class QueryStrategy(str, Enum):
    """Which vector searches seed an ask() call."""

    DOCUMENTS = "documents"
    ENTITIES = "entities"
    BOTH = "both"

    @property
    def searches_documents(self) -> bool:
        return self in (QueryStrategy.DOCUMENTS, QueryStrategy.BOTH)

    @property
    def searches_entities(self) -> bool:
        return self in (QueryStrategy.ENTITIES, QueryStrategy.BOTH)


class LearnOptions(BaseModel):
    """
    Options for learn().

    Attributes:
        context_id: Context to record facts under (random UUID if omitted)
        context_name: Human-readable context name
        valid_from: When the facts become valid (default: ingestion time)
        valid_to: When the facts stop being valid (default: ongoing)
        include_embeddings: Keep embedding vectors in returned records
    """

    context_id: str | None = None
    context_name: str | None = None
    valid_from: datetime | str | None = None
    valid_to: datetime | str | None = None
    include_embeddings: bool = False


class QueryOptions(BaseModel):
    """
    Options for ask().

    Attributes:
        strategy: Seed search strategy (documents, entities or both)
        limit: Maximum entities in the assembled subgraph
        max_depth: Traversal depth from seed entities (1-10)
        contexts: Only consider facts recorded under these context ids
        valid_at: Only consider facts valid at this instant
        similarity_threshold: Minimum similarity for seed documents/entities
        include_stats: Attach QueryStatistics to the response
        include_embeddings: Keep embedding vectors in returned records
    """

    strategy: QueryStrategy = QueryStrategy.BOTH
    limit: int = Field(default=50, ge=1)
    max_depth: int = Field(default=2, ge=1, le=10)
    contexts: list[str] | None = None
    valid_at: datetime | str | None = None
    similarity_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    include_stats: bool = False
    include_embeddings: bool = False


class BatchLearnItem(BaseModel):
    """One input of learn_batch(); unset fields inherit batch options."""

    text: str
    context_id: str | None = None
    context_name: str | None = None
    valid_from: datetime | str | None = None
    valid_to: datetime | str | None = None


# Receives a BatchProgress; may return an awaitable.
ProgressCallback = Callable[..., Any]


class BatchLearnOptions(BaseModel):
    """
    Options for learn_batch().

    ``context_name``, ``valid_from`` and ``valid_to`` apply to every item
    that does not set its own value. ``on_progress`` is called after each
    item, success or failure, and may be sync or async.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    context_name: str | None = None
    valid_from: datetime | str | None = None
    valid_to: datetime | str | None = None
    include_embeddings: bool = False
    on_progress: ProgressCallback | None = None
