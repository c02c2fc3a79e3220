"""
Result Types

Types returned by the public operations.

Ingestion Results:
    - CreatedCounts: What a learn() call created (vs. reused)
    - ExtractResult: Result of learn()

Query Results:
    - QueryContext: Retrieved documents/entities/relationships + summary
    - QueryStatistics: Per-phase timings (opt-in)
    - AskResult: Result of ask()

Batch Results:
    - BatchProgress: Progress callback payload
    - BatchError / BatchSummary / BatchLearnResult

Management Results:
    - DeleteResult: Structured not-found / deleted outcome
    - HealthStatus: Store/provider availability
    - ConfigValidationResult: Output of AkashaConfig.validate()
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from akasha.types.graph import Context, Document, Entity, Relationship
from akasha.types.options import QueryStrategy

# -----------------------------------------------------------------------------
# Ingestion Results
# -----------------------------------------------------------------------------


class CreatedCounts(BaseModel):
    """
    Creation counters for one learn() call.

    Attributes:
        document: 1 if the document was created, 0 if an existing one was reused
        entities: Genuinely new entities (reused entities are not counted)
        relationships: Relationships created (always fresh)
    """

    document: int = 0
    entities: int = 0
    relationships: int = 0


class ExtractResult(BaseModel):
    """
    Result of learn().

    ``entities`` lists every entity the text resolved to, created or reused.
    """

    context: Context
    document: Document
    entities: list[Entity] = Field(default_factory=list)
    relationships: list[Relationship] = Field(default_factory=list)
    summary: str = ""
    created: CreatedCounts = Field(default_factory=CreatedCounts)


# -----------------------------------------------------------------------------
# Query Results
# -----------------------------------------------------------------------------


class QueryContext(BaseModel):
    """
    Knowledge retrieved for a question.

    ``documents`` is None when the strategy did not search documents.
    """

    documents: list[Document] | None = None
    entities: list[Entity] = Field(default_factory=list)
    relationships: list[Relationship] = Field(default_factory=list)
    summary: str = ""


class QueryStatistics(BaseModel):
    """Timings (milliseconds) and counts for one ask() call."""

    search_time_ms: int = 0
    subgraph_retrieval_time_ms: int = 0
    llm_generation_time_ms: int = 0
    total_time_ms: int = 0
    documents_found: int = 0
    entities_found: int = 0
    relationships_found: int = 0
    strategy: QueryStrategy = QueryStrategy.BOTH


class AskResult(BaseModel):
    """Result of ask()."""

    context: QueryContext
    answer: str
    statistics: QueryStatistics | None = None

    @property
    def found_anything(self) -> bool:
        """False for the designed "no relevant information" outcome."""
        return bool(self.context.documents or self.context.entities)


# -----------------------------------------------------------------------------
# Batch Results
# -----------------------------------------------------------------------------


class BatchProgress(BaseModel):
    """
    Progress after one batch item.

    Attributes:
        current: Zero-based index of the item just processed
        total: Number of items in the batch
        completed: Items succeeded so far
        failed: Items failed so far
        current_text: Preview of the processed text (truncated)
        estimated_time_remaining_ms: None until at least one item finished
    """

    current: int
    total: int
    completed: int
    failed: int
    current_text: str | None = None
    estimated_time_remaining_ms: int | None = None


class BatchError(BaseModel):
    """A failed batch item."""

    index: int
    text: str
    error: str


class BatchSummary(BaseModel):
    """Aggregates across a batch; creation counts cover successful items."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    documents_created: int = 0
    documents_reused: int = 0
    entities_created: int = 0
    relationships_created: int = 0


class BatchLearnResult(BaseModel):
    """Result of learn_batch(). ``errors`` is None when nothing failed."""

    results: list[ExtractResult] = Field(default_factory=list)
    summary: BatchSummary = Field(default_factory=BatchSummary)
    errors: list[BatchError] | None = None


# -----------------------------------------------------------------------------
# Management Results
# -----------------------------------------------------------------------------


class DeleteResult(BaseModel):
    """
    Outcome of a delete operation.

    Missing ids (or ids in another scope) yield ``deleted=False`` rather than
    an exception.
    """

    deleted: bool
    message: str
    related_relationships_deleted: int | None = None


class StoreHealth(BaseModel):
    connected: bool = False
    error: str | None = None


class ProviderHealth(BaseModel):
    available: bool = False
    error: str | None = None


class HealthStatus(BaseModel):
    """
    Health of the store and the providers.

    ``healthy`` when both respond, ``degraded`` when only one does,
    ``unhealthy`` otherwise.
    """

    status: Literal["healthy", "degraded", "unhealthy"]
    store: StoreHealth
    providers: ProviderHealth
    timestamp: str


class ValidationIssue(BaseModel):
    field: str
    message: str


class ConfigValidationResult(BaseModel):
    """Errors make the configuration unusable; warnings do not."""

    valid: bool
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return self.model_dump()
