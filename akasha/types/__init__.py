"""
Type Definitions

Pydantic models for all data structures.

Storage Models:
    - Scope, Context - Isolation boundary and provenance unit
    - Document, Entity, Relationship - Facts stored in the graph
    - ContextIds - Ordered, duplicate-free context membership
    - SystemMetadata - recordedAt / validFrom / validTo stamps

Extraction Models (used during learn()):
    - ExtractedEntity, ExtractedRelationship, ExtractionOutput
    - ExtractionPromptTemplate, EntityTypeDefinition, RelationshipTypeDefinition

Options:
    - LearnOptions, QueryOptions, QueryStrategy
    - BatchLearnItem, BatchLearnOptions

Results:
    - ExtractResult, AskResult, QueryContext, QueryStatistics
    - BatchLearnResult, BatchProgress, BatchSummary, BatchError
    - DeleteResult, HealthStatus, ConfigValidationResult
"""

from akasha.types.extraction import (
    EntityTypeDefinition,
    ExtractedEntity,
    ExtractedRelationship,
    ExtractionOutput,
    ExtractionPromptTemplate,
    RelationshipTypeDefinition,
)
from akasha.types.graph import (
    Context,
    ContextIds,
    Document,
    Entity,
    Relationship,
    Scope,
    Subgraph,
)
from akasha.types.metadata import SystemMetadata
from akasha.types.options import (
    BatchLearnItem,
    BatchLearnOptions,
    LearnOptions,
    ProgressCallback,
    QueryOptions,
    QueryStrategy,
)
from akasha.types.results import (
    AskResult,
    BatchError,
    BatchLearnResult,
    BatchProgress,
    BatchSummary,
    ConfigValidationResult,
    CreatedCounts,
    DeleteResult,
    ExtractResult,
    HealthStatus,
    ProviderHealth,
    QueryContext,
    QueryStatistics,
    StoreHealth,
    ValidationIssue,
)

__all__ = [
    # Storage
    "Scope",
    "Context",
    "ContextIds",
    "Document",
    "Entity",
    "Relationship",
    "Subgraph",
    "SystemMetadata",
    # Extraction
    "ExtractedEntity",
    "ExtractedRelationship",
    "ExtractionOutput",
    "ExtractionPromptTemplate",
    "EntityTypeDefinition",
    "RelationshipTypeDefinition",
    # Options
    "LearnOptions",
    "QueryOptions",
    "QueryStrategy",
    "BatchLearnItem",
    "BatchLearnOptions",
    "ProgressCallback",
    # Results
    "CreatedCounts",
    "ExtractResult",
    "QueryContext",
    "QueryStatistics",
    "AskResult",
    "BatchProgress",
    "BatchError",
    "BatchSummary",
    "BatchLearnResult",
    "DeleteResult",
    "StoreHealth",
    "ProviderHealth",
    "HealthStatus",
    "ValidationIssue",
    "ConfigValidationResult",
]
