"""
Graph Types

Core records stored in the knowledge graph.

Storage Models:
    - Scope: Tenant/workspace isolation boundary
    - Context: Named provenance unit (one per learn() call)
    - Document: Canonical source text, unique per (scope, text)
    - Entity: Extracted node, unique per (scope, name)
    - Relationship: Typed edge between two entities

Property View:
    Every fact can be flattened with ``to_properties()``. The flattened
    form uses the stored key names (``scopeId``, ``contextIds``,
    ``_recordedAt``, ``_validFrom``, ``_validTo``, ``_similarity``).
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, GetCoreSchemaHandler, field_validator
from pydantic_core import core_schema

from akasha.types.metadata import SystemMetadata, to_utc


class ContextIds(tuple):
    """
    Insertion-ordered, duplicate-free set of context ids.

    Immutable: ``add`` returns a new instance (or ``self`` when the id is
    already present), so a shared instance is never changed in place.

    Example:
        >>> ids = ContextIds(["ctx-1"])
        >>> ids.add("ctx-2").add("ctx-1")
        ('ctx-1', 'ctx-2')
    """

    def __new__(cls, ids: Iterable[str] = ()) -> "ContextIds":
        return super().__new__(cls, dict.fromkeys(ids))

    def add(self, context_id: str) -> "ContextIds":
        """Return a set that also contains ``context_id``."""
        if context_id in self:
            return self
        return ContextIds((*self, context_id))

    def intersects(self, others: Iterable[str]) -> bool:
        """True when any id in ``others`` is a member."""
        return any(other in self for other in others)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            handler(tuple[str, ...]),
            serialization=core_schema.plain_serializer_function_ser_schema(list),
        )


class Scope(BaseModel):
    """
    Isolation boundary (tenant, workspace, project, ...).

    Immutable once created; every fact created under a scope carries its id.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type: str = "workspace"
    name: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class Context(BaseModel):
    """A named knowledge source: the text handed to one learn() call."""

    id: str
    scope_id: str
    name: str
    source: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class _Fact(BaseModel):
    """Shared temporal fields of documents, entities and relationships."""

    id: str
    scope_id: str
    recorded_at: datetime
    valid_from: datetime
    valid_to: datetime | None = None

    @field_validator("recorded_at", "valid_from", "valid_to", mode="before")
    @classmethod
    def _coerce_utc(cls, value: Any) -> Any:
        if value is None:
            return None
        return to_utc(value)

    @property
    def system_metadata(self) -> SystemMetadata:
        return SystemMetadata(
            recorded_at=self.recorded_at,
            valid_from=self.valid_from,
            valid_to=self.valid_to,
        )

    def is_valid_at(self, moment: datetime) -> bool:
        """Whether the validity window contains ``moment``."""
        if self.valid_from > moment:
            return False
        return self.valid_to is None or self.valid_to >= moment


class Document(_Fact):
    """
    Canonical text node.

    Attributes:
        text: Full source text (identity key together with scope_id)
        context_ids: Contexts this text was learned under
        embedding: Vector of ``text``; scrubbed from API results by default
        similarity: Search score, set only on vector search results
    """

    text: str
    context_ids: ContextIds = Field(default_factory=ContextIds)
    metadata: dict[str, Any] = Field(default_factory=dict)
    embedding: list[float] | None = None
    similarity: float | None = None

    label: str = "Document"

    def to_properties(self, *, include_embedding: bool = False) -> dict[str, Any]:
        props: dict[str, Any] = {
            "text": self.text,
            "scopeId": self.scope_id,
            "contextIds": list(self.context_ids),
            **self.system_metadata.as_properties(),
        }
        if self.metadata:
            props["metadata"] = dict(self.metadata)
        if include_embedding and self.embedding is not None:
            props["embedding"] = self.embedding
        if self.similarity is not None:
            props["_similarity"] = self.similarity
        return props


class Entity(_Fact):
    """
    Extracted entity node.

    Identity is (scope_id, name); the label is not part of the key.
    ``properties`` holds the schema-less domain data from extraction.
    """

    label: str
    properties: dict[str, Any] = Field(default_factory=dict)
    context_ids: ContextIds = Field(default_factory=ContextIds)
    embedding: list[float] | None = None
    similarity: float | None = None

    @property
    def name(self) -> str | None:
        """Identifying name (``name`` property, falling back to ``title``)."""
        value = self.properties.get("name") or self.properties.get("title")
        return str(value) if value else None

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def to_properties(self, *, include_embedding: bool = False) -> dict[str, Any]:
        props: dict[str, Any] = {
            **self.properties,
            "scopeId": self.scope_id,
            "contextIds": list(self.context_ids),
            **self.system_metadata.as_properties(),
        }
        if include_embedding and self.embedding is not None:
            props["embedding"] = self.embedding
        if self.similarity is not None:
            props["_similarity"] = self.similarity
        return props


class Relationship(_Fact):
    """
    Directed, typed edge between two entities.

    Created fresh per learn() call; never deduplicated across calls.
    """

    type: str
    from_id: str
    to_id: str
    properties: dict[str, Any] = Field(default_factory=dict)

    def to_properties(self) -> dict[str, Any]:
        return {
            **self.properties,
            "scopeId": self.scope_id,
            **self.system_metadata.as_properties(),
        }


class Subgraph(BaseModel):
    """Bounded neighbourhood returned by the subgraph assembler."""

    entities: list[Entity] = Field(default_factory=list)
    relationships: list[Relationship] = Field(default_factory=list)
