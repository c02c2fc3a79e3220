"""
Extraction Types

Models for the LLM extraction step of learn().

Extraction Models:
    - ExtractedEntity: Entity as returned by the LLM (label + properties)
    - ExtractedRelationship: Edge referencing entities by name
    - ExtractionOutput: Validated LLM payload

Prompt Template Models:
    - EntityTypeDefinition / RelationshipTypeDefinition: Ontology entries
    - ExtractionPromptTemplate: Configurable extraction system prompt
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ExtractedEntity(BaseModel):
    """
    An entity from the LLM payload, before identity resolution.

    Must carry a ``name`` (or ``title`` for works) property; that value is
    the identity key used by relationships and by the resolver.
    """

    label: str = Field(..., min_length=1)
    properties: dict[str, Any]

    @model_validator(mode="after")
    def _require_name(self) -> "ExtractedEntity":
        if not self.properties.get("name") and not self.properties.get("title"):
            raise ValueError(
                f"Invalid entity: missing name/title property for {self.label}"
            )
        return self

    @property
    def name(self) -> str:
        return str(self.properties.get("name") or self.properties.get("title"))


class ExtractedRelationship(BaseModel):
    """A relationship from the LLM payload; endpoints are entity names."""

    model_config = ConfigDict(populate_by_name=True)

    from_name: str = Field(..., alias="from")
    to_name: str = Field(..., alias="to")
    type: str
    properties: dict[str, Any] = Field(default_factory=dict)

    @field_validator("properties", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.from_name, self.to_name, self.type)


class ExtractionOutput(BaseModel):
    """Validated extraction result for one text."""

    entities: list[ExtractedEntity] = Field(default_factory=list)
    relationships: list[ExtractedRelationship] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Prompt Template Models
# -----------------------------------------------------------------------------


class EntityTypeDefinition(BaseModel):
    """Ontology entry describing one entity label."""

    label: str
    description: str | None = None
    examples: list[str] = Field(default_factory=list)
    required_properties: list[str] = Field(default_factory=list)
    optional_properties: list[str] = Field(default_factory=list)


class RelationshipTypeDefinition(BaseModel):
    """Ontology entry describing one relationship type."""

    type: str
    description: str | None = None
    from_labels: list[str] = Field(default_factory=list)
    to_labels: list[str] = Field(default_factory=list)
    examples: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)


class ExtractionPromptTemplate(BaseModel):
    """
    Extraction prompt configuration.

    Every field is optional; unset fields fall back to the default template
    (see akasha.ingestion.extraction.prompt).
    """

    role: str | None = None
    task: str | None = None
    format_rules: list[str] | None = None
    extraction_constraints: list[str] | None = None
    entity_types: list[EntityTypeDefinition] | None = None
    relationship_types: list[RelationshipTypeDefinition] | None = None
    semantic_constraints: list[str] | None = None
    output_format: str | None = None
