"""
Extraction Prompt Templates

Builds the system prompt for the extraction call from an
ExtractionPromptTemplate. Unset template fields fall back to
DEFAULT_EXTRACTION_TEMPLATE; list fields are replaced wholesale, never
merged item by item.

Example:
    >>> from akasha.types import EntityTypeDefinition, ExtractionPromptTemplate
    >>> template = ExtractionPromptTemplate(
    ...     entity_types=[EntityTypeDefinition(label="Company", examples=["Acme Corp"])],
    ... )
    >>> "ENTITY TYPES:" in generate_extraction_prompt(template)
    True
"""

from __future__ import annotations

from akasha.types.extraction import ExtractionPromptTemplate

DEFAULT_EXTRACTION_TEMPLATE = ExtractionPromptTemplate(
    role="You are an expert at extracting knowledge graph structures from natural language text.",
    task=(
        "Your task is to analyze the provided text and extract:\n"
        "1. Entities (people, places, organizations, concepts, works, etc.) with their properties\n"
        "2. Relationships between entities"
    ),
    format_rules=[
        "Entity labels should be singular, PascalCase (e.g., Person, Company, Film, Book, Location, Concept)",
        'Each entity must have at least a "name" property (or "title" if more appropriate for works/creations)',
        "Relationship types should be UPPERCASE with underscores (e.g., WORKS_FOR, LOCATED_IN, OWNS, CREATED, DIRECTED, WROTE, INSPIRED_BY, FATHER_OF)",
        'Relationships should reference entities by their "name" property (or "title" for works)',
        "Extract all relevant properties from the text for each entity",
    ],
    extraction_constraints=[
        "ONLY extract relationships that are EXPLICITLY stated in the text - do not infer or create relationships",
        "NEVER create self-referential relationships (from and to cannot be the same entity)",
        "NEVER create duplicate relationships (same from, to, and type combination)",
    ],
    semantic_constraints=[
        "FATHER_OF, MOTHER_OF, SON_OF, DAUGHTER_OF only for familial relationships between Persons",
        "CREATED, DIRECTED, WROTE, PRODUCED for creative works (Films, Books, etc.)",
        "WORKS_FOR, OWNS, FOUNDED for organizations",
        "INSPIRED_BY, BASED_ON for conceptual relationships",
        "SIMILAR_TO, RELATED_TO for comparisons",
        "Films, Books, Concepts cannot have FATHER_OF, MOTHER_OF relationships",
        "Only Persons can have FATHER_OF, MOTHER_OF relationships",
        'Be precise: "X wrote Y" means Person wrote Work, not Work wrote Person',
    ],
    entity_types=[],
    relationship_types=[],
    output_format="""{
  "entities": [
    {
      "label": "Person",
      "properties": {
        "name": "Alice",
        "age": 30,
        "occupation": "Engineer"
      }
    }
  ],
  "relationships": [
    {
      "from": "Alice",
      "to": "TechCorp",
      "type": "WORKS_FOR",
      "properties": {}
    }
  ]
}""",
)


def merge_template(template: ExtractionPromptTemplate | None) -> ExtractionPromptTemplate:
    """Overlay the fields set on ``template`` onto the default template."""
    if template is None:
        return DEFAULT_EXTRACTION_TEMPLATE
    overrides = template.model_dump(exclude_none=True)
    return DEFAULT_EXTRACTION_TEMPLATE.model_validate(
        {**DEFAULT_EXTRACTION_TEMPLATE.model_dump(), **overrides}
    )


def generate_extraction_prompt(template: ExtractionPromptTemplate | None = None) -> str:
    """Render the extraction system prompt."""
    full = merge_template(template)
    parts: list[str] = [full.role or "", "", full.task or "", ""]

    parts.append("CRITICAL RULES:")
    parts.extend(f"- {rule}" for rule in full.format_rules or [])
    parts.extend(f"- {constraint}" for constraint in full.extraction_constraints or [])

    if full.semantic_constraints:
        parts.append("- Use semantically appropriate relationship types:")
        parts.extend(f"  * {constraint}" for constraint in full.semantic_constraints)

    if full.entity_types:
        parts.extend(["", "ENTITY TYPES:"])
        for entity_type in full.entity_types:
            parts.append(f"- {entity_type.label}: {entity_type.description or ''}")
            if entity_type.examples:
                parts.append(f"  Examples: {', '.join(entity_type.examples)}")
            if entity_type.required_properties:
                parts.append(
                    f"  Required properties: {', '.join(entity_type.required_properties)}"
                )
            if entity_type.optional_properties:
                parts.append(
                    f"  Optional properties: {', '.join(entity_type.optional_properties)}"
                )

    if full.relationship_types:
        parts.extend(["", "RELATIONSHIP TYPES:"])
        for rel_type in full.relationship_types:
            parts.append(f"- {rel_type.type}: {rel_type.description or ''}")
            parts.append(f"  From: {', '.join(rel_type.from_labels)}")
            parts.append(f"  To: {', '.join(rel_type.to_labels)}")
            if rel_type.examples:
                parts.append(f"  Examples: {', '.join(rel_type.examples)}")
            parts.extend(f"  Constraint: {constraint}" for constraint in rel_type.constraints)

    parts.extend(["", "Return ONLY valid JSON in this format:", full.output_format or ""])
    return "\n".join(parts)
