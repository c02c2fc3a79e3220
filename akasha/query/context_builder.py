"""
Context Builder

Renders retrieved documents and the assembled subgraph into the text
handed to the answer-generation LLM.

Layout:
    Knowledge Graph Context:

    Source Documents (n[ of N total]):     full text, first
    Entities (n[ of N total]):             one line per entity
    Relationships (n[ of N total]):        "from --[TYPE]--> to"

Budget: 200,000 characters. When documents are present they reserve 60%
of it; entity and relationship lines share the rest.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from akasha.types.graph import Document, Entity, Relationship

MAX_CONTEXT_CHARS = 200_000
DOCUMENT_SHARE = 0.6
MAX_DOCUMENTS = 10
MAX_ENTITIES = 100
MAX_RELATIONSHIPS = 200
MAX_ENTITY_PROPERTIES = 10
MAX_PROPERTY_CHARS = 200

_INTERNAL_PROPERTIES = frozenset({"embedding", "_similarity", "scopeId"})


def _count_label(shown: int, total: int) -> str:
    return f"{shown} of {total} total" if total > shown else str(shown)


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        if len(value) > MAX_PROPERTY_CHARS:
            return value[:MAX_PROPERTY_CHARS] + "..."
        return value
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def format_entity(entity: Entity) -> str:
    props = [
        f"{key}: {_format_value(value)}"
        for key, value in entity.to_properties().items()
        if key not in _INTERNAL_PROPERTIES
    ][:MAX_ENTITY_PROPERTIES]
    return f"{entity.label} ({entity.id}): {', '.join(props) or 'no properties'}"


def _endpoint_name(entity_id: str, entities: dict[str, Entity]) -> str:
    entity = entities.get(entity_id)
    if entity is None:
        return entity_id
    return entity.name or entity.label or entity_id


def _document_section(documents: Sequence[Document], reserve: int) -> str | None:
    texts: list[str] = []
    used = 0
    for i, document in enumerate(documents[:MAX_DOCUMENTS]):
        remaining = reserve - used
        if remaining <= 0:
            break
        text = document.text
        if len(text) > remaining:
            text = text[: max(remaining - 100, 0)] + "..."
        if text:
            texts.append(f"Document {i + 1}:\n{text}")
            used += len(text)
    if not texts:
        return None
    return (
        f"Source Documents ({_count_label(len(texts), len(documents))}):\n\n"
        + "\n\n---\n\n".join(texts)
    )


def format_context(
    entities: Sequence[Entity],
    relationships: Sequence[Relationship],
    documents: Sequence[Document] | None = None,
) -> str:
    """
    Build the LLM context summary.

    Args:
        entities: Subgraph entities
        relationships: Subgraph relationships
        documents: Seed documents (placed ahead of the graph)

    Returns:
        Context text starting with "Knowledge Graph Context:"
    """
    reserve = int(MAX_CONTEXT_CHARS * DOCUMENT_SHARE) if documents else 0
    graph_budget = MAX_CONTEXT_CHARS - reserve
    graph_chars = 0

    entity_lines: list[str] = []
    for entity in entities[:MAX_ENTITIES]:
        line = format_entity(entity)
        if graph_chars + len(line) > graph_budget:
            break
        entity_lines.append(line)
        graph_chars += len(line)

    by_id = {entity.id: entity for entity in entities}
    relationship_lines: list[str] = []
    for rel in relationships[:MAX_RELATIONSHIPS]:
        line = (
            f"{_endpoint_name(rel.from_id, by_id)} --[{rel.type}]--> "
            f"{_endpoint_name(rel.to_id, by_id)}"
        )
        if graph_chars + len(line) > graph_budget:
            break
        relationship_lines.append(line)
        graph_chars += len(line)

    sections: list[str] = []
    if documents:
        document_section = _document_section(documents, reserve)
        if document_section:
            sections.append(document_section)
    if entity_lines:
        sections.append(
            f"Entities ({_count_label(len(entity_lines), len(entities))}):\n"
            + "\n".join(entity_lines)
        )
    if relationship_lines:
        sections.append(
            f"Relationships ({_count_label(len(relationship_lines), len(relationships))}):\n"
            + "\n".join(relationship_lines)
        )

    return "Knowledge Graph Context:\n\n" + "\n\n".join(sections)
