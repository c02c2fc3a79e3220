"""
Property Bag Helpers

Entities and relationships carry schema-less ``properties`` maps. The keys
below belong to the system and are stripped from every user-supplied bag
(LLM extraction output and update calls).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from akasha.types.graph import Document, Entity

RESERVED_PROPERTY_KEYS = frozenset(
    {
        "id",
        "scopeId",
        "contextIds",
        "embedding",
        "_recordedAt",
        "_validFrom",
        "_validTo",
        "_similarity",
        "label",
        "text",
    }
)

# Keys that never contribute to an entity's embedding text.
_EMBEDDING_TEXT_EXCLUDED = frozenset(
    {"id", "embedding", "createdAt", "updatedAt", "scopeId", "_similarity"}
)
_MAX_EMBEDDED_VALUE_CHARS = 200

F = TypeVar("F", Document, Entity)


def is_allowed_property(key: str) -> bool:
    return key not in RESERVED_PROPERTY_KEYS and not key.startswith("_")


def sanitize_properties(properties: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Allow-list filter for user-supplied properties.

    Example:
        >>> sanitize_properties({"name": "Alice", "scopeId": "x", "_validTo": 1})
        {'name': 'Alice'}
    """
    if not properties:
        return {}
    return {key: value for key, value in properties.items() if is_allowed_property(key)}


def entity_embedding_text(label: str, properties: Mapping[str, Any]) -> str:
    """
    Build the text embedded for an entity.

    Label, name (or title), description, then every other short string,
    number or boolean property as ``key: value``.

    Example:
        >>> entity_embedding_text("Person", {"name": "Alice", "age": 30})
        'Person Alice age: 30'
    """
    parts = [label]
    name = properties.get("name") or properties.get("title")
    if name:
        parts.append(str(name))
    description = properties.get("description")
    if description:
        parts.append(str(description))

    for key, value in properties.items():
        if key in _EMBEDDING_TEXT_EXCLUDED or value == name or value == description:
            continue
        if isinstance(value, str):
            if 0 < len(value) < _MAX_EMBEDDED_VALUE_CHARS:
                parts.append(f"{key}: {value}")
        elif isinstance(value, bool):
            parts.append(f"{key}: {str(value).lower()}")
        elif isinstance(value, (int, float)):
            parts.append(f"{key}: {value}")

    return " ".join(parts)


def scrub_embedding(record: F) -> F:
    """Copy of ``record`` without its embedding vector."""
    if record.embedding is None:
        return record
    return record.model_copy(update={"embedding": None})


def scrub_embeddings(records: list[F]) -> list[F]:
    return [scrub_embedding(record) for record in records]


def truncate_preview(text: str, max_chars: int = 200) -> str:
    """Cap ``text`` at ``max_chars`` characters, marking the cut with ``...``."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."
