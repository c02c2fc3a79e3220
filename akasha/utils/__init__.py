"""
Utility Functions

Helper functions used throughout the package.

Modules:
    properties: Reserved property keys, allow-list filtering, embedding text
"""

from akasha.utils.properties import (
    RESERVED_PROPERTY_KEYS,
    entity_embedding_text,
    is_allowed_property,
    sanitize_properties,
    scrub_embedding,
    scrub_embeddings,
    truncate_preview,
)

__all__ = [
    "RESERVED_PROPERTY_KEYS",
    "is_allowed_property",
    "sanitize_properties",
    "entity_embedding_text",
    "scrub_embedding",
    "scrub_embeddings",
    "truncate_preview",
]
