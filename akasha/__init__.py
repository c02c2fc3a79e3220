"""
Akasha - Scoped GraphRAG Library

Turns free text into a scoped knowledge graph (documents, entities,
relationships) and answers questions from it.

Example:
    >>> from akasha import Akasha, AkashaConfig
    >>> akasha = Akasha(AkashaConfig(scope_id="tenant-1", scope_name="Tenant One"))
    >>> await akasha.learn("Alice works for Acme Corp.")
    >>> result = await akasha.ask("Who works for Acme Corp?")
    >>> print(result.answer)

Main Classes:
    Akasha: Primary entry point for all operations
    AkashaConfig: Configuration management
    EventEmitter: Mutation and lifecycle notifications
"""

__version__ = "0.1.0"

# Public API - lazy imports to avoid loading optional dependencies
def __getattr__(name: str):
    """Lazy import public API components."""

    if name == "Akasha":
        from akasha.api.akasha import Akasha
        return Akasha

    if name == "AkashaConfig":
        from akasha.config.settings import AkashaConfig
        return AkashaConfig

    if name in ("EventEmitter", "EventType", "AkashaEvent"):
        from akasha import events
        return getattr(events, name)

    if name in ("AkashaError", "ConfigurationError", "ExtractionError"):
        from akasha import errors
        return getattr(errors, name)

    # Types
    if name in (
        "Scope",
        "Context",
        "Document",
        "Entity",
        "Relationship",
        "LearnOptions",
        "QueryOptions",
        "QueryStrategy",
        "BatchLearnItem",
        "BatchLearnOptions",
        "ExtractResult",
        "AskResult",
        "BatchLearnResult",
        "HealthStatus",
        "DeleteResult",
    ):
        from akasha import types
        return getattr(types, name)

    raise AttributeError(f"module 'akasha' has no attribute {name!r}")


__all__ = [
    # Main classes
    "Akasha",
    "AkashaConfig",
    "EventEmitter",
    "EventType",
    "AkashaEvent",
    # Errors
    "AkashaError",
    "ConfigurationError",
    "ExtractionError",
    # Types
    "Scope",
    "Context",
    "Document",
    "Entity",
    "Relationship",
    "LearnOptions",
    "QueryOptions",
    "QueryStrategy",
    "BatchLearnItem",
    "BatchLearnOptions",
    "ExtractResult",
    "AskResult",
    "BatchLearnResult",
    "HealthStatus",
    "DeleteResult",
]
