"""
Graph Storage

Modules:
    base: Abstract GraphStore interface
    memory: In-process dict store (numpy/scipy cosine scan)
    duckdb/: Embedded DuckDB store

Example:
    >>> from akasha.storage import create_store
    >>> store = create_store(config)
    >>> await store.initialize()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from akasha.storage.base import CONTAINS_ENTITY, GraphStore
from akasha.storage.memory import MemoryGraphStore

if TYPE_CHECKING:
    from akasha.config.settings import AkashaConfig
    from akasha.storage.duckdb import DuckDBGraphStore


def create_store(config: "AkashaConfig") -> GraphStore:
    """
    Build the configured graph store (not yet initialized).

    Raises:
        ConfigurationError: Unknown backend or missing duckdb storage path
    """
    from akasha.errors import ConfigurationError

    if config.storage_backend == "memory":
        return MemoryGraphStore()
    if config.storage_backend == "duckdb":
        if not config.storage_path:
            raise ConfigurationError("storage_path is required for the duckdb backend")
        from akasha.storage.duckdb import DuckDBGraphStore

        return DuckDBGraphStore(config.storage_path)
    raise ConfigurationError(
        f"Unknown storage backend: '{config.storage_backend}'. "
        "Supported backends: 'memory', 'duckdb'."
    )


def __getattr__(name: str):
    """Lazy import of the DuckDB backend."""
    if name == "DuckDBGraphStore":
        from akasha.storage.duckdb import DuckDBGraphStore
        return DuckDBGraphStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["GraphStore", "MemoryGraphStore", "DuckDBGraphStore", "CONTAINS_ENTITY", "create_store"]
