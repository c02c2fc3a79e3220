"""
DuckDB Storage Backend

Embedded single-file graph store.

Modules:
    store: DuckDBGraphStore

Query Patterns:
    - Exact identity lookups (scope + text, scope + name)
    - Nearest neighbours via list_cosine_similarity
    - Document -> entity resolution through document_entities
    - Hop-by-hop relationship expansion for subgraph assembly
"""

from akasha.storage.duckdb.store import DuckDBGraphStore

__all__ = ["DuckDBGraphStore"]
