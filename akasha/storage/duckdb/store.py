"""
DuckDB Graph Store

Embedded, single-file graph store.

Tables:
    documents          id, scope_id, text, context_ids, metadata, embedding, temporal fields
    entities           id, scope_id, label, name, properties, context_ids, embedding, temporal fields
    relationships      id, scope_id, type, from_id, to_id, properties, temporal fields
    document_entities  document_id, entity_id, scope_id (CONTAINS_ENTITY links)

Property bags and context ids are JSON text, embeddings are DOUBLE[] and
timestamps are ISO-8601 strings. Every table carries a ``seq`` column
drawn from one sequence, so creation order is stable across tables.

Nearest-neighbour search ranks rows by ``list_cosine_similarity``; the
planner in GraphStore applies filters afterwards.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, TypeVar

import duckdb

from akasha.storage.base import GraphStore
from akasha.types.graph import ContextIds, Document, Entity, Relationship
from akasha.types.metadata import isoformat
from akasha.types.results import DeleteResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SCHEMA = [
    "CREATE SEQUENCE IF NOT EXISTS akasha_seq",
    """
    CREATE TABLE IF NOT EXISTS documents (
        id VARCHAR NOT NULL,
        seq BIGINT DEFAULT nextval('akasha_seq'),
        scope_id VARCHAR NOT NULL,
        text VARCHAR NOT NULL,
        context_ids VARCHAR NOT NULL DEFAULT '[]',
        metadata VARCHAR NOT NULL DEFAULT '{}',
        embedding DOUBLE[],
        recorded_at VARCHAR NOT NULL,
        valid_from VARCHAR NOT NULL,
        valid_to VARCHAR
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS entities (
        id VARCHAR NOT NULL,
        seq BIGINT DEFAULT nextval('akasha_seq'),
        scope_id VARCHAR NOT NULL,
        label VARCHAR NOT NULL,
        name VARCHAR,
        properties VARCHAR NOT NULL DEFAULT '{}',
        context_ids VARCHAR NOT NULL DEFAULT '[]',
        embedding DOUBLE[],
        recorded_at VARCHAR NOT NULL,
        valid_from VARCHAR NOT NULL,
        valid_to VARCHAR
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS relationships (
        id VARCHAR NOT NULL,
        seq BIGINT DEFAULT nextval('akasha_seq'),
        scope_id VARCHAR NOT NULL,
        type VARCHAR NOT NULL,
        from_id VARCHAR NOT NULL,
        to_id VARCHAR NOT NULL,
        properties VARCHAR NOT NULL DEFAULT '{}',
        recorded_at VARCHAR NOT NULL,
        valid_from VARCHAR NOT NULL,
        valid_to VARCHAR
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS document_entities (
        document_id VARCHAR NOT NULL,
        entity_id VARCHAR NOT NULL,
        scope_id VARCHAR NOT NULL,
        seq BIGINT DEFAULT nextval('akasha_seq')
    )
    """,
]

_DOCUMENT_COLUMNS = (
    "id, scope_id, text, context_ids, metadata, embedding, recorded_at, valid_from, valid_to"
)
_ENTITY_COLUMNS = (
    "id, scope_id, label, properties, context_ids, embedding, recorded_at, valid_from, valid_to"
)
_RELATIONSHIP_COLUMNS = (
    "id, scope_id, type, from_id, to_id, properties, recorded_at, valid_from, valid_to"
)


def _dumps(value: Any) -> str:
    return json.dumps(value, default=str)


def _optional_iso(value: Any) -> str | None:
    return isoformat(value) if value is not None else None


def _placeholders(values: Sequence[Any]) -> str:
    return ",".join("?" for _ in values)


def _scope_clause(scope_id: str | None, column: str = "scope_id") -> tuple[str, list[Any]]:
    if scope_id is None:
        return "", []
    return f" AND {column} = ?", [scope_id]


class DuckDBGraphStore(GraphStore):
    """
    DuckDB-backed graph store.

    Thread safety:
        One database connection is opened on initialize(); each worker thread
        gets its own cursor from it, since DuckDB connections are not
        thread-safe and asyncio.to_thread() may use different threads.

    Args:
        path: Database file, or ":memory:" for a throwaway database
    """

    def __init__(self, path: str | Path = ":memory:") -> None:
        self.path = str(path)
        self._conn: duckdb.DuckDBPyConnection | None = None
        self._local = threading.local()
        self._cursors: list[duckdb.DuckDBPyConnection] = []
        self._cursors_lock = threading.Lock()

    async def initialize(self) -> None:
        """Open the database file and create tables if needed."""
        if self._conn is not None:
            return

        def _init() -> None:
            if self.path != ":memory:":
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            conn = duckdb.connect(self.path)
            for statement in _SCHEMA:
                conn.execute(statement)
            self._conn = conn

        await asyncio.to_thread(_init)
        logger.info(f"DuckDB graph store ready at {self.path}")

    async def close(self) -> None:
        """Close all cursors and the database connection."""
        with self._cursors_lock:
            cursors, self._cursors = self._cursors, []
        for cursor in cursors:
            cursor.close()
        self._local = threading.local()
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _cursor(self) -> duckdb.DuckDBPyConnection:
        """Get thread-local cursor, creating if needed."""
        if self._conn is None:
            raise RuntimeError("DuckDB not initialized. Call initialize() first.")
        cursor = getattr(self._local, "cursor", None)
        if cursor is None:
            cursor = self._conn.cursor()
            self._local.cursor = cursor
            with self._cursors_lock:
                self._cursors.append(cursor)
        return cursor

    async def _run(self, fn: Callable[[duckdb.DuckDBPyConnection], T]) -> T:
        return await asyncio.to_thread(lambda: fn(self._cursor()))

    @staticmethod
    def _fetch_dicts(cursor: duckdb.DuckDBPyConnection) -> list[dict[str, Any]]:
        col_names = [desc[0] for desc in cursor.description]
        return [dict(zip(col_names, row)) for row in cursor.fetchall()]

    @staticmethod
    def _in_transaction(
        cursor: duckdb.DuckDBPyConnection, statements: list[tuple[str, list[Any]]]
    ) -> None:
        cursor.begin()
        try:
            for sql, params in statements:
                cursor.execute(sql, params)
        except Exception:
            cursor.rollback()
            raise
        cursor.commit()

    async def ping(self) -> None:
        await self._run(lambda cur: cur.execute("SELECT 1").fetchone())

    # -------------------------------------------------------------------------
    # Row Conversion
    # -------------------------------------------------------------------------

    @staticmethod
    def _row_to_document(row: dict[str, Any]) -> Document:
        return Document(
            id=row["id"],
            scope_id=row["scope_id"],
            text=row["text"],
            context_ids=ContextIds(json.loads(row["context_ids"] or "[]")),
            metadata=json.loads(row["metadata"] or "{}"),
            embedding=list(row["embedding"]) if row["embedding"] is not None else None,
            recorded_at=row["recorded_at"],
            valid_from=row["valid_from"],
            valid_to=row["valid_to"],
        )

    @staticmethod
    def _row_to_entity(row: dict[str, Any]) -> Entity:
        return Entity(
            id=row["id"],
            scope_id=row["scope_id"],
            label=row["label"],
            properties=json.loads(row["properties"] or "{}"),
            context_ids=ContextIds(json.loads(row["context_ids"] or "[]")),
            embedding=list(row["embedding"]) if row["embedding"] is not None else None,
            recorded_at=row["recorded_at"],
            valid_from=row["valid_from"],
            valid_to=row["valid_to"],
        )

    @staticmethod
    def _row_to_relationship(row: dict[str, Any]) -> Relationship:
        return Relationship(
            id=row["id"],
            scope_id=row["scope_id"],
            type=row["type"],
            from_id=row["from_id"],
            to_id=row["to_id"],
            properties=json.loads(row["properties"] or "{}"),
            recorded_at=row["recorded_at"],
            valid_from=row["valid_from"],
            valid_to=row["valid_to"],
        )

    @staticmethod
    def _document_params(document: Document) -> list[Any]:
        return [
            document.scope_id,
            document.text,
            _dumps(list(document.context_ids)),
            _dumps(document.metadata),
            document.embedding,
            isoformat(document.recorded_at),
            isoformat(document.valid_from),
            _optional_iso(document.valid_to),
        ]

    @staticmethod
    def _entity_params(entity: Entity) -> list[Any]:
        return [
            entity.scope_id,
            entity.label,
            entity.name,
            _dumps(entity.properties),
            _dumps(list(entity.context_ids)),
            entity.embedding,
            isoformat(entity.recorded_at),
            isoformat(entity.valid_from),
            _optional_iso(entity.valid_to),
        ]

    @staticmethod
    def _relationship_params(relationship: Relationship) -> list[Any]:
        return [
            relationship.scope_id,
            relationship.type,
            relationship.from_id,
            relationship.to_id,
            _dumps(relationship.properties),
            isoformat(relationship.recorded_at),
            isoformat(relationship.valid_from),
            _optional_iso(relationship.valid_to),
        ]

    # -------------------------------------------------------------------------
    # Identity Lookups
    # -------------------------------------------------------------------------

    async def find_document_by_text(self, text: str, scope_id: str) -> Document | None:
        def _query(cur: duckdb.DuckDBPyConnection) -> Document | None:
            cur.execute(
                f"SELECT {_DOCUMENT_COLUMNS} FROM documents "
                "WHERE scope_id = ? AND text = ? ORDER BY seq LIMIT 1",
                [scope_id, text],
            )
            rows = self._fetch_dicts(cur)
            return self._row_to_document(rows[0]) if rows else None

        return await self._run(_query)

    async def find_entity_by_name(self, name: str, scope_id: str) -> Entity | None:
        def _query(cur: duckdb.DuckDBPyConnection) -> Entity | None:
            cur.execute(
                f"SELECT {_ENTITY_COLUMNS} FROM entities "
                "WHERE scope_id = ? AND name = ? ORDER BY seq LIMIT 1",
                [scope_id, name],
            )
            rows = self._fetch_dicts(cur)
            return self._row_to_entity(rows[0]) if rows else None

        return await self._run(_query)

    async def find_document_by_id(
        self, document_id: str, scope_id: str | None = None
    ) -> Document | None:
        scope_sql, scope_params = _scope_clause(scope_id)

        def _query(cur: duckdb.DuckDBPyConnection) -> Document | None:
            cur.execute(
                f"SELECT {_DOCUMENT_COLUMNS} FROM documents WHERE id = ?{scope_sql}",
                [document_id, *scope_params],
            )
            rows = self._fetch_dicts(cur)
            return self._row_to_document(rows[0]) if rows else None

        return await self._run(_query)

    async def find_entity_by_id(
        self, entity_id: str, scope_id: str | None = None
    ) -> Entity | None:
        scope_sql, scope_params = _scope_clause(scope_id)

        def _query(cur: duckdb.DuckDBPyConnection) -> Entity | None:
            cur.execute(
                f"SELECT {_ENTITY_COLUMNS} FROM entities WHERE id = ?{scope_sql}",
                [entity_id, *scope_params],
            )
            rows = self._fetch_dicts(cur)
            return self._row_to_entity(rows[0]) if rows else None

        return await self._run(_query)

    async def find_relationship_by_id(
        self, relationship_id: str, scope_id: str | None = None
    ) -> Relationship | None:
        scope_sql, scope_params = _scope_clause(scope_id)

        def _query(cur: duckdb.DuckDBPyConnection) -> Relationship | None:
            cur.execute(
                f"SELECT {_RELATIONSHIP_COLUMNS} FROM relationships WHERE id = ?{scope_sql}",
                [relationship_id, *scope_params],
            )
            rows = self._fetch_dicts(cur)
            return self._row_to_relationship(rows[0]) if rows else None

        return await self._run(_query)

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    async def create_document(self, document: Document) -> Document:
        await self._run(
            lambda cur: cur.execute(
                "INSERT INTO documents (id, scope_id, text, context_ids, metadata, "
                "embedding, recorded_at, valid_from, valid_to) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [document.id, *self._document_params(document)],
            )
        )
        return document

    async def create_entities(self, entities: Sequence[Entity]) -> list[Entity]:
        if not entities:
            return []
        statements = [
            (
                "INSERT INTO entities (id, scope_id, label, name, properties, context_ids, "
                "embedding, recorded_at, valid_from, valid_to) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [entity.id, *self._entity_params(entity)],
            )
            for entity in entities
        ]
        await self._run(lambda cur: self._in_transaction(cur, statements))
        return list(entities)

    async def create_relationships(
        self, relationships: Sequence[Relationship]
    ) -> list[Relationship]:
        if not relationships:
            return []
        statements = [
            (
                "INSERT INTO relationships (id, scope_id, type, from_id, to_id, properties, "
                "recorded_at, valid_from, valid_to) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [relationship.id, *self._relationship_params(relationship)],
            )
            for relationship in relationships
        ]
        await self._run(lambda cur: self._in_transaction(cur, statements))
        return list(relationships)

    async def link_entity_to_document(
        self, document_id: str, entity_id: str, scope_id: str
    ) -> None:
        def _link(cur: duckdb.DuckDBPyConnection) -> None:
            if not cur.execute(
                "SELECT 1 FROM documents WHERE id = ? AND scope_id = ?",
                [document_id, scope_id],
            ).fetchone():
                raise KeyError(f"Document not found in scope {scope_id}: {document_id}")
            if not cur.execute(
                "SELECT 1 FROM entities WHERE id = ? AND scope_id = ?",
                [entity_id, scope_id],
            ).fetchone():
                raise KeyError(f"Entity not found in scope {scope_id}: {entity_id}")
            cur.execute(
                "INSERT INTO document_entities (document_id, entity_id, scope_id) "
                "SELECT ?, ?, ? WHERE NOT EXISTS ("
                "SELECT 1 FROM document_entities WHERE document_id = ? AND entity_id = ?)",
                [document_id, entity_id, scope_id, document_id, entity_id],
            )

        await self._run(_link)

    async def update_document_context_ids(
        self, document_id: str, context_ids: ContextIds
    ) -> None:
        await self._run(
            lambda cur: cur.execute(
                "UPDATE documents SET context_ids = ? WHERE id = ?",
                [_dumps(list(context_ids)), document_id],
            )
        )

    async def update_entity_context_ids(
        self, entity_id: str, context_ids: ContextIds
    ) -> None:
        await self._run(
            lambda cur: cur.execute(
                "UPDATE entities SET context_ids = ? WHERE id = ?",
                [_dumps(list(context_ids)), entity_id],
            )
        )

    async def _save_document(self, document: Document) -> None:
        await self._run(
            lambda cur: cur.execute(
                "UPDATE documents SET scope_id = ?, text = ?, context_ids = ?, metadata = ?, "
                "embedding = ?, recorded_at = ?, valid_from = ?, valid_to = ? WHERE id = ?",
                [*self._document_params(document), document.id],
            )
        )

    async def _save_entity(self, entity: Entity) -> None:
        await self._run(
            lambda cur: cur.execute(
                "UPDATE entities SET scope_id = ?, label = ?, name = ?, properties = ?, "
                "context_ids = ?, embedding = ?, recorded_at = ?, valid_from = ?, "
                "valid_to = ? WHERE id = ?",
                [*self._entity_params(entity), entity.id],
            )
        )

    async def _save_relationship(self, relationship: Relationship) -> None:
        await self._run(
            lambda cur: cur.execute(
                "UPDATE relationships SET scope_id = ?, type = ?, from_id = ?, to_id = ?, "
                "properties = ?, recorded_at = ?, valid_from = ?, valid_to = ? WHERE id = ?",
                [*self._relationship_params(relationship), relationship.id],
            )
        )

    # -------------------------------------------------------------------------
    # Deletes
    # -------------------------------------------------------------------------

    async def delete_document(
        self, document_id: str, scope_id: str | None = None
    ) -> DeleteResult:
        scope_sql, scope_params = _scope_clause(scope_id)

        def _delete(cur: duckdb.DuckDBPyConnection) -> DeleteResult:
            if not cur.execute(
                f"SELECT 1 FROM documents WHERE id = ?{scope_sql}",
                [document_id, *scope_params],
            ).fetchone():
                return DeleteResult(deleted=False, message="Document not found")
            (links,) = cur.execute(
                "SELECT count(*) FROM document_entities WHERE document_id = ?",
                [document_id],
            ).fetchone()
            self._in_transaction(
                cur,
                [
                    ("DELETE FROM document_entities WHERE document_id = ?", [document_id]),
                    ("DELETE FROM documents WHERE id = ?", [document_id]),
                ],
            )
            return DeleteResult(
                deleted=True,
                message="Document deleted",
                related_relationships_deleted=int(links),
            )

        return await self._run(_delete)

    async def delete_entity(
        self, entity_id: str, scope_id: str | None = None
    ) -> DeleteResult:
        scope_sql, scope_params = _scope_clause(scope_id)

        def _delete(cur: duckdb.DuckDBPyConnection) -> DeleteResult:
            if not cur.execute(
                f"SELECT 1 FROM entities WHERE id = ?{scope_sql}",
                [entity_id, *scope_params],
            ).fetchone():
                return DeleteResult(deleted=False, message="Entity not found")
            (relationships,) = cur.execute(
                "SELECT count(*) FROM relationships WHERE from_id = ? OR to_id = ?",
                [entity_id, entity_id],
            ).fetchone()
            (links,) = cur.execute(
                "SELECT count(*) FROM document_entities WHERE entity_id = ?",
                [entity_id],
            ).fetchone()
            self._in_transaction(
                cur,
                [
                    (
                        "DELETE FROM relationships WHERE from_id = ? OR to_id = ?",
                        [entity_id, entity_id],
                    ),
                    ("DELETE FROM document_entities WHERE entity_id = ?", [entity_id]),
                    ("DELETE FROM entities WHERE id = ?", [entity_id]),
                ],
            )
            return DeleteResult(
                deleted=True,
                message="Entity deleted",
                related_relationships_deleted=int(relationships) + int(links),
            )

        return await self._run(_delete)

    async def delete_relationship(
        self, relationship_id: str, scope_id: str | None = None
    ) -> DeleteResult:
        scope_sql, scope_params = _scope_clause(scope_id)

        def _delete(cur: duckdb.DuckDBPyConnection) -> DeleteResult:
            if not cur.execute(
                f"SELECT 1 FROM relationships WHERE id = ?{scope_sql}",
                [relationship_id, *scope_params],
            ).fetchone():
                return DeleteResult(deleted=False, message="Relationship not found")
            cur.execute("DELETE FROM relationships WHERE id = ?", [relationship_id])
            return DeleteResult(deleted=True, message="Relationship deleted")

        return await self._run(_delete)

    # -------------------------------------------------------------------------
    # Vector Search
    # -------------------------------------------------------------------------

    def _nearest(
        self,
        cur: duckdb.DuckDBPyConnection,
        table: str,
        columns: str,
        embedding: Sequence[float],
        k: int,
    ) -> list[tuple[dict[str, Any], float]]:
        cur.execute(
            f"SELECT * FROM ("
            f"SELECT {columns}, list_cosine_similarity(embedding, ?::DOUBLE[]) AS score "
            f"FROM {table} WHERE embedding IS NOT NULL"
            f") WHERE score IS NOT NULL AND NOT isnan(score) "
            f"ORDER BY score DESC, seq LIMIT ?",
            [list(embedding), k],
        )
        return [(row, float(row.pop("score"))) for row in self._fetch_dicts(cur)]

    async def _nearest_documents(
        self, embedding: Sequence[float], k: int
    ) -> list[tuple[Document, float]]:
        rows = await self._run(
            lambda cur: self._nearest(
                cur, "documents", f"{_DOCUMENT_COLUMNS}, seq", embedding, k
            )
        )
        return [(self._row_to_document(row), score) for row, score in rows]

    async def _nearest_entities(
        self, embedding: Sequence[float], k: int
    ) -> list[tuple[Entity, float]]:
        rows = await self._run(
            lambda cur: self._nearest(
                cur, "entities", f"{_ENTITY_COLUMNS}, seq", embedding, k
            )
        )
        return [(self._row_to_entity(row), score) for row, score in rows]

    # -------------------------------------------------------------------------
    # Graph Traversal
    # -------------------------------------------------------------------------

    async def get_entities(
        self, entity_ids: Sequence[str], scope_id: str | None = None
    ) -> list[Entity]:
        ids = list(dict.fromkeys(entity_ids))
        if not ids:
            return []
        scope_sql, scope_params = _scope_clause(scope_id)

        def _query(cur: duckdb.DuckDBPyConnection) -> list[Entity]:
            cur.execute(
                f"SELECT {_ENTITY_COLUMNS} FROM entities "
                f"WHERE id IN ({_placeholders(ids)}){scope_sql}",
                [*ids, *scope_params],
            )
            by_id = {row["id"]: self._row_to_entity(row) for row in self._fetch_dicts(cur)}
            return [by_id[entity_id] for entity_id in ids if entity_id in by_id]

        return await self._run(_query)

    async def get_entities_from_documents(
        self, document_ids: Sequence[str], scope_id: str | None = None
    ) -> list[Entity]:
        ids = list(dict.fromkeys(document_ids))
        if not ids:
            return []
        scope_sql, scope_params = _scope_clause(scope_id, "d.scope_id")

        def _query(cur: duckdb.DuckDBPyConnection) -> list[str]:
            rows = cur.execute(
                "SELECT de.entity_id FROM document_entities de "
                "JOIN documents d ON d.id = de.document_id "
                f"WHERE de.document_id IN ({_placeholders(ids)}){scope_sql} "
                "ORDER BY de.seq",
                [*ids, *scope_params],
            ).fetchall()
            return [row[0] for row in rows]

        entity_ids = await self._run(_query)
        return await self.get_entities(entity_ids, scope_id)

    async def get_relationships_for_entities(
        self, entity_ids: Sequence[str], scope_id: str | None = None
    ) -> list[Relationship]:
        ids = list(dict.fromkeys(entity_ids))
        if not ids:
            return []
        scope_sql, scope_params = _scope_clause(scope_id)
        marks = _placeholders(ids)

        def _query(cur: duckdb.DuckDBPyConnection) -> list[Relationship]:
            cur.execute(
                f"SELECT {_RELATIONSHIP_COLUMNS} FROM relationships "
                f"WHERE (from_id IN ({marks}) OR to_id IN ({marks})){scope_sql} "
                "ORDER BY seq",
                [*ids, *ids, *scope_params],
            )
            return [self._row_to_relationship(row) for row in self._fetch_dicts(cur)]

        return await self._run(_query)

    # -------------------------------------------------------------------------
    # Listing and Statistics
    # -------------------------------------------------------------------------

    async def list_documents(
        self, limit: int = 100, offset: int = 0, scope_id: str | None = None
    ) -> list[Document]:
        scope_sql, scope_params = _scope_clause(scope_id)

        def _query(cur: duckdb.DuckDBPyConnection) -> list[Document]:
            cur.execute(
                f"SELECT {_DOCUMENT_COLUMNS} FROM documents WHERE TRUE{scope_sql} "
                "ORDER BY seq LIMIT ? OFFSET ?",
                [*scope_params, limit, offset],
            )
            return [self._row_to_document(row) for row in self._fetch_dicts(cur)]

        return await self._run(_query)

    async def list_entities(
        self,
        label: str | None = None,
        limit: int = 100,
        offset: int = 0,
        scope_id: str | None = None,
    ) -> list[Entity]:
        conditions, params = "", []
        if label is not None:
            conditions += " AND label = ?"
            params.append(label)
        scope_sql, scope_params = _scope_clause(scope_id)

        def _query(cur: duckdb.DuckDBPyConnection) -> list[Entity]:
            cur.execute(
                f"SELECT {_ENTITY_COLUMNS} FROM entities WHERE TRUE{conditions}{scope_sql} "
                "ORDER BY seq LIMIT ? OFFSET ?",
                [*params, *scope_params, limit, offset],
            )
            return [self._row_to_entity(row) for row in self._fetch_dicts(cur)]

        return await self._run(_query)

    async def list_relationships(
        self,
        type: str | None = None,
        from_id: str | None = None,
        to_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
        scope_id: str | None = None,
    ) -> list[Relationship]:
        conditions, params = "", []
        for column, value in (("type", type), ("from_id", from_id), ("to_id", to_id)):
            if value is not None:
                conditions += f" AND {column} = ?"
                params.append(value)
        scope_sql, scope_params = _scope_clause(scope_id)

        def _query(cur: duckdb.DuckDBPyConnection) -> list[Relationship]:
            cur.execute(
                f"SELECT {_RELATIONSHIP_COLUMNS} FROM relationships "
                f"WHERE TRUE{conditions}{scope_sql} ORDER BY seq LIMIT ? OFFSET ?",
                [*params, *scope_params, limit, offset],
            )
            return [self._row_to_relationship(row) for row in self._fetch_dicts(cur)]

        return await self._run(_query)

    async def _count(self, table: str, scope_id: str | None) -> int:
        scope_sql, scope_params = _scope_clause(scope_id)

        def _query(cur: duckdb.DuckDBPyConnection) -> int:
            (count,) = cur.execute(
                f"SELECT count(*) FROM {table} WHERE TRUE{scope_sql}", scope_params
            ).fetchone()
            return int(count)

        return await self._run(_query)

    async def count_documents(self, scope_id: str | None = None) -> int:
        return await self._count("documents", scope_id)

    async def count_entities(self, scope_id: str | None = None) -> int:
        return await self._count("entities", scope_id)

    async def count_relationships(self, scope_id: str | None = None) -> int:
        return await self._count("relationships", scope_id)
