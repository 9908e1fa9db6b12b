"""PostgreSQL document store: async CRUD over the ``documents`` table.

JSON/JSONB columns receive Python dicts directly; the asyncpg pool is
configured with a json codec in connection.init_db().
"""

from __future__ import annotations

from typing import Any, Optional

import asyncpg
import structlog

from snippetbox.core.errors import NotFoundError
from snippetbox.db.base import check_order_field, new_document_id, strip_reserved

logger = structlog.get_logger()

# Whitelisted ORDER BY expressions; never interpolate caller input directly.
_ORDER_EXPRESSIONS = {
    "created_at": "created_at",
    "updated_at": "updated_at",
    "name": "lower(data->>'name')",
    "author": "lower(data->>'author')",
}


def _row_to_document(row: asyncpg.Record) -> dict[str, Any]:
    document = dict(row["data"] or {})
    document["id"] = row["id"]
    document["created_at"] = row["created_at"]
    document["updated_at"] = row["updated_at"]
    return document


class PostgresDocumentStore:
    """Document store backed by a single JSONB table.

    All methods acquire a connection from the pool per call so callers
    never manage connections themselves.
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        """Initialize the store.

        Args:
            pool: asyncpg pool created by connection.init_db().
        """
        self._pool = pool

    async def create(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = new_document_id()
        async with self._pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO documents (collection, id, data)
                VALUES ($1, $2, $3)
                """,
                collection,
                doc_id,
                strip_reserved(data),  # dict → codec → JSONB
            )
        logger.debug("postgres_document_created", collection=collection, doc_id=doc_id)
        return doc_id

    async def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT id, data, created_at, updated_at
                FROM documents
                WHERE collection = $1 AND id = $2
                """,
                collection,
                doc_id,
            )
        return _row_to_document(row) if row else None

    async def list(
        self,
        collection: str,
        order_by: str = "updated_at",
        descending: bool = True,
    ) -> list[dict[str, Any]]:
        expression = _ORDER_EXPRESSIONS[check_order_field(order_by)]
        direction = "DESC" if descending else "ASC"
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT id, data, created_at, updated_at
                FROM documents
                WHERE collection = $1
                ORDER BY {expression} {direction}, created_at {direction}
                """,
                collection,
            )
        return [_row_to_document(r) for r in rows]

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        async with self._pool.acquire() as conn:
            status = await conn.execute(
                """
                UPDATE documents
                SET data = data || $3::jsonb,
                    updated_at = GREATEST(NOW(), created_at)
                WHERE collection = $1 AND id = $2
                """,
                collection,
                doc_id,
                strip_reserved(fields),
            )
        if status.endswith(" 0"):
            raise NotFoundError(collection, doc_id)

    async def delete(self, collection: str, doc_id: str) -> None:
        async with self._pool.acquire() as conn:
            status = await conn.execute(
                "DELETE FROM documents WHERE collection = $1 AND id = $2",
                collection,
                doc_id,
            )
        if status.endswith(" 0"):
            raise NotFoundError(collection, doc_id)

    async def close(self) -> None:
        await self._pool.close()
