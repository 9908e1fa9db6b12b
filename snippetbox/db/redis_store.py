"""Redis document store: JSON documents plus a per-collection id set.

Redis key layout:
    {prefix}:{collection}:{id}   STRING with the JSON document
    {prefix}:{collection}:ids    SET of document ids
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from redis.asyncio import Redis

from snippetbox.core.errors import NotFoundError
from snippetbox.db.base import check_order_field, new_document_id, strip_reserved

logger = structlog.get_logger()

_TIMESTAMP_FIELDS = ("created_at", "updated_at")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _encode(document: dict[str, Any]) -> str:
    payload = dict(document)
    for key in _TIMESTAMP_FIELDS:
        if isinstance(payload.get(key), datetime):
            payload[key] = payload[key].isoformat()
    return json.dumps(payload)


def _decode(raw: str) -> dict[str, Any]:
    document = json.loads(raw)
    for key in _TIMESTAMP_FIELDS:
        if isinstance(document.get(key), str):
            document[key] = datetime.fromisoformat(document[key])
    return document


class RedisDocumentStore:
    """Stores each document as a JSON string; ordering happens client-side."""

    def __init__(self, redis: Redis, prefix: str = "snippetbox") -> None:
        """Initialize the store.

        Args:
            redis: Async Redis connection created with decode_responses=True.
            prefix: Namespace for every key written by this store.
        """
        self._redis = redis
        self._prefix = prefix

    def _doc_key(self, collection: str, doc_id: str) -> str:
        return f"{self._prefix}:{collection}:{doc_id}"

    def _index_key(self, collection: str) -> str:
        return f"{self._prefix}:{collection}:ids"

    async def create(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = new_document_id()
        now = _utcnow()
        document = strip_reserved(data)
        document.update(id=doc_id, created_at=now, updated_at=now)

        await self._redis.set(self._doc_key(collection, doc_id), _encode(document))
        await self._redis.sadd(self._index_key(collection), doc_id)  # type: ignore[misc]

        logger.debug("redis_document_created", collection=collection, doc_id=doc_id)
        return doc_id

    async def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        raw = await self._redis.get(self._doc_key(collection, doc_id))
        return _decode(raw) if raw else None

    async def list(
        self,
        collection: str,
        order_by: str = "updated_at",
        descending: bool = True,
    ) -> list[dict[str, Any]]:
        check_order_field(order_by)
        ids = sorted(await self._redis.smembers(self._index_key(collection)))  # type: ignore[misc]
        if not ids:
            return []

        raws = await self._redis.mget([self._doc_key(collection, doc_id) for doc_id in ids])
        documents = [_decode(raw) for raw in raws if raw]

        if order_by in _TIMESTAMP_FIELDS:
            return sorted(
                documents,
                key=lambda d: (d[order_by], d["created_at"]),
                reverse=descending,
            )
        return sorted(
            documents,
            key=lambda d: (str(d.get(order_by) or "").casefold(), d["created_at"]),
            reverse=descending,
        )

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        document = await self.get(collection, doc_id)
        if document is None:
            raise NotFoundError(collection, doc_id)

        document.update(strip_reserved(fields))
        document["updated_at"] = max(_utcnow(), document["created_at"])
        await self._redis.set(self._doc_key(collection, doc_id), _encode(document))

    async def delete(self, collection: str, doc_id: str) -> None:
        removed = await self._redis.delete(self._doc_key(collection, doc_id))
        await self._redis.srem(self._index_key(collection), doc_id)  # type: ignore[misc]
        if not removed:
            raise NotFoundError(collection, doc_id)

    async def close(self) -> None:
        await self._redis.aclose()
