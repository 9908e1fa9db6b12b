"""Document-store backends: in-memory, PostgreSQL (asyncpg), Redis."""

from __future__ import annotations

import structlog
from redis.asyncio import Redis

from snippetbox.config import Settings
from snippetbox.db.base import DocumentStore
from snippetbox.db.memory import MemoryDocumentStore

logger = structlog.get_logger()

STORE_BACKENDS = ("memory", "postgres", "redis")


async def open_store(settings: Settings) -> DocumentStore:
    """Create the document store selected by ``settings.store_backend``.

    Raises:
        ValueError: If the backend name is unknown.
    """
    backend = settings.store_backend.lower()

    if backend == "memory":
        store: DocumentStore = MemoryDocumentStore()
    elif backend == "postgres":
        from snippetbox.db.connection import init_db
        from snippetbox.db.repository import PostgresDocumentStore

        store = PostgresDocumentStore(await init_db(settings.postgres_dsn))
    elif backend == "redis":
        from snippetbox.db.redis_store import RedisDocumentStore

        redis = Redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
        await redis.ping()
        store = RedisDocumentStore(redis, prefix=settings.redis_key_prefix)
    else:
        raise ValueError(f"Unknown store backend: {settings.store_backend} (expected one of {', '.join(STORE_BACKENDS)})")

    logger.info("document_store_opened", backend=backend)
    return store


__all__ = ["DocumentStore", "MemoryDocumentStore", "open_store", "STORE_BACKENDS"]
