"""In-process document store used by tests and the ``memory`` backend."""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import structlog

from snippetbox.core.errors import NotFoundError
from snippetbox.db.base import check_order_field, new_document_id, strip_reserved

logger = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _sort_key(value: Any) -> tuple[bool, Any]:
    # Strings compare case-insensitively.
    if isinstance(value, str):
        value = value.casefold()
    return (value is None, value or "")


class MemoryDocumentStore:
    """Dict-backed store; documents are deep-copied in and out.

    Insertion order is remembered so equal sort keys list in creation order.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        """Initialize an empty store.

        Args:
            clock: Optional timestamp source, used by tests to force ties.
        """
        self._clock = clock or _utcnow
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def _now(self) -> datetime:
        return self._clock()

    async def create(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = new_document_id()
        now = self._now()
        document = copy.deepcopy(strip_reserved(data))
        document.update(id=doc_id, created_at=now, updated_at=now)
        self._collections.setdefault(collection, {})[doc_id] = document
        logger.debug("memory_store_created", collection=collection, doc_id=doc_id)
        return doc_id

    async def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        document = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(document) if document is not None else None

    async def list(
        self,
        collection: str,
        order_by: str = "updated_at",
        descending: bool = True,
    ) -> list[dict[str, Any]]:
        check_order_field(order_by)
        documents = [copy.deepcopy(d) for d in self._collections.get(collection, {}).values()]
        return sorted(documents, key=lambda d: _sort_key(d.get(order_by)), reverse=descending)

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        document = self._collections.get(collection, {}).get(doc_id)
        if document is None:
            raise NotFoundError(collection, doc_id)
        document.update(copy.deepcopy(strip_reserved(fields)))
        document["updated_at"] = max(self._now(), document["created_at"])

    async def delete(self, collection: str, doc_id: str) -> None:
        documents = self._collections.get(collection, {})
        if doc_id not in documents:
            raise NotFoundError(collection, doc_id)
        del documents[doc_id]

    async def close(self) -> None:
        self._collections.clear()
