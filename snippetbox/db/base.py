"""Document-store collaborator contract.

The core treats storage as an opaque document store keyed by opaque ids.
Timestamps are assigned by the store: ``created_at`` once, ``updated_at`` on
every write, always timezone-aware UTC with ``updated_at >= created_at``.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional, Protocol, runtime_checkable

# Fields callers may order a listing by.
ORDERABLE_FIELDS = ("created_at", "updated_at", "name", "author")

# Fields owned by the store; silently dropped from caller payloads.
RESERVED_FIELDS = frozenset({"id", "created_at", "updated_at"})


def new_document_id() -> str:
    """Generate an opaque document id."""
    return uuid.uuid4().hex


def strip_reserved(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if key not in RESERVED_FIELDS}


def check_order_field(order_by: str) -> str:
    if order_by not in ORDERABLE_FIELDS:
        raise ValueError(f"Cannot order by {order_by!r} (allowed: {', '.join(ORDERABLE_FIELDS)})")
    return order_by


@runtime_checkable
class DocumentStore(Protocol):
    """Async get/list/create/update/delete over named collections."""

    async def create(self, collection: str, data: dict[str, Any]) -> str:
        """Insert a document and return its new id."""
        ...

    async def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        """Return the document or None."""
        ...

    async def list(
        self,
        collection: str,
        order_by: str = "updated_at",
        descending: bool = True,
    ) -> list[dict[str, Any]]:
        """Return every document of the collection in the requested order."""
        ...

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Merge ``fields`` into the document; raises NotFoundError if missing."""
        ...

    async def delete(self, collection: str, doc_id: str) -> None:
        """Remove the document; raises NotFoundError if missing."""
        ...

    async def close(self) -> None:
        ...
