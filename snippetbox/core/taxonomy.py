"""Category and tag management.

Deleting a category or tag never rewrites snippets. Dangling ids left on
snippets are tolerated by the query engine and skipped for display.
"""

from __future__ import annotations

from typing import Optional

import structlog

from snippetbox.core.errors import NotFoundError, SnippetRejected
from snippetbox.core.models import CATEGORIES, TAGS, Category, Tag
from snippetbox.core.permissions import AuthContext, require_identity, require_modify
from snippetbox.db.base import DocumentStore

logger = structlog.get_logger()


def _clean_name(name: Optional[str], kind: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise SnippetRejected(f"{kind} name must not be empty")
    return cleaned


class TaxonomyService:
    """CRUD for the flat category list and the tag vocabulary."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def list_categories(self) -> list[Category]:
        documents = await self._store.list(CATEGORIES, order_by="created_at", descending=True)
        return [Category.from_document(d) for d in documents]

    async def get_category(self, category_id: str) -> Category:
        document = await self._store.get(CATEGORIES, category_id)
        if document is None:
            raise NotFoundError(CATEGORIES, category_id)
        return Category.from_document(document)

    async def create_category(self, auth: AuthContext, name: str, color: str) -> str:
        creator = require_identity(auth, "create_category")
        doc_id = await self._store.create(
            CATEGORIES,
            {"name": _clean_name(name, "category"), "color": color.strip(), "created_by": creator},
        )
        logger.info("category_created", category_id=doc_id, created_by=creator)
        return doc_id

    async def update_category(
        self,
        auth: AuthContext,
        category_id: str,
        name: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Category:
        """Update the supplied non-empty fields; a call with none is a no-op."""
        category = await self.get_category(category_id)
        require_modify(auth, category.created_by, "update_category")

        fields: dict[str, str] = {}
        if name is not None and name.strip():
            fields["name"] = name.strip()
        if color is not None and color.strip():
            fields["color"] = color.strip()

        if fields:
            await self._store.update(CATEGORIES, category_id, fields)
            logger.info("category_updated", category_id=category_id, fields=sorted(fields))
            return await self.get_category(category_id)
        return category

    async def delete_category(self, auth: AuthContext, category_id: str) -> None:
        category = await self.get_category(category_id)
        require_modify(auth, category.created_by, "delete_category")
        await self._store.delete(CATEGORIES, category_id)
        logger.info("category_deleted", category_id=category_id)

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    async def list_tags(self) -> list[Tag]:
        documents = await self._store.list(TAGS, order_by="created_at", descending=True)
        return [Tag.from_document(d) for d in documents]

    async def create_tag(self, auth: AuthContext, name: str) -> str:
        creator = require_identity(auth, "create_tag")
        doc_id = await self._store.create(TAGS, {"name": _clean_name(name, "tag"), "created_by": creator})
        logger.info("tag_created", tag_id=doc_id, created_by=creator)
        return doc_id

    async def get_or_create_tag(self, auth: AuthContext, name: str) -> str:
        """Return the id of the tag named exactly ``name``, creating it if needed."""
        require_identity(auth, "create_tag")
        wanted = _clean_name(name, "tag")
        # Oldest first so repeated calls keep resolving to the same tag.
        for document in await self._store.list(TAGS, order_by="created_at", descending=False):
            if document.get("name") == wanted:
                return str(document["id"])
        return await self.create_tag(auth, wanted)

    async def delete_tag(self, auth: AuthContext, tag_id: str) -> None:
        document = await self._store.get(TAGS, tag_id)
        if document is None:
            raise NotFoundError(TAGS, tag_id)
        require_modify(auth, Tag.from_document(document).created_by, "delete_tag")
        await self._store.delete(TAGS, tag_id)
        logger.info("tag_deleted", tag_id=tag_id)
