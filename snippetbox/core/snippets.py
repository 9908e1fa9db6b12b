"""Snippet ingestion, view and browse pipeline.

Submission: validate → normalize → persist.
View:       fetch → normalize (again, idempotent) → build manifest.
Browse:     list (updated_at desc) → query engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import structlog

from snippetbox.core.errors import NotFoundError, SnippetRejected
from snippetbox.core.models import SNIPPETS, UNKNOWN_AUTHOR, Snippet, unique_ids
from snippetbox.core.permissions import AuthContext, require_admin, require_identity, require_modify
from snippetbox.core.query import FilterSpec, distinct_authors, query
from snippetbox.db.base import DocumentStore
from snippetbox.sandbox.manifest import ManifestOptions, SandboxManifest, build_manifest
from snippetbox.sandbox.normalizer import normalize
from snippetbox.sandbox.validator import SnippetValidator

logger = structlog.get_logger()

REASON_EMPTY_NAME = "name must not be empty"

EDITABLE_FIELDS = frozenset({"name", "description", "code", "author", "category", "tags"})


@dataclass
class SnippetDraft:
    """User-supplied fields of a new snippet."""

    name: str
    code: str
    description: str = ""
    category: Optional[str] = None
    tags: list[str] = field(default_factory=list)


class SnippetService:
    """Orchestrates the pure sandbox components around the document store.

    Store errors propagate unchanged; authorization is checked before any
    write is attempted.
    """

    def __init__(
        self,
        store: DocumentStore,
        validator: Optional[SnippetValidator] = None,
        manifest_options: Optional[ManifestOptions] = None,
        public_base_url: str = "",
    ) -> None:
        """Initialize the service.

        Args:
            store: Document store collaborator
            validator: Admission validator (default tolerance if None)
            manifest_options: Base options for view manifests; chrome flags
                are always locked down on the public view
            public_base_url: Prefix for public view URLs
        """
        self._store = store
        self._validator = validator or SnippetValidator()
        self._manifest_options = (manifest_options or ManifestOptions()).locked()
        self._public_base_url = public_base_url.rstrip("/")

    def _admit(self, code: str) -> str:
        """Validate and normalize code, raising SnippetRejected on failure."""
        result = self._validator.validate(code)
        if not result.valid:
            raise SnippetRejected(result.reason or "invalid code")
        return normalize(code)

    @staticmethod
    def _owner(snippet: Snippet) -> Optional[str]:
        # Legacy records without an author can only be changed by admins.
        return None if snippet.author == UNKNOWN_AUTHOR else snippet.author

    async def create_snippet(self, auth: AuthContext, draft: SnippetDraft) -> str:
        """Admit and persist a new snippet, returning its id.

        Raises:
            AuthenticationRequired: If the caller has no identity
            SnippetRejected: If the name is blank or the code fails validation
        """
        author = require_identity(auth, "create_snippet")

        name = draft.name.strip()
        if not name:
            raise SnippetRejected(REASON_EMPTY_NAME)
        code = self._admit(draft.code)

        doc_id = await self._store.create(
            SNIPPETS,
            {
                "name": name,
                "description": draft.description.strip(),
                "code": code,
                "author": author,
                "category": draft.category or None,
                "tags": unique_ids(draft.tags),
            },
        )
        logger.info("snippet_created", snippet_id=doc_id, author=author, code_length=len(code))
        return doc_id

    async def get_snippet(self, snippet_id: str) -> Optional[Snippet]:
        document = await self._store.get(SNIPPETS, snippet_id)
        return Snippet.from_document(document) if document else None

    async def _require_snippet(self, snippet_id: str) -> Snippet:
        snippet = await self.get_snippet(snippet_id)
        if snippet is None:
            raise NotFoundError(SNIPPETS, snippet_id)
        return snippet

    async def list_snippets(self) -> list[Snippet]:
        """Return the canonical snapshot: every snippet, newest update first."""
        documents = await self._store.list(SNIPPETS, order_by="updated_at", descending=True)
        return [Snippet.from_document(d) for d in documents]

    async def browse(self, spec: Optional[FilterSpec] = None) -> list[Snippet]:
        return query(await self.list_snippets(), spec or FilterSpec())

    async def search(self, term: str) -> list[Snippet]:
        return await self.browse(FilterSpec(search=term))

    async def list_authors(self) -> list[str]:
        return distinct_authors(await self.list_snippets())

    async def update_snippet(
        self,
        auth: AuthContext,
        snippet_id: str,
        changes: dict[str, Any],
    ) -> Snippet:
        """Apply a partial update and return the refreshed snippet.

        Args:
            auth: Caller context
            snippet_id: Target snippet
            changes: Subset of name, description, code, author, category, tags.
                ``category=None`` uncategorizes; an empty description clears it.

        Raises:
            ValueError: On unknown fields
            NotFoundError: If the snippet does not exist
            PermissionDenied: If the caller may not edit it, or a non-admin
                tries to reassign the author
            SnippetRejected: If new code or a new name fails admission
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown snippet fields: {', '.join(sorted(unknown))}")

        snippet = await self._require_snippet(snippet_id)
        require_modify(auth, self._owner(snippet), "update_snippet")

        fields: dict[str, Any] = {}
        if "author" in changes and changes["author"] != snippet.author:
            require_admin(auth, "change_author")
            fields["author"] = (changes["author"] or "").strip() or UNKNOWN_AUTHOR
        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise SnippetRejected(REASON_EMPTY_NAME)
            fields["name"] = name
        if "description" in changes:
            fields["description"] = (changes["description"] or "").strip()
        if "code" in changes:
            fields["code"] = self._admit(changes["code"] or "")
        if "category" in changes:
            fields["category"] = changes["category"] or None
        if "tags" in changes:
            fields["tags"] = unique_ids(changes["tags"] or [])

        await self._store.update(SNIPPETS, snippet_id, fields)
        logger.info("snippet_updated", snippet_id=snippet_id, fields=sorted(fields))
        return await self._require_snippet(snippet_id)

    async def delete_snippet(self, auth: AuthContext, snippet_id: str) -> None:
        snippet = await self._require_snippet(snippet_id)
        require_modify(auth, self._owner(snippet), "delete_snippet")

        await self._store.delete(SNIPPETS, snippet_id)
        logger.info("snippet_deleted", snippet_id=snippet_id, identity=auth.identity)

    async def view_manifest(self, snippet_id: str) -> SandboxManifest:
        """Build the locked-down preview manifest for the public view.

        Raises:
            NotFoundError: If the snippet does not exist
        """
        snippet = await self._require_snippet(snippet_id)
        return build_manifest(normalize(snippet.code), self._manifest_options)

    def view_url(self, snippet_id: str) -> str:
        """Stable public URL, parameterized only by the snippet id."""
        return f"{self._public_base_url}/view/{snippet_id}"


def snippets_to_dicts(snippets: Iterable[Snippet]) -> list[dict[str, Any]]:
    return [s.to_dict() for s in snippets]
