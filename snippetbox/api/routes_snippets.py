"""Snippet API routes.

Provides:
- POST   /api/snippets                submit a snippet (validate → normalize → store)
- GET    /api/snippets                browse with search/filters/sort
- GET    /api/snippets/authors        distinct authors for the filter bar
- GET    /api/snippets/{id}           fetch one snippet
- PATCH  /api/snippets/{id}           partial update (owner or admin)
- DELETE /api/snippets/{id}           delete (owner or admin)
- POST   /api/validate                dry-run the validator
"""

from __future__ import annotations

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from pydantic import BaseModel, Field

from snippetbox.api.auth import get_auth_context
from snippetbox.api.errors import operation_failed
from snippetbox.core.errors import SnippetBoxError
from snippetbox.core.permissions import AuthContext
from snippetbox.core.query import FilterSpec
from snippetbox.core.snippets import SnippetDraft, SnippetService, snippets_to_dicts

logger = structlog.get_logger()

router = APIRouter()


# -------------------------------------------------------------------------
# Request / Response Models
# -------------------------------------------------------------------------


class SnippetCreateRequest(BaseModel):
    """Request body for a new snippet."""

    name: str = Field(..., description="Display label")
    code: str = Field(..., description="Component source text")
    description: str = Field(default="", description="Optional free text")
    category: Optional[str] = Field(default=None, description="Category id")
    tags: list[str] = Field(default_factory=list, description="Tag ids")


class SnippetUpdateRequest(BaseModel):
    """Partial update; only fields present in the body are changed."""

    name: Optional[str] = None
    description: Optional[str] = None
    code: Optional[str] = None
    author: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[list[str]] = None


class SnippetCreatedResponse(BaseModel):
    id: str = Field(..., description="New snippet id")
    url: str = Field(..., description="Public view URL")


class ValidateRequest(BaseModel):
    code: str


class ValidateResponse(BaseModel):
    valid: bool
    reason: Optional[str] = None
    flagged: list[str] = Field(default_factory=list)


def _service(request: Request) -> SnippetService:
    return request.app.state.app_state.snippets


# -------------------------------------------------------------------------
# Routes
# -------------------------------------------------------------------------


@router.post("/snippets", response_model=SnippetCreatedResponse, status_code=201)
async def create_snippet(
    body: SnippetCreateRequest,
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
) -> SnippetCreatedResponse:
    """Submit a new snippet.

    Validator rejections come back as 422 with the reason verbatim.
    """
    service = _service(request)
    try:
        snippet_id = await service.create_snippet(
            auth,
            SnippetDraft(
                name=body.name,
                code=body.code,
                description=body.description,
                category=body.category,
                tags=body.tags,
            ),
        )
    except SnippetBoxError:
        raise
    except Exception as exc:
        raise operation_failed("snippet_create_failed", exc) from exc

    return SnippetCreatedResponse(id=snippet_id, url=service.view_url(snippet_id))


@router.get("/snippets", summary="Browse snippets")
async def list_snippets(
    request: Request,
    search: Optional[str] = Query(default=None),
    categories: Optional[list[str]] = Query(default=None),
    tags: Optional[list[str]] = Query(default=None),
    authors: Optional[list[str]] = Query(default=None),
    sort_by: Optional[str] = Query(default=None),
    sort_direction: Optional[str] = Query(default=None),
) -> list[dict[str, Any]]:
    """Return snippets filtered and ordered by the query parameters.

    Multi-valued filters may repeat or be comma-separated.
    """
    try:
        spec = FilterSpec.from_params(
            search=search,
            categories=categories,
            tags=tags,
            authors=authors,
            sort_by=sort_by,
            sort_direction=sort_direction,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        snippets = await _service(request).browse(spec)
    except Exception as exc:
        raise operation_failed("snippet_browse_failed", exc) from exc
    return snippets_to_dicts(snippets)


@router.get("/snippets/authors", summary="Distinct snippet authors")
async def list_authors(request: Request) -> list[str]:
    try:
        return await _service(request).list_authors()
    except Exception as exc:
        raise operation_failed("snippet_authors_failed", exc) from exc


@router.get("/snippets/{snippet_id}")
async def get_snippet(snippet_id: str, request: Request) -> dict[str, Any]:
    try:
        snippet = await _service(request).get_snippet(snippet_id)
    except Exception as exc:
        raise operation_failed("snippet_get_failed", exc, snippet_id=snippet_id) from exc

    if snippet is None:
        raise HTTPException(status_code=404, detail=f"Snippet {snippet_id} not found")
    return snippet.to_dict()


@router.patch("/snippets/{snippet_id}")
async def update_snippet(
    snippet_id: str,
    body: SnippetUpdateRequest,
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
) -> dict[str, Any]:
    """Apply the fields present in the body. Changed code is re-validated."""
    try:
        snippet = await _service(request).update_snippet(
            auth, snippet_id, body.model_dump(exclude_unset=True)
        )
    except SnippetBoxError:
        raise
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        raise operation_failed("snippet_update_failed", exc, snippet_id=snippet_id) from exc
    return snippet.to_dict()


@router.delete("/snippets/{snippet_id}", status_code=204)
async def delete_snippet(
    snippet_id: str,
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
) -> Response:
    try:
        await _service(request).delete_snippet(auth, snippet_id)
    except SnippetBoxError:
        raise
    except Exception as exc:
        raise operation_failed("snippet_delete_failed", exc, snippet_id=snippet_id) from exc
    return Response(status_code=204)


@router.post("/validate", response_model=ValidateResponse)
async def validate_code(body: ValidateRequest, request: Request) -> ValidateResponse:
    """Run the admission checks without storing anything."""
    result = request.app.state.app_state.validator.validate(body.code)
    return ValidateResponse(**result.to_dict())
