"""Category and tag API routes.

Provides:
- GET    /api/categories          list categories (newest first)
- POST   /api/categories          create a category
- PATCH  /api/categories/{id}     rename / recolour (creator or admin)
- DELETE /api/categories/{id}     delete (creator or admin)
- GET    /api/tags                list tags (newest first)
- POST   /api/tags                get-or-create a tag by name
- DELETE /api/tags/{id}           delete (creator or admin)
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, Field

from snippetbox.api.auth import get_auth_context
from snippetbox.api.errors import operation_failed
from snippetbox.core.errors import SnippetBoxError
from snippetbox.core.permissions import AuthContext
from snippetbox.core.taxonomy import TaxonomyService

router = APIRouter()


class CategoryCreateRequest(BaseModel):
    name: str = Field(..., description="Category name")
    color: str = Field(default="#6b7280", description="Display colour, e.g. a hex string")


class CategoryUpdateRequest(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None


class TagCreateRequest(BaseModel):
    name: str = Field(..., description="Tag name; an existing tag with this name is reused")


class IdResponse(BaseModel):
    id: str


def _taxonomy(request: Request) -> TaxonomyService:
    return request.app.state.app_state.taxonomy


@router.get("/categories")
async def list_categories(request: Request) -> list[dict[str, Any]]:
    try:
        return [c.to_dict() for c in await _taxonomy(request).list_categories()]
    except Exception as exc:
        raise operation_failed("category_list_failed", exc) from exc


@router.post("/categories", response_model=IdResponse, status_code=201)
async def create_category(
    body: CategoryCreateRequest,
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
) -> IdResponse:
    try:
        return IdResponse(id=await _taxonomy(request).create_category(auth, body.name, body.color))
    except SnippetBoxError:
        raise
    except Exception as exc:
        raise operation_failed("category_create_failed", exc) from exc


@router.patch("/categories/{category_id}")
async def update_category(
    category_id: str,
    body: CategoryUpdateRequest,
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
) -> dict[str, Any]:
    try:
        category = await _taxonomy(request).update_category(
            auth, category_id, name=body.name, color=body.color
        )
    except SnippetBoxError:
        raise
    except Exception as exc:
        raise operation_failed("category_update_failed", exc, category_id=category_id) from exc
    return category.to_dict()


@router.delete("/categories/{category_id}", status_code=204)
async def delete_category(
    category_id: str,
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
) -> Response:
    try:
        await _taxonomy(request).delete_category(auth, category_id)
    except SnippetBoxError:
        raise
    except Exception as exc:
        raise operation_failed("category_delete_failed", exc, category_id=category_id) from exc
    return Response(status_code=204)


@router.get("/tags")
async def list_tags(request: Request) -> list[dict[str, Any]]:
    try:
        return [t.to_dict() for t in await _taxonomy(request).list_tags()]
    except Exception as exc:
        raise operation_failed("tag_list_failed", exc) from exc


@router.post("/tags", response_model=IdResponse)
async def get_or_create_tag(
    body: TagCreateRequest,
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
) -> IdResponse:
    try:
        return IdResponse(id=await _taxonomy(request).get_or_create_tag(auth, body.name))
    except SnippetBoxError:
        raise
    except Exception as exc:
        raise operation_failed("tag_create_failed", exc) from exc


@router.delete("/tags/{tag_id}", status_code=204)
async def delete_tag(
    tag_id: str,
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
) -> Response:
    try:
        await _taxonomy(request).delete_tag(auth, tag_id)
    except SnippetBoxError:
        raise
    except Exception as exc:
        raise operation_failed("tag_delete_failed", exc, tag_id=tag_id) from exc
    return Response(status_code=204)
