"""Public view route.

GET /view/{id} returns the sandbox manifest for a snippet. The display
flags are always the locked-down preview layout; callers cannot change them.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Request

from snippetbox.api.errors import operation_failed
from snippetbox.core.errors import SnippetBoxError

logger = structlog.get_logger()

router = APIRouter()


@router.get("/view/{snippet_id}", summary="Sandbox manifest for a snippet")
async def view_snippet(snippet_id: str, request: Request) -> dict[str, Any]:
    """Return the manifest the sandbox runtime needs to render the snippet.

    The stored code is normalized again before packaging. A snippet whose
    entry symbol could not be resolved still gets a manifest; it fails
    later inside the runtime.
    """
    try:
        manifest = await request.app.state.app_state.snippets.view_manifest(snippet_id)
    except SnippetBoxError:
        raise
    except Exception as exc:
        raise operation_failed("snippet_view_failed", exc, snippet_id=snippet_id) from exc

    logger.debug("snippet_manifest_served", snippet_id=snippet_id)
    return manifest.to_dict()
