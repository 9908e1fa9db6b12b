"""Mapping of domain errors to HTTP responses.

Validator reasons are returned verbatim. Anything unexpected becomes a
generic "operation failed" with the detail logged.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from snippetbox.core.errors import (
    AuthenticationRequired,
    NotFoundError,
    PermissionDenied,
    SnippetRejected,
)

logger = structlog.get_logger()

OPERATION_FAILED = "operation failed"


def operation_failed(event: str, exc: Exception, **context: object) -> HTTPException:
    """Log an unexpected failure and return the generic 500 to raise."""
    logger.error(event, error=str(exc), error_type=type(exc).__name__, **context)
    return HTTPException(status_code=500, detail=OPERATION_FAILED)


def install_error_handlers(app: FastAPI) -> None:
    """Register handlers for the domain exceptions."""

    @app.exception_handler(SnippetRejected)
    async def _rejected(request: Request, exc: SnippetRejected) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.reason})

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(PermissionDenied)
    async def _denied(request: Request, exc: PermissionDenied) -> JSONResponse:
        status_code = 401 if isinstance(exc, AuthenticationRequired) else 403
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})
