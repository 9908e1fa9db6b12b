"""FastAPI application factory with dependency injection.

The app receives the document store and settings from main.py (or a test)
rather than creating them itself.
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from snippetbox import __version__
from snippetbox.api.auth import AdminPolicy
from snippetbox.api.errors import install_error_handlers
from snippetbox.config import Settings
from snippetbox.core.snippets import SnippetService
from snippetbox.core.taxonomy import TaxonomyService
from snippetbox.db.base import DocumentStore
from snippetbox.sandbox.manifest import ManifestOptions
from snippetbox.sandbox.validator import SnippetValidator


class AppState:
    """Application state container for dependency injection.

    Holds the services shared by every route.
    """

    def __init__(
        self,
        settings: Settings,
        store: DocumentStore,
        admin_policy: Optional[AdminPolicy] = None,
    ) -> None:
        """Initialize app state.

        Args:
            settings: Loaded application settings.
            store: Opened document store.
            admin_policy: Privilege policy; built from settings if None.
        """
        self.settings = settings
        self.store = store
        self.validator = SnippetValidator()
        self.admin_policy = admin_policy or AdminPolicy.from_settings(settings)
        self.snippets = SnippetService(
            store,
            validator=self.validator,
            manifest_options=ManifestOptions(css_framework_url=settings.css_framework_url),
            public_base_url=settings.public_base_url,
        )
        self.taxonomy = TaxonomyService(store)


def create_app(
    store: DocumentStore,
    settings: Optional[Settings] = None,
    admin_policy: Optional[AdminPolicy] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Document store collaborator (already opened).
        settings: Application settings; loaded from the environment if None.
        admin_policy: Optional override of the admin policy.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="SnippetBox",
        description="Shareable UI-component snippets served through a sandboxed runtime",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.app_state = AppState(settings=settings, store=store, admin_policy=admin_policy)
    install_error_handlers(app)

    from snippetbox.api.routes_snippets import router as snippets_router
    from snippetbox.api.routes_taxonomy import router as taxonomy_router
    from snippetbox.api.routes_view import router as view_router

    app.include_router(snippets_router, prefix="/api", tags=["snippets"])
    app.include_router(taxonomy_router, prefix="/api", tags=["taxonomy"])
    app.include_router(view_router, tags=["view"])

    @app.get("/", tags=["health"])
    async def root() -> dict[str, str]:
        """Root endpoint - basic health check."""
        return {
            "status": "ok",
            "service": "SnippetBox API",
            "version": __version__,
        }

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        """Health check endpoint for load balancers and monitoring."""
        return {
            "status": "healthy",
            "store_backend": settings.store_backend,
        }

    return app
