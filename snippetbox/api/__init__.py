"""HTTP API: FastAPI application, routes and auth-context dependency."""
