"""
FastAPI application factory.

``create_app()`` wires the search-index plugin, error handlers and routers
into a single ``FastAPI`` instance.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from sitesearch import __version__
from sitesearch.api.errors import sitesearch_error_handler, unhandled_exception_handler
from sitesearch.core.errors import SiteSearchError
from sitesearch.core.logging import get_logger
from sitesearch.plugin import SearchIndexPlugin

log = get_logger("sitesearch.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: keep the plugin's nodes alive while serving."""
    plugin: SearchIndexPlugin = app.state.plugin
    touched = plugin.source_nodes()
    log.info("sitesearch API starting", version=app.version, owned_nodes=touched)
    yield
    log.info("sitesearch API shutting down")


def create_app(plugin: SearchIndexPlugin) -> FastAPI:
    """Build and return a FastAPI application serving ``plugin``'s index."""
    settings = plugin.settings
    app = FastAPI(
        title="sitesearch API",
        version=__version__,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )
    app.state.plugin = plugin

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(SiteSearchError, sitesearch_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    from sitesearch.api.routers import search_index

    app.include_router(search_index.router, prefix=settings.api_prefix, tags=["search-index"])

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app
