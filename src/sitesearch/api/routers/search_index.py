"""
Search-index router: the query surface for the built index.

Endpoints:
    GET  /search-index          Built (or cached) index and documents
    POST /search-index          Always 400: the index is output-only
    GET  /search-index/status   Registry size, digest and cache status

The ``GET`` payload is the scalar value itself: ``{"documents", "index"}``
or ``{namespace: {"documents", "index"}}``.
"""

from __future__ import annotations

import asyncio
from typing import Any

from fastapi import APIRouter, Body

from sitesearch.api.deps import Plugin
from sitesearch.api.schemas import DiagnosticSchema, SearchIndexStatus
from sitesearch.index.serving import SearchIndexScalar

router = APIRouter(prefix="/search-index")


@router.get("")
async def get_search_index(plugin: Plugin) -> Any:
    """Return the serialized index, building it on first request."""
    return await plugin.resolve_search_index()


@router.post("")
async def post_search_index(value: Any = Body(default=None)) -> Any:
    """Reject client-supplied values; the scalar cannot be parsed."""
    return SearchIndexScalar.parse_value(value)


@router.get("/status", response_model=SearchIndexStatus)
async def get_search_index_status(plugin: Plugin) -> SearchIndexStatus:
    registry = plugin.registry()
    cache_key = plugin.index_service.cache_key(registry)
    return SearchIndexStatus(
        id=registry.id,
        pages=len(registry.pages),
        content_digest=registry.content_digest,
        cache_key=cache_key,
        cached=await asyncio.to_thread(plugin.cache.exists, cache_key),
        namespaced=plugin.options.use_resolver_namespaces,
        diagnostics=[
            DiagnosticSchema(level=d.level, message=d.message, error=d.error)
            for d in plugin.reporter.diagnostics
        ],
    )
