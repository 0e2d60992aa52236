"""
FastAPI dependencies: the plugin instance stashed on ``app.state``.

Usage in routers::

    from sitesearch.api.deps import Plugin

    @router.get("/search-index")
    async def get_index(plugin: Plugin):
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from sitesearch.plugin import SearchIndexPlugin


def get_plugin(request: Request) -> SearchIndexPlugin:
    """The plugin the app was created with."""
    return request.app.state.plugin


Plugin = Annotated[SearchIndexPlugin, Depends(get_plugin)]
