"""
CLI: ``sitesearch serve``: serve the index over HTTP.
"""

from __future__ import annotations

from pathlib import Path

import typer

from sitesearch.cli.utils import console, fail, load_nodes
from sitesearch.core.errors import SiteSearchError
from sitesearch.core.logging import configure_logging
from sitesearch.core.nodes import InMemoryNodeStore
from sitesearch.core.settings import get_settings
from sitesearch.index.options import load_options
from sitesearch.plugin import SearchIndexPlugin


def serve(
    documents: Path = typer.Option(
        ..., "--documents", "-d", exists=True, dir_okay=False, help="JSON or JSON-lines file of nodes"
    ),
    options_ref: str = typer.Option(..., "--options", "-o", help="Options as 'module:attribute'"),
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address (default: settings)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (default: settings)"),
) -> None:
    """Start the search-index API server."""
    import uvicorn

    from sitesearch.api import create_app

    settings = get_settings()
    try:
        configure_logging(level=settings.log_level, json_format=settings.json_logs)
        options = load_options(options_ref)
        nodes = load_nodes(documents)
    except SiteSearchError as exc:
        fail(exc)

    plugin = SearchIndexPlugin(InMemoryNodeStore(), options, settings=settings)
    registered = plugin.ingest(nodes)

    bind_host = host or settings.host
    bind_port = port or settings.port
    console.print(
        f"[bold green]Serving search index[/bold green] ({registered} pages) on {bind_host}:{bind_port}"
    )
    uvicorn.run(create_app(plugin), host=bind_host, port=bind_port, log_level=settings.log_level.lower())
