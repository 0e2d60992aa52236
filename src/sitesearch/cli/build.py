"""
CLI: ``sitesearch build``: index a documents file and write the snapshot.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from sitesearch.cli.utils import fail, load_nodes, output_summary, summarize
from sitesearch.core.errors import SiteSearchError
from sitesearch.core.logging import LogContext, configure_logging
from sitesearch.core.nodes import InMemoryNodeStore
from sitesearch.core.settings import get_settings
from sitesearch.index.options import load_options
from sitesearch.plugin import SearchIndexPlugin


def build(
    documents: Path = typer.Option(
        ..., "--documents", "-d", exists=True, dir_okay=False, help="JSON or JSON-lines file of nodes"
    ),
    options_ref: str = typer.Option(..., "--options", "-o", help="Options as 'module:attribute'"),
    output_dir: Path | None = typer.Option(None, "--output-dir", help="Snapshot directory (default: settings)"),
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON"),
) -> None:
    """Build the search index for a set of nodes."""
    settings = get_settings()
    try:
        configure_logging(level=settings.log_level, json_format=settings.json_logs)
        options = load_options(options_ref)
        nodes = load_nodes(documents)
    except SiteSearchError as exc:
        fail(exc)

    plugin = SearchIndexPlugin(InMemoryNodeStore(), options, settings=settings)

    async def run() -> tuple[object, Path | None]:
        async with LogContext(documents=str(documents)):
            result = await plugin.resolve_search_index()
            snapshot = await plugin.on_post_build(output_dir)
        return result, snapshot

    registered = plugin.ingest(nodes)
    try:
        result, snapshot = asyncio.run(run())
    except SiteSearchError as exc:
        fail(exc)

    output_summary(
        summarize(result, options.use_resolver_namespaces),
        registered=registered,
        snapshot=snapshot,
        reporter=plugin.reporter,
        as_json=as_json,
    )
