"""
Site-build lifecycle hooks for the search index.

:class:`SearchIndexPlugin` is the composition root a host site generator
talks to. It wires the ingestor, the index service and the serving adapter
around one node store, one cache and one reporter, and exposes the hooks a
build calls in order::

    plugin = SearchIndexPlugin(store, options)
    plugin.source_nodes()                  # keep our nodes across rebuilds
    for node in discovered:
        store.create_node(node)
        plugin.on_create_node(node)        # register eligible pages
    await plugin.resolve_search_index()    # build or read the cached index
    await plugin.on_post_build()           # optional JSON snapshot

Tags:
    plugin, lifecycle, composition-root, sitesearch
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from sitesearch.core.cache import CacheBackend, create_cache
from sitesearch.core.errors import SiteSearchError
from sitesearch.core.logging import get_logger
from sitesearch.core.nodes import Node, NodeStore
from sitesearch.core.reporter import Reporter
from sitesearch.core.settings import SearchIndexSettings
from sitesearch.index.builder import IndexService
from sitesearch.index.fuse import IndexBuilder
from sitesearch.index.ingestion import Ingestor
from sitesearch.index.options import SearchIndexOptions
from sitesearch.index.registry import PLUGIN_OWNER, SEARCH_INDEX_TYPE, SearchIndexNode
from sitesearch.index.serving import FIELD_NAME, SearchIndexField, snapshot_path, write_snapshot

logger = get_logger(__name__)


class SearchIndexPlugin:
    """Search-index plugin bound to one content graph."""

    def __init__(
        self,
        store: NodeStore,
        options: SearchIndexOptions,
        *,
        settings: SearchIndexSettings | None = None,
        cache: CacheBackend | None = None,
        reporter: Reporter | None = None,
        index_builder: IndexBuilder | None = None,
    ):
        self.settings = settings or SearchIndexSettings()
        self.options = options
        self.store = store
        self.cache = cache if cache is not None else create_cache(self.settings)
        self.reporter = reporter or Reporter()
        self.ingestor = Ingestor(store, options)
        self.index_service = IndexService(
            store,
            self.cache,
            options,
            reporter=self.reporter,
            index_builder=index_builder,
            purpose=self.settings.cache_purpose,
            digest_keyed=self.settings.digest_keyed_cache,
        )
        self.field = SearchIndexField(self.index_service.build_or_get_index)

    # ── source / ingestion ───────────────────────────────────────────

    def source_nodes(self) -> int:
        """Touch every node this plugin owns; returns how many were touched."""
        owned = [n for n in self.store.get_nodes() if n.owner == PLUGIN_OWNER]
        for node in owned:
            self.store.touch_node(node.id)
        logger.debug("owned_nodes_touched", count=len(owned))
        return len(owned)

    def on_create_node(self, node: Node) -> SearchIndexNode | None:
        return self.ingestor.on_create_node(node)

    def ingest(self, nodes: Iterable[Node]) -> int:
        """Store each node and run it through :meth:`on_create_node`.

        Returns the number of nodes registered for indexing.
        """
        registered = 0
        for node in nodes:
            self.store.create_node(node)
            if self.on_create_node(node) is not None:
                registered += 1
        return registered

    # ── query ────────────────────────────────────────────────────────

    def set_fields_on_node_type(self, type_name: str) -> dict[str, SearchIndexField] | None:
        """Fields this plugin adds to ``type_name`` (only ``SiteSearchIndex``)."""
        if type_name != SEARCH_INDEX_TYPE:
            return None
        return {FIELD_NAME: self.field}

    def registry(self) -> SearchIndexNode:
        return self.ingestor.current()

    async def resolve_search_index(self) -> Any:
        """Resolve the ``fuse`` field of the current aggregate."""
        return await self.field.resolve(self.registry())

    async def query(self) -> dict[str, Any]:
        """Read the served artifact the way a client query would."""
        return {FIELD_NAME: await self.resolve_search_index()}

    # ── post build ───────────────────────────────────────────────────

    async def on_post_build(self, output_dir: str | Path | None = None) -> Path | None:
        """Write the served artifact to ``<output_dir>/<name>.json``.

        Does nothing unless ``copy_serialization_to_file`` is configured.
        Failures are reported, never raised.
        """
        target = self.options.copy_serialization_to_file
        if not target:
            return None
        try:
            path = snapshot_path(output_dir or self.settings.output_dir, target)
            data = await self.query()
            self.reporter.info("snapshot_writing", path=str(path))
            write_snapshot(path, data)
        except (SiteSearchError, OSError) as exc:
            self.reporter.error("Writing of search index to file failed.", exc)
            return None
        logger.info("snapshot_written", path=str(path))
        return path
