"""
Eligibility filter and page registration.

The host calls :meth:`Ingestor.on_create_node` once per discovered node.
Eligible nodes have their id appended to the search-index aggregate, which
is then upserted back into the content graph. Projection does not happen
here; it is deferred until the index is requested.

The read-modify-write of the aggregate runs under a lock, so concurrent
ingestion calls never lose an append.
"""

from __future__ import annotations

import threading

from sitesearch.core.logging import get_logger
from sitesearch.core.nodes import Node, NodeStore
from sitesearch.index.options import SearchIndexOptions
from sitesearch.index.registry import (
    SEARCH_INDEX_ID,
    SearchIndexNode,
    append_page,
    create_empty,
)

logger = get_logger(__name__)


class Ingestor:
    """Registers eligible nodes in the search-index aggregate."""

    def __init__(self, store: NodeStore, options: SearchIndexOptions):
        self._store = store
        self._options = options
        self._lock = threading.Lock()

    def is_eligible(self, node: Node) -> bool:
        """Check the type tag against the resolvers, then the optional filter."""
        if node.type not in self._options.resolvers:
            return False
        node_filter = self._options.filter
        if node_filter is not None and not node_filter(node, self._store):
            logger.debug("page_filtered", node_id=node.id, node_type=node.type)
            return False
        return True

    def on_create_node(self, node: Node) -> SearchIndexNode | None:
        """Register ``node`` if eligible.

        Returns:
            The new aggregate, or ``None`` when the node was rejected.
        """
        if not self.is_eligible(node):
            return None

        with self._lock:
            registry = self.current()
            updated = append_page(registry, node.id)
            self._store.create_node(updated.to_node())

        logger.debug(
            "page_registered",
            node_id=node.id,
            node_type=node.type,
            pages=len(updated.pages),
            content_digest=updated.content_digest,
        )
        return updated

    def current(self) -> SearchIndexNode:
        """Fetch the aggregate from the store, or an empty one."""
        existing = self._store.get_node(SEARCH_INDEX_ID)
        if existing is None:
            return create_empty()
        return SearchIndexNode.from_node(existing)
