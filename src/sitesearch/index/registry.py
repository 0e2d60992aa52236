"""
Search-index aggregate: the append-only registry of indexed pages.

There is exactly one aggregate per site build. It only records page ids;
pages are re-read from the content graph when the index is built. Each
append produces a new immutable value with the same ``id`` and a freshly
computed ``content_digest``, i.e. a new version of the same logical node.

Invariants:
    - ``id`` never changes (``SEARCH_INDEX_ID``)
    - ``pages`` only grows; order is insertion order; duplicates are kept
    - ``content_digest`` is a pure function of ``pages``

Tags:
    registry, append-only, aggregate, sitesearch
"""

from __future__ import annotations

from dataclasses import dataclass

from sitesearch.core.hashing import compute_content_digest, serialize_content
from sitesearch.core.nodes import Node

SEARCH_INDEX_ID = "SearchIndex < Site"
SEARCH_INDEX_TYPE = "SiteSearchIndex"
PLUGIN_OWNER = "sitesearch"


@dataclass(frozen=True)
class SearchIndexNode:
    """Immutable snapshot of the registry."""

    id: str = SEARCH_INDEX_ID
    pages: tuple[str, ...] = ()
    content_digest: str = ""

    def __post_init__(self) -> None:
        if not self.content_digest:
            object.__setattr__(self, "content_digest", compute_content_digest(list(self.pages)))

    @property
    def content(self) -> str:
        """Serialized page list the digest is computed from."""
        return serialize_content(list(self.pages))

    def to_node(self) -> Node:
        return Node(
            id=self.id,
            type=SEARCH_INDEX_TYPE,
            fields={"pages": list(self.pages)},
            owner=PLUGIN_OWNER,
            content_digest=self.content_digest,
        )

    @classmethod
    def from_node(cls, node: Node) -> SearchIndexNode:
        return cls(
            id=node.id,
            pages=tuple(node.get("pages", ())),
            content_digest=node.content_digest or "",
        )


def create_empty() -> SearchIndexNode:
    """Return a fresh registry with no pages."""
    return SearchIndexNode()


def append_page(registry: SearchIndexNode, page_id: str) -> SearchIndexNode:
    """Return a new registry with ``page_id`` appended.

    ``registry`` is left untouched.
    """
    pages = (*registry.pages, page_id)
    return SearchIndexNode(
        id=registry.id,
        pages=pages,
        content_digest=compute_content_digest(list(pages)),
    )


__all__ = [
    "PLUGIN_OWNER",
    "SEARCH_INDEX_ID",
    "SEARCH_INDEX_TYPE",
    "SearchIndexNode",
    "append_page",
    "create_empty",
]
