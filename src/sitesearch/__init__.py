"""
sitesearch - incremental full-text search index for static sites.

Collects site pages as the host content graph discovers them, projects them
into search documents through pluggable field resolvers, builds a Fuse.js
index per namespace, caches it, and serves it as a read-only artifact.
"""

__version__ = "0.1.0"

from sitesearch.index.options import SearchIndexOptions  # noqa: E402
from sitesearch.plugin import SearchIndexPlugin  # noqa: E402

__all__ = ["SearchIndexOptions", "SearchIndexPlugin", "__version__"]
