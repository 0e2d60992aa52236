"""Index pipeline: registry, ingestion, projection, partitioning, building, serving."""

from sitesearch.index.builder import IndexService
from sitesearch.index.fuse import FuseIndexBuilder, IndexBuilder
from sitesearch.index.ingestion import Ingestor
from sitesearch.index.options import FuseOptions, IndexKey, SearchIndexOptions, load_options
from sitesearch.index.partition import Partitioner
from sitesearch.index.projection import DEFAULT_NAMESPACE, create_document, project
from sitesearch.index.registry import (
    SEARCH_INDEX_ID,
    SEARCH_INDEX_TYPE,
    SearchIndexNode,
    append_page,
    create_empty,
)
from sitesearch.index.serving import SearchIndexField, SearchIndexScalar

__all__ = [
    "DEFAULT_NAMESPACE",
    "FuseIndexBuilder",
    "FuseOptions",
    "IndexBuilder",
    "IndexKey",
    "IndexService",
    "Ingestor",
    "Partitioner",
    "SEARCH_INDEX_ID",
    "SEARCH_INDEX_TYPE",
    "SearchIndexField",
    "SearchIndexNode",
    "SearchIndexOptions",
    "SearchIndexScalar",
    "append_page",
    "create_document",
    "create_empty",
    "load_options",
    "project",
]
