"""sitesearch.core -- platform primitives shared by the index pipeline.

Architecture::

    errors.py      Structured error hierarchy (SiteSearchError, ConfigError, ...)
    logging.py     structlog configuration and helpers
    settings.py    Environment-driven settings (pydantic-settings)
    hashing.py     Deterministic content digests
    cache.py       CacheBackend protocol, InMemoryCache, RedisCache
    nodes.py       Content-graph Node, NodeLookup/NodeStore protocols
    reporter.py    Non-fatal diagnostics channel
"""

from sitesearch.core.cache import CacheBackend, InMemoryCache, RedisCache, create_cache
from sitesearch.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    IndexBuildError,
    InvalidConfigError,
    ParseNotSupportedError,
    SiteSearchError,
    StorageError,
)
from sitesearch.core.hashing import compute_content_digest
from sitesearch.core.logging import configure_logging, get_logger
from sitesearch.core.nodes import InMemoryNodeStore, Node, NodeLookup, NodeStore
from sitesearch.core.reporter import Diagnostic, Reporter

__all__ = [
    "CacheBackend",
    "InMemoryCache",
    "RedisCache",
    "create_cache",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "IndexBuildError",
    "InvalidConfigError",
    "ParseNotSupportedError",
    "SiteSearchError",
    "StorageError",
    "compute_content_digest",
    "configure_logging",
    "get_logger",
    "InMemoryNodeStore",
    "Node",
    "NodeLookup",
    "NodeStore",
    "Diagnostic",
    "Reporter",
]
