"""
Index service: build the search index on demand and memoize it.

Manifesto:
    Building an index means re-reading every registered page, running every
    field resolver and tokenizing every indexed field. That work is done at
    most once per cache key; every later request for the same content is a
    cache read.

Architecture:
    ::

        build_or_get_index(registry)
          │
          ├─ key = "<registry.id>:<purpose>[:<content_digest>]"
          ├─ in-flight task for key? ──yes──▶ await it (shielded)
          │
          └─ new task owned by the service
               ├─ cache.get(key) ──hit──▶ return cached value verbatim
               ├─ report missing index keys (non-fatal)
               ├─ for page_id in registry.pages:
               │     node = lookup.get_node(page_id)   (missing → skipped)
               │     partitioner.add_all(project(...))
               ├─ per bucket: index_builder.build(keys, documents, options)
               ├─ assemble {documents, index} or {namespace: {documents, index}}
               └─ cache.set(key, result)

Guardrails:
    Concurrent requests for one key await the same service-owned task
    instead of building twice. Callers await it through ``asyncio.shield``,
    so a cancelled caller never cancels the build the others are waiting on,
    and the result is still cached. Cache reads and writes run in a worker
    thread so a network-backed cache never blocks the event loop.

    The in-flight map is per service instance, so processes sharing a Redis
    cache can still build the same key concurrently; every such build is
    valid.

Tags:
    index, cache, single-flight, namespaces, sitesearch
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

from sitesearch.core.cache import CacheBackend
from sitesearch.core.errors import IndexBuildError, InvalidConfigError, SiteSearchError
from sitesearch.core.logging import get_logger
from sitesearch.core.nodes import NodeLookup
from sitesearch.core.reporter import Reporter
from sitesearch.index.fuse import FuseIndexBuilder, IndexBuilder
from sitesearch.index.options import SearchIndexOptions
from sitesearch.index.partition import Partitioner
from sitesearch.index.projection import DEFAULT_NAMESPACE, project
from sitesearch.index.registry import SearchIndexNode

logger = get_logger(__name__)

MISSING_KEYS_MESSAGE = "Fuse.js requires keys to be set in fuse_options"


class IndexService:
    """Builds, caches and returns the search index for a registry."""

    def __init__(
        self,
        lookup: NodeLookup,
        cache: CacheBackend,
        options: SearchIndexOptions,
        *,
        reporter: Reporter | None = None,
        index_builder: IndexBuilder | None = None,
        purpose: str = "fuse",
        digest_keyed: bool = True,
    ):
        self._lookup = lookup
        self._cache = cache
        self._options = options
        self._reporter = reporter or Reporter()
        self._index_builder = index_builder or FuseIndexBuilder()
        self._purpose = purpose
        self._digest_keyed = digest_keyed
        self._in_flight: dict[str, asyncio.Future[Any]] = {}
        self.builds = 0

    def cache_key(self, registry: SearchIndexNode) -> str:
        key = f"{registry.id}:{self._purpose}"
        if self._digest_keyed:
            key = f"{key}:{registry.content_digest}"
        return key

    async def build_or_get_index(self, registry: SearchIndexNode) -> Any:
        """Return the cached index for ``registry``, building it on a miss."""
        key = self.cache_key(registry)
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._get_or_build(key, registry))
            self._in_flight[key] = task
            task.add_done_callback(lambda done: self._finish(key, done))
        else:
            logger.debug("index_build_joined", cache_key=key)
        return await asyncio.shield(task)

    async def _get_or_build(self, key: str, registry: SearchIndexNode) -> Any:
        cached = await asyncio.to_thread(self._cache.get, key)
        if cached is not None:
            logger.debug("index_cache_hit", cache_key=key)
            return cached
        result = await asyncio.to_thread(self.build, registry)
        await asyncio.to_thread(self._cache.set, key, result)
        return result

    def _finish(self, key: str, task: asyncio.Future[Any]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # mark the exception retrieved even when every caller was cancelled
        if not task.cancelled() and task.exception() is not None:
            logger.debug("index_build_failed", cache_key=key, error=str(task.exception()))

    def build(self, registry: SearchIndexNode) -> Any:
        """Build the index for ``registry`` without touching the cache."""
        started = time.perf_counter()
        keys = self._options.index_keys
        if not keys:
            self._reporter.error(MISSING_KEYS_MESSAGE)

        partitioner = Partitioner()
        skipped = 0
        for page_id in registry.pages:
            node = self._lookup.get_node(page_id)
            if node is None:
                skipped += 1
                logger.debug("page_missing", node_id=page_id)
                continue
            partitioner.add_all(
                project(
                    node.type,
                    node,
                    self._lookup,
                    self._options.resolvers,
                    use_namespaces=self._options.use_resolver_namespaces,
                )
            )

        if self._options.use_resolver_namespaces:
            result: Any = {
                namespace: self._bucket(keys, documents, namespace)
                for namespace, documents in partitioner.items()
            }
        else:
            result = self._bucket(keys, partitioner.documents(DEFAULT_NAMESPACE), None)

        self.builds += 1
        logger.info(
            "index_built",
            registry_id=registry.id,
            pages=len(registry.pages),
            skipped=skipped,
            namespaces=partitioner.namespaces,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return result

    def _bucket(self, keys: list[Any], documents: list[dict[str, Any]], namespace: str | None) -> dict[str, Any]:
        try:
            index = self._index_builder.build(keys, documents, self._options.fuse_options)
        except InvalidConfigError:
            raise
        except SiteSearchError as exc:
            raise exc.with_context(namespace=namespace)
        except Exception as exc:
            raise IndexBuildError(f"Index build failed: {exc}", cause=exc).with_context(namespace=namespace) from exc
        return {"documents": documents, "index": index}
