"""
Tests for IndexService (build-or-get with caching).

Covers:
- Flat and namespaced results
- Cache hits short-circuit the resolvers
- Cache keys with and without the registry digest
- Non-fatal reporting of missing index keys
- Single-flight builds, cancellation and failure propagation
- Cache access kept off the event loop thread
"""

import asyncio
import threading

import pytest

from sitesearch.core.cache import InMemoryCache
from sitesearch.core.errors import IndexBuildError
from sitesearch.index.builder import MISSING_KEYS_MESSAGE, IndexService
from sitesearch.index.ingestion import Ingestor
from sitesearch.index.options import SearchIndexOptions
from sitesearch.index.registry import SEARCH_INDEX_ID, SearchIndexNode, append_page, create_empty


def _registry(*page_ids):
    registry = create_empty()
    for page_id in page_ids:
        registry = append_page(registry, page_id)
    return registry


@pytest.fixture
def cache():
    return InMemoryCache(max_size=16)


@pytest.fixture
def service(store, cache, blog_options, reporter):
    return IndexService(store, cache, blog_options, reporter=reporter)


class TestCacheKey:
    def test_digest_keyed(self, service):
        registry = _registry("p1")
        assert service.cache_key(registry) == f"{SEARCH_INDEX_ID}:fuse:{registry.content_digest}"

    def test_identity_only(self, store, cache, blog_options):
        service = IndexService(store, cache, blog_options, purpose="index", digest_keyed=False)
        assert service.cache_key(_registry("p1")) == f"{SEARCH_INDEX_ID}:index"


class TestFlatBuild:
    @pytest.mark.asyncio
    async def test_single_page(self, store, blog_options, service, make_post):
        post = make_post("p1", "Hello")
        store.create_node(post)
        registry = Ingestor(store, blog_options).on_create_node(post)
        assert registry.pages == ("p1",)

        result = await service.build_or_get_index(registry)
        assert result["documents"] == [{"id": "p1", "date": "2020-01-01", "title": "Hello"}]
        assert result["index"]["records"] == [{"i": 0, "$": {"0": {"v": "Hello", "n": 1.0}}}]

    @pytest.mark.asyncio
    async def test_order_preserved(self, store, service, make_post):
        for page_id in ("A", "B", "C"):
            store.create_node(make_post(page_id, f"Post {page_id}"))
        result = await service.build_or_get_index(_registry("A", "B", "C"))
        assert [d["id"] for d in result["documents"]] == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_missing_pages_skipped(self, store, service, make_post):
        store.create_node(make_post("p1", "Hello"))
        result = await service.build_or_get_index(_registry("p1", "ghost"))
        assert [d["id"] for d in result["documents"]] == ["p1"]

    @pytest.mark.asyncio
    async def test_empty_registry(self, service):
        result = await service.build_or_get_index(create_empty())
        assert result == {
            "documents": [],
            "index": {"keys": [{"path": ["title"], "id": "title", "weight": 1, "src": "title"}], "records": []},
        }


class TestCaching:
    @pytest.mark.asyncio
    async def test_hit_skips_resolvers(self, store, service, calls, make_post):
        store.create_node(make_post("p1", "Hello"))
        registry = _registry("p1")
        first = await service.build_or_get_index(registry)
        second = await service.build_or_get_index(registry)
        assert second is first
        assert calls["title"] == 1
        assert service.builds == 1

    @pytest.mark.asyncio
    async def test_new_digest_rebuilds(self, store, service, make_post):
        store.create_node(make_post("p1", "Hello"))
        store.create_node(make_post("p2", "World"))
        registry = _registry("p1")
        await service.build_or_get_index(registry)
        result = await service.build_or_get_index(append_page(registry, "p2"))
        assert [d["id"] for d in result["documents"]] == ["p1", "p2"]
        assert service.builds == 2

    @pytest.mark.asyncio
    async def test_identity_key_serves_stale_value(self, store, cache, blog_options, make_post):
        service = IndexService(store, cache, blog_options, digest_keyed=False)
        store.create_node(make_post("p1", "Hello"))
        store.create_node(make_post("p2", "World"))
        registry = _registry("p1")
        first = await service.build_or_get_index(registry)
        stale = await service.build_or_get_index(append_page(registry, "p2"))
        assert stale is first
        assert service.builds == 1

    @pytest.mark.asyncio
    async def test_concurrent_misses_build_once(self, store, service, make_post):
        store.create_node(make_post("p1", "Hello"))
        registry = _registry("p1")
        results = await asyncio.gather(*(service.build_or_get_index(registry) for _ in range(5)))
        assert service.builds == 1
        assert all(r is results[0] for r in results)

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_fail_joined_callers(self, store, cache, make_post):
        release = threading.Event()

        def slow_title(node, lookup):
            release.wait(5)
            return node.title

        options = SearchIndexOptions(resolvers={"BlogPost": {"title": slow_title}}, fuse_options={"keys": ["title"]})
        service = IndexService(store, cache, options)
        store.create_node(make_post("p1", "Hello"))
        registry = _registry("p1")

        first = asyncio.create_task(service.build_or_get_index(registry))
        await asyncio.sleep(0)
        second = asyncio.create_task(service.build_or_get_index(registry))
        await asyncio.sleep(0)
        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        release.set()
        result = await second
        assert result["documents"] == [{"id": "p1", "date": "2020-01-01", "title": "Hello"}]
        assert service.builds == 1
        assert cache.get(service.cache_key(registry)) is result

    @pytest.mark.asyncio
    async def test_cache_calls_leave_the_event_loop_thread(self, store, blog_options, make_post):
        class ThreadRecordingCache(InMemoryCache):
            threads = []

            def get(self, key):
                self.threads.append(threading.get_ident())
                return super().get(key)

            def set(self, key, value, *, ttl_seconds=None):
                self.threads.append(threading.get_ident())
                super().set(key, value, ttl_seconds=ttl_seconds)

        cache = ThreadRecordingCache(max_size=4)
        service = IndexService(store, cache, blog_options)
        store.create_node(make_post("p1", "Hello"))
        await service.build_or_get_index(_registry("p1"))
        assert len(cache.threads) == 2
        assert threading.get_ident() not in cache.threads

    @pytest.mark.asyncio
    async def test_build_failure_propagates_and_is_not_cached(self, store, cache, blog_options, make_post):
        class Exploding:
            attempts = 0

            def build(self, keys, documents, options=None):
                Exploding.attempts += 1
                raise RuntimeError("engine crashed")

        service = IndexService(store, cache, blog_options, index_builder=Exploding())
        store.create_node(make_post("p1", "Hello"))
        registry = _registry("p1")
        for _ in range(2):
            with pytest.raises(IndexBuildError) as excinfo:
                await service.build_or_get_index(registry)
        assert Exploding.attempts == 2
        assert isinstance(excinfo.value.cause, RuntimeError)
        assert not cache.exists(service.cache_key(registry))


class TestMissingKeys:
    @pytest.mark.asyncio
    async def test_reported_not_raised(self, store, cache, reporter, make_post):
        options = SearchIndexOptions(resolvers={"BlogPost": {"title": lambda node, lookup: node.title}})
        service = IndexService(store, cache, options, reporter=reporter)
        store.create_node(make_post("p1", "Hello"))
        result = await service.build_or_get_index(_registry("p1"))
        assert [d.message for d in reporter.errors] == [MISSING_KEYS_MESSAGE]
        assert result["index"] == {"keys": [], "records": [{"i": 0, "$": {}}]}
        assert len(result["documents"]) == 1


class TestNamespaces:
    @pytest.fixture
    def namespaced_options(self):
        return SearchIndexOptions(
            resolvers={
                "BlogPost": {
                    "meta": {"title": lambda node, lookup: node.title},
                    "body": {"content": lambda node, lookup: node.body},
                }
            },
            fuse_options={"keys": ["title", "content"]},
            use_resolver_namespaces=True,
        )

    @pytest.mark.asyncio
    async def test_one_bucket_per_namespace(self, store, cache, namespaced_options, make_post):
        store.create_node(make_post("p1", "Hello", body="Some text"))
        service = IndexService(store, cache, namespaced_options)
        result = await service.build_or_get_index(_registry("p1"))

        assert set(result) == {"meta", "body"}
        assert result["meta"]["documents"] == [{"id": "p1", "date": "2020-01-01", "title": "Hello"}]
        assert result["body"]["documents"] == [{"id": "p1", "date": "2020-01-01", "content": "Some text"}]
        assert result["meta"]["index"]["records"][0]["$"] == {"0": {"v": "Hello", "n": 1.0}}
        assert result["body"]["index"]["records"][0]["$"] == {"1": {"v": "Some text", "n": 0.707}}

    @pytest.mark.asyncio
    async def test_empty_registry(self, store, cache, namespaced_options):
        service = IndexService(store, cache, namespaced_options)
        assert await service.build_or_get_index(SearchIndexNode()) == {}

    def test_build_failure_carries_namespace(self, store, cache, namespaced_options, make_post):
        class Failing:
            def build(self, keys, documents, options=None):
                raise ValueError("bad documents")

        store.create_node(make_post("p1", "Hello", body="x"))
        service = IndexService(store, cache, namespaced_options, index_builder=Failing())
        with pytest.raises(IndexBuildError) as excinfo:
            service.build(_registry("p1"))
        assert excinfo.value.context.namespace == "meta"
