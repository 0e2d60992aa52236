"""
Shared pytest fixtures for sitesearch tests.

This module provides:
- An in-memory node store and a blog-post node factory
- Options whose resolvers count their calls (to observe cache hits)
- Settings isolated from the environment and a ready-made plugin

Usage:
    def test_something(plugin, make_post):
        plugin.ingest([make_post("p1", "Hello")])
"""

from collections import Counter
from typing import Any, Callable

import pytest

from sitesearch.core.cache import InMemoryCache
from sitesearch.core.nodes import InMemoryNodeStore, Node
from sitesearch.core.reporter import Reporter
from sitesearch.core.settings import SearchIndexSettings, get_settings
from sitesearch.index.options import SearchIndexOptions
from sitesearch.plugin import SearchIndexPlugin


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Drop the cached process settings between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_post() -> Callable[..., Node]:
    """Factory for ``BlogPost`` nodes."""

    def _make(node_id: str, title: str, date: str = "2020-01-01", **fields: Any) -> Node:
        return Node(id=node_id, type="BlogPost", fields={"title": title, "date": date, **fields})

    return _make


@pytest.fixture
def store() -> InMemoryNodeStore:
    return InMemoryNodeStore()


@pytest.fixture
def calls() -> Counter:
    """Resolver call counter keyed by field name."""
    return Counter()


@pytest.fixture
def blog_options(calls: Counter) -> SearchIndexOptions:
    def title(node, lookup):
        calls["title"] += 1
        return node.title

    return SearchIndexOptions(
        resolvers={"BlogPost": {"title": title}},
        fuse_options={"keys": ["title"]},
    )


@pytest.fixture
def settings(tmp_path) -> SearchIndexSettings:
    return SearchIndexSettings(_env_file=None, output_dir=tmp_path / "public")


@pytest.fixture
def reporter() -> Reporter:
    return Reporter("sitesearch.tests")


@pytest.fixture
def plugin(store, blog_options, settings, reporter) -> SearchIndexPlugin:
    return SearchIndexPlugin(
        store,
        blog_options,
        settings=settings,
        cache=InMemoryCache(max_size=16),
        reporter=reporter,
    )
