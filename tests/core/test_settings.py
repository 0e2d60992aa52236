"""Tests for environment-driven settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from sitesearch.core.settings import SearchIndexSettings, get_settings


class TestSearchIndexSettings:
    def test_defaults(self, monkeypatch):
        for name in ("SITESEARCH_OUTPUT_DIR", "SITESEARCH_CACHE_BACKEND", "SITESEARCH_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = SearchIndexSettings(_env_file=None)
        assert settings.output_dir == Path("public")
        assert settings.cache_backend == "memory"
        assert settings.cache_purpose == "fuse"
        assert settings.digest_keyed_cache is True
        assert settings.api_prefix == "/api/v1"

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("SITESEARCH_OUTPUT_DIR", "build/site")
        monkeypatch.setenv("SITESEARCH_DIGEST_KEYED_CACHE", "false")
        settings = SearchIndexSettings(_env_file=None)
        assert settings.output_dir == Path("build/site")
        assert settings.digest_keyed_cache is False

    def test_rejects_unknown_backend(self):
        with pytest.raises(ValidationError):
            SearchIndexSettings(_env_file=None, cache_backend="memcached")

    def test_rejects_non_positive_ttl(self):
        with pytest.raises(ValidationError):
            SearchIndexSettings(_env_file=None, cache_ttl_seconds=0)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
