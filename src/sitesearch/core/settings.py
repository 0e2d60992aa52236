"""Environment-driven settings for sitesearch.

Code-level plugin options (resolvers, filter, index keys) live in
:class:`sitesearch.index.options.SearchIndexOptions`. Everything that an
operator tunes per environment (log level, cache backend, output directory,
HTTP binding) lives here and is read from ``SITESEARCH_*`` environment
variables or a ``.env`` file.

Examples:
    >>> settings = SearchIndexSettings(output_dir="build/public", cache_backend="memory")
    >>> settings.cache_backend
    'memory'

Tags:
    settings, configuration, pydantic, environment, sitesearch
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SearchIndexSettings(BaseSettings):
    """Settings shared by the plugin, the CLI and the API.

    Order of precedence (highest → lowest):
        1. Explicit keyword arguments
        2. Environment variables (``SITESEARCH_OUTPUT_DIR``, etc.)
        3. ``.env`` file
        4. Defaults below
    """

    model_config = SettingsConfigDict(
        env_prefix="SITESEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = Field(
        default=None,
        description="JSON log output; None picks JSON when stdout is not a tty",
    )

    # ── Output ───────────────────────────────────────────────────
    output_dir: Path = Field(
        default=Path("public"),
        description="Build output directory that receives the index snapshot",
    )

    # ── Cache ────────────────────────────────────────────────────
    cache_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl_seconds: int | None = Field(default=None, ge=1)
    cache_max_size: int = Field(default=1_000, ge=1)
    cache_purpose: str = Field(default="fuse", description="Cache key suffix")
    digest_keyed_cache: bool = Field(
        default=True,
        description="Append the registry content digest to the cache key",
    )

    # ── HTTP ─────────────────────────────────────────────────────
    host: str = "127.0.0.1"
    port: int = 8000
    api_prefix: str = "/api/v1"


@lru_cache(maxsize=1)
def get_settings() -> SearchIndexSettings:
    """Cached settings: loaded once per process."""
    return SearchIndexSettings()
