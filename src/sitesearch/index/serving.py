"""
Serving adapter: the output-only scalar and the post-build snapshot.

The built artifact is exposed to the query layer as a single scalar field
on the ``SiteSearchIndex`` node type. The scalar serializes the artifact
unchanged and refuses every attempt to parse a client-supplied value.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from sitesearch.core.errors import ParseNotSupportedError, StorageError
from sitesearch.core.logging import get_logger
from sitesearch.index.registry import SEARCH_INDEX_TYPE, SearchIndexNode

logger = get_logger(__name__)

SCALAR_NAME = f"{SEARCH_INDEX_TYPE}_Fuse"
FIELD_NAME = "fuse"


class SearchIndexScalar:
    """Scalar type carrying the serialized index and documents."""

    name = SCALAR_NAME
    description = "Serialized fusejs search index and documents"

    @staticmethod
    def serialize(value: Any) -> Any:
        return value

    @staticmethod
    def parse_value(value: Any) -> Any:
        raise ParseNotSupportedError(SCALAR_NAME)

    @staticmethod
    def parse_literal(value: Any, variables: dict[str, Any] | None = None) -> Any:
        raise ParseNotSupportedError(SCALAR_NAME)


class SearchIndexField:
    """The ``fuse`` field added to the ``SiteSearchIndex`` type.

    ``resolve`` delegates to the index service and serializes through
    :class:`SearchIndexScalar`.
    """

    type = SearchIndexScalar
    name = FIELD_NAME

    def __init__(self, resolver: Callable[[SearchIndexNode], Awaitable[Any]]):
        self._resolver = resolver

    async def resolve(self, node: SearchIndexNode) -> Any:
        value = await self._resolver(node)
        return self.type.serialize(value)


def snapshot_path(output_dir: str | Path, copy_serialization_to_file: str) -> Path:
    """Return ``<output_dir>/<name>.json`` for the configured file name.

    Only the basename of the configured value is used; a trailing ``.json``
    is not doubled.
    """
    name = Path(copy_serialization_to_file).name
    if name.endswith(".json"):
        name = name[: -len(".json")]
    if not name:
        raise StorageError(f"Invalid snapshot file name: {copy_serialization_to_file!r}")
    return Path(output_dir) / f"{name}.json"


def write_snapshot(path: Path, value: Any) -> Path:
    """Serialize ``value`` to JSON and write it to ``path``.

    Raises:
        StorageError: If serialization or the write fails.
    """
    try:
        text = json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise StorageError(f"Search index is not JSON-serializable: {exc}", cause=exc).with_context(
            path=str(path)
        ) from exc
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"Cannot write {path}: {exc}", cause=exc).with_context(path=str(path)) from exc
    logger.debug("snapshot_bytes_written", path=str(path), size=len(text))
    return path
