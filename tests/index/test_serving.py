"""Tests for the output-only scalar and snapshot helpers."""

import json

import pytest

from sitesearch.core.errors import ParseNotSupportedError, StorageError
from sitesearch.index.registry import create_empty
from sitesearch.index.serving import (
    SCALAR_NAME,
    SearchIndexField,
    SearchIndexScalar,
    snapshot_path,
    write_snapshot,
)


class TestSearchIndexScalar:
    def test_name(self):
        assert SCALAR_NAME == "SiteSearchIndex_Fuse"

    def test_serialize_is_identity(self):
        value = {"documents": [], "index": {}}
        assert SearchIndexScalar.serialize(value) is value

    def test_parse_value_rejected(self):
        with pytest.raises(ParseNotSupportedError, match="Not supported"):
            SearchIndexScalar.parse_value({"documents": []})

    def test_parse_literal_rejected(self):
        with pytest.raises(ParseNotSupportedError):
            SearchIndexScalar.parse_literal("{}")


class TestSearchIndexField:
    @pytest.mark.asyncio
    async def test_resolve_delegates(self):
        seen = []

        async def resolver(node):
            seen.append(node)
            return {"documents": []}

        registry = create_empty()
        field = SearchIndexField(resolver)
        assert await field.resolve(registry) == {"documents": []}
        assert seen == [registry]


class TestSnapshotPath:
    @pytest.mark.parametrize(
        ("configured", "expected"),
        [
            ("search-index", "search-index.json"),
            ("search-index.json", "search-index.json"),
            ("nested/dir/index.json", "index.json"),
            ("archive.json.json", "archive.json.json"),
        ],
    )
    def test_basename(self, tmp_path, configured, expected):
        assert snapshot_path(tmp_path, configured) == tmp_path / expected

    def test_empty_name(self, tmp_path):
        with pytest.raises(StorageError):
            snapshot_path(tmp_path, ".json")


class TestWriteSnapshot:
    def test_writes_json(self, tmp_path):
        path = tmp_path / "out" / "index.json"
        write_snapshot(path, {"fuse": {"documents": ["é"]}})
        assert json.loads(path.read_text(encoding="utf-8")) == {"fuse": {"documents": ["é"]}}

    def test_unserializable(self, tmp_path):
        with pytest.raises(StorageError):
            write_snapshot(tmp_path / "index.json", {"fuse": object()})

    def test_write_failure(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(StorageError) as excinfo:
            write_snapshot(blocker / "index.json", {})
        assert excinfo.value.context.path == str(blocker / "index.json")
