"""Tests for namespace buckets."""

from sitesearch.index.partition import Partitioner


class TestPartitioner:
    def test_lazy_buckets(self):
        partitioner = Partitioner()
        assert len(partitioner) == 0
        assert "meta" not in partitioner
        assert partitioner.documents("meta") == []
        partitioner.add("meta", {"id": "p1"})
        assert "meta" in partitioner
        assert partitioner.namespaces == ["meta"]

    def test_encounter_order_within_bucket(self):
        partitioner = Partitioner()
        for page_id in ("A", "B", "C"):
            partitioner.add_all({"meta": {"id": page_id}, "body": {"id": page_id}})
        assert [d["id"] for d in partitioner.documents("meta")] == ["A", "B", "C"]
        assert [d["id"] for d in partitioner.documents("body")] == ["A", "B", "C"]
        assert dict(partitioner.items()).keys() == {"meta", "body"}
