"""Tests for field projection."""

from sitesearch.core.nodes import Node
from sitesearch.index.projection import DEFAULT_NAMESPACE, create_document, project


def _title(node, lookup):
    return node.title


class TestCreateDocument:
    def test_id_date_and_fields(self, store, make_post):
        document = create_document({"title": _title}, make_post("p1", "Hello"), store)
        assert document == {"id": "p1", "date": "2020-01-01", "title": "Hello"}

    def test_date_missing(self, store):
        node = Node(id="x", type="Page", fields={"title": "T"})
        assert create_document({"title": _title}, node, store)["date"] is None

    def test_resolver_uses_lookup(self, store, make_post):
        store.create_node(Node(id="a1", type="Author", fields={"name": "Ann"}))
        resolvers = {"author": lambda node, lookup: lookup.get_node(node.author).name}
        document = create_document(resolvers, make_post("p1", "Hi", author="a1"), store)
        assert document["author"] == "Ann"

    def test_values_stored_as_is(self, store, make_post):
        document = create_document({"tags": lambda n, l: ["a", "b"]}, make_post("p1", "Hi"), store)
        assert document["tags"] == ["a", "b"]


class TestProject:
    def test_flat(self, store, make_post):
        resolvers = {"BlogPost": {"title": _title}}
        projected = project("BlogPost", make_post("p1", "Hello"), store, resolvers)
        assert projected == {DEFAULT_NAMESPACE: {"id": "p1", "date": "2020-01-01", "title": "Hello"}}

    def test_unknown_type_skipped(self, store, make_post):
        assert project("Author", make_post("p1", "Hello"), store, {"BlogPost": {"title": _title}}) == {}

    def test_namespaced(self, store, make_post):
        resolvers = {
            "BlogPost": {
                "meta": {"title": _title},
                "body": {"content": lambda node, lookup: node.body},
            }
        }
        projected = project("BlogPost", make_post("p1", "Hello", body="Text"), store, resolvers, use_namespaces=True)
        assert projected == {
            "meta": {"id": "p1", "date": "2020-01-01", "title": "Hello"},
            "body": {"id": "p1", "date": "2020-01-01", "content": "Text"},
        }

    def test_namespaced_skips_only_none_entries(self, store, make_post):
        resolvers = {"BlogPost": {"meta": {"title": _title}, "body": None, "stub": {}}}
        projected = project("BlogPost", make_post("p1", "Hello"), store, resolvers, use_namespaces=True)
        assert list(projected) == ["meta", "stub"]
        assert projected["stub"] == {"id": "p1", "date": "2020-01-01"}
