"""
Content-graph nodes and the lookup/store protocols.

The host site generator owns the content graph: it discovers pages, stores
them as nodes, and hands each new node to the search-index plugin. The
plugin only ever needs three read capabilities (single node, nodes by type,
all nodes) plus an upsert for its own aggregate node.

Architecture:
    ::

        NodeLookup (Protocol)       - get_node / get_nodes_by_type / get_nodes
        └── NodeStore (Protocol)    - + create_node (upsert) / touch_node
            └── InMemoryNodeStore   - dict-backed store for the CLI, API and tests

Tags:
    content-graph, nodes, protocol, sitesearch
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Protocol, runtime_checkable

from sitesearch.core.errors import InvalidConfigError
from sitesearch.core.hashing import compute_content_digest
from sitesearch.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Node:
    """A node of the host content graph.

    ``fields`` holds the node payload. Resolvers can read it as
    ``node["title"]``, ``node.get("title")`` or ``node.title``.
    """

    id: str
    type: str
    fields: Mapping[str, Any] = field(default_factory=dict)
    owner: str | None = None
    content_digest: str | None = None

    @property
    def date(self) -> Any:
        return self.fields.get("date")

    def __getitem__(self, key: str) -> Any:
        return self.fields[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        payload = self.__dict__.get("fields", {})
        try:
            return payload[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} has no field {name!r}") from None

    def with_digest(self) -> Node:
        """Return this node with ``content_digest`` filled in from its fields."""
        if self.content_digest is not None:
            return self
        return replace(self, content_digest=compute_content_digest(dict(self.fields)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Node:
        """Build a node from a plain mapping.

        The type tag is read from ``type`` or ``internal.type``; every key
        other than ``id``, ``type`` and ``internal`` becomes a field.
        """
        if "id" not in data:
            raise InvalidConfigError("node.id", dict(data), "Node data requires an 'id'")
        internal = data.get("internal") or {}
        type_tag = data.get("type") or internal.get("type")
        if not type_tag:
            raise InvalidConfigError("node.type", data["id"], f"Node {data['id']!r} has no type")
        payload = {k: v for k, v in data.items() if k not in ("id", "type", "internal")}
        return cls(
            id=str(data["id"]),
            type=str(type_tag),
            fields=payload,
            owner=internal.get("owner"),
            content_digest=internal.get("contentDigest") or internal.get("content_digest"),
        )


@runtime_checkable
class NodeLookup(Protocol):
    """Read capabilities handed to field resolvers and filters."""

    def get_node(self, node_id: str) -> Node | None: ...

    def get_nodes_by_type(self, type_tag: str) -> list[Node]: ...

    def get_nodes(self) -> list[Node]: ...


@runtime_checkable
class NodeStore(NodeLookup, Protocol):
    """Lookup plus the write operations the plugin relies on."""

    def create_node(self, node: Node) -> bool:
        """Upsert ``node``; return ``True`` when its content digest changed."""
        ...

    def touch_node(self, node_id: str) -> None:
        """Mark a node as still alive in the current build."""
        ...


class InMemoryNodeStore:
    """Dict-backed :class:`NodeStore`.

    Nodes keep insertion order. Upserts compare content digests so that
    re-creating an unchanged node is a no-op.
    """

    def __init__(self, nodes: list[Node] | None = None):
        self._nodes: dict[str, Node] = {}
        self._lock = threading.Lock()
        for node in nodes or []:
            self.create_node(node)

    def get_node(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    def get_nodes_by_type(self, type_tag: str) -> list[Node]:
        return [n for n in self._nodes.values() if n.type == type_tag]

    def get_nodes(self) -> list[Node]:
        return list(self._nodes.values())

    def create_node(self, node: Node) -> bool:
        node = node.with_digest()
        with self._lock:
            current = self._nodes.get(node.id)
            if current is not None and current.content_digest == node.content_digest:
                return False
            self._nodes[node.id] = node
        logger.debug(
            "node_upserted",
            node_id=node.id,
            node_type=node.type,
            content_digest=node.content_digest,
        )
        return True

    def touch_node(self, node_id: str) -> None:
        # nothing is evicted in memory, so a touch only checks the node exists
        if node_id not in self._nodes:
            logger.debug("touch_unknown_node", node_id=node_id)

    def __len__(self) -> int:
        return len(self._nodes)


__all__ = [
    "Node",
    "NodeLookup",
    "NodeStore",
    "InMemoryNodeStore",
]
