"""
Field projection: turn a content-graph node into search documents.

Every projected document carries ``id`` and ``date`` from the node plus one
entry per field resolver. Resolvers are plain callables
``resolver(node, lookup)``; their return value is stored as-is.

In flat mode a node yields one document under ``DEFAULT_NAMESPACE``. In
namespaced mode it yields one document per namespace configured for its
type, each carrying only that namespace's fields.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sitesearch.core.logging import get_logger
from sitesearch.core.nodes import Node, NodeLookup
from sitesearch.index.options import FieldResolvers

logger = get_logger(__name__)

DEFAULT_NAMESPACE = "__defaultNamespace"


def create_document(field_resolvers: FieldResolvers, node: Node, lookup: NodeLookup) -> dict[str, Any]:
    """Apply ``field_resolvers`` to ``node`` and return the projected document."""
    document: dict[str, Any] = {"id": node.id, "date": node.date}
    for field_name, resolver in field_resolvers.items():
        document[field_name] = resolver(node, lookup)
    return document


def project(
    type_tag: str,
    node: Node,
    lookup: NodeLookup,
    resolvers: Mapping[str, Mapping[str, Any]],
    *,
    use_namespaces: bool = False,
) -> dict[str, dict[str, Any]]:
    """Project ``node`` into one document per namespace.

    Returns an empty mapping when ``type_tag`` has no resolvers.
    """
    type_resolvers = resolvers.get(type_tag)
    if type_resolvers is None:
        logger.debug("projection_skipped", node_id=node.id, node_type=type_tag)
        return {}

    if not use_namespaces:
        return {DEFAULT_NAMESPACE: create_document(type_resolvers, node, lookup)}

    documents = {}
    for namespace, field_resolvers in type_resolvers.items():
        # None marks a namespace placeholder; an empty mapping still yields {id, date}
        if field_resolvers is not None:
            documents[namespace] = create_document(field_resolvers, node, lookup)
    return documents
