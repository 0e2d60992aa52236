"""Namespace buckets for projected documents."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any


class Partitioner:
    """Accumulates projected documents per namespace.

    Buckets are created lazily by the first document routed to them.
    Documents keep their encounter order within a bucket.
    """

    def __init__(self) -> None:
        self._buckets: dict[str, list[dict[str, Any]]] = {}

    def add(self, namespace: str, document: dict[str, Any]) -> None:
        self._buckets.setdefault(namespace, []).append(document)

    def add_all(self, projected: Mapping[str, dict[str, Any]]) -> None:
        for namespace, document in projected.items():
            self.add(namespace, document)

    def documents(self, namespace: str) -> list[dict[str, Any]]:
        return self._buckets.get(namespace, [])

    @property
    def namespaces(self) -> list[str]:
        return list(self._buckets)

    def items(self) -> Iterator[tuple[str, list[dict[str, Any]]]]:
        return iter(self._buckets.items())

    def __contains__(self, namespace: object) -> bool:
        return namespace in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)
