"""
Deterministic hashing utilities for change detection.

Provides stable, reproducible digests that let the host content graph and the
index cache tell one version of a node from the next. The search-index
aggregate recomputes its digest on every append, so two aggregates holding
the same page sequence always carry the same digest.

Manifesto:
    Change detection needs digests that survive re-processing:
    - **Content digest:** Detect when a node's payload has changed
    - **Deterministic:** Same inputs always produce same digest
    - **Order-dependent:** ``["a", "b"]`` and ``["b", "a"]`` differ
    - **Collision-resistant:** SHA-256 based

Features:
    - **compute_content_digest():** Digest of a JSON-serializable payload
    - **Configurable length:** Default 32 chars (128 bits)

Examples:
    >>> compute_content_digest(["p1", "p2"]) == compute_content_digest(["p1", "p2"])
    True
    >>> compute_content_digest(["p1", "p2"]) == compute_content_digest(["p2", "p1"])
    False

Tags:
    hashing, content-digest, change-detection, sitesearch
"""

import hashlib
import json
from typing import Any


def serialize_content(value: Any) -> str:
    """Serialize ``value`` to the canonical JSON text that gets digested."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def compute_content_digest(value: Any, length: int = 32) -> str:
    """
    Compute the content digest of a JSON-serializable payload.

    The payload is serialized with :func:`serialize_content` (compact
    separators, key order as given) so the digest is a pure function of the
    value. Lists are order-sensitive.

    Args:
        value: JSON-serializable payload (e.g. a list of page ids)
        length: Hex digest length (default 32 = 128 bits)

    Returns:
        Hex string of specified length
    """
    content = serialize_content(value)
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:length]


__all__ = [
    "compute_content_digest",
    "serialize_content",
]
