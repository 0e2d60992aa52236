"""
Index construction in the Fuse.js serialized-index format.

The browser client performs the fuzzy search with Fuse.js. Building the
index ahead of time means the client only calls ``Fuse.parseIndex`` on the
served ``index`` value instead of tokenizing every document on page load.

:class:`FuseIndexBuilder` produces exactly what ``Fuse.createIndex(keys,
docs, options).toJSON()`` produces::

    {
        "keys": [{"path": ["title"], "id": "title", "weight": 1, "src": "title"}],
        "records": [
            {"i": 0, "$": {"0": {"v": "Hello world", "n": 0.707}}},
            {"i": 1, "$": {"0": [{"v": "a", "i": 0, "n": 1.0}]}},   # array values
        ],
    }

``n`` is the field-length norm ``1 / tokens ** (0.5 * fieldNormWeight)``
rounded to three decimals. No scoring or matching happens here.

Any other engine can be plugged into the index service through the
:class:`IndexBuilder` protocol.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from sitesearch.core.errors import InvalidConfigError
from sitesearch.index.options import FuseOptions, IndexKey

_TOKEN = re.compile(r"[^ ]+")


class IndexBuilder(Protocol):
    """Builds an opaque, JSON-serializable index artifact for one bucket."""

    def build(
        self,
        keys: Sequence[Any],
        documents: Sequence[Mapping[str, Any]],
        options: FuseOptions | None = None,
    ) -> Any: ...


@dataclass(frozen=True)
class FuseKey:
    path: tuple[str, ...]
    id: str
    weight: float
    src: str | list[str]

    def to_json(self) -> dict[str, Any]:
        return {"path": list(self.path), "id": self.id, "weight": self.weight, "src": self.src}


def create_key(key: Any) -> FuseKey:
    """Normalize a key given as ``"a.b"``, ``["a", "b"]`` or ``{"name", "weight"}``."""
    weight: float = 1
    if isinstance(key, IndexKey):
        name, weight = key.name, key.weight
    elif isinstance(key, Mapping):
        if "name" not in key:
            raise InvalidConfigError("fuse_options.keys", dict(key), "Missing name property in key")
        name = key["name"]
        weight = key.get("weight", 1)
        if weight <= 0:
            raise InvalidConfigError(
                "fuse_options.keys", dict(key), f"Property 'weight' in key '{name}' must be a positive integer"
            )
    else:
        name = key

    if isinstance(name, str):
        return FuseKey(path=tuple(name.split(".")), id=name, weight=weight, src=name)
    if isinstance(name, (list, tuple)):
        parts = [str(p) for p in name]
        return FuseKey(path=tuple(parts), id=".".join(parts), weight=weight, src=parts)
    raise InvalidConfigError("fuse_options.keys", key, f"Unsupported key: {key!r}")


def to_js_string(value: Any) -> str:
    """Render scalars the way JavaScript's ``String(value)`` does."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


def get_value(document: Any, path: Sequence[str]) -> Any:
    """Resolve ``path`` in ``document``.

    Returns a list when an array was crossed on the way, a single value
    otherwise, and ``None`` when nothing was found. Scalars at the end of the
    path are stringified; array elements are returned as they are.
    """
    found: list[Any] = []
    crossed_array = False

    def walk(obj: Any, index: int) -> None:
        nonlocal crossed_array
        if obj is None:
            return
        if index >= len(path) or not path[index]:
            found.append(obj)
            return
        if not isinstance(obj, Mapping):
            return
        value = obj.get(path[index])
        if value is None:
            return
        if index == len(path) - 1 and isinstance(value, (str, int, float)):
            found.append(to_js_string(value))
        elif isinstance(value, (list, tuple)):
            crossed_array = True
            for item in value:
                walk(item, index + 1)
        else:
            walk(value, index + 1)

    walk(document, 0)
    if crossed_array:
        return found
    return found[0] if found else None


class FieldNorm:
    """Memoized field-length norm, keyed by token count."""

    def __init__(self, weight: float = 1.0, mantissa: int = 3):
        self._weight = weight
        self._scale = 10**mantissa
        self._cache: dict[int, float] = {}

    def get(self, value: str) -> float:
        tokens = len(_TOKEN.findall(value))
        cached = self._cache.get(tokens)
        if cached is not None:
            return cached
        norm = 1 / math.pow(tokens, 0.5 * self._weight) if tokens else 1.0
        # Math.round semantics (half up), not banker's rounding
        rounded = math.floor(norm * self._scale + 0.5) / self._scale
        self._cache[tokens] = rounded
        return rounded


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class FuseIndexBuilder:
    """Default :class:`IndexBuilder` producing Fuse.js index JSON."""

    def build(
        self,
        keys: Sequence[Any],
        documents: Sequence[Mapping[str, Any]],
        options: FuseOptions | None = None,
    ) -> dict[str, Any]:
        fuse_keys = [create_key(k) for k in keys]
        norm = FieldNorm(options.field_norm_weight if options else 1.0)
        records = [self._record(doc, i, fuse_keys, norm) for i, doc in enumerate(documents)]
        return {"keys": [k.to_json() for k in fuse_keys], "records": records}

    def _record(
        self,
        document: Mapping[str, Any],
        doc_index: int,
        keys: list[FuseKey],
        norm: FieldNorm,
    ) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        for key_index, key in enumerate(keys):
            value = get_value(document, key.path)
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                sub_records = []
                stack: list[tuple[int, Any]] = [(-1, value)]
                while stack:
                    nested_index, item = stack.pop()
                    if item is None:
                        continue
                    if _is_text(item):
                        sub_records.append({"v": item, "i": nested_index, "n": norm.get(item)})
                    elif isinstance(item, (list, tuple)):
                        stack.extend(enumerate(item))
                fields[str(key_index)] = sub_records
            elif _is_text(value):
                fields[str(key_index)] = {"v": value, "n": norm.get(value)}
        return {"i": doc_index, "$": fields}


__all__ = [
    "FieldNorm",
    "FuseIndexBuilder",
    "FuseKey",
    "IndexBuilder",
    "create_key",
    "get_value",
    "to_js_string",
]
