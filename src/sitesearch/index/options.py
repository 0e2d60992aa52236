"""
Plugin options: field resolvers, eligibility filter and index options.

Options are supplied once, in code, by the site that embeds the plugin::

    options = SearchIndexOptions(
        resolvers={
            "BlogPost": {
                "title": lambda node, lookup: node.title,
                "author": lambda node, lookup: lookup.get_node(node.author_id).name,
            },
        },
        filter=lambda node, lookup: not node.get("draft", False),
        fuse_options={"keys": ["title", {"name": "author", "weight": 0.5}]},
        copy_serialization_to_file="search-index.json",
    )

With ``use_resolver_namespaces=True`` each type maps namespace names to
field-resolver mappings instead, and one index is built per namespace.

camelCase aliases (``fuseOptions``, ``useResolverNamespaces``,
``copySerializationToFile``, ``fieldNormWeight``) are accepted so options
written for the JavaScript plugin translate one-to-one.
"""

from __future__ import annotations

import importlib
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from sitesearch.core.errors import ConfigError, InvalidConfigError
from sitesearch.core.nodes import Node, NodeLookup

Resolver = Callable[[Node, NodeLookup], Any]
NodeFilter = Callable[[Node, NodeLookup], bool]
FieldResolvers = Mapping[str, Resolver]


class IndexKey(BaseModel):
    """Weighted index key (``{"name": "title", "weight": 2}``)."""

    model_config = ConfigDict(frozen=True)

    name: str | list[str]
    weight: float = Field(default=1.0, gt=0)


class FuseOptions(BaseModel):
    """Index options.

    ``keys`` lists the projected-document fields to index. Any other entry
    (``threshold``, ``includeScore``...) is kept as a match option for the
    client and ignored while building the index.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    keys: list[str | list[str] | IndexKey] = Field(default_factory=list)
    field_norm_weight: float = Field(default=1.0, ge=0, alias="fieldNormWeight")

    @property
    def match_options(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class SearchIndexOptions(BaseModel):
    """Complete plugin configuration."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        populate_by_name=True,
        frozen=True,
    )

    resolvers: dict[str, dict[str, Any]] = Field(default_factory=dict)
    filter: Callable[..., bool] | None = None
    fuse_options: FuseOptions | None = Field(default=None, alias="fuseOptions")
    use_resolver_namespaces: bool = Field(default=False, alias="useResolverNamespaces")
    copy_serialization_to_file: str | None = Field(default=None, alias="copySerializationToFile")

    @model_validator(mode="after")
    def _check_resolvers(self) -> SearchIndexOptions:
        for type_tag, entry in self.resolvers.items():
            if self.use_resolver_namespaces:
                for namespace, field_resolvers in entry.items():
                    if field_resolvers is None:
                        continue
                    if not isinstance(field_resolvers, Mapping):
                        raise InvalidConfigError(
                            f"resolvers.{type_tag}.{namespace}",
                            field_resolvers,
                            "Namespaced resolvers must map namespace -> {field: resolver}",
                        )
                    _check_callables(f"resolvers.{type_tag}.{namespace}", field_resolvers)
            else:
                _check_callables(f"resolvers.{type_tag}", entry)
        return self

    @property
    def index_keys(self) -> list[str | list[str] | IndexKey]:
        return list(self.fuse_options.keys) if self.fuse_options else []


def _check_callables(path: str, field_resolvers: Mapping[str, Any]) -> None:
    for field_name, resolver in field_resolvers.items():
        if not callable(resolver):
            raise InvalidConfigError(
                f"{path}.{field_name}",
                resolver,
                f"Resolver for field {field_name!r} is not callable",
            )


def load_options(ref: str) -> SearchIndexOptions:
    """Import and return the options identified by ``'module:attribute'``.

    The attribute may be a :class:`SearchIndexOptions`, a mapping accepted
    by :meth:`SearchIndexOptions.model_validate`, or a zero-argument
    callable returning either.

    Raises:
        ConfigError: If the reference cannot be resolved.
    """
    module_path, _, attr_path = ref.partition(":")
    if not module_path or not attr_path:
        raise InvalidConfigError("options", ref, f"Invalid options ref (expected 'module:attribute'): {ref!r}")
    try:
        obj: Any = importlib.import_module(module_path)
        for part in attr_path.split("."):
            obj = getattr(obj, part)
    except (ImportError, AttributeError) as exc:
        raise ConfigError(f"Cannot load options {ref!r}: {exc}", cause=exc) from exc

    if callable(obj) and not isinstance(obj, (SearchIndexOptions, Mapping)):
        obj = obj()
    if isinstance(obj, SearchIndexOptions):
        return obj
    if isinstance(obj, Mapping):
        return SearchIndexOptions.model_validate(obj)
    raise InvalidConfigError("options", ref, f"{ref!r} did not resolve to search index options")


__all__ = [
    "FieldResolvers",
    "FuseOptions",
    "IndexKey",
    "NodeFilter",
    "Resolver",
    "SearchIndexOptions",
    "load_options",
]
