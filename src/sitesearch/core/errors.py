"""
Structured error types for sitesearch.

Every error raised by the package extends :class:`SiteSearchError` and
carries a category plus structured context, so the reporter, the CLI and the
HTTP layer render it the same way.

Manifesto:
    The index pipeline favours availability over completeness. A page
    without a resolver, a page that vanished from the content graph, or an
    index configured without keys is *reported*, not raised. Exceptions are
    kept for the cases that must stop the caller:

    - **Config errors:** malformed options that make a build meaningless
    - **Parse errors:** client-supplied values for the output-only scalar
    - **Storage errors:** snapshot writes (the post-build hook reports them)
    - **Cache errors:** an unreachable or misconfigured cache backend
    - **Index build errors:** failures of the index builder itself

Architecture:
    ::

        SiteSearchError (category, context, cause)
        ├── ConfigError (CONFIG)
        │   └── InvalidConfigError (key, value)
        ├── ParseNotSupportedError (PARSE)
        ├── StorageError (STORAGE)
        ├── CacheError (CACHE)
        └── IndexBuildError (INDEX)

Examples:
    >>> error = InvalidConfigError("fuse_options.keys", [{"weight": 1}])
    >>> error.category
    <ErrorCategory.CONFIG: 'CONFIG'>
    >>> error.with_context(namespace="meta").to_dict()["context"]
    {'namespace': 'meta'}

Tags:
    error-handling, exception-hierarchy, error-context, sitesearch
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Where an error came from; the API maps each one to an HTTP status."""

    CONFIG = "CONFIG"
    PARSE = "PARSE"
    STORAGE = "STORAGE"
    CACHE = "CACHE"
    INDEX = "INDEX"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """Where in the pipeline an error happened.

    Attributes:
        node_id: Content-graph node being processed
        node_type: Type tag of that node
        namespace: Index namespace being built
        cache_key: Cache key in use
        path: Snapshot path on disk
        metadata: Anything else worth logging
    """

    node_id: str | None = None
    node_type: str | None = None
    namespace: str | None = None
    cache_key: str | None = None
    path: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Set fields only, with ``metadata`` flattened in."""
        result = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "metadata" and getattr(self, f.name) is not None
        }
        result.update(self.metadata)
        return result


_CONTEXT_FIELDS = frozenset(f.name for f in fields(ErrorContext)) - {"metadata"}


class SiteSearchError(Exception):
    """Base exception for all sitesearch errors.

    Subclasses set ``default_category``. Context is attached after
    construction with :meth:`with_context`.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SiteSearchError:
        """Attach context and return ``self``.

        Usage:
            raise StorageError("Write failed").with_context(path="public/search.json")
        """
        for key, value in kwargs.items():
            if key in _CONTEXT_FIELDS:
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serializable view for logs, diagnostics and API responses."""
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if context := self.context.to_dict():
            data["context"] = context
        if self.cause is not None:
            data["cause"] = str(self.cause)
        return data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


class ConfigError(SiteSearchError):
    """The options or settings must be fixed before building."""

    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """A configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


class ParseNotSupportedError(SiteSearchError):
    """A client tried to supply a value for an output-only scalar."""

    default_category = ErrorCategory.PARSE

    def __init__(self, type_name: str | None = None, message: str = "Not supported"):
        self.type_name = type_name
        super().__init__(message)
        if type_name is not None:
            self.context.metadata["type_name"] = type_name


class StorageError(SiteSearchError):
    default_category = ErrorCategory.STORAGE


class CacheError(SiteSearchError):
    default_category = ErrorCategory.CACHE


class IndexBuildError(SiteSearchError):
    default_category = ErrorCategory.INDEX


def categorize_error(error: BaseException) -> ErrorCategory:
    """Category of any exception, including ones not raised by sitesearch."""
    if isinstance(error, SiteSearchError):
        return error.category
    if isinstance(error, OSError):
        return ErrorCategory.STORAGE
    if isinstance(error, (KeyError, AttributeError, TypeError)):
        return ErrorCategory.CONFIG
    return ErrorCategory.INTERNAL


__all__ = [
    "CacheError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "IndexBuildError",
    "InvalidConfigError",
    "ParseNotSupportedError",
    "SiteSearchError",
    "StorageError",
    "categorize_error",
]
