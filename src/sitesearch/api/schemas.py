"""
API schemas: RFC 7807 errors and the search-index status envelope.

The search-index artifact itself is served raw (it is the scalar value the
client hands to ``Fuse.parseIndex``); only auxiliary endpoints use the
models below.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Structured error detail for nested errors."""

    code: str = Field(description="Machine-readable error code (e.g., 'NOT_SUPPORTED')")
    message: str = Field(description="Human-readable error description")
    field: str | None = Field(default=None, description="Field path if error is field-specific")


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs»."""

    type: str = Field(default="about:blank", description="Error type URI (usually 'about:blank')")
    title: str = Field(description="Short human-readable error summary")
    status: int = Field(description="HTTP status code")
    detail: str = Field(default="", description="Human-readable explanation of the error")
    instance: str = Field(default="", description="URI of the failing request")
    errors: list[ErrorDetail] = Field(default_factory=list)


class DiagnosticSchema(BaseModel):
    level: str
    message: str
    error: str | None = None


class SearchIndexStatus(BaseModel):
    """Registry state and cache status for the served index."""

    id: str = Field(description="Registry aggregate id")
    pages: int = Field(description="Number of registered pages")
    content_digest: str = Field(description="Digest of the registered page list")
    cache_key: str = Field(description="Cache key the index is stored under")
    cached: bool = Field(description="True if the index is already built for this digest")
    namespaced: bool = Field(description="True if one index is built per namespace")
    diagnostics: list[DiagnosticSchema] = Field(default_factory=list)
