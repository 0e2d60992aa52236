"""
Error handlers: map sitesearch errors to RFC 7807 responses.
"""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from sitesearch.api.schemas import ErrorDetail, ProblemDetail
from sitesearch.core.errors import ErrorCategory, SiteSearchError
from sitesearch.core.logging import get_logger

logger = get_logger(__name__)

CATEGORY_TO_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.PARSE: 400,
    ErrorCategory.CONFIG: 500,
    ErrorCategory.STORAGE: 500,
    ErrorCategory.CACHE: 503,
    ErrorCategory.INDEX: 500,
    ErrorCategory.INTERNAL: 500,
}


def problem_response(
    *,
    status: int,
    title: str,
    detail: str = "",
    instance: str = "",
    errors: list[ErrorDetail] | None = None,
) -> JSONResponse:
    """Build a RFC 7807 JSON error response."""
    body = ProblemDetail(title=title, status=status, detail=detail, instance=instance, errors=errors or [])
    return JSONResponse(status_code=status, content=body.model_dump())


async def sitesearch_error_handler(request: Request, exc: SiteSearchError) -> JSONResponse:
    """Render a :class:`SiteSearchError` with the status of its category."""
    status = CATEGORY_TO_STATUS.get(exc.category, 500)
    logger.warning("request_failed", path=request.url.path, **exc.to_dict())
    return problem_response(
        status=status,
        title=exc.__class__.__name__,
        detail=exc.message,
        instance=str(request.url),
        errors=[ErrorDetail(code=exc.category.value, message=exc.message)],
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions: returns 500 with ProblemDetail."""
    logger.error("request_crashed", path=request.url.path, error=str(exc), error_type=type(exc).__name__)
    return problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred.",
        instance=str(request.url),
    )
