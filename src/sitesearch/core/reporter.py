"""Non-fatal diagnostics channel.

The index pipeline reports configuration problems and snapshot failures
instead of raising them. A :class:`Reporter` forwards each diagnostic to the
structured logger and keeps it in memory so the CLI and the API can surface
what went wrong after a build.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sitesearch.core.errors import SiteSearchError, categorize_error
from sitesearch.core.logging import get_logger


@dataclass(frozen=True)
class Diagnostic:
    level: str
    message: str
    error: str | None = None
    details: dict[str, Any] | None = None


class Reporter:
    """Collects diagnostics and logs them through structlog."""

    def __init__(self, name: str = "sitesearch.reporter"):
        self._logger = get_logger(name)
        self._diagnostics: list[Diagnostic] = []

    def info(self, message: str, **fields: Any) -> None:
        self._logger.info(message, **fields)

    def error(self, message: str, error: BaseException | None = None, **fields: Any) -> None:
        details = dict(fields)
        if isinstance(error, SiteSearchError):
            details.update(error.to_dict())
        elif error is not None:
            details["error_type"] = type(error).__name__
            details["category"] = categorize_error(error).value
        self._record("error", message, str(error) if error is not None else None, details)
        self._logger.error(message, **details)

    def _record(self, level: str, message: str, error: str | None, details: dict[str, Any]) -> None:
        self._diagnostics.append(Diagnostic(level, message, error, details or None))

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return list(self._diagnostics)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self._diagnostics if d.level == "error"]

    def clear(self) -> None:
        self._diagnostics.clear()
