"""
Structured logging for sitesearch.

Modules log through :func:`get_logger`; :func:`configure_logging` installs
the structlog processor chain once, at the CLI entry point or in a host that
embeds the plugin. Until then structlog's defaults apply.

Manifesto:
    Index builds run inside a larger site build, so their log lines have to
    be easy to pick out of the host's output. Events are snake_case
    (``page_registered``, ``index_cache_hit``, ``index_built``) with the
    values as key/value fields, never interpolated into the message.

Architecture:
    ::

        configure_logging(level="INFO", json_format=None, service="sitesearch")
            ↓
        merge_contextvars → level / logger name → service + version
            ↓
        JSON (ECS field names) when stdout is not a tty, console otherwise
            ↓
        stdlib logging → stderr

Examples:
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> log = get_logger(__name__)
    >>> with LogContext(documents="content/nodes.json"):
    ...     log.info("index_built", namespaces=2, documents=40)

Tags:
    logging, structlog, observability, sitesearch
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from sitesearch.core.errors import InvalidConfigError

_service = "sitesearch"


def _stamp_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    from sitesearch import __version__

    event_dict.setdefault("service.name", _service)
    event_dict.setdefault("service.version", __version__)
    return event_dict


def _ecs_field_names(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename ``timestamp``/``level`` to their ECS names for log shippers."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    return event_dict


def _parse_level(level: str) -> int:
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise InvalidConfigError("log_level", level, f"Unknown log level: {level!r}")
    return value


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "sitesearch",
    add_timestamp: bool = True,
) -> None:
    """Install the sitesearch processor chain.

    Args:
        level: Minimum level name (``DEBUG`` ... ``CRITICAL``)
        json_format: JSON lines if True, console if False, JSON when stdout
            is not a tty if None
        service: Value of the ``service.name`` field
        add_timestamp: Prepend an ISO timestamp

    Raises:
        InvalidConfigError: If ``level`` is not a logging level name.
    """
    global _service
    _service = service
    numeric_level = _parse_level(level)

    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _stamp_service,
    ]
    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors += [_ecs_field_names, structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level)


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger named ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach fields to every later log line in this context.

    Example:
        bind_context(site="docs", build="2024-05-01T10:00")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


class LogContext:
    """Scoped log fields, usable with ``with`` and ``async with``.

    Values bound by an enclosing scope are restored on exit.
    """

    def __init__(self, **kwargs: Any):
        self._fields = kwargs
        self._scope: Any = None

    def __enter__(self) -> LogContext:
        self._scope = structlog.contextvars.bound_contextvars(**self._fields)
        self._scope.__enter__()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._scope.__exit__(*exc_info)
        self._scope = None

    async def __aenter__(self) -> LogContext:
        return self.__enter__()

    async def __aexit__(self, *exc_info: Any) -> None:
        self.__exit__(*exc_info)


__all__ = [
    "LogContext",
    "bind_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
]
