"""structlog setup.

Development gets coloured key=value lines, every other environment gets one
JSON object per line. A correlation id bound by the HTTP middleware is
merged into every entry written while a request is being served.
"""

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor

if TYPE_CHECKING:
    from smsgate.core.config import Settings

ROOT_LOGGER = "smsgate"
STDLIB_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")


def _logger_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    # PrintLogger has no name; get_logger() passes one as an initial value
    event_dict["logger"] = event_dict.pop("logger_name", ROOT_LOGGER)
    return event_dict


def _correlation_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("correlation_id", None)
    return event_dict


def _event_as_message(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["message"] = event_dict.pop("event", "")
    return event_dict


def _renderer(settings: "Settings") -> tuple[list[Processor], Processor]:
    if settings.is_development or settings.log_format == "console":
        return [], structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    return [structlog.processors.format_exc_info, _event_as_message], structlog.processors.JSONRenderer()


def configure_logging(settings: "Settings | None" = None) -> None:
    """Install the smsgate logging pipeline.

    Safe to call more than once; the last call wins.

    Args:
        settings: Defaults to :func:`smsgate.core.config.get_settings`.
    """
    if settings is None:
        from smsgate.core.config import get_settings

        settings = get_settings()

    level = logging.getLevelName(settings.log_level)
    extra_processors, renderer = _renderer(settings)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            _logger_name,
            _correlation_id,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            *extra_processors,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # uvicorn logs through the standard library
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)
    for name in STDLIB_LOGGERS:
        logging.getLogger(name).setLevel(level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Logger for a module, usually ``get_logger(__name__)``."""
    return structlog.get_logger(logger_name=name or ROOT_LOGGER)


def bind_correlation_id(correlation_id: str) -> None:
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_context() -> None:
    """Drop request-scoped context so it cannot leak into the next request."""
    structlog.contextvars.clear_contextvars()
