"""Structured logging configuration using structlog.

Calculation events carry Decimal amounts and rates. They are rendered as
plain strings in both outputs so a logged reserve reads exactly like the
API response that carried it.
"""

import logging
import sys
from contextvars import ContextVar
from decimal import Decimal
from typing import Any

import orjson
import structlog
from structlog.types import EventDict, Processor

from gbr_reserve.core.config import settings

# Correlation of log lines with the request and reserve strategy
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
strategy_ctx: ContextVar[str | None] = ContextVar("strategy", default=None)


def _add_context_vars(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Attach the request id and active strategy when set."""
    if request_id := request_id_ctx.get():
        event_dict["request_id"] = request_id
    if strategy := strategy_ctx.get():
        event_dict["strategy"] = strategy
    return event_dict


def _stringify_decimals(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Render top-level Decimal values in plain notation."""
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = format(value, "f")
    return event_dict


def _orjson_serializer(obj: Any, **kwargs: Any) -> str:
    """Serialize a log event with orjson; unknown types fall back to str()."""
    return orjson.dumps(obj, default=str).decode("utf-8")


def _use_json_output() -> bool:
    """JSON unless LOG_FORMAT says otherwise or we run in development."""
    log_format = settings.log_format.lower() if settings.log_format else None
    if log_format is not None:
        return log_format == "json"
    return settings.environment != "development"


def _output_processors(use_json: bool) -> list[Processor]:
    if use_json:
        # Observability tooling expects the event under "message"
        return [
            structlog.processors.EventRenamer("message"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(serializer=_orjson_serializer),
        ]
    return [structlog.dev.ConsoleRenderer(colors=True)]


def configure_logging() -> None:
    """Configure structlog for the application.

    Development mode: colored console output.
    Otherwise (or with LOG_FORMAT=json): orjson-backed JSON lines.
    DEBUG=true lowers the level so calculation traces are emitted.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _add_context_vars,
        _stringify_decimals,
        *_output_processors(_use_json_output()),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if settings.debug else logging.INFO,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a configured structlog logger.

    Args:
        name: Logger name, usually the calling module's ``__name__``.

    Returns:
        Structlog bound logger.
    """
    return structlog.get_logger(name)
