"""Structured logging for the relay."""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog
from structlog.stdlib import BoundLogger


# Event keys whose values must never reach a log sink
SECRET_KEYS = frozenset(
    {
        "access_token",
        "refresh_token",
        "client_secret",
        "password",
        "authorization",
        "x_vapi_secret",
    }
)

# stdlib loggers routed through the structlog formatter at the relay level
RELAY_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "fastapi", "clinicrelay")

# Only surfaced when debugging; httpx logs every request at INFO
TRANSPORT_LOGGERS = ("httpx", "httpcore")

REDACTED = "***"


def redact_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask credential material passed as log context."""
    for key, value in event_dict.items():
        if value and key.lower() in SECRET_KEYS:
            event_dict[key] = REDACTED
    return event_dict


def configure_structlog(json_logs: bool = False) -> None:
    """Configure structlog processors shared by the relay loggers."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            # Rendering happens once, in the handler's ProcessorFormatter
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],  # type: ignore[arg-type]
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def setup_logging(json_logs: bool = False, log_level: str = "INFO") -> BoundLogger:
    """Route relay, uvicorn and fastapi logs through one structlog handler.

    Args:
        json_logs: Render JSON lines instead of the console format
        log_level: Level for the relay loggers

    Returns:
        A structlog logger
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    configure_structlog(json_logs=json_logs)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
                structlog.processors.TimeStamper(fmt="iso"),
                redact_secrets,
            ],
        )
    )
    root_logger.handlers = [handler]

    transport_level = logging.INFO if level <= logging.DEBUG else logging.WARNING
    for name, logger_level in [
        *((name, level) for name in RELAY_LOGGERS),
        *((name, transport_level) for name in TRANSPORT_LOGGERS),
    ]:
        logger = logging.getLogger(name)
        logger.handlers = []
        logger.propagate = True
        logger.setLevel(logger_level)

    return structlog.get_logger()  # type: ignore[no-any-return]


def get_logger(name: str | None = None) -> BoundLogger:
    """Get a structlog logger instance."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def truncate_body(text: str | None, limit: int = 500) -> str:
    """Return a truncated response body for diagnostics."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
