"""Structured logging configuration using structlog.

Production emits one JSON object per line for the log aggregator; any
other environment gets the colored console renderer. Both paths share the
same processor chain, so events from structlog and from stdlib loggers
(uvicorn, httpx) carry the same keys.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


# Event keys whose values are credentials, matched case-insensitively
_SECRET_KEYS = frozenset({"api_key", "apikey", "x-api-key", "authorization", "key"})

# Third-party loggers that are chatty at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag every event with the service name."""
    event_dict["app"] = "hybrid-inference-layer"
    return event_dict


def drop_secrets(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask credential-looking fields so API keys never reach a log sink."""
    for field_name in list(event_dict):
        if field_name.lower() in _SECRET_KEYS:
            event_dict[field_name] = "***"
    return event_dict


def _shared_processors(is_production: bool) -> list[Processor]:
    processors: list[Processor] = [
        # request_id and friends bound by RequestTracingMiddleware
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        # Must run after every processor that may add fields
        drop_secrets,
    ]
    if is_production:
        # JSONRenderer needs the traceback already rendered to a string;
        # ConsoleRenderer formats exc_info on its own
        processors.append(structlog.processors.format_exc_info)
    return processors


def _renderer(is_production: bool) -> Processor:
    if is_production:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: str = "INFO", environment: str = "development") -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            unknown names fall back to INFO
        environment: "production" selects JSON output, anything else the
            console renderer

    Safe to call more than once: the root handler is replaced, not added.
    """
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)
    is_production = environment.lower() == "production"
    shared_processors = _shared_processors(is_production)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # foreign_pre_chain applies the same processors to plain stdlib records
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_renderer(is_production),
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.setLevel(log_level_int)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level_int)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "Logging configured",
        log_level=log_level,
        environment=environment,
        renderer="json" if is_production else "console",
    )
