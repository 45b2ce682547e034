"""Structured logging configuration using structlog.

Events are keyword-context dictionaries named in snake_case. The CLI writes
its JSON results to stdout, so log output always goes to stderr: rendered as
JSON lines for schedulers and log shippers, or as colored console text when
run by hand.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from src.shared.config.settings import Settings, get_settings

SERVICE_NAME = "katabatic"


def add_service_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag every event with the service name so shared sinks can filter it."""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def build_processors(settings: Settings) -> list[Processor]:
    """Processor chain for the configured output format.

    Args:
        settings: Settings providing log_format

    Returns:
        Processors ending in the renderer
    """
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_service_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _renderer(settings.log_format),
    ]


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Safe to call more than once; the level from the latest settings wins
    even when handlers were already installed.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level)

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    logging.getLogger().setLevel(level)


def get_logger(name: str) -> Any:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)
