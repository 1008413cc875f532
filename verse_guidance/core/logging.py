"""
verse-guidance - Structured Logging Module

structlog is configured once at startup by configure_logging(); modules
obtain loggers with get_logger(__name__) and log event-style messages with
key/value context. Every entry is stamped with the configured service name.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, Processor

DEFAULT_SERVICE_NAME = "verse-guidance"

# Set by configure_logging(); later calls are no-ops until reset_logging()
_configured: bool = False


def service_stamper(service_name: str) -> Processor:
    """Build a processor that adds `service` to every event dict.

    Args:
        service_name: Value written to the `service` key

    Returns:
        structlog processor
    """

    def add_service(
        logger: Any,  # noqa: ARG001 - Required by structlog interface
        method_name: str,  # noqa: ARG001 - Required by structlog interface
        event_dict: EventDict,
    ) -> EventDict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return add_service


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True,
    service_name: str = DEFAULT_SERVICE_NAME,
) -> None:
    """Configure structlog for the application.

    Call once at startup; repeated calls keep the first configuration.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: JSON lines when True, human-readable console otherwise
        service_name: Stamped on every entry (Settings.service_name)
    """
    global _configured

    if _configured:
        return

    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    renderer: Processor = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            service_stamper(service_name),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str) -> Any:
    """Structured logger bound to a module name."""
    return structlog.get_logger(name)


def reset_logging() -> None:
    """Forget the configuration so tests can configure again."""
    global _configured
    _configured = False
    structlog.reset_defaults()
