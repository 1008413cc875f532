"""
verse-guidance - OpenTelemetry Tracing Module

Patterns Applied:
- One-time configure_tracing() at startup
- Manual spans around each public engine operation
"""

from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

# Module-level flag for one-time configuration
_configured: bool = False

SERVICE_NAME = "verse-guidance"


def configure_tracing(
    service_name: str = SERVICE_NAME,
    service_version: str = "0.1.0",
    console_export: bool = False,
) -> None:
    """Configure OpenTelemetry tracing for the application.

    This function must be called exactly ONCE at application startup.

    Args:
        service_name: Name of the service for trace attribution
        service_version: Version reported on the tracing resource
        console_export: Whether to export spans to console (for development)
    """
    global _configured

    if _configured:
        return

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": service_version,
        }
    )

    provider = TracerProvider(resource=resource)

    if console_export:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)

    _configured = True


def get_tracer(name: str) -> Any:
    """Get a tracer instance for creating spans.

    Without configure_tracing() this returns the no-op tracer, so library
    callers pay nothing for the spans.

    Args:
        name: Tracer name (typically module name)

    Returns:
        OpenTelemetry Tracer instance
    """
    return trace.get_tracer(name)


def reset_tracing() -> None:
    """Reset tracing configuration for testing."""
    global _configured
    _configured = False
