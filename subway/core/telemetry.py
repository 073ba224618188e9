"""OpenTelemetry tracing: the process TracerProvider and service spans."""

import threading
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import SpanKind, Status, StatusCode

from subway import __version__
from subway.core.config import require_config, settings

if TYPE_CHECKING:
    from opentelemetry.trace.span import Span

logger = structlog.get_logger(__name__)

# Created on first use so each forked worker owns its exporter thread
_tracer_provider: TracerProvider | None = None
_lock = threading.Lock()

# OpenTelemetry attribute values can be primitives or lists of primitives
AttributeValue = str | int | float | bool | list[str] | list[int] | list[float] | list[bool]


def get_tracer_provider() -> TracerProvider | None:
    """
    Get or create the TracerProvider.

    Returns:
        TracerProvider if OTEL is enabled, None otherwise
    """
    if not settings.OTEL_ENABLED:
        return None

    global _tracer_provider  # noqa: PLW0603
    if _tracer_provider is None:
        with _lock:
            if _tracer_provider is None:
                _tracer_provider = _create_tracer_provider()
    return _tracer_provider


def _resource() -> Resource:
    return Resource(
        attributes={
            "service.name": settings.OTEL_SERVICE_NAME,
            "service.version": __version__,
            "deployment.environment": settings.OTEL_ENVIRONMENT,
        }
    )


def _create_tracer_provider() -> TracerProvider:
    """
    Build a TracerProvider, exporting over OTLP/HTTP when an endpoint is set.

    Raises:
        ValueError: If the OTLP traces endpoint is missing outside DEBUG
    """
    if not settings.DEBUG:
        require_config("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT")

    provider = TracerProvider(resource=_resource())
    endpoint = settings.OTEL_EXPORTER_OTLP_TRACES_ENDPOINT
    if not endpoint:
        logger.warning("otel_no_traces_endpoint_configured", message="traces will not be exported")
        return provider

    headers = _parse_otlp_headers(settings.OTEL_EXPORTER_OTLP_HEADERS or "")
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, headers=headers)))
    logger.info(
        "otel_tracer_provider_created",
        endpoint=endpoint,
        service_name=settings.OTEL_SERVICE_NAME,
        environment=settings.OTEL_ENVIRONMENT,
    )
    return provider


def _parse_otlp_headers(raw: str) -> dict[str, str]:
    """
    Parse OTLP exporter headers given as comma-separated key=value pairs.

    Example:
        >>> _parse_otlp_headers("Authorization=Bearer token123,X-Custom=value")
        {'Authorization': 'Bearer token123', 'X-Custom': 'value'}
    """
    headers: dict[str, str] = {}
    for pair in filter(None, (p.strip() for p in raw.split(","))):
        key, sep, value = pair.partition("=")
        if not sep:
            logger.warning("otel_malformed_header", pair=pair)
            continue
        headers[key.strip()] = value.strip()
    return headers


def shutdown_tracer_provider() -> None:
    """Flush pending spans and drop the provider. Does nothing when none was created."""
    global _tracer_provider  # noqa: PLW0603
    with _lock:
        provider, _tracer_provider = _tracer_provider, None
    if provider is not None:
        provider.shutdown()
        logger.info("otel_tracer_provider_shutdown")


@contextmanager
def service_span(
    name: str,
    service: str,
    kind: SpanKind = SpanKind.INTERNAL,
    **attributes: AttributeValue,
) -> Generator["Span"]:
    """Span around one service operation, OK unless the body raises.

    On failure the SDK records the exception and sets ERROR before it
    propagates. The tracer is looked up per call so the provider installed at
    startup is the one used.

    Args:
        name: Span name (e.g., "add_section")
        service: Value for the peer.service attribute (e.g., "line-service")
        kind: Span kind
        **attributes: Additional span attributes

    Example:
        with service_span("add_section", "line-service", line_id=str(line_id)) as span:
            chain.add(section)
            span.set_attribute("line.section_count", len(chain))
    """
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(name, kind=kind, attributes={"peer.service": service, **attributes}) as span:
        yield span
        span.set_status(Status(StatusCode.OK))
