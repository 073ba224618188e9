"""OpenTelemetry test fixtures."""

from collections.abc import Generator

import pytest
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter


@pytest.fixture
def otel_enabled_provider(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[tuple[TracerProvider, InMemorySpanExporter]]:
    """
    TracerProvider that records spans in memory.

    Spans never leave the process. SimpleSpanProcessor exports each span as it
    ends, so assertions can run right after the code under test.

    Yields:
        Tuple of (TracerProvider, InMemorySpanExporter)

    Example:
        def test_add_section_span(otel_enabled_provider):
            _, exporter = otel_enabled_provider
            ...
            assert exporter.get_finished_spans()[0].name == "add_section"
    """
    from subway.core.config import settings  # noqa: PLC0415

    monkeypatch.delenv("OTEL_SDK_DISABLED", raising=False)
    monkeypatch.setattr(settings, "OTEL_ENABLED", True)

    exporter = InMemorySpanExporter()
    provider = TracerProvider(
        resource=Resource(
            attributes={
                "service.name": "subway-backend-test",
                "service.version": "0.1.0-test",
                "deployment.environment": "test",
            }
        )
    )
    provider.add_span_processor(SimpleSpanProcessor(exporter))

    # Bypass set_tracer_provider(), which refuses to override once set
    trace._TRACER_PROVIDER = provider  # type: ignore[attr-defined]

    yield provider, exporter

    exporter.clear()
    trace._TRACER_PROVIDER = None  # type: ignore[attr-defined]


@pytest.fixture(autouse=True)
def reset_tracer_provider() -> Generator[None]:
    """Reset the telemetry module and OpenTelemetry globals around each test."""
    from subway.core import telemetry  # noqa: PLC0415

    telemetry._tracer_provider = None  # type: ignore[attr-defined]
    trace._TRACER_PROVIDER = None  # type: ignore[attr-defined]

    yield

    telemetry._tracer_provider = None  # type: ignore[attr-defined]
    trace._TRACER_PROVIDER = None  # type: ignore[attr-defined]
