"""OpenTelemetry tracing setup.

The provider is owned by the application context instead of being installed
as the global provider, so several app instances (tests) never share spans.
"""

from __future__ import annotations

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Span, Status, StatusCode, Tracer

from sample_app.config import Settings


def setup_tracing(settings: Settings, span_processor: SpanProcessor | None = None) -> TracerProvider:
    """Build a TracerProvider for the service.

    Args:
        settings: Service settings (name, version, OTLP endpoint).
        span_processor: Replaces the default OTLP batch exporter when given.

    Returns:
        The configured provider. Call ``shutdown()`` on it to flush spans.
    """

    resource = Resource.create(
        {
            SERVICE_NAME: settings.service_name,
            SERVICE_VERSION: settings.service_version,
            "deployment.environment": settings.environment,
        }
    )
    provider = TracerProvider(resource=resource, shutdown_on_exit=False)

    if span_processor is not None:
        provider.add_span_processor(span_processor)
    elif settings.tracing_enabled:
        # Batch processor exports from its own worker thread; ending a span never blocks on the network.
        exporter = OTLPSpanExporter(endpoint=settings.otlp_traces_endpoint)
        provider.add_span_processor(BatchSpanProcessor(exporter))

    return provider


def get_tracer(provider: TracerProvider, settings: Settings) -> Tracer:
    return provider.get_tracer(settings.service_name, settings.service_version)


def child_context(parent: Span):
    """Trace context that makes a new span a child of ``parent``."""

    return trace.set_span_in_context(parent)


def mark_ok(span: Span) -> None:
    span.set_status(Status(StatusCode.OK))


def record_error(span: Span, exception: BaseException) -> None:
    """Record an exception on a span and flag the span as failed."""

    span.record_exception(exception)
    span.set_status(Status(StatusCode.ERROR, str(exception)))
