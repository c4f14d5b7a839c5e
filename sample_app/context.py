from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any

from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.trace import Tracer

from sample_app.config import Settings
from sample_app.observability.logging import configure_logging, get_logger
from sample_app.observability.metrics import MetricsRegistry
from sample_app.observability.tracing import get_tracer, setup_tracing


@dataclass
class AppContext:
    """Long-lived telemetry handles shared by routes, middleware and the timer."""

    settings: Settings
    logger: Any
    metrics: MetricsRegistry
    tracer_provider: TracerProvider
    tracer: Tracer
    rng: random.Random = field(default_factory=random.Random)

    def shutdown(self) -> None:
        # Flushes spans still queued in the batch processor.
        self.tracer_provider.shutdown()


def build_context(
    settings: Settings,
    *,
    span_processor: SpanProcessor | None = None,
    rng: random.Random | None = None,
) -> AppContext:
    configure_logging(settings.log_level)
    provider = setup_tracing(settings, span_processor=span_processor)
    return AppContext(
        settings=settings,
        logger=get_logger("sample_app"),
        metrics=MetricsRegistry(),
        tracer_provider=provider,
        tracer=get_tracer(provider, settings),
        rng=rng or random.Random(settings.random_seed),
    )
