from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    GCCollector,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)
from prometheus_client.registry import Collector


REQUEST_DURATION_BUCKETS = (0.1, 0.5, 1.0, 2.0, 5.0)


class DuplicateMetricError(ValueError):
    """A collector tried to claim a metric name that is already registered."""


class MetricsExportError(OSError):
    """The registry could not be rendered in the exposition format."""


class MetricsRegistry:
    """Process-lifetime Prometheus registry for the HTTP service.

    Uses its own CollectorRegistry rather than prometheus_client's global
    REGISTRY so each application instance (and each test) starts from zero.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, *, default_collectors: bool = True) -> None:
        self.registry = CollectorRegistry(auto_describe=True)
        if default_collectors:
            ProcessCollector(registry=self.registry)
            PlatformCollector(registry=self.registry)
            GCCollector(registry=self.registry)

        self.http_requests_total = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            labelnames=["method", "route", "status_code"],
            registry=self.registry,
        )
        self.http_request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests in seconds",
            labelnames=["method", "route"],
            buckets=REQUEST_DURATION_BUCKETS,
            registry=self.registry,
        )
        self.active_connections = Gauge(
            "active_connections",
            "Number of active connections",
            registry=self.registry,
        )

    def register(self, collector: Collector) -> None:
        try:
            self.registry.register(collector)
        except ValueError as exc:
            raise DuplicateMetricError(str(exc)) from exc

    def snapshot(self) -> bytes:
        try:
            return generate_latest(self.registry)
        except Exception as exc:  # noqa: BLE001
            raise MetricsExportError(f"failed to render metrics: {exc}") from exc

    def connection_opened(self) -> None:
        self.active_connections.inc()

    def connection_closed(self) -> None:
        self.active_connections.dec()

    def observe_request(self, *, method: str, route: str, status_code: int, elapsed_seconds: float) -> None:
        self.http_requests_total.labels(method=method, route=route, status_code=str(status_code)).inc()
        self.http_request_duration_seconds.labels(method=method, route=route).observe(elapsed_seconds)

    def sample(self, name: str, labels: dict[str, str] | None = None) -> float | None:
        """Current value of one sample, or None if it has never been recorded."""

        return self.registry.get_sample_value(name, labels or {})
