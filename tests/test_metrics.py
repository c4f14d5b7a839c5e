import pytest
from prometheus_client import Counter

from sample_app.observability.metrics import (
    REQUEST_DURATION_BUCKETS,
    DuplicateMetricError,
    MetricsExportError,
    MetricsRegistry,
)


class _BrokenCollector:
    def describe(self) -> list:
        return []

    def collect(self):
        raise RuntimeError("collector exploded")


def test_snapshot_contains_core_series() -> None:
    metrics = MetricsRegistry()
    metrics.observe_request(method="GET", route="/", status_code=200, elapsed_seconds=0.05)

    text = metrics.snapshot().decode("utf-8")
    assert "# TYPE http_requests_total counter" in text
    assert "# TYPE http_request_duration_seconds histogram" in text
    assert "# TYPE active_connections gauge" in text
    assert 'http_requests_total{method="GET",route="/",status_code="200"} 1.0' in text
    # Default process collectors are registered alongside the request series.
    assert "python_info" in text


def test_snapshot_is_deterministic_without_changes() -> None:
    metrics = MetricsRegistry(default_collectors=False)
    metrics.observe_request(method="GET", route="/a", status_code=200, elapsed_seconds=0.2)
    assert metrics.snapshot() == metrics.snapshot()


def test_register_rejects_duplicate_names() -> None:
    metrics = MetricsRegistry(default_collectors=False)
    with pytest.raises(DuplicateMetricError):
        metrics.register(Counter("http_requests_total", "dup", registry=None))


def test_register_accepts_new_series() -> None:
    metrics = MetricsRegistry(default_collectors=False)
    jobs = Counter("jobs_processed_total", "Jobs", registry=None)
    metrics.register(jobs)
    jobs.inc()
    assert metrics.sample("jobs_processed_total") == 1.0


def test_snapshot_failure_raises_io_error() -> None:
    metrics = MetricsRegistry(default_collectors=False)
    metrics.register(_BrokenCollector())

    with pytest.raises(MetricsExportError) as exc_info:
        metrics.snapshot()
    assert isinstance(exc_info.value, OSError)


def test_duration_histogram_uses_fixed_buckets() -> None:
    metrics = MetricsRegistry(default_collectors=False)
    assert REQUEST_DURATION_BUCKETS == (0.1, 0.5, 1.0, 2.0, 5.0)

    metrics.observe_request(method="GET", route="/", status_code=200, elapsed_seconds=0.3)
    labels = {"method": "GET", "route": "/"}
    assert metrics.sample("http_request_duration_seconds_bucket", {**labels, "le": "0.1"}) == 0.0
    assert metrics.sample("http_request_duration_seconds_bucket", {**labels, "le": "0.5"}) == 1.0
    assert metrics.sample("http_request_duration_seconds_bucket", {**labels, "le": "+Inf"}) == 1.0


def test_gauge_tracks_open_connections() -> None:
    metrics = MetricsRegistry(default_collectors=False)
    metrics.connection_opened()
    metrics.connection_opened()
    assert metrics.sample("active_connections") == 2.0
    metrics.connection_closed()
    metrics.connection_closed()
    assert metrics.sample("active_connections") == 0.0
