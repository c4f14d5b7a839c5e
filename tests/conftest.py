from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from sample_app.config import get_settings
from sample_app.context import AppContext
from sample_app.main import create_app


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    # No network sinks in tests: spans go to an in-memory exporter, Loki is off.
    monkeypatch.setenv("LOKI_URL", "")
    monkeypatch.setenv("TRACING_ENABLED", "false")
    monkeypatch.setenv("HOMEPAGE_MAX_DELAY_SECONDS", "0")
    monkeypatch.setenv("RANDOM_SEED", "1234")
    for name in ("PORT", "APP_ENV", "SERVICE_NAME", "SERVICE_VERSION"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def app(span_exporter: InMemorySpanExporter) -> FastAPI:
    return create_app(span_processor=SimpleSpanProcessor(span_exporter))


@pytest.fixture
def context(app: FastAPI) -> AppContext:
    return app.state.context


@pytest.fixture
async def api_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    # Let unhandled route errors turn into 500 responses instead of bubbling into the test.
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def log_events(caplog: pytest.LogCaptureFixture, event: str | None = None, level: int | None = None) -> list[dict]:
    """structlog event dicts captured by pytest (ProcessorFormatter leaves them in record.msg)."""

    found = []
    for record in caplog.records:
        if not isinstance(record.msg, dict):
            continue
        if event is not None and record.msg.get("event") != event:
            continue
        if level is not None and record.levelno != level:
            continue
        found.append(record.msg)
    return found

