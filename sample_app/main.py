from __future__ import annotations

import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from opentelemetry.sdk.trace import SpanProcessor

from sample_app.api.metrics import router as metrics_router
from sample_app.api.routes import router as sample_router
from sample_app.config import Settings, get_settings
from sample_app.context import AppContext, build_context
from sample_app.observability.loki import LokiShipper
from sample_app.observability.middleware import RequestInstrumentationMiddleware
from sample_app.services.activity import PeriodicActivityGenerator


def create_app(
    settings: Settings | None = None,
    *,
    span_processor: SpanProcessor | None = None,
    rng: random.Random | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    context = build_context(settings, span_processor=span_processor, rng=rng)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await _startup(app.state.context, app)
        try:
            yield
        finally:
            await _shutdown(app)

    app = FastAPI(title="DSLM Sample App", version=settings.service_version, lifespan=lifespan)
    app.state.context = context
    app.add_middleware(RequestInstrumentationMiddleware, metrics=context.metrics)
    app.include_router(sample_router)
    app.include_router(metrics_router)
    return app


async def _startup(context: AppContext, app: FastAPI) -> None:
    settings = context.settings

    shipper = LokiShipper.from_settings(settings) if settings.loki_enabled else None
    if shipper is not None:
        shipper.start()
    app.state.loki_shipper = shipper

    activity = PeriodicActivityGenerator(context)
    activity.start()
    app.state.activity = activity

    context.logger.info(
        "app_started",
        port=settings.port,
        environment=settings.environment,
        version=settings.service_version,
    )


async def _shutdown(app: FastAPI) -> None:
    context: AppContext = app.state.context
    context.logger.info("app_shutting_down")

    await app.state.activity.stop()
    context.shutdown()

    if app.state.loki_shipper is not None:
        app.state.loki_shipper.stop()
