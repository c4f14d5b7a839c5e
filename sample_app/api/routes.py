from __future__ import annotations

import asyncio
import time

import psutil
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from sample_app.api.dependencies import get_context
from sample_app.context import AppContext
from sample_app.models.schemas import ErrorResponse, HealthResponse, WelcomeResponse, WorkResponse, utc_timestamp
from sample_app.observability.tracing import child_context, mark_ok, record_error
from sample_app.services.work import fibonacci

router = APIRouter(tags=["sample"])

FIBONACCI_INPUT = 25
SIMULATED_ERROR_MESSAGE = "This is a simulated error for testing purposes"


class SimulatedError(RuntimeError):
    pass


@router.get("/", response_model=WelcomeResponse)
async def homepage(ctx: AppContext = Depends(get_context)) -> WelcomeResponse:
    with ctx.tracer.start_as_current_span("handle_homepage") as span:
        span.set_attribute("user.id", "anonymous")
        span.set_attribute("page.type", "homepage")

        ctx.logger.info("homepage_accessed", user_id="anonymous", timestamp=utc_timestamp())

        await asyncio.sleep(ctx.rng.random() * ctx.settings.homepage_max_delay_seconds)
        mark_ok(span)

    return WelcomeResponse(
        message="Welcome to DSLM Sample App!",
        timestamp=utc_timestamp(),
        version=ctx.settings.service_version,
    )


@router.get("/api/health", response_model=HealthResponse)
async def health(ctx: AppContext = Depends(get_context)) -> HealthResponse:
    with ctx.tracer.start_as_current_span("health_check") as span:
        span.set_attribute("health.status", "ok")

        process = psutil.Process()
        memory = process.memory_info()
        ctx.logger.info(
            "health_check_performed",
            status="healthy",
            uptime=round(time.time() - process.create_time(), 3),
            memory={"rss": memory.rss, "vms": memory.vms},
        )

    return HealthResponse(status="healthy", timestamp=utc_timestamp())


@router.get("/api/work", response_model=WorkResponse)
async def do_work(ctx: AppContext = Depends(get_context)) -> WorkResponse:
    with ctx.tracer.start_as_current_span("do_work") as span:
        span.set_attribute("work.type", "computation")
        span.set_attribute("work.complexity", "medium")

        with ctx.tracer.start_as_current_span("computation", context=child_context(span)) as work_span:
            work_span.set_attribute("operation", "fibonacci")
            # Runs on the event loop on purpose; this endpoint exists to burn CPU.
            result = fibonacci(FIBONACCI_INPUT)
            work_span.set_attribute("result.size", len(str(result)))

        ctx.logger.info("work_completed", operation="fibonacci", input=FIBONACCI_INPUT, result=result)

    return WorkResponse(operation="fibonacci", input=FIBONACCI_INPUT, result=result, timestamp=utc_timestamp())


@router.get("/api/error", response_model=ErrorResponse, status_code=500)
async def simulate_error(ctx: AppContext = Depends(get_context)) -> JSONResponse:
    with ctx.tracer.start_as_current_span(
        "simulate_error", record_exception=False, set_status_on_exception=False
    ) as span:
        span.set_attribute("error.type", "simulated")
        span.set_attribute("error.severity", "medium")

        try:
            raise SimulatedError("Simulated error for testing")
        except SimulatedError as exc:
            error = exc

        ctx.logger.error(
            "simulated_error_occurred",
            error=str(error),
            user_id="test-user",
            endpoint="/api/error",
            exc_info=error,
        )
        record_error(span, error)

    body = ErrorResponse(error="Internal Server Error", message=SIMULATED_ERROR_MESSAGE, timestamp=utc_timestamp())
    return JSONResponse(status_code=500, content=body.model_dump())
