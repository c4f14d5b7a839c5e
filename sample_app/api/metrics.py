from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse

from sample_app.api.dependencies import get_context
from sample_app.context import AppContext
from sample_app.observability.metrics import MetricsExportError


router = APIRouter(tags=["metrics"])


@router.get("/metrics")
async def metrics(ctx: AppContext = Depends(get_context)) -> Response:
    try:
        body = ctx.metrics.snapshot()
    except MetricsExportError as exc:
        ctx.logger.error("metrics_export_failed", error=str(exc))
        return PlainTextResponse(str(exc), status_code=500)
    return Response(content=body, media_type=ctx.metrics.content_type)
