from __future__ import annotations

import uuid
from time import perf_counter
from typing import Any, Callable

import structlog
from starlette.datastructures import Headers, MutableHeaders

from sample_app.observability.metrics import MetricsRegistry


class RequestInstrumentationMiddleware:
    """Access logs, request metrics and the active-connections gauge.

    Bookkeeping happens in ``finally`` so it runs exactly once per request,
    including when the handler raises or the client disconnects mid-response.
    """

    def __init__(
        self,
        app: Callable[..., Any],
        metrics: MetricsRegistry,
        logger: Any | None = None,
    ) -> None:
        self.app = app
        self.metrics = metrics
        self.logger = logger or structlog.get_logger("access")

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        path = scope.get("path", "")
        method = scope.get("method", "GET")
        headers = Headers(scope=scope)
        client = scope.get("client")

        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = perf_counter()
        status_code: int = 500
        self.metrics.connection_opened()

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code

            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))
                MutableHeaders(scope=message)["X-Request-ID"] = request_id

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed = perf_counter() - start
            self.metrics.connection_closed()

            self.metrics.observe_request(
                method=method,
                route=_route_template(scope, path),
                status_code=status_code,
                elapsed_seconds=elapsed,
            )

            self.logger.info(
                "http_request",
                method=method,
                path=path,
                status=status_code,
                duration=round(elapsed, 6),
                user_agent=headers.get("user-agent"),
                ip=client[0] if client else None,
            )

            structlog.contextvars.clear_contextvars()


def _route_template(scope: dict[str, Any], path: str) -> str:
    # FastAPI's router stores the matched APIRoute in the scope; unmatched paths fall back to the raw path.
    route = scope.get("route")
    return getattr(route, "path", None) or path
