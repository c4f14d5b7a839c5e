"""Remote log shipping to Grafana Loki.

Records are rendered to JSON on the calling thread, queued, and pushed by a
background listener thread so request handling never waits on the network.
"""

from __future__ import annotations

import logging
import queue
import sys
import time
from collections.abc import Callable
from logging.handlers import QueueHandler, QueueListener

import httpx

from sample_app.config import Settings
from sample_app.observability.logging import json_formatter


def _report_to_stderr(exc: Exception) -> None:
    print(f"Loki connection error: {exc}", file=sys.stderr)


class LokiHandler(logging.Handler):
    """Pushes each record as a single-entry stream to the Loki push API."""

    def __init__(
        self,
        push_url: str,
        labels: dict[str, str],
        *,
        timeout: float = 5.0,
        client: httpx.Client | None = None,
        on_connection_error: Callable[[Exception], None] = _report_to_stderr,
    ) -> None:
        super().__init__()
        self.push_url = push_url
        self.labels = dict(labels)
        self._client = client or httpx.Client(timeout=timeout)
        self._on_connection_error = on_connection_error

    def build_payload(self, record: logging.LogRecord) -> dict:
        stream = {**self.labels, "level": record.levelname.lower()}
        # Loki wants the timestamp as a string of nanoseconds; use shipping time.
        return {"streams": [{"stream": stream, "values": [[str(time.time_ns()), record.getMessage()]]}]}

    def emit(self, record: logging.LogRecord) -> None:
        try:
            resp = self._client.post(self.push_url, json=self.build_payload(record))
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            self._on_connection_error(exc)

    def close(self) -> None:
        self._client.close()
        super().close()


# Records from the push transport itself; shipping them would trigger another push.
TRANSPORT_LOGGERS = ("httpx", "httpcore")

# uvicorn loggers do not propagate to root (see configure_logging), so they get the queue handler directly.
NON_PROPAGATING_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class _DropTransportRecords(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return not any(record.name == name or record.name.startswith(name + ".") for name in TRANSPORT_LOGGERS)


class LokiShipper:
    """Owns the queue between the application loggers and a LokiHandler."""

    def __init__(self, handler: logging.Handler) -> None:
        self.handler = handler
        self._queue: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
        self.queue_handler = QueueHandler(self._queue)
        self.queue_handler.setFormatter(json_formatter())
        self.queue_handler.addFilter(_DropTransportRecords())
        self._listener = QueueListener(self._queue, handler)
        self._attached: list[logging.Logger] = []
        self._running = False

    @classmethod
    def from_settings(cls, settings: Settings) -> LokiShipper:
        handler = LokiHandler(
            settings.loki_push_url,
            settings.loki_labels,
            timeout=settings.loki_timeout_seconds,
        )
        return cls(handler)

    def _target_loggers(self) -> list[logging.Logger]:
        loggers = [logging.getLogger()]
        loggers.extend(logging.getLogger(name) for name in NON_PROPAGATING_LOGGERS if not logging.getLogger(name).propagate)
        return loggers

    def start(self) -> None:
        if self._running:
            return
        self._listener.start()
        self._attached = self._target_loggers()
        for logger in self._attached:
            logger.addHandler(self.queue_handler)
        self._running = True

    def stop(self) -> None:
        if not self._running:
            return
        for logger in self._attached:
            logger.removeHandler(self.queue_handler)
        self._attached = []
        # Drains whatever is still queued before returning.
        self._listener.stop()
        self.handler.close()
        self._running = False
