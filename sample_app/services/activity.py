from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable

from sample_app.context import AppContext


class PeriodicActivityGenerator:
    """Emits one randomly chosen synthetic log+span every ``interval_seconds``."""

    def __init__(self, context: AppContext, interval_seconds: float | None = None) -> None:
        self.context = context
        self.interval_seconds = (
            context.settings.periodic_activity_interval_seconds if interval_seconds is None else interval_seconds
        )
        self._task: asyncio.Task[None] | None = None
        self.actions: dict[str, Callable[[], None]] = {
            "periodic_health_check": self._health_check,
            "periodic_metric_collection": self._metric_collection,
            "periodic_cleanup": self._cleanup,
        }

    def _health_check(self) -> None:
        with self.context.tracer.start_as_current_span("periodic_health_check"):
            self.context.logger.info("periodic_health_check", status="ok")

    def _metric_collection(self) -> None:
        with self.context.tracer.start_as_current_span("periodic_metric_collection"):
            self.context.logger.warning("high_memory_usage_detected", usage=self.context.rng.random() * 100)

    def _cleanup(self) -> None:
        with self.context.tracer.start_as_current_span("periodic_cleanup"):
            self.context.logger.info("cleanup_completed", items_processed=self.context.rng.randrange(100))

    def run_once(self) -> str:
        """Pick an action uniformly at random, run it, and return its name."""

        name = self.context.rng.choice(list(self.actions))
        self.actions[name]()
        return name

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self.run_once()
            except Exception:
                self.context.logger.exception("periodic_activity_failed")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="periodic-activity")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
