"""Background worker that executes due workflow runs.

Started from the application lifespan. Polls the engine every
poll_interval seconds; ``wake()`` triggers an early pass (used right
after events are sent so fresh runs do not wait a full interval).
"""

from __future__ import annotations

import asyncio
import contextlib

from app.infrastructure.services.workflow_engine import WorkflowEngine
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class WorkflowWorker:
    """Polling loop around WorkflowEngine.run_due."""

    def __init__(
        self,
        engine: WorkflowEngine,
        *,
        poll_interval: float = 5.0,
        batch_size: int = 20,
    ) -> None:
        self.engine = engine
        self.poll_interval = poll_interval
        self.batch_size = batch_size
        self._wake_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the loop in a background task (idempotent)."""
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="workflow-worker")
        logger.info(
            "Workflow worker started (poll every %.1fs, batch %d)",
            self.poll_interval,
            self.batch_size,
        )

    def wake(self) -> None:
        """Run the next pass now instead of after the poll interval."""
        self._wake_event.set()

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Workflow worker stopped")

    async def run_once(self) -> int:
        """Execute one batch of due runs; errors are logged, not raised."""
        try:
            executed = await self.engine.run_due(self.batch_size)
        except Exception:
            logger.exception("Workflow worker pass failed")
            return 0
        if executed:
            logger.debug("Workflow worker executed %d runs", executed)
        return executed

    async def _loop(self) -> None:
        while True:
            executed = await self.run_once()
            if executed >= self.batch_size:
                # More runs are probably due; go again without waiting.
                await asyncio.sleep(0)
                continue
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._wake_event.wait(), timeout=self.poll_interval)
            self._wake_event.clear()
