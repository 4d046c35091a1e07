"""Durable workflow engine: event-triggered functions with memoized steps and sleeps.

A workflow function is an async handler ``handler(event, step)``. Every
time a run executes, the handler is replayed from the top; ``step.run_once``
returns the stored result of steps that already completed, so side effects
happen once per run. ``step.sleep_until`` persists the run as sleeping and
unwinds the handler; the worker replays it once the wake time has passed.

Nothing crosses a suspension in memory: the run row, its step rows and the
event payload are everything the replay needs.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.application.dtos.workflow import WorkflowEvent, WorkflowRunResult
from app.application.interfaces.services import WorkflowHandler
from app.domain.exceptions import (
    DuplicateStepException,
    ProjectManagementException,
    WorkflowNotFoundException,
)
from app.infrastructure.persistence.models.workflow import WorkflowRun
from app.infrastructure.persistence.repositories.workflow_run_repo import (
    WorkflowRunRepository,
    to_run_result,
)
from app.shared.enums import StepKind, WorkflowRunStatus
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import TracedOperation
from app.shared.utils.datetime import ensure_utc, utc_now
from app.shared.utils.generators import generate_cuid, stable_id

logger = get_logger(__name__)

HandlerFactory = Callable[[AsyncSession], WorkflowHandler]


class WorkflowSleep(Exception):
    """Control-flow signal raised by sleep_until to unwind a handler. Not an error."""

    def __init__(self, step_name: str, until: datetime) -> None:
        super().__init__(f"sleep '{step_name}' until {until.isoformat()}")
        self.step_name = step_name
        self.until = until


@dataclass(frozen=True)
class WorkflowFunction:
    """A registered workflow function: id, trigger event name, handler factory.

    The factory receives the run's session so handlers can build
    repositories that share the engine's transaction and checkpoints.
    """

    id: str
    event_name: str
    factory: HandlerFactory


def _json_safe(value: Any) -> Any:
    """Round-trip through JSON so replays see exactly what was stored."""
    return json.loads(json.dumps(value))


class StepController:
    """Per-run step memoization handed to handlers (implements IStepController)."""

    def __init__(
        self,
        run: WorkflowRun,
        repo: WorkflowRunRepository,
        completed: dict[str, Any],
        *,
        clock: Callable[[], datetime],
        checkpoint: Callable[[], Awaitable[None]],
        max_attempts: int = 1,
    ) -> None:
        self._run = run
        self._repo = repo
        self._completed = completed
        self._clock = clock
        self._checkpoint = checkpoint
        self._max_attempts = max_attempts
        self._seen: set[str] = set()

    @property
    def final_attempt(self) -> bool:
        """True when a retriable failure of the current step would fail the run."""
        return (self._run.attempts or 0) + 1 >= self._max_attempts

    async def _complete(
        self, name: str, kind: StepKind, output: Any, completed_at: datetime
    ) -> None:
        await self._repo.record_step(self._run.id, name, kind, output, completed_at)
        # Attempts are counted per step.
        self._run.attempts = 0
        await self._checkpoint()
        self._completed[name] = output

    def _enter(self, name: str) -> None:
        if name in self._seen:
            raise DuplicateStepException(self._run.id, name)
        self._seen.add(name)

    async def run_once(self, name: str, fn: Callable[[], Awaitable[Any]]) -> Any:
        """Run fn unless the step already completed in this run; return its result."""
        self._enter(name)
        if name in self._completed:
            logger.debug("Run %s: step %r memoized, skipping", self._run.id, name)
            return self._completed[name]
        self._run.current_step = name
        async with TracedOperation(
            "workflow.step",
            {"workflow.run_id": self._run.id, "workflow.step": name},
        ):
            output = _json_safe(await fn())
        await self._complete(name, StepKind.RUN, output, self._clock())
        return output

    async def sleep_until(self, name: str, until: datetime) -> None:
        """Suspend the run until the timestamp; return at once when it has passed."""
        self._enter(name)
        if name in self._completed:
            return
        self._run.current_step = name
        target = ensure_utc(until)
        assert target is not None
        now = self._clock()
        if target > now:
            raise WorkflowSleep(name, target)
        await self._complete(name, StepKind.SLEEP, {"until": target.isoformat()}, now)


class WorkflowEngine:
    """Registers workflow functions, creates runs from events and executes due runs."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        clock: Callable[[], datetime] = utc_now,
        max_attempts: int = 3,
        retry_delay: timedelta = timedelta(seconds=60),
        lease: timedelta = timedelta(seconds=300),
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.lease = lease
        self._functions: dict[str, WorkflowFunction] = {}

    @property
    def functions(self) -> list[WorkflowFunction]:
        return list(self._functions.values())

    def register(self, function_id: str, event_name: str, factory: HandlerFactory) -> None:
        """Register a handler factory for an event name. Function ids are unique."""
        if function_id in self._functions:
            raise ValueError(f"Workflow function already registered: {function_id}")
        self._functions[function_id] = WorkflowFunction(function_id, event_name, factory)
        logger.debug("Registered workflow function %s on %s", function_id, event_name)

    def functions_for(self, event_name: str) -> list[WorkflowFunction]:
        return [f for f in self._functions.values() if f.event_name == event_name]

    async def send(self, event: WorkflowEvent) -> list[str]:
        """Create one queued run per function listening to the event; return run ids.

        Run ids are derived from (function id, event id), so sending the same
        event id again returns the existing runs without creating new ones.
        """
        event_id = event.id or generate_cuid()
        functions = self.functions_for(event.name)
        if not functions:
            logger.info("No workflow functions for event %s (id=%s)", event.name, event_id)
            return []
        now = self._clock()
        run_ids: list[str] = []
        async with self._session_factory() as session:
            repo = WorkflowRunRepository(session)
            for function in functions:
                run_id = stable_id(function.id, event_id)
                created = await repo.create_if_absent(
                    run_id,
                    function_id=function.id,
                    event_name=event.name,
                    event_id=event_id,
                    event_data=_json_safe(event.data),
                    wake_at=now,
                )
                if created:
                    logger.info(
                        "Queued run %s of %s for event %s (id=%s)",
                        run_id,
                        function.id,
                        event.name,
                        event_id,
                    )
                else:
                    logger.info("Run %s already exists for event id %s", run_id, event_id)
                run_ids.append(run_id)
            await session.commit()
        return run_ids

    async def run_due(self, limit: int = 20) -> int:
        """Execute up to limit runs that are due now. Return how many were executed."""
        async with self._session_factory() as session:
            due_ids = await WorkflowRunRepository(session).list_due_ids(self._clock(), limit)
        executed = 0
        for run_id in due_ids:
            if await self.execute(run_id) is not None:
                executed += 1
        return executed

    async def execute(self, run_id: str) -> WorkflowRunResult | None:
        """Claim and execute one due run. Return its summary, or None if not claimed."""
        async with self._session_factory() as session:
            repo = WorkflowRunRepository(session)
            now = self._clock()
            claimed = await repo.claim(run_id, now, now + self.lease)
            await session.commit()
            if not claimed:
                logger.debug("Run %s not claimable (not due or taken)", run_id)
                return None
            run = await repo.load_for_execution(run_id)
            if run is None:
                return None
            if run.started_at is None:
                run.started_at = now
            await self._execute_claimed(session, repo, run)
            return to_run_result(run, await repo.list_steps(run.id))

    async def get_run(self, run_id: str) -> WorkflowRunResult:
        """Return the run summary or raise WorkflowNotFoundException."""
        async with self._session_factory() as session:
            result = await WorkflowRunRepository(session).get_result(run_id)
        if result is None:
            raise WorkflowNotFoundException(run_id)
        return result

    async def _execute_claimed(
        self, session: AsyncSession, repo: WorkflowRunRepository, run: WorkflowRun
    ) -> None:
        function = self._functions.get(run.function_id)
        if function is None:
            self._fail(run, f"Unknown workflow function: {run.function_id}")
            await session.commit()
            logger.error("Run %s failed: function %s is not registered", run.id, run.function_id)
            return

        completed = {s.name: s.output for s in await repo.list_steps(run.id)}
        step = StepController(
            run,
            repo,
            completed,
            clock=self._clock,
            checkpoint=session.commit,
            max_attempts=self.max_attempts,
        )
        event = WorkflowEvent(name=run.event_name, data=dict(run.event_data or {}), id=run.event_id)
        logger.info(
            "Executing run %s of %s (%d steps memoized)", run.id, function.id, len(completed)
        )
        try:
            handler = function.factory(session)
            output = await handler(event, step)
        except WorkflowSleep as sleep:
            run.status = WorkflowRunStatus.SLEEPING.value
            run.wake_at = sleep.until
            run.lease_expires_at = None
            await session.commit()
            logger.info(
                "Run %s sleeping at step %r until %s",
                run.id,
                sleep.step_name,
                sleep.until.isoformat(),
            )
            return
        except Exception as e:
            await self._handle_failure(session, repo, run.id, run.current_step, e)
            return

        run.status = WorkflowRunStatus.COMPLETED.value
        run.output = _json_safe(output)
        run.completed_at = self._clock()
        run.wake_at = None
        run.lease_expires_at = None
        run.error_message = None
        await session.commit()
        logger.info("Run %s of %s completed", run.id, function.id)

    async def _handle_failure(
        self,
        session: AsyncSession,
        repo: WorkflowRunRepository,
        run_id: str,
        failed_step: str | None,
        error: Exception,
    ) -> None:
        # Discard writes of the failing step; completed steps were already committed.
        await session.rollback()
        run = await repo.load_for_execution(run_id)
        if run is None:
            return
        run.current_step = failed_step
        message = str(error) or error.__class__.__name__
        retriable = isinstance(error, ProjectManagementException) and error.retriable
        run.attempts = (run.attempts or 0) + 1
        if retriable and run.attempts < self.max_attempts:
            run.status = WorkflowRunStatus.QUEUED.value
            run.wake_at = self._clock() + self.retry_delay
            run.lease_expires_at = None
            run.error_message = message
            await session.commit()
            logger.warning(
                "Run %s failed at step %r (attempt %d/%d), retrying at %s: %s",
                run.id,
                run.current_step,
                run.attempts,
                self.max_attempts,
                run.wake_at.isoformat(),
                message,
            )
            return
        self._fail(run, message)
        await session.commit()
        if retriable:
            logger.error(
                "Run %s failed at step %r after %d attempts: %s",
                run.id,
                run.current_step,
                run.attempts,
                message,
            )
        else:
            logger.error(
                "Run %s failed at step %r: %s",
                run.id,
                run.current_step,
                message,
                exc_info=error,
            )

    def _fail(self, run: WorkflowRun, message: str) -> None:
        run.status = WorkflowRunStatus.FAILED.value
        run.error_message = message
        run.completed_at = self._clock()
        run.wake_at = None
        run.lease_expires_at = None
