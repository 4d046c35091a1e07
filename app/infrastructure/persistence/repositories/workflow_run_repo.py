"""Workflow run repository: durable run records, step memo rows, due-run claiming."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.workflow import StepRecord, WorkflowRunResult
from app.infrastructure.persistence.models.workflow import WorkflowRun, WorkflowStep
from app.infrastructure.persistence.repositories.base import (
    BaseRepository,
    transient_errors,
)
from app.shared.enums import StepKind, WorkflowRunStatus
from app.shared.utils.datetime import ensure_utc

_WAITING = (WorkflowRunStatus.QUEUED.value, WorkflowRunStatus.SLEEPING.value)


def _due_clause(now: datetime) -> Any:
    """Runs that should execute now: waiting and past wake_at, or running with a dead lease."""
    return or_(
        and_(WorkflowRun.status.in_(_WAITING), WorkflowRun.wake_at <= now),
        and_(
            WorkflowRun.status == WorkflowRunStatus.RUNNING.value,
            WorkflowRun.lease_expires_at <= now,
        ),
    )


def to_run_result(run: WorkflowRun, steps: list[WorkflowStep]) -> WorkflowRunResult:
    """Map a run and its steps to WorkflowRunResult."""
    return WorkflowRunResult(
        id=run.id,
        function_id=run.function_id,
        event_name=run.event_name,
        event_id=run.event_id,
        status=run.status,
        current_step=run.current_step,
        wake_at=ensure_utc(run.wake_at),
        attempts=run.attempts,
        output=run.output,
        error_message=run.error_message,
        started_at=ensure_utc(run.started_at),
        completed_at=ensure_utc(run.completed_at),
        steps=[
            StepRecord(
                name=s.name,
                kind=s.kind,
                output=s.output,
                completed_at=ensure_utc(s.completed_at),
            )
            for s in steps
        ],
    )


class WorkflowRunRepository(BaseRepository[WorkflowRun]):
    """Persistence for the durable workflow engine."""

    resource_type = "workflow_run"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkflowRun)

    async def create_if_absent(
        self,
        run_id: str,
        *,
        function_id: str,
        event_name: str,
        event_id: str,
        event_data: dict[str, Any],
        wake_at: datetime,
    ) -> bool:
        """Insert a queued run unless one with this id exists. Return True when created."""
        if await self.get_by_id(run_id) is not None:
            return False
        await self.create(
            WorkflowRun(
                id=run_id,
                function_id=function_id,
                event_name=event_name,
                event_id=event_id,
                event_data=event_data,
                status=WorkflowRunStatus.QUEUED.value,
                wake_at=ensure_utc(wake_at),
                attempts=0,
            )
        )
        return True

    async def list_due_ids(self, now: datetime, limit: int) -> list[str]:
        """Ids of runs due at now, oldest wake time first."""
        stmt = (
            select(WorkflowRun.id)
            .where(_due_clause(now))
            .order_by(WorkflowRun.wake_at)
            .limit(limit)
        )
        with transient_errors("list due workflow runs"):
            result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def claim(self, run_id: str, now: datetime, lease_until: datetime) -> bool:
        """Mark a due run as running under a lease. Only one caller can win.

        Conditional UPDATE: returns False when the run is no longer due
        (already claimed, finished, or rescheduled).
        """
        stmt = (
            update(WorkflowRun)
            .where(WorkflowRun.id == run_id, _due_clause(now))
            .values(
                status=WorkflowRunStatus.RUNNING.value,
                lease_expires_at=ensure_utc(lease_until),
            )
            .execution_options(synchronize_session=False)
        )
        with transient_errors("claim workflow run"):
            result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def load_for_execution(self, run_id: str) -> WorkflowRun | None:
        """Load a run fresh from the database (ignoring identity-map state)."""
        stmt = (
            select(WorkflowRun)
            .where(WorkflowRun.id == run_id)
            .execution_options(populate_existing=True)
        )
        with transient_errors("load workflow run"):
            result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_steps(self, run_id: str) -> list[WorkflowStep]:
        stmt = (
            select(WorkflowStep)
            .where(WorkflowStep.run_id == run_id)
            .order_by(WorkflowStep.completed_at, WorkflowStep.created_at)
        )
        with transient_errors("list workflow steps"):
            result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def record_step(
        self,
        run_id: str,
        name: str,
        kind: StepKind,
        output: Any,
        completed_at: datetime,
    ) -> None:
        """Insert the memo row for a completed step."""
        with transient_errors("record workflow step"):
            self.db.add(
                WorkflowStep(
                    run_id=run_id,
                    name=name,
                    kind=kind.value,
                    output=output,
                    completed_at=ensure_utc(completed_at),
                )
            )
            await self.db.flush()

    async def get_result(self, run_id: str) -> WorkflowRunResult | None:
        run = await self.load_for_execution(run_id)
        if run is None:
            return None
        return to_run_result(run, await self.list_steps(run_id))
