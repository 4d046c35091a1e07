"""WorkflowRun and WorkflowStep ORM models. Durable workflow engine state."""

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CuidModel, TimestampMixin
from app.shared.enums import StepKind, WorkflowRunStatus


def _in_values(column: str, values: list[str]) -> str:
    return "{} IN ({})".format(
        column, ", ".join("'{}'".format(v.replace("'", "''")) for v in values)
    )


class WorkflowRun(TimestampMixin, Base):
    """One durable execution of a workflow function for one event. Table: workflow_run.

    id is derived from (function_id, event_id) so redelivered events map to
    the same run. current_step is the step pointer; wake_at is when the run
    is next due (queued: now or retry time, sleeping: sleep target).
    """

    __tablename__ = "workflow_run"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    function_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    event_name: Mapped[str] = mapped_column(String(255), nullable=False)
    event_id: Mapped[str] = mapped_column(String(255), nullable=False)
    event_data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=WorkflowRunStatus.QUEUED.value,
        server_default=WorkflowRunStatus.QUEUED.value,
    )
    current_step: Mapped[str | None] = mapped_column(String(255), nullable=True)
    wake_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )
    lease_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    output: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_workflow_run_status_wake_at", "status", "wake_at"),
        UniqueConstraint("function_id", "event_id", name="uq_workflow_run_function_event"),
        CheckConstraint(
            _in_values("status", WorkflowRunStatus.values()),
            name="workflow_run_status_check",
        ),
    )


class WorkflowStep(CuidModel, Base):
    """Memoized step of a run. Table: workflow_step. A row means the step is done."""

    __tablename__ = "workflow_step"

    run_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("workflow_run.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    kind: Mapped[str] = mapped_column(String(16), nullable=False, default=StepKind.RUN.value)
    output: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("run_id", "name", name="uq_workflow_step_run_name"),
        CheckConstraint(_in_values("kind", StepKind.values()), name="workflow_step_kind_check"),
    )
