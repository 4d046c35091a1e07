"""DTOs for the durable workflow engine: events in, run summaries out."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class WorkflowEvent:
    """Event that triggers workflow functions registered for its name.

    id identifies the delivery; sending the same id twice does not start
    a second run of any function.
    """

    name: str
    data: dict[str, Any] = field(default_factory=dict)
    id: str | None = None


@dataclass(frozen=True)
class StepRecord:
    """A completed step of a run."""

    name: str
    kind: str
    output: Any
    completed_at: datetime


@dataclass(frozen=True)
class WorkflowRunResult:
    """Summary of a workflow run (for inspection endpoints and tests)."""

    id: str
    function_id: str
    event_name: str
    event_id: str
    status: str
    current_step: str | None
    wake_at: datetime | None
    attempts: int
    output: Any
    error_message: str | None
    started_at: datetime | None
    completed_at: datetime | None
    steps: list[StepRecord] = field(default_factory=list)
