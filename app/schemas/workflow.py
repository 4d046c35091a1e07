"""Workflow run API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class WorkflowStepResponse(BaseModel):
    """Completed step of a workflow run."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    kind: str
    output: Any = None
    completed_at: datetime


class WorkflowRunResponse(BaseModel):
    """Workflow run summary."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    function_id: str
    event_name: str
    event_id: str
    status: str
    current_step: str | None
    wake_at: datetime | None
    attempts: int
    output: Any = None
    error_message: str | None
    started_at: datetime | None
    completed_at: datetime | None
    steps: list[WorkflowStepResponse]
