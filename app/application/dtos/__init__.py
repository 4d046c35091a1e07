"""Application DTOs (no ORM dependency)."""

from app.application.dtos.task import Assignee, ProjectRef, TaskDetails
from app.application.dtos.user import UserResult, WorkspaceMemberResult, WorkspaceResult
from app.application.dtos.workflow import StepRecord, WorkflowEvent, WorkflowRunResult

__all__ = [
    "Assignee",
    "ProjectRef",
    "StepRecord",
    "TaskDetails",
    "UserResult",
    "WorkflowEvent",
    "WorkflowRunResult",
    "WorkspaceMemberResult",
    "WorkspaceResult",
]
