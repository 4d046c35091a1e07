"""Workflow functions run by the durable workflow engine."""

from app.application.workflows.identity_sync import (
    SYNC_FUNCTIONS,
    IdentitySyncHandlers,
    SyncFunction,
)
from app.application.workflows.task_assignment import (
    ReminderState,
    TaskAssignmentWorkflow,
    after_assignment,
    after_recheck,
)

__all__ = [
    "SYNC_FUNCTIONS",
    "IdentitySyncHandlers",
    "ReminderState",
    "SyncFunction",
    "TaskAssignmentWorkflow",
    "after_assignment",
    "after_recheck",
]
