"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.task_repo import (
    ProjectRepository,
    TaskRepository,
)
from app.infrastructure.persistence.repositories.user_repo import UserRepository
from app.infrastructure.persistence.repositories.workflow_run_repo import (
    WorkflowRunRepository,
)
from app.infrastructure.persistence.repositories.workspace_repo import (
    WorkspaceMemberRepository,
    WorkspaceRepository,
)

__all__ = [
    "BaseRepository",
    "ProjectRepository",
    "TaskRepository",
    "UserRepository",
    "WorkflowRunRepository",
    "WorkspaceMemberRepository",
    "WorkspaceRepository",
]
