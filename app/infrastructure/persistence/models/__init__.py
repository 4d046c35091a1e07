"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    CuidModel,
    TimestampMixin,
)
from app.infrastructure.persistence.models.project import Project
from app.infrastructure.persistence.models.task import Task
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.models.workflow import WorkflowRun, WorkflowStep
from app.infrastructure.persistence.models.workspace import Workspace, WorkspaceMember

__all__ = [
    "User",
    "Workspace",
    "WorkspaceMember",
    "Project",
    "Task",
    "WorkflowRun",
    "WorkflowStep",
    "CuidMixin",
    "CuidModel",
    "TimestampMixin",
]
