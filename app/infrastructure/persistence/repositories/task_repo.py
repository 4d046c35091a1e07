"""Task repository: reads for notification workflows plus creation for seeding."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.application.dtos.task import Assignee, ProjectRef, TaskDetails
from app.domain.enums import TaskStatus
from app.infrastructure.persistence.models.project import Project
from app.infrastructure.persistence.models.task import Task
from app.infrastructure.persistence.repositories.base import (
    BaseRepository,
    transient_errors,
)
from app.shared.utils.datetime import ensure_utc


def _to_details(t: Task) -> TaskDetails:
    """Map Task ORM (with assignee and project loaded) to TaskDetails."""
    due_date = ensure_utc(t.due_date)
    assert due_date is not None
    assignee = (
        Assignee(id=t.assignee.id, email=t.assignee.email, name=t.assignee.name)
        if t.assignee is not None
        else None
    )
    return TaskDetails(
        id=t.id,
        title=t.title,
        status=t.status,
        due_date=due_date,
        project=ProjectRef(id=t.project.id, name=t.project.name),
        assignee=assignee,
    )


class TaskRepository(BaseRepository[Task]):
    """Task repository. Implements ITaskRepository."""

    resource_type = "task"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Task)

    async def get_details(self, task_id: str) -> TaskDetails | None:
        """Return the task with assignee and project in one read, or None."""
        stmt = (
            select(Task)
            .where(Task.id == task_id)
            .options(selectinload(Task.assignee), selectinload(Task.project))
            .execution_options(populate_existing=True)
        )
        with transient_errors("get task details"):
            result = await self.db.execute(stmt)
        task = result.scalar_one_or_none()
        return _to_details(task) if task else None

    async def create_task(
        self,
        project_id: str,
        title: str,
        due_date: datetime,
        *,
        assignee_id: str | None = None,
        status: str = TaskStatus.TODO.value,
        description: str | None = None,
    ) -> str:
        """Create a task and return its id. The due date is stored as UTC."""
        task = await self.create(
            Task(
                project_id=project_id,
                title=title,
                due_date=ensure_utc(due_date),
                assignee_id=assignee_id,
                status=status,
                description=description,
            )
        )
        return task.id

    async def set_status(self, task_id: str, status: TaskStatus) -> None:
        task = await self.get_or_raise(task_id)
        task.status = status.value
        await self.save(task)


class ProjectRepository(BaseRepository[Project]):
    """Project repository (creation for seeding and tests)."""

    resource_type = "project"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Project)

    async def create_project(
        self, workspace_id: str, name: str, description: str | None = None
    ) -> str:
        project = await self.create(
            Project(workspace_id=workspace_id, name=name, description=description)
        )
        return project.id
