"""DTOs for tasks as seen by notification workflows (no dependency on ORM).

TaskDetails round-trips through a JSON-safe dict so a workflow step can
persist it as its memoized result.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from app.domain.enums import TaskStatus
from app.shared.utils.datetime import parse_iso_datetime


@dataclass(frozen=True)
class Assignee:
    """User a task is assigned to."""

    id: str
    email: str
    name: str


@dataclass(frozen=True)
class ProjectRef:
    """Project a task belongs to."""

    id: str
    name: str


@dataclass(frozen=True)
class TaskDetails:
    """Task joined with its assignee and project."""

    id: str
    title: str
    status: str
    due_date: datetime
    project: ProjectRef
    assignee: Assignee | None

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE.value

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "due_date": self.due_date.isoformat(),
            "project": {"id": self.project.id, "name": self.project.name},
            "assignee": (
                {
                    "id": self.assignee.id,
                    "email": self.assignee.email,
                    "name": self.assignee.name,
                }
                if self.assignee
                else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskDetails:
        assignee = data.get("assignee")
        return cls(
            id=data["id"],
            title=data["title"],
            status=data["status"],
            due_date=parse_iso_datetime(data["due_date"]),
            project=ProjectRef(**data["project"]),
            assignee=Assignee(**assignee) if assignee else None,
        )
