"""Task ORM model. Assignable to a user, due on a date, part of a project."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.domain.enums import TaskStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CuidModel
from app.infrastructure.persistence.models.project import Project
from app.infrastructure.persistence.models.user import User


class Task(CuidModel, Base):
    """Task. Table: task. Loaded with assignee and project for notifications."""

    __tablename__ = "task"

    project_id: Mapped[str] = mapped_column(
        String, ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True
    )
    assignee_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=TaskStatus.TODO.value,
        server_default=TaskStatus.TODO.value,
    )
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    assignee: Mapped[User | None] = relationship(lazy="raise")
    project: Mapped[Project] = relationship(lazy="raise")

    __table_args__ = (
        Index("ix_task_project_status", "project_id", "status"),
        CheckConstraint(
            "status IN ({})".format(", ".join(f"'{v}'" for v in TaskStatus.values())),
            name="task_status_check",
        ),
    )
