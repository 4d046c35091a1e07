"""Shared enumerations.

Cross-cutting enums used by application and infrastructure (workflow
engine bookkeeping). Domain-specific enums (e.g. TaskStatus) live in
app.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class WorkflowRunStatus(_ValuesMixin, str, Enum):
    """Durable workflow run lifecycle status."""

    QUEUED = "queued"
    RUNNING = "running"
    SLEEPING = "sleeping"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (WorkflowRunStatus.COMPLETED, WorkflowRunStatus.FAILED)


class StepKind(_ValuesMixin, str, Enum):
    """Kind of memoized workflow step."""

    RUN = "run"
    SLEEP = "sleep"
