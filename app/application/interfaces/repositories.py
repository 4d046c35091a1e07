"""Repository interfaces (ports) for the application layer.

Protocols define contracts for datastore access (DIP). Workflow functions
depend on these, never on SQLAlchemy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.application.dtos.task import TaskDetails
    from app.application.dtos.user import (
        UserResult,
        WorkspaceMemberResult,
        WorkspaceResult,
    )


class ITaskRepository(Protocol):
    """Protocol for task reads used by notification workflows."""

    async def get_details(self, task_id: str) -> TaskDetails | None:
        """Return the task with assignee and project, or None when it does not exist."""


class IUserRepository(Protocol):
    """Protocol for users mirrored from the identity provider."""

    async def create_user(
        self, user_id: str, email: str, name: str, image: str | None
    ) -> UserResult:
        """Create a user with the identity-provider id."""

    async def update_user(
        self, user_id: str, *, email: str, name: str, image: str | None
    ) -> UserResult:
        """Update a user; raise ResourceNotFoundException when missing."""

    async def delete_user(self, user_id: str) -> None:
        """Delete a user; raise ResourceNotFoundException when missing."""


class IWorkspaceRepository(Protocol):
    """Protocol for workspaces mirrored from identity-provider organizations."""

    async def create_workspace(
        self,
        workspace_id: str,
        name: str,
        slug: str,
        owner_id: str,
        image_url: str | None,
    ) -> WorkspaceResult:
        """Create a workspace with the organization id."""

    async def update_workspace(
        self, workspace_id: str, *, name: str, slug: str, image_url: str | None
    ) -> WorkspaceResult:
        """Update a workspace; raise ResourceNotFoundException when missing."""

    async def delete_workspace(self, workspace_id: str) -> None:
        """Delete a workspace (memberships cascade); raise ResourceNotFoundException when missing."""


class IWorkspaceMemberRepository(Protocol):
    """Protocol for workspace memberships."""

    async def add_member(
        self, user_id: str, workspace_id: str, role: str
    ) -> WorkspaceMemberResult:
        """Add a user to a workspace with an uppercase role."""
