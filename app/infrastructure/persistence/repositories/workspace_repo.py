"""Workspace and membership repositories for identity-provider sync."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.user import WorkspaceMemberResult, WorkspaceResult
from app.domain.enums import WorkspaceRole
from app.infrastructure.persistence.models.workspace import Workspace, WorkspaceMember
from app.infrastructure.persistence.repositories.base import BaseRepository


def _workspace_to_result(w: Workspace) -> WorkspaceResult:
    return WorkspaceResult(
        id=w.id,
        name=w.name,
        slug=w.slug,
        owner_id=w.owner_id,
        image_url=w.image_url,
    )


def _member_to_result(m: WorkspaceMember) -> WorkspaceMemberResult:
    return WorkspaceMemberResult(
        id=m.id, user_id=m.user_id, workspace_id=m.workspace_id, role=m.role
    )


class WorkspaceRepository(BaseRepository[Workspace]):
    """Workspace repository. Implements IWorkspaceRepository."""

    resource_type = "workspace"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Workspace)

    async def get_workspace(self, workspace_id: str) -> WorkspaceResult | None:
        workspace = await self.get_by_id(workspace_id)
        return _workspace_to_result(workspace) if workspace else None

    async def create_workspace(
        self,
        workspace_id: str,
        name: str,
        slug: str,
        owner_id: str,
        image_url: str | None,
    ) -> WorkspaceResult:
        workspace = await self.create(
            Workspace(
                id=workspace_id,
                name=name,
                slug=slug,
                owner_id=owner_id,
                image_url=image_url,
            )
        )
        return _workspace_to_result(workspace)

    async def update_workspace(
        self, workspace_id: str, *, name: str, slug: str, image_url: str | None
    ) -> WorkspaceResult:
        workspace = await self.get_or_raise(workspace_id)
        workspace.name = name
        workspace.slug = slug
        workspace.image_url = image_url
        return _workspace_to_result(await self.save(workspace))

    async def delete_workspace(self, workspace_id: str) -> None:
        await self.delete(await self.get_or_raise(workspace_id))


class WorkspaceMemberRepository(BaseRepository[WorkspaceMember]):
    """Workspace membership repository. Implements IWorkspaceMemberRepository."""

    resource_type = "workspace_member"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkspaceMember)

    async def add_member(
        self, user_id: str, workspace_id: str, role: str
    ) -> WorkspaceMemberResult:
        member = await self.create(
            WorkspaceMember(
                user_id=user_id,
                workspace_id=workspace_id,
                role=WorkspaceRole.normalize(role),
            )
        )
        return _member_to_result(member)
