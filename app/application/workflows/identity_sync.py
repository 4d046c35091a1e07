"""Identity-provider (Clerk) sync functions.

Each lifecycle event (user / organization created, updated, deleted,
invitation accepted) maps to one workflow function whose single step
applies the matching datastore mutation. The step is memoized, so a
retried run never applies a mutation twice.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.application.dtos.workflow import WorkflowEvent
from app.application.interfaces.repositories import (
    IUserRepository,
    IWorkspaceMemberRepository,
    IWorkspaceRepository,
)
from app.application.interfaces.services import IStepController
from app.domain.enums import WorkspaceRole
from app.domain.exceptions import ValidationException
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class _ClerkPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ClerkEmailAddress(_ClerkPayload):
    email_address: str


class ClerkUserData(_ClerkPayload):
    """user.created / user.updated payload (fields we mirror)."""

    id: str = Field(min_length=1)
    email_addresses: list[ClerkEmailAddress] = Field(default_factory=list)
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None

    @property
    def primary_email(self) -> str:
        if not self.email_addresses:
            raise ValidationException("Clerk user has no email address", field="email_addresses")
        return self.email_addresses[0].email_address

    @property
    def full_name(self) -> str:
        """First and last name joined with a space; missing or blank parts are skipped."""
        parts = [p.strip() for p in (self.first_name, self.last_name) if p and p.strip()]
        return " ".join(parts)


class ClerkDeletedData(_ClerkPayload):
    """user.deleted / organization.deleted payload."""

    id: str = Field(min_length=1)


class ClerkOrganizationData(_ClerkPayload):
    """organization.created / organization.updated payload."""

    id: str = Field(min_length=1)
    name: str
    slug: str
    created_by: str | None = None
    image_url: str | None = None


class ClerkInvitationData(_ClerkPayload):
    """organizationInvitation.accepted payload."""

    user_id: str = Field(min_length=1)
    organization_id: str = Field(min_length=1)
    role_name: str


PayloadT = TypeVar("PayloadT", bound=BaseModel)


def _parse(model: type[PayloadT], event: WorkflowEvent) -> PayloadT:
    try:
        return model.model_validate(event.data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ValidationException(
            f"Invalid {event.name} payload: {first.get('msg')}", field=field
        ) from e


SyncMethod = Literal[
    "create_user",
    "update_user",
    "delete_user",
    "create_workspace",
    "update_workspace",
    "delete_workspace",
    "add_workspace_member",
]


@dataclass(frozen=True)
class SyncFunction:
    """Registration entry: engine function id, trigger event, handler method."""

    function_id: str
    event_name: str
    method: SyncMethod


SYNC_FUNCTIONS: tuple[SyncFunction, ...] = (
    SyncFunction("sync-user-from-clerk", "clerk/user.created", "create_user"),
    SyncFunction("update-user-from-clerk", "clerk/user.updated", "update_user"),
    SyncFunction("delete-user-with-clerk", "clerk/user.deleted", "delete_user"),
    SyncFunction("sync-workspace-from-clerk", "clerk/organization.created", "create_workspace"),
    SyncFunction("update-workspace-from-clerk", "clerk/organization.updated", "update_workspace"),
    SyncFunction("delete-workspace-with-clerk", "clerk/organization.deleted", "delete_workspace"),
    SyncFunction(
        "sync-workspace-member-from-clerk",
        "clerk/organizationInvitation.accepted",
        "add_workspace_member",
    ),
)


class IdentitySyncHandlers:
    """Workflow handlers that mirror Clerk users and organizations into the datastore."""

    def __init__(
        self,
        users: IUserRepository,
        workspaces: IWorkspaceRepository,
        members: IWorkspaceMemberRepository,
    ) -> None:
        self.users = users
        self.workspaces = workspaces
        self.members = members

    def handler(self, method: SyncMethod):
        """Bound handler for a SYNC_FUNCTIONS entry."""
        return getattr(self, method)

    async def create_user(self, event: WorkflowEvent, step: IStepController) -> dict[str, Any]:
        data = _parse(ClerkUserData, event)

        async def create() -> dict[str, Any]:
            user = await self.users.create_user(
                data.id, data.primary_email, data.full_name, data.image_url
            )
            logger.info("Created user %s from Clerk", user.id)
            return asdict(user)

        return await step.run_once("create-user", create)

    async def update_user(self, event: WorkflowEvent, step: IStepController) -> dict[str, Any]:
        data = _parse(ClerkUserData, event)

        async def update() -> dict[str, Any]:
            user = await self.users.update_user(
                data.id,
                email=data.primary_email,
                name=data.full_name,
                image=data.image_url,
            )
            logger.info("Updated user %s from Clerk", user.id)
            return asdict(user)

        return await step.run_once("update-user", update)

    async def delete_user(self, event: WorkflowEvent, step: IStepController) -> dict[str, Any]:
        data = _parse(ClerkDeletedData, event)

        async def delete() -> dict[str, Any]:
            await self.users.delete_user(data.id)
            logger.info("Deleted user %s (Clerk user.deleted)", data.id)
            return {"deleted": data.id}

        return await step.run_once("delete-user", delete)

    async def create_workspace(
        self, event: WorkflowEvent, step: IStepController
    ) -> dict[str, Any]:
        data = _parse(ClerkOrganizationData, event)
        if not data.created_by:
            raise ValidationException(
                "Clerk organization has no creator", field="created_by"
            )
        owner_id = data.created_by

        async def create() -> dict[str, Any]:
            workspace = await self.workspaces.create_workspace(
                data.id, data.name, data.slug, owner_id, data.image_url
            )
            member = await self.members.add_member(
                owner_id, workspace.id, WorkspaceRole.ADMIN.value
            )
            logger.info(
                "Created workspace %s from Clerk with owner %s as ADMIN",
                workspace.id,
                owner_id,
            )
            return {"workspace": asdict(workspace), "member": asdict(member)}

        return await step.run_once("create-workspace", create)

    async def update_workspace(
        self, event: WorkflowEvent, step: IStepController
    ) -> dict[str, Any]:
        data = _parse(ClerkOrganizationData, event)

        async def update() -> dict[str, Any]:
            workspace = await self.workspaces.update_workspace(
                data.id, name=data.name, slug=data.slug, image_url=data.image_url
            )
            logger.info("Updated workspace %s from Clerk", workspace.id)
            return asdict(workspace)

        return await step.run_once("update-workspace", update)

    async def delete_workspace(
        self, event: WorkflowEvent, step: IStepController
    ) -> dict[str, Any]:
        data = _parse(ClerkDeletedData, event)

        async def delete() -> dict[str, Any]:
            await self.workspaces.delete_workspace(data.id)
            logger.info("Deleted workspace %s (Clerk organization.deleted)", data.id)
            return {"deleted": data.id}

        return await step.run_once("delete-workspace", delete)

    async def add_workspace_member(
        self, event: WorkflowEvent, step: IStepController
    ) -> dict[str, Any]:
        data = _parse(ClerkInvitationData, event)

        async def add() -> dict[str, Any]:
            member = await self.members.add_member(
                data.user_id, data.organization_id, WorkspaceRole.normalize(data.role_name)
            )
            logger.info(
                "Added user %s to workspace %s as %s",
                member.user_id,
                member.workspace_id,
                member.role,
            )
            return asdict(member)

        return await step.run_once("add-workspace-member", add)
