"""DTOs for users and workspaces mirrored from the identity provider."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UserResult:
    """User read model."""

    id: str
    email: str
    name: str
    image: str | None


@dataclass(frozen=True)
class WorkspaceResult:
    """Workspace read model."""

    id: str
    name: str
    slug: str
    owner_id: str
    image_url: str | None


@dataclass(frozen=True)
class WorkspaceMemberResult:
    """Workspace membership read model."""

    id: str
    user_id: str
    workspace_id: str
    role: str
