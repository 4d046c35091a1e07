"""Workspace and WorkspaceMember ORM models (identity-provider organizations)."""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import WorkspaceRole
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CuidModel, TimestampMixin


class Workspace(TimestampMixin, Base):
    """Workspace. Table: workspace. id is the identity-provider organization id."""

    __tablename__ = "workspace"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    owner_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    image_url: Mapped[str | None] = mapped_column(String, nullable=True)


class WorkspaceMember(CuidModel, Base):
    """Membership of a user in a workspace. Table: workspace_member."""

    __tablename__ = "workspace_member"

    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    workspace_id: Mapped[str] = mapped_column(
        String, ForeignKey("workspace.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(
        String(32), nullable=False, default=WorkspaceRole.MEMBER.value
    )

    __table_args__ = (
        UniqueConstraint("user_id", "workspace_id", name="uq_workspace_member_user_workspace"),
    )
