"""User ORM model mirrored from the identity provider."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import TimestampMixin


class User(TimestampMixin, Base):
    """User model. Table: app_user. id is the identity-provider user id."""

    __tablename__ = "app_user"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    image: Mapped[str | None] = mapped_column(String, nullable=True)
