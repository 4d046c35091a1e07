"""User repository for identity-provider sync. Interface methods return application DTOs."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.user import UserResult
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.repositories.base import BaseRepository


def _user_to_result(u: User) -> UserResult:
    """Map ORM User to application UserResult."""
    return UserResult(id=u.id, email=u.email, name=u.name, image=u.image)


class UserRepository(BaseRepository[User]):
    """User repository. Implements IUserRepository."""

    resource_type = "user"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def get_user(self, user_id: str) -> UserResult | None:
        user = await self.get_by_id(user_id)
        return _user_to_result(user) if user else None

    async def create_user(
        self, user_id: str, email: str, name: str, image: str | None
    ) -> UserResult:
        user = await self.create(User(id=user_id, email=email, name=name, image=image))
        return _user_to_result(user)

    async def update_user(
        self, user_id: str, *, email: str, name: str, image: str | None
    ) -> UserResult:
        user = await self.get_or_raise(user_id)
        user.email = email
        user.name = name
        user.image = image
        return _user_to_result(await self.save(user))

    async def delete_user(self, user_id: str) -> None:
        await self.delete(await self.get_or_raise(user_id))
