"""Base repository: generic lookups, create/delete, and transient error translation."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import ResourceNotFoundException, TransientDatastoreException
from app.infrastructure.persistence.database import Base


@contextmanager
def transient_errors(operation: str) -> Iterator[None]:
    """Translate connection-level SQLAlchemy errors into TransientDatastoreException.

    Constraint violations and programming errors are left alone; only
    failures a retry can fix (lost connection, timeout, locked database)
    become retriable.
    """
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        raise TransientDatastoreException(operation, str(e.orig or e)) from e


ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_by_id, get_or_raise, create and delete."""

    resource_type: str = "resource"

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        with transient_errors(f"get {self.resource_type}"):
            result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def get_or_raise(self, entity_id: str) -> ModelType:
        """Return the record or raise ResourceNotFoundException."""
        obj = await self.get_by_id(entity_id)
        if obj is None:
            raise ResourceNotFoundException(self.resource_type, entity_id)
        return obj

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record and return it refreshed."""
        with transient_errors(f"create {self.resource_type}"):
            self.db.add(obj)
            await self.db.flush()
            await self.db.refresh(obj)
        return obj

    async def save(self, obj: ModelType) -> ModelType:
        """Flush changes to an attached record and return it refreshed."""
        with transient_errors(f"update {self.resource_type}"):
            await self.db.flush()
            await self.db.refresh(obj)
        return obj

    async def delete(self, obj: ModelType) -> None:
        """Delete the record."""
        with transient_errors(f"delete {self.resource_type}"):
            await self.db.delete(obj)
            await self.db.flush()
