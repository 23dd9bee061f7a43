"""Base service class with common database operations."""

from typing import Any, Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from stattaker.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(Generic[ModelType]):
    """Base service over one model and one unit of work."""

    def __init__(self, db: AsyncSession, model: type[ModelType]):
        self.db = db
        self.model = model

    async def get_by_id(self, id: Any) -> ModelType | None:
        """Get entity by primary key."""
        return await self.db.get(self.model, id)

    async def delete(self, obj: ModelType) -> None:
        """Delete entity (cascades to owned rows) and commit."""
        await self.db.delete(obj)
        await self.db.commit()

    async def commit(self) -> None:
        """Commit the unit of work."""
        await self.db.commit()

    async def rollback(self) -> None:
        """Discard the unit of work."""
        await self.db.rollback()
