"""Base repository with common CRUD operations."""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select


class BaseRepository[ModelType: SQLModel]:
    """Base repository providing common database operations.

    Repositories handle data access only. Transaction control (commit)
    should be done in the service layer.
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, id: UUID) -> ModelType | None:
        """Get a record by its primary key."""
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)  # type: ignore[attr-defined]
        )
        return result.scalar_one_or_none()

    def add(self, entity: ModelType) -> None:
        """Add entity to session (no flush/commit)."""
        self.session.add(entity)

    async def create(self, entity: ModelType) -> ModelType:
        """Add entity and flush so database defaults and keys are assigned."""
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def update(self, id: UUID, **fields: Any) -> ModelType | None:
        """Set the given fields on a record and flush.

        Returns:
            The updated entity, or None if no record has this id.
        """
        entity = await self.get_by_id(id)
        if entity is None:
            return None
        for name, value in fields.items():
            setattr(entity, name, value)
        await self.session.flush()
        return entity

    async def fetch_page(self, query: Any, limit: int, offset: int) -> list[ModelType]:
        """Execute an already-ordered query with limit/offset pagination."""
        result = await self.session.execute(query.limit(limit).offset(offset))
        return list(result.scalars().all())
