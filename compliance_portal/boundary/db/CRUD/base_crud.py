"""
Generic CRUD helpers keyed by UUID primary key.

Model-specific CRUD classes inherit these and add their own queries and
state rules. Nothing here commits: callers own the transaction, so a
status change and its side effects land together or not at all.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from compliance_portal.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """Create, fetch and delete rows of ``model``; flushes only."""

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **kwargs: Any) -> ModelT:
        """
        Insert a row and return it with server defaults loaded.

        Args:
            session: Async database session
            **kwargs: Column values

        Returns:
            The persisted instance (id and timestamps populated)
        """
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        result = await session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def delete_by_id(self, session: AsyncSession, id: UUID) -> bool:
        """Delete one row; False when no row had this id."""
        result = await session.execute(delete(self.model).where(self.model.id == id))
        return result.rowcount > 0
