"""
Base repository.

Generic reads and inserts shared by the commission core repositories.
Repositories never commit; the calling service's unit of work does.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models.base import Base

# Generic type for model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository bound to one model and one session.

    Type Parameters:
        ModelType: SQLAlchemy model class with an integer `id`

    Example:
        class CommissionRepository(BaseRepository[CommissionEntry]):
            def __init__(self, session: AsyncSession):
                super().__init__(CommissionEntry, session)
    """

    def __init__(
        self, model: type[ModelType], session: AsyncSession
    ) -> None:
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    async def get_by_id(self, id: int) -> ModelType | None:
        """Get entity by ID (identity map first)."""
        return await self.session.get(self.model, id)

    async def get_for_update(self, id: int) -> ModelType | None:
        """
        Get entity by ID and lock its row until the transaction ends.

        Settlement uses this so two workers cannot confirm one entry.

        Args:
            id: Entity ID

        Returns:
            Entity or None if not found
        """
        stmt = (
            select(self.model)
            .where(self.model.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by(self, **filters: Any) -> list[ModelType]:
        """
        Find entities by column equality, oldest first.

        Args:
            **filters: Column filters

        Returns:
            List of matching entities ordered by ID
        """
        stmt = select(self.model).filter_by(**filters).order_by(self.model.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self, **filters: Any) -> int:
        """Count entities matching column filters."""
        stmt = select(func.count()).select_from(self.model).filter_by(**filters)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def exists(self, **filters: Any) -> bool:
        """Check whether any entity matches column filters."""
        return await self.count(**filters) > 0

    async def create(self, **data: Any) -> ModelType:
        """
        Insert one entity and load its server-side values.

        Args:
            **data: Column values

        Returns:
            Created entity
        """
        entity = self.model(**data)
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def bulk_create(
        self, items: list[dict[str, Any]]
    ) -> list[ModelType]:
        """
        Insert many entities with one INSERT ... RETURNING.

        Runs inside the caller's transaction, so either every row lands or
        none does.

        Args:
            items: Column value dicts

        Returns:
            Created entities, in input order
        """
        if not items:
            return []

        stmt = insert(self.model).returning(
            self.model, sort_by_parameter_order=True
        )
        result = await self.session.scalars(stmt, items)
        return list(result.all())
