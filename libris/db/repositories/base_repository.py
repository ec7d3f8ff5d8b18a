"""Base repository with common database operations."""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Base repository for common persistence operations.

    Writes are flushed but never committed; transaction boundaries belong to
    the caller.
    """

    def __init__(self, model: type[ModelType], session: AsyncSession):
        """
        Initialize repository.

        Args:
            model: SQLModel class
            session: Async database session
        """
        self.model = model
        self.session = session

    async def create(self, obj: ModelType) -> ModelType:
        """
        Add a new record and flush it so generated values are populated.

        Args:
            obj: Model instance to create

        Returns:
            Created model instance
        """
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)
        return obj

    async def get_by_id(self, id: UUID) -> ModelType | None:
        """
        Get record by primary key.

        Args:
            id: Record UUID

        Returns:
            Model instance or None
        """
        return await self.session.get(self.model, id)

    async def list_all(
        self, limit: int = 100, offset: int = 0, order_by: Any = None
    ) -> list[ModelType]:
        """
        List records with pagination.

        Args:
            limit: Maximum number of records
            offset: Number of records to skip
            order_by: Optional column expression to sort by

        Returns:
            List of model instances
        """
        query = select(self.model)
        if order_by is not None:
            query = query.order_by(order_by)
        result = await self.session.execute(query.limit(limit).offset(offset))
        return list(result.scalars().all())

    async def update(self, obj: ModelType) -> ModelType:
        """
        Flush changes made to an existing record.

        Args:
            obj: Model instance to update

        Returns:
            Updated model instance
        """
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)
        return obj
