"""Base repository shared by every BidSmart table."""

from typing import Generic, TypeVar, Type, Optional, List, Any, Dict, Sequence
from uuid import UUID
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError

from bidsmart.utils.logging import get_logger

ModelType = TypeVar("ModelType")

LOGGER = get_logger(__name__)


class BaseRepository(Generic[ModelType]):
    """Async CRUD over one mapped table.

    Every write commits on its own. The callback handler relies on this: a bid
    row stays in place when a later child insert fails, and a failed write is
    rolled back so the session stays usable for the writes that follow.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session
            model: The SQLAlchemy model class this repository manages
        """
        self.session = session
        self.model = model
        self.logger = LOGGER

    async def _rollback(self) -> None:
        try:
            await self.session.rollback()
        except SQLAlchemyError as e:
            self.logger.warning(f"Rollback failed for {self.model.__name__}: {str(e)}")

    async def _fetch_all(self, query: Select, action: str) -> List[Any]:
        """Run a select and return every scalar row, logging failures as ``action``."""
        try:
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error {action}: {str(e)}", exc_info=True)
            raise

    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """Get a record by its ID.

        Returns:
            The record if found, None otherwise
        """
        try:
            query = select(self.model).where(self.model.id == id)
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error retrieving {self.model.__name__} by ID {id}: {str(e)}",
                exc_info=True
            )
            raise

    async def find_by(self, order_by: Optional[str] = None, descending: bool = False, **filters: Any) -> List[ModelType]:
        """List records whose columns equal the given values.

        Args:
            order_by: Optional column name to sort on
            descending: Sort newest/largest first
            **filters: column_name=value pairs; unknown columns raise AttributeError
        """
        query = select(self.model)
        for field, value in filters.items():
            query = query.where(getattr(self.model, field) == value)
        if order_by:
            column = getattr(self.model, order_by)
            query = query.order_by(column.desc() if descending else column.asc())
        return await self._fetch_all(query, f"listing {self.model.__name__} rows")

    async def create(self, **kwargs) -> ModelType:
        """Insert one record and commit.

        Returns:
            The created record with its generated id
        """
        try:
            instance = self.model(**kwargs)
            self.session.add(instance)
            await self.session.flush()
            await self.session.commit()
            return instance
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error creating {self.model.__name__}: {str(e)}",
                exc_info=True
            )
            await self._rollback()
            raise

    async def create_many(self, rows: Sequence[Dict[str, Any]]) -> List[ModelType]:
        """Insert several records in one commit; an empty batch is a no-op."""
        if not rows:
            return []

        try:
            instances = [self.model(**row) for row in rows]
            self.session.add_all(instances)
            await self.session.flush()
            await self.session.commit()
            return instances
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error creating {len(rows)} {self.model.__name__} rows: {str(e)}",
                exc_info=True
            )
            await self._rollback()
            raise

    async def update(self, id: UUID, **kwargs) -> Optional[ModelType]:
        """Set fields on an existing record and stamp ``updated_at`` when the table has one.

        Returns:
            The updated record if found, None otherwise
        """
        try:
            instance = await self.get_by_id(id)
            if not instance:
                return None

            for key, value in kwargs.items():
                if hasattr(instance, key):
                    setattr(instance, key, value)

            if hasattr(instance, "updated_at"):
                instance.updated_at = datetime.now(timezone.utc)

            await self.session.flush()
            await self.session.commit()
            return instance
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error updating {self.model.__name__} {id}: {str(e)}",
                exc_info=True
            )
            await self._rollback()
            raise

    async def delete(self, id: UUID) -> bool:
        """Delete a record; dependent rows go through the FK cascades.

        Returns:
            True if deleted, False if not found
        """
        try:
            instance = await self.get_by_id(id)
            if not instance:
                return False

            await self.session.delete(instance)
            await self.session.flush()
            await self.session.commit()
            return True
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error deleting {self.model.__name__} {id}: {str(e)}",
                exc_info=True
            )
            await self._rollback()
            raise
