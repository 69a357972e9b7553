"""
Base repository class with common operations using async SQLAlchemy.
Each call checks a session out of the shared pool and returns it on exit.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from sqlalchemy import select
from contextlib import asynccontextmanager
from lightbnb.database import Base
from lightbnb.utils.exceptions import InfrastructureError, ConstraintViolationError
from typing import TypeVar, Generic, Optional, Dict, Any, Type, AsyncIterator
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common single-row operations.
    Database failures are re-raised as InfrastructureError with the driver error as the cause.
    """

    def __init__(self, model: Type[ModelType], session_factory: async_sessionmaker):
        """
        Initialize repository with model class and session factory.

        Args:
            model: SQLAlchemy model class
            session_factory: Factory producing sessions bound to the pooled engine
        """
        self.model = model
        self.session_factory = session_factory

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Open a session for one operation, rolling back and translating errors on failure.
        """
        async with self.session_factory() as session:
            try:
                yield session
            except IntegrityError as e:
                await session.rollback()
                logger.error(f"Constraint violation on {self.model.__tablename__}: {e.orig}")
                raise ConstraintViolationError(
                    f"{self.model.__name__} violates a database constraint"
                ) from e
            except (SQLAlchemyError, OSError, OverflowError) as e:
                await session.rollback()
                logger.error(f"Database operation on {self.model.__tablename__} failed: {e}")
                raise InfrastructureError(
                    f"Database operation on {self.model.__tablename__} failed"
                ) from e

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Insert a new row and return it as read back from the database.

        Args:
            obj_in: Dictionary of column values for the new row

        Returns:
            Created model instance with its generated id
        """
        async with self.session() as session:
            db_obj = self.model(**obj_in)
            session.add(db_obj)
            await session.commit()
            await session.refresh(db_obj)
            logger.debug(f"Created {self.model.__name__} with id: {db_obj.id}")
            return db_obj

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        """
        Get a row by its ID.

        Args:
            id: Primary key of the row to retrieve

        Returns:
            Model instance if found, None otherwise
        """
        return await self.get_by_field("id", id)

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        """
        Get a single row by an exact column match.

        Args:
            field: Column name to search by
            value: Value to search for

        Returns:
            Model instance if found, None otherwise
        """
        if not hasattr(self.model, field):
            raise ValueError(f"Field '{field}' does not exist on {self.model.__name__}")

        async with self.session() as session:
            query = select(self.model).where(getattr(self.model, field) == value)
            result = await session.execute(query)
            obj = result.scalars().first()

            if obj:
                logger.debug(f"Retrieved {self.model.__name__} by {field}: {value}")
            else:
                logger.debug(f"{self.model.__name__} with {field}={value} not found")

            return obj
