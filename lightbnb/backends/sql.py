"""
SQL persistence backend.
Runs each operation through the repositories on the shared connection pool.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from lightbnb.backends.base import BookingBackend, DEFAULT_LIMIT
from lightbnb.database import close_db_connection
from lightbnb.repositories.user import UserRepository
from lightbnb.repositories.property import PropertyRepository
from lightbnb.repositories.reservation import ReservationRepository
from lightbnb.schemas.user import UserCreate, UserRecord
from lightbnb.schemas.property import PropertyCreate, PropertyRecord, PropertyListing, PropertySearchFilters
from lightbnb.schemas.reservation import ReservationRecord
from typing import Any, List, Mapping, Optional, Union
import logging

logger = logging.getLogger(__name__)


class SQLBookingBackend(BookingBackend):
    """
    Backend backed by the relational database.

    When constructed with an engine the backend owns it and disposes it on
    close; otherwise close() shuts down the process-wide engine.
    """

    name = "sql"

    def __init__(self, session_factory: async_sessionmaker, engine: Optional[AsyncEngine] = None):
        self.session_factory = session_factory
        self.engine = engine
        self.users = UserRepository(session_factory)
        self.properties = PropertyRepository(session_factory)
        self.reservations = ReservationRepository(session_factory)

    async def get_user_with_email(self, email: str) -> Optional[UserRecord]:
        if not email:
            return None
        user = await self.users.get_by_email(email)
        return UserRecord.model_validate(user) if user else None

    async def get_user_with_id(self, id: Union[int, str]) -> Optional[UserRecord]:
        user = await self.users.get_by_id(self._coerce_id(id))
        return UserRecord.model_validate(user) if user else None

    async def add_user(self, user: Union[UserCreate, Mapping[str, Any]]) -> UserRecord:
        user_in = self._validate_user(user)
        created_user = await self.users.create_user(user_in.model_dump())
        return UserRecord.model_validate(created_user)

    async def get_all_reservations(
        self,
        guest_id: Union[int, str],
        limit: int = DEFAULT_LIMIT
    ) -> List[ReservationRecord]:
        rows = await self.reservations.get_reservations_for_guest(
            self._coerce_id(guest_id, "guest_id"),
            self._validate_limit(limit)
        )
        return [
            ReservationRecord(
                id=reservation.id,
                guest_id=reservation.guest_id,
                start_date=reservation.start_date,
                property=PropertyRecord.model_validate(property_obj),
                average_rating=average_rating,
            )
            for reservation, property_obj, average_rating in rows
        ]

    async def get_all_properties(
        self,
        options: Union[PropertySearchFilters, Mapping[str, Any], None] = None,
        limit: int = DEFAULT_LIMIT
    ) -> List[PropertyListing]:
        filters = self._validate_filters(options)
        rows = await self.properties.search_properties(filters, self._validate_limit(limit))
        return [
            PropertyListing(
                **PropertyRecord.model_validate(property_obj).model_dump(),
                average_rating=average_rating,
            )
            for property_obj, average_rating in rows
        ]

    async def add_property(self, property: Union[PropertyCreate, Mapping[str, Any]]) -> PropertyRecord:
        property_in = self._validate_property(property)
        created_property = await self.properties.create_property(property_in.model_dump())
        return PropertyRecord.model_validate(created_property)

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("SQL backend engine disposed")
        else:
            await close_db_connection()
