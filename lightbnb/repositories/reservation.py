"""
Reservation repository for a guest's reservation history.
"""

from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy import select, func
from lightbnb.repositories.base import BaseRepository
from lightbnb.models.reservation import Reservation
from lightbnb.models.property import Property, PropertyReview
from typing import List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class ReservationRepository(BaseRepository[Reservation]):
    """Read-only repository for the reservations table."""

    def __init__(self, session_factory: async_sessionmaker):
        super().__init__(Reservation, session_factory)

    async def get_reservations_for_guest(
        self,
        guest_id: int,
        limit: int = 10
    ) -> List[Tuple[Reservation, Property, Optional[float]]]:
        """
        Get a guest's reservations with the reserved property, earliest first.

        The property's average rating is None when it has no reviews.

        Args:
            guest_id: ID of the guest
            limit: Maximum number of reservations to return

        Returns:
            List of (reservation, property, average rating) tuples
        """
        query = (
            select(Reservation, Property, func.avg(PropertyReview.rating).label("average_rating"))
            .join(Property, Reservation.property_id == Property.id)
            .outerjoin(PropertyReview, PropertyReview.property_id == Property.id)
            .where(Reservation.guest_id == guest_id)
            .group_by(Reservation.id, Property.id)
            .order_by(Reservation.start_date, Reservation.id)
            .limit(limit)
        )

        async with self.session() as session:
            result = await session.execute(query)
            rows = [
                (reservation, property_obj, float(rating) if rating is not None else None)
                for reservation, property_obj, rating in result.all()
            ]

        logger.debug(f"Retrieved {len(rows)} reservations for guest {guest_id}")
        return rows
