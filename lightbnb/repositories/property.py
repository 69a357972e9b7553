"""
Property repository for listing creation and filtered search.
Search results are aggregated per property with their average review rating.
"""

from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy import select, and_, func
from lightbnb.repositories.base import BaseRepository
from lightbnb.models.property import Property, PropertyReview
from lightbnb.schemas.property import PropertySearchFilters
from typing import List, Dict, Any, Tuple
import logging

logger = logging.getLogger(__name__)


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property listings and property search.
    """

    def __init__(self, session_factory: async_sessionmaker):
        super().__init__(Property, session_factory)

    async def create_property(self, property_data: Dict[str, Any]) -> Property:
        """
        Create a new property.

        Args:
            property_data: Dictionary containing the listing columns

        Returns:
            Created property instance

        Raises:
            ConstraintViolationError: If the owner does not exist
            InfrastructureError: If database operation fails
        """
        created_property = await self.create(property_data)
        logger.info(f"Created property: {created_property.title} (ID: {created_property.id})")
        return created_property

    async def search_properties(
        self,
        filters: PropertySearchFilters,
        limit: int = 10
    ) -> List[Tuple[Property, float]]:
        """
        Search reviewed properties, cheapest first.

        Args:
            filters: PropertySearchFilters instance with search criteria
            limit: Maximum number of properties to return

        Returns:
            List of (property, average rating) pairs
        """
        average_rating = func.avg(PropertyReview.rating)

        query = (
            select(Property, average_rating.label("average_rating"))
            .join(PropertyReview, PropertyReview.property_id == Property.id)
        )

        conditions = self._build_filter_conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))

        query = query.group_by(Property.id)

        # Rating is only known after aggregation
        having_conditions = self._build_having_conditions(filters, average_rating)
        if having_conditions:
            query = query.having(and_(*having_conditions))

        query = query.order_by(Property.cost_per_night, Property.id).limit(limit)

        if logger.isEnabledFor(logging.DEBUG):
            compiled = query.compile()
            logger.debug(f"Property search query: {compiled} params: {compiled.params}")

        async with self.session() as session:
            result = await session.execute(query)
            rows = [(row[0], float(row[1])) for row in result.all()]

        logger.debug(f"Property search returned {len(rows)} results")
        return rows

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        """
        Build WHERE conditions from search filters.

        Args:
            filters: PropertySearchFilters instance

        Returns:
            List of SQLAlchemy conditions
        """
        conditions = []

        # City filter (case-insensitive pattern match)
        if filters.city:
            conditions.append(Property.city.ilike(f"%{filters.city}%"))

        # Owner filter
        if filters.owner_id is not None:
            conditions.append(Property.owner_id == filters.owner_id)

        # Price range filters, minor units on both sides
        if filters.minimum_price_per_night is not None:
            conditions.append(Property.cost_per_night >= filters.minimum_price_per_night)
        if filters.maximum_price_per_night is not None:
            conditions.append(Property.cost_per_night <= filters.maximum_price_per_night)

        return conditions

    def _build_having_conditions(self, filters: PropertySearchFilters, average_rating) -> List:
        """Build post-aggregation conditions from search filters."""
        conditions = []

        if filters.minimum_rating is not None:
            conditions.append(average_rating >= filters.minimum_rating)

        return conditions
