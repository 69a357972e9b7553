"""
Fixture persistence backend.
Simulates the database tables in memory, seeded from static JSON fixture files.
Writes live only as long as the backend instance.
"""

from pydantic import BaseModel, ValidationError as PydanticValidationError
from lightbnb.backends.base import BookingBackend, DEFAULT_LIMIT
from lightbnb.models.user import User
from lightbnb.schemas.user import UserCreate, UserRecord
from lightbnb.schemas.property import PropertyCreate, PropertyRecord, PropertyListing, PropertySearchFilters
from lightbnb.schemas.reservation import ReservationRecord
from lightbnb.utils.exceptions import InfrastructureError, ConstraintViolationError, DuplicateResourceError
from collections import defaultdict
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar, Union
import json
import logging

logger = logging.getLogger(__name__)

RowType = TypeVar("RowType", bound=BaseModel)

USERS_FILE = "users.json"
PROPERTIES_FILE = "properties.json"
RESERVATIONS_FILE = "reservations.json"
PROPERTY_REVIEWS_FILE = "property_reviews.json"


class ReservationRow(BaseModel):
    """Stored reservation row."""

    id: int
    property_id: int
    guest_id: int
    start_date: date


class PropertyReviewRow(BaseModel):
    """Stored review row."""

    id: int
    property_id: int
    guest_id: int
    rating: int


def _segment_matches_at(segment: str, value: str, start: int) -> bool:
    if start + len(segment) > len(value):
        return False
    return all(
        char == "_" or char == value[start + offset]
        for offset, char in enumerate(segment)
    )


def like_match(pattern: str, value: str) -> bool:
    """
    Case-insensitive SQL LIKE match of %pattern% against value.
    % matches any run of characters and _ matches exactly one.

    The %-separated segments are located left to right, each at its earliest
    position, so the cost is bounded by len(pattern) * len(value).
    """
    value = value.lower()
    position = 0
    for segment in pattern.lower().split("%"):
        if not segment:
            continue
        for start in range(position, len(value) - len(segment) + 1):
            if _segment_matches_at(segment, value, start):
                position = start + len(segment)
                break
        else:
            return False
    return True


def load_fixture(path: Path, required: bool = True) -> List[Dict[str, Any]]:
    """
    Read a fixture file holding either a JSON array of records or an
    id-keyed mapping of records. Mapping keys fill in missing ids.

    Raises:
        InfrastructureError: If a required file is missing or the file is unreadable
    """
    if not path.exists():
        if required:
            logger.error(f"Fixture file not found: {path}")
            raise InfrastructureError(f"Fixture file not found: {path}")
        logger.debug(f"Optional fixture file {path} not present")
        return []

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to read fixture file {path}: {e}")
        raise InfrastructureError(f"Failed to read fixture file {path}") from e

    if isinstance(data, dict):
        records = []
        for key, record in data.items():
            if not isinstance(record, dict):
                raise InfrastructureError(f"Fixture file {path} has a non-object record under {key!r}")
            records.append({"id": key, **record})
        return records

    if isinstance(data, list) and all(isinstance(record, dict) for record in data):
        return data

    raise InfrastructureError(f"Fixture file {path} must hold an array or mapping of records")


def _parse_rows(schema: Type[RowType], records: Iterable[Mapping[str, Any]], source: str) -> Dict[int, RowType]:
    rows: Dict[int, RowType] = {}
    for record in records:
        try:
            row = schema.model_validate(record)
        except PydanticValidationError as e:
            logger.error(f"Invalid {source} fixture record {record.get('id')!r}: {e}")
            raise InfrastructureError(f"Invalid {source} fixture record {record.get('id')!r}") from e
        rows[row.id] = row
    return rows


class FixtureBookingBackend(BookingBackend):
    """
    Backend holding each table as an id-keyed dict of rows.

    Operations never await between reading and writing a table, so
    concurrent coroutines see each write whole.
    """

    name = "fixtures"

    def __init__(
        self,
        users: Iterable[Mapping[str, Any]] = (),
        properties: Iterable[Mapping[str, Any]] = (),
        reservations: Iterable[Mapping[str, Any]] = (),
        property_reviews: Iterable[Mapping[str, Any]] = ()
    ):
        self.users: Dict[int, UserRecord] = _parse_rows(UserRecord, users, "user")
        self.properties: Dict[int, PropertyRecord] = _parse_rows(PropertyRecord, properties, "property")
        self.reservations: Dict[int, ReservationRow] = _parse_rows(ReservationRow, reservations, "reservation")
        self.property_reviews: Dict[int, PropertyReviewRow] = _parse_rows(
            PropertyReviewRow, property_reviews, "property review"
        )
        logger.info(
            f"Fixture backend loaded {len(self.users)} users, {len(self.properties)} properties, "
            f"{len(self.reservations)} reservations, {len(self.property_reviews)} reviews"
        )

    @classmethod
    def from_directory(cls, directory: Union[str, Path]) -> "FixtureBookingBackend":
        """Load users.json and properties.json (required) plus optional reservations and reviews."""
        directory = Path(directory)
        return cls(
            users=load_fixture(directory / USERS_FILE),
            properties=load_fixture(directory / PROPERTIES_FILE),
            reservations=load_fixture(directory / RESERVATIONS_FILE, required=False),
            property_reviews=load_fixture(directory / PROPERTY_REVIEWS_FILE, required=False),
        )

    @staticmethod
    def _next_id(table: Mapping[int, Any]) -> int:
        return max(table, default=0) + 1

    def _average_ratings(self) -> Dict[int, float]:
        ratings: Dict[int, List[int]] = defaultdict(list)
        for review in self.property_reviews.values():
            ratings[review.property_id].append(review.rating)
        return {property_id: sum(values) / len(values) for property_id, values in ratings.items()}

    # Users

    async def get_user_with_email(self, email: str) -> Optional[UserRecord]:
        if not email:
            return None
        for user in self.users.values():
            if user.email == email:
                return user.model_copy()
        logger.debug(f"User with email {email} not found")
        return None

    async def get_user_with_id(self, id: Union[int, str]) -> Optional[UserRecord]:
        user = self.users.get(self._coerce_id(id))
        return user.model_copy() if user else None

    async def add_user(self, user: Union[UserCreate, Mapping[str, Any]]) -> UserRecord:
        user_in = self._validate_user(user)

        if any(existing.email == user_in.email for existing in self.users.values()):
            logger.warning(f"Rejected registration for existing email {user_in.email}")
            raise DuplicateResourceError("User", user_in.email)

        created_user = UserRecord(
            id=self._next_id(self.users),
            name=user_in.name,
            email=user_in.email,
            password=User.hash_password(user_in.password),
        )
        self.users[created_user.id] = created_user
        logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
        return created_user.model_copy()

    # Reservations

    async def get_all_reservations(
        self,
        guest_id: Union[int, str],
        limit: int = DEFAULT_LIMIT
    ) -> List[ReservationRecord]:
        guest_id = self._coerce_id(guest_id, "guest_id")
        limit = self._validate_limit(limit)
        average_ratings = self._average_ratings()

        reservations = sorted(
            (
                reservation for reservation in self.reservations.values()
                if reservation.guest_id == guest_id and reservation.property_id in self.properties
            ),
            key=lambda reservation: (reservation.start_date, reservation.id)
        )

        records = [
            ReservationRecord(
                id=reservation.id,
                guest_id=reservation.guest_id,
                start_date=reservation.start_date,
                property=self.properties[reservation.property_id].model_copy(),
                average_rating=average_ratings.get(reservation.property_id),
            )
            for reservation in reservations[:limit]
        ]
        logger.debug(f"Retrieved {len(records)} reservations for guest {guest_id}")
        return records

    # Properties

    async def get_all_properties(
        self,
        options: Union[PropertySearchFilters, Mapping[str, Any], None] = None,
        limit: int = DEFAULT_LIMIT
    ) -> List[PropertyListing]:
        filters = self._validate_filters(options)
        limit = self._validate_limit(limit)
        average_ratings = self._average_ratings()

        listings = []
        for property_obj in self.properties.values():
            # Unreviewed properties drop out, as with the inner join
            if property_obj.id not in average_ratings:
                continue
            if filters.city and not like_match(filters.city, property_obj.city):
                continue
            if filters.owner_id is not None and property_obj.owner_id != filters.owner_id:
                continue
            if (
                filters.minimum_price_per_night is not None
                and property_obj.cost_per_night < filters.minimum_price_per_night
            ):
                continue
            if (
                filters.maximum_price_per_night is not None
                and property_obj.cost_per_night > filters.maximum_price_per_night
            ):
                continue

            average_rating = average_ratings[property_obj.id]
            if filters.minimum_rating is not None and average_rating < filters.minimum_rating:
                continue

            listings.append(PropertyListing(**property_obj.model_dump(), average_rating=average_rating))

        listings.sort(key=lambda listing: (listing.cost_per_night, listing.id))
        logger.debug(f"Property search returned {min(len(listings), limit)} results")
        return listings[:limit]

    async def add_property(self, property: Union[PropertyCreate, Mapping[str, Any]]) -> PropertyRecord:
        property_in = self._validate_property(property)

        if property_in.owner_id not in self.users:
            logger.error(f"Property owner {property_in.owner_id} does not exist")
            raise ConstraintViolationError("Property violates a database constraint")

        created_property = PropertyRecord(id=self._next_id(self.properties), **property_in.model_dump())
        self.properties[created_property.id] = created_property
        logger.info(f"Created property: {created_property.title} (ID: {created_property.id})")
        return created_property.model_copy()
