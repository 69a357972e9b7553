"""
Persistence backend contract shared by the SQL and fixture implementations.
Input validation lives here so both backends reject the same input the same way.
"""

from abc import ABC, abstractmethod
from pydantic import BaseModel, ValidationError as PydanticValidationError
from lightbnb.schemas.user import UserCreate, UserRecord
from lightbnb.schemas.property import PropertyCreate, PropertyRecord, PropertyListing, PropertySearchFilters
from lightbnb.schemas.reservation import ReservationRecord
from lightbnb.database import MIN_INTEGER, MAX_INTEGER
from lightbnb.utils.exceptions import ValidationError
from typing import Any, List, Mapping, Optional, Type, TypeVar, Union
import logging

logger = logging.getLogger(__name__)

SchemaType = TypeVar("SchemaType", bound=BaseModel)

DEFAULT_LIMIT = 10


class BookingBackend(ABC):
    """
    The data-access operations of the booking application.

    Single-record lookups return None when nothing matches; listings return
    an empty list. Invalid input raises ValidationError and storage failures
    raise InfrastructureError.
    """

    name = "abstract"

    # Users

    @abstractmethod
    async def get_user_with_email(self, email: str) -> Optional[UserRecord]:
        """Get the user whose email matches exactly."""

    @abstractmethod
    async def get_user_with_id(self, id: Union[int, str]) -> Optional[UserRecord]:
        """Get the user with the given id."""

    @abstractmethod
    async def add_user(self, user: Union[UserCreate, Mapping[str, Any]]) -> UserRecord:
        """Register a user and return the stored row."""

    # Reservations

    @abstractmethod
    async def get_all_reservations(
        self,
        guest_id: Union[int, str],
        limit: int = DEFAULT_LIMIT
    ) -> List[ReservationRecord]:
        """Get a guest's reservations, earliest start date first."""

    # Properties

    @abstractmethod
    async def get_all_properties(
        self,
        options: Union[PropertySearchFilters, Mapping[str, Any], None] = None,
        limit: int = DEFAULT_LIMIT
    ) -> List[PropertyListing]:
        """Search reviewed properties, cheapest first."""

    @abstractmethod
    async def add_property(self, property: Union[PropertyCreate, Mapping[str, Any]]) -> PropertyRecord:
        """Add a property and return the stored row."""

    async def close(self) -> None:
        """Release resources held by the backend."""

    # Shared input handling

    @staticmethod
    def _validate(schema: Type[SchemaType], data: Any, detail: str) -> SchemaType:
        """Coerce a mapping (or pass through an instance) of a pydantic schema."""
        if isinstance(data, schema):
            return data
        if data is None:
            data = {}
        try:
            return schema.model_validate(data)
        except PydanticValidationError as e:
            error = ValidationError.from_pydantic(e, detail)
            logger.warning(f"{detail}: {error.field_errors}")
            raise error from e

    @classmethod
    def _validate_user(cls, user: Union[UserCreate, Mapping[str, Any]]) -> UserCreate:
        return cls._validate(UserCreate, user, "Invalid user")

    @classmethod
    def _validate_property(cls, property: Union[PropertyCreate, Mapping[str, Any]]) -> PropertyCreate:
        return cls._validate(PropertyCreate, property, "Invalid property")

    @classmethod
    def _validate_filters(
        cls,
        options: Union[PropertySearchFilters, Mapping[str, Any], None]
    ) -> PropertySearchFilters:
        return cls._validate(PropertySearchFilters, options, "Invalid property search options")

    @staticmethod
    def _validate_limit(limit: Any) -> int:
        """A limit must be a positive integer that fits an Integer column."""
        if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_INTEGER:
            logger.warning(f"Rejected limit: {limit!r}")
            raise ValidationError(
                "limit must be a positive integer",
                field_errors=[{"field": "limit", "message": "must be a positive integer", "type": "value_error"}]
            )
        return limit

    @staticmethod
    def _coerce_id(value: Any, field: str = "id") -> int:
        """Accept integer ids or their ASCII decimal string form, within the Integer column range."""
        coerced = None
        if isinstance(value, int) and not isinstance(value, bool):
            coerced = value
        elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
            digits = value.strip().lstrip("0") or "0"
            # Longer strings are out of range anyway and may exceed int()'s digit limit
            coerced = int(digits) if len(digits) <= len(str(MAX_INTEGER)) else MAX_INTEGER + 1

        if coerced is None:
            logger.warning(f"Rejected {field}: {value!r}")
            raise ValidationError(
                f"{field} must be an integer",
                field_errors=[{"field": field, "message": "must be an integer", "type": "int_parsing"}]
            )

        if not MIN_INTEGER <= coerced <= MAX_INTEGER:
            logger.warning(f"Rejected out of range {field}: {coerced}")
            raise ValidationError(
                f"{field} is out of range",
                field_errors=[{"field": field, "message": "out of range", "type": "int_range"}]
            )
        return coerced
