"""
Module-level data-access functions used by the route layer.
Every call goes through one process-wide backend, created from settings on first use.
"""

from lightbnb.backends import BookingBackend, DEFAULT_LIMIT, create_backend
from lightbnb.schemas.user import UserCreate, UserRecord
from lightbnb.schemas.property import PropertyCreate, PropertyRecord, PropertyListing, PropertySearchFilters
from lightbnb.schemas.reservation import ReservationRecord
from lightbnb.utils.logger import configure_logging
from typing import Any, List, Mapping, Optional, Union
import logging

logger = logging.getLogger(__name__)

_backend: Optional[BookingBackend] = None


def get_backend() -> BookingBackend:
    """Get the process-wide backend, creating it on first use."""
    global _backend
    if _backend is None:
        configure_logging()
        _backend = create_backend()
        logger.info(f"Data access initialised with the {_backend.name} backend")
    return _backend


def set_backend(backend: Optional[BookingBackend]) -> None:
    """Replace the process-wide backend (startup wiring and tests)."""
    global _backend
    _backend = backend


async def close_backend() -> None:
    """Release the process-wide backend. Call on application shutdown."""
    global _backend
    if _backend is not None:
        await _backend.close()
    _backend = None


# Users

async def get_user_with_email(email: str) -> Optional[UserRecord]:
    """
    Get a single user given their email.

    Returns:
        The user, or None if no user has that email
    """
    return await get_backend().get_user_with_email(email)


async def get_user_with_id(id: Union[int, str]) -> Optional[UserRecord]:
    """
    Get a single user given their id.

    Returns:
        The user, or None if no user has that id
    """
    return await get_backend().get_user_with_id(id)


async def add_user(user: Union[UserCreate, Mapping[str, Any]]) -> UserRecord:
    """
    Add a new user from {name, email, password}.

    Returns:
        The stored user, with the password hashed
    """
    return await get_backend().add_user(user)


# Reservations

async def get_all_reservations(guest_id: Union[int, str], limit: int = DEFAULT_LIMIT) -> List[ReservationRecord]:
    """Get up to limit reservations for a guest, earliest first."""
    return await get_backend().get_all_reservations(guest_id, limit)


# Properties

async def get_all_properties(
    options: Union[PropertySearchFilters, Mapping[str, Any], None] = None,
    limit: int = DEFAULT_LIMIT
) -> List[PropertyListing]:
    """
    Get reviewed properties matching the search options, cheapest first.

    Args:
        options: city, owner_id, minimum_price_per_night, maximum_price_per_night
                 (minor units) and minimum_rating; all optional
        limit: The number of results to return
    """
    return await get_backend().get_all_properties(options, limit)


async def add_property(property: Union[PropertyCreate, Mapping[str, Any]]) -> PropertyRecord:
    """Add a property and return the stored row with its new id."""
    return await get_backend().add_property(property)
