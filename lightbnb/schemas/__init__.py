"""
Pydantic schemas for data-access inputs and records.
"""

# User schemas
from .user import (
    UserCreate,
    UserRecord
)

# Property schemas
from .property import (
    PropertyBase,
    PropertyCreate,
    PropertyRecord,
    PropertyListing,
    PropertySearchFilters,
    to_minor_units
)

# Reservation schemas
from .reservation import ReservationRecord

__all__ = [
    # User
    "UserCreate",
    "UserRecord",

    # Property
    "PropertyBase",
    "PropertyCreate",
    "PropertyRecord",
    "PropertyListing",
    "PropertySearchFilters",
    "to_minor_units",

    # Reservation
    "ReservationRecord"
]
