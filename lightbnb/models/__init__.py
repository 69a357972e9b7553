"""
Database models for the LightBnB data-access layer.
Includes User, Property, PropertyReview and Reservation tables.
"""

from lightbnb.models.user import User
from lightbnb.models.property import Property, PropertyReview
from lightbnb.models.reservation import Reservation

# Export all models for easy importing
__all__ = [
    "User",
    "Property",
    "PropertyReview",
    "Reservation",
]
