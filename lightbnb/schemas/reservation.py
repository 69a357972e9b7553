"""
Pydantic schema for reservation listings.
"""

from pydantic import BaseModel
from typing import Optional
from datetime import date
from lightbnb.schemas.property import PropertyRecord


class ReservationRecord(BaseModel):
    """A guest's reservation joined with the reserved property and its average rating."""

    id: int
    guest_id: int
    start_date: date
    property: PropertyRecord
    average_rating: Optional[float] = None
