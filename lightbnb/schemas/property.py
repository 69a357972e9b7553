"""
Pydantic schemas for property creation, property records and search filters.
Prices are integers in minor currency units (cents) unless stated otherwise.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, Union
from decimal import Decimal, ROUND_HALF_UP
from lightbnb.database import MAX_INTEGER


class PropertyBase(BaseModel):
    """The fourteen listing fields supplied when a property is created."""

    title: str = Field(..., min_length=1, max_length=255, description="Property listing title")
    description: str = Field(..., min_length=1, description="Detailed property description")
    owner_id: int = Field(..., gt=0, le=MAX_INTEGER, description="ID of the owning user")
    thumbnail_photo_url: str = Field(..., min_length=1, max_length=255)
    cover_photo_url: str = Field(..., min_length=1, max_length=255)
    cost_per_night: int = Field(..., ge=0, le=MAX_INTEGER, description="Nightly price in minor currency units")
    parking_spaces: int = Field(0, ge=0, le=MAX_INTEGER)
    number_of_bathrooms: int = Field(0, ge=0, le=MAX_INTEGER)
    number_of_bedrooms: int = Field(0, ge=0, le=MAX_INTEGER)
    country: str = Field(..., min_length=1, max_length=255)
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=255)
    province: str = Field(..., min_length=1, max_length=255)
    post_code: str = Field(..., min_length=1, max_length=255)


class PropertyCreate(PropertyBase):
    """Schema for adding a property."""

    @field_validator("title", "description", "country", "street", "city", "province", "post_code")
    @classmethod
    def validate_not_blank(cls, v):
        """Reject whitespace-only text fields."""
        if not v.strip():
            raise ValueError("Field cannot be blank")
        return v.strip()


class PropertyRecord(PropertyBase):
    """A stored property row."""

    id: int

    model_config = {"from_attributes": True}


class PropertyListing(PropertyRecord):
    """A property search result with its average review rating."""

    average_rating: float


def to_minor_units(amount: Union[int, float, str, Decimal]) -> int:
    """Convert a major-unit price (e.g. dollars) to minor units (cents)."""
    cents = Decimal(str(amount)) * 100
    return int(cents.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PropertySearchFilters(BaseModel):
    """
    Optional property search filters, combined with AND.

    Price bounds are compared directly against cost_per_night, so they must
    already be in minor units. Use from_major_units() when holding dollars.
    """

    city: Optional[str] = Field(None, description="Case-insensitive city pattern")
    owner_id: Optional[int] = Field(None, gt=0, le=MAX_INTEGER)
    minimum_price_per_night: Optional[int] = Field(None, ge=0, le=MAX_INTEGER)
    maximum_price_per_night: Optional[int] = Field(None, ge=0, le=MAX_INTEGER)
    minimum_rating: Optional[float] = Field(None, ge=0)

    model_config = {"extra": "ignore"}

    @field_validator("city")
    @classmethod
    def validate_city(cls, v):
        """Blank city means no city filter."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def validate_price_range(self):
        """Validate that the price range is consistent."""
        if (
            self.minimum_price_per_night is not None
            and self.maximum_price_per_night is not None
            and self.minimum_price_per_night > self.maximum_price_per_night
        ):
            raise ValueError("minimum_price_per_night cannot exceed maximum_price_per_night")
        return self

    @classmethod
    def from_major_units(
        cls,
        city: Optional[str] = None,
        owner_id: Optional[int] = None,
        minimum_price_per_night: Optional[Union[int, float, str, Decimal]] = None,
        maximum_price_per_night: Optional[Union[int, float, str, Decimal]] = None,
        minimum_rating: Optional[float] = None,
    ) -> "PropertySearchFilters":
        """Build filters from nightly prices given in major units (dollars)."""
        return cls(
            city=city,
            owner_id=owner_id,
            minimum_price_per_night=(
                to_minor_units(minimum_price_per_night) if minimum_price_per_night not in (None, "") else None
            ),
            maximum_price_per_night=(
                to_minor_units(maximum_price_per_night) if maximum_price_per_night not in (None, "") else None
            ),
            minimum_rating=minimum_rating,
        )
