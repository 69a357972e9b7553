"""
Pydantic schemas for user creation and user records.
"""

from pydantic import BaseModel, Field, field_validator
from email_validator import validate_email, EmailNotValidError
from lightbnb.models.user import User


class UserCreate(BaseModel):
    """Fields required to register a user."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="User's display name"
    )

    email: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="User email address, stored exactly as given"
    )

    password: str = Field(
        ...,
        min_length=1,
        max_length=72,
        description="Plain text password; hashed before storage"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        """Validate and clean name."""
        if not v or not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        """
        Check the address with email-validator but keep the caller's spelling.
        Lookups by email are exact, so the stored value must match what was given.
        """
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {str(e)}")
        return v


class UserRecord(BaseModel):
    """A stored user row. password holds the bcrypt hash, never the plain text."""

    id: int
    name: str
    email: str
    password: str

    model_config = {"from_attributes": True}

    def verify_password(self, password: str) -> bool:
        """Check a plain text password against the stored hash."""
        return User.check_password(password, self.password)
