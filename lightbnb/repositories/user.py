"""
User repository for lookups by email or id and for registration.
"""

from sqlalchemy.ext.asyncio import async_sessionmaker
from lightbnb.repositories.base import BaseRepository
from lightbnb.models.user import User
from lightbnb.utils.exceptions import DuplicateResourceError
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for the users table."""

    def __init__(self, session_factory: async_sessionmaker):
        super().__init__(User, session_factory)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address. The match is exact.

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        return await self.get_by_field("email", email)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user, hashing the password.

        Args:
            user_data: Dictionary with name, email and plain text password

        Returns:
            Created user instance

        Raises:
            DuplicateResourceError: If the email is already registered
            InfrastructureError: If database operation fails
        """
        existing_user = await self.get_by_email(user_data["email"])
        if existing_user:
            logger.warning(f"Rejected registration for existing email {user_data['email']}")
            raise DuplicateResourceError("User", user_data["email"])

        create_data = {
            "name": user_data["name"],
            "email": user_data["email"],
            "password": User.hash_password(user_data["password"]),
        }

        created_user = await self.create(create_data)
        logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
        return created_user
