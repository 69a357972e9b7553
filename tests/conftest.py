"""
Test configuration and fixtures for the LightBnB data-access layer.
Provides database fixtures, test data factories, and a backend fixture that
runs each contract test against both the SQL and the fixture backend.
"""

import os

# Must be set before lightbnb reads its settings
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
import uuid
from datetime import date
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from lightbnb.config import Settings
from lightbnb.database import Base, build_engine, build_session_factory
from lightbnb.models import PropertyReview, Reservation
from lightbnb.repositories import UserRepository, PropertyRepository, ReservationRepository
from lightbnb.backends import BookingBackend, SQLBookingBackend, FixtureBookingBackend
from lightbnb.backends.fixtures import ReservationRow, PropertyReviewRow
from lightbnb.schemas import UserRecord, PropertyRecord


# Test database configuration
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")


@pytest.fixture
def test_settings() -> Settings:
    """Settings pointing at the test database."""
    return Settings(
        _env_file=None,
        environment="testing",
        database_url=TEST_DATABASE_URL,
        bcrypt_rounds=4,
    )


@pytest.fixture
async def engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh schema for each test."""
    engine = build_engine(test_settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Session factory bound to the test engine."""
    return build_session_factory(engine)


# Repository fixtures
@pytest.fixture
def user_repository(session_factory: async_sessionmaker) -> UserRepository:
    return UserRepository(session_factory)


@pytest.fixture
def property_repository(session_factory: async_sessionmaker) -> PropertyRepository:
    return PropertyRepository(session_factory)


@pytest.fixture
def reservation_repository(session_factory: async_sessionmaker) -> ReservationRepository:
    return ReservationRepository(session_factory)


# Backend fixtures
@pytest.fixture
def sql_backend(session_factory: async_sessionmaker) -> SQLBookingBackend:
    return SQLBookingBackend(session_factory)


@pytest.fixture
def fixture_backend() -> FixtureBookingBackend:
    return FixtureBookingBackend()


@pytest.fixture(params=["sql", "fixtures"])
def backend(request, session_factory: async_sessionmaker) -> BookingBackend:
    """The same contract test runs once per backend."""
    if request.param == "sql":
        return SQLBookingBackend(session_factory)
    return FixtureBookingBackend()


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        name: str = "Test User",
        email: Optional[str] = None,
        password: str = "testpassword123"
    ) -> dict:
        """Create user data dictionary."""
        return {
            "name": name,
            "email": email or f"test{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
        }


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(
        owner_id: int,
        title: str = "Test Property",
        description: str = "A beautiful test property",
        cost_per_night: int = 10000,
        city: str = "Test City",
        parking_spaces: int = 1,
        number_of_bathrooms: int = 1,
        number_of_bedrooms: int = 2
    ) -> dict:
        """Create the fourteen-field property dictionary."""
        return {
            "title": title,
            "description": description,
            "owner_id": owner_id,
            "thumbnail_photo_url": "https://example.com/thumb.jpg",
            "cover_photo_url": "https://example.com/cover.jpg",
            "cost_per_night": cost_per_night,
            "parking_spaces": parking_spaces,
            "number_of_bathrooms": number_of_bathrooms,
            "number_of_bedrooms": number_of_bedrooms,
            "country": "Canada",
            "street": "123 Test Street",
            "city": city,
            "province": "British Columbia",
            "post_code": "V5K 0A1",
        }


class BackendSeeder:
    """
    Seeds data into either backend. Users and properties go through the
    public contract; reservations and reviews have no write operation, so
    they are written to the underlying store directly.
    """

    def __init__(self, backend: BookingBackend):
        self.backend = backend

    async def user(self, **kwargs) -> UserRecord:
        return await self.backend.add_user(UserFactory.create_user_data(**kwargs))

    async def property(self, owner_id: int, **kwargs) -> PropertyRecord:
        return await self.backend.add_property(PropertyFactory.create_property_data(owner_id, **kwargs))

    async def review(self, property_id: int, guest_id: int, rating: int) -> None:
        if isinstance(self.backend, FixtureBookingBackend):
            review_id = FixtureBookingBackend._next_id(self.backend.property_reviews)
            self.backend.property_reviews[review_id] = PropertyReviewRow(
                id=review_id, property_id=property_id, guest_id=guest_id, rating=rating
            )
            return
        async with self.backend.session_factory() as session:
            session.add(PropertyReview(property_id=property_id, guest_id=guest_id, rating=rating))
            await session.commit()

    async def reservation(self, property_id: int, guest_id: int, start_date: date) -> int:
        if isinstance(self.backend, FixtureBookingBackend):
            reservation_id = FixtureBookingBackend._next_id(self.backend.reservations)
            self.backend.reservations[reservation_id] = ReservationRow(
                id=reservation_id, property_id=property_id, guest_id=guest_id, start_date=start_date
            )
            return reservation_id
        async with self.backend.session_factory() as session:
            reservation = Reservation(property_id=property_id, guest_id=guest_id, start_date=start_date)
            session.add(reservation)
            await session.commit()
            return reservation.id

    async def reviewed_property(self, owner_id: int, ratings=(5,), **kwargs) -> PropertyRecord:
        """Create a property and one review per rating."""
        property_record = await self.property(owner_id, **kwargs)
        for rating in ratings:
            await self.review(property_record.id, owner_id, rating)
        return property_record


@pytest.fixture
def seeder(backend: BookingBackend) -> BackendSeeder:
    return BackendSeeder(backend)


@pytest.fixture
async def owner(seeder: BackendSeeder) -> UserRecord:
    """A user who owns the test properties."""
    return await seeder.user(name="Test Owner", email="owner@example.com")


@pytest.fixture
async def guest(seeder: BackendSeeder) -> UserRecord:
    """A user who makes the test reservations."""
    return await seeder.user(name="Test Guest", email="guest@example.com")
