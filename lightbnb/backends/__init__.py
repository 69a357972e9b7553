"""
Persistence backends implementing the booking data-access contract.
"""

from lightbnb.backends.base import BookingBackend, DEFAULT_LIMIT
from lightbnb.backends.sql import SQLBookingBackend
from lightbnb.backends.fixtures import FixtureBookingBackend
from lightbnb.config import Settings, get_settings
from lightbnb.database import build_engine, build_session_factory, get_session_factory
from typing import Optional
import logging

logger = logging.getLogger(__name__)


def create_backend(settings: Optional[Settings] = None) -> BookingBackend:
    """
    Create the backend selected by settings.backend.

    Without explicit settings the SQL backend runs on the process-wide pool;
    with explicit settings it gets an engine of its own.
    """
    shared_pool = settings is None
    settings = settings or get_settings()

    if settings.backend == "fixtures":
        logger.info(f"Using fixture backend from {settings.fixtures_dir}")
        return FixtureBookingBackend.from_directory(settings.fixtures_dir)

    logger.info("Using SQL backend")
    if shared_pool:
        return SQLBookingBackend(get_session_factory())

    engine = build_engine(settings)
    return SQLBookingBackend(build_session_factory(engine), engine=engine)


__all__ = [
    "BookingBackend",
    "DEFAULT_LIMIT",
    "SQLBookingBackend",
    "FixtureBookingBackend",
    "create_backend",
]
