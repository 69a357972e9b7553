"""
Database seeding script.
Creates the schema and loads fixture JSON into the configured database.
"""

import asyncio
import sys
import argparse
import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncEngine

from lightbnb.config import Settings, get_settings
from lightbnb.database import Base, build_engine, build_session_factory, check_database_connection
from lightbnb.backends.fixtures import FixtureBookingBackend
from lightbnb.models import User, Property, PropertyReview, Reservation
from lightbnb.utils.logger import configure_logging

logger = logging.getLogger(__name__)

# Insert order follows the foreign keys
SEEDED_TABLES = ("users", "properties", "reservations", "property_reviews")


class SeedManager:
    """Creates, seeds and resets the database schema."""

    def __init__(self, settings: Settings, engine: Optional[AsyncEngine] = None):
        self.settings = settings
        self.engine = engine or build_engine(settings)
        self.session_factory = build_session_factory(self.engine)

    async def create_tables(self) -> None:
        """Create all tables that do not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("All tables created")

    async def seed_database(self, fixtures_dir: Path) -> int:
        """
        Load fixture rows into the database, keeping their ids.

        Returns:
            Number of rows inserted; 0 when the database already holds users
        """
        fixtures = FixtureBookingBackend.from_directory(fixtures_dir)

        async with self.session_factory() as session:
            try:
                existing_user = await session.execute(select(User.id).limit(1))
                if existing_user.first() is not None:
                    logger.info("Users already exist, skipping seed")
                    return 0

                session.add_all(User(**user.model_dump()) for user in fixtures.users.values())
                await session.flush()
                session.add_all(Property(**prop.model_dump()) for prop in fixtures.properties.values())
                await session.flush()
                session.add_all(
                    Reservation(**reservation.model_dump()) for reservation in fixtures.reservations.values()
                )
                session.add_all(
                    PropertyReview(**review.model_dump()) for review in fixtures.property_reviews.values()
                )
                await session.flush()

                if self.engine.dialect.name == "postgresql":
                    # Explicit ids do not advance the serial sequences
                    for table in SEEDED_TABLES:
                        await session.execute(text(
                            f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
                            f"COALESCE((SELECT MAX(id) FROM {table}), 1))"
                        ))

                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error(f"Failed to seed database: {e}")
                raise

        inserted = (
            len(fixtures.users) + len(fixtures.properties)
            + len(fixtures.reservations) + len(fixtures.property_reviews)
        )
        logger.info(f"Database seeded with {inserted} rows from {fixtures_dir}")
        return inserted

    async def reset_database(self, fixtures_dir: Path) -> int:
        """Drop and recreate all tables, then seed them."""
        logger.warning("Resetting database - all data will be lost!")

        if self.settings.is_production:
            raise RuntimeError("Database reset is not allowed in production")

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            logger.info("All tables dropped")
            await conn.run_sync(Base.metadata.create_all)
            logger.info("All tables created")

        return await self.seed_database(fixtures_dir)

    async def check(self) -> bool:
        return await check_database_connection(self.engine)

    async def close(self) -> None:
        await self.engine.dispose()


async def _run(manager: SeedManager, args: argparse.Namespace) -> int:
    try:
        if args.command == "create":
            await manager.create_tables()
        elif args.command == "seed":
            await manager.create_tables()
            await manager.seed_database(args.fixtures_dir)
        elif args.command == "reset":
            await manager.reset_database(args.fixtures_dir)
        elif args.command == "check":
            if not await manager.check():
                return 1
        return 0
    finally:
        await manager.close()


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LightBnB database management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create", help="Create all tables")

    seed_parser = subparsers.add_parser("seed", help="Create tables and load fixture data")
    seed_parser.add_argument(
        "--fixtures-dir", type=Path, default=settings.fixtures_dir, help="Directory of fixture JSON files"
    )

    reset_parser = subparsers.add_parser("reset", help="Drop, recreate and seed all tables")
    reset_parser.add_argument(
        "--fixtures-dir", type=Path, default=settings.fixtures_dir, help="Directory of fixture JSON files"
    )
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    subparsers.add_parser("check", help="Check database connectivity")

    return parser


def main(argv: Optional[list] = None) -> int:
    """Main CLI interface for database management."""
    settings = get_settings()
    configure_logging(settings.log_level)

    parser = build_parser(settings)
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "reset" and not args.confirm:
        print("Database reset requires --confirm flag")
        return 1

    try:
        return asyncio.run(_run(SeedManager(settings), args))
    except Exception as e:
        logger.error(f"Command failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
