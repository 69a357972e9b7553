"""
Database engine, connection pool and session management.
Handles async database operations with SQLAlchemy and a shared connection pool.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool
from sqlalchemy import Integer, event, text
from lightbnb.config import Settings, get_settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# Range of the Integer columns (PostgreSQL int4)
MIN_INTEGER = -2**31
MAX_INTEGER = 2**31 - 1

# Process-wide engine and session factory, created on first use
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker] = None


class Base(DeclarativeBase):
    """
    Base class for all database models.
    Every table has a generated integer primary key.
    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    def __repr__(self) -> str:
        """String representation of the model."""
        return f"<{self.__class__.__name__}(id={self.id})>"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite leaves foreign keys unenforced unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create an async engine with connection pooling from settings.

    SQLite URLs (tests, local runs) get a single shared connection instead of
    a sized pool.
    """
    if settings.is_sqlite:
        engine = create_async_engine(
            settings.database_url,
            echo=settings.debug,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_size=settings.db_pool_size,  # Connections kept open in the pool
        max_overflow=settings.db_max_overflow,  # Extra connections created on demand
        pool_pre_ping=settings.db_pool_pre_ping,  # Validate connections before use
        pool_recycle=settings.db_pool_recycle,
        pool_timeout=settings.db_pool_timeout,  # Wait for a free connection
        connect_args={
            "server_settings": {
                "application_name": settings.app_name.lower(),
            }
        },
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create an async session factory bound to the engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


def get_engine() -> AsyncEngine:
    """Get the process-wide engine, creating it from settings on first use."""
    global _engine
    if _engine is None:
        _engine = build_engine(get_settings())
        logger.info(f"Database engine created for {_engine.url.render_as_string(hide_password=True)}")
    return _engine


def get_session_factory() -> async_sessionmaker:
    """Get the process-wide session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = build_session_factory(get_engine())
    return _session_factory


async def check_database_connection(engine: Optional[AsyncEngine] = None) -> bool:
    """
    Test database connectivity.
    Returns True if connection is successful, False otherwise.
    """
    target_engine = engine or get_engine()
    try:
        async with target_engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            result.scalar()
            logger.info("Database connection successful")
            return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


async def create_tables(engine: Optional[AsyncEngine] = None) -> None:
    """Create all database tables."""
    # Models must be imported so their tables are registered on the metadata
    import lightbnb.models  # noqa: F401

    target_engine = engine or get_engine()
    async with target_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")


async def drop_tables(engine: Optional[AsyncEngine] = None) -> None:
    """
    Drop all database tables.
    This should only be used in testing or development.
    """
    import lightbnb.models  # noqa: F401

    settings = get_settings()
    if settings.is_production:
        raise RuntimeError("Cannot drop tables in production environment")

    target_engine = engine or get_engine()
    async with target_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        logger.info("Database tables dropped successfully")


async def close_db_connection() -> None:
    """
    Dispose of the process-wide engine and its pool.
    This should be called during application shutdown.
    """
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("Database connections closed")
    _engine = None
    _session_factory = None
