"""
Database Connection Manager
---------------------------
Manages database connections with the SQLAlchemy async engine.
All persistence goes through ORM sessions handed out by ``get_session()``.
"""

from typing import AsyncGenerator, Optional
from contextlib import asynccontextmanager

from loguru import logger
from sqlalchemy import select, literal
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ngo_portal.core.config_manager import settings
from ngo_portal.models.db_tables import Base


class DatabaseManager:
    """
    Manages the async engine and session factory.

    PostgreSQL (asyncpg) is the production target and gets a sized connection
    pool with pre-ping and recycling. SQLite URLs (development and tests) use a
    single shared connection so that in-memory databases survive across
    sessions.
    """

    def __init__(self):
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker] = None

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    async def initialize(self, database_url: Optional[str] = None) -> None:
        """
        Initialize SQLAlchemy async engine.

        Args:
            database_url: Optional URL override (defaults to settings)
        """
        if self._engine is not None:
            logger.warning("Database engine already initialized")
            return

        url = database_url or settings.database_url_async
        logger.info(f"Initializing database engine for {url.split('://')[0]}")

        try:
            if url.startswith("sqlite"):
                self._engine = create_async_engine(
                    url,
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False},
                    echo=settings.database_echo,
                )
            else:
                self._engine = create_async_engine(
                    url,
                    pool_size=settings.database_pool_size,
                    max_overflow=settings.database_max_overflow,
                    pool_pre_ping=True,  # Health checks
                    pool_recycle=3600,  # Recycle connections every hour
                    pool_timeout=30,
                    echo=settings.database_echo,
                )

            self._sessionmaker = async_sessionmaker(
                bind=self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            logger.info("SQLAlchemy async engine and sessionmaker initialized")

        except Exception as e:
            logger.error(f"Error initializing SQLAlchemy engine: {e}")
            raise

    async def create_schema(self) -> None:
        """Create all ORM tables that do not exist yet."""
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        async with self._engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)
        logger.info("Database schema verified")

    async def close(self) -> None:
        """Dispose the SQLAlchemy engine."""
        if self._engine is not None:
            logger.info("Disposing SQLAlchemy engine")
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None
            logger.info("SQLAlchemy engine disposed")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get a SQLAlchemy async session from the sessionmaker.

        Yields:
            AsyncSession: Active session, committed on success and rolled
                          back on exception

        Raises:
            RuntimeError: If database not initialized
        """
        if not self._sessionmaker:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session = self._sessionmaker()
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.warning(f"Session rolled back due to error: {e}")
            raise
        finally:
            await session.close()

    async def ping(self) -> bool:
        """Return True when a trivial round trip succeeds."""
        try:
            async with self.get_session() as session:
                result = await session.execute(select(literal(1)))
                return result.scalar() == 1
        except Exception as e:
            logger.error(f"Database ping failed: {e}")
            return False


# Global database manager instance
db_manager = DatabaseManager()
