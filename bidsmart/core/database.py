"""Async engine, request-scoped sessions and startup/shutdown hooks.

Supabase exposes Postgres through PgBouncer in transaction mode, so asyncpg's
prepared statement cache is turned off for every connection.
"""

import time
from collections.abc import AsyncGenerator
from typing import Any, Dict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from bidsmart.core.config import settings
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for the BidSmart tables."""


engine = create_async_engine(
    settings.database_url,
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
    echo=settings.database_echo,
    pool_pre_ping=True,
    connect_args={"statement_cache_size": 0},
)

async_session_maker = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield one session per request; repositories commit their own writes."""
    async with async_session_maker() as session:
        yield session


class DatabaseClient:
    """Owns the engine lifecycle and answers the /health probe."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        """Open one connection to fail fast on a bad DATABASE_URL.

        Raises:
            Exception: Whatever the driver raised; startup is aborted
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception:
            self._connected = False
            LOGGER.error("Database connection failed", exc_info=True)
            raise

        self._connected = True
        LOGGER.info("Database connection successful")

    async def disconnect(self) -> None:
        try:
            await self.engine.dispose()
            LOGGER.info("Database connection closed")
        except Exception as e:
            LOGGER.error("Error closing database connection", exc_info=True, extra={"error": str(e)})
        finally:
            self._connected = False

    async def create_tables(self) -> None:
        """Create missing tables from the ORM models.

        Local development only; deployed databases are migrated with Alembic.
        """
        from bidsmart.database import models  # noqa: F401

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            LOGGER.error("Failed to create database tables", exc_info=True, extra={"error": str(e)})
            raise

        LOGGER.info(f"Verified {len(Base.metadata.tables)} BidSmart tables")

    async def health_check(self) -> Dict[str, Any]:
        """Round-trip a trivial query; never raises."""
        started = time.perf_counter()
        try:
            async with self.engine.connect() as conn:
                await conn.scalar(text("SELECT 1"))
        except Exception as e:
            self._connected = False
            LOGGER.error("Database health check failed", extra={"error": str(e)})
            return {"status": "unhealthy", "connected": False, "error": str(e)}

        self._connected = True
        return {
            "status": "healthy",
            "connected": True,
            "latency_ms": round((time.perf_counter() - started) * 1000, 1),
        }


db_client = DatabaseClient(engine)


async def init_database(auto_migrate: bool = True) -> None:
    """Connect at startup and, when ``auto_migrate`` is set, create missing tables."""
    await db_client.connect()

    if auto_migrate:
        await db_client.create_tables()


async def close_database() -> None:
    if not db_client.is_connected:
        return
    LOGGER.info("Closing database connection...")
    await db_client.disconnect()
