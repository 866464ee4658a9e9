"""
Database Client

Async SQLAlchemy engine for the remote case mirror. The mirror is optional:
an uninitialized client reports no health status and callers fall back to
session data.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from accident_analytics.infrastructure.database.models import Base

logger = logging.getLogger(__name__)

CONNECT_ATTEMPTS = 3
CONNECT_BACKOFF_SECONDS = 1.0


class DatabaseClient:
    """Owns the engine and session factory for one database URL"""

    def __init__(self):
        self.engine: Optional[AsyncEngine] = None
        self.session_maker: Optional[async_sessionmaker] = None

    @property
    def is_initialized(self) -> bool:
        return self.session_maker is not None

    async def _wait_until_reachable(self, attempts: int = CONNECT_ATTEMPTS) -> None:
        """Ping the database, backing off between attempts.

        Raises:
            OperationalError: Still unreachable after the last attempt
        """
        for attempt in range(1, attempts + 1):
            try:
                async with self.engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
                return
            except OperationalError as e:
                if attempt == attempts:
                    raise
                delay = CONNECT_BACKOFF_SECONDS * 2 ** (attempt - 1)
                logger.warning(f"Case database unreachable (attempt {attempt}/{attempts}), retrying in {delay:g}s: {e}")
                await asyncio.sleep(delay)

    async def initialize(self, database_url: str):
        """Connect and make sure the ``cases`` table exists"""
        logger.info(f"Connecting remote case store: {database_url.split('@')[-1]}")

        sqlite = database_url.startswith("sqlite")
        self.engine = create_async_engine(database_url, poolclass=NullPool if sqlite else None)
        self.session_maker = async_sessionmaker(self.engine, expire_on_commit=False)

        await self._wait_until_reachable()

        # Deployed databases are migrated by alembic; create_all covers a fresh local file
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Remote case store ready")

    async def close(self):
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Remote case store connections closed")
        self.engine = None
        self.session_maker = None

    def get_session(self) -> AsyncSession:
        if not self.is_initialized:
            raise RuntimeError("Case database not initialized; call initialize() first")
        return self.session_maker()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Session that commits on success and rolls back on error"""
        async with self.get_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def health_check(self) -> Optional[bool]:
        """True/False for a configured database, None when there is none"""
        if not self.is_initialized:
            return None
        try:
            async with self.get_session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Case database health check failed: {e}")
            return False


# Global database client instance
db_client = DatabaseClient()
