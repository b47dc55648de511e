"""
Database Engine

Owns the SQLAlchemy async engine (and its connection pool) for the process.
The schema is created at startup when missing.
"""

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from cart.core.config.settings import Settings
from cart.core.exceptions import PersistenceError
from cart.core.logging.logger import get_logger
from cart.infrastructure.database.tables import metadata

logger = get_logger(__name__)


class Database:
    """Thin lifecycle wrapper around an AsyncEngine."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self._engine: AsyncEngine = create_async_engine(url, echo=echo)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        db = settings.database
        return cls(db.DATABASE_URL, echo=db.DATABASE_ECHO)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def create_schema(self) -> None:
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
        except SQLAlchemyError as e:
            raise PersistenceError.from_exception(e, message="Failed to create schema") from e
        logger.info("database_schema_ready", tables=sorted(metadata.tables))

    async def ping(self) -> bool:
        """Health probe; never raises."""
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("database_ping_failed", error=str(e))
            return False

    async def dispose(self) -> None:
        await self._engine.dispose()
        logger.info("database_engine_disposed")
