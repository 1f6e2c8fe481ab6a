from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import event, text
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import DatabaseConfig
from .errors import ConnectivityError

logger = logging.getLogger(__name__)


def _describe_failure(exc: BaseException, config: DatabaseConfig) -> str:
    """Short failure reason with configured secrets removed."""
    cause: BaseException = exc
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        cause = exc.orig
    detail = str(cause).splitlines()[0] if str(cause) else ""
    for secret in config.secrets():
        detail = detail.replace(secret, "***")
    name = type(cause).__name__
    return f"{name}: {detail}" if detail else name


class DatabaseManager:
    """Async database manager with a single pooled engine and session factory."""

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    def _engine_options(self) -> Dict[str, Any]:
        if self._config.is_sqlite:
            return {}
        return {
            "pool_size": self._config.pool_size,
            "pool_pre_ping": True,
            "connect_args": {"timeout": self._config.connect_timeout},
        }

    async def init(self) -> None:
        """Initialize the async engine and sessionmaker if not already initialized."""
        if self._engine is not None:
            return

        logger.info("Initializing async database engine for %s", self._config.safe_url())
        self._engine = create_async_engine(
            self._config.sqlalchemy_url(),
            echo=False,
            **self._engine_options(),
        )

        # SQLite-specific pragmas for better safety and concurrency.
        if self._config.is_sqlite:

            @event.listens_for(self._engine.sync_engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record) -> None:  # type: ignore[override]  # pragma: no cover
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                try:
                    cursor.execute("PRAGMA journal_mode=WAL")
                except Exception:
                    # journal_mode may not be supported in all environments; ignore failures
                    logger.debug("SQLite WAL journal_mode not applied")
                finally:
                    cursor.close()

        self._sessionmaker = async_sessionmaker(
            self._engine,
            expire_on_commit=False,
            class_=AsyncSession,
        )
        logger.info("Async database engine and sessionmaker initialized")

    async def check_connection(self) -> None:
        """Round-trip ``SELECT 1``; raise ConnectivityError when the store is unreachable."""
        if self._engine is None:
            raise RuntimeError("DatabaseManager is not initialized. Call init() first.")
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            reason = _describe_failure(e, self._config)
            # Not chained: driver errors may embed connection parameters.
            raise ConnectivityError(
                f"Could not connect to database at {self._config.safe_url()} ({reason})"
            ) from None
        logger.info("Database connection verified for %s", self._config.safe_url())

    async def dispose(self) -> None:
        """Dispose of the engine and clear the sessionmaker."""
        if self._engine is not None:
            logger.info("Disposing async database engine")
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Async context manager yielding an AsyncSession.

        Ensures commit on success and rollback on errors.
        """
        if self._sessionmaker is None:
            raise RuntimeError("DatabaseManager is not initialized. Call init() first.")

        session: AsyncSession = self._sessionmaker()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    @property
    def engine(self) -> Optional[AsyncEngine]:
        return self._engine


_db_manager: Optional[DatabaseManager] = None


async def init_database(config: DatabaseConfig) -> DatabaseManager:
    """Create and initialize the global DatabaseManager singleton."""
    global _db_manager

    if _db_manager is None:
        _db_manager = DatabaseManager(config)
    await _db_manager.init()
    return _db_manager


async def dispose_database() -> None:
    """Dispose the global DatabaseManager singleton."""
    global _db_manager

    if _db_manager is not None:
        await _db_manager.dispose()
        _db_manager = None


def get_database_manager() -> DatabaseManager:
    """Return the initialized DatabaseManager instance."""
    if _db_manager is None:
        raise RuntimeError("DatabaseManager is not initialized.")
    return _db_manager
