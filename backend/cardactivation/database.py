"""
Card Activation Backend — Data Store Client
=============================================

What:  An explicitly constructed `Database` object that owns the async
       SQLAlchemy engine and session factory, plus the declarative Base.
How:   The lifespan in main.py builds one Database from Settings, calls
       connect() (which retries until the store answers), keeps it on
       `app.state.database`, and calls close() on shutdown. Request handlers
       get per-request sessions through `dependencies.get_db_session`.
Who:   main.py, cli.py, dependencies.py and the test fixtures.

Connection Pooling (PostgreSQL):
    pool_size / max_overflow from settings, pool_pre_ping to re-establish
    connections dropped by a DB restart, pool_recycle=3600.
    SQLite URLs (tests, local runs) use SQLAlchemy's default pool.

Reconnect Loop:
    connect() probes with SELECT 1 under tenacity: fixed wait of
    DB_RECONNECT_INTERVAL seconds, DB_CONNECT_ATTEMPTS attempts (0 = forever).
    Once connected, pool_pre_ping handles disconnects transparently.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    wait_fixed,
)

from cardactivation.config import Settings
from cardactivation.exceptions import PersistenceError

logger = logging.getLogger(__name__)

# Errors that mean "the store is not reachable yet" during startup
_CONNECT_ERRORS = (OSError, asyncio.TimeoutError, SQLAlchemyError)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object used by create_all() and Alembic.
    """
    pass


class Database:
    """
    Handle to the persistent store with an explicit lifecycle.

    Usage:
        database = Database(settings)
        await database.connect()
        async with database.session() as session:
            ...
        await database.close()
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self.engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_connected(self) -> bool:
        return self.engine is not None

    def _engine_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "pool_pre_ping": self._settings.db_pool_pre_ping,
            "echo": self._settings.log_level == "DEBUG",
        }
        if self._settings.is_sqlite:
            return options
        options.update(
            pool_size=self._settings.db_pool_size,
            max_overflow=self._settings.db_max_overflow,
            pool_recycle=3600,
        )
        if "asyncpg" in self._settings.database_url:
            options["connect_args"] = {"timeout": self._settings.db_connect_timeout}
        return options

    def _retrying(self) -> AsyncRetrying:
        attempts = self._settings.db_connect_attempts
        return AsyncRetrying(
            stop=stop_never if attempts == 0 else stop_after_attempt(attempts),
            wait=wait_fixed(self._settings.db_reconnect_interval),
            retry=retry_if_exception_type(_CONNECT_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    async def connect(self) -> None:
        """
        Create the engine and block until the store answers SELECT 1.

        Raises:
            PersistenceError: every connection attempt failed.
        """
        if self.engine is None:
            self.engine = create_async_engine(
                self._settings.database_url, **self._engine_options()
            )
            self._session_factory = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )

        try:
            async for attempt in self._retrying():
                with attempt:
                    await self.ping()
        except _CONNECT_ERRORS as e:
            logger.error("Could not connect to the database: %s", type(e).__name__)
            raise PersistenceError(
                message="Could not connect to the database.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Connected to database (%s)", self.engine.url.render_as_string(hide_password=True))

    async def ping(self) -> None:
        """Run a trivial query; raises on any connection problem."""
        if self.engine is None:
            raise PersistenceError(message="Database is not connected.")
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        """Create any missing tables for the registered models."""
        if self.engine is None:
            raise PersistenceError(message="Database is not connected.")
        # Registers every model on Base.metadata
        from cardactivation import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Yield a session that commits on success and rolls back on error.

        Exceptions raised inside the block (including ValidationError) are
        re-raised after the rollback so the global handlers can respond.
        """
        if self._session_factory is None:
            raise PersistenceError(message="Database is not connected.")
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self) -> None:
        """Dispose the engine and close every pooled connection."""
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            self._session_factory = None
            logger.info("Database connections closed")
