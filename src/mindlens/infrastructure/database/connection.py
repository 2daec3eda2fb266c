"""
Audit Store Connection

Async SQLAlchemy engine and session handling for the crisis alert
audit store. PostgreSQL (asyncpg) in deployed environments; SQLite
(aiosqlite) for tests and local runs.

SECURITY: The database URL embeds credentials and is never logged.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from mindlens.config import Settings, get_settings
from mindlens.config.logging_config import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for audit store models."""


def _build_engine(settings: Settings) -> AsyncEngine:
    url = settings.database.async_url
    if url.startswith("sqlite"):
        # One shared connection keeps an in-memory database alive across sessions
        return create_async_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=settings.debug,
        )
    return create_async_engine(
        url,
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=settings.debug,
    )


class DatabaseManager:
    """
    Owns the engine and session factory for one application instance.

    Usage:
        db = DatabaseManager(settings)
        await db.initialize()
        async with db.session() as session:
            session.add(row)
        await db.close()
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings
        self._engine: Optional[AsyncEngine] = None
        self._sessions: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    async def initialize(self, create_schema: bool = False) -> None:
        """
        Create the engine and session factory.

        Args:
            create_schema: Create tables from the ORM metadata. Only for
                tests and local runs; deployed schemas come from Alembic.
        """
        if self.is_initialized:
            logger.warning("Audit store already initialized")
            return

        self._engine = _build_engine(self._settings or get_settings())
        self._sessions = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        if create_schema:
            # Registers the audit table on Base.metadata
            from mindlens.infrastructure.database.models import CrisisAlertModel  # noqa: F401

            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        logger.info("Audit store connected", schema_created=create_schema)

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessions = None
        logger.info("Audit store connections closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session that commits on success and rolls back on any error."""
        if self._sessions is None:
            raise RuntimeError("Audit store not initialized; call initialize() first")

        async with self._sessions() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def health_check(self) -> bool:
        if self._engine is None:
            return False
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("Audit store health check failed", error=str(e))
            return False
        return True
