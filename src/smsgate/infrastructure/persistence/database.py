"""Engine, sessions and the declarative base.

One :class:`DatabaseManager` per process owns the async engine. Request
handlers get a session through :func:`get_db_session`; background work and
the CLI open their own with ``async with manager.session()``.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from smsgate.core.config import Settings, get_settings
from smsgate.core.logging import get_logger

logger = get_logger(__name__)


def utcnow() -> datetime:
    """Aware UTC now, used as the Python-side default of timestamp columns."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


def _sqlite_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Owns one async engine and the session factory bound to it.

    Nothing connects until :attr:`engine` is first touched.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.url = make_url(self.settings.database_url)
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.get_backend_name() == "sqlite"

    def ensure_sqlite_directory(self) -> None:
        """``sqlite:///./sg_data/x.db`` needs ``./sg_data`` to exist before connecting."""
        if self.is_sqlite and self.url.database and self.url.database != ":memory:":
            Path(self.url.database).parent.mkdir(parents=True, exist_ok=True)

    def _build_engine(self) -> AsyncEngine:
        if self.is_sqlite:
            engine = create_async_engine(
                self.url,
                echo=self.settings.db_echo,
                connect_args={"check_same_thread": False},
            )
            event.listen(engine.sync_engine, "connect", _sqlite_pragmas)
            return engine
        return create_async_engine(
            self.url,
            echo=self.settings.db_echo,
            pool_size=self.settings.db_pool_size,
            max_overflow=self.settings.db_max_overflow,
            pool_timeout=self.settings.db_pool_timeout,
            pool_recycle=self.settings.db_pool_recycle,
            pool_pre_ping=True,
        )

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = self._build_engine()
            logger.info(
                "Database engine ready",
                database_url=self.url.render_as_string(hide_password=True),
            )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """A session that rolls back if the block raises.

        Committing is the caller's job::

            async with manager.session() as session:
                session.add(user)
                await session.commit()
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        """Create the whole schema from the models. Development and tests only."""
        from smsgate.infrastructure.persistence import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created", tables=len(Base.metadata.tables))

    async def check_connection(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("Database is unreachable", error=str(e))
            return False
        return True

    async def disconnect(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database engine disposed")


_manager: DatabaseManager | None = None


def get_db_manager() -> DatabaseManager:
    """The process-wide manager, created from the cached settings on first use."""
    global _manager
    if _manager is None:
        _manager = DatabaseManager()
    return _manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request.

    Routers commit explicitly; anything left uncommitted is discarded when the
    session closes.
    """
    async with get_db_manager().session() as session:
        yield session


async def init_database(settings: Settings | None = None) -> None:
    """Startup hook: connect, create tables in development, bootstrap the admin.

    Raises:
        RuntimeError: If the database cannot be reached.
    """
    global _manager
    settings = settings or get_settings()
    if _manager is None:
        _manager = DatabaseManager(settings)

    _manager.ensure_sqlite_directory()
    if not await _manager.check_connection():
        raise RuntimeError("Failed to connect to database")

    if settings.is_development:
        await _manager.create_tables()
    else:
        logger.info("Schema is managed by Alembic, skipping create_all")

    if settings.admin_email and settings.admin_password:
        await _bootstrap_admin(_manager, settings.admin_email, settings.admin_password)


async def _bootstrap_admin(manager: DatabaseManager, email: str, password: str) -> None:
    from smsgate.domain.services.admin_service import ensure_admin_user

    async with manager.session() as session:
        user, created = await ensure_admin_user(session, email=email, password=password)
        await session.commit()
    logger.info("Bootstrap admin ensured", user_id=user.id, email=user.email, created=created)


async def close_database() -> None:
    if _manager is not None:
        await _manager.disconnect()
