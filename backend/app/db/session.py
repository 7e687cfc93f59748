"""Async SQLAlchemy database session and engine configuration."""

import logging
import subprocess
from pathlib import Path

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from app.config import get_settings, to_async_url

logger = logging.getLogger(__name__)

_db_available = False

# alembic.ini lives next to the app package
BACKEND_DIR = Path(__file__).resolve().parents[2]


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all ORM models."""

    # Server-side defaults (created_at) are fetched on INSERT so that async
    # code never triggers a lazy refresh.
    __mapper_args__ = {"eager_defaults": True}


engine: AsyncEngine | None = None
async_session_factory: async_sessionmaker[AsyncSession] | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for ``url`` with driver-appropriate pooling."""
    url = to_async_url(url)
    if url.startswith("sqlite"):
        db_file = url.split(":///", 1)[-1]
        if db_file and db_file != ":memory:":
            Path(db_file).parent.mkdir(parents=True, exist_ok=True)
        new_engine = create_async_engine(url, echo=echo, poolclass=NullPool)
        event.listen(new_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return new_engine

    return create_async_engine(
        url,
        echo=echo,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
    )


def configure_engine(url: str | None = None) -> AsyncEngine:
    """(Re)bind the module-level engine and session factory."""
    global engine, async_session_factory
    settings = get_settings()
    engine = build_engine(url or settings.database_url, echo=settings.debug)
    async_session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if async_session_factory is None:
        configure_engine()
    return async_session_factory


async def get_db() -> AsyncSession:
    """FastAPI dependency: yields an async database session."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def create_all() -> None:
    """Create tables straight from the ORM metadata (SQLite stores, tests)."""
    from app.models import panel  # noqa: F401  registers the models

    if engine is None:
        configure_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db() -> None:
    """Check DB connectivity and prepare the schema."""
    global _db_available
    settings = get_settings()
    if engine is None:
        configure_engine()
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

        if settings.auto_migrate_on_startup:
            subprocess.run(
                ["alembic", "upgrade", "head"],
                cwd=BACKEND_DIR,
                check=True,
                capture_output=True,
                text=True,
            )
        elif settings.db_backend == "sqlite" and not settings.database_url_override:
            await create_all()
        _db_available = True
        logger.info("Database connected: %s", engine.url.render_as_string())
    except Exception as exc:
        _db_available = False
        logger.warning(
            "Database unavailable. Panel and breaker endpoints will fail. Error: %s",
            exc,
        )


async def close_db() -> None:
    """Dispose engine. Called during app shutdown."""
    if engine is not None:
        await engine.dispose()


def is_db_available() -> bool:
    """Check if the database connection was established."""
    return _db_available
