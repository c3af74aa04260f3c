"""
Database Configuration

Async SQLAlchemy engine, session factory and declarative base.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields a database session.

    The session is closed when the request finishes. Services commit;
    repositories only flush.
    """
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """
    Create tables that do not exist yet.

    Call this on application startup.
    """
    # Import models so they register on Base.metadata
    from app.modules.admissions import models as admissions_models  # noqa: F401
    from app.modules.announcements import models as announcements_models  # noqa: F401
    from app.modules.schedule import models as schedule_models  # noqa: F401
    from app.modules.users import models as users_models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine's connection pool."""
    await engine.dispose()
