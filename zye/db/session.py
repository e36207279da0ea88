"""
Database Session Management

This module handles async database connections using SQLAlchemy's async engine.
Uses a database abstraction layer to support different database backends.

Key Features:
- Database abstraction: SQLite by default, any async SQLAlchemy URL otherwise
- Async session management: one session per request
- Error handling: Automatic rollback on exceptions
"""

import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from zye.core.setting import settings
from zye.db.sqlite_adapter import get_database_adapter

logger = logging.getLogger(__name__)

db_adapter = get_database_adapter(settings.DATABASE_URL)

engine = db_adapter.create_engine(
    settings.DATABASE_URL
)

async_session_maker = async_sessionmaker(
    engine,
    class_=SQLModelAsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function for FastAPI to get database session.

    This function:
    - Creates a new async session
    - Yields it to the endpoint
    - Commits on success, rolls back on exception

    Usage in FastAPI:
        @router.get("/endpoint")
        async def endpoint(session: AsyncSession = Depends(get_session)):
            pass
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create missing tables. Production deployments run alembic instead."""
    from zye.db import models  # noqa: F401  (registers tables on the metadata)

    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)
    logger.info(f"Link store tables ready ({db_adapter.get_dialect_name()})")


async def dispose_engine() -> None:
    """Close pooled connections."""
    await engine.dispose()
