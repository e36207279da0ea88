"""
Database Adapters

SQLite is the default link store backend:
- File-based (single .db file), no server required
- Excellent for reads, which is all the redirect path does apart from
  the occasional expiry delete

Any other async SQLAlchemy URL (e.g. postgresql+asyncpg) is served by the
generic adapter with SQLAlchemy's default pooling.
"""

from typing import Any, Optional
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool, Pool

from zye.db.interface import DatabaseAdapter


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.
    """

    def create_engine(self, database_url: str, **kwargs) -> AsyncEngine:
        """
        Create SQLite async engine with appropriate configuration.

        SQLite-specific configuration:
        - NullPool: a fresh connection per session (file-based, no pooling needed)
        - check_same_thread=False: Required for async SQLite operations

        Args:
            database_url: SQLite connection string (sqlite+aiosqlite:///...)
            **kwargs: Additional engine options (merged with SQLite defaults)

        Returns:
            Configured AsyncEngine for SQLite
        """
        engine_kwargs = self.get_engine_kwargs()
        engine_kwargs.update(kwargs)

        return create_async_engine(
            database_url,
            poolclass=self.get_pool_class(),
            connect_args=self.get_connect_args(),
            **engine_kwargs
        )

    def get_pool_class(self) -> type[NullPool]:
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        return {
            "check_same_thread": False
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    def get_dialect_name(self) -> str:
        return "sqlite"


class GenericAdapter(DatabaseAdapter):
    """
    Adapter for server databases (PostgreSQL, MySQL, ...).

    Uses SQLAlchemy's default queue pool with pre-ping so that connections
    dropped by the server are replaced instead of failing a lookup.
    """

    def __init__(self, dialect_name: str):
        self.dialect_name = dialect_name

    def create_engine(self, database_url: str, **kwargs) -> AsyncEngine:
        engine_kwargs = self.get_engine_kwargs()
        engine_kwargs.update(kwargs)
        return create_async_engine(database_url, **engine_kwargs)

    def get_pool_class(self) -> Optional[type[Pool]]:
        return None

    def get_connect_args(self) -> dict[str, Any]:
        return {}

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False,
            "pool_pre_ping": True,
        }

    def get_dialect_name(self) -> str:
        return self.dialect_name


def get_database_adapter(database_url: str) -> DatabaseAdapter:
    """
    Factory function to get the database adapter for a connection string.

    Args:
        database_url: SQLAlchemy connection string

    Returns:
        DatabaseAdapter instance
    """
    dialect = database_url.split(":", 1)[0].split("+", 1)[0]
    if dialect == "sqlite":
        return SQLiteAdapter()
    return GenericAdapter(dialect)
