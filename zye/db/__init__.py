"""
Database module with abstraction layer.

This module provides:
- DatabaseAdapter interface: Abstract base class for database implementations
- SQLiteAdapter: SQLite-specific implementation (default)
- Session management: Database session creation and management
"""

from zye.db.interface import DatabaseAdapter
from zye.db.session import get_session, async_session_maker, engine, create_tables

__all__ = [
    "DatabaseAdapter",
    "get_session",
    "async_session_maker",
    "engine",
    "create_tables",
]
