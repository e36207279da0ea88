"""
Link Store

Key-value access to link records. The redirect path only ever needs
get-by-code and delete-by-code; put exists for seeding and tests.

Design Decisions:
- LinkStore is the abstract contract the services consume
- SQLLinkStore keeps one JSON document per code in the `links` table
- Every backend failure surfaces as StoreError, so callers handle one type
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from zye.api.schemas import LinkRecord
from zye.core.exceptions import StoreError
from zye.db.models import LinkEntry


class LinkStore(ABC):
    """Async key-value store of link records keyed by short code."""

    @abstractmethod
    async def get(self, code: str) -> Optional[LinkRecord]:
        """
        Fetch a record.

        Returns:
            LinkRecord with `code` set, or None when the code is unknown

        Raises:
            StoreError: If the backend fails or the stored value is unreadable
        """
        pass

    @abstractmethod
    async def delete(self, code: str) -> None:
        """Remove a record. Deleting an unknown code is a no-op."""
        pass

    @abstractmethod
    async def put(self, code: str, record: LinkRecord) -> None:
        """Insert or replace a record."""
        pass


class SQLLinkStore(LinkStore):
    """
    Link store backed by an SQLAlchemy async session.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize the store with a database session.

        Args:
            session: Async database session for database operations
        """
        self.session = session

    async def get(self, code: str) -> Optional[LinkRecord]:
        try:
            entry = await self.session.get(LinkEntry, code)
        except SQLAlchemyError as e:
            raise StoreError(f"failed to read '{code}'", original_error=e)

        if entry is None:
            return None

        try:
            record = LinkRecord.model_validate_json(entry.value)
        except ValidationError as e:
            raise StoreError(f"unreadable value for '{code}'", original_error=e)

        record.code = code
        return record

    async def delete(self, code: str) -> None:
        try:
            entry = await self.session.get(LinkEntry, code)
            if entry is None:
                return
            await self.session.delete(entry)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError(f"failed to delete '{code}'", original_error=e)

    async def put(self, code: str, record: LinkRecord) -> None:
        value = record.model_dump_json(by_alias=True, exclude={"code"})
        try:
            entry = await self.session.get(LinkEntry, code)
            if entry is None:
                self.session.add(LinkEntry(code=code, value=value))
            else:
                entry.value = value
                entry.updated_at = datetime.now(timezone.utc)
                self.session.add(entry)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError(f"failed to write '{code}'", original_error=e)
