"""
Database Models for the Link Store

The link store is a key-value store: one row per short code, holding the
link record as a JSON document. Nothing in the service queries inside the
document, so the table stays a plain key -> value mapping that any engine
can serve.

Design Decisions:
- code is the primary key (the only lookup the redirect path performs)
- value is Text, not a JSON column, so SQLite and PostgreSQL behave the same
- updated_at is bookkeeping only, never consulted during resolution
"""

from datetime import datetime, timezone

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import String, DateTime, Text


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LinkEntry(SQLModel, table=True):
    """
    Key-value row for one short link.

    Fields:
    - code: Short code (primary key, up to 20 characters)
    - value: JSON-encoded link record
    - updated_at: Last time the value was written
    """
    __tablename__ = "links"

    code: str = Field(
        sa_column=Column(String(20), primary_key=True),
        max_length=20
    )
    value: str = Field(sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
