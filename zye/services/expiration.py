"""
Link Expiration

Links may carry an `exp` timestamp written by the creation side in the
service time zone (UTC+8, e.g. "2025-12-31T23:59:59.000+08:00"). Records
are expired lazily: the redirect path checks on read and deletes on expiry.
"""

import logging
from datetime import datetime, tzinfo
from typing import Optional

from zye.api.schemas import LinkRecord
from zye.core.setting import settings

logger = logging.getLogger(__name__)


def service_now(tz: Optional[tzinfo] = None) -> datetime:
    """Current time in the service time zone."""
    return datetime.now(tz or settings.service_timezone)


def parse_expiration(value: str, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Parse an expiration timestamp.

    Timestamps without an offset are read in the service time zone.

    Returns:
        Aware datetime, or None when the value cannot be parsed
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz or settings.service_timezone)
    return parsed


def check_expired(record: LinkRecord, now: Optional[datetime] = None) -> bool:
    """
    Decide whether a link record has lapsed.

    Args:
        record: The stored link record
        now: Reference time; defaults to the current service time

    Returns:
        True only if `exp` is set, parses, and `now` is strictly later.
        Unparsable values never expire the link.
    """
    if not record.exp:
        return False

    expires_at = parse_expiration(record.exp)
    if expires_at is None:
        logger.debug(f"Ignoring unparsable expiration {record.exp!r} on '{record.code}'")
        return False

    if now is None:
        now = service_now()
    elif now.tzinfo is None:
        now = now.replace(tzinfo=settings.service_timezone)

    return now > expires_at
