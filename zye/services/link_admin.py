"""
Link Administration Service

Deletion of links by their creator. A link's creator is the client IP
recorded when it was created; only requests from that IP may delete it.
"""

import logging

from zye.core.exceptions import LinkNotFoundError, LinkOwnershipError
from zye.services.link_store import LinkStore

logger = logging.getLogger(__name__)


class LinkAdminService:
    """Service for creator-scoped link management."""

    def __init__(self, store: LinkStore):
        self.store = store

    async def delete_link(self, code: str, requester: str) -> None:
        """
        Delete a link on behalf of its creator.

        Args:
            code: Short code to delete
            requester: Client IP of the caller

        Raises:
            LinkNotFoundError: If the code has no record
            LinkOwnershipError: If the caller did not create the link
            StoreError: If the store fails
        """
        record = await self.store.get(code)
        if record is None:
            raise LinkNotFoundError(code)

        if record.creator != requester:
            raise LinkOwnershipError(code, requester)

        await self.store.delete(code)
        logger.info(f"Link '{code}' deleted by its creator")
