"""Manual archival (soft deletion), independent of RSVP status."""

import logging
from abc import ABC, abstractmethod
from functools import partial
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from guestlist.config.database import async_session_manager
from guestlist.guests.dtos import GuestDTO
from guestlist.guests.repository.orm_models import Guest
from guestlist.guests.repository.write_models import get_guest_for_update
from guestlist.models.base import utcnow

logger = logging.getLogger(__name__)


class ArchiveWriteModel(ABC):
    @abstractmethod
    async def archive(self, guest_id: UUID, reason: str | None = None) -> GuestDTO:
        raise NotImplementedError

    @abstractmethod
    async def restore(self, guest_id: UUID) -> GuestDTO:
        raise NotImplementedError

    @abstractmethod
    async def bulk_archive(self, guest_ids: list[UUID], reason: str | None = None) -> int:
        """Archive several guests at once. Returns how many guests changed."""
        raise NotImplementedError


class SqlArchiveWriteModel(ArchiveWriteModel):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def archive(self, guest_id: UUID, reason: str | None = None) -> GuestDTO:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            guest = await get_guest_for_update(session, guest_id)
            if not guest.is_archived:
                guest.is_archived = True
                guest.archived_at = utcnow()
            guest.archive_reason = reason
            await session.flush()
            dto = GuestDTO.from_guest(guest)

        logger.info("Archived guest %s", guest_id)
        return dto

    async def restore(self, guest_id: UUID) -> GuestDTO:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            guest = await get_guest_for_update(session, guest_id)
            guest.is_archived = False
            guest.archived_at = None
            guest.archive_reason = None
            await session.flush()
            dto = GuestDTO.from_guest(guest)

        logger.info("Restored guest %s", guest_id)
        return dto

    async def bulk_archive(self, guest_ids: list[UUID], reason: str | None = None) -> int:
        if not guest_ids:
            return 0
        now = utcnow()
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                update(Guest)
                .where(Guest.uuid.in_(set(guest_ids)), Guest.is_archived.is_(False))
                .values(is_archived=True, archived_at=now, archive_reason=reason, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            archived = result.rowcount

        logger.info("Bulk archived %d of %d guests", archived, len(guest_ids))
        return archived
