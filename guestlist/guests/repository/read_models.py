import abc
from functools import partial
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from guestlist.config.database import async_session_manager
from guestlist.guests.dtos import (
    CommunicationLogEntryDTO,
    GuestDTO,
    GuestSearchFilter,
    GuestSearchResultDTO,
    RSVPHistoryEntryDTO,
)
from guestlist.guests.repository.orm_models import CommunicationLogEntry, Guest, RSVPHistoryEntry

MAX_PAGE_SIZE = 500


class GuestReadModel(abc.ABC):
    @abc.abstractmethod
    async def get_guest(self, guest_id: UUID) -> GuestDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_guest_by_account(self, account_id: UUID) -> GuestDTO | None:
        """The guest record linked to an authenticated account, if any."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_history(self, guest_id: UUID) -> list[RSVPHistoryEntryDTO]:
        """Status transitions of one guest, oldest first."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_communications(self, guest_id: UUID) -> list[CommunicationLogEntryDTO]:
        raise NotImplementedError

    @abc.abstractmethod
    async def search(self, search_filter: GuestSearchFilter) -> GuestSearchResultDTO:
        """
        Filter guests by free text (name/email), status, linked account and
        archival. Archived guests are left out unless asked for.
        """
        raise NotImplementedError


class SqlGuestReadModel(GuestReadModel):
    """SQL implementation of the guest directory."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def get_guest(self, guest_id: UUID) -> GuestDTO | None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            guest = await session.get(Guest, guest_id, populate_existing=True)
            return GuestDTO.from_guest(guest) if guest else None

    async def get_guest_by_account(self, account_id: UUID) -> GuestDTO | None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                select(Guest)
                .where(Guest.linked_account_id == account_id)
                .execution_options(populate_existing=True)
            )
            guest = result.scalar_one_or_none()
            return GuestDTO.from_guest(guest) if guest else None

    async def get_history(self, guest_id: UUID) -> list[RSVPHistoryEntryDTO]:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                select(RSVPHistoryEntry)
                .where(RSVPHistoryEntry.guest_id == guest_id)
                .order_by(RSVPHistoryEntry.changed_at, RSVPHistoryEntry.uuid)
            )
            return [RSVPHistoryEntryDTO.from_entry(e) for e in result.scalars().all()]

    async def get_communications(self, guest_id: UUID) -> list[CommunicationLogEntryDTO]:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                select(CommunicationLogEntry)
                .where(CommunicationLogEntry.guest_id == guest_id)
                .order_by(CommunicationLogEntry.created_at.desc(), CommunicationLogEntry.uuid)
            )
            return [CommunicationLogEntryDTO.from_entry(e) for e in result.scalars().all()]

    async def search(self, search_filter: GuestSearchFilter) -> GuestSearchResultDTO:
        conditions = []
        if search_filter.text and search_filter.text.strip():
            text = search_filter.text.strip()
            conditions.append(
                or_(
                    Guest.name.icontains(text, autoescape=True),
                    Guest.email.icontains(text, autoescape=True),
                )
            )
        if search_filter.status is not None:
            conditions.append(Guest.rsvp_status == search_filter.status)
        if search_filter.linked_only:
            conditions.append(Guest.linked_account_id.is_not(None))
        if not search_filter.include_archived:
            conditions.append(Guest.is_archived.is_(False))

        limit = max(0, min(search_filter.limit, MAX_PAGE_SIZE))
        offset = max(0, search_filter.offset)

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            total = await session.scalar(
                select(func.count()).select_from(Guest).where(*conditions)
            )
            result = await session.execute(
                select(Guest)
                .where(*conditions)
                .order_by(Guest.created_at.desc(), Guest.uuid)
                .limit(limit)
                .offset(offset)
                .execution_options(populate_existing=True)
            )
            guests = [GuestDTO.from_guest(g) for g in result.scalars().all()]

        return GuestSearchResultDTO(guests=guests, total=total or 0)
