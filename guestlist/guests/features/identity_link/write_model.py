"""Identity link store: at most one guest per external account."""

import logging
from abc import ABC, abstractmethod
from functools import partial
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from guestlist.config.database import async_session_manager
from guestlist.errors import ConflictError
from guestlist.guests.dtos import GuestDTO
from guestlist.guests.repository.orm_models import Guest
from guestlist.guests.repository.write_models import get_guest_for_update

logger = logging.getLogger(__name__)


class IdentityLinkWriteModel(ABC):
    @abstractmethod
    async def link_to_account(self, guest_id: UUID, account_id: UUID) -> GuestDTO:
        raise NotImplementedError

    @abstractmethod
    async def unlink(self, guest_id: UUID) -> GuestDTO:
        raise NotImplementedError


class SqlIdentityLinkWriteModel(IdentityLinkWriteModel):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def link_to_account(self, guest_id: UUID, account_id: UUID) -> GuestDTO:
        """
        Link a guest to an account. Re-linking the same pair is a no-op;
        an account already linked to another guest is a conflict.
        """
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            guest = await get_guest_for_update(session, guest_id)
            if guest.linked_account_id == account_id:
                return GuestDTO.from_guest(guest)

            result = await session.execute(
                select(Guest.uuid).where(Guest.linked_account_id == account_id)
            )
            other_guest_id = result.scalar_one_or_none()
            if other_guest_id is not None:
                raise ConflictError(
                    f"Account '{account_id}' is already linked to guest '{other_guest_id}'"
                )

            guest.linked_account_id = account_id
            try:
                await session.flush()
            except IntegrityError as e:
                raise ConflictError(f"Account '{account_id}' is already linked") from e
            dto = GuestDTO.from_guest(guest)

        logger.info("Linked guest %s to account %s", guest_id, account_id)
        return dto

    async def unlink(self, guest_id: UUID) -> GuestDTO:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            guest = await get_guest_for_update(session, guest_id)
            guest.linked_account_id = None
            await session.flush()
            dto = GuestDTO.from_guest(guest)

        logger.info("Unlinked guest %s", guest_id)
        return dto
