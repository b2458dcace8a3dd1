"""Write model for creating guests.

Guests enter the list either through an invitation entered by an
administrator or by self-registration from an authenticated account.
Returns DTOs instead of ORM models.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from functools import partial
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from guestlist.config.database import async_session_manager
from guestlist.errors import ConflictError
from guestlist.guests.dtos import GuestDTO, GuestStatus
from guestlist.guests.repository.orm_models import Guest
from guestlist.guests.validation import validate_email, validate_name, validate_phone

logger = logging.getLogger(__name__)


class GuestCreateWriteModel(ABC):
    """Abstract base class for guest creation write operations."""

    @abstractmethod
    async def create_guest(
        self,
        name: str,
        email: str,
        phone: str | None = None,
        rsvp_deadline: datetime | None = None,
        linked_account_id: UUID | None = None,
    ) -> GuestDTO:
        """Create a new pending guest. Returns DTO.

        Args:
            name: The guest's display name
            email: The guest's email address
            phone: Optional phone number
            rsvp_deadline: Optional date by which the guest should respond
            linked_account_id: Optional account to link right away
        """
        raise NotImplementedError

    @abstractmethod
    async def register_self(self, account_id: UUID, name: str, email: str) -> GuestDTO:
        """Return the guest linked to ``account_id``, creating one if there is none."""
        raise NotImplementedError


class SqlGuestCreateWriteModel(GuestCreateWriteModel):
    """SQL implementation of guest creation write operations."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def create_guest(
        self,
        name: str,
        email: str,
        phone: str | None = None,
        rsvp_deadline: datetime | None = None,
        linked_account_id: UUID | None = None,
    ) -> GuestDTO:
        name = validate_name(name)
        email = validate_email(email)
        phone = validate_phone(phone)

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            if linked_account_id is not None:
                existing = await self._get_guest_by_account(session, linked_account_id)
                if existing is not None:
                    raise ConflictError(
                        f"Account '{linked_account_id}' is already linked to guest '{existing.uuid}'"
                    )
            guest = await self._insert_guest(
                session, name, email, phone, rsvp_deadline, linked_account_id
            )
            dto = GuestDTO.from_guest(guest)

        logger.info("Created guest %s", dto.id)
        return dto

    async def register_self(self, account_id: UUID, name: str, email: str) -> GuestDTO:
        name = validate_name(name)
        email = validate_email(email)

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            existing = await self._get_guest_by_account(session, account_id)
            if existing is not None:
                return GuestDTO.from_guest(existing)
            guest = await self._insert_guest(session, name, email, None, None, account_id)
            dto = GuestDTO.from_guest(guest)

        logger.info("Guest %s registered from account %s", dto.id, account_id)
        return dto

    async def _insert_guest(
        self,
        session: AsyncSession,
        name: str,
        email: str,
        phone: str | None,
        rsvp_deadline: datetime | None,
        linked_account_id: UUID | None,
    ) -> Guest:
        guest = Guest(
            name=name,
            email=email,
            phone=phone,
            rsvp_status=GuestStatus.PENDING,
            rsvp_deadline=rsvp_deadline,
            dietary_needs=[],
            allergies=[],
            linked_account_id=linked_account_id,
            is_archived=False,
        )
        session.add(guest)
        try:
            await session.flush()
        except IntegrityError as e:
            # a concurrent caller linked the same account first
            raise ConflictError(f"Account '{linked_account_id}' is already linked") from e
        return guest

    async def _get_guest_by_account(self, session: AsyncSession, account_id: UUID) -> Guest | None:
        result = await session.execute(select(Guest).where(Guest.linked_account_id == account_id))
        return result.scalar_one_or_none()
