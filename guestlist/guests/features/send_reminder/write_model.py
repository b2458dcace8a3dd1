"""Reminder write model.

Each reminder is recorded as an outbound communication before it is handed to
the notification service, then marked sent or failed. A failed delivery is
recorded, never raised.
"""

import logging
from abc import ABC, abstractmethod
from functools import partial
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from guestlist.config.database import async_session_manager
from guestlist.errors import NotFoundError
from guestlist.guests.dtos import (
    CommunicationDirection,
    CommunicationLogEntryDTO,
    CommunicationStatus,
    GuestStatus,
)
from guestlist.guests.repository.orm_models import CommunicationLogEntry, Guest
from guestlist.models.base import utcnow
from guestlist.notifications.base import NotificationServiceBase

logger = logging.getLogger(__name__)

REMINDER_TYPE = "reminder"


class ReminderWriteModel(ABC):
    @abstractmethod
    async def send_reminder(self, guest_id: UUID) -> CommunicationLogEntryDTO:
        raise NotImplementedError

    @abstractmethod
    async def send_pending_reminders(self) -> int:
        """Remind every active guest who has not responded. Returns how many were reminded."""
        raise NotImplementedError


class SqlReminderWriteModel(ReminderWriteModel):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        notification_service: NotificationServiceBase,
        session_overwrite: AsyncSession | None = None,
    ) -> None:
        self.notification_service = notification_service
        self.session_overwrite = session_overwrite

    async def send_reminder(self, guest_id: UUID) -> CommunicationLogEntryDTO:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            guest = await session.get(Guest, guest_id, populate_existing=True)
            if guest is None:
                raise NotFoundError("Guest", guest_id)
            entry = CommunicationLogEntry(
                guest_id=guest.uuid,
                direction=CommunicationDirection.OUTBOUND,
                communication_type=REMINDER_TYPE,
                subject="RSVP reminder",
                content=f"Reminder sent to {guest.email}",
                status=CommunicationStatus.PENDING,
            )
            session.add(entry)
            await session.flush()
            entry_id = entry.uuid
            to_address, guest_name, rsvp_deadline = guest.email, guest.name, guest.rsvp_deadline

        error_message = None
        try:
            await self.notification_service.send_reminder(
                to_address=to_address,
                guest_name=guest_name,
                rsvp_deadline=rsvp_deadline,
                guest_id=guest_id,
            )
        except Exception as e:
            logger.exception("Failed to send reminder to guest %s", guest_id)
            error_message = str(e) or e.__class__.__name__

        status = CommunicationStatus.FAILED if error_message else CommunicationStatus.SENT
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            await session.execute(
                update(CommunicationLogEntry)
                .where(CommunicationLogEntry.uuid == entry_id)
                .values(status=status, error_message=error_message, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            result = await session.execute(
                select(CommunicationLogEntry)
                .where(CommunicationLogEntry.uuid == entry_id)
                .execution_options(populate_existing=True)
            )
            dto = CommunicationLogEntryDTO.from_entry(result.scalar_one())

        logger.info("Reminder for guest %s %s", guest_id, status.value)
        return dto

    async def send_pending_reminders(self) -> int:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                select(Guest.uuid)
                .where(Guest.rsvp_status == GuestStatus.PENDING, Guest.is_archived.is_(False))
                .order_by(Guest.created_at)
            )
            guest_ids = list(result.scalars().all())

        for guest_id in guest_ids:
            await self.send_reminder(guest_id)

        logger.info("Sent %d pending reminders", len(guest_ids))
        return len(guest_ids)
