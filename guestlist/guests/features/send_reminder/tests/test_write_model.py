"""Tests for SqlReminderWriteModel."""

from uuid import uuid4

import pytest

from guestlist.config.database import async_session_maker
from guestlist.errors import NotFoundError
from guestlist.guests.dtos import (
    CommunicationDirection,
    CommunicationStatus,
    GuestStatus,
    RSVPPayloadDTO,
)
from guestlist.guests.features.archive.write_model import SqlArchiveWriteModel
from guestlist.guests.features.create_guest.write_model import SqlGuestCreateWriteModel
from guestlist.guests.features.send_reminder.write_model import (
    REMINDER_TYPE,
    SqlReminderWriteModel,
)
from guestlist.guests.repository.read_models import SqlGuestReadModel
from guestlist.guests.repository.write_models import SqlRSVPWriteModel
from guestlist.notifications.base import NotificationServiceBase

pytestmark = pytest.mark.usefixtures("clean_db")


class RecordingNotificationService(NotificationServiceBase):
    def __init__(self):
        self.reminders: list[dict] = []

    async def send_rsvp_confirmation(self, **kwargs) -> None:
        pass

    async def send_reminder(self, **kwargs) -> None:
        self.reminders.append(kwargs)


class FailingNotificationService(NotificationServiceBase):
    async def send_rsvp_confirmation(self, **kwargs) -> None:
        pass

    async def send_reminder(self, **kwargs) -> None:
        raise ConnectionError("mail server down")


async def test_reminder_is_logged_as_sent():
    service = RecordingNotificationService()
    async with async_session_maker() as db_session:
        guest = await SqlGuestCreateWriteModel(session_overwrite=db_session).create_guest(
            name="Jane", email="jane@example.com"
        )
        entry = await SqlReminderWriteModel(service, session_overwrite=db_session).send_reminder(
            guest.id
        )

        assert entry.status == CommunicationStatus.SENT
        assert entry.direction == CommunicationDirection.OUTBOUND
        assert entry.type == REMINDER_TYPE
        assert entry.error_message is None
        assert service.reminders[0]["to_address"] == "jane@example.com"
        assert service.reminders[0]["guest_id"] == guest.id

        communications = await SqlGuestReadModel(session_overwrite=db_session).get_communications(
            guest.id
        )
        assert [c.id for c in communications] == [entry.id]
        await db_session.rollback()


async def test_failed_delivery_is_recorded_not_raised():
    async with async_session_maker() as db_session:
        guest = await SqlGuestCreateWriteModel(session_overwrite=db_session).create_guest(
            name="Jane", email="jane@example.com"
        )
        entry = await SqlReminderWriteModel(
            FailingNotificationService(), session_overwrite=db_session
        ).send_reminder(guest.id)

        assert entry.status == CommunicationStatus.FAILED
        assert entry.error_message == "mail server down"
        await db_session.rollback()


async def test_reminder_for_unknown_guest():
    async with async_session_maker() as db_session:
        with pytest.raises(NotFoundError):
            await SqlReminderWriteModel(
                RecordingNotificationService(), session_overwrite=db_session
            ).send_reminder(uuid4())
        await db_session.rollback()


async def test_pending_reminders_skip_responded_and_archived_guests():
    service = RecordingNotificationService()
    async with async_session_maker() as db_session:
        create = SqlGuestCreateWriteModel(session_overwrite=db_session)
        pending = await create.create_guest(name="Pending", email="pending@example.com")
        responded = await create.create_guest(name="Responded", email="responded@example.com")
        archived = await create.create_guest(name="Archived", email="archived@example.com")
        await SqlRSVPWriteModel(session_overwrite=db_session).submit_response(
            responded.id, GuestStatus.CONFIRMED, RSVPPayloadDTO()
        )
        await SqlArchiveWriteModel(session_overwrite=db_session).archive(archived.id)

        reminded = await SqlReminderWriteModel(
            service, session_overwrite=db_session
        ).send_pending_reminders()

        assert reminded == 1
        assert [r["guest_id"] for r in service.reminders] == [pending.id]
        await db_session.rollback()
