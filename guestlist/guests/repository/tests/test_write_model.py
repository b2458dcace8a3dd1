"""Tests for SqlRSVPWriteModel, the RSVP state machine."""

import json
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from guestlist.config.database import async_session_maker
from guestlist.errors import NotFoundError, ValidationFailedError
from guestlist.guests.dtos import (
    AdditionalGuestDTO,
    ChangeMethod,
    CommunicationDirection,
    CommunicationStatus,
    ContactUpdateDTO,
    GuestStatus,
    RSVPPayloadDTO,
)
from guestlist.guests.features.create_guest.write_model import SqlGuestCreateWriteModel
from guestlist.guests.repository.orm_models import CommunicationLogEntry, Guest, RSVPHistoryEntry
from guestlist.guests.repository.read_models import SqlGuestReadModel
from guestlist.guests.repository.write_models import DECLINE_ARCHIVE_REASON, SqlRSVPWriteModel
from guestlist.notifications.base import NotificationServiceBase

pytestmark = pytest.mark.usefixtures("clean_db")


class RecordingNotificationService(NotificationServiceBase):
    def __init__(self):
        self.confirmations: list[dict] = []
        self.reminders: list[dict] = []

    async def send_rsvp_confirmation(self, **kwargs) -> None:
        self.confirmations.append(kwargs)

    async def send_reminder(self, **kwargs) -> None:
        self.reminders.append(kwargs)


class FailingNotificationService(NotificationServiceBase):
    async def send_rsvp_confirmation(self, **kwargs) -> None:
        raise ConnectionError("mail server down")

    async def send_reminder(self, **kwargs) -> None:
        raise ConnectionError("mail server down")


async def _create_guest(db_session, name="Jane Doe", email="jane@example.com"):
    return await SqlGuestCreateWriteModel(session_overwrite=db_session).create_guest(
        name=name, email=email
    )


async def test_confirm_with_plus_one_and_additional_guests():
    async with async_session_maker() as db_session:
        guest = await _create_guest(db_session)
        write_model = SqlRSVPWriteModel(session_overwrite=db_session)

        result = await write_model.submit_response(
            guest.id,
            GuestStatus.CONFIRMED,
            RSVPPayloadDTO(
                plus_one_name="Alex",
                dietary_needs=["vegetarian"],
                additional_guests=[
                    AdditionalGuestDTO(name="Sam", email="sam@example.com", relationship="brother"),
                    AdditionalGuestDTO(name="Kim", email="kim@example.com", relationship="friend"),
                ],
            ),
        )

        assert result.guest.rsvp_status == GuestStatus.CONFIRMED
        assert result.guest.rsvp_responded_at is not None
        assert result.guest.plus_one_name == "Alex"
        assert result.history_entry.old_status == GuestStatus.PENDING
        assert result.history_entry.new_status == GuestStatus.CONFIRMED
        assert result.history_entry.change_method == ChangeMethod.GUEST_FORM
        assert result.added_guests == 2
        assert result.archived is False

        history_count = await db_session.scalar(
            select(func.count()).select_from(RSVPHistoryEntry).where(
                RSVPHistoryEntry.guest_id == guest.id
            )
        )
        assert history_count == 1

        added = (
            await db_session.execute(select(Guest).where(Guest.uuid.in_(result.added_guest_ids)))
        ).scalars().all()
        assert len(added) == 2
        for added_guest in added:
            assert added_guest.rsvp_status == GuestStatus.CONFIRMED
            assert added_guest.rsvp_responded_at is not None
            assert added_guest.contact_details["added_by_guest_id"] == str(guest.id)
        assert {g.contact_details["relationship"] for g in added} == {"brother", "friend"}
        await db_session.rollback()


async def test_confirm_writes_received_communication():
    async with async_session_maker() as db_session:
        guest = await _create_guest(db_session)

        result = await SqlRSVPWriteModel(session_overwrite=db_session).submit_response(
            guest.id,
            GuestStatus.CONFIRMED,
            RSVPPayloadDTO(allergies=["peanuts"]),
        )

        assert result.communication is not None
        assert result.communication.direction == CommunicationDirection.INBOUND
        assert result.communication.status == CommunicationStatus.RECEIVED
        assert result.communication.subject == "RSVP Confirmation Received"
        content = json.loads(result.communication.content)
        assert content["status"] == "confirmed"
        assert content["allergies"] == ["peanuts"]
        assert content["added_guests"] == 0
        await db_session.rollback()


async def test_decline_archives_guest_and_logs_communication():
    async with async_session_maker() as db_session:
        guest = await _create_guest(db_session)

        result = await SqlRSVPWriteModel(session_overwrite=db_session).submit_response(
            guest.id, GuestStatus.DECLINED, RSVPPayloadDTO()
        )

        assert result.archived is True
        assert result.guest.is_archived is True
        assert result.guest.archived_at is not None
        assert result.guest.archive_reason == DECLINE_ARCHIVE_REASON
        assert result.guest.rsvp_responded_at is not None

        communications = (
            await db_session.execute(
                select(CommunicationLogEntry).where(CommunicationLogEntry.guest_id == guest.id)
            )
        ).scalars().all()
        assert len(communications) == 1
        assert communications[0].subject == "RSVP Decline Received"
        await db_session.rollback()


async def test_confirm_after_decline_restores_guest():
    async with async_session_maker() as db_session:
        guest = await _create_guest(db_session)
        write_model = SqlRSVPWriteModel(session_overwrite=db_session)

        await write_model.submit_response(guest.id, GuestStatus.DECLINED, RSVPPayloadDTO())
        result = await write_model.submit_response(guest.id, GuestStatus.CONFIRMED, RSVPPayloadDTO())

        assert result.history_entry.old_status == GuestStatus.DECLINED
        assert result.guest.is_archived is False
        assert result.guest.archived_at is None
        assert result.guest.archive_reason is None
        await db_session.rollback()


async def test_resubmission_overwrites_previous_response():
    async with async_session_maker() as db_session:
        guest = await _create_guest(db_session)
        write_model = SqlRSVPWriteModel(session_overwrite=db_session)

        await write_model.submit_response(
            guest.id,
            GuestStatus.CONFIRMED,
            RSVPPayloadDTO(plus_one_name="Alex", dietary_needs=["vegan"], special_requests="Window"),
        )
        result = await write_model.submit_response(
            guest.id,
            GuestStatus.CONFIRMED,
            RSVPPayloadDTO(dietary_needs=["gluten free", "gluten free "]),
        )

        assert result.guest.plus_one_name is None
        assert result.guest.special_requests is None
        assert result.guest.dietary_needs == ("gluten free",)
        assert result.history_entry.old_status == GuestStatus.CONFIRMED
        await db_session.rollback()


async def test_contact_updates_are_merged():
    async with async_session_maker() as db_session:
        guest = await _create_guest(db_session)
        write_model = SqlRSVPWriteModel(session_overwrite=db_session)

        await write_model.submit_response(
            guest.id,
            GuestStatus.CONFIRMED,
            RSVPPayloadDTO(
                contact_updates=ContactUpdateDTO(phone="  +31 6 1234 5678 ", address="Main St 1")
            ),
        )
        result = await write_model.submit_response(
            guest.id,
            GuestStatus.CONFIRMED,
            RSVPPayloadDTO(contact_updates=ContactUpdateDTO(emergency_contact="Mom")),
        )

        assert result.guest.phone == "+31 6 1234 5678"
        assert result.guest.contact_details.address == "Main St 1"
        assert result.guest.contact_details.emergency_contact == "Mom"
        await db_session.rollback()


async def test_submit_pending_is_rejected():
    async with async_session_maker() as db_session:
        guest = await _create_guest(db_session)

        with pytest.raises(ValidationFailedError):
            await SqlRSVPWriteModel(session_overwrite=db_session).submit_response(
                guest.id, GuestStatus.PENDING, RSVPPayloadDTO()
            )
        await db_session.rollback()


async def test_submit_unknown_guest_raises_not_found():
    async with async_session_maker() as db_session:
        with pytest.raises(NotFoundError):
            await SqlRSVPWriteModel(session_overwrite=db_session).submit_response(
                uuid4(), GuestStatus.CONFIRMED, RSVPPayloadDTO()
            )
        await db_session.rollback()


async def test_malformed_contact_fields_change_nothing():
    async with async_session_maker() as db_session:
        guest = await _create_guest(db_session)
        write_model = SqlRSVPWriteModel(session_overwrite=db_session)

        with pytest.raises(ValidationFailedError) as exc_info:
            await write_model.submit_response(
                guest.id,
                GuestStatus.CONFIRMED,
                RSVPPayloadDTO(
                    plus_one_name="Alex",
                    additional_guests=[AdditionalGuestDTO(name="Sam", email="not-an-email")],
                ),
            )
        assert exc_info.value.field == "additional_guests[0].email"

        with pytest.raises(ValidationFailedError) as exc_info:
            await write_model.submit_response(
                guest.id,
                GuestStatus.CONFIRMED,
                RSVPPayloadDTO(contact_updates=ContactUpdateDTO(phone="call me")),
            )
        assert exc_info.value.field == "contact_updates.phone"

        unchanged = await SqlGuestReadModel(session_overwrite=db_session).get_guest(guest.id)
        assert unchanged.rsvp_status == GuestStatus.PENDING
        assert unchanged.plus_one_name is None
        assert await SqlGuestReadModel(session_overwrite=db_session).get_history(guest.id) == []
        await db_session.rollback()


async def test_admin_override_records_reason_without_archival():
    async with async_session_maker() as db_session:
        guest = await _create_guest(db_session)
        write_model = SqlRSVPWriteModel(session_overwrite=db_session)

        result = await write_model.admin_override_status(
            guest.id, GuestStatus.DECLINED, reason="Called to say they can't come"
        )

        assert result.guest.rsvp_status == GuestStatus.DECLINED
        assert result.guest.is_archived is False
        assert result.history_entry.change_method == ChangeMethod.ADMIN_OVERRIDE
        assert result.history_entry.change_reason == "Called to say they can't come"
        assert result.communication is None
        await db_session.rollback()


async def test_admin_override_to_pending_clears_responded_at():
    async with async_session_maker() as db_session:
        guest = await _create_guest(db_session)
        write_model = SqlRSVPWriteModel(session_overwrite=db_session)

        await write_model.submit_response(guest.id, GuestStatus.CONFIRMED, RSVPPayloadDTO())
        result = await write_model.admin_override_status(guest.id, GuestStatus.PENDING)

        assert result.guest.rsvp_status == GuestStatus.PENDING
        assert result.guest.rsvp_responded_at is None
        await db_session.rollback()


async def test_every_transition_appends_one_history_entry():
    async with async_session_maker() as db_session:
        guest = await _create_guest(db_session)
        write_model = SqlRSVPWriteModel(session_overwrite=db_session)

        await write_model.submit_response(guest.id, GuestStatus.CONFIRMED, RSVPPayloadDTO())
        await write_model.submit_response(guest.id, GuestStatus.DECLINED, RSVPPayloadDTO())
        await write_model.admin_override_status(guest.id, GuestStatus.CONFIRMED, reason="fixed")
        last = await write_model.submit_response(guest.id, GuestStatus.CONFIRMED, RSVPPayloadDTO())

        history = await SqlGuestReadModel(session_overwrite=db_session).get_history(guest.id)
        assert len(history) == 4
        assert [e.new_status for e in history] == [
            GuestStatus.CONFIRMED,
            GuestStatus.DECLINED,
            GuestStatus.CONFIRMED,
            GuestStatus.CONFIRMED,
        ]
        assert history[-1].new_status == last.guest.rsvp_status
        await db_session.rollback()


async def test_confirmation_is_sent_after_transition():
    notifications = RecordingNotificationService()
    async with async_session_maker() as db_session:
        guest = await _create_guest(db_session)

        await SqlRSVPWriteModel(
            session_overwrite=db_session, notification_service=notifications
        ).submit_response(
            guest.id,
            GuestStatus.CONFIRMED,
            RSVPPayloadDTO(additional_guests=[AdditionalGuestDTO(name="Sam", email="sam@example.com")]),
        )
        await db_session.rollback()

    assert len(notifications.confirmations) == 1
    sent = notifications.confirmations[0]
    assert sent["to_address"] == "jane@example.com"
    assert sent["status"] == GuestStatus.CONFIRMED
    assert sent["added_guests"] == 1


async def test_notification_failure_does_not_fail_transition():
    async with async_session_maker() as db_session:
        guest = await _create_guest(db_session)

        result = await SqlRSVPWriteModel(
            session_overwrite=db_session, notification_service=FailingNotificationService()
        ).submit_response(guest.id, GuestStatus.DECLINED, RSVPPayloadDTO())

        assert result.guest.rsvp_status == GuestStatus.DECLINED
        await db_session.rollback()


async def test_transition_is_committed_together():
    guest = await SqlGuestCreateWriteModel().create_guest(name="Jane Doe", email="jane@example.com")

    await SqlRSVPWriteModel().submit_response(
        guest.id,
        GuestStatus.DECLINED,
        RSVPPayloadDTO(additional_guests=[AdditionalGuestDTO(name="Sam", email="sam@example.com")]),
    )

    read_model = SqlGuestReadModel()
    stored = await read_model.get_guest(guest.id)
    assert stored.rsvp_status == GuestStatus.DECLINED
    assert stored.is_archived is True
    assert len(await read_model.get_history(guest.id)) == 1
    assert len(await read_model.get_communications(guest.id)) == 1


class FailingSecondGuestRSVPWriteModel(SqlRSVPWriteModel):
    def __init__(self):
        super().__init__()
        self.calls = 0

    def _add_disclosed_guest(self, session, submitting_guest, additional, now):
        self.calls += 1
        if self.calls == 2:
            raise RuntimeError("disk full")
        return super()._add_disclosed_guest(session, submitting_guest, additional, now)


async def test_failed_submission_leaves_no_trace():
    guest = await SqlGuestCreateWriteModel().create_guest(name="Jane Doe", email="jane@example.com")
    write_model = FailingSecondGuestRSVPWriteModel()

    with pytest.raises(RuntimeError):
        await write_model.submit_response(
            guest.id,
            GuestStatus.DECLINED,
            RSVPPayloadDTO(
                additional_guests=[
                    AdditionalGuestDTO(name="Sam", email="sam@example.com"),
                    AdditionalGuestDTO(name="Alex", email="alex@example.com"),
                ]
            ),
        )

    assert write_model.calls == 2
    read_model = SqlGuestReadModel()
    stored = await read_model.get_guest(guest.id)
    assert stored.rsvp_status == GuestStatus.PENDING
    assert stored.is_archived is False
    assert await read_model.get_history(guest.id) == []
    assert await read_model.get_communications(guest.id) == []
    async with async_session_maker() as session:
        assert await session.scalar(select(func.count()).select_from(Guest)) == 1
