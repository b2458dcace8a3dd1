from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from guestlist.guests.features.send_reminder.write_model import (
    ReminderWriteModel,
    SqlReminderWriteModel,
)
from guestlist.guests.schemas import CommunicationResponse
from guestlist.guests.urls import SEND_PENDING_REMINDERS_URL, SEND_REMINDER_URL
from guestlist.notifications import get_notification_service

router = APIRouter()


class PendingRemindersResponse(BaseModel):
    reminded: int


def get_reminder_write_model() -> ReminderWriteModel:
    return SqlReminderWriteModel(notification_service=get_notification_service())


@router.post(SEND_PENDING_REMINDERS_URL, response_model=PendingRemindersResponse)
async def send_pending_reminders(
    write_model: ReminderWriteModel = Depends(get_reminder_write_model),
) -> PendingRemindersResponse:
    """Remind every guest who has not responded yet."""
    reminded = await write_model.send_pending_reminders()
    return PendingRemindersResponse(reminded=reminded)


@router.post(SEND_REMINDER_URL, response_model=CommunicationResponse)
async def send_reminder(
    guest_id: UUID,
    write_model: ReminderWriteModel = Depends(get_reminder_write_model),
) -> CommunicationResponse:
    entry = await write_model.send_reminder(guest_id)
    return CommunicationResponse.from_dto(entry)
