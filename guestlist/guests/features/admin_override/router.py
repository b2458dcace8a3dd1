from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from guestlist.guests.dtos import GuestStatus
from guestlist.guests.repository.write_models import RSVPWriteModel, SqlRSVPWriteModel
from guestlist.guests.schemas import TransitionResponse
from guestlist.guests.urls import OVERRIDE_STATUS_URL
from guestlist.notifications import get_notification_service

router = APIRouter()


class OverrideStatusRequest(BaseModel):
    rsvp_status: GuestStatus
    reason: str | None = None


def get_override_write_model(notify: bool = False) -> RSVPWriteModel:
    """Dependency to get RSVP write model instance. Guests are only notified on request."""
    return SqlRSVPWriteModel(notification_service=get_notification_service() if notify else None)


@router.put(OVERRIDE_STATUS_URL, response_model=TransitionResponse)
async def override_status(
    guest_id: UUID,
    request: OverrideStatusRequest,
    write_model: RSVPWriteModel = Depends(get_override_write_model),
) -> TransitionResponse:
    """Set a guest's RSVP status on their behalf. Archival is left untouched."""
    transition = await write_model.admin_override_status(
        guest_id=guest_id,
        new_status=request.rsvp_status,
        reason=request.reason,
    )
    return TransitionResponse.from_dto(transition)
