from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr

from guestlist.guests.dtos import (
    AdditionalGuestDTO,
    ContactUpdateDTO,
    GuestStatus,
    RSVPPayloadDTO,
)
from guestlist.guests.repository.write_models import RSVPWriteModel, SqlRSVPWriteModel
from guestlist.guests.schemas import TransitionResponse
from guestlist.guests.urls import SUBMIT_RSVP_URL
from guestlist.notifications import get_notification_service

router = APIRouter()


class ContactUpdatesSubmit(BaseModel):
    phone: str | None = None
    address: str | None = None
    emergency_contact: str | None = None


class AdditionalGuestSubmit(BaseModel):
    """A guest the responding guest is bringing along."""

    name: str
    email: EmailStr
    relationship: str | None = None


class RSVPSubmit(BaseModel):
    rsvp_status: GuestStatus
    plus_one_name: str | None = None
    plus_one_email: EmailStr | None = None
    dietary_needs: list[str] = []
    allergies: list[str] = []
    special_requests: str | None = None
    contact_updates: ContactUpdatesSubmit | None = None
    additional_guests: list[AdditionalGuestSubmit] = []

    def to_payload(self) -> RSVPPayloadDTO:
        contact_updates = None
        if self.contact_updates:
            contact_updates = ContactUpdateDTO(
                phone=self.contact_updates.phone,
                address=self.contact_updates.address,
                emergency_contact=self.contact_updates.emergency_contact,
            )
        return RSVPPayloadDTO(
            plus_one_name=self.plus_one_name,
            plus_one_email=self.plus_one_email,
            dietary_needs=self.dietary_needs,
            allergies=self.allergies,
            special_requests=self.special_requests,
            contact_updates=contact_updates,
            additional_guests=[
                AdditionalGuestDTO(name=g.name, email=g.email, relationship=g.relationship)
                for g in self.additional_guests
            ],
        )


def get_rsvp_write_model() -> RSVPWriteModel:
    """Dependency to get RSVP write model instance."""
    return SqlRSVPWriteModel(notification_service=get_notification_service())


@router.post(SUBMIT_RSVP_URL, response_model=TransitionResponse)
async def submit_rsvp(
    guest_id: UUID,
    rsvp_data: RSVPSubmit,
    write_model: RSVPWriteModel = Depends(get_rsvp_write_model),
) -> TransitionResponse:
    """
    Submit a guest's RSVP.
    Declining archives the guest; any additional guests are added as confirmed.
    """
    transition = await write_model.submit_response(
        guest_id=guest_id,
        new_status=rsvp_data.rsvp_status,
        payload=rsvp_data.to_payload(),
    )
    return TransitionResponse.from_dto(transition)
