from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr

from guestlist.auth import get_current_account_id
from guestlist.guests.features.create_guest.write_model import (
    GuestCreateWriteModel,
    SqlGuestCreateWriteModel,
)
from guestlist.guests.schemas import GuestResponse
from guestlist.guests.urls import GUESTS_URL, REGISTER_SELF_URL

router = APIRouter()


class CreateGuestRequest(BaseModel):
    name: str
    email: EmailStr
    phone: str | None = None
    rsvp_deadline: datetime | None = None
    linked_account_id: UUID | None = None


class RegisterSelfRequest(BaseModel):
    name: str
    email: EmailStr


def get_guest_create_write_model() -> GuestCreateWriteModel:
    """Dependency to get guest create write model instance."""
    return SqlGuestCreateWriteModel()


@router.post(GUESTS_URL, response_model=GuestResponse, status_code=status.HTTP_201_CREATED)
async def create_guest(
    request: CreateGuestRequest,
    write_model: GuestCreateWriteModel = Depends(get_guest_create_write_model),
) -> GuestResponse:
    """Add an invited guest to the list."""
    guest = await write_model.create_guest(
        name=request.name,
        email=request.email,
        phone=request.phone,
        rsvp_deadline=request.rsvp_deadline,
        linked_account_id=request.linked_account_id,
    )
    return GuestResponse.from_dto(guest)


@router.post(REGISTER_SELF_URL, response_model=GuestResponse)
async def register_self(
    request: RegisterSelfRequest,
    account_id: UUID = Depends(get_current_account_id),
    write_model: GuestCreateWriteModel = Depends(get_guest_create_write_model),
) -> GuestResponse:
    """Get or create the guest record of the calling account."""
    guest = await write_model.register_self(
        account_id=account_id, name=request.name, email=request.email
    )
    return GuestResponse.from_dto(guest)
